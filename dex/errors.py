"""Exchange error classes.

Each error maps to the revert reason the on-chain contracts would report.
All of them are pre- or post-condition failures of one atomic operation:
raising one aborts the enclosing call and every state change it made.
"""

from typing import ClassVar


class DexError(Exception):
    """Base error for registry, pool and router operations."""

    code: ClassVar[str] = "DEX: ERROR"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code)


# --- Registry ---


class IdenticalAssets(DexError):
    """Both sides of a pair are the same asset."""

    code = "DEX: IDENTICAL_ADDRESSES"


class ZeroAddress(DexError):
    """An asset identity is the zero address."""

    code = "DEX: ZERO_ADDRESS"


class UnknownAsset(DexError):
    """No ledger is registered for the asset."""

    code = "DEX: UNKNOWN_ASSET"


class PairExists(DexError):
    """Strict creation was requested for an already registered pair."""

    code = "DEX: PAIR_EXISTS"


class PairNotFound(DexError):
    """No pool exists for the requested pair."""

    code = "DEX: PAIR_NOT_FOUND"


# --- Pool ---


class InvalidAsset(DexError):
    """Asset is not one of the pool's two assets."""

    code = "DEX: INVALID_TO"


class InsufficientLiquidityMinted(DexError):
    code = "DEX: INSUFFICIENT_LIQUIDITY_MINTED"


class InsufficientLiquidityBurned(DexError):
    code = "DEX: INSUFFICIENT_LIQUIDITY_BURNED"


class InsufficientShares(DexError):
    """Owner holds fewer shares than requested (or requested zero)."""

    code = "DEX: INSUFFICIENT_SHARES"


class InsufficientInputAmount(DexError):
    """Swap or mint input is zero or has not reached the pool's ledger account."""

    code = "DEX: INSUFFICIENT_INPUT_AMOUNT"


class InsufficientOutputAmount(DexError):
    code = "DEX: INSUFFICIENT_OUTPUT_AMOUNT"


class InsufficientLiquidity(DexError):
    """Pool reserves cannot serve the request."""

    code = "DEX: INSUFFICIENT_LIQUIDITY"


class InvariantViolation(DexError):
    """Post-swap reserve product fell below the pre-swap product."""

    code = "DEX: K"


class ReserveOverflow(DexError):
    """Reserve no longer fits its storage width."""

    code = "DEX: OVERFLOW"


# --- Router ---


class InsufficientAAmount(DexError):
    code = "DEX: INSUFFICIENT_A_AMOUNT"


class InsufficientBAmount(DexError):
    code = "DEX: INSUFFICIENT_B_AMOUNT"


class ExcessiveInputAmount(DexError):
    """Required input exceeds the caller's maximum."""

    code = "DEX: EXCESSIVE_INPUT_AMOUNT"


class InvalidPath(DexError):
    code = "DEX: INVALID_PATH"


class Expired(DexError):
    code = "DEX: EXPIRED"


class TransferFailed(DexError):
    """A ledger reported an unsuccessful transfer."""

    code = "DEX: TRANSFER_FAILED"


# --- Ledger ---


class LedgerError(DexError):
    """Base error for token ledger operations."""

    code = "ERC20: ERROR"


class InsufficientBalance(LedgerError):
    code = "ERC20: transfer amount exceeds balance"


class InsufficientAllowance(LedgerError):
    code = "ERC20: insufficient allowance"
