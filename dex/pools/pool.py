"""Constant product pool: reserves, liquidity shares and swaps.

A Pool owns the reserve accounting for one canonically ordered asset pair.
Tokens live on the asset ledgers under the pool's address; the reserves are
the pool's own record of how much of that balance is priced liquidity.

Every mutating method is one indivisible transition: it validates all
preconditions, then applies reserve, share and ledger changes inside a
transaction, so a failure leaves nothing half-applied.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

import structlog

from dex.amm.constant_product import constant_product
from dex.config import DEFAULT_POOL_CONFIG, Clock, PoolConfig, wall_clock
from dex.constants import PROTOCOL_FEE_DENOMINATOR, Q112
from dex.errors import (
    InsufficientInputAmount,
    InsufficientLiquidity,
    InsufficientLiquidityBurned,
    InsufficientLiquidityMinted,
    InsufficientOutputAmount,
    InsufficientShares,
    InvalidAsset,
    InvariantViolation,
    ReserveOverflow,
    TransferFailed,
    ZeroAddress,
)
from dex.events import EventLog
from dex.ledger.base import TokenLedger
from dex.models.events import Burn, Mint, Swap, Sync
from dex.models.types import ZERO_ADDRESS, normalize_address, short, validate_amount
from dex.safe_int import S
from dex.transaction import UndoLog, atomic

logger = structlog.get_logger()


@dataclass(frozen=True)
class LiquidityPosition:
    """An owner's shares and their floor-rounded claim on each reserve."""

    owner: str
    shares: int
    total_shares: int
    amount0: int
    amount1: int

    @property
    def share_of_pool(self) -> float:
        """Fraction of the pool owned (display only)."""
        if self.total_shares == 0:
            return 0.0
        return self.shares / self.total_shares


class Pool:
    """Two-asset constant product pool.

    Args:
        address: Content-addressed pool identity (its ledger account)
        ledger0: Ledger of asset0 (the lower address)
        ledger1: Ledger of asset1
        events: Event log shared with the registry
        config: Fee and locked-liquidity policy
        clock: Time source for oracle bookkeeping
        fee_to: Returns the protocol-fee recipient, or None when the fee is off
    """

    def __init__(
        self,
        address: str,
        ledger0: TokenLedger,
        ledger1: TokenLedger,
        events: EventLog | None = None,
        config: PoolConfig = DEFAULT_POOL_CONFIG,
        clock: Clock = wall_clock,
        fee_to: Callable[[], str | None] = lambda: None,
    ) -> None:
        asset0 = normalize_address(ledger0.address)
        asset1 = normalize_address(ledger1.address)
        if not asset0 < asset1:
            raise ValueError(f"Pool assets must be canonically ordered: {asset0} >= {asset1}")

        self.address = normalize_address(address)
        self.asset0 = asset0
        self.asset1 = asset1
        self.config = config
        self._ledger0 = ledger0
        self._ledger1 = ledger1
        self._events = events if events is not None else EventLog()
        self._clock = clock
        self._fee_to = fee_to

        self._reserve0 = 0
        self._reserve1 = 0
        self._total_shares = 0
        self._share_balances: dict[str, int] = {}
        self._journal = UndoLog()
        self._last_synced_at = 0
        self._price0_cumulative_last = 0
        self._price1_cumulative_last = 0
        self._k_last = 0

    def __repr__(self) -> str:
        return (
            f"Pool({short(self.address)}, {short(self.asset0)}/{short(self.asset1)}, "
            f"reserves={self._reserve0}/{self._reserve1}, shares={self._total_shares})"
        )

    # --- Read-only views ---

    @property
    def reserve0(self) -> int:
        return self._reserve0

    @property
    def reserve1(self) -> int:
        return self._reserve1

    @property
    def total_shares(self) -> int:
        return self._total_shares

    @property
    def share_balances(self) -> dict[str, int]:
        """Copy of the owner -> shares mapping."""
        return dict(self._share_balances)

    @property
    def last_synced_at(self) -> int:
        return self._last_synced_at

    @property
    def price0_cumulative_last(self) -> int:
        """Time-weighted sum of reserve1/reserve0 as UQ112x112."""
        return self._price0_cumulative_last

    @property
    def price1_cumulative_last(self) -> int:
        """Time-weighted sum of reserve0/reserve1 as UQ112x112."""
        return self._price1_cumulative_last

    @property
    def k_last(self) -> int:
        return self._k_last

    @property
    def is_empty(self) -> bool:
        return self._total_shares == 0

    def get_reserves(self) -> tuple[int, int, int]:
        """(reserve0, reserve1, last_synced_at)."""
        return self._reserve0, self._reserve1, self._last_synced_at

    def share_balance(self, owner: str) -> int:
        return self._share_balances.get(normalize_address(owner), 0)

    def position(self, owner: str) -> LiquidityPosition:
        owner = normalize_address(owner)
        shares = self._share_balances.get(owner, 0)
        total = self._total_shares
        if total == 0:
            return LiquidityPosition(owner, 0, 0, 0, 0)
        return LiquidityPosition(
            owner=owner,
            shares=shares,
            total_shares=total,
            amount0=self._reserve0 * shares // total,
            amount1=self._reserve1 * shares // total,
        )

    def asset_for(self, asset: str) -> str:
        """Normalized asset identity, checked against the pool.

        Raises:
            InvalidAsset: If the asset is not one of the pool's two assets
        """
        asset = normalize_address(asset)
        if asset != self.asset0 and asset != self.asset1:
            raise InvalidAsset(f"Asset {asset} is not in pool {self.address}")
        return asset

    def counter_asset(self, asset: str) -> str:
        return self.asset1 if self.asset_for(asset) == self.asset0 else self.asset0

    def reserves_for(self, asset_in: str) -> tuple[int, int]:
        """(reserve_in, reserve_out) for a swap that sells asset_in."""
        if self.asset_for(asset_in) == self.asset0:
            return self._reserve0, self._reserve1
        return self._reserve1, self._reserve0

    def ledger_for(self, asset: str) -> TokenLedger:
        return self._ledger0 if self.asset_for(asset) == self.asset0 else self._ledger1

    # --- Liquidity ---

    def mint(self, amount0: int, amount1: int, recipient: str, sender: str | None = None) -> int:
        """Issue shares for a deposit that has already reached the pool's ledger account.

        The first deposit issues isqrt(amount0 * amount1) shares, less the
        locked minimum booked to the dead address. Later deposits issue the
        smaller of the two pro-rata amounts; excess on the skewed side stays in
        the pool for existing holders.

        Args:
            amount0: Deposited amount of asset0
            amount1: Deposited amount of asset1
            recipient: Owner of the new shares
            sender: Account reported in the Mint event (defaults to recipient)

        Returns:
            Number of shares issued

        Raises:
            InsufficientInputAmount: If the pool's ledger balances do not cover the deposit
            InsufficientLiquidityMinted: If the deposit is worth zero shares
        """
        validate_amount(amount0)
        validate_amount(amount1)
        recipient = normalize_address(recipient)
        sender = normalize_address(sender) if sender is not None else recipient
        if recipient == ZERO_ADDRESS:
            raise ZeroAddress("DEX: MINT_TO_ZERO_ADDRESS")

        reserve0, reserve1 = self._reserve0, self._reserve1
        self._require_received(self._ledger0, reserve0 + amount0)
        self._require_received(self._ledger1, reserve1 + amount1)

        with atomic("pool.mint", self, self._events):
            fee_on = self._mint_fee(reserve0, reserve1)
            total = S(self._total_shares)

            if total == 0:
                root = S(amount0 * amount1).isqrt()
                minimum = self.config.minimum_liquidity
                if root <= minimum:
                    raise InsufficientLiquidityMinted(
                        f"DEX: INSUFFICIENT_LIQUIDITY_MINTED (isqrt={root.value}, locked={minimum})"
                    )
                shares = (root - minimum).value
                if minimum > 0:
                    self._credit(ZERO_ADDRESS, minimum)
            else:
                shares = (
                    (S(amount0) * total // S(reserve0)).min(S(amount1) * total // S(reserve1)).value
                )
            if shares <= 0:
                raise InsufficientLiquidityMinted()

            self._credit(recipient, shares)
            self._update(reserve0 + amount0, reserve1 + amount1)
            if fee_on:
                self._k_last = self._reserve0 * self._reserve1

            self._events.emit(
                Mint(
                    pool=self.address,
                    sender=sender,
                    amount0=amount0,
                    amount1=amount1,
                    shares=shares,
                )
            )
        return shares

    def burn(
        self,
        shares: int,
        recipient: str,
        to: str | None = None,
    ) -> tuple[int, int]:
        """Burn recipient's shares and pay out the pro-rata reserves.

        Args:
            shares: Shares to burn
            recipient: Owner of the shares
            to: Account receiving the underlying tokens (defaults to recipient)

        Returns:
            (amount0, amount1) paid out, floor-rounded

        Raises:
            InsufficientShares: If shares is zero or exceeds the owner's balance
            InsufficientLiquidityBurned: If either payout rounds to zero
        """
        validate_amount(shares)
        owner = normalize_address(recipient)
        to = normalize_address(to) if to is not None else owner
        held = self._share_balances.get(owner, 0)
        if shares == 0 or owner == ZERO_ADDRESS or shares > held:
            raise InsufficientShares(
                f"DEX: INSUFFICIENT_SHARES ({short(owner)} holds {held}, burning {shares})"
            )

        reserve0, reserve1 = self._reserve0, self._reserve1
        with atomic("pool.burn", self, self._events, self._ledger0, self._ledger1):
            fee_on = self._mint_fee(reserve0, reserve1)
            total = S(self._total_shares)
            amount0 = (S(reserve0) * S(shares) // total).value
            amount1 = (S(reserve1) * S(shares) // total).value
            if amount0 == 0 or amount1 == 0:
                raise InsufficientLiquidityBurned(
                    f"DEX: INSUFFICIENT_LIQUIDITY_BURNED ({amount0}, {amount1})"
                )

            self._debit(owner, shares)
            self._update((S(reserve0) - amount0).value, (S(reserve1) - amount1).value)
            self._pay(self._ledger0, to, amount0)
            self._pay(self._ledger1, to, amount1)
            if fee_on:
                self._k_last = self._reserve0 * self._reserve1

            self._events.emit(
                Burn(
                    pool=self.address,
                    sender=owner,
                    amount0=amount0,
                    amount1=amount1,
                    shares=shares,
                    to=to,
                )
            )
        return amount0, amount1

    def transfer_shares(self, sender: str, to: str, shares: int) -> None:
        """Move liquidity shares between owners.

        Raises:
            InsufficientShares: If sender holds fewer shares (the locked minimum never moves)
            ZeroAddress: If to is the dead address
        """
        validate_amount(shares)
        sender = normalize_address(sender)
        to = normalize_address(to)
        if to == ZERO_ADDRESS:
            raise ZeroAddress("DEX: TRANSFER_TO_ZERO_ADDRESS")
        held = self._share_balances.get(sender, 0)
        if sender == ZERO_ADDRESS or shares > held:
            raise InsufficientShares(
                f"DEX: INSUFFICIENT_SHARES ({short(sender)} holds {held}, moving {shares})"
            )
        if shares == 0:
            return
        self._debit(sender, shares)
        self._credit(to, shares)
        logger.debug(
            "shares_transferred",
            pool=short(self.address),
            sender=short(sender),
            to=short(to),
            shares=shares,
        )

    # --- Swaps ---

    def swap(
        self,
        amount_in: int,
        asset_in: str,
        min_amount_out: int = 0,
        sender: str | None = None,
        to: str | None = None,
    ) -> int:
        """Exchange amount_in of asset_in (already sent to the pool) for the counter asset.

        Args:
            amount_in: Input amount; must already sit on the pool's ledger account
            asset_in: Asset being sold (asset0 or asset1)
            min_amount_out: Smallest acceptable output
            sender: Account reported in the Swap event (defaults to to)
            to: Receiver of the output (defaults to sender); a next-hop pool in routes

        Returns:
            Output amount sent to `to`

        Raises:
            InvalidAsset: If asset_in is not in the pool, or `to` is one of the pool assets
            InsufficientInputAmount: If amount_in is zero or has not arrived
            InsufficientLiquidity: If the pool has no reserves
            InsufficientOutputAmount: If the output is zero or below min_amount_out
            InvariantViolation: If the reserve product would decrease
        """
        validate_amount(amount_in)
        validate_amount(min_amount_out)
        if sender is None and to is None:
            raise ValueError("swap needs a sender or a recipient")
        sender = normalize_address(sender if sender is not None else to)  # type: ignore[arg-type]
        to = normalize_address(to) if to is not None else sender
        asset_in = self.asset_for(asset_in)
        asset_out = self.counter_asset(asset_in)
        if to in (self.asset0, self.asset1):
            raise InvalidAsset("DEX: INVALID_TO")
        if amount_in == 0:
            raise InsufficientInputAmount()

        reserve_in, reserve_out = self.reserves_for(asset_in)
        if reserve_in == 0 or reserve_out == 0:
            raise InsufficientLiquidity()
        ledger_in = self.ledger_for(asset_in)
        ledger_out = self.ledger_for(asset_out)
        self._require_received(ledger_in, reserve_in + amount_in)

        amount_out = constant_product.get_amount_out(
            amount_in, reserve_in, reserve_out, self.config.fee_multiplier
        )
        if amount_out == 0 or amount_out < min_amount_out:
            raise InsufficientOutputAmount(
                f"DEX: INSUFFICIENT_OUTPUT_AMOUNT (out={amount_out}, min={min_amount_out})"
            )
        if amount_out >= reserve_out:
            raise InsufficientLiquidity()

        new_reserve_in = reserve_in + amount_in
        new_reserve_out = (S(reserve_out) - amount_out).value
        if new_reserve_in * new_reserve_out < reserve_in * reserve_out:
            raise InvariantViolation(
                f"DEX: K ({new_reserve_in} * {new_reserve_out} < {reserve_in} * {reserve_out})"
            )

        with atomic("pool.swap", self, self._events, ledger_out):
            if asset_in == self.asset0:
                self._update(new_reserve_in, new_reserve_out)
            else:
                self._update(new_reserve_out, new_reserve_in)
            self._pay(ledger_out, to, amount_out)
            self._events.emit(
                Swap(
                    pool=self.address,
                    sender=sender,
                    amount_in=amount_in,
                    asset_in=asset_in,
                    amount_out=amount_out,
                    to=to,
                )
            )
        return amount_out

    # --- Balance reconciliation ---

    def sync(self) -> None:
        """Force reserves to match the pool's ledger balances.

        Raises:
            InsufficientLiquidity: If the pool has never been seeded
        """
        if self._total_shares == 0:
            raise InsufficientLiquidity("DEX: SYNC_EMPTY_POOL")
        with atomic("pool.sync", self, self._events):
            self._update(
                self._ledger0.balance_of(self.address),
                self._ledger1.balance_of(self.address),
            )

    def skim(self, to: str) -> tuple[int, int]:
        """Send ledger balance in excess of the reserves to `to`."""
        to = normalize_address(to)
        excess0 = self._ledger0.balance_of(self.address) - self._reserve0
        excess1 = self._ledger1.balance_of(self.address) - self._reserve1
        excess0, excess1 = max(excess0, 0), max(excess1, 0)
        with atomic("pool.skim", self._ledger0, self._ledger1):
            if excess0:
                self._pay(self._ledger0, to, excess0)
            if excess1:
                self._pay(self._ledger1, to, excess1)
        logger.debug("pool_skimmed", pool=short(self.address), amount0=excess0, amount1=excess1)
        return excess0, excess1

    # --- Journal ---

    def snapshot(self) -> tuple[int, int, int, int, int, int, int, int]:
        return (
            self._journal.snapshot(),
            self._reserve0,
            self._reserve1,
            self._total_shares,
            self._last_synced_at,
            self._price0_cumulative_last,
            self._price1_cumulative_last,
            self._k_last,
        )

    def restore(self, state: tuple[int, int, int, int, int, int, int, int]) -> None:
        (
            mark,
            self._reserve0,
            self._reserve1,
            self._total_shares,
            self._last_synced_at,
            self._price0_cumulative_last,
            self._price1_cumulative_last,
            self._k_last,
        ) = state
        self._journal.restore(mark)

    def release(self, state: tuple[int, int, int, int, int, int, int, int]) -> None:
        self._journal.release(state[0])

    # --- Internals ---

    def _require_received(self, ledger: TokenLedger, expected: int) -> None:
        balance = ledger.balance_of(self.address)
        if balance < expected:
            raise InsufficientInputAmount(
                f"DEX: INSUFFICIENT_INPUT_AMOUNT (pool holds {balance}, needs {expected})"
            )

    def _pay(self, ledger: TokenLedger, to: str, amount: int) -> None:
        if not ledger.transfer(self.address, to, amount):
            raise TransferFailed(f"DEX: TRANSFER_FAILED ({short(ledger.address)} -> {short(to)})")

    def _credit(self, owner: str, shares: int) -> None:
        self._journal.record(self._share_balances, owner)
        self._share_balances[owner] = self._share_balances.get(owner, 0) + shares
        self._total_shares += shares

    def _debit(self, owner: str, shares: int) -> None:
        remaining = (S(self._share_balances.get(owner, 0)) - shares).value
        self._journal.record(self._share_balances, owner)
        if remaining:
            self._share_balances[owner] = remaining
        else:
            self._share_balances.pop(owner, None)
        self._total_shares = (S(self._total_shares) - shares).value

    def _update(self, balance0: int, balance1: int) -> None:
        """Write new reserves, advance the price accumulators and emit Sync."""
        limit = 1 << self.config.reserve_bits
        if balance0 >= limit or balance1 >= limit:
            raise ReserveOverflow(f"DEX: OVERFLOW ({balance0}, {balance1})")

        now = self._clock()
        elapsed = now - self._last_synced_at
        if elapsed > 0 and self._reserve0 != 0 and self._reserve1 != 0:
            self._price0_cumulative_last += (self._reserve1 * Q112 // self._reserve0) * elapsed
            self._price1_cumulative_last += (self._reserve0 * Q112 // self._reserve1) * elapsed

        self._reserve0 = balance0
        self._reserve1 = balance1
        self._last_synced_at = max(self._last_synced_at, now)
        self._events.emit(Sync(pool=self.address, reserve0=balance0, reserve1=balance1))

    def _mint_fee(self, reserve0: int, reserve1: int) -> bool:
        """Book the protocol fee as shares for fee_to: 1/6 of sqrt(k) growth."""
        fee_to = self._fee_to()
        fee_on = fee_to is not None
        k_last = self._k_last
        if fee_on:
            if k_last != 0:
                root_k = S(reserve0 * reserve1).isqrt()
                root_k_last = S(k_last).isqrt()
                if root_k > root_k_last:
                    numerator = S(self._total_shares) * (root_k - root_k_last)
                    denominator = root_k * PROTOCOL_FEE_DENOMINATOR + root_k_last
                    liquidity = (numerator // denominator).value
                    if liquidity > 0:
                        self._credit(normalize_address(fee_to), liquidity)  # type: ignore[arg-type]
        elif k_last != 0:
            self._k_last = 0
        return fee_on


__all__ = ["Pool", "LiquidityPosition"]
