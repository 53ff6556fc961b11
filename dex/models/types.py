"""Shared type definitions for ledger accounts and asset identities.

Every account, ledger and pool in the exchange is identified by an
Ethereum-style address. Addresses are normalized to lowercase so that string
ordering matches byte ordering, which is what canonical pair ordering relies on.
"""

from typing import Annotated, Any

from pydantic import BeforeValidator, Field

UINT256_MAX = 2**256 - 1

# The dead address: never controlled by anyone, holds the locked minimum liquidity
ZERO_ADDRESS = "0x" + "00" * 20


def is_valid_address(address: str) -> bool:
    """Check if a string is a valid address (0x + 40 hex chars)."""
    if not isinstance(address, str):
        return False
    if not address.startswith("0x") or len(address) != 42:
        return False
    try:
        int(address, 16)
        return True
    except ValueError:
        return False


def normalize_address(address: str, *, validate: bool = True) -> str:
    """Normalize an address to lowercase with a 0x prefix.

    Args:
        address: Address with or without 0x prefix, any case
        validate: If True (default), raise ValueError for malformed addresses

    Returns:
        Lowercase 0x-prefixed address

    Raises:
        ValueError: If validate=True and the address is malformed
    """
    if not isinstance(address, str):
        raise ValueError(f"Address must be a string, got {type(address).__name__}")
    addr = address.lower()
    if not addr.startswith("0x"):
        addr = "0x" + addr
    if validate and not is_valid_address(addr):
        raise ValueError(f"Invalid address: {address}")
    return addr


def short(address: str) -> str:
    """Last 8 chars of an address, for log context."""
    return address[-8:]


def validate_amount(value: Any) -> int:
    """Validate a token amount: a non-negative int within uint256.

    Raises:
        ValueError: If the value is not an int, is negative or overflows uint256
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Amount must be an int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"Amount cannot be negative: {value}")
    if value > UINT256_MAX:
        raise ValueError(f"Amount overflow: {value} > 2^256-1")
    return value


# Address normalized to lowercase before pattern validation
Address = Annotated[
    str,
    BeforeValidator(lambda v: normalize_address(v) if isinstance(v, str) else v),
    Field(pattern=r"^0x[a-f0-9]{40}$"),
]

# Token amount as a plain int (events carry exact integers, not strings)
Amount = Annotated[
    int,
    BeforeValidator(validate_amount),
    Field(description="Non-negative integer token amount"),
]
