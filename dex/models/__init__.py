"""Pydantic models and address types for the exchange."""

from dex.models.events import Burn, Event, Mint, PairCreated, Swap, Sync
from dex.models.types import (
    ZERO_ADDRESS,
    Address,
    Amount,
    is_valid_address,
    normalize_address,
)

__all__ = [
    # Types
    "Address",
    "Amount",
    "ZERO_ADDRESS",
    "is_valid_address",
    "normalize_address",
    # Events
    "Event",
    "PairCreated",
    "Mint",
    "Burn",
    "Swap",
    "Sync",
]
