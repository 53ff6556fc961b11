"""Pydantic models for the events the exchange emits.

These mirror the on-chain events (PairCreated, Mint, Burn, Swap, Sync) that
indexers and price-oracle consumers read. Events are immutable records.
"""

from pydantic import BaseModel, ConfigDict, Field

from dex.models.types import Address, Amount


class Event(BaseModel):
    """Base class for exchange events."""

    model_config = ConfigDict(frozen=True)

    @property
    def name(self) -> str:
        return type(self).__name__


class PairCreated(Event):
    """A registry created a pool for a new canonical pair."""

    asset0: Address
    asset1: Address
    pool: Address = Field(description="Content-addressed pool identity")
    pair_index: int = Field(description="Number of pools after creation")


class Mint(Event):
    """Liquidity was deposited and shares were issued."""

    pool: Address
    sender: Address
    amount0: Amount
    amount1: Amount
    shares: Amount


class Burn(Event):
    """Shares were burned and the underlying reserves paid out."""

    pool: Address
    sender: Address
    amount0: Amount
    amount1: Amount
    shares: Amount
    to: Address


class Swap(Event):
    """One asset was exchanged for the other against the pool reserves."""

    pool: Address
    sender: Address
    amount_in: Amount
    asset_in: Address
    amount_out: Amount
    to: Address


class Sync(Event):
    """Pool reserves were updated."""

    pool: Address
    reserve0: Amount
    reserve1: Amount


__all__ = ["Event", "PairCreated", "Mint", "Burn", "Swap", "Sync"]
