"""Type definitions for routing module."""

from __future__ import annotations

from dataclasses import dataclass, field

from dex.pools.pool import Pool


@dataclass(frozen=True)
class AddLiquidityResult:
    """Amounts actually deposited and the shares issued for them."""

    pool: Pool
    amount_a: int
    amount_b: int
    shares: int


@dataclass(frozen=True)
class RemoveLiquidityResult:
    """Underlying amounts paid out for burned shares."""

    pool: Pool
    amount_a: int
    amount_b: int
    shares: int


@dataclass(frozen=True)
class HopResult:
    """Result of a single hop in a (multi-hop) swap."""

    pool: Pool
    asset_in: str
    asset_out: str
    amount_in: int
    amount_out: int


@dataclass(frozen=True)
class SwapReceipt:
    """Executed swap along a path."""

    path: list[str]
    amounts: list[int]  # amounts[0] paid in, amounts[i] out of hop i
    hops: list[HopResult] = field(default_factory=list)

    @property
    def amount_in(self) -> int:
        return self.amounts[0]

    @property
    def amount_out(self) -> int:
        return self.amounts[-1]

    @property
    def is_multihop(self) -> bool:
        return len(self.path) > 2


__all__ = ["AddLiquidityResult", "RemoveLiquidityResult", "HopResult", "SwapReceipt"]
