"""Constant product AMM math.

Pools hold reserves x and y and keep x * y = k from decreasing. The swap fee
is taken from the input before pricing:

    effective_in = amount_in * (10000 - fee_bps) // 10000
    amount_out   = reserve_out * effective_in // (reserve_in + effective_in)

so the fee share of every input stays in the pool and k grows.
All math is integer-only with explicit floor (or ceiling) rounding.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from dex.constants import FEE_DENOMINATOR, SWAP_FEE_BPS
from dex.errors import (
    InsufficientInputAmount,
    InsufficientLiquidity,
    InsufficientOutputAmount,
)
from dex.safe_int import S

if TYPE_CHECKING:
    from dex.pools.pool import Pool

DEFAULT_FEE_MULTIPLIER = FEE_DENOMINATOR - SWAP_FEE_BPS


@dataclass(frozen=True)
class SwapQuote:
    """Result of pricing a swap against a pool without executing it."""

    pool_address: str
    asset_in: str
    asset_out: str
    amount_in: int
    amount_out: int
    reserve_in: int
    reserve_out: int

    @property
    def k_before(self) -> int:
        return self.reserve_in * self.reserve_out

    @property
    def k_after(self) -> int:
        return (self.reserve_in + self.amount_in) * (self.reserve_out - self.amount_out)


class ConstantProduct:
    """Constant product pricing.

    Every method raises instead of returning a sentinel: an impossible
    quote means the operation that asked for it must abort.
    """

    def quote(self, amount_a: int, reserve_a: int, reserve_b: int) -> int:
        """Amount of B worth amount_a of A at the current reserve ratio (no fee).

        Raises:
            InsufficientInputAmount: If amount_a is zero
            InsufficientLiquidity: If either reserve is zero
        """
        if amount_a <= 0:
            raise InsufficientInputAmount("DEX: INSUFFICIENT_AMOUNT")
        if reserve_a <= 0 or reserve_b <= 0:
            raise InsufficientLiquidity()
        return (S(amount_a) * S(reserve_b) // S(reserve_a)).value

    def effective_input(self, amount_in: int, fee_multiplier: int = DEFAULT_FEE_MULTIPLIER) -> int:
        """Part of amount_in that trades after the fee (floor)."""
        return (S(amount_in) * S(fee_multiplier) // S(FEE_DENOMINATOR)).value

    def get_amount_out(
        self,
        amount_in: int,
        reserve_in: int,
        reserve_out: int,
        fee_multiplier: int = DEFAULT_FEE_MULTIPLIER,
    ) -> int:
        """Output for an exact input.

        Args:
            amount_in: Input token amount
            reserve_in: Reserve of the input token
            reserve_out: Reserve of the output token
            fee_multiplier: 10000 - fee_bps (9970 for 0.30%)

        Returns:
            Floor-rounded output amount (may be 0 for dust inputs)

        Raises:
            InsufficientInputAmount: If amount_in is zero
            InsufficientLiquidity: If either reserve is zero
        """
        if amount_in <= 0:
            raise InsufficientInputAmount()
        if reserve_in <= 0 or reserve_out <= 0:
            raise InsufficientLiquidity()

        effective_in = S(self.effective_input(amount_in, fee_multiplier))
        numerator = S(reserve_out) * effective_in
        denominator = S(reserve_in) + effective_in
        return (numerator // denominator).value

    def get_amount_in(
        self,
        amount_out: int,
        reserve_in: int,
        reserve_out: int,
        fee_multiplier: int = DEFAULT_FEE_MULTIPLIER,
    ) -> int:
        """Smallest input whose get_amount_out is at least amount_out.

        Inverts both floors of get_amount_out:
            effective_in >= ceil(amount_out * reserve_in / (reserve_out - amount_out))
            amount_in    =  ceil(effective_in * 10000 / fee_multiplier)

        Raises:
            InsufficientOutputAmount: If amount_out is zero
            InsufficientLiquidity: If a reserve is zero or amount_out drains the pool
        """
        if amount_out <= 0:
            raise InsufficientOutputAmount()
        if reserve_in <= 0 or reserve_out <= 0:
            raise InsufficientLiquidity()
        if amount_out >= reserve_out:
            raise InsufficientLiquidity(
                f"DEX: INSUFFICIENT_LIQUIDITY (want {amount_out}, reserve {reserve_out})"
            )
        if fee_multiplier <= 0:
            raise InsufficientLiquidity("DEX: ZERO_FEE_MULTIPLIER")

        effective_in = (S(amount_out) * S(reserve_in)).ceiling_div(S(reserve_out) - S(amount_out))
        return (effective_in * S(FEE_DENOMINATOR)).ceiling_div(fee_multiplier).value

    def simulate_swap(self, pool: Pool, asset_in: str, amount_in: int) -> SwapQuote:
        """Price an exact-input swap against a pool's current reserves."""
        reserve_in, reserve_out = pool.reserves_for(asset_in)
        amount_out = self.get_amount_out(
            amount_in, reserve_in, reserve_out, pool.config.fee_multiplier
        )
        return SwapQuote(
            pool_address=pool.address,
            asset_in=pool.asset_for(asset_in),
            asset_out=pool.counter_asset(asset_in),
            amount_in=amount_in,
            amount_out=amount_out,
            reserve_in=reserve_in,
            reserve_out=reserve_out,
        )

    def simulate_swap_exact_output(self, pool: Pool, asset_in: str, amount_out: int) -> SwapQuote:
        """Price an exact-output swap; amount_out is the forward-simulated result.

        Due to rounding the forward output may exceed the requested amount.
        """
        reserve_in, reserve_out = pool.reserves_for(asset_in)
        fee_multiplier = pool.config.fee_multiplier
        amount_in = self.get_amount_in(amount_out, reserve_in, reserve_out, fee_multiplier)
        actual_out = self.get_amount_out(amount_in, reserve_in, reserve_out, fee_multiplier)
        return SwapQuote(
            pool_address=pool.address,
            asset_in=pool.asset_for(asset_in),
            asset_out=pool.counter_asset(asset_in),
            amount_in=amount_in,
            amount_out=actual_out,
            reserve_in=reserve_in,
            reserve_out=reserve_out,
        )


# Singleton instance
constant_product = ConstantProduct()


__all__ = ["ConstantProduct", "SwapQuote", "constant_product", "DEFAULT_FEE_MULTIPLIER"]
