"""Pool configuration for the exchange."""

import os
import time
from collections.abc import Callable
from dataclasses import dataclass

from dex.constants import FEE_DENOMINATOR, MINIMUM_LIQUIDITY, RESERVE_BITS, SWAP_FEE_BPS


@dataclass(frozen=True)
class PoolConfig:
    """Centralized configuration for pool math.

    Every pool created by a registry shares one PoolConfig, so tests can run
    the same scenario under different fees or locked-liquidity policies.

    Attributes:
        fee_bps: Swap fee in basis points retained by the pool (default: 30 = 0.30%)
        minimum_liquidity: Shares permanently locked on the first deposit
            (default: 1000). Guards against share-price manipulation through
            a dust first deposit and keeps total shares above zero afterwards.
        reserve_bits: Storage width reserves must fit in (default: 112)
    """

    fee_bps: int = SWAP_FEE_BPS
    minimum_liquidity: int = MINIMUM_LIQUIDITY
    reserve_bits: int = RESERVE_BITS

    def __post_init__(self) -> None:
        if not 0 <= self.fee_bps < FEE_DENOMINATOR:
            raise ValueError(f"fee_bps must be in [0, {FEE_DENOMINATOR}), got {self.fee_bps}")
        if self.minimum_liquidity < 0:
            raise ValueError(f"minimum_liquidity cannot be negative: {self.minimum_liquidity}")
        if self.reserve_bits <= 0:
            raise ValueError(f"reserve_bits must be positive: {self.reserve_bits}")

    @property
    def fee_multiplier(self) -> int:
        """Share of the input that trades (10000 - fee_bps); 9970 for 30 bps."""
        return FEE_DENOMINATOR - self.fee_bps

    @classmethod
    def from_env(cls) -> "PoolConfig":
        """Build a config from environment variables.

        - DEX_FEE_BPS: swap fee in basis points (default: 30)
        - DEX_MINIMUM_LIQUIDITY: locked first-deposit shares (default: 1000)
        """
        return cls(
            fee_bps=int(os.environ.get("DEX_FEE_BPS", str(SWAP_FEE_BPS))),
            minimum_liquidity=int(os.environ.get("DEX_MINIMUM_LIQUIDITY", str(MINIMUM_LIQUIDITY))),
        )


# Default configuration instance
DEFAULT_POOL_CONFIG = PoolConfig()


# Source of the current time (seconds); injectable so deadlines and oracle
# accumulators are deterministic under test
Clock = Callable[[], int]


def wall_clock() -> int:
    """Current Unix time in whole seconds."""
    return int(time.time())
