"""Liquidity and swap routing.

Router orchestrates registry lookups, ledger transfers and pool operations
as single all-or-nothing calls with slippage bounds and deadlines.
"""

from dex.routing.router import Router
from dex.routing.types import AddLiquidityResult, HopResult, RemoveLiquidityResult, SwapReceipt

__all__ = [
    "Router",
    "AddLiquidityResult",
    "RemoveLiquidityResult",
    "HopResult",
    "SwapReceipt",
]
