"""Pool management package.

Provides Pool (reserve and share accounting) and PoolRegistry (one pool per
canonical pair, content-addressed).
"""

from .identity import derive_address, pair_address, sort_assets
from .pool import LiquidityPosition, Pool
from .registry import PoolRegistry

__all__ = [
    "Pool",
    "LiquidityPosition",
    "PoolRegistry",
    "pair_address",
    "sort_assets",
    "derive_address",
]
