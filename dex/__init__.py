"""Constant product AMM exchange engine."""

from dex.config import DEFAULT_POOL_CONFIG, PoolConfig
from dex.ledger import InMemoryTokenLedger, LedgerBook
from dex.pools import Pool, PoolRegistry
from dex.routing import Router

__version__ = "0.1.0"
__all__ = [
    "PoolRegistry",
    "Pool",
    "Router",
    "LedgerBook",
    "InMemoryTokenLedger",
    "PoolConfig",
    "DEFAULT_POOL_CONFIG",
    "__version__",
]
