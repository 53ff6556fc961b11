"""Test helpers module for shared test utilities.

- constants: account and asset addresses
- factories: ledger, registry and pool factory functions
"""

from tests.helpers.constants import (
    ALICE,
    BOB,
    CAROL,
    FEE_TO,
    REGISTRY,
    STARTING_BALANCE,
    T0,
    TOKEN_A,
    TOKEN_B,
    TOKEN_C,
    TOKEN_D,
)
from tests.helpers.factories import FixedClock, deposit, make_ledger, make_registry, seed_pool

__all__ = [
    # Constants
    "ALICE",
    "BOB",
    "CAROL",
    "FEE_TO",
    "TOKEN_A",
    "TOKEN_B",
    "TOKEN_C",
    "TOKEN_D",
    "REGISTRY",
    "T0",
    "STARTING_BALANCE",
    # Factories
    "FixedClock",
    "make_ledger",
    "make_registry",
    "deposit",
    "seed_pool",
]
