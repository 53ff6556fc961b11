"""Pytest configuration and fixtures."""

import pytest

from dex.config import PoolConfig
from dex.constants import MAX_ALLOWANCE
from dex.ledger import InMemoryTokenLedger
from dex.pools import PoolRegistry
from dex.routing import Router
from tests.helpers import (
    ALICE,
    BOB,
    STARTING_BALANCE,
    TOKEN_A,
    TOKEN_B,
    TOKEN_C,
    FixedClock,
    make_registry,
)


@pytest.fixture
def clock() -> FixedClock:
    """A clock fixed at T0 that tests advance by hand."""
    return FixedClock()


@pytest.fixture
def registry(clock: FixedClock) -> PoolRegistry:
    """Registry over TOKEN_A, TOKEN_B and TOKEN_C with the default pool config."""
    return make_registry(TOKEN_A, TOKEN_B, TOKEN_C, clock=clock)


@pytest.fixture
def small_registry(clock: FixedClock) -> PoolRegistry:
    """Registry locking only 10 shares on first deposit, for small-number scenarios."""
    return make_registry(TOKEN_A, TOKEN_B, config=PoolConfig(minimum_liquidity=10), clock=clock)


@pytest.fixture
def token_a(registry: PoolRegistry) -> InMemoryTokenLedger:
    return registry.ledgers.get(TOKEN_A)


@pytest.fixture
def token_b(registry: PoolRegistry) -> InMemoryTokenLedger:
    return registry.ledgers.get(TOKEN_B)


@pytest.fixture
def token_c(registry: PoolRegistry) -> InMemoryTokenLedger:
    return registry.ledgers.get(TOKEN_C)


@pytest.fixture
def router(registry: PoolRegistry) -> Router:
    """Router over the registry fixture, with ALICE and BOB funded and approved."""
    router = Router(registry)
    for ledger in registry.ledgers:
        for account in (ALICE, BOB):
            ledger.mint(account, STARTING_BALANCE)
            ledger.approve(account, router.address, MAX_ALLOWANCE)
    return router
