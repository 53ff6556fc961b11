"""Tests for PoolRegistry."""

import pytest

from dex.errors import IdenticalAssets, PairExists, UnknownAsset, ZeroAddress
from dex.models import PairCreated
from dex.models.types import ZERO_ADDRESS
from dex.pools import PoolRegistry, pair_address
from tests.helpers import FEE_TO, REGISTRY, TOKEN_A, TOKEN_B, TOKEN_C, TOKEN_D, make_registry


class TestResolveOrCreate:
    """Tests for idempotent pool resolution."""

    def test_creates_on_first_request(self, registry):
        pool = registry.resolve_or_create(TOKEN_A, TOKEN_B)
        assert len(registry) == 1
        assert pool.address in registry
        assert pool.is_empty

    def test_either_order_same_pool(self, registry):
        """(A, B) and (B, A) resolve to the same pool object."""
        first = registry.resolve_or_create(TOKEN_A, TOKEN_B)
        second = registry.resolve_or_create(TOKEN_B, TOKEN_A)
        assert first is second
        assert len(registry) == 1

    def test_address_is_content_derived(self, registry):
        """The pool key is known before the pool exists."""
        expected = registry.pair_address_for(TOKEN_B, TOKEN_A)
        assert expected == pair_address(REGISTRY, TOKEN_A, TOKEN_B)
        assert registry.resolve_or_create(TOKEN_A, TOKEN_B).address == expected

    def test_emits_pair_created(self, registry):
        registry.resolve_or_create(TOKEN_B, TOKEN_A)
        registry.resolve_or_create(TOKEN_A, TOKEN_C)
        created = registry.events.of_type(PairCreated)
        assert [(e.asset0, e.asset1, e.pair_index) for e in created] == [
            (TOKEN_A, TOKEN_B, 1),
            (TOKEN_A, TOKEN_C, 2),
        ]

    def test_identical_assets(self, registry):
        with pytest.raises(IdenticalAssets):
            registry.resolve_or_create(TOKEN_A, TOKEN_A)

    def test_zero_address(self, registry):
        with pytest.raises(ZeroAddress):
            registry.resolve_or_create(TOKEN_A, ZERO_ADDRESS)

    def test_unknown_asset_creates_nothing(self, registry):
        with pytest.raises(UnknownAsset):
            registry.resolve_or_create(TOKEN_A, TOKEN_D)
        assert len(registry) == 0
        assert len(registry.events) == 0


class TestCreatePair:
    """Tests for strict creation."""

    def test_create(self, registry):
        pool = registry.create_pair(TOKEN_B, TOKEN_C)
        assert registry.get_pair(TOKEN_C, TOKEN_B) == pool.address

    def test_existing_pair_rejected(self, registry):
        registry.create_pair(TOKEN_A, TOKEN_B)
        with pytest.raises(PairExists):
            registry.create_pair(TOKEN_B, TOKEN_A)
        assert len(registry) == 1


class TestLookup:
    """Tests for read-only queries."""

    def test_lookup_missing(self, registry):
        assert registry.lookup(TOKEN_A, TOKEN_B) is None
        assert registry.get_pair(TOKEN_A, TOKEN_B) is None
        assert len(registry) == 0

    def test_lookup_identical_is_none(self, registry):
        assert registry.lookup(TOKEN_A, TOKEN_A) is None

    def test_lookup_existing(self, registry):
        pool = registry.resolve_or_create(TOKEN_A, TOKEN_B)
        assert registry.lookup(TOKEN_B, TOKEN_A) is pool
        assert registry.get_by_address(pool.address) is pool

    def test_all_pairs_in_creation_order(self, registry):
        bc = registry.resolve_or_create(TOKEN_B, TOKEN_C)
        ab = registry.resolve_or_create(TOKEN_A, TOKEN_B)
        assert registry.all_pairs == [bc.address, ab.address]
        assert list(registry) == [bc, ab]

    def test_contains_non_string(self, registry):
        assert 1 not in registry


class TestRegistryIsolation:
    def test_pools_belong_to_their_registry(self, registry):
        """Two registries never share pools; their pool keys differ too."""
        other = make_registry(TOKEN_A, TOKEN_B)
        other_pool = other.resolve_or_create(TOKEN_A, TOKEN_B)
        assert registry.lookup(TOKEN_A, TOKEN_B) is None

        third = PoolRegistry(other.ledgers, address="0x" + "22" * 20)
        assert third.pair_address_for(TOKEN_A, TOKEN_B) != other_pool.address


class TestFeeTo:
    def test_default_off(self, registry):
        assert registry.fee_to is None

    def test_set_fee_to(self, registry):
        registry.set_fee_to(FEE_TO.upper().replace("0X", "0x"))
        assert registry.fee_to == FEE_TO
        registry.set_fee_to(None)
        assert registry.fee_to is None
