"""Pool registry: one pool per unordered asset pair.

Pools are keyed by a content-addressed identity derived from the canonical
pair (see dex.pools.identity), never by a sequence number, so the key of any
pair is known before the pool exists. The registry is an explicit object:
there is no module-level default instance.
"""

from __future__ import annotations

from collections.abc import Iterator

import structlog

from dex.config import DEFAULT_POOL_CONFIG, Clock, PoolConfig, wall_clock
from dex.constants import DEFAULT_REGISTRY_ADDRESS, POOL_INIT_CODE_HASH
from dex.errors import IdenticalAssets, PairExists
from dex.events import EventLog
from dex.ledger.book import LedgerBook
from dex.models.events import PairCreated
from dex.models.types import normalize_address, short
from dex.pools.identity import pair_address, sort_assets
from dex.pools.pool import Pool
from dex.transaction import atomic

logger = structlog.get_logger()


class PoolRegistry:
    """Registry of constant product pools.

    Args:
        ledgers: Ledger directory; only assets with a ledger can be paired
        address: Registry address, mixed into every pool identity
        config: Pool configuration shared by every pool created here
        events: Event log shared with the pools (a fresh one if None)
        clock: Time source handed to pools
        init_code_hash: 32-byte seed of the pool identity derivation
        fee_to: Protocol-fee recipient; None keeps the protocol fee off
    """

    def __init__(
        self,
        ledgers: LedgerBook,
        address: str = DEFAULT_REGISTRY_ADDRESS,
        config: PoolConfig = DEFAULT_POOL_CONFIG,
        events: EventLog | None = None,
        clock: Clock = wall_clock,
        init_code_hash: bytes = POOL_INIT_CODE_HASH,
        fee_to: str | None = None,
    ) -> None:
        self.address = normalize_address(address)
        self.ledgers = ledgers
        self.config = config
        self.events = events if events is not None else EventLog()
        self.clock = clock
        self.init_code_hash = init_code_hash
        self._fee_to = normalize_address(fee_to) if fee_to is not None else None
        self._pools: dict[str, Pool] = {}
        self._pairs: dict[tuple[str, str], str] = {}
        self._all_pairs: list[str] = []

    @property
    def fee_to(self) -> str | None:
        return self._fee_to

    def set_fee_to(self, fee_to: str | None) -> None:
        """Turn the protocol fee on (recipient address) or off (None)."""
        self._fee_to = normalize_address(fee_to) if fee_to is not None else None
        logger.info("protocol_fee_recipient_set", fee_to=self._fee_to)

    @property
    def all_pairs(self) -> list[str]:
        """Pool addresses in creation order."""
        return list(self._all_pairs)

    def __len__(self) -> int:
        return len(self._all_pairs)

    def __iter__(self) -> Iterator[Pool]:
        return (self._pools[address] for address in self._all_pairs)

    def __contains__(self, pool_address: object) -> bool:
        if not isinstance(pool_address, str):
            return False
        return normalize_address(pool_address, validate=False) in self._pools

    def pair_address_for(self, asset_a: str, asset_b: str) -> str:
        """Identity the pool for this pair has (or will have) in this registry."""
        return pair_address(self.address, asset_a, asset_b, self.init_code_hash)

    def lookup(self, asset_a: str, asset_b: str) -> Pool | None:
        """Pool for a pair in either order, or None. Never creates.

        Identical assets have no pool, so they return None.
        """
        try:
            pair = sort_assets(asset_a, asset_b)
        except IdenticalAssets:
            return None
        address = self._pairs.get(pair)
        return self._pools[address] if address is not None else None

    def get_pair(self, asset_a: str, asset_b: str) -> str | None:
        """Address of the pool for a pair, or None if it was never created."""
        pool = self.lookup(asset_a, asset_b)
        return pool.address if pool is not None else None

    def get_by_address(self, pool_address: str) -> Pool | None:
        return self._pools.get(normalize_address(pool_address))

    def resolve_or_create(self, asset_a: str, asset_b: str) -> Pool:
        """Return the pool for a pair, creating an empty one on first request.

        Idempotent: (A, B) and (B, A) always resolve to the same pool.

        Raises:
            IdenticalAssets: If asset_a == asset_b
            ZeroAddress: If either asset is the zero address
            UnknownAsset: If either asset has no registered ledger
        """
        asset0, asset1 = sort_assets(asset_a, asset_b)
        existing = self._pairs.get((asset0, asset1))
        if existing is not None:
            return self._pools[existing]
        return self._create(asset0, asset1)

    def create_pair(self, asset_a: str, asset_b: str) -> Pool:
        """Create the pool for a pair, refusing pairs that already exist.

        Raises:
            PairExists: If the pair is already registered
            IdenticalAssets, ZeroAddress, UnknownAsset: As in resolve_or_create
        """
        asset0, asset1 = sort_assets(asset_a, asset_b)
        if (asset0, asset1) in self._pairs:
            raise PairExists(f"DEX: PAIR_EXISTS ({asset0}, {asset1})")
        return self._create(asset0, asset1)

    def _create(self, asset0: str, asset1: str) -> Pool:
        ledger0 = self.ledgers.get(asset0)
        ledger1 = self.ledgers.get(asset1)
        address = pair_address(self.address, asset0, asset1, self.init_code_hash)

        with atomic("registry.create_pair", self, self.events):
            pool = Pool(
                address=address,
                ledger0=ledger0,
                ledger1=ledger1,
                events=self.events,
                config=self.config,
                clock=self.clock,
                fee_to=lambda: self._fee_to,
            )
            self._pools[address] = pool
            self._pairs[(asset0, asset1)] = address
            self._all_pairs.append(address)
            self.events.emit(
                PairCreated(
                    asset0=asset0,
                    asset1=asset1,
                    pool=address,
                    pair_index=len(self._all_pairs),
                )
            )

        logger.info(
            "pair_created",
            pool=short(address),
            asset0=short(asset0),
            asset1=short(asset1),
            pairs=len(self._all_pairs),
        )
        return pool

    def snapshot(self) -> tuple[dict[str, Pool], dict[tuple[str, str], str], list[str], str | None]:
        return dict(self._pools), dict(self._pairs), list(self._all_pairs), self._fee_to

    def restore(
        self, state: tuple[dict[str, Pool], dict[tuple[str, str], str], list[str], str | None]
    ) -> None:
        pools, pairs, all_pairs, fee_to = state
        self._pools = dict(pools)
        self._pairs = dict(pairs)
        self._all_pairs = list(all_pairs)
        self._fee_to = fee_to

    def release(
        self, state: tuple[dict[str, Pool], dict[tuple[str, str], str], list[str], str | None]
    ) -> None:
        pass


__all__ = ["PoolRegistry"]
