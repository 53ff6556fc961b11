"""Demo deployment: test tokens, a registry, a router and deep USDT pools.

Mirrors the one-shot demo deployment: four ERC20-style test tokens are
issued to a deployer, then for every listed token a TOKEN/USDT pair is
created, the router is approved and both reserves are deposited through
Router.add_liquidity.

Pool depth is trade_amount * pool_depth_multiplier whole tokens on the
token side (10 000 * 1000 by default); the USDT side is that amount times
the token's USDT price, truncated to six decimals.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_FLOOR, Decimal

import structlog
from pydantic import BaseModel, Field, model_validator

from dex.config import Clock, PoolConfig, wall_clock
from dex.events import EventLog
from dex.ledger.book import LedgerBook
from dex.ledger.memory import InMemoryTokenLedger
from dex.models.types import Address, short
from dex.pools.identity import derive_address
from dex.pools.pool import Pool
from dex.pools.registry import PoolRegistry
from dex.routing.router import Router

logger = structlog.get_logger()

PRICE_PRECISION = 10**6


class TokenSpec(BaseModel):
    """A test token issued to the deployer."""

    name: str
    symbol: str
    decimals: int = Field(default=18, ge=0, le=77)
    initial_supply: int = Field(default=10_000_000_000, ge=0, description="Whole tokens.")

    @property
    def unit(self) -> int:
        return 10**self.decimals


class PairSpec(BaseModel):
    """A token quoted against the quote token at a fixed price."""

    symbol: str
    price: Decimal = Field(gt=0, description="Quote tokens per whole token.")


def _default_tokens() -> list[TokenSpec]:
    return [
        TokenSpec(name="SwapX", symbol="SWX"),
        TokenSpec(name="GoldX", symbol="GOX"),
        TokenSpec(name="EnergyCoin", symbol="EGC"),
        TokenSpec(name="USDT", symbol="USDT"),
    ]


def _default_pairs() -> list[PairSpec]:
    return [
        PairSpec(symbol="SWX", price=Decimal("0.001")),
        PairSpec(symbol="GOX", price=Decimal("0.01")),
        PairSpec(symbol="EGC", price=Decimal("1")),
    ]


class DemoConfig(BaseModel):
    """Parameters of the demo deployment; every field has the demo default."""

    deployer: Address = Field(default_factory=lambda: derive_address("dex.demo.deployer"))
    tokens: list[TokenSpec] = Field(default_factory=_default_tokens)
    pairs: list[PairSpec] = Field(default_factory=_default_pairs)
    quote_symbol: str = "USDT"
    trade_amount: int = Field(default=10_000, gt=0, description="Typical trade, whole tokens.")
    pool_depth_multiplier: int = Field(default=1000, gt=0)
    fee_bps: int = Field(default=30, ge=0, lt=10_000)
    minimum_liquidity: int = Field(default=1000, ge=0)

    @model_validator(mode="after")
    def _check_symbols(self) -> DemoConfig:
        symbols = [token.symbol for token in self.tokens]
        if len(set(symbols)) != len(symbols):
            raise ValueError(f"Duplicate token symbols: {symbols}")
        if self.quote_symbol not in symbols:
            raise ValueError(f"Quote token {self.quote_symbol} is not in tokens")
        for pair in self.pairs:
            if pair.symbol not in symbols:
                raise ValueError(f"Pair token {pair.symbol} is not in tokens")
            if pair.symbol == self.quote_symbol:
                raise ValueError(f"Cannot pair {pair.symbol} with itself")
        return self

    def pool_config(self) -> PoolConfig:
        return PoolConfig(fee_bps=self.fee_bps, minimum_liquidity=self.minimum_liquidity)


@dataclass
class SeededPair:
    """A pool created and funded by the demo."""

    symbol: str
    pool: Pool
    reserve_in: int
    reserve_out: int
    shares: int


@dataclass
class Deployment:
    """Everything the demo deployed."""

    deployer: str
    registry: PoolRegistry
    router: Router
    tokens: dict[str, InMemoryTokenLedger] = field(default_factory=dict)
    pairs: dict[str, SeededPair] = field(default_factory=dict)

    @property
    def events(self) -> EventLog:
        return self.registry.events

    def token(self, symbol: str) -> InMemoryTokenLedger:
        return self.tokens[symbol]


def token_unit(ledger: InMemoryTokenLedger) -> int:
    return 10**ledger.decimals


def quote_reserve(reserve_in: int, price: Decimal) -> int:
    """Quote-side reserve for a token-side reserve at a price (six-decimal floor)."""
    scaled = int((price * PRICE_PRECISION).to_integral_value(rounding=ROUND_FLOOR))
    return reserve_in * scaled // PRICE_PRECISION


def deploy_full_demo(config: DemoConfig | None = None, clock: Clock = wall_clock) -> Deployment:
    """Deploy the demo tokens, registry and router, then seed every pair.

    Args:
        config: Deployment parameters (defaults to DemoConfig())
        clock: Time source shared by the registry, pools and router

    Returns:
        Deployment with the ledgers by symbol and the seeded pools
    """
    config = config if config is not None else DemoConfig()
    deployer = config.deployer

    book = LedgerBook()
    tokens: dict[str, InMemoryTokenLedger] = {}
    for spec in config.tokens:
        ledger = InMemoryTokenLedger(
            address=derive_address(f"dex.demo.token:{spec.symbol}"),
            name=spec.name,
            symbol=spec.symbol,
            decimals=spec.decimals,
        )
        ledger.mint(deployer, spec.initial_supply * spec.unit)
        book.register(ledger)
        tokens[spec.symbol] = ledger
        logger.info("token_deployed", symbol=spec.symbol, address=short(ledger.address))

    registry = PoolRegistry(book, config=config.pool_config(), clock=clock)
    router = Router(registry)
    logger.info("registry_deployed", address=short(registry.address))
    logger.info("router_deployed", address=short(router.address))

    deployment = Deployment(deployer=deployer, registry=registry, router=router, tokens=tokens)
    quote = tokens[config.quote_symbol]
    for pair in config.pairs:
        token = tokens[pair.symbol]
        reserve_in = config.trade_amount * token_unit(token) * config.pool_depth_multiplier
        reserve_out = quote_reserve(reserve_in, pair.price) * token_unit(quote) // token_unit(token)

        pool = registry.create_pair(token.address, quote.address)
        logger.debug(
            "pair_address_resolved",
            symbol=pair.symbol,
            pool=registry.get_pair(token.address, quote.address),
        )
        token.approve(deployer, router.address, reserve_in)
        quote.approve(deployer, router.address, reserve_out)
        result = router.add_liquidity(
            deployer, token.address, quote.address, reserve_in, reserve_out
        )

        deployment.pairs[pair.symbol] = SeededPair(
            symbol=pair.symbol,
            pool=result.pool,
            reserve_in=result.amount_a,
            reserve_out=result.amount_b,
            shares=result.shares,
        )
        logger.info(
            "pair_seeded",
            pair=f"{pair.symbol}/{config.quote_symbol}",
            pool=short(pool.address),
            reserve_in=reserve_in,
            reserve_out=reserve_out,
            shares=result.shares,
        )

    logger.info("deployment_complete", pairs=len(deployment.pairs))
    return deployment


__all__ = [
    "DemoConfig",
    "TokenSpec",
    "PairSpec",
    "Deployment",
    "SeededPair",
    "deploy_full_demo",
    "quote_reserve",
]
