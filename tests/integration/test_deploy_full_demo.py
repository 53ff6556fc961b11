"""Integration tests for the demo deployment harness."""

from decimal import Decimal
from math import isqrt

import pytest
from pydantic import ValidationError

from dex.deploy import DemoConfig, deploy_full_demo, quote_reserve
from dex.models import Mint, PairCreated
from tests.helpers import T0, FixedClock

WAD = 10**18
SUPPLY = 10_000_000_000 * WAD
DEPTH = 10_000 * 1_000 * WAD


@pytest.fixture(scope="module")
def deployment():
    return deploy_full_demo(clock=FixedClock(T0))


class TestDefaultDeployment:
    """The default demo: SWX, GOX and EGC against USDT, 10 000 * 1000 tokens deep."""

    def test_tokens(self, deployment):
        assert set(deployment.tokens) == {"SWX", "GOX", "EGC", "USDT"}
        for ledger in deployment.tokens.values():
            assert ledger.decimals == 18
            assert ledger.total_supply == SUPPLY

    def test_three_pairs(self, deployment):
        assert len(deployment.registry) == 3
        assert len(deployment.events.of_type(PairCreated)) == 3
        assert len(deployment.events.of_type(Mint)) == 3

    @pytest.mark.parametrize(
        "symbol,reserve_out",
        [("SWX", 10**22), ("GOX", 10**23), ("EGC", 10**25)],
    )
    def test_reserves(self, deployment, symbol, reserve_out):
        """USDT side is the token depth times the price (0.001 / 0.01 / 1)."""
        token = deployment.token(symbol)
        usdt = deployment.token("USDT")
        pool = deployment.registry.lookup(token.address, usdt.address)

        assert pool is deployment.pairs[symbol].pool
        assert pool.reserves_for(token.address) == (DEPTH, reserve_out)
        assert deployment.pairs[symbol].shares == isqrt(DEPTH * reserve_out) - 1_000
        assert pool.address == deployment.registry.get_pair(usdt.address, token.address)

    def test_deployer_balances(self, deployment):
        deployer = deployment.deployer
        assert deployment.token("SWX").balance_of(deployer) == SUPPLY - DEPTH
        usdt_spent = 10**22 + 10**23 + 10**25
        assert deployment.token("USDT").balance_of(deployer) == SUPPLY - usdt_spent

    def test_allowances_consumed(self, deployment):
        router = deployment.router.address
        for ledger in deployment.tokens.values():
            assert ledger.allowance(deployment.deployer, router) == 0


class TestDeployedSystem:
    def test_swap_against_deployed_pool(self):
        deployment = deploy_full_demo(clock=FixedClock(T0))
        swx = deployment.token("SWX")
        usdt = deployment.token("USDT")
        deployer = deployment.deployer
        swx.approve(deployer, deployment.router.address, 10_000 * WAD)

        receipt = deployment.router.swap_exact_input(
            deployer, [swx.address, usdt.address], 10_000 * WAD, 0
        )

        # 10 000 SWX at 0.001 is about 10 USDT, less fee and slippage
        assert 9 * WAD < receipt.amount_out < 10 * WAD


class TestDemoConfig:
    """Tests for deployment parameters."""

    def test_custom_config_from_json_data(self):
        config = DemoConfig.model_validate(
            {
                "tokens": [
                    {"name": "Alpha", "symbol": "ALP", "initial_supply": 1_000_000},
                    {"name": "Dollar", "symbol": "USD", "decimals": 6},
                ],
                "pairs": [{"symbol": "ALP", "price": "2.5"}],
                "quote_symbol": "USD",
                "trade_amount": 10,
                "pool_depth_multiplier": 100,
                "minimum_liquidity": 10,
            }
        )

        deployment = deploy_full_demo(config, clock=FixedClock(T0))

        seeded = deployment.pairs["ALP"]
        assert seeded.reserve_in == 1_000 * WAD
        assert seeded.reserve_out == 2_500 * 10**6
        assert deployment.registry.config.minimum_liquidity == 10

    def test_unknown_pair_symbol(self):
        with pytest.raises(ValidationError):
            DemoConfig(pairs=[{"symbol": "NOPE", "price": "1"}])

    def test_quote_symbol_must_exist(self):
        with pytest.raises(ValidationError):
            DemoConfig(quote_symbol="DAI")

    def test_non_positive_price(self):
        with pytest.raises(ValidationError):
            DemoConfig(pairs=[{"symbol": "SWX", "price": "0"}])


class TestQuoteReserve:
    def test_six_decimal_floor(self):
        assert quote_reserve(DEPTH, Decimal("0.001")) == 10**22
        assert quote_reserve(10**6, Decimal("0.0000019")) == 1
        assert quote_reserve(10**6, Decimal("1.2345678")) == 1_234_567
