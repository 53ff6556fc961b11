"""Tests for JournaledLedger and routing over ledgers that cannot snapshot."""

import pytest

from dex.errors import InsufficientAAmount, InsufficientAllowance, InsufficientBalance, LedgerError
from dex.ledger import JournaledLedger, LedgerBook, TokenLedger
from dex.pools import PoolRegistry
from dex.routing import Router
from dex.transaction import Journaled, atomic
from tests.helpers import ALICE, BOB, CAROL, REGISTRY, TOKEN_A, TOKEN_B, FixedClock

FUNDS = 10**9


class PlainLedger:
    """Dict-backed ledger implementing nothing beyond TokenLedger (plus mint for setup)."""

    def __init__(self, address: str) -> None:
        self._address = address
        self.balances: dict[str, int] = {}
        self.allowances: dict[tuple[str, str], int] = {}

    @property
    def address(self) -> str:
        return self._address

    def mint(self, to: str, amount: int) -> None:
        self.balances[to] = self.balances.get(to, 0) + amount

    def balance_of(self, account: str) -> int:
        return self.balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self.allowances.get((owner, spender), 0)

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        if self.balance_of(sender) < amount:
            raise InsufficientBalance("ERC20: transfer amount exceeds balance")
        self.balances[sender] -= amount
        self.balances[to] = self.balance_of(to) + amount
        return True

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool:
        allowed = self.allowance(owner, spender)
        if allowed < amount:
            raise InsufficientAllowance("ERC20: insufficient allowance")
        self.transfer(owner, to, amount)
        self.allowances[(owner, spender)] = allowed - amount
        return True

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        self.allowances[(owner, spender)] = amount
        return True


class StubbornLedger(PlainLedger):
    """Accepts the first transfer, refuses every later one."""

    def __init__(self, address: str) -> None:
        super().__init__(address)
        self.transfers = 0

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        self.transfers += 1
        if self.transfers > 1:
            return False
        return super().transfer(sender, to, amount)


@pytest.fixture
def plain():
    """Two plain ledgers with ALICE funded."""
    a, b = PlainLedger(TOKEN_A), PlainLedger(TOKEN_B)
    for ledger in (a, b):
        ledger.mint(ALICE, FUNDS)
    return a, b


@pytest.fixture
def plain_router(plain):
    """Router over plain ledgers; ALICE approves it for all of her funds."""
    registry = PoolRegistry(LedgerBook(plain), address=REGISTRY, clock=FixedClock())
    router = Router(registry)
    for ledger in plain:
        ledger.approve(ALICE, router.address, FUNDS)
    return router


class TestJournaledLedger:
    """Tests for undoing movements with compensating calls."""

    def test_plain_ledger_is_not_journaled(self, plain):
        a, _ = plain
        assert isinstance(a, TokenLedger)
        assert not isinstance(a, Journaled)

    def test_book_wraps_plain_ledgers(self, plain):
        a, _ = plain
        book = LedgerBook(plain)
        wrapped = book.get(TOKEN_A)
        assert isinstance(wrapped, JournaledLedger)
        assert isinstance(wrapped, Journaled)
        assert wrapped.ledger is a
        assert book.register(a) is wrapped
        assert len(book) == 2

    def test_restore_undoes_movements(self, plain):
        a, _ = plain
        a.approve(ALICE, BOB, 500)
        ledger = JournaledLedger(a)
        state = ledger.snapshot()
        ledger.transfer(ALICE, CAROL, 100)
        ledger.transfer_from(BOB, ALICE, BOB, 300)
        ledger.approve(ALICE, CAROL, 7)
        ledger.restore(state)

        assert a.balance_of(ALICE) == FUNDS
        assert a.balance_of(BOB) == 0
        assert a.balance_of(CAROL) == 0
        assert a.allowance(ALICE, BOB) == 500
        assert a.allowance(ALICE, CAROL) == 0

    def test_inside_transaction(self, plain):
        a, _ = plain
        ledger = JournaledLedger(a)
        with pytest.raises(InsufficientBalance):
            with atomic("two_transfers", ledger):
                ledger.transfer(ALICE, BOB, 100)
                ledger.transfer(BOB, CAROL, 101)
        assert a.balance_of(ALICE) == FUNDS
        assert a.balance_of(BOB) == 0

    def test_commit_keeps_movements(self, plain):
        a, _ = plain
        ledger = JournaledLedger(a)
        with atomic("transfer", ledger):
            ledger.transfer(ALICE, BOB, 100)
        assert a.balance_of(BOB) == 100

        with atomic("later", ledger):
            pass
        assert a.balance_of(BOB) == 100

    def test_nothing_recorded_outside_transaction(self, plain):
        a, _ = plain
        ledger = JournaledLedger(a)
        ledger.transfer(ALICE, BOB, 100)
        state = ledger.snapshot()
        ledger.restore(state)
        assert a.balance_of(BOB) == 100

    def test_refused_compensation(self):
        stubborn = StubbornLedger(TOKEN_A)
        stubborn.mint(ALICE, 1_000)
        ledger = JournaledLedger(stubborn)
        state = ledger.snapshot()
        ledger.transfer(ALICE, BOB, 100)
        with pytest.raises(LedgerError, match="refused to undo"):
            ledger.restore(state)


class TestRouterOverPlainLedgers:
    """The router works with any TokenLedger, including ones that cannot snapshot."""

    def test_add_liquidity(self, plain_router, plain):
        a, b = plain
        result = plain_router.add_liquidity(ALICE, TOKEN_A, TOKEN_B, 10**6, 10**6)

        assert result.shares == 10**6 - 1_000
        assert a.balance_of(result.pool.address) == 10**6
        assert b.balance_of(result.pool.address) == 10**6
        assert a.allowance(ALICE, plain_router.address) == FUNDS - 10**6

    def test_failed_pull_rolls_back(self, plain_router, plain):
        """A short B allowance undoes the A pull and restores the A allowance."""
        a, b = plain
        b.approve(ALICE, plain_router.address, 10)
        registry = plain_router.registry
        pool_address = registry.pair_address_for(TOKEN_A, TOKEN_B)

        with pytest.raises(InsufficientAllowance):
            plain_router.add_liquidity(ALICE, TOKEN_A, TOKEN_B, 10**6, 10**6)

        assert a.balance_of(ALICE) == FUNDS
        assert a.balance_of(pool_address) == 0
        assert a.allowance(ALICE, plain_router.address) == FUNDS
        assert b.allowance(ALICE, plain_router.address) == 10
        assert len(registry) == 0
        assert len(registry.events) == 0

    def test_failed_withdrawal_returns_payout(self, plain_router, plain):
        """Tokens the pool already paid out go back when the minimum is missed."""
        a, b = plain
        result = plain_router.add_liquidity(ALICE, TOKEN_A, TOKEN_B, 10**6, 10**6)
        events = len(plain_router.registry.events)

        with pytest.raises(InsufficientAAmount):
            plain_router.remove_liquidity(
                ALICE, TOKEN_A, TOKEN_B, result.shares, amount_a_min=10**6
            )

        assert a.balance_of(ALICE) == FUNDS - 10**6
        assert b.balance_of(ALICE) == FUNDS - 10**6
        assert a.balance_of(result.pool.address) == 10**6
        assert result.pool.share_balance(ALICE) == result.shares
        assert len(plain_router.registry.events) == events

    def test_swap(self, plain_router, plain):
        a, b = plain
        plain_router.add_liquidity(ALICE, TOKEN_A, TOKEN_B, 10**6, 10**6)
        receipt = plain_router.swap_exact_input(ALICE, [TOKEN_A, TOKEN_B], 1_000, 996)
        assert receipt.amount_out == 996
        assert b.balance_of(ALICE) == FUNDS - 10**6 + 996
