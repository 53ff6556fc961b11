"""In-memory ERC20-style token ledger.

Reference implementation of TokenLedger used by the deployment harness and
the tests. Semantics follow the common ERC20 contract: transfers to the zero
address are rejected, allowances are consumed by transfer_from except for
the unlimited sentinel.
"""

from __future__ import annotations

from collections import defaultdict

import structlog

from dex.constants import MAX_ALLOWANCE
from dex.errors import InsufficientAllowance, InsufficientBalance, ZeroAddress
from dex.models.types import ZERO_ADDRESS, normalize_address, short, validate_amount
from dex.transaction import UndoLog

logger = structlog.get_logger()


class InMemoryTokenLedger:
    """ERC20-like balances and allowances held in dictionaries."""

    def __init__(self, address: str, name: str, symbol: str, decimals: int = 18) -> None:
        self._address = normalize_address(address)
        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self._balances: defaultdict[str, int] = defaultdict(int)
        self._allowances: defaultdict[tuple[str, str], int] = defaultdict(int)
        self._total_supply = 0
        self._journal = UndoLog()

    def __repr__(self) -> str:
        return f"InMemoryTokenLedger({self.symbol}, {self._address})"

    @property
    def address(self) -> str:
        return self._address

    @property
    def total_supply(self) -> int:
        return self._total_supply

    @property
    def balances(self) -> dict[str, int]:
        """Copy of every non-empty balance."""
        return {account: amount for account, amount in self._balances.items() if amount}

    def balance_of(self, account: str) -> int:
        return self._balances.get(normalize_address(account), 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((normalize_address(owner), normalize_address(spender)), 0)

    def mint(self, to: str, amount: int) -> None:
        """Issue new supply to an account (deployment only)."""
        to = normalize_address(to)
        validate_amount(amount)
        if to == ZERO_ADDRESS:
            raise ZeroAddress("ERC20: mint to the zero address")
        self._journal.record(self._balances, to)
        self._balances[to] += amount
        self._total_supply += amount
        logger.debug("token_minted", token=self.symbol, to=short(to), amount=amount)

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        self._move(normalize_address(sender), normalize_address(to), validate_amount(amount))
        return True

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool:
        spender = normalize_address(spender)
        owner = normalize_address(owner)
        validate_amount(amount)

        allowed = self._allowances.get((owner, spender), 0)
        if allowed < amount:
            raise InsufficientAllowance(
                f"ERC20: insufficient allowance ({self.symbol}: {allowed} < {amount})"
            )
        self._move(owner, normalize_address(to), amount)
        if allowed != MAX_ALLOWANCE:
            self._journal.record(self._allowances, (owner, spender))
            self._allowances[(owner, spender)] = allowed - amount
        return True

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        owner = normalize_address(owner)
        spender = normalize_address(spender)
        validate_amount(amount)
        if spender == ZERO_ADDRESS:
            raise ZeroAddress("ERC20: approve to the zero address")
        self._journal.record(self._allowances, (owner, spender))
        self._allowances[(owner, spender)] = amount
        return True

    def _move(self, sender: str, to: str, amount: int) -> None:
        if to == ZERO_ADDRESS:
            raise ZeroAddress("ERC20: transfer to the zero address")
        balance = self._balances.get(sender, 0)
        if balance < amount:
            raise InsufficientBalance(
                f"ERC20: transfer amount exceeds balance ({self.symbol}: {balance} < {amount})"
            )
        self._journal.record(self._balances, sender)
        self._balances[sender] = balance - amount
        self._journal.record(self._balances, to)
        self._balances[to] += amount

    # --- Journal ---

    def snapshot(self) -> tuple[int, int]:
        return self._journal.snapshot(), self._total_supply

    def restore(self, state: tuple[int, int]) -> None:
        mark, self._total_supply = state
        self._journal.restore(mark)

    def release(self, state: tuple[int, int]) -> None:
        self._journal.release(state[0])
