"""Journaled view over a ledger that only implements TokenLedger.

The exchange cannot copy or rewind the state of a ledger it does not own.
Instead, every movement made through the view is remembered as the call that
cancels it: a transfer is sent back and a consumed or replaced allowance is
approved again at its earlier value. Restoring a snapshot replays those
calls, newest first.
"""

from __future__ import annotations

from collections.abc import Callable

import structlog

from dex.errors import LedgerError
from dex.ledger.base import TokenLedger
from dex.models.types import short

logger = structlog.get_logger()

Compensation = Callable[[], bool]


class JournaledLedger:
    """TokenLedger wrapper that can undo the movements made through it."""

    def __init__(self, ledger: TokenLedger) -> None:
        self.ledger = ledger
        self._undo: list[tuple[Compensation, ...]] = []
        self._open = 0

    def __repr__(self) -> str:
        return f"JournaledLedger({self.ledger!r})"

    @property
    def address(self) -> str:
        return self.ledger.address

    def balance_of(self, account: str) -> int:
        return self.ledger.balance_of(account)

    def allowance(self, owner: str, spender: str) -> int:
        return self.ledger.allowance(owner, spender)

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        ok = self.ledger.transfer(sender, to, amount)
        if ok:
            self._record(lambda: self.ledger.transfer(to, sender, amount))
        return ok

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool:
        allowed = self.ledger.allowance(owner, spender)
        ok = self.ledger.transfer_from(spender, owner, to, amount)
        if ok:
            self._record(
                lambda: self.ledger.transfer(to, owner, amount),
                lambda: self.ledger.approve(owner, spender, allowed),
            )
        return ok

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        allowed = self.ledger.allowance(owner, spender)
        ok = self.ledger.approve(owner, spender, amount)
        if ok:
            self._record(lambda: self.ledger.approve(owner, spender, allowed))
        return ok

    def _record(self, *steps: Compensation) -> None:
        if self._open:
            self._undo.append(steps)

    # --- Journal ---

    def snapshot(self) -> int:
        self._open += 1
        return len(self._undo)

    def restore(self, mark: int) -> None:
        while len(self._undo) > mark:
            for step in self._undo.pop():
                if not step():
                    raise LedgerError(
                        f"Ledger {short(self.address)} refused to undo a movement"
                    )
        logger.debug("ledger_movements_undone", ledger=short(self.address), remaining=mark)
        self._close()

    def release(self, mark: int) -> None:
        self._close()

    def _close(self) -> None:
        self._open = max(self._open - 1, 0)
        if not self._open:
            self._undo.clear()


__all__ = ["JournaledLedger"]
