"""All-or-nothing execution for multi-step state changes.

A router call touches several stateful objects: token ledgers, pools, the
registry's pair map and the event log. Each of them implements the Journaled
protocol, so a Transaction can snapshot it before its first mutation and put
it back if anything inside the block raises.

Usage:
    with atomic("swap", pool, ledger_in, ledger_out, events) as tx:
        ...                       # mutate freely
        tx.touch(other_pool)      # join more participants before mutating them

On an exception every touched participant is restored (most recent first)
and the exception propagates unchanged. On success every participant is
released so it can drop what it kept to undo the block.

Nesting is safe: an inner block restores its own snapshots, then the outer
block restores older ones. Participants with large state should snapshot a
position in an UndoLog rather than copy themselves, so a transaction costs
as much as the keys it writes.
"""

from __future__ import annotations

from collections.abc import MutableMapping
from types import TracebackType
from typing import Any, Protocol, runtime_checkable

import structlog

logger = structlog.get_logger()


@runtime_checkable
class Journaled(Protocol):
    """State holder that can capture and restore its own state."""

    def snapshot(self) -> Any:
        """Return an opaque copy of the current state."""
        ...

    def restore(self, state: Any) -> None:
        """Replace the current state with a value returned by snapshot()."""
        ...

    def release(self, state: Any) -> None:
        """Forget a snapshot whose block committed."""
        ...


class Transaction:
    """Snapshot journal over a set of Journaled participants."""

    def __init__(self, label: str) -> None:
        self.label = label
        self._journal: dict[int, tuple[Journaled, Any]] = {}

    @property
    def participants(self) -> int:
        return len(self._journal)

    def touch(self, *participants: Journaled) -> None:
        """Snapshot participants not yet in the journal.

        Must be called before the participant is first mutated in this block.
        """
        for participant in participants:
            key = id(participant)
            if key not in self._journal:
                self._journal[key] = (participant, participant.snapshot())

    def commit(self) -> None:
        for participant, state in reversed(list(self._journal.values())):
            participant.release(state)
        self._journal.clear()

    def rollback(self) -> None:
        for participant, state in reversed(list(self._journal.values())):
            participant.restore(state)
        self._journal.clear()

    def __enter__(self) -> Transaction:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        if exc is None:
            self.commit()
            return False

        restored = self.participants
        self.rollback()
        logger.info(
            "transaction_reverted",
            label=self.label,
            error=type(exc).__name__,
            code=getattr(exc, "code", None),
            restored=restored,
        )
        return False


_MISSING = object()


class UndoLog:
    """Prior values of mapping entries written while a snapshot is open.

    A Journaled owner calls record() before each write; snapshot() returns a
    mark and restore(mark) puts every entry written since the mark back.
    Nothing is recorded while no snapshot is open, and the log empties once
    the last open snapshot is released or restored.
    """

    def __init__(self) -> None:
        self._entries: list[tuple[MutableMapping[Any, Any], Any, Any]] = []
        self._open = 0

    def __len__(self) -> int:
        return len(self._entries)

    def record(self, mapping: MutableMapping[Any, Any], key: Any) -> None:
        if self._open:
            self._entries.append((mapping, key, mapping.get(key, _MISSING)))

    def snapshot(self) -> int:
        self._open += 1
        return len(self._entries)

    def restore(self, mark: int) -> None:
        while len(self._entries) > mark:
            mapping, key, value = self._entries.pop()
            if value is _MISSING:
                mapping.pop(key, None)
            else:
                mapping[key] = value
        self._close()

    def release(self, mark: int) -> None:
        self._close()

    def _close(self) -> None:
        self._open = max(self._open - 1, 0)
        if not self._open:
            self._entries.clear()


def atomic(label: str, *participants: Journaled) -> Transaction:
    """Open a transaction with participants already journaled."""
    tx = Transaction(label)
    tx.touch(*participants)
    return tx


__all__ = ["Journaled", "Transaction", "UndoLog", "atomic"]
