"""Append-only event log shared by a registry and its pools."""

from __future__ import annotations

from typing import TypeVar

import structlog

from dex.models.events import Event

logger = structlog.get_logger()

E = TypeVar("E", bound=Event)


class EventLog:
    """Ordered record of emitted events.

    The log is Journaled: a reverted transaction truncates the events it
    emitted, so the log only ever shows effects that actually happened.
    """

    def __init__(self) -> None:
        self._records: list[Event] = []

    def emit(self, event: Event) -> None:
        self._records.append(event)
        logger.debug(event.name, **event.model_dump())

    @property
    def records(self) -> tuple[Event, ...]:
        return tuple(self._records)

    def of_type(self, event_type: type[E]) -> list[E]:
        """All recorded events of one type, in emission order."""
        return [e for e in self._records if isinstance(e, event_type)]

    def last(self, event_type: type[E]) -> E | None:
        for event in reversed(self._records):
            if isinstance(event, event_type):
                return event
        return None

    def __len__(self) -> int:
        return len(self._records)

    def snapshot(self) -> int:
        return len(self._records)

    def restore(self, state: int) -> None:
        del self._records[state:]

    def release(self, state: int) -> None:
        pass
