# src/simonsays/storage/memory.py
from __future__ import annotations

from dataclasses import asdict
from enum import Enum
from threading import Lock
from typing import Any

from simonsays.core.events.base import Event


class InMemoryEventStore:
    """
    Append-only, in-process event history for one session.

    - Preserves publish order.
    - Readers page through it by ordinal (events strictly after a cursor).
    - Nothing is written to disk; a session's history dies with the process.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._events: list[Event] = []

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def append(self, event: Event) -> None:
        with self._lock:
            if self._events and event.ordinal <= self._events[-1].ordinal:
                raise ValueError(
                    f"out-of-order event: ordinal={event.ordinal} last={self._events[-1].ordinal}"
                )
            self._events.append(event)

    def last_ordinal(self) -> int:
        with self._lock:
            return self._events[-1].ordinal if self._events else 0

    def events_after(self, ordinal: int = 0) -> list[Event]:
        with self._lock:
            return [e for e in self._events if e.ordinal > ordinal]

    def iter_dicts(self, ordinal: int = 0) -> list[dict[str, Any]]:
        return [event_to_dict(e) for e in self.events_after(ordinal)]


def event_to_dict(event: Event) -> dict[str, Any]:
    """
    JSON-ready view of an event.

    - UUID/datetime -> str
    - Enum -> value
    - event_type included even though it is a ClassVar
    """
    d = asdict(event)
    out: dict[str, Any] = {"event_type": event.event_type}
    for k, v in d.items():
        if isinstance(v, Enum):
            out[k] = v.value
        elif k in ("event_id", "timestamp_utc"):
            out[k] = v.isoformat() if k == "timestamp_utc" else str(v)
        else:
            out[k] = v
    return out
