from __future__ import annotations

from dataclasses import dataclass, field
from threading import Lock
from typing import Sequence

import structlog

from simonsays.core.engine.router import EventHandler
from simonsays.core.events.base import Event
from simonsays.core.events.game import RoundStarted

log = structlog.get_logger()


class InputLocked(RuntimeError):
    pass


@dataclass(slots=True)
class InputLockout:
    """
    Boundary gate that keeps player actions out while a replay is on screen.

    - game.round_started locks input
    - release() (the presentation layer finished its replay) unlocks it

    The engine itself never waits; only callers that go through check()
    are gated. With enabled=False the gate never closes.
    """
    enabled: bool = True
    _locked: bool = field(default=False, init=False)
    _lock: Lock = field(default_factory=Lock, init=False)

    @property
    def locked(self) -> bool:
        with self._lock:
            return self.enabled and self._locked

    def subscriptions(self) -> Sequence[tuple[str, EventHandler]]:
        return [(RoundStarted.event_type, self._on_round_started)]

    def release(self) -> None:
        with self._lock:
            self._locked = False

    def check(self) -> None:
        if self.locked:
            raise InputLocked("input is locked until the replay is acknowledged")

    def _on_round_started(self, e: Event) -> None:
        with self._lock:
            self._locked = True
        if self.enabled and isinstance(e, RoundStarted):
            log.debug("lockout.engaged", round=e.round)
