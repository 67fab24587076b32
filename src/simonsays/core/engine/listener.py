from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

from simonsays.core.engine.signals import Signal
from simonsays.core.events.base import Event
from simonsays.core.events.game import (
    PlayerLost,
    ProgressChanged,
    RoundStarted,
    SignalToDisplay,
    TotalRoundsChanged,
)
from simonsays.core.engine.router import EventHandler


class GameListener(Protocol):
    """
    Presentation-side observer of a SequenceEngine, one method per event kind.
    """

    def on_total_rounds_changed(self, total: int) -> None:
        ...

    def on_signal_to_display(self, signal: Signal, position: int, round_count: int) -> None:
        ...

    def on_progress_changed(self, current: int, total: int) -> None:
        ...

    def on_round_started(self, round: int) -> None:
        ...

    def on_player_lost(self) -> None:
        ...


@dataclass(slots=True)
class ListenerBridge:
    """
    EventBus component that forwards game events to a GameListener.

    Register it with EngineRouter like any other component.
    """

    listener: GameListener

    def subscriptions(self) -> Sequence[tuple[str, EventHandler]]:
        return [
            (TotalRoundsChanged.event_type, self._on_total_rounds),
            (ProgressChanged.event_type, self._on_progress),
            (RoundStarted.event_type, self._on_round_started),
            (SignalToDisplay.event_type, self._on_signal),
            (PlayerLost.event_type, self._on_lost),
        ]

    def _on_total_rounds(self, e: Event) -> None:
        if isinstance(e, TotalRoundsChanged):
            self.listener.on_total_rounds_changed(e.total)

    def _on_progress(self, e: Event) -> None:
        if isinstance(e, ProgressChanged):
            self.listener.on_progress_changed(e.current, e.total)

    def _on_round_started(self, e: Event) -> None:
        if isinstance(e, RoundStarted):
            self.listener.on_round_started(e.round)

    def _on_signal(self, e: Event) -> None:
        if isinstance(e, SignalToDisplay):
            self.listener.on_signal_to_display(e.signal, e.position, e.round_count)

    def _on_lost(self, e: Event) -> None:
        if isinstance(e, PlayerLost):
            self.listener.on_player_lost()
