# src/simonsays/core/events/game.py
from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from simonsays.core.engine.signals import Signal
from simonsays.core.events.base import Event


@dataclass(frozen=True, slots=True)
class TotalRoundsChanged(Event):
    """
    The round counter moved (emitted once per new round).
    """
    event_type: ClassVar[str] = "game.total_rounds_changed"

    total: int


@dataclass(frozen=True, slots=True)
class ProgressChanged(Event):
    """
    Player progress within the current round.

    Also emitted with current=0 at the start of every round.
    """
    event_type: ClassVar[str] = "game.progress_changed"

    current: int
    total: int


@dataclass(frozen=True, slots=True)
class RoundStarted(Event):
    event_type: ClassVar[str] = "game.round_started"

    round: int


@dataclass(frozen=True, slots=True)
class SignalToDisplay(Event):
    """
    One step of the sequence replay.

    position/round_count let the presentation layer space the replay out;
    the engine emits every step immediately.
    """
    event_type: ClassVar[str] = "game.signal_to_display"

    signal: Signal
    position: int
    round_count: int


@dataclass(frozen=True, slots=True)
class PlayerLost(Event):
    event_type: ClassVar[str] = "game.player_lost"

    round: int
    progress_index: int


GAME_EVENT_TYPES: tuple[str, ...] = (
    TotalRoundsChanged.event_type,
    ProgressChanged.event_type,
    RoundStarted.event_type,
    SignalToDisplay.event_type,
    PlayerLost.event_type,
)
