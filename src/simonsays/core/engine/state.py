from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from simonsays.core.engine.signals import Signal


class GameStatus(str, Enum):
    IDLE = "idle"
    AWAITING_INPUT = "awaiting_input"
    LOST = "lost"


@dataclass(slots=True)
class GameState:
    """
    Mutable state of one game, owned by a SequenceEngine.

    - current_round: rounds started since the last reset
    - sequence: every signal generated this game (append-only per round)
    - progress_index: next position in `sequence` the player must match
    - ordinal: monotonic counter used to number published events; it is
      never reset so event numbering stays unique for the engine's lifetime

    Guardrails:
      - 0 <= progress_index <= len(sequence)
      - len(sequence) == current_round once a round has been added
    """

    current_round: int = 0
    sequence: list[Signal] = field(default_factory=list)
    progress_index: int = 0
    status: GameStatus = GameStatus.IDLE
    ordinal: int = 0

    @property
    def expected(self) -> Signal | None:
        """Signal the player has to submit next, or None if nothing is pending."""
        if self.progress_index < len(self.sequence):
            return self.sequence[self.progress_index]
        return None

    @property
    def round_complete(self) -> bool:
        return len(self.sequence) > 0 and self.progress_index == len(self.sequence)

    def reset(self) -> None:
        self.current_round = 0
        self.sequence.clear()
        self.progress_index = 0
        self.status = GameStatus.IDLE

    def next_ordinal(self) -> int:
        self.ordinal += 1
        return self.ordinal

    def snapshot(self) -> "GameSnapshot":
        return GameSnapshot(
            current_round=self.current_round,
            sequence=tuple(self.sequence),
            progress_index=self.progress_index,
            status=self.status,
        )


@dataclass(frozen=True, slots=True)
class GameSnapshot:
    """
    Immutable copy of GameState for readers outside the engine lock.
    """

    current_round: int
    sequence: tuple[Signal, ...]
    progress_index: int
    status: GameStatus
