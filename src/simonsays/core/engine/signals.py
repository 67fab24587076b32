from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Protocol


class Signal(str, Enum):
    """
    The two cues a player has to reproduce.
    """

    A = "A"
    B = "B"


class SignalSourceExhausted(RuntimeError):
    pass


class SignalSource(Protocol):
    """
    Supplies the next signal appended to a game's sequence.

    Implementations must return A and B with equal probability unless they
    are explicitly scripted (tests, demos).
    """

    def next_signal(self) -> Signal:
        ...


class RandomSignalSource:
    """
    Uniform random signals from a private random.Random.

    seed=None seeds from the wall clock so successive games differ.
    """

    _CHOICES: tuple[Signal, ...] = (Signal.A, Signal.B)

    def __init__(self, *, seed: int | None = None) -> None:
        self._seed = seed if seed is not None else time.time_ns()
        self._rng = random.Random(self._seed)

    @property
    def seed(self) -> int:
        return self._seed

    def next_signal(self) -> Signal:
        return self._rng.choice(self._CHOICES)


@dataclass(slots=True)
class ScriptedSignalSource:
    """
    Deterministic source replaying a fixed list of signals.

    Raises SignalSourceExhausted once the script runs out.
    """

    signals: list[Signal]
    _i: int = field(default=0, init=False)

    @classmethod
    def of(cls, signals: Iterable[Signal | str]) -> "ScriptedSignalSource":
        return cls(signals=[Signal(s) for s in signals])

    @property
    def remaining(self) -> int:
        return len(self.signals) - self._i

    def next_signal(self) -> Signal:
        if self._i >= len(self.signals):
            raise SignalSourceExhausted(f"scripted source exhausted after {len(self.signals)} signals")
        s = self.signals[self._i]
        self._i += 1
        return s
