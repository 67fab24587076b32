from __future__ import annotations

from threading import RLock
from typing import Optional

import structlog

from simonsays.core.engine.signals import RandomSignalSource, Signal, SignalSource
from simonsays.core.engine.state import GameSnapshot, GameState, GameStatus
from simonsays.core.events.bus import EventBus
from simonsays.core.events.game import (
    PlayerLost,
    ProgressChanged,
    RoundStarted,
    SignalToDisplay,
    TotalRoundsChanged,
)

log = structlog.get_logger()


class SequenceEngine:
    """
    Simon Says game engine.

    Owns the round counter, the growing signal sequence and the player's
    progress pointer. Every public operation runs to completion under one
    reentrant lock and publishes its events synchronously, in a fixed order,
    before returning.

    Event flow per round:
      game.total_rounds_changed -> game.progress_changed(0, round)
      -> game.round_started -> game.signal_to_display x len(sequence)

    Wrong input is a normal outcome (game.player_lost), never an exception.
    """

    def __init__(
        self,
        *,
        bus: EventBus,
        source: Optional[SignalSource] = None,
        state: Optional[GameState] = None,
    ) -> None:
        self._bus = bus
        self._source = source if source is not None else RandomSignalSource()
        self._state = state if state is not None else GameState()
        self._lock = RLock()

    @property
    def bus(self) -> EventBus:
        return self._bus

    @property
    def state(self) -> GameState:
        return self._state

    def snapshot(self) -> GameSnapshot:
        with self._lock:
            return self._state.snapshot()

    # -----------------------
    # Commands
    # -----------------------

    def start_game(self) -> None:
        with self._lock:
            # Draw before reset: an exhausted source must not wipe the running game.
            signal = self._source.next_signal()
            self._state.reset()
            log.info("game.started")
            self._open_round(signal)

    def add_round(self) -> None:
        with self._lock:
            # Draw first: an exhausted source must not leave a half-built round.
            self._open_round(self._source.next_signal())

    def submit_action(self, signal: Signal) -> bool:
        """
        Check one player action against the sequence.

        Returns True when the action matched, False when the player lost.
        """
        signal = Signal(signal)

        with self._lock:
            st = self._state

            if st.status is GameStatus.AWAITING_INPUT and st.expected == signal:
                st.progress_index += 1
                self._bus.publish(
                    ProgressChanged.create(
                        current=st.progress_index,
                        total=st.current_round,
                        ordinal=st.next_ordinal(),
                    )
                )
                if st.round_complete:
                    log.info("game.round_completed", round=st.current_round)
                    self.add_round()
                return True

            # idle stays idle (no game to lose); lost stays lost until start_game
            if st.status is GameStatus.AWAITING_INPUT:
                st.status = GameStatus.LOST
            self._bus.publish(
                PlayerLost.create(
                    round=st.current_round,
                    progress_index=st.progress_index,
                    ordinal=st.next_ordinal(),
                )
            )
            log.info(
                "game.player_lost",
                round=st.current_round,
                progress_index=st.progress_index,
                submitted=signal.value,
            )
            return False

    # -----------------------
    # Helpers
    # -----------------------

    def _open_round(self, signal: Signal) -> None:
        st = self._state

        st.current_round += 1
        st.progress_index = 0
        st.sequence.append(signal)
        st.status = GameStatus.AWAITING_INPUT

        self._bus.publish(TotalRoundsChanged.create(total=st.current_round, ordinal=st.next_ordinal()))
        self._bus.publish(
            ProgressChanged.create(current=st.progress_index, total=st.current_round, ordinal=st.next_ordinal())
        )
        self._bus.publish(RoundStarted.create(round=st.current_round, ordinal=st.next_ordinal()))

        log.info("game.round_started", round=st.current_round, appended=signal.value)

        self._play_sequence()

    def _play_sequence(self) -> None:
        st = self._state
        for position, signal in enumerate(st.sequence):
            self._bus.publish(
                SignalToDisplay.create(
                    signal=signal,
                    position=position,
                    round_count=st.current_round,
                    ordinal=st.next_ordinal(),
                )
            )
