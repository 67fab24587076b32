from __future__ import annotations

from simonsays.core.engine.engine import SequenceEngine
from simonsays.core.engine.listener import ListenerBridge
from simonsays.core.engine.router import EngineRouter
from simonsays.core.engine.signals import ScriptedSignalSource, Signal
from simonsays.core.events.bus import EventBus


class ScreenStub:
    """
    Records what a presentation layer would be asked to do.
    """

    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def on_total_rounds_changed(self, total: int) -> None:
        self.calls.append(("total", total))

    def on_signal_to_display(self, signal: Signal, position: int, round_count: int) -> None:
        self.calls.append(("flash", signal, position, round_count))

    def on_progress_changed(self, current: int, total: int) -> None:
        self.calls.append(("progress", current, total))

    def on_round_started(self, round: int) -> None:
        self.calls.append(("round", round))

    def on_player_lost(self) -> None:
        self.calls.append(("lost",))


def test_listener_sees_full_game_flow() -> None:
    bus = EventBus()
    engine = SequenceEngine(bus=bus, source=ScriptedSignalSource.of("AB"))
    screen = ScreenStub()
    EngineRouter(bus=bus).register([ListenerBridge(listener=screen)])

    engine.start_game()
    engine.submit_action(Signal.A)
    engine.submit_action(Signal.B)

    assert screen.calls == [
        ("total", 1),
        ("progress", 0, 1),
        ("round", 1),
        ("flash", Signal.A, 0, 1),
        ("progress", 1, 1),
        ("total", 2),
        ("progress", 0, 2),
        ("round", 2),
        ("flash", Signal.A, 0, 2),
        ("flash", Signal.B, 1, 2),
        ("lost",),
    ]
