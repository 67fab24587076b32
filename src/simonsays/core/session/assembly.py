from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

import structlog

from simonsays.core.engine.engine import SequenceEngine
from simonsays.core.engine.router import EngineRouter, EventHandler, RouterWiring
from simonsays.core.engine.signals import RandomSignalSource, ScriptedSignalSource, SignalSource
from simonsays.core.events.base import Event
from simonsays.core.events.bus import EventBus
from simonsays.core.events.game import GAME_EVENT_TYPES
from simonsays.core.session.lockout import InputLockout
from simonsays.core.session.manager import SessionInfo
from simonsays.core.session.spec import SessionSpec
from simonsays.storage.memory import InMemoryEventStore

log = structlog.get_logger()


@dataclass(slots=True)
class EventRecorderComponent:
    """
    Append-only recording of every game event, in publish order.
    """
    store: InMemoryEventStore

    event_types: tuple[str, ...] = GAME_EVENT_TYPES

    def subscriptions(self) -> Sequence[tuple[str, EventHandler]]:
        return [(et, self._on_event) for et in self.event_types]

    def _on_event(self, e: Event) -> None:
        self.store.append(e)


@dataclass(frozen=True, slots=True)
class SessionHandle:
    """
    Canonical handle for a wired game session in this process.

    The handle owns the engine; nothing else keeps a reference to it.
    """
    session_id: str
    spec: SessionSpec
    bus: EventBus
    engine: SequenceEngine
    events: InMemoryEventStore
    lockout: InputLockout
    wiring: RouterWiring
    components: tuple[object, ...]


def build_signal_source(spec: SessionSpec) -> SignalSource:
    src = spec.source
    if src.kind == "random":
        return RandomSignalSource(seed=src.seed)
    if src.kind == "scripted":
        return ScriptedSignalSource(signals=list(src.script))
    raise ValueError(f"unknown signal source kind: {src.kind!r}")


def build_session(
    *,
    info: SessionInfo,
    source: SignalSource | None = None,
    extra_components: Iterable[object] = (),
) -> SessionHandle:
    spec = info.spec

    bus = EventBus()
    engine = SequenceEngine(bus=bus, source=source if source is not None else build_signal_source(spec))

    events = InMemoryEventStore()
    recorder = EventRecorderComponent(store=events)
    lockout = InputLockout(enabled=spec.input_lockout)

    # Deterministic chain: recorder sees every event before the gate and any
    # presentation-side listeners.
    components: list[object] = [recorder, lockout]
    components.extend(extra_components)

    wiring = EngineRouter(bus=bus).register(components)

    log.info(
        "session.assembled",
        session_id=info.session_id,
        components=list(wiring.components()),
        input_lockout=spec.input_lockout,
    )

    return SessionHandle(
        session_id=info.session_id,
        spec=spec,
        bus=bus,
        engine=engine,
        events=events,
        lockout=lockout,
        wiring=wiring,
        components=tuple(components),
    )
