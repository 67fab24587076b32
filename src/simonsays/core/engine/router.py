from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Protocol, Sequence

import structlog

from simonsays.core.events.base import Event
from simonsays.core.events.bus import EventBus, Subscription

log = structlog.get_logger()

EventHandler = Callable[[Event], None]


class EventComponent(Protocol):
    """
    Anything that listens to a session's game events: recorders, the input
    gate, presentation bridges.
    """

    def subscriptions(self) -> Sequence[tuple[str, EventHandler]]:
        ...


@dataclass(frozen=True, slots=True)
class WiredSubscription:
    component: str
    subscription: Subscription


@dataclass(frozen=True, slots=True)
class RouterWiring:
    """
    What a session ended up listening with, in dispatch order.
    """

    subscriptions: tuple[WiredSubscription, ...]

    def components(self) -> tuple[str, ...]:
        seen: dict[str, None] = {}
        for w in self.subscriptions:
            seen.setdefault(w.component, None)
        return tuple(seen)

    def handlers_for(self, event_type: str) -> tuple[str, ...]:
        return tuple(w.component for w in self.subscriptions if w.subscription.event_type == event_type)


class EngineRouter:
    """
    Attaches listening components to a session's EventBus.

    Components listed first hear each game event first, so a recorder
    placed ahead of the input gate has already stored game.round_started
    when the gate closes. A handler may be attached to a given event type
    only once.
    """

    def __init__(self, *, bus: EventBus) -> None:
        self._bus = bus

    def register(self, components: Iterable[EventComponent]) -> RouterWiring:
        wired: list[WiredSubscription] = []
        attached: set[tuple[str, int]] = set()

        for component in components:
            cname = type(component).__name__

            subs = component.subscriptions()
            if not isinstance(subs, Sequence):
                raise TypeError(f"{cname}.subscriptions() must return a Sequence")

            for event_type, handler in subs:
                if not event_type:
                    raise ValueError(f"{cname} produced empty event_type")

                key = (event_type, id(handler))
                if key in attached:
                    raise RuntimeError(f"duplicate subscription detected: component={cname} event_type={event_type}")
                attached.add(key)

                wired.append(
                    WiredSubscription(
                        component=cname,
                        subscription=self._bus.subscribe(event_type=event_type, handler=handler),
                    )
                )

        wiring = RouterWiring(subscriptions=tuple(wired))
        log.debug("router.wired", components=list(wiring.components()), subscriptions=len(wired))
        return wiring
