from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, DefaultDict, Iterable, TypeAlias

import structlog

from simonsays.core.events.base import Event

log = structlog.get_logger()

EventHandler: TypeAlias = Callable[[Event], None]


@dataclass(frozen=True)
class Subscription:
    """
    Token returned by subscribe(); hand it back to unsubscribe().
    """

    event_type: str
    handler: EventHandler


class EventBus:
    """
    One bus per game session; the SequenceEngine is its only publisher.

    publish() runs every handler for the event's type before returning, in
    the order they subscribed, so all notifications of one engine call are
    delivered before that call returns. A raising handler aborts the
    publish and the exception reaches the engine's caller.
    """

    def __init__(self) -> None:
        self._handlers: DefaultDict[str, list[EventHandler]] = defaultdict(list)

    def subscribe(self, *, event_type: str, handler: EventHandler) -> Subscription:
        if not event_type:
            raise ValueError("event_type must be non-empty")
        self._handlers[event_type].append(handler)
        log.debug("bus.subscribed", event_type=event_type, handler=getattr(handler, "__name__", "handler"))
        return Subscription(event_type=event_type, handler=handler)

    def unsubscribe(self, subscription: Subscription) -> None:
        handlers = self._handlers.get(subscription.event_type, [])
        if subscription.handler not in handlers:
            raise KeyError(f"handler not subscribed to {subscription.event_type!r}")
        handlers.remove(subscription.handler)

    def publish(self, event: Event) -> None:
        # copy: a handler may unsubscribe itself mid-dispatch
        handlers = tuple(self._handlers.get(event.event_type, ()))
        log.debug("bus.publish", event_type=event.event_type, ordinal=event.ordinal, handlers=len(handlers))
        for handler in handlers:
            handler(event)

    def subscribers_for(self, event_type: str) -> Iterable[EventHandler]:
        return tuple(self._handlers.get(event_type, ()))
