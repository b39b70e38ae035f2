"""Domain event dispatch."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, DefaultDict, Iterable, Mapping

logger = logging.getLogger(__name__)

ROLL_COMPLETED = "roll.completed"
PITY_PERSIST_FAILED = "pity.persist.failed"
PITY_PERSIST_RECOVERED = "pity.persist.recovered"
PITY_PERSIST_EXHAUSTED = "pity.persist.exhausted"

EventPayload = Mapping[str, Any]
EventListener = Callable[[EventPayload], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class Event:
    name: str
    payload: EventPayload


class EventBus:
    """Async pub-sub; monitoring hooks subscribe to the pity.* events."""

    def __init__(self) -> None:
        self._listeners: DefaultDict[str, list[EventListener]] = defaultdict(list)

    def subscribe(self, event_name: str, listener: EventListener) -> None:
        self._listeners[event_name].append(listener)

    def unsubscribe(self, event_name: str, listener: EventListener) -> None:
        listeners = self._listeners.get(event_name)
        if listeners and listener in listeners:
            listeners.remove(listener)

    async def publish(self, event_name: str, payload: EventPayload) -> None:
        """Deliver ``payload`` to every listener; a failing listener is logged and skipped."""
        listeners = list(self._listeners.get(event_name, ()))
        logger.debug("Publishing %s to %s listener(s).", event_name, len(listeners))
        for listener in listeners:
            try:
                await listener(payload)
            except Exception:
                logger.exception("Listener %r failed while handling %s.", listener, event_name)

    def clear(self) -> None:
        self._listeners.clear()

    def listeners(self, event_name: str) -> Iterable[EventListener]:
        return tuple(self._listeners.get(event_name, ()))


class EventRecorder:
    """Listener that keeps every payload it receives, in order."""

    def __init__(self, bus: EventBus, *event_names: str) -> None:
        self.events: list[Event] = []
        for name in event_names:
            bus.subscribe(name, self._make_listener(name))

    def _make_listener(self, name: str) -> EventListener:
        async def listener(payload: EventPayload) -> None:
            self.events.append(Event(name=name, payload=payload))

        return listener

    def names(self) -> list[str]:
        return [event.name for event in self.events]
