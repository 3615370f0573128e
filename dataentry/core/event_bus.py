"""EventBus — synchronous pub/sub between input, core and presentation."""

from __future__ import annotations

import logging
import time
from collections import defaultdict
from typing import Any, Callable

from dataentry.core.events import Event, EventType

logger = logging.getLogger(__name__)

Handler = Callable[[Event], None]


class EventBus:
    """Lightweight synchronous pub/sub bus.

    Handlers run in the publisher's thread, in subscription order.  A failing
    handler is logged and does not prevent the remaining handlers from running.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._handlers: dict[EventType, list[Handler]] = defaultdict(list)
        self._clock = clock

    def subscribe(self, event_type: EventType, handler: Handler) -> None:
        """Register a handler for an event type."""
        self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: EventType, handler: Handler) -> None:
        """Remove a previously registered handler (no-op if absent)."""
        try:
            self._handlers[event_type].remove(handler)
        except ValueError:
            pass

    def has_subscribers(self, event_type: EventType) -> bool:
        return bool(self._handlers.get(event_type))

    def publish(self, event: Event) -> None:
        """Dispatch event to all registered handlers synchronously."""
        for handler in list(self._handlers.get(event.type, [])):
            try:
                handler(event)
            except Exception:
                logger.exception("EventBus handler error for %s", event.type)

    def emit(self, event_type: EventType, data: Any = None) -> Event:
        """Build a timestamped event, publish it and return it."""
        event = Event(type=event_type, data=data, timestamp=self._clock())
        self.publish(event)
        return event
