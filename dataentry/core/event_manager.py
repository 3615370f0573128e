"""EventManager — receives raw evdev events, publishes key events to the EventBus."""

from __future__ import annotations

import logging

import dataentry.log  # registers TRACE level and logger.trace()
from dataentry.core.event_bus import EventBus
from dataentry.core.events import EventType, KeyEventData

logger = logging.getLogger(__name__)

# EV_KEY type constant (same value as evdev.ecodes.EV_KEY)
EV_KEY = 1

# Mouse buttons report EV_KEY too; they never drive the entry
MOUSE_BUTTONS = {272, 273, 274}  # BTN_LEFT, BTN_RIGHT, BTN_MIDDLE

_VALUE_TO_EVENT = {
    1: EventType.KEY_PRESS,
    0: EventType.KEY_RELEASE,
    2: EventType.KEY_REPEAT,
}


class EventManager:
    """Classifies raw evdev input events and dispatches typed events."""

    def __init__(self, event_bus: EventBus, debug: bool = False):
        self.bus = event_bus
        self.debug = debug

    def handle_raw_event(self, event, device_name: str = "") -> bool:
        """Process a single evdev input event.

        Publishes KEY_PRESS / KEY_RELEASE / KEY_REPEAT for EV_KEY events.
        Returns True if an event was published.
        """
        if getattr(event, "type", None) != EV_KEY:
            return False

        code = event.code
        value = event.value  # 0=release, 1=press, 2=repeat

        if self.debug:
            val_name = {0: 'release', 1: 'press', 2: 'repeat'}.get(value, str(value))
            logger.trace("RawEvent: dev=%s code=%d (%s)", device_name, code, val_name)  # type: ignore[attr-defined]

        if code in MOUSE_BUTTONS:
            return False

        event_type = _VALUE_TO_EVENT.get(value)
        if event_type is None:
            return False

        self.bus.emit(event_type, KeyEventData(code=code, value=value, device_name=device_name))
        return True
