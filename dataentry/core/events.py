"""Typed event definitions (dataclasses)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Hashable


class EventType(Enum):
    # Raw input events
    KEY_PRESS = auto()
    KEY_RELEASE = auto()
    KEY_REPEAT = auto()
    # Entry lifecycle
    ENTRY_CHANGED = auto()
    ENTRY_COMMITTED = auto()
    MODIFIER_CHANGED = auto()
    # Config
    CONFIG_CHANGED = auto()
    # App lifecycle
    APP_QUIT = auto()


@dataclass
class Event:
    type: EventType
    data: Any
    timestamp: float


@dataclass
class KeyEventData:
    code: int
    value: int          # 0=release, 1=press, 2=repeat
    device_name: str = ""


@dataclass
class CommitEventData:
    value: str | None   # None when history was left untouched
    copy: str
    counter: int


@dataclass
class ModifierEventData:
    slot: int
    effective: bool
    onetime: bool
    control_id: Hashable | None = None
