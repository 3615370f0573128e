"""Device filtering: decide which evdev devices may feed the entry."""

from __future__ import annotations

from typing import Iterable

# Name fragments that identify devices to exclude
EXCLUDE_NAME_FRAGMENTS = [
    "virtual",
    "uinput",
    "dataentry",
]


def should_include_device(device_name: str, only: Iterable[str] | None = None) -> bool:
    """Return True if the device should be monitored.

    With *only*, the device name must contain one of the given fragments
    (case-insensitive), e.g. to listen to a dedicated USB keypad.
    """
    lower = device_name.lower()
    if any(fragment in lower for fragment in EXCLUDE_NAME_FRAGMENTS):
        return False
    if only:
        return any(fragment.lower() in lower for fragment in only)
    return True
