"""Modifier latch slots (shift-like keys that change what other keys do).

The tracker only records state.  Which action a keypress performs while a
slot is effective, and when a one-time latch is consumed, is decided by the
caller (see :mod:`dataentry.core.actions`).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Hashable, Iterator

logger = logging.getLogger(__name__)

SLOT_COUNT = 3


@dataclass
class ModifierSlot:
    effective: bool = False
    onetime: bool = False
    held_controls: set = field(default_factory=set)

    def release(self) -> None:
        """Drop all holders and reset both flags."""
        self.held_controls.clear()
        self.effective = False
        self.onetime = False


class ModifierTracker:
    """Three independent :class:`ModifierSlot` instances, indexed 0-2."""

    def __init__(self, count: int = SLOT_COUNT):
        self._slots = [ModifierSlot() for _ in range(count)]

    def __getitem__(self, index: int) -> ModifierSlot:
        return self._slots[index]

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self) -> Iterator[ModifierSlot]:
        return iter(self._slots)

    def is_effective(self, index: int) -> bool:
        return self._slots[index].effective

    def hold(self, index: int, control_id: Hashable) -> None:
        """*control_id* is pressed and keeps the slot active while held."""
        slot = self._slots[index]
        slot.held_controls.add(control_id)
        slot.effective = True

    def unhold(self, index: int, control_id: Hashable) -> bool:
        """*control_id* let go; the slot is released when no holder remains.

        Returns True if the slot was released.
        """
        slot = self._slots[index]
        if control_id not in slot.held_controls:
            return False
        slot.held_controls.discard(control_id)
        if slot.held_controls:
            return False
        slot.release()
        return True

    def latch(self, index: int, onetime: bool = False) -> None:
        slot = self._slots[index]
        slot.effective = True
        slot.onetime = onetime

    def toggle(self, index: int) -> bool:
        """Latch the slot, or release it if already effective.  Returns new state."""
        slot = self._slots[index]
        if slot.effective:
            slot.release()
        else:
            slot.effective = True
        return slot.effective

    def release(self, index: int) -> None:
        self._slots[index].release()

    def release_all(self) -> None:
        for slot in self._slots:
            slot.release()

    def effective_slots(self) -> list[int]:
        return [i for i, slot in enumerate(self._slots) if slot.effective]

    def __repr__(self) -> str:
        flags = "".join(
            ("1" if s.onetime else "E") if s.effective else "-" for s in self._slots
        )
        return f"ModifierTracker({flags})"
