"""Control actions and the dispatcher that maps controls to them.

A *control* is anything the host can press: an evdev keycode, an
on-screen button, a remote command.  Each control id is bound to a
:class:`ControlBinding`: a primary action plus alternate actions chosen
when a modifier slot is effective (e.g. slot 0 = Shift turns ``1`` into
``!``).
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Hashable, Mapping

import dataentry.log  # registers TRACE level and logger.trace()
from dataentry.core import commit
from dataentry.core.entry_buffer import EntryBuffer
from dataentry.core.events import EventType, ModifierEventData

if TYPE_CHECKING:
    from dataentry.core.context import EntryContext
    from dataentry.core.modifiers import ModifierTracker

logger = logging.getLogger(__name__)


class ControlAction(ABC):
    """What a control does.  Implementations receive the context explicitly."""

    #: modifier actions do not consume one-time latches and are not repeated
    is_modifier = False

    @abstractmethod
    def perform(self, ctx: "EntryContext", control_id: Hashable) -> None:
        """Control pressed."""

    def release(self, ctx: "EntryContext", control_id: Hashable) -> None:
        """Control let go (most actions ignore this)."""


# ------------------------------------------------------------------
# Buffer editing
# ------------------------------------------------------------------

class BufferAction(ControlAction):
    """Edits the entry buffer; a real change goes through ``entry_changed``."""

    @abstractmethod
    def apply(self, buffer: EntryBuffer) -> None:
        """Mutate *buffer*."""

    def perform(self, ctx: "EntryContext", control_id: Hashable) -> None:
        buffer = ctx.state.buffer
        before = (buffer.raw, buffer.cursor)
        self.apply(buffer)
        if (buffer.raw, buffer.cursor) == before:
            logger.trace("%r changed nothing", self)  # type: ignore[attr-defined]
            return
        commit.entry_changed(ctx)


@dataclass(frozen=True)
class TypeText(BufferAction):
    text: str

    def apply(self, buffer: EntryBuffer) -> None:
        buffer.type_text(self.text)


@dataclass(frozen=True)
class SetEntry(BufferAction):
    text: str

    def apply(self, buffer: EntryBuffer) -> None:
        buffer.set_text(self.text)


@dataclass(frozen=True)
class Backspace(BufferAction):
    def apply(self, buffer: EntryBuffer) -> None:
        buffer.backspace()


@dataclass(frozen=True)
class DeleteForward(BufferAction):
    def apply(self, buffer: EntryBuffer) -> None:
        buffer.delete_forward()


@dataclass(frozen=True)
class MoveCursor(BufferAction):
    delta: int

    def apply(self, buffer: EntryBuffer) -> None:
        buffer.move_cursor(self.delta)


@dataclass(frozen=True)
class CursorHome(BufferAction):
    def apply(self, buffer: EntryBuffer) -> None:
        buffer.set_cursor(0)


@dataclass(frozen=True)
class CursorEnd(BufferAction):
    def apply(self, buffer: EntryBuffer) -> None:
        buffer.set_cursor(len(buffer))


@dataclass(frozen=True)
class ClearEntry(BufferAction):
    def apply(self, buffer: EntryBuffer) -> None:
        buffer.clear()


# ------------------------------------------------------------------
# Commit
# ------------------------------------------------------------------

@dataclass(frozen=True)
class Enter(ControlAction):
    """Manual enter; *copy* overrides the configured copy mode."""

    copy: str | None = None

    def perform(self, ctx: "EntryContext", control_id: Hashable) -> None:
        commit.enter(ctx, self.copy)


# ------------------------------------------------------------------
# Modifiers
# ------------------------------------------------------------------

class ModifierMode(str, Enum):
    HOLD = "hold"           # effective while the control is held down
    TOGGLE = "toggle"       # press to latch, press again to release
    ONETIME = "onetime"     # effective for the next non-modifier press only


def _publish_modifier(ctx: "EntryContext", slot: int, control_id: Hashable | None = None) -> None:
    state = ctx.modifiers[slot]
    ctx.bus.emit(
        EventType.MODIFIER_CHANGED,
        ModifierEventData(slot=slot, effective=state.effective, onetime=state.onetime, control_id=control_id),
    )


@dataclass(frozen=True)
class ModifierAction(ControlAction):
    slot: int
    mode: ModifierMode = ModifierMode.HOLD

    is_modifier = True

    def __post_init__(self) -> None:
        object.__setattr__(self, 'mode', ModifierMode(self.mode))

    def perform(self, ctx: "EntryContext", control_id: Hashable) -> None:
        mods = ctx.modifiers
        if self.mode is ModifierMode.HOLD:
            mods.hold(self.slot, control_id)
        elif self.mode is ModifierMode.TOGGLE:
            mods.toggle(self.slot)
        else:
            if mods[self.slot].effective and mods[self.slot].onetime:
                mods.release(self.slot)
            else:
                mods.latch(self.slot, onetime=True)
        logger.debug("Modifier %d %s → %s", self.slot, self.mode.value, mods)
        _publish_modifier(ctx, self.slot, control_id)

    def release(self, ctx: "EntryContext", control_id: Hashable) -> None:
        if self.mode is ModifierMode.HOLD and ctx.modifiers.unhold(self.slot, control_id):
            logger.debug("Modifier %d released → %s", self.slot, ctx.modifiers)
            _publish_modifier(ctx, self.slot, control_id)


@dataclass(frozen=True)
class ReleaseModifier(ControlAction):
    slot: int

    is_modifier = True

    def perform(self, ctx: "EntryContext", control_id: Hashable) -> None:
        ctx.modifiers.release(self.slot)
        _publish_modifier(ctx, self.slot, control_id)


# ------------------------------------------------------------------
# Bindings and dispatch
# ------------------------------------------------------------------

@dataclass(frozen=True)
class ControlBinding:
    action: ControlAction
    alternates: Mapping[int, ControlAction] = field(default_factory=dict)

    def resolve(self, modifiers: "ModifierTracker") -> tuple[ControlAction, int | None]:
        """Action for the current modifier state and the slot that selected it."""
        for slot in modifiers.effective_slots():
            alternate = self.alternates.get(slot)
            if alternate is not None:
                return alternate, slot
        return self.action, None


class ControlDispatcher:
    """Routes control presses to actions bound in a keymap."""

    def __init__(self, ctx: "EntryContext", bindings: Mapping[Hashable, ControlBinding] | None = None):
        self.ctx = ctx
        self._bindings: dict[Hashable, ControlBinding] = dict(bindings or {})
        # action performed at press time, so release reaches the same action
        self._pressed: dict[Hashable, ControlAction] = {}

    def bind(self, control_id: Hashable, binding: ControlBinding | ControlAction) -> None:
        if isinstance(binding, ControlAction):
            binding = ControlBinding(binding)
        self._bindings[control_id] = binding

    def unbind(self, control_id: Hashable) -> None:
        self._bindings.pop(control_id, None)

    def binding(self, control_id: Hashable) -> ControlBinding | None:
        return self._bindings.get(control_id)

    def __contains__(self, control_id: Hashable) -> bool:
        return control_id in self._bindings

    def on_control_pressed(self, control_id: Hashable, modifier_slot: int | None = None) -> bool:
        """Handle a press.

        With *modifier_slot* the control toggles that slot regardless of
        its binding.  Returns False for an unbound control.
        """
        if modifier_slot is not None:
            action: ControlAction = ModifierAction(modifier_slot, ModifierMode.TOGGLE)
        else:
            binding = self._bindings.get(control_id)
            if binding is None:
                logger.trace("Control %r is not bound", control_id)  # type: ignore[attr-defined]
                return False
            action, slot = binding.resolve(self.ctx.modifiers)
            if slot is not None:
                logger.debug("Control %r → alternate of slot %d: %r", control_id, slot, action)

        self._pressed[control_id] = action
        action.perform(self.ctx, control_id)
        if not action.is_modifier:
            self._consume_onetime(control_id)
        return True

    def on_control_repeated(self, control_id: Hashable) -> bool:
        """Auto-repeat: repeat the press unless the control is a modifier."""
        action = self._pressed.get(control_id)
        if action is None or action.is_modifier:
            return False
        action.perform(self.ctx, control_id)
        return True

    def on_control_released(self, control_id: Hashable) -> None:
        action = self._pressed.pop(control_id, None)
        if action is not None:
            action.release(self.ctx, control_id)

    def release_all(self) -> None:
        """Forget pressed controls and release every modifier slot."""
        self._pressed.clear()
        self.ctx.modifiers.release_all()
        for slot in range(len(self.ctx.modifiers)):
            _publish_modifier(self.ctx, slot)

    def _consume_onetime(self, control_id: Hashable) -> None:
        for index, slot in enumerate(self.ctx.modifiers):
            if slot.effective and slot.onetime:
                self.ctx.modifiers.release(index)
                _publish_modifier(self.ctx, index, control_id)
