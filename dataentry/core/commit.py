"""Entry commit controller and the mutation → auto-enter data flow.

    control action ──► entry_changed() ──► restart timer
                                     └──► check_enter(timer=False) ──► enter()
    timer poll ──────► on_timeout() ────► check_enter(timer=True)  ──► enter()

All functions take the owning :class:`~dataentry.core.context.EntryContext`
explicitly.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

import dataentry.log  # registers TRACE level and logger.trace()
from dataentry.core.auto_enter import should_enter
from dataentry.core.events import CommitEventData, EventType

if TYPE_CHECKING:
    from dataentry.core.context import EntryContext

logger = logging.getLogger(__name__)


class CopyMode(str, Enum):
    RAW = "raw"
    FORMATTED = "formatted"
    NONE = "none"       # count the entry, copy nothing, keep the buffer


def _select_value(ctx: "EntryContext", copy: str) -> str | None:
    if copy == CopyMode.RAW:
        return ctx.state.raw
    if copy == CopyMode.FORMATTED:
        return ctx.state.formatted
    if copy != CopyMode.NONE:
        logger.error("copy data unknown: %r", copy)
    return None


def enter(ctx: "EntryContext", copy: str | None = None) -> CommitEventData:
    """Commit the current entry.

    *copy* overrides the configured ``copy_data``.  An unknown mode leaves
    ``last``/``second_last`` untouched but the counter is still incremented
    and the buffer is still cleared when ``after == "clear"``.
    """
    ctx.scheduler.cancel()
    if copy is None:
        copy = ctx.config.copy_data
    copy = str(copy.value if isinstance(copy, CopyMode) else copy)

    state = ctx.state
    value = _select_value(ctx, copy)
    if value is not None:
        state.push_history(value)

    # counted even when an unknown mode produced no value
    state.counter += 1
    logger.info("Entry #%d committed (%s): %r", state.counter, copy, value)

    if copy != CopyMode.NONE and ctx.config.after == "clear":
        state.buffer.clear()

    data = CommitEventData(value=value, copy=copy, counter=state.counter)
    ctx.bus.emit(EventType.ENTRY_COMMITTED, data)
    return data


def check_enter(ctx: "EntryContext", triggered_by_timer: bool = False) -> bool:
    """Run the auto-enter evaluator and commit if it agrees."""
    if not should_enter(ctx.state, ctx.config.auto_enter, triggered_by_timer):
        return False
    logger.debug("Automatic enter (timer=%s)", triggered_by_timer)
    enter(ctx)
    return True


def on_timeout(ctx: "EntryContext") -> bool:
    """Inactivity timer callback."""
    return check_enter(ctx, triggered_by_timer=True)


def entry_changed(ctx: "EntryContext") -> bool:
    """Call after every buffer mutation.

    Restarts the inactivity timer, notifies observers and evaluates the
    inline auto-enter criteria.  Returns True if the entry was committed.
    """
    if ctx.closed:
        logger.debug("Entry changed after teardown, ignored")
        return False
    ctx.scheduler.restart(ctx.config.auto_enter.timeout)
    ctx.bus.emit(EventType.ENTRY_CHANGED, ctx.state.buffer.raw)
    return check_enter(ctx, triggered_by_timer=False)
