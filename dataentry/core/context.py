"""EntryContext — the explicitly owned state of one data-entry instance.

Create it with :func:`init_context`, change settings with
:func:`reconfigure`, dispose of it with :func:`teardown_context`.  Every
action and commit function receives the context as its first argument.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from dataentry.config import EntryConfig
from dataentry.core import commit
from dataentry.core.entry_buffer import EntryBuffer
from dataentry.core.event_bus import EventBus
from dataentry.core.events import EventType
from dataentry.core.formatter import format_entry
from dataentry.core.interpolate import Interpolator, interpolate_variables
from dataentry.core.modifiers import ModifierTracker
from dataentry.core.state import EntrySnapshot, EntryState
from dataentry.core.timeout import TimeoutScheduler

logger = logging.getLogger(__name__)


class EntryContext:
    """Entry state, modifiers, timer and configuration of one instance.

    *interpolate* expands variables in the format string before it is
    applied; by default the entry's own variables (``$(entry_last)`` ...)
    are available.
    """

    def __init__(
        self,
        config: EntryConfig,
        bus: EventBus,
        interpolate: Interpolator | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config
        self.bus = bus
        self._interpolate = interpolate
        self.state = EntryState(
            buffer=EntryBuffer(config.max_length),
            formatter=self.format,
        )
        self.modifiers = ModifierTracker()
        self.scheduler = TimeoutScheduler(lambda: commit.on_timeout(self), clock=clock)
        self.closed = False

    def interpolate(self, text: str) -> str:
        if self._interpolate is not None:
            return self._interpolate(text)
        return interpolate_variables(text, self.state.variables(self.config.cursor))

    def format(self, raw: str) -> str:
        """Format *raw* with the configured (interpolated) format string."""
        return format_entry(raw, self.interpolate(self.config.format))

    @property
    def buffer(self) -> EntryBuffer:
        return self.state.buffer

    def snapshot(self) -> EntrySnapshot:
        return self.state.snapshot(self.config.cursor)

    def __repr__(self) -> str:
        return f"EntryContext(buffer={self.state.buffer!r}, counter={self.state.counter}, modifiers={self.modifiers!r})"


def init_context(
    config: EntryConfig | dict | None = None,
    bus: EventBus | None = None,
    interpolate: Interpolator | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> EntryContext:
    """Create a context with an empty entry and released modifiers."""
    if not isinstance(config, EntryConfig):
        config = EntryConfig.from_dict(config)
    ctx = EntryContext(config, bus or EventBus(), interpolate=interpolate, clock=clock)
    logger.debug("Entry context initialised (max_length=%d)", config.max_length)
    return ctx


def reconfigure(ctx: EntryContext, config: EntryConfig | dict) -> None:
    """Swap the configuration.

    The pending timer is cancelled first; it is re-armed by the next
    buffer mutation, not here.  A smaller ``max_length`` truncates the
    current entry immediately.
    """
    ctx.scheduler.cancel()
    if not isinstance(config, EntryConfig):
        config = EntryConfig.from_dict(config)
    ctx.config = config
    ctx.state.buffer.truncate(config.max_length)
    # cursor glyph and format may have changed: observers re-render
    ctx.bus.emit(EventType.ENTRY_CHANGED, ctx.state.buffer.raw)
    logger.info("Configuration applied")


def teardown_context(ctx: EntryContext) -> None:
    """Cancel the timer and stop accepting mutations.  Idempotent."""
    ctx.scheduler.cancel()
    ctx.closed = True
    logger.debug("Entry context torn down")
