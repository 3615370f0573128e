"""TimeoutScheduler — single-shot inactivity timer.

The scheduler never starts a thread.  It keeps one deadline and the host
loop calls :meth:`TimeoutScheduler.poll` between input reads (see
``DataEntryApp``), so the fire callback runs serialised with every other
handler.  :meth:`remaining` tells the loop how long it may block.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

import dataentry.log  # registers TRACE level and logger.trace()

logger = logging.getLogger(__name__)


class TimeoutScheduler:
    def __init__(
        self,
        callback: Callable[[], None],
        clock: Callable[[], float] = time.monotonic,
    ):
        self._callback = callback
        self._clock = clock
        self._deadline: float | None = None

    @property
    def pending(self) -> bool:
        return self._deadline is not None

    def restart(self, seconds: float) -> None:
        """Cancel any pending timer and schedule a new one."""
        self._deadline = self._clock() + max(0.0, seconds)
        logger.trace("Timeout armed for %.2fs", seconds)  # type: ignore[attr-defined]

    def cancel(self) -> None:
        """Drop the pending timer; safe to call when none is pending."""
        if self._deadline is not None:
            logger.trace("Timeout cancelled")  # type: ignore[attr-defined]
        self._deadline = None

    def remaining(self) -> float | None:
        """Seconds until the pending timer fires, None if nothing is pending."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - self._clock())

    def poll(self) -> bool:
        """Fire the callback if the deadline has passed.  Returns True if fired."""
        if self._deadline is None or self._clock() < self._deadline:
            return False
        # cleared before the callback so it may re-arm the timer
        self._deadline = None
        logger.debug("Inactivity timeout fired")
        self._callback()
        return True
