"""Auto-enter decision: should the current entry be committed now?"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

import dataentry.log  # registers TRACE level and logger.trace()
from dataentry.core.regex import build_regex

logger = logging.getLogger(__name__)


class CriteriaLogic(str, Enum):
    OR = "or"
    AND = "and"


class EntryView(Protocol):
    @property
    def raw(self) -> str: ...

    @property
    def formatted(self) -> str: ...


@dataclass(frozen=True)
class AutoEnterConfig:
    by_timeout: bool = False
    timeout: float = 2.5
    by_raw_length: bool = False
    raw_length: int = 4
    by_formatted_length: bool = False
    formatted_length: int = 4
    by_regex: bool = False
    regex: str = "/.*/i"
    logic: CriteriaLogic = CriteriaLogic.OR

    @classmethod
    def from_config(cls, conf: dict) -> "AutoEnterConfig":
        """Build from a validated config dict (see :mod:`dataentry.config`)."""
        return cls(
            by_timeout=conf['auto_time'],
            timeout=conf['timeout'],
            by_raw_length=conf['auto_length_raw'],
            raw_length=conf['enter_length_raw'],
            by_formatted_length=conf['auto_length_formatted'],
            formatted_length=conf['enter_length_formatted'],
            by_regex=conf['auto_regex'],
            regex=conf['enter_regex'],
            logic=CriteriaLogic(conf['criteria_logic']),
        )

    @property
    def any_enabled(self) -> bool:
        return self.by_timeout or self.by_raw_length or self.by_formatted_length or self.by_regex


def should_enter(entry: EntryView, config: AutoEnterConfig, triggered_by_timer: bool) -> bool:
    """Decide whether *entry* should be committed.

    The timeout criterion holds only when this call was caused by the
    inactivity timer firing; elapsed time is never measured here.
    ``entry.formatted`` is only read when the formatted-length criterion is
    enabled and reached.
    """
    if config.logic is CriteriaLogic.OR:
        decision = (
            (config.by_timeout and triggered_by_timer)
            or (config.by_raw_length and len(entry.raw) >= config.raw_length)
            or (config.by_formatted_length and len(entry.formatted) >= config.formatted_length)
            or (config.by_regex and build_regex(config.regex).test(entry.raw))
        )
        return bool(decision)

    if config.logic is CriteriaLogic.AND:
        # any configured but unmet criterion aborts
        if not config.any_enabled:
            return False
        if config.by_timeout and not triggered_by_timer:
            return False
        if config.by_raw_length and len(entry.raw) < config.raw_length:
            return False
        if config.by_formatted_length and len(entry.formatted) < config.formatted_length:
            return False
        if config.by_regex and not build_regex(config.regex).test(entry.raw):
            return False
        return True

    logger.error("Unknown criteria logic: %r", config.logic)
    return False
