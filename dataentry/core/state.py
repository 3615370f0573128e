"""EntryState and the read-only snapshot handed to presentation layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from dataentry.core.entry_buffer import EntryBuffer


@dataclass(frozen=True)
class EntrySnapshot:
    raw: str
    formatted: str
    cursor: str
    cursor_position: int
    raw_length: int
    formatted_length: int
    last: str
    last_length: int
    second_last: str
    counter: int

    def as_variables(self) -> dict:
        """Values under the variable names used in format strings."""
        return {
            'entry_raw': self.raw,
            'entry_formatted': self.formatted,
            'entry_cursor': self.cursor,
            'entry_cursor_position': self.cursor_position,
            'entry_raw_length': self.raw_length,
            'entry_last': self.last,
            'entry_last_length': self.last_length,
            'entry_second_last': self.second_last,
            'entrycounter': self.counter,
        }


@dataclass
class EntryState:
    """Current entry, history and commit counter.

    ``formatted`` is derived on every read through *formatter*; it is never
    stored, so it cannot go stale or be set independently.
    """

    buffer: EntryBuffer = field(default_factory=EntryBuffer)
    formatter: Callable[[str], str] = field(default=lambda raw: raw, repr=False)
    last: str = ""
    second_last: str = ""
    counter: int = 0

    @property
    def raw(self) -> str:
        return self.buffer.raw

    @property
    def formatted(self) -> str:
        return self.formatter(self.buffer.raw)

    def push_history(self, value: str) -> None:
        self.second_last = self.last
        self.last = value

    def variables(self, cursor_glyph: str = "|") -> dict:
        """Entry variables for interpolation (``entry_formatted`` excluded)."""
        return {
            'entry_raw': self.buffer.raw,
            'entry_cursor': self.buffer.display(cursor_glyph),
            'entry_cursor_position': self.buffer.cursor,
            'entry_raw_length': len(self.buffer),
            'entry_last': self.last,
            'entry_last_length': len(self.last),
            'entry_second_last': self.second_last,
            'entrycounter': self.counter,
        }

    def snapshot(self, cursor_glyph: str = "|") -> EntrySnapshot:
        formatted = self.formatted
        return EntrySnapshot(
            raw=self.buffer.raw,
            formatted=formatted,
            cursor=self.buffer.display(cursor_glyph),
            cursor_position=self.buffer.cursor,
            raw_length=len(self.buffer),
            formatted_length=len(formatted),
            last=self.last,
            last_length=len(self.last),
            second_last=self.second_last,
            counter=self.counter,
        )
