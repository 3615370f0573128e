"""EntryBuffer: raw entry text plus cursor.

Positions are character indices into ``raw``; the cursor sits *between*
characters, so ``0 <= cursor <= len(raw)``.  Every insert enforces
``max_length`` by dropping characters from the end of the entry.
"""

from __future__ import annotations

import logging

import dataentry.log  # registers TRACE level and logger.trace()

logger = logging.getLogger(__name__)

DEFAULT_MAX_LENGTH = 1024


class EntryBuffer:
    def __init__(self, max_length: int = DEFAULT_MAX_LENGTH):
        if max_length < 1:
            raise ValueError(f"max_length must be >= 1, got {max_length}")
        self.max_length = max_length
        self._raw = ""
        self._cursor = 0

    @property
    def raw(self) -> str:
        return self._raw

    @property
    def cursor(self) -> int:
        return self._cursor

    def __len__(self) -> int:
        return len(self._raw)

    def _clamp(self, position: int) -> int:
        return max(0, min(position, len(self._raw)))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def insert_at(self, position: int, text: str) -> None:
        """Insert *text* at *position*, then truncate to ``max_length``."""
        if not text:
            return
        position = self._clamp(position)
        self._raw = self._raw[:position] + text + self._raw[position:]
        if position <= self._cursor:
            self._cursor += len(text)
        self.truncate()
        logger.trace("Buffer +%r@%d → %r cursor=%d", text, position, self._raw, self._cursor)  # type: ignore[attr-defined]

    def delete_at(self, position: int, count: int = 1) -> str:
        """Delete up to *count* characters starting at *position*.

        Returns the removed text.
        """
        position = self._clamp(position)
        end = self._clamp(position + max(0, count))
        removed = self._raw[position:end]
        if not removed:
            return ""
        self._raw = self._raw[:position] + self._raw[end:]
        if self._cursor > position:
            self._cursor -= min(len(removed), self._cursor - position)
        logger.trace("Buffer -%r@%d → %r cursor=%d", removed, position, self._raw, self._cursor)  # type: ignore[attr-defined]
        return removed

    def type_text(self, text: str) -> None:
        """Insert at the cursor, like typing."""
        self.insert_at(self._cursor, text)

    def backspace(self) -> str:
        if self._cursor == 0:
            return ""
        return self.delete_at(self._cursor - 1, 1)

    def delete_forward(self) -> str:
        return self.delete_at(self._cursor, 1)

    def set_text(self, text: str) -> None:
        """Replace the entry; cursor goes to the end."""
        self._raw = text or ""
        self._cursor = len(self._raw)
        self.truncate()

    def clear(self) -> None:
        self._raw = ""
        self._cursor = 0

    def truncate(self, max_length: int | None = None) -> int:
        """Enforce the length limit (optionally changing it).

        Returns the number of characters dropped from the end.
        """
        if max_length is not None:
            if max_length < 1:
                raise ValueError(f"max_length must be >= 1, got {max_length}")
            self.max_length = max_length
        overflow = len(self._raw) - self.max_length
        if overflow <= 0:
            return 0
        self._raw = self._raw[:self.max_length]
        self._cursor = self._clamp(self._cursor)
        logger.debug("Entry truncated to %d characters (%d dropped)", self.max_length, overflow)
        return overflow

    # ------------------------------------------------------------------
    # Cursor
    # ------------------------------------------------------------------

    def move_cursor(self, delta: int) -> int:
        self._cursor = self._clamp(self._cursor + delta)
        return self._cursor

    def set_cursor(self, position: int) -> int:
        self._cursor = self._clamp(position)
        return self._cursor

    # ------------------------------------------------------------------
    # Projections
    # ------------------------------------------------------------------

    def display(self, glyph: str = "|") -> str:
        """Raw entry with *glyph* inserted at the cursor."""
        return self._raw[:self._cursor] + glyph + self._raw[self._cursor:]

    def __repr__(self) -> str:
        return f"EntryBuffer(raw={self._raw!r}, cursor={self._cursor}, max_length={self.max_length})"
