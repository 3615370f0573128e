"""Build matchers from ``/pattern/flags`` strings.

Auto-enter and formatting patterns are written the way users know them from
JavaScript: ``/^\\d{4}$/``, ``/abc/i``.  A pattern that does not have this
shape, or that Python's :mod:`re` refuses to compile, produces
:data:`NEVER_MATCH` so a broken setting can never trigger an automatic enter.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

FLAG_ALPHABET = "gmiyusvd"

_SHAPE = re.compile(r"^/(.+)/([%s]*)$" % FLAG_ALPHABET, re.DOTALL)

# JS flags with a Python counterpart; g/y are handled by the caller,
# u/v/d have no effect on Python str patterns.
_RE_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
}


@dataclass(frozen=True)
class Matcher:
    """Compiled pattern plus the JS flags that change how it is applied."""

    pattern: re.Pattern
    is_global: bool = False
    sticky: bool = False

    def test(self, text: str) -> bool:
        if self.sticky:
            return self.pattern.match(text) is not None
        return self.pattern.search(text) is not None

    def sub(self, repl: str, text: str) -> str:
        """Replace the first match (all matches for ``g``) with *repl*."""
        if self.sticky:
            match = self.pattern.match(text)
            if match is None:
                return text
            return text[:match.start()] + match.expand(repl) + text[match.end():]
        return self.pattern.sub(repl, text, count=0 if self.is_global else 1)


# Negative lookahead on the empty string: fails everywhere, including "".
NEVER_MATCH = Matcher(re.compile(r"(?!)"))


def compile_pattern(source: str, flags: str) -> Matcher:
    """Compile *source* with JS-style *flags*.

    Raises ``re.error`` when the pattern is invalid and ``ValueError`` for
    an unknown flag.
    """
    re_flags = 0
    for flag in flags:
        if flag not in FLAG_ALPHABET:
            raise ValueError(f"Unknown regular expression flag {flag!r}")
        re_flags |= _RE_FLAGS.get(flag, 0)
    return Matcher(
        pattern=re.compile(source, re_flags),
        is_global="g" in flags,
        sticky="y" in flags,
    )


def build_regex(text: str) -> Matcher:
    """Return a matcher for ``/pattern/flags``; never raises."""
    parts = _SHAPE.match(text or "")
    if parts is None:
        logger.warning("Not a regular expression (expected /pattern/flags): %r", text)
        return NEVER_MATCH
    try:
        return compile_pattern(parts.group(1), parts.group(2))
    except (re.error, ValueError) as exc:
        logger.error('Cannot compile regular expression from "%s", %s', text, exc)
        return NEVER_MATCH
