"""Formatting pipeline: raw entry -> displayable / exportable string.

The format specification is tried in a fixed order, first match wins:

1. ``/find/replace/flags`` — regular expression substitution
2. a printf-style ``%`` directive, applied with the raw entry as the argument
3. a named transform (see :data:`NAMED_TRANSFORMS`)
4. anything else (including the default ``*``) — identity

Every failure falls back to returning the raw entry unchanged.
"""

from __future__ import annotations

import html
import logging
import re
import shlex
from typing import Callable

import dataentry.log  # registers TRACE level and logger.trace()
from dataentry.core.regex import FLAG_ALPHABET, compile_pattern

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = "*"

# The find part may not end with an escaped slash; ``\/`` inside the
# replacement is turned back into ``/`` at use time.
_SUBSTITUTION = re.compile(r"^/(.+)(?<!\\)/(.*)/([%s]*)$" % FLAG_ALPHABET, re.DOTALL)

# $1, $&, $<name> and $$ in a replacement, rewritten to re templates
_DOLLAR_REFERENCE = re.compile(r"\$(\$|&|\d+|<\w+>)")

_PRINTF_PRESENT = re.compile(r"%.", re.DOTALL)
_PRINTF_DIRECTIVE = re.compile(
    r"%(?:\([^)]*\))?[#0\- +]*(?:\*|\d+)?(?:\.(?:\*|\d+))?[hlL]?(.)", re.DOTALL
)
_INT_CONVERSIONS = set("diouxXc")
_FLOAT_CONVERSIONS = set("eEfFgG")

_CONTROL_ESCAPES = {
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
}
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


# ------------------------------------------------------------------
# Named transforms
# ------------------------------------------------------------------

def escape_control(text: str) -> str:
    """Make control characters visible: ``\\n``, ``\\t``, ``\\x1b`` ..."""
    def _escape(match: re.Match) -> str:
        ch = match.group(0)
        return _CONTROL_ESCAPES.get(ch, "\\x%02x" % ord(ch))
    return _CONTROL_CHARS.sub(_escape, text)


def escape_replacement(text: str) -> str:
    """Escape *text* for literal use as the replacement of a ``/find/replace/`` format."""
    return text.replace("\\", "\\\\").replace("$", "$$")


def escape_html_attr(text: str) -> str:
    return html.escape(text, quote=False).replace('"', "&quot;")


NAMED_TRANSFORMS: dict[str, Callable[[str], str]] = {
    "shellArg": shlex.quote,
    "regExp": re.escape,
    "regExpReplacement": escape_replacement,
    "html": lambda text: html.escape(text, quote=False),
    "htmlAttr": escape_html_attr,
    "htmlSpecialChars": html.escape,
    "control": escape_control,
}


# ------------------------------------------------------------------
# Substitution / printf helpers
# ------------------------------------------------------------------

def _dollar_to_template(match: re.Match) -> str:
    token = match.group(1)
    if token == "$":
        return "$"
    if token == "&":
        return r"\g<0>"
    if token.startswith("<"):
        return r"\g" + token
    return r"\g<%s>" % token


def _apply_substitution(raw: str, find: str, replace: str, flags: str) -> str:
    template = _DOLLAR_REFERENCE.sub(_dollar_to_template, replace.replace("\\/", "/"))
    try:
        matcher = compile_pattern(find, flags)
        return matcher.sub(template, raw)
    except (re.error, ValueError, IndexError) as exc:
        logger.error("Regex formatting failed: %s", exc)
        return raw


def _coerce_argument(raw: str, conversion: str):
    if conversion in _INT_CONVERSIONS:
        if conversion == "c" and len(raw) == 1:
            return raw
        text = raw.strip()
        try:
            return int(text, 10)
        except ValueError:
            return int(float(text))
    if conversion in _FLOAT_CONVERSIONS:
        return float(raw.strip())
    return raw


def _apply_printf(raw: str, spec: str) -> str:
    conversions = [m.group(1) for m in _PRINTF_DIRECTIVE.finditer(spec) if m.group(1) != "%"]
    try:
        if not conversions:
            return spec % ()
        return spec % (_coerce_argument(raw, conversions[0]),)
    except (TypeError, ValueError, OverflowError) as exc:
        logger.error("Printf formatting with %r failed: %s", spec, exc)
        return raw


# ------------------------------------------------------------------
# Public API
# ------------------------------------------------------------------

def format_entry(raw: str, spec: str) -> str:
    """Format *raw* according to *spec* (already variable-interpolated)."""
    spec = spec if spec is not None else DEFAULT_FORMAT

    substitution = _SUBSTITUTION.match(spec)
    if substitution is not None:
        find, replace, flags = substitution.groups()
        return _apply_substitution(raw, find, replace, flags)

    if _PRINTF_PRESENT.search(spec):
        return _apply_printf(raw, spec)

    transform = NAMED_TRANSFORMS.get(spec)
    if transform is not None:
        return transform(raw)

    logger.trace("Format %r is not a transform, using raw entry", spec)  # type: ignore[attr-defined]
    return raw
