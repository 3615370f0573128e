"""``$(name)`` variable interpolation for format specifications."""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Mapping

import dataentry.log  # registers TRACE level and logger.trace()

logger = logging.getLogger(__name__)

Interpolator = Callable[[str], str]

_VARIABLE = re.compile(r"\$\(([A-Za-z0-9_:.\-]+)\)")


def interpolate_variables(text: str, variables: Mapping[str, Any]) -> str:
    """Replace ``$(name)`` tokens with ``str(variables[name])``.

    Unknown names are left in place so a typo stays visible in the output.
    """
    if not text or "$(" not in text:
        return text

    def _lookup(match: re.Match) -> str:
        name = match.group(1)
        if name not in variables:
            logger.trace("Unknown variable $(%s) left as is", name)  # type: ignore[attr-defined]
            return match.group(0)
        return str(variables[name])

    return _VARIABLE.sub(_lookup, text)
