"""
``{{variable}}`` placeholder extraction and substitution.

A placeholder is ``{{`` + name + ``}}`` where the name contains neither
``{{`` nor ``}}``. Surrounding whitespace inside the braces is ignored, so
``{{ topic }}`` and ``{{topic}}`` name the same variable. Names are
case-sensitive. Empty placeholders (``{{}}``, ``{{  }}``) are not variables.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

_PLACEHOLDER = re.compile(r"\{\{((?:(?!\{\{|\}\}).)*?)\}\}", re.DOTALL)


def extract_variables(body: str) -> list[str]:
    """
    Return placeholder names in order of first occurrence.

    Repeats are ignored, so the result has no duplicates. Calling this on the
    same body always gives the same list.
    """
    seen: dict[str, None] = {}
    for match in _PLACEHOLDER.finditer(body or ""):
        name = match.group(1).strip()
        if name and name not in seen:
            seen[name] = None
    return list(seen)


def substitute(body: str, values: Mapping[str, str]) -> str:
    """
    Replace every placeholder whose name is in ``values``.

    Placeholders without a value are left as-is so that a partially filled
    template stays visibly incomplete. Replacement is a single pass: text
    coming from ``values`` is never itself substituted.
    """

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1).strip()
        if name and name in values:
            return str(values[name])
        return match.group(0)

    return _PLACEHOLDER.sub(_replace, body or "")


def missing_variables(body: str, values: Mapping[str, str | None]) -> list[str]:
    """Names from ``body`` whose value is absent or blank, in extraction order."""
    return [
        name
        for name in extract_variables(body)
        if values.get(name) is None or not str(values.get(name)).strip()
    ]
