"""Placeholder substitution for Typst template sources.

A placeholder is ``{{name}}`` where ``name`` is one or more ASCII word
characters. Substitution is a single regex pass: replacement text is never
rescanned, and placeholders with no value are left in the output verbatim so
partially-filled templates still compile as previews.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date

PLACEHOLDER_RE = re.compile(r"\{\{(\w+)\}\}", re.ASCII)

# Any string that starts with an ISO date ("2024-03-15T10:30:00.000Z")
_ISO_DATE_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})", re.ASCII)


@dataclass(frozen=True)
class TextValue:
    value: str

    def render(self) -> str:
        m = _ISO_DATE_RE.match(self.value)
        return m.group(1) if m else self.value


@dataclass(frozen=True)
class NumberValue:
    value: int | float

    def render(self) -> str:
        if isinstance(self.value, float) and self.value.is_integer():
            return str(int(self.value))
        return str(self.value)


@dataclass(frozen=True)
class BoolValue:
    value: bool

    def render(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True)
class DateValue:
    value: date

    def render(self) -> str:
        return self.value.isoformat()[:10]  # datetimes are truncated, never shifted


Value = TextValue | NumberValue | BoolValue | DateValue


def substitute(source: str, values: Mapping[str, Value | None]) -> str:
    """Replace every ``{{name}}`` in *source* with its rendered value."""

    def _replace(match: re.Match[str]) -> str:
        value = values.get(match.group(1))
        if value is None:
            return match.group(0)
        return value.render()

    return PLACEHOLDER_RE.sub(_replace, source)
