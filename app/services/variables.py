"""Request values → typed substitution values.

This is the trust boundary for user input: the raw JSON bag posted by the
form is checked against the template's variable definitions and turned into
``Value`` objects, so substitution never has to guess at types.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any

from app.exceptions import ValidationFailed
from app.schemas.template import VariableDefinition
from app.services.substitution import BoolValue, DateValue, NumberValue, TextValue, Value

_DATE_PREFIX_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})", re.ASCII)


def _is_missing(raw: Any) -> bool:
    return raw is None or (isinstance(raw, str) and raw.strip() == "")


def infer_value(raw: Any) -> Value:
    """Pick a Value variant from the Python type of *raw*."""
    # bool is a subclass of int
    if isinstance(raw, bool):
        return BoolValue(raw)
    if isinstance(raw, (int, float)):
        return NumberValue(raw)
    if isinstance(raw, datetime):
        return DateValue(raw.date())
    if isinstance(raw, date):
        return DateValue(raw)
    if isinstance(raw, str):
        return TextValue(raw)
    raise ValueError(f"unsupported value of type {type(raw).__name__}")


def _to_number(raw: Any) -> NumberValue:
    if isinstance(raw, bool):
        raise ValueError("must be a number")
    if isinstance(raw, (int, float)):
        return NumberValue(raw)
    if isinstance(raw, str):
        try:
            return NumberValue(int(raw))
        except ValueError:
            pass
        try:
            return NumberValue(float(raw))
        except ValueError:
            raise ValueError("must be a valid number") from None
    raise ValueError("must be a number")


def _to_bool(raw: Any) -> BoolValue:
    if isinstance(raw, bool):
        return BoolValue(raw)
    if isinstance(raw, str) and raw.lower() in ("true", "false"):
        return BoolValue(raw.lower() == "true")
    raise ValueError("must be true or false")


def _to_date(raw: Any) -> DateValue:
    if isinstance(raw, datetime):
        return DateValue(raw.date())
    if isinstance(raw, date):
        return DateValue(raw)
    if isinstance(raw, str):
        m = _DATE_PREFIX_RE.match(raw.strip())
        if m:
            try:
                return DateValue(date.fromisoformat(m.group(1)))
            except ValueError:
                pass
    raise ValueError("must be a date (YYYY-MM-DD)")


def coerce_value(definition: VariableDefinition, raw: Any) -> Value:
    """Convert one raw value according to its definition's type."""
    match definition.type:
        case "number":
            return _to_number(raw)
        case "boolean":
            return _to_bool(raw)
        case "date":
            return _to_date(raw)
        case "select":
            if not isinstance(raw, str) or raw not in (definition.options or []):
                raise ValueError(f"must be one of: {', '.join(definition.options or [])}")
            return TextValue(raw)
        case _:
            return infer_value(raw)


def parse_values(
    definitions: Iterable[VariableDefinition],
    raw_values: Mapping[str, Any],
    *,
    enforce_required: bool = True,
) -> dict[str, Value]:
    """Validate *raw_values* against *definitions* and return typed values.

    Missing values fall back to the definition's default. Names with no
    definition are still accepted and typed by inference, so placeholders
    added to the source ahead of the schema keep working.

    Raises:
        ValidationFailed: with one message per offending field.
    """
    values: dict[str, Value] = {}
    errors: list[str] = []
    defined: set[str] = set()

    for definition in definitions:
        defined.add(definition.name)
        raw = raw_values.get(definition.name)
        if raw is None:
            raw = definition.default_value
        if _is_missing(raw):
            if enforce_required and definition.required:
                errors.append(f"{definition.label} is required")
            elif raw is not None:
                # An explicitly blanked field clears its placeholder
                values[definition.name] = TextValue("")
            continue
        try:
            values[definition.name] = coerce_value(definition, raw)
        except ValueError as exc:
            errors.append(f"{definition.label} {exc}")

    for name, raw in raw_values.items():
        if name in defined or raw is None:
            continue
        try:
            values[name] = infer_value(raw)
        except ValueError as exc:
            errors.append(f"{name}: {exc}")

    if errors:
        raise ValidationFailed(errors)
    return values
