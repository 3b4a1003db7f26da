"""Normalise client-supplied form field definitions.

Clients send fields in several shapes: a list of objects, a JSON string of
such a list, a one-element list holding that JSON string, or a list whose
entries are themselves JSON-encoded objects. normalize_field maps one raw
entry to ValidField or InvalidField; nothing here raises except the top-level
helpers that decide what an unusable payload means for a request.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any, TypeAlias

from formdesk.application.dtos.form import FieldDefinition
from formdesk.domain.exceptions import ValidationException

# (stored name, accepted client spellings)
_NUMERIC_CONSTRAINTS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("min", ("min",)),
    ("max", ("max",)),
    ("min_length", ("min_length", "minLength")),
    ("max_length", ("max_length", "maxLength")),
)
_TEXT_CONSTRAINTS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("min_date", ("min_date", "minDate")),
    ("max_date", ("max_date", "maxDate")),
    ("pattern", ("pattern",)),
)


@dataclass(frozen=True)
class ValidField:
    field: FieldDefinition


@dataclass(frozen=True)
class InvalidField:
    reason: str


NormalizedField: TypeAlias = ValidField | InvalidField


def _first(entry: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = entry.get(key)
        if value is not None and value != "":
            return value
    return None


def _to_number(value: Any) -> float | int | None:
    """Coerce to a finite number; unparseable values become None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = value
    else:
        try:
            number = float(str(value).strip())
        except ValueError:
            return None
    if not math.isfinite(number):
        return None
    if isinstance(number, float) and number.is_integer():
        return int(number)
    return number


def normalize_field(raw: Any) -> NormalizedField:
    """Map one raw field entry to ValidField or InvalidField(reason)."""
    entry = raw
    if isinstance(entry, str):
        try:
            entry = json.loads(entry)
        except json.JSONDecodeError:
            return InvalidField("entry is not valid JSON")
    if not isinstance(entry, dict):
        return InvalidField("entry is not an object")

    field_id = entry.get("id")
    field_type = entry.get("type") or entry.get("kind")
    if field_id is None or str(field_id).strip() == "":
        return InvalidField("missing id")
    if not field_type or not str(field_type).strip():
        return InvalidField("missing type")

    options = entry.get("options")
    numeric = {
        name: _to_number(_first(entry, keys)) for name, keys in _NUMERIC_CONSTRAINTS
    }
    for name in ("min_length", "max_length"):
        if numeric[name] is not None:
            numeric[name] = int(numeric[name])
    text = {}
    for name, keys in _TEXT_CONSTRAINTS:
        value = _first(entry, keys)
        text[name] = str(value) if value is not None else None

    return ValidField(
        FieldDefinition(
            id=str(field_id).strip(),
            type=str(field_type).strip(),
            label=str(entry.get("label") or ""),
            placeholder=str(entry.get("placeholder") or ""),
            required=entry.get("required") is True,
            default_value=_first(entry, ("default_value", "defaultValue")),
            options=tuple(str(o) for o in options) if isinstance(options, list) else (),
            **numeric,
            **text,
        )
    )


def unwrap_fields_payload(raw: Any) -> list[Any]:
    """Turn the accepted payload shapes into a list of raw entries.

    Raises:
        ValidationException: JSON string that does not parse, or not a list.
    """
    payload = raw
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError:
            raise ValidationException("Invalid fields JSON", field="fields") from None
    if isinstance(payload, list) and len(payload) == 1 and isinstance(payload[0], str):
        try:
            inner = json.loads(payload[0])
        except json.JSONDecodeError:
            inner = None
        if isinstance(inner, list):
            payload = inner
    if not isinstance(payload, list):
        raise ValidationException("Fields array is required", field="fields")
    return payload


def normalize_fields(raw: Any) -> list[NormalizedField]:
    return [normalize_field(entry) for entry in unwrap_fields_payload(raw)]


def valid_fields(raw: Any, *, require_one: bool = False) -> list[FieldDefinition]:
    """Return the valid field definitions from a request payload.

    raw None means "no fields supplied" and yields []. Supplied entries that
    are all invalid raise, as does an empty result when require_one is set.

    Raises:
        ValidationException: Unusable payload or no valid field.
    """
    if raw is None:
        if require_one:
            raise ValidationException("Fields array is required", field="fields")
        return []
    results = normalize_fields(raw)
    fields = [r.field for r in results if isinstance(r, ValidField)]
    if not fields and (results or require_one):
        reasons = sorted({r.reason for r in results if isinstance(r, InvalidField)})
        raise ValidationException(
            "At least one valid field is required",
            field="fields",
            details={"reasons": reasons} if reasons else None,
        )
    return fields
