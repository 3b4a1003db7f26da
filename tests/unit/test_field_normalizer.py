"""Tests for form field normalisation (accepted payload shapes, coercion, rejection)."""

import json

import pytest

from formdesk.application.services.field_normalizer import (
    InvalidField,
    ValidField,
    normalize_field,
    normalize_fields,
    valid_fields,
)
from formdesk.domain.exceptions import ValidationException

ENTRY = {"id": "age", "type": "number", "label": "Age", "min": "18", "maxLength": "3.0"}


def test_normalize_field_coerces_constraints() -> None:
    result = normalize_field(ENTRY)
    assert isinstance(result, ValidField)
    field = result.field
    assert field.id == "age"
    assert field.min == 18
    assert field.max is None
    assert field.max_length == 3
    assert field.required is False


def test_normalize_field_accepts_kind_and_json_entry() -> None:
    result = normalize_field(json.dumps({"id": 7, "kind": "select", "options": ["a", 1]}))
    assert isinstance(result, ValidField)
    assert result.field.id == "7"
    assert result.field.type == "select"
    assert result.field.options == ("a", "1")


def test_unparseable_numbers_are_dropped() -> None:
    result = normalize_field({"id": "x", "type": "number", "min": "abc", "max": "inf"})
    assert isinstance(result, ValidField)
    assert result.field.min is None
    assert result.field.max is None


@pytest.mark.parametrize(
    ("raw", "reason"),
    [
        ({"type": "text"}, "missing id"),
        ({"id": "a"}, "missing type"),
        ({"id": " ", "type": "text"}, "missing id"),
        ("{not json", "entry is not valid JSON"),
        (42, "entry is not an object"),
    ],
)
def test_invalid_entries(raw, reason) -> None:
    assert normalize_field(raw) == InvalidField(reason)


@pytest.mark.parametrize(
    "payload",
    [
        [ENTRY],
        json.dumps([ENTRY]),
        [json.dumps([ENTRY])],
        [json.dumps(ENTRY)],
    ],
)
def test_accepted_payload_shapes(payload) -> None:
    results = normalize_fields(payload)
    assert [r.field.id for r in results if isinstance(r, ValidField)] == ["age"]


def test_valid_fields_drops_invalid_entries() -> None:
    fields = valid_fields([ENTRY, {"label": "no id"}])
    assert [f.id for f in fields] == ["age"]


def test_valid_fields_none_means_no_fields() -> None:
    assert valid_fields(None) == []
    with pytest.raises(ValidationException):
        valid_fields(None, require_one=True)


def test_valid_fields_all_invalid_raises_with_reasons() -> None:
    with pytest.raises(ValidationException) as exc_info:
        valid_fields([{"id": "a"}, {"type": "text"}])
    assert exc_info.value.details["reasons"] == ["missing id", "missing type"]


def test_valid_fields_empty_list_allowed_unless_required() -> None:
    assert valid_fields([]) == []
    with pytest.raises(ValidationException):
        valid_fields([], require_one=True)


def test_bad_json_payload_raises() -> None:
    with pytest.raises(ValidationException) as exc_info:
        valid_fields("[oops")
    assert exc_info.value.message == "Invalid fields JSON"
    with pytest.raises(ValidationException):
        valid_fields({"id": "a"})
