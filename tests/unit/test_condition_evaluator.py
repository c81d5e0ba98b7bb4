"""Tests for trigger condition evaluation (operators, paths, AND semantics)."""

from datetime import datetime, timezone

import pytest

from app.application.dtos.automation import Condition, parse_conditions
from app.application.services.condition_evaluator import (
    evaluate_conditions,
    evaluate_operator,
    resolve_field,
)

ENTITY = {
    "status": "NEW",
    "score": 72,
    "email": "ada@example.com",
    "tags": ["uk", "masters"],
    "notes": None,
    "created_at": datetime(2025, 1, 15, 9, 30, tzinfo=timezone.utc),
    "metadata": {"campaign": {"code": "SPRING"}},
}


def _c(field: str, operator: str, value=None) -> Condition:
    return Condition(field=field, operator=operator, value=value)


def test_empty_condition_list_passes() -> None:
    assert evaluate_conditions([], ENTITY, {}) is True


def test_unparseable_conditions_fail_closed() -> None:
    assert evaluate_conditions(None, ENTITY, {}) is False
    assert parse_conditions({"field": "status"}) is None
    assert parse_conditions(None) == []


def test_conditions_are_anded() -> None:
    passing = _c("status", "equals", "NEW")
    failing = _c("score", "greater_than", 90)
    assert evaluate_conditions([passing, passing], ENTITY, {}) is True
    assert evaluate_conditions([passing, failing], ENTITY, {}) is False
    assert evaluate_conditions([failing, passing], ENTITY, {}) is False


def test_unknown_operator_evaluates_false() -> None:
    assert evaluate_operator("matches_regex", "NEW", "N.*") is False
    assert evaluate_conditions([_c("status", "approximately", "NEW")], ENTITY, {}) is False


@pytest.mark.parametrize(
    ("operator", "current", "target", "expected"),
    [
        ("equals", "NEW", "NEW", True),
        ("equals", 72, "72", False),
        ("not_equals", "NEW", "CONTACTED", True),
        ("contains", "ada@example.com", "@example", True),
        ("contains", ["uk", "masters"], "uk", True),
        ("contains", None, "x", False),
        ("contains", 2025, "02", False),
        ("contains", 2025, 2, False),
        ("not_contains", ["uk", "masters"], "us", True),
        ("not_contains", None, "x", True),
        ("greater_than", 72, 50, True),
        ("less_than", 72, 50, False),
        ("greater_equal", 72, 72, True),
        ("less_equal", 71, 72, True),
        ("greater_than", "abc", 5, False),
        ("greater_than", None, 5, False),
        ("greater_than", True, 0, False),
        ("in", "NEW", ["NEW", "CONTACTED"], True),
        ("in", "LOST", ["NEW", "CONTACTED"], False),
        ("in", "NEW", "NEW", False),
        ("not_in", "LOST", ["NEW", "CONTACTED"], True),
        ("not_in", "NEW", "not-a-list", False),
    ],
)
def test_operators(operator: str, current, target, expected: bool) -> None:
    assert evaluate_operator(operator, current, target) is expected


def test_exists_and_not_exists_use_presence_and_null() -> None:
    assert evaluate_operator("exists", "x", None, exists=True) is True
    assert evaluate_operator("exists", None, None, exists=True) is False
    assert evaluate_operator("exists", None, None, exists=False) is False
    assert evaluate_operator("not_exists", None, None, exists=False) is True
    assert evaluate_operator("not_exists", None, None, exists=True) is True
    assert evaluate_operator("not_exists", 1, None, exists=True) is False


def test_iso_string_compared_against_datetime_field() -> None:
    assert evaluate_conditions(
        [_c("created_at", "greater_than", "2025-01-01T00:00:00Z")], ENTITY, {}
    )
    assert evaluate_conditions(
        [_c("created_at", "less_than", "2025-01-01T00:00:00+00:00")], ENTITY, {}
    ) is False


def test_data_prefix_reads_event_payload() -> None:
    data = {"previous_status": "NEW", "nested": {"count": 3}}
    assert resolve_field("data.previous_status", ENTITY, data) == (True, "NEW")
    assert resolve_field("data.nested.count", ENTITY, data) == (True, 3)
    assert resolve_field("data.missing", ENTITY, data) == (False, None)
    assert evaluate_conditions(
        [_c("data.previous_status", "equals", "NEW"), _c("status", "equals", "NEW")],
        ENTITY,
        data,
    )


def test_nested_entity_path() -> None:
    assert evaluate_conditions(
        [_c("metadata.campaign.code", "equals", "SPRING")], ENTITY, {}
    )
    assert evaluate_conditions([_c("metadata.campaign.missing", "exists")], ENTITY, {}) is False
    assert evaluate_conditions([_c("notes", "not_exists")], ENTITY, {})
