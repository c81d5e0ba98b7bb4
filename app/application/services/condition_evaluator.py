"""Trigger condition evaluation.

A condition addresses either the event payload ('data.' prefix) or the
loaded entity (any other path) and compares it with a literal using one of
the ConditionOperator values. Conditions are ANDed and evaluation stops at
the first failure.

Comparison is native Python equality/ordering. The only coercion: an ISO
string compared against a date/datetime field is parsed first. Anything
incomparable evaluates to False.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date, datetime
from typing import Any

from app.application.dtos.automation import Condition
from app.domain.enums import ConditionOperator
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import ensure_utc, parse_iso_datetime

logger = get_logger(__name__)

_DATA_PREFIX = "data."


def resolve_path(source: Any, path: str) -> tuple[bool, Any]:
    """Walk a dot path through nested mappings. Returns (exists, value)."""
    current: Any = source
    for segment in path.split("."):
        if not isinstance(current, Mapping) or segment not in current:
            return False, None
        current = current[segment]
    return True, current


def resolve_field(
    field: str, entity: Mapping[str, Any], data: Mapping[str, Any]
) -> tuple[bool, Any]:
    if field.startswith(_DATA_PREFIX):
        return resolve_path(data, field[len(_DATA_PREFIX):])
    return resolve_path(entity, field)


def _coerce_to(current: Any, target: Any) -> Any:
    """Parse an ISO string target when the field holds a date or datetime."""
    if not isinstance(target, str):
        return target
    if isinstance(current, datetime):
        parsed = parse_iso_datetime(target)
        return parsed if parsed is not None else target
    if isinstance(current, date):
        parsed = parse_iso_datetime(target)
        return parsed.date() if parsed is not None else target
    return target


def _normalize(value: Any) -> Any:
    if isinstance(value, datetime):
        return ensure_utc(value)
    return value


def _contains(current: Any, target: Any) -> bool:
    if isinstance(current, str):
        return isinstance(target, str) and target in current
    if isinstance(current, (list, tuple, set, frozenset, Mapping)):
        try:
            return target in current
        except TypeError:
            return False
    return False


def _ordered(current: Any, target: Any, op: ConditionOperator) -> bool:
    if current is None or target is None:
        return False
    # bool is an int subclass; True > 0 is not a meaningful comparison here
    if isinstance(current, bool) or isinstance(target, bool):
        return False
    try:
        if op is ConditionOperator.GREATER_THAN:
            return current > target
        if op is ConditionOperator.LESS_THAN:
            return current < target
        if op is ConditionOperator.GREATER_EQUAL:
            return current >= target
        return current <= target
    except TypeError:
        return False


def _membership(current: Any, target: Any) -> bool | None:
    """current in target; None when target is not a list."""
    if not isinstance(target, (list, tuple)):
        return None
    return any(current == _normalize(_coerce_to(current, item)) for item in target)


def evaluate_operator(operator: str, current: Any, target: Any, *, exists: bool = True) -> bool:
    """Apply one operator. Unknown operators evaluate to False."""
    try:
        op = ConditionOperator(operator)
    except ValueError:
        logger.warning("Unknown condition operator %r; condition fails", operator)
        return False

    if op is ConditionOperator.EXISTS:
        return exists and current is not None
    if op is ConditionOperator.NOT_EXISTS:
        return not exists or current is None

    current = _normalize(current)
    if op in (ConditionOperator.IN, ConditionOperator.NOT_IN):
        member = _membership(current, target)
        if member is None:
            return False
        return member if op is ConditionOperator.IN else not member

    target = _normalize(_coerce_to(current, target))
    if op is ConditionOperator.EQUALS:
        return current == target
    if op is ConditionOperator.NOT_EQUALS:
        return current != target
    if op is ConditionOperator.CONTAINS:
        return current is not None and _contains(current, target)
    if op is ConditionOperator.NOT_CONTAINS:
        return current is None or not _contains(current, target)
    return _ordered(current, target, op)


def evaluate_condition(
    condition: Condition, entity: Mapping[str, Any], data: Mapping[str, Any]
) -> bool:
    exists, current = resolve_field(condition.field, entity, data)
    return evaluate_operator(condition.operator, current, condition.value, exists=exists)


def evaluate_conditions(
    conditions: Sequence[Condition] | None,
    entity: Mapping[str, Any],
    data: Mapping[str, Any],
) -> bool:
    """AND all conditions, stopping at the first failure.

    An empty list passes. None (conditions that could not be parsed) fails.
    """
    if conditions is None:
        return False
    for condition in conditions:
        if not evaluate_condition(condition, entity, data):
            return False
    return True
