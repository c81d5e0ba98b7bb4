"""Tests for pure domain rules: execution tally and alert severity mapping."""

import pytest

from app.domain.entities.alert import (
    application_deadline_severity,
    notification_priority_for,
    notification_type_for,
    overdue_task_severity,
)
from app.domain.entities.execution import ExecutionTally
from app.domain.enums import AlertSeverity, NotificationType, Priority
from app.shared.enums import ExecutionStatus


def test_tally_all_successful_is_completed() -> None:
    tally = ExecutionTally()
    tally.record_success("SEND_EMAIL", email_id="e1")
    tally.record_success("CREATE_TASK", task_id="t1")
    assert tally.status is ExecutionStatus.COMPLETED
    assert (tally.success_count, tally.error_count, tally.total) == (2, 0, 2)
    assert tally.log[0] == {"action": "SEND_EMAIL", "status": "success", "email_id": "e1"}


def test_tally_with_failures_is_partial() -> None:
    tally = ExecutionTally()
    tally.record_success("SEND_EMAIL")
    tally.record_failure("WEBHOOK", "503 Service Unavailable")
    tally.record_failure("CREATE_TASK", "assignee missing")
    assert tally.status is ExecutionStatus.PARTIAL
    assert (tally.success_count, tally.error_count) == (1, 2)
    assert [entry["status"] for entry in tally.log] == ["success", "failed", "failed"]


def test_tally_all_failed_is_still_partial() -> None:
    tally = ExecutionTally()
    tally.record_failure("SEND_SMS", "boom")
    assert tally.status is ExecutionStatus.PARTIAL


def test_skip_counts_as_success() -> None:
    tally = ExecutionTally()
    tally.record_skip("SEND_SMS", "recipient has no phone number")
    assert tally.success_count == 1
    assert tally.error_count == 0
    assert tally.status is ExecutionStatus.COMPLETED
    assert tally.log == [
        {"action": "SEND_SMS", "status": "skipped", "reason": "recipient has no phone number"}
    ]


@pytest.mark.parametrize(
    ("days", "expected"),
    [
        (0, AlertSeverity.LOW),
        (1, AlertSeverity.MEDIUM),
        (2, AlertSeverity.MEDIUM),
        (3, AlertSeverity.HIGH),
        (6, AlertSeverity.HIGH),
        (7, AlertSeverity.CRITICAL),
        (30, AlertSeverity.CRITICAL),
    ],
)
def test_overdue_task_severity(days: int, expected: AlertSeverity) -> None:
    assert overdue_task_severity(days) is expected


@pytest.mark.parametrize(
    ("days", "expected"),
    [(0, AlertSeverity.HIGH), (3, AlertSeverity.HIGH), (4, AlertSeverity.MEDIUM)],
)
def test_application_deadline_severity(days: int, expected: AlertSeverity) -> None:
    assert application_deadline_severity(days) is expected


def test_notification_mapping_for_severity() -> None:
    assert notification_type_for(AlertSeverity.CRITICAL) is NotificationType.ERROR
    assert notification_type_for(AlertSeverity.HIGH) is NotificationType.WARNING
    assert notification_type_for(AlertSeverity.LOW) is NotificationType.INFO
    assert notification_priority_for(AlertSeverity.CRITICAL) is Priority.URGENT
    assert notification_priority_for(AlertSeverity.HIGH) is Priority.HIGH
    assert notification_priority_for(AlertSeverity.MEDIUM) is Priority.MEDIUM
