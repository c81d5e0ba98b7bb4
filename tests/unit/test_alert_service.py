"""AlertService sweeps with mocked repositories: dedupe, owners, severities."""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from app.application.dtos.alert import AlertDraft
from app.core.config import Settings
from app.domain.enums import AlertCheck, AlertSeverity, AlertType, RecipientType
from app.domain.exceptions import ResourceNotFoundException
from app.infrastructure.services.alert_service import AlertService

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


def _assign_id(prefix: str):
    counter = iter(range(1, 100))

    def _assign(row):
        row.id = f"{prefix}_{next(counter)}"
        return row

    return _assign


@pytest.fixture
def service() -> AlertService:
    repos = {
        name: AsyncMock()
        for name in (
            "alert_repo",
            "notification_repo",
            "user_repo",
            "student_repo",
            "lead_repo",
            "task_repo",
            "appointment_repo",
            "document_repo",
            "application_repo",
        )
    }
    repos["alert_repo"].create.side_effect = _assign_id("alr")
    repos["alert_repo"].update.side_effect = lambda row: row
    repos["alert_repo"].find_unresolved.return_value = None
    repos["notification_repo"].create.side_effect = _assign_id("ntf")
    return AlertService(
        settings=Settings(database_url="postgresql+asyncpg://x@localhost/test"),
        **repos,
    )


def _task(task_id: str, days_overdue: int, **owner):
    return SimpleNamespace(
        id=task_id,
        title=f"Follow up {task_id}",
        due_date=NOW - timedelta(days=days_overdue, hours=1),
        assigned_to=owner.get("assigned_to"),
        student_id=owner.get("student_id"),
        lead_id=owner.get("lead_id"),
    )


async def test_overdue_tasks_create_alert_and_notification(service) -> None:
    service.task_repo.find_overdue.return_value = [
        _task("task_1", 8, assigned_to="usr_1"),
        _task("task_2", 0, student_id="stu_1"),
    ]

    result = await service.run_check("agency_1", AlertCheck.OVERDUE_TASKS, now=NOW)

    assert (result.scanned, result.created) == (2, 2)
    assert result.alert_ids == ["alr_1", "alr_2"]
    first = service.alert_repo.create.await_args_list[0].args[0]
    assert first.severity == AlertSeverity.CRITICAL.value
    assert first.recipient_type == RecipientType.USER.value
    assert first.entity_type == "TASK"
    assert first.action_required is True
    assert first.extra_data["daysOverdue"] == 8
    second = service.alert_repo.create.await_args_list[1].args[0]
    assert second.severity == AlertSeverity.LOW.value
    assert second.recipient_id == "stu_1"
    notification = service.notification_repo.create.await_args_list[0].args[0]
    assert notification.priority == "URGENT"
    assert notification.notification_type == "ERROR"
    assert notification.data["alert_id"] == "alr_1"


async def test_sweep_skips_entities_with_unresolved_alert(service) -> None:
    service.task_repo.find_overdue.return_value = [_task("task_1", 2, assigned_to="usr_1")]
    service.alert_repo.find_unresolved.return_value = SimpleNamespace(id="alr_old")

    result = await service.run_check("agency_1", AlertCheck.OVERDUE_TASKS, now=NOW)

    assert (result.scanned, result.created) == (1, 0)
    service.alert_repo.lock_for_entity.assert_awaited_once_with(
        "agency_1", AlertType.TASK_OVERDUE.value, "task_1"
    )
    service.alert_repo.create.assert_not_awaited()


async def test_ownerless_rows_are_ignored(service) -> None:
    service.task_repo.find_overdue.return_value = [_task("task_1", 3)]
    result = await service.run_check("agency_1", AlertCheck.OVERDUE_TASKS, now=NOW)
    assert (result.scanned, result.created) == (0, 0)


async def test_documents_expired_and_expiring(service) -> None:
    service.document_repo.find_expiring_before.return_value = [
        SimpleNamespace(id="doc_1", name="Passport", student_id="stu_1", expires_at=NOW - timedelta(days=1)),
        SimpleNamespace(id="doc_2", name="Visa", student_id="stu_1", expires_at=NOW + timedelta(days=4, hours=2)),
        SimpleNamespace(id="doc_3", name="Orphan", student_id=None, expires_at=NOW - timedelta(days=1)),
    ]

    result = await service.run_check("agency_1", AlertCheck.EXPIRED_DOCUMENTS, now=NOW)

    assert result.created == 2
    expired, expiring = (c.args[0] for c in service.alert_repo.create.await_args_list)
    assert (expired.alert_type, expired.severity) == ("DOCUMENT_EXPIRED", "HIGH")
    assert (expiring.alert_type, expiring.severity) == ("DOCUMENT_EXPIRING", "MEDIUM")
    assert expiring.message == 'Document "Visa" expires in 5 days'


async def test_application_deadlines(service) -> None:
    service.application_repo.find_deadlines_between.return_value = [
        SimpleNamespace(
            id="app_1",
            student_id="stu_1",
            university_name="Uni",
            program="MSc",
            deadline=NOW + timedelta(days=2),
        ),
    ]
    result = await service.run_check("agency_1", AlertCheck.APPLICATION_DEADLINES, now=NOW)
    assert result.created == 1
    alert = service.alert_repo.create.await_args.args[0]
    assert alert.severity == "HIGH"
    assert alert.message == "Application to Uni deadline is in 2 days"


async def test_missed_appointments_use_configured_window(service) -> None:
    service.appointment_repo.find_started_between.return_value = []
    await service.run_check("agency_1", AlertCheck.MISSED_APPOINTMENTS, now=NOW)
    agency_id, start, end, _ = service.appointment_repo.find_started_between.await_args.args
    assert agency_id == "agency_1"
    assert end - start == timedelta(minutes=60)


async def test_create_alert_requires_recipient_in_agency(service) -> None:
    service.student_repo.get_by_id_and_agency.return_value = None
    draft = AlertDraft(
        alert_type=AlertType.CAMPAIGN_INACTIVE,
        title="Check in",
        message="Call the student",
        severity=AlertSeverity.LOW,
        recipient_id="stu_x",
        recipient_type=RecipientType.STUDENT,
    )
    with pytest.raises(ResourceNotFoundException):
        await service.create_alert("agency_1", draft)
    service.alert_repo.create.assert_not_awaited()


async def test_resolve_alert_is_idempotent(service) -> None:
    resolved_at = NOW - timedelta(hours=1)
    alert = SimpleNamespace(id="alr_1", resolved_at=resolved_at)
    service.alert_repo.get_by_id_and_agency.return_value = alert
    result = await service.resolve_alert("agency_1", "alr_1")
    assert result.resolved_at == resolved_at
    service.alert_repo.update.assert_not_awaited()
