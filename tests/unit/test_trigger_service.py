"""TriggerService unit tests: validation and schedule bookkeeping with mocked repos."""

from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from app.application.dtos.automation import (
    Condition,
    IntervalSchedule,
    TriggerDefinition,
    parse_action,
)
from app.domain.enums import IntervalUnit, TriggerEventType, TriggerType
from app.domain.exceptions import ResourceNotFoundException, ValidationException
from app.infrastructure.persistence.models.automation import AutomationTrigger
from app.infrastructure.services import trigger_service as trigger_service_module
from app.infrastructure.services.trigger_service import TriggerService

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


def _assign_id(row):
    row.id = "trg_1"
    return row


@pytest.fixture
def service(monkeypatch) -> TriggerService:
    monkeypatch.setattr(trigger_service_module, "utc_now", lambda: NOW)
    trigger_repo = AsyncMock()
    trigger_repo.create.side_effect = _assign_id
    trigger_repo.update.side_effect = lambda row: row
    scheduled_repo = AsyncMock()
    scheduled_repo.cancel_pending.return_value = 0
    return TriggerService(
        trigger_repo=trigger_repo,
        execution_repo=AsyncMock(),
        scheduled_repo=scheduled_repo,
        workflow_repo=AsyncMock(),
    )


def _definition(**overrides) -> TriggerDefinition:
    values = {
        "name": "Welcome new leads",
        "trigger_type": TriggerType.EVENT_BASED,
        "event_type": TriggerEventType.LEAD_CREATED,
        "actions": [parse_action({"type": "SEND_EMAIL", "subject": "Hi {{first_name}}"})],
        "conditions": [Condition(field="source", operator="equals", value="web")],
    }
    values.update(overrides)
    return TriggerDefinition(**values)


def _stored(**overrides) -> AutomationTrigger:
    values = {
        "id": "trg_1",
        "agency_id": "agency_1",
        "name": "Daily digest",
        "trigger_type": TriggerType.TIME_BASED.value,
        "event_type": TriggerEventType.LEAD_CREATED.value,
        "conditions": [],
        "actions": [{"type": "CUSTOM", "name": "digest"}],
        "schedule": {"type": "INTERVAL", "interval": 1, "unit": "DAYS"},
        "is_active": True,
        "priority": 50,
    }
    values.update(overrides)
    return AutomationTrigger(**values)


async def test_create_event_trigger_stores_json_and_queues_nothing(service) -> None:
    trigger = await service.create_trigger("agency_1", _definition())

    assert trigger.id == "trg_1"
    assert trigger.trigger_type == "EVENT_BASED"
    assert trigger.event_type == "LEAD_CREATED"
    assert trigger.conditions == [{"field": "source", "operator": "equals", "value": "web"}]
    assert trigger.actions[0]["type"] == "SEND_EMAIL"
    assert trigger.actions[0]["subject"] == "Hi {{first_name}}"
    assert trigger.schedule is None
    service.scheduled_repo.create.assert_not_awaited()


async def test_create_time_based_trigger_queues_first_run(service) -> None:
    schedule = IntervalSchedule(interval=2, unit=IntervalUnit.HOURS)
    await service.create_trigger(
        "agency_1", _definition(trigger_type=TriggerType.TIME_BASED, schedule=schedule)
    )

    queued = service.scheduled_repo.create.await_args.args[0]
    assert queued.trigger_id == "trg_1"
    assert queued.agency_id == "agency_1"
    assert queued.status == "SCHEDULED"
    assert queued.scheduled_for == datetime(2025, 3, 10, 14, 0, tzinfo=timezone.utc)
    assert queued.schedule == {"type": "INTERVAL", "interval": 2, "unit": "HOURS"}


async def test_inactive_time_based_trigger_is_not_queued(service) -> None:
    schedule = IntervalSchedule(interval=1, unit=IntervalUnit.DAYS)
    await service.create_trigger(
        "agency_1",
        _definition(trigger_type=TriggerType.TIME_BASED, schedule=schedule, is_active=False),
    )
    service.scheduled_repo.create.assert_not_awaited()


async def test_time_based_without_schedule_rejected(service) -> None:
    with pytest.raises(ValidationException) as exc_info:
        await service.create_trigger("agency_1", _definition(trigger_type=TriggerType.TIME_BASED))
    assert exc_info.value.details == {"field": "schedule"}
    service.trigger_repo.create.assert_not_awaited()


async def test_trigger_without_actions_rejected(service) -> None:
    with pytest.raises(ValidationException):
        await service.create_trigger("agency_1", _definition(actions=[]))


async def test_unknown_workflow_rejected(service) -> None:
    service.workflow_repo.get_by_id_and_agency.return_value = None
    with pytest.raises(ResourceNotFoundException):
        await service.create_trigger("agency_1", _definition(workflow_id="wf_other"))
    service.workflow_repo.get_by_id_and_agency.assert_awaited_once_with("wf_other", "agency_1")


async def test_get_trigger_outside_agency_is_not_found(service) -> None:
    service.trigger_repo.get_by_id_and_agency.return_value = None
    with pytest.raises(ResourceNotFoundException):
        await service.get_trigger("agency_1", "trg_404")


async def test_update_without_schedule_fields_keeps_queue(service) -> None:
    service.trigger_repo.get_by_id_and_agency.return_value = _stored()
    trigger = await service.update_trigger(
        "agency_1", "trg_1", {"name": "Renamed", "metadata": {"team": "ops"}, "id": "hijack"}
    )
    assert trigger.name == "Renamed"
    assert trigger.extra_data == {"team": "ops"}
    assert trigger.id == "trg_1"
    service.scheduled_repo.cancel_pending.assert_not_awaited()


async def test_deactivating_cancels_pending_runs(service) -> None:
    service.trigger_repo.get_by_id_and_agency.return_value = _stored()
    service.scheduled_repo.cancel_pending.return_value = 1
    await service.update_trigger("agency_1", "trg_1", {"is_active": False})
    service.scheduled_repo.cancel_pending.assert_awaited_once_with("agency_1", "trg_1")
    service.scheduled_repo.create.assert_not_awaited()


async def test_changing_schedule_requeues(service) -> None:
    service.trigger_repo.get_by_id_and_agency.return_value = _stored()
    await service.update_trigger(
        "agency_1",
        "trg_1",
        {"schedule": IntervalSchedule(interval=30, unit=IntervalUnit.MINUTES)},
    )
    service.scheduled_repo.cancel_pending.assert_awaited_once()
    queued = service.scheduled_repo.create.await_args.args[0]
    assert queued.scheduled_for == datetime(2025, 3, 10, 12, 30, tzinfo=timezone.utc)


async def test_switching_to_time_based_without_schedule_rejected(service) -> None:
    service.trigger_repo.get_by_id_and_agency.return_value = _stored(
        trigger_type=TriggerType.EVENT_BASED.value, schedule=None
    )
    with pytest.raises(ValidationException):
        await service.update_trigger(
            "agency_1", "trg_1", {"trigger_type": TriggerType.TIME_BASED}
        )
    service.trigger_repo.update.assert_not_awaited()


async def test_list_triggers_attaches_recent_executions(service) -> None:
    rows = [SimpleNamespace(id="trg_1"), SimpleNamespace(id="trg_2")]
    service.trigger_repo.list_by_agency.return_value = rows
    service.trigger_repo.count_by_agency.return_value = 2
    service.execution_repo.recent_by_trigger.return_value = {"trg_1": ["exec_1"]}

    triggers, recent, total = await service.list_triggers("agency_1", limit=10)

    assert triggers == rows
    assert recent == {"trg_1": ["exec_1"]}
    assert total == 2
    assert service.execution_repo.recent_by_trigger.await_args.args[0] == ["trg_1", "trg_2"]
