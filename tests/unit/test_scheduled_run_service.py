"""ScheduledRunService: claiming due runs, executing, re-queueing and cancelling."""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from app.core.config import Settings
from app.domain.enums import EntityType
from app.domain.value_objects import EntityRef
from app.infrastructure.services.scheduled_run_service import ScheduledRunService

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)
DAILY = {"type": "INTERVAL", "interval": 1, "unit": "DAYS"}


def _row(row_id: str = "sch_1", schedule=None, scheduled_for=None):
    return SimpleNamespace(
        id=row_id,
        agency_id="agency_1",
        trigger_id="trg_1",
        schedule=schedule if schedule is not None else DAILY,
        scheduled_for=scheduled_for or NOW - timedelta(minutes=5),
        status="SCHEDULED",
        execution_id=None,
        completed_at=None,
    )


def _trigger(**overrides):
    values = {"id": "trg_1", "is_active": True, "trigger_type": "TIME_BASED"}
    values.update(overrides)
    return SimpleNamespace(**values)


@pytest.fixture
def runner() -> ScheduledRunService:
    scheduled_repo = AsyncMock()
    scheduled_repo.update.side_effect = lambda row: row
    trigger_repo = AsyncMock()
    trigger_repo.get_by_id_and_agency.return_value = _trigger()
    engine = AsyncMock()
    engine.execute_trigger.return_value = SimpleNamespace(id="exec_1")
    return ScheduledRunService(
        settings=Settings(
            database_url="postgresql+asyncpg://x@localhost/test", scheduled_run_batch_size=25
        ),
        scheduled_repo=scheduled_repo,
        trigger_repo=trigger_repo,
        engine=engine,
    )


async def test_due_run_executes_and_queues_next(runner) -> None:
    row = _row()
    runner.scheduled_repo.claim_due.return_value = [row]

    result = await runner.run_due("agency_1", now=NOW)

    runner.scheduled_repo.claim_due.assert_awaited_once_with("agency_1", NOW, 25)
    assert (result.claimed, result.executed, result.cancelled) == (1, 1, 0)
    assert result.execution_ids == ["exec_1"]
    assert row.status == "COMPLETED"
    assert row.execution_id == "exec_1"
    trigger, entity_ref, data = runner.engine.execute_trigger.await_args.args
    assert trigger.id == "trg_1"
    assert entity_ref is None
    assert data["scheduled_execution_id"] == "sch_1"
    queued = runner.scheduled_repo.create.await_args.args[0]
    assert queued.scheduled_for == NOW + timedelta(days=1)
    assert queued.status == "SCHEDULED"


async def test_next_run_counts_from_future_slot(runner) -> None:
    """A row claimed before its slot (clock skew) re-queues from the slot, not from now."""
    slot = NOW + timedelta(minutes=1)
    runner.scheduled_repo.claim_due.return_value = [_row(scheduled_for=slot)]
    await runner.run_due("agency_1", now=NOW)
    queued = runner.scheduled_repo.create.await_args.args[0]
    assert queued.scheduled_for == slot + timedelta(days=1)


async def test_schedule_target_is_passed_to_engine(runner) -> None:
    schedule = {**DAILY, "target": {"entity_type": "STUDENT", "entity_id": "stu_1"}}
    runner.scheduled_repo.claim_due.return_value = [_row(schedule=schedule)]
    await runner.run_due("agency_1", now=NOW)
    entity_ref = runner.engine.execute_trigger.await_args.args[1]
    assert entity_ref == EntityRef(EntityType.STUDENT, "stu_1")


@pytest.mark.parametrize(
    "trigger",
    [None, _trigger(is_active=False), _trigger(trigger_type="EVENT_BASED")],
)
async def test_rows_for_unusable_triggers_are_cancelled(runner, trigger) -> None:
    row = _row()
    runner.scheduled_repo.claim_due.return_value = [row]
    runner.trigger_repo.get_by_id_and_agency.return_value = trigger

    result = await runner.run_due("agency_1", now=NOW)

    assert (result.executed, result.cancelled) == (0, 1)
    assert row.status == "CANCELLED"
    runner.engine.execute_trigger.assert_not_awaited()
    runner.scheduled_repo.create.assert_not_awaited()


async def test_invalid_stored_schedule_is_cancelled(runner) -> None:
    row = _row(schedule={"type": "CRON", "cron_expression": "not a cron"})
    runner.scheduled_repo.claim_due.return_value = [row]
    result = await runner.run_due("agency_1", now=NOW)
    assert result.cancelled == 1
    assert row.status == "CANCELLED"


async def test_nothing_due(runner) -> None:
    runner.scheduled_repo.claim_due.return_value = []
    result = await runner.run_due("agency_1", now=NOW)
    assert (result.claimed, result.executed, result.cancelled) == (0, 0, 0)
