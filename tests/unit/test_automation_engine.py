"""AutomationEngine unit tests with mocked repositories and action handlers."""

from contextlib import nullcontext
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.domain.enums import EntityType
from app.domain.value_objects import EntityRef
from app.infrastructure.persistence.models.lead import Lead
from app.infrastructure.services.action_handlers import ActionResult
from app.infrastructure.services.automation_engine import AutomationEngine
from app.shared.enums import ExecutionStatus


def _trigger(trigger_id: str = "trg_1", *, conditions=None, actions=None, workflow_id=None):
    return SimpleNamespace(
        id=trigger_id,
        agency_id="agency_1",
        workflow_id=workflow_id,
        conditions=conditions if conditions is not None else [],
        actions=actions if actions is not None else [{"type": "CUSTOM", "name": "noop"}],
    )


def _lead() -> Lead:
    return Lead(
        id="lead_1",
        agency_id="agency_1",
        first_name="Ada",
        last_name="Lovelace",
        email="ada@example.com",
        status="NEW",
        score=80,
    )


@pytest.fixture
def engine_mocks():
    """AutomationEngine whose savepoints are no-ops and whose repos echo their input."""
    db = MagicMock()
    db.begin_nested.side_effect = lambda: nullcontext()
    db.refresh = AsyncMock()
    trigger_repo = AsyncMock()
    execution_repo = AsyncMock()
    execution_repo.create.side_effect = lambda row: row
    execution_repo.update.side_effect = lambda row: row
    entity_repo = AsyncMock()
    entity_repo.load.return_value = _lead()
    workflow_repo = AsyncMock()
    actions = MagicMock()
    actions.resolve_recipient = AsyncMock(return_value=None)
    actions.execute = AsyncMock(return_value=ActionResult.done())
    engine = AutomationEngine(
        db=db,
        trigger_repo=trigger_repo,
        execution_repo=execution_repo,
        entity_repo=entity_repo,
        workflow_repo=workflow_repo,
        actions=actions,
    )
    return SimpleNamespace(
        engine=engine,
        db=db,
        trigger_repo=trigger_repo,
        execution_repo=execution_repo,
        entity_repo=entity_repo,
        workflow_repo=workflow_repo,
        actions=actions,
    )


async def test_failed_actions_make_execution_partial(engine_mocks) -> None:
    """Four actions, two failures (one raises, one is malformed): success 2, error 2, PARTIAL."""
    engine_mocks.actions.execute.side_effect = [
        ActionResult.done(task_id="task_1"),
        RuntimeError("smtp down"),
        ActionResult.skip("recipient has no phone number"),
    ]
    trigger = _trigger(
        actions=[
            {"type": "CREATE_TASK", "title": "Call {{first_name}}"},
            {"type": "SEND_EMAIL", "subject": "Welcome"},
            {"type": "SEND_SMS", "message": "Hi"},
            {"type": "WEBHOOK"},
        ]
    )

    execution = await engine_mocks.engine.execute_trigger(trigger, None, {"source": "test"})

    assert execution.status == ExecutionStatus.PARTIAL.value
    assert execution.success_count == 2
    assert execution.error_count == 2
    assert [entry["status"] for entry in execution.execution_log] == [
        "success",
        "failed",
        "skipped",
        "failed",
    ]
    assert execution.execution_log[0]["task_id"] == "task_1"
    assert execution.execution_log[1]["error"] == "smtp down"
    assert "invalid action definition" in execution.execution_log[3]["error"]
    assert execution.completed_at is not None
    assert engine_mocks.actions.execute.await_count == 3
    assert engine_mocks.db.begin_nested.call_count == 3


async def test_all_actions_succeeding_completes(engine_mocks) -> None:
    trigger = _trigger(actions=[{"type": "CUSTOM", "name": "a"}, {"type": "CUSTOM", "name": "b"}])
    execution = await engine_mocks.engine.execute_trigger(trigger, None)
    assert execution.status == ExecutionStatus.COMPLETED.value
    assert (execution.success_count, execution.error_count) == (2, 0)
    assert execution.entity_type is None
    assert execution.data == {}



async def test_failed_action_reloads_entity_before_the_next_action(engine_mocks) -> None:
    lead = engine_mocks.entity_repo.load.return_value
    engine_mocks.actions.execute.side_effect = [RuntimeError("check constraint"), ActionResult.done()]
    trigger = _trigger(actions=[{"type": "CUSTOM", "name": "a"}, {"type": "CUSTOM", "name": "b"}])

    execution = await engine_mocks.engine.execute_trigger(
        trigger, EntityRef(EntityType.LEAD, "lead_1")
    )

    assert execution.status == ExecutionStatus.PARTIAL.value
    engine_mocks.db.refresh.assert_awaited_once_with(lead)


async def test_successful_actions_do_not_reload_entity(engine_mocks) -> None:
    await engine_mocks.engine.execute_trigger(_trigger(), EntityRef(EntityType.LEAD, "lead_1"))
    engine_mocks.db.refresh.assert_not_awaited()

async def test_handle_event_runs_only_matching_triggers(engine_mocks) -> None:
    matching = _trigger("trg_match", conditions=[{"field": "score", "operator": "greater_equal", "value": 75}])
    other = _trigger("trg_other", conditions=[{"field": "status", "operator": "equals", "value": "LOST"}])
    broken = _trigger("trg_broken", conditions={"field": "status"})
    engine_mocks.trigger_repo.find_for_event.return_value = [matching, other, broken]
    ref = EntityRef(EntityType.LEAD, "lead_1")

    executions = await engine_mocks.engine.handle_trigger_event(
        "agency_1", "LEAD_CREATED", ref, {"origin": "web"}
    )

    assert [e.trigger_id for e in executions] == ["trg_match"]
    assert executions[0].entity_type == "LEAD"
    assert executions[0].entity_id == "lead_1"
    assert executions[0].data == {"origin": "web"}
    engine_mocks.trigger_repo.find_for_event.assert_awaited_once_with("agency_1", "LEAD_CREATED")
    engine_mocks.entity_repo.load.assert_awaited_once_with("agency_1", ref)


async def test_handle_event_conditions_read_event_data(engine_mocks) -> None:
    trigger = _trigger(
        conditions=[{"field": "data.previous_status", "operator": "equals", "value": "NEW"}]
    )
    engine_mocks.trigger_repo.find_for_event.return_value = [trigger]
    ref = EntityRef(EntityType.LEAD, "lead_1")

    fired = await engine_mocks.engine.handle_trigger_event(
        "agency_1", "LEAD_UPDATED", ref, {"previous_status": "NEW"}
    )
    skipped = await engine_mocks.engine.handle_trigger_event(
        "agency_1", "LEAD_UPDATED", ref, {"previous_status": "CONTACTED"}
    )
    assert len(fired) == 1
    assert skipped == []


async def test_handle_event_without_triggers_skips_entity_load(engine_mocks) -> None:
    engine_mocks.trigger_repo.find_for_event.return_value = []
    result = await engine_mocks.engine.handle_trigger_event(
        "agency_1", "LEAD_CREATED", EntityRef(EntityType.LEAD, "lead_1")
    )
    assert result == []
    engine_mocks.entity_repo.load.assert_not_awaited()


async def test_handle_event_for_missing_entity_fires_nothing(engine_mocks) -> None:
    engine_mocks.trigger_repo.find_for_event.return_value = [_trigger()]
    engine_mocks.entity_repo.load.return_value = None
    result = await engine_mocks.engine.handle_trigger_event(
        "agency_1", "LEAD_CREATED", EntityRef(EntityType.LEAD, "gone")
    )
    assert result == []
    engine_mocks.execution_repo.create.assert_not_awaited()


async def test_missing_target_runs_without_entity(engine_mocks) -> None:
    engine_mocks.entity_repo.load.return_value = None
    execution = await engine_mocks.engine.execute_trigger(
        _trigger(), EntityRef(EntityType.STUDENT, "stu_gone")
    )
    assert execution.entity_type is None
    assert execution.entity_id is None
    assert execution.status == ExecutionStatus.COMPLETED.value


async def test_workflow_execution_is_recorded_for_linked_trigger(engine_mocks) -> None:
    workflow = SimpleNamespace(id="wf_1")
    engine_mocks.workflow_repo.get_by_id_and_agency.return_value = workflow
    execution = await engine_mocks.engine.execute_trigger(_trigger(workflow_id="wf_1"), None)
    engine_mocks.workflow_repo.record_execution.assert_awaited_once_with(
        workflow, execution.completed_at
    )


async def test_workflow_bookkeeping_can_be_suppressed(engine_mocks) -> None:
    await engine_mocks.engine.execute_trigger(
        _trigger(workflow_id="wf_1"), None, record_workflow=False
    )
    engine_mocks.workflow_repo.record_execution.assert_not_awaited()
