"""Entity write -> trigger event mapping and dispatcher failure isolation."""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from app.application.use_cases.automation import (
    EntityChange,
    EntityEventDispatcher,
    events_for_change,
)
from app.domain.enums import EntityType, TriggerEventType
from app.domain.value_objects import EntityRef

T = TriggerEventType


@pytest.mark.parametrize(
    ("entity_type", "change", "expected"),
    [
        (EntityType.LEAD, EntityChange.CREATED, [T.LEAD_CREATED]),
        (EntityType.LEAD, EntityChange.DELETED, [T.LEAD_DELETED]),
        (EntityType.STUDENT, EntityChange.UPDATED, [T.STUDENT_UPDATED]),
        (EntityType.APPLICATION, EntityChange.CREATED, [T.APPLICATION_CREATED]),
        (EntityType.TASK, EntityChange.CREATED, [T.TASK_CREATED]),
        (EntityType.TASK, EntityChange.DELETED, []),
        (EntityType.DOCUMENT, EntityChange.CREATED, [T.DOCUMENT_UPLOADED]),
        (EntityType.DOCUMENT, EntityChange.UPDATED, []),
    ],
)
def test_plain_events(entity_type, change, expected) -> None:
    assert events_for_change(entity_type, change) == expected


def test_status_event_fires_on_transition() -> None:
    assert events_for_change(
        EntityType.APPOINTMENT,
        EntityChange.UPDATED,
        previous_status="SCHEDULED",
        status="CANCELLED",
    ) == [T.APPOINTMENT_UPDATED, T.APPOINTMENT_CANCELLED]
    assert events_for_change(
        EntityType.TASK, EntityChange.UPDATED, previous_status="PENDING", status="COMPLETED"
    ) == [T.TASK_COMPLETED]
    assert events_for_change(
        EntityType.DOCUMENT, EntityChange.UPDATED, previous_status="PENDING", status="VERIFIED"
    ) == [T.DOCUMENT_VERIFIED]


def test_status_event_not_repeated_when_status_unchanged() -> None:
    assert events_for_change(
        EntityType.TASK, EntityChange.UPDATED, previous_status="COMPLETED", status="COMPLETED"
    ) == []


async def test_dispatch_change_runs_every_event() -> None:
    engine = AsyncMock()
    engine.handle_trigger_event.side_effect = [["exec_1"], ["exec_2", "exec_3"]]
    dispatcher = EntityEventDispatcher(lambda: engine)
    ref = EntityRef(EntityType.APPOINTMENT, "apt_1")

    executions = await dispatcher.dispatch_change(
        "agency_1",
        ref,
        EntityChange.UPDATED,
        previous_status="CONFIRMED",
        status="CANCELLED",
        data={"previous_status": "CONFIRMED"},
    )

    assert executions == ["exec_1", "exec_2", "exec_3"]
    calls = engine.handle_trigger_event.await_args_list
    assert [c.args[1] for c in calls] == ["APPOINTMENT_UPDATED", "APPOINTMENT_CANCELLED"]
    assert calls[0].args[3] == {"previous_status": "CONFIRMED"}


async def test_runtime_failure_is_swallowed_and_logged(caplog) -> None:
    engine = AsyncMock()
    engine.handle_trigger_event.side_effect = OperationalError("SELECT", {}, Exception("down"))
    dispatcher = EntityEventDispatcher(lambda: engine)

    result = await dispatcher.dispatch(
        "agency_1", T.LEAD_CREATED, EntityRef(EntityType.LEAD, "lead_1")
    )

    assert result == []
    assert "Automation dispatch failed for LEAD_CREATED" in caplog.text


async def test_programming_errors_propagate() -> None:
    engine = AsyncMock()
    engine.handle_trigger_event.side_effect = KeyError("oops")
    dispatcher = EntityEventDispatcher(lambda: engine)
    with pytest.raises(KeyError):
        await dispatcher.dispatch("agency_1", T.LEAD_CREATED, EntityRef(EntityType.LEAD, "l1"))


async def test_dispatch_runs_inside_isolation_scope() -> None:
    entered: list[str] = []

    @asynccontextmanager
    async def savepoint():
        entered.append("begin")
        yield
        entered.append("end")

    engine = AsyncMock()
    engine.handle_trigger_event.return_value = ["exec_1"]
    dispatcher = EntityEventDispatcher(lambda: engine, isolation=savepoint)

    result = await dispatcher.dispatch("agency_1", T.TASK_CREATED, EntityRef(EntityType.TASK, "t1"))

    assert result == ["exec_1"]
    assert entered == ["begin", "end"]


async def test_no_engine_means_no_dispatch() -> None:
    dispatcher = EntityEventDispatcher(lambda: None)
    assert await dispatcher.dispatch_change(
        "agency_1", EntityRef(EntityType.LEAD, "l1"), EntityChange.CREATED
    ) == []
