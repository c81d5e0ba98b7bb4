"""Automation routes with the agency and services overridden."""

from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from app.api.v1.dependencies import (
    get_agency,
    get_automation_engine,
    get_scheduled_run_service,
    get_trigger_service_for_write,
)
from app.application.dtos.automation import ScheduledRunResult, SendEmailAction
from app.domain.enums import EntityType
from app.domain.value_objects import EntityRef
from app.main import app

CREATED = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


class FakeTriggerService:
    def __init__(self) -> None:
        self.definitions = []

    async def create_trigger(self, agency_id: str, definition):
        self.definitions.append(definition)
        return SimpleNamespace(
            id="trg_1",
            agency_id=agency_id,
            workflow_id=definition.workflow_id,
            name=definition.name,
            description=definition.description,
            trigger_type=definition.trigger_type.value,
            event_type=definition.event_type.value,
            conditions=[c.model_dump() for c in definition.conditions],
            actions=[a.model_dump(mode="json", exclude_none=True) for a in definition.actions],
            schedule=None,
            is_active=definition.is_active,
            priority=definition.priority,
            extra_data=definition.metadata,
            created_at=CREATED,
            updated_at=CREATED,
        )


@pytest.fixture
def trigger_service(agency) -> FakeTriggerService:
    service = FakeTriggerService()
    app.dependency_overrides[get_agency] = lambda: agency
    app.dependency_overrides[get_trigger_service_for_write] = lambda: service
    return service


async def test_create_trigger_defaults_priority(client, trigger_service) -> None:
    response = await client.post(
        "/api/acme/automation/triggers",
        json={
            "name": "Welcome",
            "trigger_type": "EVENT_BASED",
            "event_type": "LEAD_CREATED",
            "conditions": [{"field": "source", "operator": "equals", "value": "web"}],
            "actions": [{"type": "SEND_EMAIL", "subject": "Hi {{first_name}}"}],
            "metadata": {"team": "growth"},
        },
    )

    assert response.status_code == 201
    body = response.json()
    assert body["priority"] == 50
    assert body["metadata"] == {"team": "growth"}
    definition = trigger_service.definitions[0]
    assert isinstance(definition.actions[0], SendEmailAction)
    assert definition.conditions[0].operator == "equals"


async def test_create_trigger_rejects_unknown_operator(client, trigger_service) -> None:
    response = await client.post(
        "/api/acme/automation/triggers",
        json={
            "name": "Broken",
            "trigger_type": "EVENT_BASED",
            "event_type": "LEAD_CREATED",
            "conditions": [{"field": "source", "operator": "approx", "value": "web"}],
            "actions": [{"type": "CUSTOM", "name": "noop"}],
        },
    )

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "VALIDATION_ERROR"
    assert body["message"] == "Request validation failed"
    assert body["details"][0]["field"] == "conditions"
    assert trigger_service.definitions == []


async def test_create_trigger_rejects_malformed_template(client, trigger_service) -> None:
    response = await client.post(
        "/api/acme/automation/triggers",
        json={
            "name": "Typo",
            "trigger_type": "EVENT_BASED",
            "event_type": "LEAD_CREATED",
            "actions": [{"type": "SEND_EMAIL", "subject": "Hi {{ first_name"}],
        },
    )

    assert response.status_code == 400
    detail = response.json()["details"][0]
    assert detail["field"].startswith("actions.0")
    assert "Invalid template" in detail["message"]
    assert trigger_service.definitions == []


async def test_create_trigger_requires_actions(client, trigger_service) -> None:
    response = await client.post(
        "/api/acme/automation/triggers",
        json={"name": "Empty", "trigger_type": "EVENT_BASED", "event_type": "LEAD_CREATED", "actions": []},
    )
    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "actions"


async def test_manual_event_dispatch(client, agency) -> None:
    calls = []

    class _Engine:
        async def handle_trigger_event(self, agency_id, event_type, entity_ref, data):
            calls.append((agency_id, event_type, entity_ref, data))
            return []

    app.dependency_overrides[get_agency] = lambda: agency
    app.dependency_overrides[get_automation_engine] = lambda: _Engine()

    response = await client.post(
        "/api/acme/automation/events",
        json={
            "event_type": "MESSAGE_RECEIVED",
            "entity_type": "STUDENT",
            "entity_id": "stu_1",
            "data": {"channel": "whatsapp"},
        },
    )

    assert response.status_code == 200
    assert response.json() == {"executed": 0, "executions": []}
    assert calls == [
        ("agency_1", "MESSAGE_RECEIVED", EntityRef(EntityType.STUDENT, "stu_1"), {"channel": "whatsapp"})
    ]


async def test_run_scheduled(client, agency) -> None:
    class _Runner:
        async def run_due(self, agency_id):
            assert agency_id == "agency_1"
            return ScheduledRunResult(claimed=2, executed=1, cancelled=1, execution_ids=["exec_1"])

    app.dependency_overrides[get_agency] = lambda: agency
    app.dependency_overrides[get_scheduled_run_service] = lambda: _Runner()

    response = await client.post("/api/acme/automation/scheduled/run")

    assert response.status_code == 200
    assert response.json() == {
        "claimed": 2,
        "executed": 1,
        "cancelled": 1,
        "execution_ids": ["exec_1"],
    }
