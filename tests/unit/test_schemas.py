"""Request schema validation: operators, discriminated actions, partial updates."""

import pytest
from pydantic import ValidationError

from app.application.dtos.automation import CronSchedule, SendEmailAction
from app.schemas.automation import TriggerCreateRequest, TriggerUpdateRequest
from app.schemas.records import LeadCreate, LeadUpdate, TaskUpdate
from app.schemas.workflow import WorkflowUpdate


def _trigger_body(**overrides) -> dict:
    body = {
        "name": "Welcome",
        "trigger_type": "EVENT_BASED",
        "event_type": "LEAD_CREATED",
        "actions": [{"type": "SEND_EMAIL", "subject": "Hi {{first_name}}"}],
    }
    body.update(overrides)
    return body


def test_trigger_create_parses_typed_variants() -> None:
    request = TriggerCreateRequest.model_validate(
        _trigger_body(
            conditions=[{"field": "source", "operator": "in", "value": ["web", "fair"]}],
            schedule={"type": "CRON", "cron_expression": "0 9 * * 1"},
        )
    )
    assert isinstance(request.actions[0], SendEmailAction)
    assert isinstance(request.schedule, CronSchedule)
    assert request.priority is None


def test_trigger_create_rejects_unknown_operator() -> None:
    with pytest.raises(ValidationError, match="Unknown condition operator"):
        TriggerCreateRequest.model_validate(
            _trigger_body(conditions=[{"field": "x", "operator": "approx", "value": 1}])
        )


def test_trigger_create_requires_an_action() -> None:
    with pytest.raises(ValidationError):
        TriggerCreateRequest.model_validate(_trigger_body(actions=[]))


def test_trigger_create_rejects_unknown_action_type() -> None:
    with pytest.raises(ValidationError):
        TriggerCreateRequest.model_validate(_trigger_body(actions=[{"type": "FAX"}]))



@pytest.mark.parametrize(
    "action",
    [
        {"type": "SEND_EMAIL", "subject": "Hi {{ first_name"},
        {"type": "SEND_EMAIL", "body": "{% if score %}hot lead"},
        {"type": "SEND_NOTIFICATION", "message": "{{ }}"},
        {"type": "SEND_SMS", "message": "Reply {{ first_name }"},
        {"type": "CREATE_TASK", "title": "Call {{ first_name"},
    ],
)
def test_trigger_create_rejects_malformed_templates(action: dict) -> None:
    with pytest.raises(ValidationError, match="Invalid template"):
        TriggerCreateRequest.model_validate(_trigger_body(actions=[action]))


def test_plain_braces_and_valid_templates_are_accepted() -> None:
    request = TriggerCreateRequest.model_validate(
        _trigger_body(
            actions=[
                {"type": "SEND_SMS", "message": "Code {1234} for {{ first_name }}"},
                {"type": "CREATE_TASK", "title": "{% if score %}Hot{% endif %} lead"},
            ]
        )
    )
    assert len(request.actions) == 2

def test_trigger_priority_bounds() -> None:
    with pytest.raises(ValidationError):
        TriggerCreateRequest.model_validate(_trigger_body(priority=101))


def test_trigger_update_tracks_sent_fields_only() -> None:
    request = TriggerUpdateRequest.model_validate({"name": "Renamed", "schedule": None})
    assert request.changes() == {"name": "Renamed", "schedule": None}


def test_trigger_update_cannot_null_required_fields() -> None:
    with pytest.raises(ValidationError, match="Fields cannot be null: is_active, name"):
        TriggerUpdateRequest.model_validate({"name": None, "is_active": None})


def test_lead_create_changes_map_metadata_and_enum_values() -> None:
    lead = LeadCreate.model_validate(
        {"first_name": "Ada", "last_name": "Lovelace", "metadata": {"utm": "fair"}}
    )
    changes = lead.changes()
    assert changes["status"] == "NEW"
    assert changes["extra_data"] == {"utm": "fair"}
    assert "metadata" not in changes


def test_lead_update_partial_and_not_null_guard() -> None:
    assert LeadUpdate.model_validate({"notes": None}).changes() == {"notes": None}
    with pytest.raises(ValidationError, match="first_name"):
        LeadUpdate.model_validate({"first_name": None})


def test_lead_email_validated() -> None:
    with pytest.raises(ValidationError):
        LeadCreate.model_validate({"first_name": "A", "last_name": "B", "email": "nope"})


def test_task_update_status_cannot_be_cleared() -> None:
    with pytest.raises(ValidationError):
        TaskUpdate.model_validate({"status": None})


def test_workflow_update_rejects_null_name() -> None:
    with pytest.raises(ValidationError):
        WorkflowUpdate.model_validate({"name": None})
