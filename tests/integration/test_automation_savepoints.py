"""Automation on Postgres: each action in its own savepoint, on the route's session."""

import pytest
from sqlalchemy import select

from app.api.v1.dependencies.automation import build_automation_engine
from app.application.use_cases.automation import EntityChange, EntityEventDispatcher
from app.domain.enums import EntityType, TriggerEventType, TriggerType
from app.domain.value_objects import EntityRef
from app.infrastructure.persistence.models.agency import Agency
from app.infrastructure.persistence.models.automation import AutomationTrigger
from app.infrastructure.persistence.models.lead import Lead
from app.infrastructure.persistence.models.task import Task
from app.infrastructure.persistence.repositories import LeadRepository
from app.infrastructure.services.template_renderer import TemplateRenderer
from app.schemas.records import LeadResponse
from app.shared.enums import ExecutionStatus
from app.shared.utils.generators import generate_cuid

pytestmark = pytest.mark.requires_db


async def _agency(session) -> Agency:
    agency = Agency(subdomain=f"it-{generate_cuid()[:12]}", name="Integration Agency")
    session.add(agency)
    await session.flush()
    return agency


async def _lead_trigger(session, agency_id: str, actions: list[dict]) -> AutomationTrigger:
    trigger = AutomationTrigger(
        agency_id=agency_id,
        name="Lead follow-up",
        trigger_type=TriggerType.EVENT_BASED.value,
        event_type=TriggerEventType.LEAD_UPDATED.value,
        conditions=[],
        actions=actions,
        is_active=True,
        priority=50,
    )
    session.add(trigger)
    await session.flush()
    return trigger


async def test_failed_update_actions_leave_siblings_and_route_row_intact(db_session) -> None:
    agency = await _agency(db_session)
    repo = LeadRepository(db_session)
    lead = await repo.create(
        Lead(
            agency_id=agency.id,
            first_name="Ada",
            last_name="Lovelace",
            email="ada@example.com",
            status="NEW",
        )
    )
    await _lead_trigger(
        db_session,
        agency.id,
        [
            # Rejected before the row is touched.
            {
                "type": "UPDATE_ENTITY",
                "updates": [
                    {"field": "notes", "value": "touched"},
                    {"field": "no_such_column", "value": 1},
                ],
            },
            # Accepted, then refused by lead_status_check on flush.
            {
                "type": "UPDATE_ENTITY",
                "updates": [
                    {"field": "notes", "value": "touched"},
                    {"field": "status", "value": "ARCHIVED"},
                ],
            },
            {"type": "CREATE_TASK", "title": "Call {{first_name}}"},
        ],
    )

    # Same sequence as PATCH /leads/{id}: write, dispatch, reload, serialize.
    lead.first_name = "Augusta"
    lead = await repo.update(lead)
    engine = build_automation_engine(db_session, TemplateRenderer())
    dispatcher = EntityEventDispatcher(lambda: engine, isolation=db_session.begin_nested)
    executions = await dispatcher.dispatch_change(
        agency.id,
        EntityRef(EntityType.LEAD, lead.id),
        EntityChange.UPDATED,
        previous_status="NEW",
        status="NEW",
    )
    lead = await repo.refresh(lead)
    body = LeadResponse.model_validate(lead)

    assert len(executions) == 1
    execution = executions[0]
    assert execution.status == ExecutionStatus.PARTIAL.value
    assert (execution.success_count, execution.error_count) == (1, 2)
    assert body.first_name == "Augusta"
    assert body.status == "NEW"
    assert body.notes is None

    tasks = (await db_session.execute(select(Task).where(Task.lead_id == lead.id))).scalars().all()
    assert [t.title for t in tasks] == ["Call Augusta"]


async def test_successful_update_action_is_visible_to_the_route(db_session) -> None:
    agency = await _agency(db_session)
    repo = LeadRepository(db_session)
    lead = await repo.create(
        Lead(agency_id=agency.id, first_name="Ada", last_name="Lovelace", status="NEW")
    )
    await _lead_trigger(
        db_session,
        agency.id,
        [{"type": "UPDATE_ENTITY", "updates": [{"field": "status", "value": "CONTACTED"}]}],
    )

    engine = build_automation_engine(db_session, TemplateRenderer())
    dispatcher = EntityEventDispatcher(lambda: engine, isolation=db_session.begin_nested)
    executions = await dispatcher.dispatch_change(
        agency.id, EntityRef(EntityType.LEAD, lead.id), EntityChange.UPDATED
    )
    lead = await repo.refresh(lead)

    assert executions[0].status == ExecutionStatus.COMPLETED.value
    assert LeadResponse.model_validate(lead).status == "CONTACTED"
