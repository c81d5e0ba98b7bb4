"""Automation API: trigger management, execution history, manual dispatch, scheduled runs."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from app.api.v1.dependencies import (
    PageParams,
    get_agency,
    get_automation_engine,
    get_page_params,
    get_scheduled_run_service,
    get_trigger_service,
    get_trigger_service_for_write,
)
from app.application.dtos.agency import AgencyResult
from app.application.dtos.automation import TriggerDefinition
from app.core.config import get_settings
from app.core.limiter import limit_sweeps, limit_writes
from app.domain.enums import TriggerEventType, TriggerType
from app.domain.value_objects import EntityRef
from app.infrastructure.services.automation_engine import AutomationEngine
from app.infrastructure.services.scheduled_run_service import ScheduledRunService
from app.infrastructure.services.trigger_service import TriggerService
from app.schemas.automation import (
    DispatchEventRequest,
    DispatchEventResponse,
    ExecutionResponse,
    ScheduledRunResponse,
    TriggerCreateRequest,
    TriggerListItem,
    TriggerResponse,
    TriggerUpdateRequest,
)
from app.schemas.common import Page

router = APIRouter()


@router.get("/triggers", response_model=Page[TriggerListItem])
async def list_triggers(
    agency: Annotated[AgencyResult, Depends(get_agency)],
    service: Annotated[TriggerService, Depends(get_trigger_service)],
    paging: Annotated[PageParams, Depends(get_page_params)],
    trigger_type: Annotated[TriggerType | None, Query(alias="type")] = None,
    event_type: TriggerEventType | None = None,
    is_active: bool | None = None,
):
    """List triggers, highest priority first, each with its latest executions."""
    filters = {
        "trigger_type": trigger_type.value if trigger_type else None,
        "event_type": event_type.value if event_type else None,
        "is_active": is_active,
    }
    triggers, recent, total = await service.list_triggers(
        agency.id, skip=paging.skip, limit=paging.limit, filters=filters
    )
    items = []
    for trigger in triggers:
        item = TriggerListItem.model_validate(trigger)
        item.recent_executions = [
            ExecutionResponse.model_validate(e) for e in recent.get(trigger.id, [])
        ]
        items.append(item)
    return Page(items=items, total=total, page=paging.page, limit=paging.limit)


@router.post("/triggers", response_model=TriggerResponse, status_code=201)
@limit_writes
async def create_trigger(
    request: Request,
    body: TriggerCreateRequest,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    service: Annotated[TriggerService, Depends(get_trigger_service_for_write)],
):
    """Create a trigger. Active TIME_BASED triggers get their first run queued."""
    trigger = await service.create_trigger(
        agency.id,
        TriggerDefinition(
            name=body.name,
            description=body.description,
            trigger_type=body.trigger_type,
            event_type=body.event_type,
            conditions=list(body.conditions),
            actions=list(body.actions),
            schedule=body.schedule,
            is_active=body.is_active,
            priority=(
                body.priority
                if body.priority is not None
                else get_settings().default_trigger_priority
            ),
            workflow_id=body.workflow_id,
            metadata=body.metadata,
        ),
    )
    return TriggerResponse.model_validate(trigger)


@router.get("/triggers/{trigger_id}", response_model=TriggerResponse)
async def get_trigger(
    trigger_id: str,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    service: Annotated[TriggerService, Depends(get_trigger_service)],
):
    return TriggerResponse.model_validate(await service.get_trigger(agency.id, trigger_id))


@router.patch("/triggers/{trigger_id}", response_model=TriggerResponse)
@limit_writes
async def update_trigger(
    request: Request,
    trigger_id: str,
    body: TriggerUpdateRequest,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    service: Annotated[TriggerService, Depends(get_trigger_service_for_write)],
):
    """Partially update a trigger; queued runs follow schedule/type/active changes."""
    trigger = await service.update_trigger(agency.id, trigger_id, body.changes())
    return TriggerResponse.model_validate(trigger)


@router.delete("/triggers/{trigger_id}", status_code=204)
@limit_writes
async def delete_trigger(
    request: Request,
    trigger_id: str,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    service: Annotated[TriggerService, Depends(get_trigger_service_for_write)],
) -> None:
    await service.delete_trigger(agency.id, trigger_id)


@router.get("/triggers/{trigger_id}/executions", response_model=Page[ExecutionResponse])
async def list_trigger_executions(
    trigger_id: str,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    service: Annotated[TriggerService, Depends(get_trigger_service)],
    paging: Annotated[PageParams, Depends(get_page_params)],
):
    """Execution history of one trigger, newest first."""
    rows, total = await service.list_executions(
        agency.id, trigger_id, skip=paging.skip, limit=paging.limit
    )
    return Page(
        items=[ExecutionResponse.model_validate(r) for r in rows],
        total=total,
        page=paging.page,
        limit=paging.limit,
    )


@router.post("/events", response_model=DispatchEventResponse)
@limit_writes
async def dispatch_event(
    request: Request,
    body: DispatchEventRequest,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    engine: Annotated[AutomationEngine, Depends(get_automation_engine)],
):
    """Dispatch any trigger event (e.g. MESSAGE_RECEIVED, CUSTOM) against an entity.

    Nothing fires when the entity does not belong to the agency.
    """
    executions = await engine.handle_trigger_event(
        agency.id,
        body.event_type.value,
        EntityRef(body.entity_type, body.entity_id),
        body.data,
    )
    return DispatchEventResponse(
        executed=len(executions),
        executions=[ExecutionResponse.model_validate(e) for e in executions],
    )


@router.post("/scheduled/run", response_model=ScheduledRunResponse)
@limit_sweeps
async def run_scheduled(
    request: Request,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    service: Annotated[ScheduledRunService, Depends(get_scheduled_run_service)],
):
    """Execute due scheduled runs of time-based triggers and queue their next occurrence."""
    result = await service.run_due(agency.id)
    return ScheduledRunResponse(
        claimed=result.claimed,
        executed=result.executed,
        cancelled=result.cancelled,
        execution_ids=result.execution_ids,
    )
