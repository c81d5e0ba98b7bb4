"""Leads API. Writes dispatch LEAD_* automation events."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import (
    PageParams,
    get_agency,
    get_event_dispatcher,
    get_lead_repo,
    get_lead_repo_for_write,
    get_page_params,
)
from app.api.v1.endpoints._records import apply_changes, get_owned
from app.application.dtos.agency import AgencyResult
from app.application.use_cases.automation import EntityChange, EntityEventDispatcher
from app.core.limiter import limit_writes
from app.domain.enums import EntityType, LeadStatus
from app.domain.value_objects import EntityRef
from app.infrastructure.persistence.models.lead import Lead
from app.infrastructure.persistence.repositories.lead_repo import LeadRepository
from app.schemas.common import Page
from app.schemas.records import LeadCreate, LeadResponse, LeadUpdate

router = APIRouter()


@router.get("", response_model=Page[LeadResponse])
async def list_leads(
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[LeadRepository, Depends(get_lead_repo)],
    paging: Annotated[PageParams, Depends(get_page_params)],
    status: LeadStatus | None = None,
    source: str | None = None,
    assigned_to: str | None = None,
):
    filters = {
        "status": status.value if status else None,
        "source": source,
        "assigned_to": assigned_to,
    }
    rows = await repo.list_by_agency(
        agency.id, skip=paging.skip, limit=paging.limit, filters=filters
    )
    total = await repo.count_by_agency(agency.id, filters=filters)
    return Page(
        items=[LeadResponse.model_validate(r) for r in rows],
        total=total,
        page=paging.page,
        limit=paging.limit,
    )


@router.post("", response_model=LeadResponse, status_code=201)
@limit_writes
async def create_lead(
    request: Request,
    body: LeadCreate,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[LeadRepository, Depends(get_lead_repo_for_write)],
    dispatcher: Annotated[EntityEventDispatcher, Depends(get_event_dispatcher)],
):
    lead = await repo.create(Lead(agency_id=agency.id, **body.changes()))
    await dispatcher.dispatch_change(
        agency.id, EntityRef(EntityType.LEAD, lead.id), EntityChange.CREATED
    )
    lead = await repo.refresh(lead)
    return LeadResponse.model_validate(lead)


@router.get("/{lead_id}", response_model=LeadResponse)
async def get_lead(
    lead_id: str,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[LeadRepository, Depends(get_lead_repo)],
):
    return LeadResponse.model_validate(await get_owned(repo, agency.id, lead_id, "lead"))


@router.patch("/{lead_id}", response_model=LeadResponse)
@limit_writes
async def update_lead(
    request: Request,
    lead_id: str,
    body: LeadUpdate,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[LeadRepository, Depends(get_lead_repo_for_write)],
    dispatcher: Annotated[EntityEventDispatcher, Depends(get_event_dispatcher)],
):
    lead = await get_owned(repo, agency.id, lead_id, "lead")
    previous_status = lead.status
    apply_changes(lead, body.changes())
    lead = await repo.update(lead)
    await dispatcher.dispatch_change(
        agency.id,
        EntityRef(EntityType.LEAD, lead.id),
        EntityChange.UPDATED,
        previous_status=previous_status,
        status=lead.status,
        data={"previous_status": previous_status},
    )
    lead = await repo.refresh(lead)
    return LeadResponse.model_validate(lead)


@router.delete("/{lead_id}", status_code=204)
@limit_writes
async def delete_lead(
    request: Request,
    lead_id: str,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[LeadRepository, Depends(get_lead_repo_for_write)],
    dispatcher: Annotated[EntityEventDispatcher, Depends(get_event_dispatcher)],
) -> None:
    """Delete a lead. LEAD_DELETED is dispatched while the row still exists."""
    lead = await get_owned(repo, agency.id, lead_id, "lead")
    await dispatcher.dispatch_change(
        agency.id, EntityRef(EntityType.LEAD, lead.id), EntityChange.DELETED
    )
    await repo.delete(lead)
