"""Campaigns API: list and create. Enrollment happens through ENROLL_IN_CAMPAIGN actions."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import (
    PageParams,
    get_agency,
    get_campaign_repo,
    get_campaign_repo_for_write,
    get_page_params,
)
from app.application.dtos.agency import AgencyResult
from app.core.limiter import limit_writes
from app.domain.enums import CampaignStatus
from app.domain.exceptions import ValidationException
from app.infrastructure.persistence.models.campaign import Campaign
from app.infrastructure.persistence.repositories.campaign_repo import CampaignRepository
from app.schemas.common import Page
from app.schemas.records import CampaignCreate, CampaignResponse

router = APIRouter()


@router.get("", response_model=Page[CampaignResponse])
async def list_campaigns(
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[CampaignRepository, Depends(get_campaign_repo)],
    paging: Annotated[PageParams, Depends(get_page_params)],
    status: CampaignStatus | None = None,
):
    filters = {"status": status.value if status else None}
    rows = await repo.list_by_agency(
        agency.id, skip=paging.skip, limit=paging.limit, filters=filters
    )
    total = await repo.count_by_agency(agency.id, filters=filters)
    return Page(
        items=[CampaignResponse.model_validate(r) for r in rows],
        total=total,
        page=paging.page,
        limit=paging.limit,
    )


@router.post("", response_model=CampaignResponse, status_code=201)
@limit_writes
async def create_campaign(
    request: Request,
    body: CampaignCreate,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[CampaignRepository, Depends(get_campaign_repo_for_write)],
):
    if body.starts_at and body.ends_at and body.ends_at <= body.starts_at:
        raise ValidationException("ends_at must be after starts_at", field="ends_at")
    campaign = await repo.create(Campaign(agency_id=agency.id, **body.changes()))
    return CampaignResponse.model_validate(campaign)
