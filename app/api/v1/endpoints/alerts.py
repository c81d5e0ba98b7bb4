"""Alerts API: list, manual create, on-demand sweeps, resolve."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from app.api.v1.dependencies import (
    PageParams,
    get_agency,
    get_alert_repo,
    get_alert_service,
    get_page_params,
)
from app.application.dtos.agency import AgencyResult
from app.application.dtos.alert import AlertDraft
from app.core.limiter import limit_sweeps, limit_writes
from app.domain.enums import AlertCheck, AlertSeverity, AlertType, RecipientType
from app.domain.exceptions import ValidationException
from app.domain.value_objects import EntityRef
from app.infrastructure.persistence.repositories.alert_repo import AlertRepository
from app.infrastructure.services.alert_service import AlertService
from app.schemas.alert import AlertCreateRequest, AlertResponse, SweepResponse
from app.schemas.common import Page

router = APIRouter()


@router.get("", response_model=Page[AlertResponse])
async def list_alerts(
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[AlertRepository, Depends(get_alert_repo)],
    paging: Annotated[PageParams, Depends(get_page_params)],
    alert_type: Annotated[AlertType | None, Query(alias="type")] = None,
    severity: AlertSeverity | None = None,
    recipient_id: str | None = None,
    recipient_type: RecipientType | None = None,
    unresolved_only: bool = False,
):
    """List alerts newest first."""
    rows, total = await repo.list_alerts(
        agency.id,
        skip=paging.skip,
        limit=paging.limit,
        filters={
            "alert_type": alert_type.value if alert_type else None,
            "severity": severity.value if severity else None,
            "recipient_id": recipient_id,
            "recipient_type": recipient_type.value if recipient_type else None,
        },
        unresolved_only=unresolved_only,
    )
    return Page(
        items=[AlertResponse.model_validate(r) for r in rows],
        total=total,
        page=paging.page,
        limit=paging.limit,
    )


@router.post("", response_model=AlertResponse, status_code=201)
@limit_writes
async def create_alert(
    request: Request,
    body: AlertCreateRequest,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    service: Annotated[AlertService, Depends(get_alert_service)],
):
    """Create an alert and its in-app notification. 404 when the recipient is not in the agency."""
    if (body.entity_type is None) != (body.entity_id is None):
        raise ValidationException(
            "entity_type and entity_id must be given together", field="entity_id"
        )
    entity_ref = (
        EntityRef(body.entity_type, body.entity_id)
        if body.entity_type is not None and body.entity_id is not None
        else None
    )
    alert = await service.create_alert(
        agency.id,
        AlertDraft(
            alert_type=body.alert_type,
            title=body.title,
            message=body.message,
            severity=body.severity,
            recipient_id=body.recipient_id,
            recipient_type=body.recipient_type,
            entity_ref=entity_ref,
            action_required=body.action_required,
            action_url=body.action_url,
            metadata=body.metadata,
        ),
    )
    return AlertResponse.model_validate(alert)


@router.post("/checks/{check}", response_model=SweepResponse)
@limit_sweeps
async def run_alert_check(
    request: Request,
    check: AlertCheck,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    service: Annotated[AlertService, Depends(get_alert_service)],
):
    """Run one sweep now. Entities that already have an unresolved alert are skipped."""
    result = await service.run_check(agency.id, check)
    return SweepResponse(
        check=result.check,
        scanned=result.scanned,
        created=result.created,
        alert_ids=result.alert_ids,
    )


@router.post("/{alert_id}/resolve", response_model=AlertResponse)
@limit_writes
async def resolve_alert(
    request: Request,
    alert_id: str,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    service: Annotated[AlertService, Depends(get_alert_service)],
):
    return AlertResponse.model_validate(await service.resolve_alert(agency.id, alert_id))
