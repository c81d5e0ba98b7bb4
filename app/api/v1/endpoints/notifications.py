"""In-app notifications API: list and mark as read."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import (
    PageParams,
    get_agency,
    get_notification_repo,
    get_notification_repo_for_write,
    get_page_params,
)
from app.api.v1.endpoints._records import get_owned
from app.application.dtos.agency import AgencyResult
from app.core.limiter import limit_writes
from app.domain.enums import RecipientType
from app.infrastructure.persistence.repositories.messaging_repo import (
    NotificationRepository,
)
from app.schemas.common import Page
from app.schemas.records import NotificationResponse
from app.shared.enums import NotificationStatus
from app.shared.utils.datetime import utc_now

router = APIRouter()


@router.get("", response_model=Page[NotificationResponse])
async def list_notifications(
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[NotificationRepository, Depends(get_notification_repo)],
    paging: Annotated[PageParams, Depends(get_page_params)],
    recipient_id: str | None = None,
    recipient_type: RecipientType | None = None,
    status: NotificationStatus | None = None,
):
    filters = {
        "recipient_id": recipient_id,
        "recipient_type": recipient_type.value if recipient_type else None,
        "status": status.value if status else None,
    }
    rows = await repo.list_by_agency(
        agency.id, skip=paging.skip, limit=paging.limit, filters=filters
    )
    total = await repo.count_by_agency(agency.id, filters=filters)
    return Page(
        items=[NotificationResponse.model_validate(r) for r in rows],
        total=total,
        page=paging.page,
        limit=paging.limit,
    )


@router.post("/{notification_id}/read", response_model=NotificationResponse)
@limit_writes
async def mark_notification_read(
    request: Request,
    notification_id: str,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[NotificationRepository, Depends(get_notification_repo_for_write)],
):
    """Mark a notification READ; read_at keeps the first read time."""
    notification = await get_owned(repo, agency.id, notification_id, "notification")
    if notification.read_at is None:
        notification.read_at = utc_now()
    notification.status = NotificationStatus.READ.value
    notification = await repo.update(notification)
    return NotificationResponse.model_validate(notification)
