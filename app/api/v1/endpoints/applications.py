"""University applications API. Writes dispatch APPLICATION_* automation events."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import (
    PageParams,
    get_agency,
    get_application_repo,
    get_application_repo_for_write,
    get_event_dispatcher,
    get_page_params,
    get_student_repo_for_write,
)
from app.api.v1.endpoints._records import apply_changes, get_owned
from app.application.dtos.agency import AgencyResult
from app.application.use_cases.automation import EntityChange, EntityEventDispatcher
from app.core.limiter import limit_writes
from app.domain.enums import ApplicationStatus, EntityType
from app.domain.value_objects import EntityRef
from app.infrastructure.persistence.models.study_application import StudyApplication
from app.infrastructure.persistence.repositories.application_repo import (
    ApplicationRepository,
)
from app.infrastructure.persistence.repositories.student_repo import StudentRepository
from app.schemas.common import Page
from app.schemas.records import ApplicationCreate, ApplicationResponse, ApplicationUpdate

router = APIRouter()


@router.get("", response_model=Page[ApplicationResponse])
async def list_applications(
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[ApplicationRepository, Depends(get_application_repo)],
    paging: Annotated[PageParams, Depends(get_page_params)],
    status: ApplicationStatus | None = None,
    student_id: str | None = None,
    assigned_to: str | None = None,
):
    filters = {
        "status": status.value if status else None,
        "student_id": student_id,
        "assigned_to": assigned_to,
    }
    rows = await repo.list_by_agency(
        agency.id, skip=paging.skip, limit=paging.limit, filters=filters
    )
    total = await repo.count_by_agency(agency.id, filters=filters)
    return Page(
        items=[ApplicationResponse.model_validate(r) for r in rows],
        total=total,
        page=paging.page,
        limit=paging.limit,
    )


@router.post("", response_model=ApplicationResponse, status_code=201)
@limit_writes
async def create_application(
    request: Request,
    body: ApplicationCreate,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[ApplicationRepository, Depends(get_application_repo_for_write)],
    student_repo: Annotated[StudentRepository, Depends(get_student_repo_for_write)],
    dispatcher: Annotated[EntityEventDispatcher, Depends(get_event_dispatcher)],
):
    """Create an application for a student of the agency (404 otherwise)."""
    await get_owned(student_repo, agency.id, body.student_id, "student")
    application = await repo.create(StudyApplication(agency_id=agency.id, **body.changes()))
    await dispatcher.dispatch_change(
        agency.id,
        EntityRef(EntityType.APPLICATION, application.id),
        EntityChange.CREATED,
    )
    application = await repo.refresh(application)
    return ApplicationResponse.model_validate(application)


@router.get("/{application_id}", response_model=ApplicationResponse)
async def get_application(
    application_id: str,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[ApplicationRepository, Depends(get_application_repo)],
):
    return ApplicationResponse.model_validate(
        await get_owned(repo, agency.id, application_id, "application")
    )


@router.patch("/{application_id}", response_model=ApplicationResponse)
@limit_writes
async def update_application(
    request: Request,
    application_id: str,
    body: ApplicationUpdate,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[ApplicationRepository, Depends(get_application_repo_for_write)],
    dispatcher: Annotated[EntityEventDispatcher, Depends(get_event_dispatcher)],
):
    application = await get_owned(repo, agency.id, application_id, "application")
    previous_status = application.status
    apply_changes(application, body.changes())
    application = await repo.update(application)
    await dispatcher.dispatch_change(
        agency.id,
        EntityRef(EntityType.APPLICATION, application.id),
        EntityChange.UPDATED,
        previous_status=previous_status,
        status=application.status,
        data={"previous_status": previous_status},
    )
    application = await repo.refresh(application)
    return ApplicationResponse.model_validate(application)


@router.delete("/{application_id}", status_code=204)
@limit_writes
async def delete_application(
    request: Request,
    application_id: str,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[ApplicationRepository, Depends(get_application_repo_for_write)],
    dispatcher: Annotated[EntityEventDispatcher, Depends(get_event_dispatcher)],
) -> None:
    application = await get_owned(repo, agency.id, application_id, "application")
    await dispatcher.dispatch_change(
        agency.id,
        EntityRef(EntityType.APPLICATION, application.id),
        EntityChange.DELETED,
    )
    await repo.delete(application)
