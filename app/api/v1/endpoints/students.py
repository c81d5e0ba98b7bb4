"""Students API. Writes dispatch STUDENT_* automation events."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import (
    PageParams,
    get_agency,
    get_event_dispatcher,
    get_lead_repo_for_write,
    get_page_params,
    get_student_repo,
    get_student_repo_for_write,
)
from app.api.v1.endpoints._records import apply_changes, get_owned
from app.application.dtos.agency import AgencyResult
from app.application.use_cases.automation import EntityChange, EntityEventDispatcher
from app.core.limiter import limit_writes
from app.domain.enums import EntityType, StudentStatus
from app.domain.value_objects import EntityRef
from app.infrastructure.persistence.models.student import Student
from app.infrastructure.persistence.repositories.lead_repo import LeadRepository
from app.infrastructure.persistence.repositories.student_repo import StudentRepository
from app.schemas.common import Page
from app.schemas.records import StudentCreate, StudentResponse, StudentUpdate

router = APIRouter()


@router.get("", response_model=Page[StudentResponse])
async def list_students(
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[StudentRepository, Depends(get_student_repo)],
    paging: Annotated[PageParams, Depends(get_page_params)],
    status: StudentStatus | None = None,
    stage: str | None = None,
    assigned_to: str | None = None,
):
    filters = {
        "status": status.value if status else None,
        "stage": stage,
        "assigned_to": assigned_to,
    }
    rows = await repo.list_by_agency(
        agency.id, skip=paging.skip, limit=paging.limit, filters=filters
    )
    total = await repo.count_by_agency(agency.id, filters=filters)
    return Page(
        items=[StudentResponse.model_validate(r) for r in rows],
        total=total,
        page=paging.page,
        limit=paging.limit,
    )


@router.post("", response_model=StudentResponse, status_code=201)
@limit_writes
async def create_student(
    request: Request,
    body: StudentCreate,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[StudentRepository, Depends(get_student_repo_for_write)],
    lead_repo: Annotated[LeadRepository, Depends(get_lead_repo_for_write)],
    dispatcher: Annotated[EntityEventDispatcher, Depends(get_event_dispatcher)],
):
    """Create a student; lead_id, when given, must be a lead of the agency."""
    if body.lead_id:
        await get_owned(lead_repo, agency.id, body.lead_id, "lead")
    student = await repo.create(Student(agency_id=agency.id, **body.changes()))
    await dispatcher.dispatch_change(
        agency.id, EntityRef(EntityType.STUDENT, student.id), EntityChange.CREATED
    )
    student = await repo.refresh(student)
    return StudentResponse.model_validate(student)


@router.get("/{student_id}", response_model=StudentResponse)
async def get_student(
    student_id: str,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[StudentRepository, Depends(get_student_repo)],
):
    return StudentResponse.model_validate(
        await get_owned(repo, agency.id, student_id, "student")
    )


@router.patch("/{student_id}", response_model=StudentResponse)
@limit_writes
async def update_student(
    request: Request,
    student_id: str,
    body: StudentUpdate,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[StudentRepository, Depends(get_student_repo_for_write)],
    dispatcher: Annotated[EntityEventDispatcher, Depends(get_event_dispatcher)],
):
    student = await get_owned(repo, agency.id, student_id, "student")
    previous_status = student.status
    apply_changes(student, body.changes())
    student = await repo.update(student)
    await dispatcher.dispatch_change(
        agency.id,
        EntityRef(EntityType.STUDENT, student.id),
        EntityChange.UPDATED,
        previous_status=previous_status,
        status=student.status,
        data={"previous_status": previous_status},
    )
    student = await repo.refresh(student)
    return StudentResponse.model_validate(student)


@router.delete("/{student_id}", status_code=204)
@limit_writes
async def delete_student(
    request: Request,
    student_id: str,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[StudentRepository, Depends(get_student_repo_for_write)],
    dispatcher: Annotated[EntityEventDispatcher, Depends(get_event_dispatcher)],
) -> None:
    """Delete a student with its applications, tasks and appointments (cascade)."""
    student = await get_owned(repo, agency.id, student_id, "student")
    await dispatcher.dispatch_change(
        agency.id, EntityRef(EntityType.STUDENT, student.id), EntityChange.DELETED
    )
    await repo.delete(student)
