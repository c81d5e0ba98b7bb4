"""Appointments API. Writes dispatch APPOINTMENT_* automation events."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import (
    PageParams,
    get_agency,
    get_appointment_repo,
    get_appointment_repo_for_write,
    get_event_dispatcher,
    get_page_params,
)
from app.api.v1.endpoints._records import apply_changes, get_owned
from app.application.dtos.agency import AgencyResult
from app.application.use_cases.automation import EntityChange, EntityEventDispatcher
from app.core.limiter import limit_writes
from app.domain.enums import AppointmentStatus, EntityType
from app.domain.exceptions import ValidationException
from app.domain.value_objects import EntityRef
from app.infrastructure.persistence.models.appointment import Appointment
from app.infrastructure.persistence.repositories.appointment_repo import (
    AppointmentRepository,
)
from app.schemas.common import Page
from app.schemas.records import AppointmentCreate, AppointmentResponse, AppointmentUpdate

router = APIRouter()


def _check_window(appointment: Appointment) -> None:
    if appointment.end_time <= appointment.start_time:
        raise ValidationException("end_time must be after start_time", field="end_time")


@router.get("", response_model=Page[AppointmentResponse])
async def list_appointments(
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[AppointmentRepository, Depends(get_appointment_repo)],
    paging: Annotated[PageParams, Depends(get_page_params)],
    status: AppointmentStatus | None = None,
    student_id: str | None = None,
    lead_id: str | None = None,
    assigned_to: str | None = None,
):
    filters = {
        "status": status.value if status else None,
        "student_id": student_id,
        "lead_id": lead_id,
        "assigned_to": assigned_to,
    }
    rows = await repo.list_by_agency(
        agency.id, skip=paging.skip, limit=paging.limit, filters=filters
    )
    total = await repo.count_by_agency(agency.id, filters=filters)
    return Page(
        items=[AppointmentResponse.model_validate(r) for r in rows],
        total=total,
        page=paging.page,
        limit=paging.limit,
    )


@router.post("", response_model=AppointmentResponse, status_code=201)
@limit_writes
async def create_appointment(
    request: Request,
    body: AppointmentCreate,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[AppointmentRepository, Depends(get_appointment_repo_for_write)],
    dispatcher: Annotated[EntityEventDispatcher, Depends(get_event_dispatcher)],
):
    appointment = Appointment(agency_id=agency.id, **body.changes())
    _check_window(appointment)
    appointment = await repo.create(appointment)
    await dispatcher.dispatch_change(
        agency.id,
        EntityRef(EntityType.APPOINTMENT, appointment.id),
        EntityChange.CREATED,
    )
    appointment = await repo.refresh(appointment)
    return AppointmentResponse.model_validate(appointment)


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: str,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[AppointmentRepository, Depends(get_appointment_repo)],
):
    return AppointmentResponse.model_validate(
        await get_owned(repo, agency.id, appointment_id, "appointment")
    )


@router.patch("/{appointment_id}", response_model=AppointmentResponse)
@limit_writes
async def update_appointment(
    request: Request,
    appointment_id: str,
    body: AppointmentUpdate,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[AppointmentRepository, Depends(get_appointment_repo_for_write)],
    dispatcher: Annotated[EntityEventDispatcher, Depends(get_event_dispatcher)],
):
    """Update an appointment. Cancelling it also dispatches APPOINTMENT_CANCELLED."""
    appointment = await get_owned(repo, agency.id, appointment_id, "appointment")
    previous_status = appointment.status
    apply_changes(appointment, body.changes())
    _check_window(appointment)
    appointment = await repo.update(appointment)
    await dispatcher.dispatch_change(
        agency.id,
        EntityRef(EntityType.APPOINTMENT, appointment.id),
        EntityChange.UPDATED,
        previous_status=previous_status,
        status=appointment.status,
        data={"previous_status": previous_status},
    )
    appointment = await repo.refresh(appointment)
    return AppointmentResponse.model_validate(appointment)


@router.delete("/{appointment_id}", status_code=204)
@limit_writes
async def delete_appointment(
    request: Request,
    appointment_id: str,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[AppointmentRepository, Depends(get_appointment_repo_for_write)],
) -> None:
    appointment = await get_owned(repo, agency.id, appointment_id, "appointment")
    await repo.delete(appointment)
