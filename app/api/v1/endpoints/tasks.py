"""Tasks API. Creation dispatches TASK_CREATED; completing a task dispatches TASK_COMPLETED."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import (
    PageParams,
    get_agency,
    get_event_dispatcher,
    get_page_params,
    get_task_repo,
    get_task_repo_for_write,
    get_user_repo_for_write,
)
from app.api.v1.endpoints._records import apply_changes, get_owned
from app.application.dtos.agency import AgencyResult
from app.application.use_cases.automation import EntityChange, EntityEventDispatcher
from app.core.limiter import limit_writes
from app.domain.enums import EntityType, Priority, TaskStatus
from app.domain.value_objects import EntityRef
from app.infrastructure.persistence.models.task import Task
from app.infrastructure.persistence.repositories.task_repo import TaskRepository
from app.infrastructure.persistence.repositories.user_repo import UserRepository
from app.schemas.common import Page
from app.schemas.records import TaskCreate, TaskResponse, TaskUpdate
from app.shared.utils.datetime import utc_now

router = APIRouter()


@router.get("", response_model=Page[TaskResponse])
async def list_tasks(
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[TaskRepository, Depends(get_task_repo)],
    paging: Annotated[PageParams, Depends(get_page_params)],
    status: TaskStatus | None = None,
    priority: Priority | None = None,
    assigned_to: str | None = None,
    student_id: str | None = None,
    lead_id: str | None = None,
):
    filters = {
        "status": status.value if status else None,
        "priority": priority.value if priority else None,
        "assigned_to": assigned_to,
        "student_id": student_id,
        "lead_id": lead_id,
    }
    rows = await repo.list_by_agency(
        agency.id, skip=paging.skip, limit=paging.limit, filters=filters
    )
    total = await repo.count_by_agency(agency.id, filters=filters)
    return Page(
        items=[TaskResponse.model_validate(r) for r in rows],
        total=total,
        page=paging.page,
        limit=paging.limit,
    )


@router.post("", response_model=TaskResponse, status_code=201)
@limit_writes
async def create_task(
    request: Request,
    body: TaskCreate,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[TaskRepository, Depends(get_task_repo_for_write)],
    user_repo: Annotated[UserRepository, Depends(get_user_repo_for_write)],
    dispatcher: Annotated[EntityEventDispatcher, Depends(get_event_dispatcher)],
):
    """Create a task; assigned_to, when given, must be a user of the agency."""
    if body.assigned_to:
        await get_owned(user_repo, agency.id, body.assigned_to, "user")
    values = body.changes()
    if values.get("status") == TaskStatus.COMPLETED.value:
        values["completed_at"] = utc_now()
    task = await repo.create(Task(agency_id=agency.id, **values))
    await dispatcher.dispatch_change(
        agency.id, EntityRef(EntityType.TASK, task.id), EntityChange.CREATED
    )
    task = await repo.refresh(task)
    return TaskResponse.model_validate(task)


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: str,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[TaskRepository, Depends(get_task_repo)],
):
    return TaskResponse.model_validate(await get_owned(repo, agency.id, task_id, "task"))


@router.patch("/{task_id}", response_model=TaskResponse)
@limit_writes
async def update_task(
    request: Request,
    task_id: str,
    body: TaskUpdate,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[TaskRepository, Depends(get_task_repo_for_write)],
    user_repo: Annotated[UserRepository, Depends(get_user_repo_for_write)],
    dispatcher: Annotated[EntityEventDispatcher, Depends(get_event_dispatcher)],
):
    """Update a task. Moving it to COMPLETED stamps completed_at; reopening clears it."""
    task = await get_owned(repo, agency.id, task_id, "task")
    values = body.changes()
    if values.get("assigned_to"):
        await get_owned(user_repo, agency.id, values["assigned_to"], "user")
    previous_status = task.status
    apply_changes(task, values)
    if task.status != previous_status:
        task.completed_at = utc_now() if task.status == TaskStatus.COMPLETED.value else None
    task = await repo.update(task)
    await dispatcher.dispatch_change(
        agency.id,
        EntityRef(EntityType.TASK, task.id),
        EntityChange.UPDATED,
        previous_status=previous_status,
        status=task.status,
        data={"previous_status": previous_status},
    )
    task = await repo.refresh(task)
    return TaskResponse.model_validate(task)


@router.delete("/{task_id}", status_code=204)
@limit_writes
async def delete_task(
    request: Request,
    task_id: str,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[TaskRepository, Depends(get_task_repo_for_write)],
) -> None:
    task = await get_owned(repo, agency.id, task_id, "task")
    await repo.delete(task)
