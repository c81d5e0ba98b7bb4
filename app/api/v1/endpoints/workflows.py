"""Workflow API: CRUD plus manual execution of a workflow's triggers."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import (
    PageParams,
    get_agency,
    get_page_params,
    get_workflow_repo,
    get_workflow_service,
)
from app.application.dtos.agency import AgencyResult
from app.core.limiter import limit_writes
from app.domain.exceptions import ResourceNotFoundException, ValidationException
from app.domain.value_objects import EntityRef
from app.infrastructure.persistence.repositories.workflow_repo import WorkflowRepository
from app.infrastructure.services.workflow_service import WorkflowService
from app.schemas.automation import ExecutionResponse
from app.schemas.common import Page
from app.schemas.workflow import (
    WorkflowCreateRequest,
    WorkflowExecuteRequest,
    WorkflowExecuteResponse,
    WorkflowResponse,
    WorkflowUpdate,
)

router = APIRouter()


@router.get("", response_model=Page[WorkflowResponse])
async def list_workflows(
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[WorkflowRepository, Depends(get_workflow_repo)],
    paging: Annotated[PageParams, Depends(get_page_params)],
    is_active: bool | None = None,
):
    filters = {"is_active": is_active}
    rows = await repo.list_by_agency(
        agency.id, skip=paging.skip, limit=paging.limit, filters=filters
    )
    total = await repo.count_by_agency(agency.id, filters=filters)
    return Page(
        items=[WorkflowResponse.model_validate(w) for w in rows],
        total=total,
        page=paging.page,
        limit=paging.limit,
    )


@router.post("", response_model=WorkflowResponse, status_code=201)
@limit_writes
async def create_workflow(
    request: Request,
    body: WorkflowCreateRequest,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    service: Annotated[WorkflowService, Depends(get_workflow_service)],
):
    workflow = await service.create_workflow(agency.id, body.model_dump())
    return WorkflowResponse.model_validate(workflow)


@router.get("/{workflow_id}", response_model=WorkflowResponse)
async def get_workflow(
    workflow_id: str,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[WorkflowRepository, Depends(get_workflow_repo)],
):
    workflow = await repo.get_by_id_and_agency(workflow_id, agency.id)
    if workflow is None:
        raise ResourceNotFoundException("workflow", workflow_id)
    return WorkflowResponse.model_validate(workflow)


@router.patch("/{workflow_id}", response_model=WorkflowResponse)
@limit_writes
async def update_workflow(
    request: Request,
    workflow_id: str,
    body: WorkflowUpdate,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    service: Annotated[WorkflowService, Depends(get_workflow_service)],
):
    workflow = await service.update_workflow(
        agency.id, workflow_id, body.model_dump(exclude_unset=True)
    )
    return WorkflowResponse.model_validate(workflow)


@router.delete("/{workflow_id}", status_code=204)
@limit_writes
async def delete_workflow(
    request: Request,
    workflow_id: str,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    service: Annotated[WorkflowService, Depends(get_workflow_service)],
) -> None:
    """Delete a workflow; its triggers stay and are unlinked."""
    await service.delete_workflow(agency.id, workflow_id)


@router.post("/{workflow_id}/execute", response_model=WorkflowExecuteResponse)
@limit_writes
async def execute_workflow(
    request: Request,
    workflow_id: str,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    service: Annotated[WorkflowService, Depends(get_workflow_service)],
    body: WorkflowExecuteRequest | None = None,
):
    """Run every active trigger linked to the workflow. 400 when the workflow is inactive."""
    body = body or WorkflowExecuteRequest()
    if (body.entity_type is None) != (body.entity_id is None):
        raise ValidationException(
            "entity_type and entity_id must be given together", field="entity_id"
        )
    entity_ref = (
        EntityRef(body.entity_type, body.entity_id)
        if body.entity_type is not None and body.entity_id is not None
        else None
    )
    workflow, executions = await service.execute_workflow(
        agency.id, workflow_id, entity_ref, body.data
    )
    return WorkflowExecuteResponse(
        workflow=WorkflowResponse.model_validate(workflow),
        executions=[ExecutionResponse.model_validate(e) for e in executions],
    )
