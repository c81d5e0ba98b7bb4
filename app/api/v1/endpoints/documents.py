"""Documents API (metadata only). Upload dispatches DOCUMENT_UPLOADED; verification DOCUMENT_VERIFIED."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import (
    PageParams,
    get_agency,
    get_document_repo,
    get_document_repo_for_write,
    get_event_dispatcher,
    get_page_params,
    get_student_repo_for_write,
)
from app.api.v1.endpoints._records import apply_changes, get_owned
from app.application.dtos.agency import AgencyResult
from app.application.use_cases.automation import EntityChange, EntityEventDispatcher
from app.core.limiter import limit_writes
from app.domain.enums import DocumentStatus, EntityType
from app.domain.value_objects import EntityRef
from app.infrastructure.persistence.models.document import Document
from app.infrastructure.persistence.repositories.document_repo import DocumentRepository
from app.infrastructure.persistence.repositories.student_repo import StudentRepository
from app.schemas.common import Page
from app.schemas.records import DocumentCreate, DocumentResponse, DocumentUpdate
from app.shared.utils.datetime import utc_now

router = APIRouter()


@router.get("", response_model=Page[DocumentResponse])
async def list_documents(
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[DocumentRepository, Depends(get_document_repo)],
    paging: Annotated[PageParams, Depends(get_page_params)],
    status: DocumentStatus | None = None,
    student_id: str | None = None,
    category: str | None = None,
):
    filters = {
        "status": status.value if status else None,
        "student_id": student_id,
        "category": category,
    }
    rows = await repo.list_by_agency(
        agency.id, skip=paging.skip, limit=paging.limit, filters=filters
    )
    total = await repo.count_by_agency(agency.id, filters=filters)
    return Page(
        items=[DocumentResponse.model_validate(r) for r in rows],
        total=total,
        page=paging.page,
        limit=paging.limit,
    )


@router.post("", response_model=DocumentResponse, status_code=201)
@limit_writes
async def create_document(
    request: Request,
    body: DocumentCreate,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[DocumentRepository, Depends(get_document_repo_for_write)],
    student_repo: Annotated[StudentRepository, Depends(get_student_repo_for_write)],
    dispatcher: Annotated[EntityEventDispatcher, Depends(get_event_dispatcher)],
):
    """Record an uploaded document (status PENDING)."""
    if body.student_id:
        await get_owned(student_repo, agency.id, body.student_id, "student")
    document = await repo.create(Document(agency_id=agency.id, **body.changes()))
    await dispatcher.dispatch_change(
        agency.id, EntityRef(EntityType.DOCUMENT, document.id), EntityChange.CREATED
    )
    document = await repo.refresh(document)
    return DocumentResponse.model_validate(document)


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: str,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[DocumentRepository, Depends(get_document_repo)],
):
    return DocumentResponse.model_validate(
        await get_owned(repo, agency.id, document_id, "document")
    )


@router.patch("/{document_id}", response_model=DocumentResponse)
@limit_writes
async def update_document(
    request: Request,
    document_id: str,
    body: DocumentUpdate,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[DocumentRepository, Depends(get_document_repo_for_write)],
    dispatcher: Annotated[EntityEventDispatcher, Depends(get_event_dispatcher)],
):
    document = await get_owned(repo, agency.id, document_id, "document")
    previous_status = document.status
    apply_changes(document, body.changes())
    if document.status != previous_status:
        document.verified_at = (
            utc_now() if document.status == DocumentStatus.VERIFIED.value else None
        )
    document = await repo.update(document)
    await dispatcher.dispatch_change(
        agency.id,
        EntityRef(EntityType.DOCUMENT, document.id),
        EntityChange.UPDATED,
        previous_status=previous_status,
        status=document.status,
        data={"previous_status": previous_status},
    )
    document = await repo.refresh(document)
    return DocumentResponse.model_validate(document)


@router.delete("/{document_id}", status_code=204)
@limit_writes
async def delete_document(
    request: Request,
    document_id: str,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[DocumentRepository, Depends(get_document_repo_for_write)],
) -> None:
    document = await get_owned(repo, agency.id, document_id, "document")
    await repo.delete(document)
