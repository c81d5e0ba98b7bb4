"""Agency staff users API: list and create."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import (
    PageParams,
    get_agency,
    get_page_params,
    get_user_repo,
    get_user_repo_for_write,
)
from app.application.dtos.agency import AgencyResult
from app.core.limiter import limit_writes
from app.domain.enums import UserRole
from app.infrastructure.persistence.models.user import User
from app.infrastructure.persistence.repositories.user_repo import UserRepository
from app.schemas.common import Page
from app.schemas.records import UserCreate, UserResponse

router = APIRouter()


@router.get("", response_model=Page[UserResponse])
async def list_users(
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[UserRepository, Depends(get_user_repo)],
    paging: Annotated[PageParams, Depends(get_page_params)],
    role: UserRole | None = None,
    is_active: bool | None = None,
):
    filters = {"role": role.value if role else None, "is_active": is_active}
    rows = await repo.list_by_agency(
        agency.id, skip=paging.skip, limit=paging.limit, filters=filters
    )
    total = await repo.count_by_agency(agency.id, filters=filters)
    return Page(
        items=[UserResponse.model_validate(r) for r in rows],
        total=total,
        page=paging.page,
        limit=paging.limit,
    )


@router.post("", response_model=UserResponse, status_code=201)
@limit_writes
async def create_user(
    request: Request,
    body: UserCreate,
    agency: Annotated[AgencyResult, Depends(get_agency)],
    repo: Annotated[UserRepository, Depends(get_user_repo_for_write)],
):
    """Create a staff user. 409 when the email is already used in the agency."""
    user = await repo.create_user(User(agency_id=agency.id, is_active=True, **body.changes()))
    return UserResponse.model_validate(user)
