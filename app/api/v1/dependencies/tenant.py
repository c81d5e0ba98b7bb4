"""Agency (tenant) resolution and provisioning dependencies (composition root)."""

from __future__ import annotations

import secrets
from typing import Annotated

from fastapi import Depends, Header, Path
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.agency import AgencyResult
from app.application.services.agency_provisioning_service import (
    AgencyProvisioningService,
)
from app.core.config import get_settings
from app.core.tenant_validation import normalize_subdomain
from app.domain.exceptions import (
    AgencyNotFoundException,
    ProvisioningNotConfiguredException,
    ProvisioningUnauthorizedException,
)
from app.infrastructure.cache.redis_cache import CacheService
from app.infrastructure.persistence.database import get_db, get_db_transactional
from app.infrastructure.persistence.models.user import User
from app.infrastructure.persistence.repositories import AgencyRepository, UserRepository

from .common import get_cache


async def get_agency_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
    cache: Annotated[CacheService | None, Depends(get_cache)],
) -> AgencyRepository:
    """Agency repository for resolution (read session, Redis cache when available)."""
    return AgencyRepository(db, cache, cache_ttl=get_settings().cache_ttl_agencies)


async def get_agency(
    subdomain: Annotated[str, Path(description="Agency subdomain")],
    agency_repo: Annotated[AgencyRepository, Depends(get_agency_repo)],
) -> AgencyResult:
    """Resolve {subdomain} to an active agency.

    Raises:
        InvalidSubdomainException: malformed subdomain (400).
        AgencyNotFoundException: unknown or suspended agency (404).
    """
    normalized = normalize_subdomain(subdomain)
    agency = await agency_repo.get_by_subdomain(normalized)
    if agency is None or not agency.is_active:
        raise AgencyNotFoundException(normalized)
    return agency


def require_provisioning_secret(
    x_provisioning_secret: Annotated[str | None, Header()] = None,
) -> None:
    """Check X-Provisioning-Secret against PROVISIONING_SECRET (503 when unset, 401 on mismatch)."""
    configured = get_settings().provisioning_secret
    if configured is None or not configured.get_secret_value():
        raise ProvisioningNotConfiguredException()
    if not x_provisioning_secret or not secrets.compare_digest(
        x_provisioning_secret.encode(), configured.get_secret_value().encode()
    ):
        raise ProvisioningUnauthorizedException()


async def get_provisioning_service(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    cache: Annotated[CacheService | None, Depends(get_cache)],
) -> AgencyProvisioningService:
    """Provisioning service on the request transaction (agency + admin commit together)."""
    return AgencyProvisioningService(
        agency_repo=AgencyRepository(db, cache, cache_ttl=get_settings().cache_ttl_agencies),
        user_repo=UserRepository(db),
        user_factory=User,
    )
