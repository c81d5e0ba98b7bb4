"""Agency repository with optional subdomain cache. Returns application DTOs."""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.agency import AgencyResult
from app.core.constants import AGENCY_CACHE_MISS_MARKER
from app.domain.enums import AgencyStatus
from app.domain.exceptions import AgencyAlreadyExistsException
from app.infrastructure.cache.cache_protocol import CacheProtocol
from app.infrastructure.cache.keys import agency_subdomain_key
from app.infrastructure.persistence.models.agency import Agency
from app.infrastructure.persistence.repositories.base import BaseRepository


def _agency_to_result(a: Agency) -> AgencyResult:
    """Map ORM Agency to application AgencyResult."""
    return AgencyResult(
        id=a.id,
        subdomain=a.subdomain,
        name=a.name,
        status=AgencyStatus(a.status),
        email=a.email,
    )


def _agency_to_dict(a: Agency) -> dict[str, Any]:
    return {
        "id": a.id,
        "subdomain": a.subdomain,
        "name": a.name,
        "status": a.status,
        "email": a.email,
    }


def _agency_from_cached(cached: dict[str, Any]) -> AgencyResult:
    return AgencyResult(
        id=cached["id"],
        subdomain=cached["subdomain"],
        name=cached["name"],
        status=AgencyStatus(cached["status"]),
        email=cached.get("email"),
    )


class AgencyRepository(BaseRepository[Agency]):
    """Agency repository. Optional cache (inject cache_ttl); negative lookups are cached too."""

    def __init__(
        self,
        db: AsyncSession,
        cache_service: CacheProtocol | None = None,
        *,
        cache_ttl: int = 60,
    ) -> None:
        super().__init__(db, Agency)
        self.cache = cache_service
        self.cache_ttl = cache_ttl

    def _cache_ready(self) -> bool:
        return self.cache is not None and self.cache.is_available()

    async def get_by_subdomain(self, subdomain: str) -> AgencyResult | None:
        """Resolve an agency by subdomain, from cache if available."""
        key = agency_subdomain_key(subdomain)
        if self._cache_ready():
            cached = await self.cache.get(key)
            if isinstance(cached, dict):
                if cached.get("id") == AGENCY_CACHE_MISS_MARKER:
                    return None
                return _agency_from_cached(cached)
        result = await self.db.execute(select(Agency).where(Agency.subdomain == subdomain))
        agency = result.scalar_one_or_none()
        if self._cache_ready():
            value = (
                _agency_to_dict(agency)
                if agency
                else {"id": AGENCY_CACHE_MISS_MARKER}
            )
            await self.cache.set(key, value, ttl=self.cache_ttl)
        return _agency_to_result(agency) if agency else None

    async def list_active(self) -> list[AgencyResult]:
        """All ACTIVE agencies ordered by subdomain (uncached; used by batch jobs)."""
        result = await self.db.execute(
            select(Agency)
            .where(Agency.status == AgencyStatus.ACTIVE.value)
            .order_by(Agency.subdomain)
        )
        return [_agency_to_result(a) for a in result.scalars().all()]

    async def create_agency(
        self, subdomain: str, name: str, email: str | None = None
    ) -> AgencyResult:
        """Create an ACTIVE agency.

        Raises AgencyAlreadyExistsException on unique constraint violation (duplicate subdomain).
        """
        agency = Agency(
            subdomain=subdomain,
            name=name,
            email=email,
            status=AgencyStatus.ACTIVE.value,
        )
        try:
            async with self.db.begin_nested():
                created = await self.create(agency)
        except IntegrityError:
            raise AgencyAlreadyExistsException(subdomain)
        return _agency_to_result(created)

    async def _on_after_create(self, obj: Agency) -> None:
        await _invalidate_agency_cache(self.cache, obj.subdomain)

    async def _on_after_update(self, obj: Agency) -> None:
        await _invalidate_agency_cache(self.cache, obj.subdomain)

    async def _on_before_delete(self, obj: Agency) -> None:
        await _invalidate_agency_cache(self.cache, obj.subdomain)


async def _invalidate_agency_cache(cache: CacheProtocol | None, subdomain: str) -> None:
    if cache and cache.is_available():
        await cache.delete(agency_subdomain_key(subdomain))
