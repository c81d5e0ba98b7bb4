"""Base repositories: generic CRUD, agency-scoped queries and lifecycle hooks."""

from typing import Any, Generic, TypeVar

from sqlalchemy import func, inspect as sa_inspect, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import object_session
from sqlalchemy.sql import Select

from app.domain.exceptions import ResourceNotFoundException
from app.infrastructure.persistence.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository with get_by_id, create, update, delete and hooks.

    Subclasses override _on_after_create, _on_after_update, _on_before_delete
    for cache invalidation.
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def get_by_id(self, entity_id: str) -> ModelType | None:
        """Return a single record by primary key, or None."""
        model: Any = self.model
        result = await self.db.execute(select(self.model).where(model.id == entity_id))
        return result.scalar_one_or_none()

    async def create(self, obj: ModelType) -> ModelType:
        """Persist a new record and run _on_after_create hook."""
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        await self._on_after_create(obj)
        return obj

    async def update(self, obj: ModelType) -> ModelType:
        """Flush changes on a loaded record and run _on_after_update hook.

        Detached instances are merged after an existence check; raises
        ResourceNotFoundException if the row is gone.
        """
        if object_session(obj) is not self.db.sync_session:
            pk_attrs = sa_inspect(self.model).primary_key
            model: Any = self.model
            pk = getattr(obj, pk_attrs[0].key)
            exists = await self.db.execute(select(model.id).where(model.id == pk))
            if exists.scalar_one_or_none() is None:
                raise ResourceNotFoundException(self.model.__name__, str(pk))
            obj = await self.db.merge(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        await self._on_after_update(obj)
        return obj

    async def refresh(self, obj: ModelType) -> ModelType:
        """Reload a record from the current transaction.

        Automation runs on the same session; a rolled-back savepoint expires
        rows it touched, so routes reload before serializing.
        """
        await self.db.refresh(obj)
        return obj

    async def delete(self, obj: ModelType) -> None:
        """Run _on_before_delete hook then delete the record."""
        await self._on_before_delete(obj)
        await self.db.delete(obj)
        await self.db.flush()

    async def _on_after_create(self, obj: ModelType) -> None:
        """Override in subclasses to invalidate caches."""

    async def _on_after_update(self, obj: ModelType) -> None:
        """Override in subclasses to invalidate caches."""

    async def _on_before_delete(self, obj: ModelType) -> None:
        """Override in subclasses to invalidate caches."""


class AgencyScopedRepository(BaseRepository[ModelType]):
    """Repository for tables carrying agency_id. Every read filters on it."""

    # Column names accepted as equality filters by list_by_agency.
    filterable: frozenset[str] = frozenset()

    def _scoped(self, agency_id: str) -> Select[Any]:
        model: Any = self.model
        return select(self.model).where(model.agency_id == agency_id)

    def _apply_filters(self, q: Select[Any], filters: dict[str, Any] | None) -> Select[Any]:
        for key, value in (filters or {}).items():
            if value is None:
                continue
            if key not in self.filterable:
                raise ValueError(f"{self.model.__name__} cannot be filtered by {key!r}")
            q = q.where(getattr(self.model, key) == value)
        return q

    def _default_order(self) -> tuple[Any, ...]:
        model: Any = self.model
        return (model.created_at.desc(),)

    async def get_by_id_and_agency(
        self, entity_id: str, agency_id: str
    ) -> ModelType | None:
        model: Any = self.model
        result = await self.db.execute(
            self._scoped(agency_id).where(model.id == entity_id)
        )
        return result.scalar_one_or_none()

    async def list_by_agency(
        self,
        agency_id: str,
        *,
        skip: int = 0,
        limit: int = 100,
        filters: dict[str, Any] | None = None,
    ) -> list[ModelType]:
        """Return agency rows, newest first, with optional equality filters."""
        q = self._apply_filters(self._scoped(agency_id), filters)
        q = q.order_by(*self._default_order()).offset(skip).limit(limit)
        result = await self.db.execute(q)
        return list(result.scalars().all())

    async def count_by_agency(
        self, agency_id: str, *, filters: dict[str, Any] | None = None
    ) -> int:
        model: Any = self.model
        q = self._apply_filters(
            select(func.count(model.id)).where(model.agency_id == agency_id), filters
        )
        result = await self.db.execute(q)
        return result.scalar_one() or 0
