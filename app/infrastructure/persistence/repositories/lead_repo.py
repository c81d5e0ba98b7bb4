"""Lead repository."""

from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.models.lead import Lead
from app.infrastructure.persistence.repositories.base import AgencyScopedRepository


class LeadRepository(AgencyScopedRepository[Lead]):
    filterable = frozenset({"status", "source", "assigned_to"})

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Lead)
