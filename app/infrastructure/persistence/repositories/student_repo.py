"""Student repository."""

from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.models.student import Student
from app.infrastructure.persistence.repositories.base import AgencyScopedRepository


class StudentRepository(AgencyScopedRepository[Student]):
    filterable = frozenset({"status", "stage", "assigned_to", "lead_id"})

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Student)
