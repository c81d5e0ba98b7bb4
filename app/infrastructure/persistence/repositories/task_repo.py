"""Task repository: CRUD plus the overdue sweep query."""

from collections.abc import Iterable
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.models.task import Task
from app.infrastructure.persistence.repositories.base import AgencyScopedRepository


class TaskRepository(AgencyScopedRepository[Task]):
    filterable = frozenset({"status", "priority", "assigned_to", "student_id", "lead_id"})

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Task)

    async def find_overdue(
        self, agency_id: str, now: datetime, statuses: Iterable[str]
    ) -> list[Task]:
        """Open tasks (status in statuses) whose due_date is before now."""
        q = (
            self._scoped(agency_id)
            .where(
                Task.due_date.is_not(None),
                Task.due_date < now,
                Task.status.in_(list(statuses)),
            )
            .order_by(Task.due_date.asc())
        )
        result = await self.db.execute(q)
        return list(result.scalars().all())
