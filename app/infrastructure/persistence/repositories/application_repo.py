"""Study application repository."""

from collections.abc import Iterable
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.models.study_application import StudyApplication
from app.infrastructure.persistence.repositories.base import AgencyScopedRepository


class ApplicationRepository(AgencyScopedRepository[StudyApplication]):
    filterable = frozenset({"status", "student_id", "assigned_to"})

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, StudyApplication)

    async def find_deadlines_between(
        self,
        agency_id: str,
        start: datetime,
        end: datetime,
        statuses: Iterable[str],
    ) -> list[StudyApplication]:
        """Applications in one of statuses whose deadline falls in [start, end]."""
        q = (
            self._scoped(agency_id)
            .where(
                StudyApplication.deadline.is_not(None),
                StudyApplication.deadline >= start,
                StudyApplication.deadline <= end,
                StudyApplication.status.in_(list(statuses)),
            )
            .order_by(StudyApplication.deadline.asc())
        )
        result = await self.db.execute(q)
        return list(result.scalars().all())
