"""Appointment repository."""

from collections.abc import Iterable
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.models.appointment import Appointment
from app.infrastructure.persistence.repositories.base import AgencyScopedRepository


class AppointmentRepository(AgencyScopedRepository[Appointment]):
    filterable = frozenset({"status", "student_id", "lead_id", "assigned_to"})

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Appointment)

    def _default_order(self) -> tuple:
        return (Appointment.start_time.desc(),)

    async def find_started_between(
        self,
        agency_id: str,
        start: datetime,
        end: datetime,
        statuses: Iterable[str],
    ) -> list[Appointment]:
        """Appointments still in statuses whose start_time is in [start, end)."""
        q = (
            self._scoped(agency_id)
            .where(
                Appointment.start_time >= start,
                Appointment.start_time < end,
                Appointment.status.in_(list(statuses)),
            )
            .order_by(Appointment.start_time.asc())
        )
        result = await self.db.execute(q)
        return list(result.scalars().all())
