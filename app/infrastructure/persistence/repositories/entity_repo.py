"""Entity repository: resolves an EntityRef to its agency-owned row."""

from typing import Any

from sqlalchemy import inspect, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.enums import EntityType
from app.domain.value_objects import EntityRef
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.appointment import Appointment
from app.infrastructure.persistence.models.document import Document
from app.infrastructure.persistence.models.lead import Lead
from app.infrastructure.persistence.models.student import Student
from app.infrastructure.persistence.models.study_application import StudyApplication
from app.infrastructure.persistence.models.task import Task

MODEL_BY_ENTITY_TYPE: dict[EntityType, type[Base]] = {
    EntityType.LEAD: Lead,
    EntityType.STUDENT: Student,
    EntityType.APPLICATION: StudyApplication,
    EntityType.TASK: Task,
    EntityType.APPOINTMENT: Appointment,
    EntityType.DOCUMENT: Document,
}


def entity_context(entity: Any) -> dict[str, Any]:
    """Column values of a loaded row keyed by attribute name.

    The JSON 'metadata' column is exposed under both names so conditions
    can address it the way the API shows it.
    """
    mapper = inspect(entity).mapper
    context: dict[str, Any] = {}
    for column in mapper.column_attrs:
        context[column.key] = getattr(entity, column.key)
    if "extra_data" in context:
        context["metadata"] = context["extra_data"]
    return context


class EntityRepository:
    """Loads lead/student/application/task/appointment/document rows by EntityRef."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def load(self, agency_id: str, ref: EntityRef) -> Any | None:
        """Return the row for ref when it belongs to agency_id, else None."""
        model: Any = MODEL_BY_ENTITY_TYPE[ref.entity_type]
        result = await self.db.execute(
            select(model).where(model.id == ref.entity_id, model.agency_id == agency_id)
        )
        return result.scalar_one_or_none()

    async def save(self, entity: Any) -> Any:
        await self.db.flush()
        await self.db.refresh(entity)
        return entity
