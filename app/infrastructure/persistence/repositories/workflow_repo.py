"""Workflow repository."""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.models.workflow import Workflow
from app.infrastructure.persistence.repositories.base import AgencyScopedRepository


class WorkflowRepository(AgencyScopedRepository[Workflow]):
    filterable = frozenset({"is_active"})

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Workflow)

    async def record_execution(self, workflow: Workflow, executed_at: datetime) -> Workflow:
        """Bump execution_count (in SQL, so concurrent runs both count) and stamp last_executed_at."""
        workflow.execution_count = Workflow.execution_count + 1
        workflow.last_executed_at = executed_at
        return await self.update(workflow)
