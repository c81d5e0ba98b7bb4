"""Automation repositories: triggers, execution records, scheduled executions."""

from collections import defaultdict
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.enums import EVENT_DISPATCH_TRIGGER_TYPES
from app.infrastructure.persistence.models.automation import (
    AutomationExecution,
    AutomationTrigger,
    ScheduledExecution,
)
from app.infrastructure.persistence.repositories.base import AgencyScopedRepository
from app.shared.enums import ScheduledExecutionStatus


class TriggerRepository(AgencyScopedRepository[AutomationTrigger]):
    filterable = frozenset({"trigger_type", "event_type", "is_active", "workflow_id"})

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, AutomationTrigger)

    def _default_order(self) -> tuple[Any, ...]:
        return (AutomationTrigger.priority.desc(), AutomationTrigger.created_at.desc())

    async def find_for_event(self, agency_id: str, event_type: str) -> list[AutomationTrigger]:
        """Active event/condition triggers for event_type: highest priority first, then oldest."""
        q = (
            self._scoped(agency_id)
            .where(
                AutomationTrigger.event_type == event_type,
                AutomationTrigger.is_active.is_(True),
                AutomationTrigger.trigger_type.in_(
                    [t.value for t in EVENT_DISPATCH_TRIGGER_TYPES]
                ),
            )
            .order_by(AutomationTrigger.priority.desc(), AutomationTrigger.created_at.asc())
        )
        result = await self.db.execute(q)
        return list(result.scalars().all())

    async def find_active_for_workflow(
        self, agency_id: str, workflow_id: str
    ) -> list[AutomationTrigger]:
        q = (
            self._scoped(agency_id)
            .where(
                AutomationTrigger.workflow_id == workflow_id,
                AutomationTrigger.is_active.is_(True),
            )
            .order_by(AutomationTrigger.priority.desc(), AutomationTrigger.created_at.asc())
        )
        result = await self.db.execute(q)
        return list(result.scalars().all())


class ExecutionRepository(AgencyScopedRepository[AutomationExecution]):
    filterable = frozenset({"trigger_id", "status", "entity_type", "entity_id"})

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, AutomationExecution)

    def _default_order(self) -> tuple[Any, ...]:
        return (AutomationExecution.executed_at.desc(),)

    async def recent_by_trigger(
        self, trigger_ids: Sequence[str], per_trigger: int
    ) -> dict[str, list[AutomationExecution]]:
        """Latest per_trigger executions for each trigger id, newest first."""
        if not trigger_ids:
            return {}
        ranked = (
            select(
                AutomationExecution.id.label("id"),
                func.row_number()
                .over(
                    partition_by=AutomationExecution.trigger_id,
                    order_by=AutomationExecution.executed_at.desc(),
                )
                .label("rn"),
            )
            .where(AutomationExecution.trigger_id.in_(list(trigger_ids)))
            .subquery()
        )
        q = (
            select(AutomationExecution)
            .join(ranked, ranked.c.id == AutomationExecution.id)
            .where(ranked.c.rn <= per_trigger)
            .order_by(AutomationExecution.executed_at.desc())
        )
        result = await self.db.execute(q)
        grouped: dict[str, list[AutomationExecution]] = defaultdict(list)
        for execution in result.scalars().all():
            grouped[execution.trigger_id].append(execution)
        return dict(grouped)


class ScheduledExecutionRepository(AgencyScopedRepository[ScheduledExecution]):
    filterable = frozenset({"trigger_id", "status"})

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, ScheduledExecution)

    def _default_order(self) -> tuple[Any, ...]:
        return (ScheduledExecution.scheduled_for.asc(),)

    async def claim_due(
        self, agency_id: str, now: datetime, limit: int
    ) -> list[ScheduledExecution]:
        """Lock and return due SCHEDULED rows; concurrent runners skip rows already claimed."""
        q = (
            self._scoped(agency_id)
            .where(
                ScheduledExecution.status == ScheduledExecutionStatus.SCHEDULED.value,
                ScheduledExecution.scheduled_for <= now,
            )
            .order_by(ScheduledExecution.scheduled_for.asc())
            .limit(limit)
            .with_for_update(skip_locked=True)
        )
        result = await self.db.execute(q)
        return list(result.scalars().all())

    async def cancel_pending(self, agency_id: str, trigger_id: str) -> int:
        """Cancel queued occurrences of a trigger. Returns the number of rows changed."""
        result = await self.db.execute(
            update(ScheduledExecution)
            .where(
                ScheduledExecution.agency_id == agency_id,
                ScheduledExecution.trigger_id == trigger_id,
                ScheduledExecution.status == ScheduledExecutionStatus.SCHEDULED.value,
            )
            .values(status=ScheduledExecutionStatus.CANCELLED.value)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0
