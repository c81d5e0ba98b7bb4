"""Trigger management: CRUD with schedule bookkeeping for time-based triggers."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ValidationError

from app.application.dtos.automation import (
    TriggerDefinition,
    dump_variant,
    parse_schedule,
)
from app.application.services.schedule_calculator import next_run_at
from app.core.constants import RECENT_EXECUTIONS_PER_TRIGGER
from app.domain.enums import TriggerType
from app.domain.exceptions import ResourceNotFoundException, ValidationException
from app.infrastructure.persistence.models.automation import (
    AutomationExecution,
    AutomationTrigger,
    ScheduledExecution,
)
from app.infrastructure.persistence.repositories.automation_repo import (
    ExecutionRepository,
    ScheduledExecutionRepository,
    TriggerRepository,
)
from app.infrastructure.persistence.repositories.workflow_repo import WorkflowRepository
from app.shared.enums import ScheduledExecutionStatus
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import utc_now

logger = get_logger(__name__)

# Fields a partial update may set; anything else is ignored.
_UPDATABLE = frozenset(
    {
        "name",
        "description",
        "trigger_type",
        "event_type",
        "conditions",
        "actions",
        "schedule",
        "is_active",
        "priority",
        "workflow_id",
        "metadata",
    }
)

# Changing any of these replaces the queued run of a time-based trigger.
_RESCHEDULE_ON = frozenset({"trigger_type", "schedule", "is_active"})


def _to_json(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return dump_variant(value)
    if isinstance(value, list):
        return [_to_json(item) for item in value]
    if isinstance(value, Enum):
        return value.value
    return value


class TriggerService:
    """Creates, updates, deletes and lists automation triggers for an agency."""

    def __init__(
        self,
        trigger_repo: TriggerRepository,
        execution_repo: ExecutionRepository,
        scheduled_repo: ScheduledExecutionRepository,
        workflow_repo: WorkflowRepository,
    ) -> None:
        self.trigger_repo = trigger_repo
        self.execution_repo = execution_repo
        self.scheduled_repo = scheduled_repo
        self.workflow_repo = workflow_repo

    async def get_trigger(self, agency_id: str, trigger_id: str) -> AutomationTrigger:
        trigger = await self.trigger_repo.get_by_id_and_agency(trigger_id, agency_id)
        if trigger is None:
            raise ResourceNotFoundException("trigger", trigger_id)
        return trigger

    async def list_triggers(
        self,
        agency_id: str,
        *,
        skip: int = 0,
        limit: int = 100,
        filters: dict[str, Any] | None = None,
    ) -> tuple[list[AutomationTrigger], dict[str, list[AutomationExecution]], int]:
        """Return (page, recent executions by trigger id, total)."""
        triggers = await self.trigger_repo.list_by_agency(
            agency_id, skip=skip, limit=limit, filters=filters
        )
        total = await self.trigger_repo.count_by_agency(agency_id, filters=filters)
        recent = await self.execution_repo.recent_by_trigger(
            [t.id for t in triggers], RECENT_EXECUTIONS_PER_TRIGGER
        )
        return triggers, recent, total

    async def list_executions(
        self, agency_id: str, trigger_id: str, *, skip: int = 0, limit: int = 100
    ) -> tuple[list[AutomationExecution], int]:
        await self.get_trigger(agency_id, trigger_id)
        filters = {"trigger_id": trigger_id}
        rows = await self.execution_repo.list_by_agency(
            agency_id, skip=skip, limit=limit, filters=filters
        )
        total = await self.execution_repo.count_by_agency(agency_id, filters=filters)
        return rows, total

    async def create_trigger(
        self, agency_id: str, definition: TriggerDefinition
    ) -> AutomationTrigger:
        """Create a trigger; a time-based trigger that is active gets its first run queued.

        Raises:
            ValidationException: no actions, or TIME_BASED without a schedule.
            ResourceNotFoundException: workflow_id is not a workflow of the agency.
        """
        if definition.workflow_id:
            await self._require_workflow(agency_id, definition.workflow_id)
        trigger = AutomationTrigger(
            agency_id=agency_id,
            workflow_id=definition.workflow_id,
            name=definition.name,
            description=definition.description,
            trigger_type=definition.trigger_type.value,
            event_type=definition.event_type.value,
            conditions=_to_json(definition.conditions),
            actions=_to_json(definition.actions),
            schedule=dump_variant(definition.schedule) if definition.schedule else None,
            is_active=definition.is_active,
            priority=definition.priority,
            extra_data=definition.metadata,
        )
        self._validate(trigger)
        trigger = await self.trigger_repo.create(trigger)
        await self._reschedule(trigger, utc_now())
        logger.info(
            "Created trigger %s (%s on %s) for agency %s",
            trigger.id,
            trigger.trigger_type,
            trigger.event_type,
            agency_id,
        )
        return trigger

    async def update_trigger(
        self, agency_id: str, trigger_id: str, changes: Mapping[str, Any]
    ) -> AutomationTrigger:
        """Apply a partial update; pending scheduled runs are replaced to match."""
        trigger = await self.get_trigger(agency_id, trigger_id)
        workflow_id = changes.get("workflow_id")
        if workflow_id:
            await self._require_workflow(agency_id, workflow_id)
        for key, value in changes.items():
            if key not in _UPDATABLE:
                continue
            column = "extra_data" if key == "metadata" else key
            setattr(trigger, column, _to_json(value))
        self._validate(trigger)
        trigger = await self.trigger_repo.update(trigger)
        if _RESCHEDULE_ON & changes.keys():
            await self._reschedule(trigger, utc_now())
        return trigger

    async def delete_trigger(self, agency_id: str, trigger_id: str) -> None:
        trigger = await self.get_trigger(agency_id, trigger_id)
        await self.trigger_repo.delete(trigger)

    async def _require_workflow(self, agency_id: str, workflow_id: str) -> None:
        if await self.workflow_repo.get_by_id_and_agency(workflow_id, agency_id) is None:
            raise ResourceNotFoundException("workflow", workflow_id)

    @staticmethod
    def _validate(trigger: AutomationTrigger) -> None:
        if not trigger.actions:
            raise ValidationException("At least one action is required", field="actions")
        if trigger.trigger_type == TriggerType.TIME_BASED.value and not trigger.schedule:
            raise ValidationException(
                "TIME_BASED triggers require a schedule", field="schedule"
            )

    async def _reschedule(self, trigger: AutomationTrigger, now: datetime) -> None:
        """Cancel queued runs and, for an active time-based trigger, queue the next one."""
        cancelled = await self.scheduled_repo.cancel_pending(trigger.agency_id, trigger.id)
        if cancelled:
            logger.debug("Cancelled %d pending runs of trigger %s", cancelled, trigger.id)
        if not trigger.is_active or trigger.trigger_type != TriggerType.TIME_BASED.value:
            return
        try:
            schedule = parse_schedule(trigger.schedule)
        except ValidationError as e:
            raise ValidationException(
                f"Invalid schedule ({e.error_count()} errors)", field="schedule"
            ) from e
        await self.scheduled_repo.create(
            ScheduledExecution(
                agency_id=trigger.agency_id,
                trigger_id=trigger.id,
                scheduled_for=next_run_at(schedule, now),
                status=ScheduledExecutionStatus.SCHEDULED.value,
                schedule=dump_variant(schedule),
            )
        )
