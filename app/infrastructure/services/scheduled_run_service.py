"""Runs due scheduled executions of time-based triggers.

Polled by POST /automation/scheduled/run (or an external cron calling it).
Due rows are claimed with FOR UPDATE SKIP LOCKED so overlapping runners
never execute the same occurrence twice.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import ValidationError

from app.application.dtos.automation import (
    ScheduledRunResult,
    dump_variant,
    parse_schedule,
)
from app.application.services.schedule_calculator import next_run_at
from app.core.config import Settings
from app.domain.enums import TriggerType
from app.infrastructure.persistence.models.automation import ScheduledExecution
from app.infrastructure.persistence.repositories.automation_repo import (
    ScheduledExecutionRepository,
    TriggerRepository,
)
from app.infrastructure.services.automation_engine import AutomationEngine
from app.shared.enums import ScheduledExecutionStatus
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import add_span_attributes, traced
from app.shared.utils.datetime import ensure_utc, utc_now

logger = get_logger(__name__)


class ScheduledRunService:
    def __init__(
        self,
        settings: Settings,
        scheduled_repo: ScheduledExecutionRepository,
        trigger_repo: TriggerRepository,
        engine: AutomationEngine,
    ) -> None:
        self.settings = settings
        self.scheduled_repo = scheduled_repo
        self.trigger_repo = trigger_repo
        self.engine = engine

    @traced("automation.run_due")
    async def run_due(
        self, agency_id: str, now: datetime | None = None
    ) -> ScheduledRunResult:
        """Execute every due occurrence (up to the batch size) and queue the next ones."""
        now = ensure_utc(now) or utc_now()
        rows = await self.scheduled_repo.claim_due(
            agency_id, now, self.settings.scheduled_run_batch_size
        )
        add_span_attributes(claimed=len(rows))
        result = ScheduledRunResult(claimed=len(rows))
        for row in rows:
            await self._run_one(row, now, result)
        if rows:
            logger.info(
                "Scheduled run for agency %s: claimed=%d executed=%d cancelled=%d",
                agency_id,
                result.claimed,
                result.executed,
                result.cancelled,
            )
        return result

    async def _run_one(
        self, row: ScheduledExecution, now: datetime, result: ScheduledRunResult
    ) -> None:
        trigger = await self.trigger_repo.get_by_id_and_agency(row.trigger_id, row.agency_id)
        if (
            trigger is None
            or not trigger.is_active
            or trigger.trigger_type != TriggerType.TIME_BASED.value
        ):
            await self._cancel(row, now, "trigger missing, inactive or no longer time-based")
            result.cancelled += 1
            return
        try:
            schedule = parse_schedule(row.schedule)
        except ValidationError:
            await self._cancel(row, now, "stored schedule is invalid")
            result.cancelled += 1
            return

        row.status = ScheduledExecutionStatus.RUNNING.value
        row = await self.scheduled_repo.update(row)
        scheduled_for = ensure_utc(row.scheduled_for)
        execution = await self.engine.execute_trigger(
            trigger,
            schedule.target.to_ref() if schedule.target else None,
            {
                "scheduled_execution_id": row.id,
                "scheduled_for": scheduled_for.isoformat(),
            },
        )
        row.status = ScheduledExecutionStatus.COMPLETED.value
        row.execution_id = execution.id
        row.completed_at = utc_now()
        await self.scheduled_repo.update(row)
        result.executed += 1
        result.execution_ids.append(execution.id)

        await self.scheduled_repo.create(
            ScheduledExecution(
                agency_id=row.agency_id,
                trigger_id=trigger.id,
                scheduled_for=next_run_at(schedule, max(now, scheduled_for)),
                status=ScheduledExecutionStatus.SCHEDULED.value,
                schedule=dump_variant(schedule),
            )
        )

    async def _cancel(self, row: ScheduledExecution, now: datetime, reason: str) -> None:
        logger.warning("Cancelling scheduled execution %s: %s", row.id, reason)
        row.status = ScheduledExecutionStatus.CANCELLED.value
        row.completed_at = now
        await self.scheduled_repo.update(row)
