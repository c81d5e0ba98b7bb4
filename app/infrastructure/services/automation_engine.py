"""Automation engine: dispatch events to triggers and run their actions (implements IAutomationEngine)."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.automation import parse_action, parse_conditions
from app.application.services.condition_evaluator import evaluate_conditions
from app.domain.entities.execution import ExecutionTally
from app.domain.value_objects import EntityRef
from app.infrastructure.persistence.models.automation import (
    AutomationExecution,
    AutomationTrigger,
)
from app.infrastructure.persistence.repositories.automation_repo import (
    ExecutionRepository,
    TriggerRepository,
)
from app.infrastructure.persistence.repositories.entity_repo import (
    EntityRepository,
    entity_context,
)
from app.infrastructure.persistence.repositories.workflow_repo import WorkflowRepository
from app.infrastructure.services.action_handlers import ActionContext, ActionHandlers
from app.shared.enums import ExecutionStatus
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import add_span_attributes, traced
from app.shared.utils.datetime import utc_now

logger = get_logger(__name__)


class AutomationEngine:
    """Finds matching triggers for an event, evaluates conditions and runs actions.

    Every action runs in its own savepoint: a failing action is rolled back
    and counted, and the remaining actions still run. Nothing is retried.
    """

    def __init__(
        self,
        db: AsyncSession,
        trigger_repo: TriggerRepository,
        execution_repo: ExecutionRepository,
        entity_repo: EntityRepository,
        workflow_repo: WorkflowRepository,
        actions: ActionHandlers,
    ) -> None:
        self.db = db
        self.trigger_repo = trigger_repo
        self.execution_repo = execution_repo
        self.entity_repo = entity_repo
        self.workflow_repo = workflow_repo
        self.actions = actions

    @traced("automation.handle_trigger_event")
    async def handle_trigger_event(
        self,
        agency_id: str,
        event_type: str,
        entity_ref: EntityRef,
        data: Mapping[str, Any] | None = None,
    ) -> list[AutomationExecution]:
        """Run every active event/condition trigger whose conditions match; return executions."""
        add_span_attributes(event_type=str(event_type), entity_type=entity_ref.entity_type.value)
        triggers = await self.trigger_repo.find_for_event(agency_id, str(event_type))
        if not triggers:
            return []
        entity = await self.entity_repo.load(agency_id, entity_ref)
        if entity is None:
            logger.info(
                "Event %s: %s %s not found in agency %s; no triggers fired",
                event_type,
                entity_ref.entity_type.value,
                entity_ref.entity_id,
                agency_id,
            )
            return []
        context = entity_context(entity)
        payload = dict(data or {})
        executions: list[AutomationExecution] = []
        for trigger in triggers:
            conditions = parse_conditions(trigger.conditions)
            if conditions is None:
                logger.warning(
                    "Trigger %s has unparseable conditions; failing closed", trigger.id
                )
                continue
            if not evaluate_conditions(conditions, context, payload):
                continue
            executions.append(
                await self.execute_trigger(trigger, entity_ref, payload, entity=entity)
            )
        return executions

    async def execute_trigger(
        self,
        trigger: AutomationTrigger,
        entity_ref: EntityRef | None,
        data: Mapping[str, Any] | None = None,
        *,
        entity: Any | None = None,
        record_workflow: bool = True,
    ) -> AutomationExecution:
        """Run the trigger's actions in order and write one execution record.

        Conditions are not evaluated here. When record_workflow is True and the
        trigger belongs to a workflow, the workflow's execution bookkeeping is bumped.
        """
        agency_id = trigger.agency_id
        if entity is None and entity_ref is not None:
            entity = await self.entity_repo.load(agency_id, entity_ref)
            if entity is None:
                logger.warning(
                    "Trigger %s target %s %s not found; running without entity",
                    trigger.id,
                    entity_ref.entity_type.value,
                    entity_ref.entity_id,
                )
                entity_ref = None
        payload = dict(data or {})
        execution = await self.execution_repo.create(
            AutomationExecution(
                agency_id=agency_id,
                trigger_id=trigger.id,
                entity_type=entity_ref.entity_type.value if entity_ref else None,
                entity_id=entity_ref.entity_id if entity_ref else None,
                status=ExecutionStatus.RUNNING.value,
                data=payload,
                executed_at=utc_now(),
            )
        )

        ctx = ActionContext(
            agency_id=agency_id,
            trigger_id=trigger.id,
            entity_ref=entity_ref,
            entity=entity,
            data=payload,
        )
        ctx.recipient = await self.actions.resolve_recipient(ctx)
        tally = await self._run_actions(trigger, ctx)

        execution.status = tally.status.value
        execution.success_count = tally.success_count
        execution.error_count = tally.error_count
        execution.execution_log = tally.log
        execution.completed_at = utc_now()
        execution = await self.execution_repo.update(execution)

        if tally.error_count:
            logger.warning(
                "Trigger %s finished PARTIAL: %d ok, %d failed",
                trigger.id,
                tally.success_count,
                tally.error_count,
            )
        if record_workflow and trigger.workflow_id:
            workflow = await self.workflow_repo.get_by_id_and_agency(
                trigger.workflow_id, agency_id
            )
            if workflow is not None:
                await self.workflow_repo.record_execution(workflow, execution.completed_at)
        return execution

    async def _run_actions(
        self, trigger: AutomationTrigger, ctx: ActionContext
    ) -> ExecutionTally:
        tally = ExecutionTally()
        for index, raw in enumerate(trigger.actions or []):
            action_type = raw.get("type") if isinstance(raw, dict) else None
            label = str(action_type or f"#{index}")
            try:
                action = parse_action(raw)
            except ValidationError as e:
                tally.record_failure(label, f"invalid action definition ({e.error_count()} errors)")
                continue
            try:
                async with self.db.begin_nested():
                    result = await self.actions.execute(action, ctx)
            except Exception as e:
                logger.warning(
                    "Action %s of trigger %s failed: %s", action.type, trigger.id, e
                )
                tally.record_failure(action.type, str(e))
                if ctx.entity is not None:
                    # Rolling back the savepoint expired the entity; later
                    # actions and the calling route still read it.
                    await self.db.refresh(ctx.entity)
                continue
            if result.skipped:
                logger.info(
                    "Action %s of trigger %s skipped: %s",
                    action.type,
                    trigger.id,
                    result.reason,
                )
                tally.record_skip(action.type, result.reason or "")
            else:
                tally.record_success(action.type, **result.info)
        return tally
