"""Workflow CRUD and manual execution."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from app.domain.exceptions import InactiveWorkflowException, ResourceNotFoundException
from app.domain.value_objects import EntityRef
from app.infrastructure.persistence.models.automation import AutomationExecution
from app.infrastructure.persistence.models.workflow import Workflow
from app.infrastructure.persistence.repositories.automation_repo import TriggerRepository
from app.infrastructure.persistence.repositories.workflow_repo import WorkflowRepository
from app.infrastructure.services.automation_engine import AutomationEngine
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import traced
from app.shared.utils.datetime import utc_now

logger = get_logger(__name__)

_UPDATABLE = frozenset({"name", "description", "is_active", "nodes", "edges"})


class WorkflowService:
    """Manages workflows; execute runs every active trigger linked to the workflow."""

    def __init__(
        self,
        workflow_repo: WorkflowRepository,
        trigger_repo: TriggerRepository,
        engine: AutomationEngine,
    ) -> None:
        self.workflow_repo = workflow_repo
        self.trigger_repo = trigger_repo
        self.engine = engine

    async def get_workflow(self, agency_id: str, workflow_id: str) -> Workflow:
        workflow = await self.workflow_repo.get_by_id_and_agency(workflow_id, agency_id)
        if workflow is None:
            raise ResourceNotFoundException("workflow", workflow_id)
        return workflow

    async def create_workflow(self, agency_id: str, values: Mapping[str, Any]) -> Workflow:
        return await self.workflow_repo.create(
            Workflow(
                agency_id=agency_id,
                **{k: v for k, v in values.items() if k in _UPDATABLE},
            )
        )

    async def update_workflow(
        self, agency_id: str, workflow_id: str, changes: Mapping[str, Any]
    ) -> Workflow:
        workflow = await self.get_workflow(agency_id, workflow_id)
        for key, value in changes.items():
            if key in _UPDATABLE:
                setattr(workflow, key, value)
        return await self.workflow_repo.update(workflow)

    async def delete_workflow(self, agency_id: str, workflow_id: str) -> None:
        workflow = await self.get_workflow(agency_id, workflow_id)
        await self.workflow_repo.delete(workflow)

    @traced("workflows.execute")
    async def execute_workflow(
        self,
        agency_id: str,
        workflow_id: str,
        entity_ref: EntityRef | None = None,
        data: Mapping[str, Any] | None = None,
    ) -> tuple[Workflow, list[AutomationExecution]]:
        """Run the workflow's active triggers and record one workflow execution.

        Raises:
            ResourceNotFoundException: workflow not in agency.
            InactiveWorkflowException: workflow is switched off.
        """
        workflow = await self.get_workflow(agency_id, workflow_id)
        if not workflow.is_active:
            raise InactiveWorkflowException(workflow_id)
        payload = {**(data or {}), "workflow_id": workflow.id}
        triggers = await self.trigger_repo.find_active_for_workflow(agency_id, workflow.id)
        executions = [
            await self.engine.execute_trigger(
                trigger, entity_ref, payload, record_workflow=False
            )
            for trigger in triggers
        ]
        workflow = await self.workflow_repo.record_execution(workflow, utc_now())
        logger.info(
            "Executed workflow %s for agency %s: %d triggers",
            workflow.id,
            agency_id,
            len(executions),
        )
        return workflow, executions
