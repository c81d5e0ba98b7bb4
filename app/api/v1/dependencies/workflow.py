"""Workflow dependencies (composition root)."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.database import get_db, get_db_transactional
from app.infrastructure.persistence.repositories import TriggerRepository, WorkflowRepository
from app.infrastructure.services.automation_engine import AutomationEngine
from app.infrastructure.services.workflow_service import WorkflowService

from .automation import get_automation_engine


async def get_workflow_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> WorkflowRepository:
    """Workflow repository for read operations (list, get by id)."""
    return WorkflowRepository(db)


async def get_workflow_service(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    engine: Annotated[AutomationEngine, Depends(get_automation_engine)],
) -> WorkflowService:
    """Workflow service for create/update/delete/execute (transactional)."""
    return WorkflowService(
        workflow_repo=WorkflowRepository(db),
        trigger_repo=TriggerRepository(db),
        engine=engine,
    )
