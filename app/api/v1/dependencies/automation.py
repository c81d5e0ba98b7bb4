"""Automation dependencies: engine, trigger management, scheduled runs, event dispatch.

Everything that writes shares the request's transactional session, so
automation side effects commit or roll back with the route's own write.
"""

from __future__ import annotations

from typing import Annotated

import httpx
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.use_cases.automation import EntityEventDispatcher
from app.core.config import get_settings
from app.infrastructure.persistence.database import get_db, get_db_transactional
from app.infrastructure.persistence.repositories import (
    CampaignEnrollmentRepository,
    CampaignRepository,
    EmailMessageRepository,
    EntityRepository,
    ExecutionRepository,
    NotificationRepository,
    ScheduledExecutionRepository,
    SmsMessageRepository,
    StudentRepository,
    TaskRepository,
    TriggerRepository,
    UserRepository,
    WorkflowRepository,
)
from app.infrastructure.services.action_handlers import ActionHandlers
from app.infrastructure.services.automation_engine import AutomationEngine
from app.infrastructure.services.scheduled_run_service import ScheduledRunService
from app.infrastructure.services.template_renderer import TemplateRenderer
from app.infrastructure.services.trigger_service import TriggerService

from .common import get_http_client, get_template_renderer


def build_automation_engine(
    db: AsyncSession,
    renderer: TemplateRenderer,
    http_client: httpx.AsyncClient | None = None,
) -> AutomationEngine:
    """Wire the engine and its action handlers onto one session."""
    entity_repo = EntityRepository(db)
    actions = ActionHandlers(
        settings=get_settings(),
        renderer=renderer,
        notification_repo=NotificationRepository(db),
        email_repo=EmailMessageRepository(db),
        sms_repo=SmsMessageRepository(db),
        task_repo=TaskRepository(db),
        user_repo=UserRepository(db),
        student_repo=StudentRepository(db),
        campaign_repo=CampaignRepository(db),
        enrollment_repo=CampaignEnrollmentRepository(db),
        entity_repo=entity_repo,
        http_client=http_client,
    )
    return AutomationEngine(
        db=db,
        trigger_repo=TriggerRepository(db),
        execution_repo=ExecutionRepository(db),
        entity_repo=entity_repo,
        workflow_repo=WorkflowRepository(db),
        actions=actions,
    )


async def get_automation_engine(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    renderer: Annotated[TemplateRenderer, Depends(get_template_renderer)],
    http_client: Annotated[httpx.AsyncClient | None, Depends(get_http_client)],
) -> AutomationEngine:
    return build_automation_engine(db, renderer, http_client)


async def get_event_dispatcher(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    engine: Annotated[AutomationEngine, Depends(get_automation_engine)],
) -> EntityEventDispatcher:
    """Dispatcher for entity lifecycle events; each dispatch runs in a savepoint."""
    return EntityEventDispatcher(lambda: engine, isolation=db.begin_nested)


def _trigger_service(db: AsyncSession) -> TriggerService:
    return TriggerService(
        trigger_repo=TriggerRepository(db),
        execution_repo=ExecutionRepository(db),
        scheduled_repo=ScheduledExecutionRepository(db),
        workflow_repo=WorkflowRepository(db),
    )


async def get_trigger_service(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TriggerService:
    """Trigger service for reads (list, get, executions)."""
    return _trigger_service(db)


async def get_trigger_service_for_write(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> TriggerService:
    """Trigger service for create/update/delete (transactional)."""
    return _trigger_service(db)


async def get_scheduled_run_service(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    engine: Annotated[AutomationEngine, Depends(get_automation_engine)],
) -> ScheduledRunService:
    return ScheduledRunService(
        settings=get_settings(),
        scheduled_repo=ScheduledExecutionRepository(db),
        trigger_repo=TriggerRepository(db),
        engine=engine,
    )
