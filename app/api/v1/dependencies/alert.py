"""Alert dependencies (composition root)."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.infrastructure.persistence.database import get_db, get_db_transactional
from app.infrastructure.persistence.repositories import (
    AlertRepository,
    ApplicationRepository,
    AppointmentRepository,
    DocumentRepository,
    LeadRepository,
    NotificationRepository,
    StudentRepository,
    TaskRepository,
    UserRepository,
)
from app.infrastructure.services.alert_service import AlertService


async def get_alert_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AlertRepository:
    """Alert repository for listing."""
    return AlertRepository(db)


def build_alert_service(db: AsyncSession) -> AlertService:
    """Wire the alert service and its repositories onto one session."""
    return AlertService(
        settings=get_settings(),
        alert_repo=AlertRepository(db),
        notification_repo=NotificationRepository(db),
        user_repo=UserRepository(db),
        student_repo=StudentRepository(db),
        lead_repo=LeadRepository(db),
        task_repo=TaskRepository(db),
        appointment_repo=AppointmentRepository(db),
        document_repo=DocumentRepository(db),
        application_repo=ApplicationRepository(db),
    )


async def get_alert_service(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> AlertService:
    """Alert service for create, sweeps and resolve (transactional; advisory locks need it)."""
    return build_alert_service(db)
