"""Repository dependencies for agency records (leads, students, tasks, ...).

Each repository has a read variant (plain session) and a write variant
(request transaction). Write variants share the session used by the
automation dispatcher, so triggered side effects commit with the write.
"""

from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Annotated, TypeVar

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.database import get_db, get_db_transactional
from app.infrastructure.persistence.repositories import (
    ApplicationRepository,
    AppointmentRepository,
    CampaignRepository,
    DocumentRepository,
    LeadRepository,
    NotificationRepository,
    StudentRepository,
    TaskRepository,
    UserRepository,
)

R = TypeVar("R")


def _provider(
    repo_cls: Callable[[AsyncSession], R],
    session: Callable[[], AsyncIterator[AsyncSession]],
) -> Callable[..., Awaitable[R]]:
    async def dependency(db: Annotated[AsyncSession, Depends(session)]) -> R:
        return repo_cls(db)

    dependency.__name__ = f"get_{repo_cls.__name__}"
    return dependency


get_lead_repo = _provider(LeadRepository, get_db)
get_lead_repo_for_write = _provider(LeadRepository, get_db_transactional)
get_student_repo = _provider(StudentRepository, get_db)
get_student_repo_for_write = _provider(StudentRepository, get_db_transactional)
get_application_repo = _provider(ApplicationRepository, get_db)
get_application_repo_for_write = _provider(ApplicationRepository, get_db_transactional)
get_task_repo = _provider(TaskRepository, get_db)
get_task_repo_for_write = _provider(TaskRepository, get_db_transactional)
get_appointment_repo = _provider(AppointmentRepository, get_db)
get_appointment_repo_for_write = _provider(AppointmentRepository, get_db_transactional)
get_document_repo = _provider(DocumentRepository, get_db)
get_document_repo_for_write = _provider(DocumentRepository, get_db_transactional)
get_user_repo = _provider(UserRepository, get_db)
get_user_repo_for_write = _provider(UserRepository, get_db_transactional)
get_campaign_repo = _provider(CampaignRepository, get_db)
get_campaign_repo_for_write = _provider(CampaignRepository, get_db_transactional)
get_notification_repo = _provider(NotificationRepository, get_db)
get_notification_repo_for_write = _provider(NotificationRepository, get_db_transactional)
