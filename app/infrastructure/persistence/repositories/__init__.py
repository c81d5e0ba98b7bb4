"""Persistence repositories. Re-exports for dependency injection."""

from app.infrastructure.persistence.repositories.agency_repo import AgencyRepository
from app.infrastructure.persistence.repositories.alert_repo import AlertRepository
from app.infrastructure.persistence.repositories.application_repo import (
    ApplicationRepository,
)
from app.infrastructure.persistence.repositories.appointment_repo import (
    AppointmentRepository,
)
from app.infrastructure.persistence.repositories.automation_repo import (
    ExecutionRepository,
    ScheduledExecutionRepository,
    TriggerRepository,
)
from app.infrastructure.persistence.repositories.base import (
    AgencyScopedRepository,
    BaseRepository,
)
from app.infrastructure.persistence.repositories.campaign_repo import (
    CampaignEnrollmentRepository,
    CampaignRepository,
)
from app.infrastructure.persistence.repositories.document_repo import DocumentRepository
from app.infrastructure.persistence.repositories.entity_repo import EntityRepository
from app.infrastructure.persistence.repositories.lead_repo import LeadRepository
from app.infrastructure.persistence.repositories.messaging_repo import (
    EmailMessageRepository,
    NotificationRepository,
    SmsMessageRepository,
)
from app.infrastructure.persistence.repositories.student_repo import StudentRepository
from app.infrastructure.persistence.repositories.task_repo import TaskRepository
from app.infrastructure.persistence.repositories.user_repo import UserRepository
from app.infrastructure.persistence.repositories.workflow_repo import WorkflowRepository

__all__ = [
    "AgencyRepository",
    "AgencyScopedRepository",
    "AlertRepository",
    "ApplicationRepository",
    "AppointmentRepository",
    "BaseRepository",
    "CampaignEnrollmentRepository",
    "CampaignRepository",
    "DocumentRepository",
    "EmailMessageRepository",
    "EntityRepository",
    "ExecutionRepository",
    "LeadRepository",
    "NotificationRepository",
    "ScheduledExecutionRepository",
    "SmsMessageRepository",
    "StudentRepository",
    "TaskRepository",
    "TriggerRepository",
    "UserRepository",
    "WorkflowRepository",
]
