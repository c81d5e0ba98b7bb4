"""Persistence models: ORM entities and mixins."""

from app.infrastructure.persistence.models.agency import Agency
from app.infrastructure.persistence.models.alert import Alert
from app.infrastructure.persistence.models.appointment import Appointment
from app.infrastructure.persistence.models.automation import (
    AutomationExecution,
    AutomationTrigger,
    ScheduledExecution,
)
from app.infrastructure.persistence.models.campaign import Campaign, CampaignEnrollment
from app.infrastructure.persistence.models.document import Document
from app.infrastructure.persistence.models.lead import Lead
from app.infrastructure.persistence.models.messaging import (
    EmailMessage,
    Notification,
    SmsMessage,
)
from app.infrastructure.persistence.models.mixins import (
    AgencyMixin,
    AgencyScopedModel,
    CuidMixin,
    ExtraDataMixin,
    TimestampMixin,
)
from app.infrastructure.persistence.models.student import Student
from app.infrastructure.persistence.models.study_application import StudyApplication
from app.infrastructure.persistence.models.task import Task
from app.infrastructure.persistence.models.user import User
from app.infrastructure.persistence.models.workflow import Workflow

__all__ = [
    "Agency",
    "User",
    "Lead",
    "Student",
    "StudyApplication",
    "Task",
    "Appointment",
    "Document",
    "Notification",
    "EmailMessage",
    "SmsMessage",
    "Campaign",
    "CampaignEnrollment",
    "Workflow",
    "AutomationTrigger",
    "AutomationExecution",
    "ScheduledExecution",
    "Alert",
    "CuidMixin",
    "AgencyMixin",
    "TimestampMixin",
    "ExtraDataMixin",
    "AgencyScopedModel",
]
