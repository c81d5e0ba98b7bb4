"""Domain enumerations for the agencyflow application.

Enums represent fixed sets of domain values: agency lifecycle, the entity
kinds automation can target, trigger/condition/action vocabularies, and
the statuses of agency records.
"""

from enum import Enum

from app.shared.enums import _ValuesMixin


class AgencyStatus(str, Enum):
    """Agency (tenant) lifecycle status.

    Only ACTIVE agencies resolve from their subdomain.
    """

    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid status values as strings.

        Returns:
            List of enum value strings (e.g. for validation or serialization).
        """
        return [status.value for status in cls]


class EntityType(_ValuesMixin, str, Enum):
    """Closed set of records a trigger can be dispatched against."""

    LEAD = "LEAD"
    STUDENT = "STUDENT"
    APPLICATION = "APPLICATION"
    TASK = "TASK"
    APPOINTMENT = "APPOINTMENT"
    DOCUMENT = "DOCUMENT"


# Entities whose fields an UPDATE_ENTITY action may change.
UPDATABLE_ENTITY_TYPES = frozenset(
    {EntityType.LEAD, EntityType.STUDENT, EntityType.APPLICATION}
)


class TriggerType(_ValuesMixin, str, Enum):
    """How a trigger is activated."""

    EVENT_BASED = "EVENT_BASED"
    TIME_BASED = "TIME_BASED"
    CONDITION_BASED = "CONDITION_BASED"
    WEBHOOK = "WEBHOOK"


# Trigger types considered by event dispatch.
EVENT_DISPATCH_TRIGGER_TYPES = (TriggerType.EVENT_BASED, TriggerType.CONDITION_BASED)


class TriggerEventType(_ValuesMixin, str, Enum):
    """Domain events that event-based triggers subscribe to."""

    LEAD_CREATED = "LEAD_CREATED"
    LEAD_UPDATED = "LEAD_UPDATED"
    LEAD_DELETED = "LEAD_DELETED"
    STUDENT_CREATED = "STUDENT_CREATED"
    STUDENT_UPDATED = "STUDENT_UPDATED"
    STUDENT_DELETED = "STUDENT_DELETED"
    APPLICATION_CREATED = "APPLICATION_CREATED"
    APPLICATION_UPDATED = "APPLICATION_UPDATED"
    APPLICATION_DELETED = "APPLICATION_DELETED"
    DOCUMENT_UPLOADED = "DOCUMENT_UPLOADED"
    DOCUMENT_VERIFIED = "DOCUMENT_VERIFIED"
    APPOINTMENT_CREATED = "APPOINTMENT_CREATED"
    APPOINTMENT_UPDATED = "APPOINTMENT_UPDATED"
    APPOINTMENT_CANCELLED = "APPOINTMENT_CANCELLED"
    MESSAGE_RECEIVED = "MESSAGE_RECEIVED"
    MESSAGE_SENT = "MESSAGE_SENT"
    CAMPAIGN_ENROLLED = "CAMPAIGN_ENROLLED"
    CAMPAIGN_COMPLETED = "CAMPAIGN_COMPLETED"
    TASK_CREATED = "TASK_CREATED"
    TASK_COMPLETED = "TASK_COMPLETED"
    TASK_OVERDUE = "TASK_OVERDUE"
    PIPELINE_STAGE_CHANGED = "PIPELINE_STAGE_CHANGED"
    CUSTOM = "CUSTOM"


class ConditionOperator(_ValuesMixin, str, Enum):
    """Comparison operators accepted in trigger conditions."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    GREATER_EQUAL = "greater_equal"
    LESS_EQUAL = "less_equal"
    IN = "in"
    NOT_IN = "not_in"
    EXISTS = "exists"
    NOT_EXISTS = "not_exists"


class ActionType(_ValuesMixin, str, Enum):
    """Side effects a trigger can perform."""

    SEND_NOTIFICATION = "SEND_NOTIFICATION"
    SEND_EMAIL = "SEND_EMAIL"
    SEND_SMS = "SEND_SMS"
    CREATE_TASK = "CREATE_TASK"
    UPDATE_ENTITY = "UPDATE_ENTITY"
    ENROLL_IN_CAMPAIGN = "ENROLL_IN_CAMPAIGN"
    WEBHOOK = "WEBHOOK"
    CUSTOM = "CUSTOM"


class IntervalUnit(_ValuesMixin, str, Enum):
    """Units for INTERVAL schedules and CREATE_TASK delays."""

    MINUTES = "MINUTES"
    HOURS = "HOURS"
    DAYS = "DAYS"
    WEEKS = "WEEKS"
    MONTHS = "MONTHS"


class RecipientType(_ValuesMixin, str, Enum):
    """Kind of party a notification or alert is addressed to."""

    USER = "USER"
    STUDENT = "STUDENT"
    LEAD = "LEAD"


class NotificationType(_ValuesMixin, str, Enum):
    """In-app notification category."""

    INFO = "INFO"
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    ERROR = "ERROR"
    TASK = "TASK"
    REMINDER = "REMINDER"
    SYSTEM = "SYSTEM"


class NotificationChannel(_ValuesMixin, str, Enum):
    """Delivery channel recorded on a notification."""

    IN_APP = "IN_APP"
    EMAIL = "EMAIL"
    SMS = "SMS"
    WHATSAPP = "WHATSAPP"
    PUSH = "PUSH"


class Priority(_ValuesMixin, str, Enum):
    """Priority shared by notifications, tasks and appointments."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class AlertType(_ValuesMixin, str, Enum):
    """Operational alert categories produced by sweeps or created manually."""

    TASK_OVERDUE = "TASK_OVERDUE"
    APPOINTMENT_MISSED = "APPOINTMENT_MISSED"
    DOCUMENT_EXPIRED = "DOCUMENT_EXPIRED"
    DOCUMENT_EXPIRING = "DOCUMENT_EXPIRING"
    APPLICATION_DEADLINE = "APPLICATION_DEADLINE"
    CAMPAIGN_INACTIVE = "CAMPAIGN_INACTIVE"


class AlertSeverity(_ValuesMixin, str, Enum):
    """Alert severity, lowest to highest."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class AlertCheck(_ValuesMixin, str, Enum):
    """Alert sweeps that can be run on demand."""

    OVERDUE_TASKS = "overdue_tasks"
    MISSED_APPOINTMENTS = "missed_appointments"
    EXPIRED_DOCUMENTS = "expired_documents"
    APPLICATION_DEADLINES = "application_deadlines"


class LeadStatus(_ValuesMixin, str, Enum):
    """Lead pipeline status."""

    NEW = "NEW"
    CONTACTED = "CONTACTED"
    QUALIFIED = "QUALIFIED"
    CONVERTED = "CONVERTED"
    LOST = "LOST"


class StudentStatus(_ValuesMixin, str, Enum):
    """Student lifecycle status."""

    PROSPECT = "PROSPECT"
    APPLIED = "APPLIED"
    ACCEPTED = "ACCEPTED"
    ENROLLED = "ENROLLED"
    GRADUATED = "GRADUATED"
    WITHDRAWN = "WITHDRAWN"


class ApplicationStatus(_ValuesMixin, str, Enum):
    """University application status."""

    DRAFT = "DRAFT"
    PENDING = "PENDING"
    SUBMITTED = "SUBMITTED"
    UNDER_REVIEW = "UNDER_REVIEW"
    IN_PROGRESS = "IN_PROGRESS"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    WITHDRAWN = "WITHDRAWN"


class TaskStatus(_ValuesMixin, str, Enum):
    """Task status."""

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class AppointmentStatus(_ValuesMixin, str, Enum):
    """Appointment status."""

    SCHEDULED = "SCHEDULED"
    CONFIRMED = "CONFIRMED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"


class DocumentStatus(_ValuesMixin, str, Enum):
    """Document review status."""

    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"


class CampaignStatus(_ValuesMixin, str, Enum):
    """Campaign status."""

    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    COMPLETED = "COMPLETED"


class EnrollmentStatus(_ValuesMixin, str, Enum):
    """Campaign enrollment status."""

    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class UserRole(_ValuesMixin, str, Enum):
    """Staff role within an agency."""

    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    CONSULTANT = "CONSULTANT"
    STAFF = "STAFF"
