"""Shared enumerations for the agencyflow application.

Cross-cutting enums used by application and infrastructure (execution
bookkeeping, outbox status). Domain-specific enums (e.g. EntityType,
TriggerType) live in app.domain.enums.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class ExecutionStatus(_ValuesMixin, str, Enum):
    """Automation execution lifecycle status.

    RUNNING while actions are dispatched; PARTIAL when at least one action failed.
    """

    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    PARTIAL = "PARTIAL"


class ScheduledExecutionStatus(_ValuesMixin, str, Enum):
    """Status of a queued time-based trigger run."""

    SCHEDULED = "SCHEDULED"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class ActionOutcome(_ValuesMixin, str, Enum):
    """Per-action outcome recorded in an execution log entry."""

    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


class MessageStatus(_ValuesMixin, str, Enum):
    """Outbox status for email and SMS rows."""

    SCHEDULED = "SCHEDULED"
    SENT = "SENT"
    FAILED = "FAILED"


class NotificationStatus(_ValuesMixin, str, Enum):
    """In-app notification delivery status."""

    PENDING = "PENDING"
    SENT = "SENT"
    DELIVERED = "DELIVERED"
    READ = "READ"
    DISMISSED = "DISMISSED"
    FAILED = "FAILED"
