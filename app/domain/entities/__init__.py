"""Domain entities and rules.

Pure domain models; no ORM or persistence concerns.
"""

from app.domain.entities.alert import (
    application_deadline_severity,
    notification_priority_for,
    notification_type_for,
    overdue_task_severity,
)
from app.domain.entities.execution import ExecutionTally

__all__ = [
    "ExecutionTally",
    "application_deadline_severity",
    "notification_priority_for",
    "notification_type_for",
    "overdue_task_severity",
]
