"""Shared utilities: enums, telemetry, and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from app.shared.enums import (
    ActionOutcome,
    ExecutionStatus,
    MessageStatus,
    NotificationStatus,
    ScheduledExecutionStatus,
)
from app.shared.utils import (
    ensure_utc,
    generate_cuid,
    parse_iso_datetime,
    utc_now,
)

__all__ = [
    "ActionOutcome",
    "ExecutionStatus",
    "MessageStatus",
    "NotificationStatus",
    "ScheduledExecutionStatus",
    "generate_cuid",
    "utc_now",
    "ensure_utc",
    "parse_iso_datetime",
]
