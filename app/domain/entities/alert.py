"""Alert severity rules.

Pure functions mapping how late or how close something is to an alert
severity, and severity to the notification type sent with the alert.
"""

from app.domain.enums import AlertSeverity, NotificationType, Priority


def overdue_task_severity(days_overdue: int) -> AlertSeverity:
    """Severity of an overdue-task alert by whole days past due.

    >=7 CRITICAL, >=3 HIGH, >=1 MEDIUM, otherwise LOW.
    """
    if days_overdue >= 7:
        return AlertSeverity.CRITICAL
    if days_overdue >= 3:
        return AlertSeverity.HIGH
    if days_overdue >= 1:
        return AlertSeverity.MEDIUM
    return AlertSeverity.LOW


def application_deadline_severity(days_until_deadline: int) -> AlertSeverity:
    """HIGH when the deadline is three days away or closer, else MEDIUM."""
    if days_until_deadline <= 3:
        return AlertSeverity.HIGH
    return AlertSeverity.MEDIUM


def notification_type_for(severity: AlertSeverity) -> NotificationType:
    """In-app notification type used to announce an alert."""
    if severity == AlertSeverity.CRITICAL:
        return NotificationType.ERROR
    if severity == AlertSeverity.HIGH:
        return NotificationType.WARNING
    return NotificationType.INFO


def notification_priority_for(severity: AlertSeverity) -> Priority:
    """CRITICAL alerts go out as URGENT; other severities map by name."""
    if severity == AlertSeverity.CRITICAL:
        return Priority.URGENT
    return Priority(severity.value)
