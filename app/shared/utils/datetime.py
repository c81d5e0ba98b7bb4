"""
UTC datetime helpers.

Stored timestamps, schedule slots and alert windows are all timezone-aware
UTC. Local time only appears inside CRON evaluation for a schedule's own
timezone (see app.application.services.schedule_calculator).
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Current time as an aware UTC datetime. Patched in tests to pin the clock."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Normalize a datetime to aware UTC.

    Naive values are read as UTC (asyncpg returns aware values for
    timestamptz, but condition values and test fixtures may be naive).
    None passes through.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def parse_iso_datetime(value: str) -> datetime | None:
    """
    Parse an ISO-8601 string (a trailing 'Z' is accepted) into aware UTC.

    Returns None when the string is not a timestamp; the condition evaluator
    treats that as "not comparable" rather than an error.

    Args:
        value: e.g. '2025-03-01T09:00:00Z' or '2025-03-01'
    """
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return None
    return ensure_utc(parsed)
