"""Next-run computation for time-based trigger schedules."""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from croniter import croniter
from dateutil.relativedelta import relativedelta

from app.application.dtos.automation import CronSchedule, IntervalSchedule
from app.domain.enums import IntervalUnit
from app.shared.utils.datetime import ensure_utc


def interval_delta(amount: int, unit: IntervalUnit) -> timedelta | relativedelta:
    """Offset for amount units. MONTHS is calendar-aware (Jan 31 + 1 month = Feb 28/29)."""
    if unit is IntervalUnit.MINUTES:
        return timedelta(minutes=amount)
    if unit is IntervalUnit.HOURS:
        return timedelta(hours=amount)
    if unit is IntervalUnit.DAYS:
        return timedelta(days=amount)
    if unit is IntervalUnit.WEEKS:
        return timedelta(weeks=amount)
    return relativedelta(months=amount)


def next_run_at(schedule: CronSchedule | IntervalSchedule, after: datetime) -> datetime:
    """First occurrence strictly after `after`, as a UTC-aware datetime.

    CRON expressions are evaluated in the schedule's timezone so that
    '0 9 * * *' means 09:00 local time across DST changes.
    """
    base = ensure_utc(after)
    if isinstance(schedule, CronSchedule):
        local = base.astimezone(ZoneInfo(schedule.timezone))
        nxt = croniter(schedule.cron_expression, local).get_next(datetime)
        return ensure_utc(nxt)
    return base + interval_delta(schedule.interval, schedule.unit)
