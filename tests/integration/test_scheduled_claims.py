"""Scheduled run claims on Postgres: FOR UPDATE SKIP LOCKED between runners."""

from datetime import timedelta

import pytest
from sqlalchemy import delete

from app.domain.enums import TriggerEventType, TriggerType
from app.infrastructure.persistence.models.agency import Agency
from app.infrastructure.persistence.models.automation import (
    AutomationTrigger,
    ScheduledExecution,
)
from app.infrastructure.persistence.repositories import ScheduledExecutionRepository
from app.shared.enums import ScheduledExecutionStatus
from app.shared.utils.generators import generate_cuid

pytestmark = pytest.mark.requires_db

SCHEDULE = {"type": "INTERVAL", "interval": 1, "unit": "DAYS"}


async def test_rows_claimed_by_one_runner_are_skipped_by_another(session_factory, now) -> None:
    async with session_factory() as setup, setup.begin():
        agency = Agency(subdomain=f"it-{generate_cuid()[:12]}", name="Integration Agency")
        setup.add(agency)
        await setup.flush()
        trigger = AutomationTrigger(
            agency_id=agency.id,
            name="Daily digest",
            trigger_type=TriggerType.TIME_BASED.value,
            event_type=TriggerEventType.CUSTOM.value,
            conditions=[],
            actions=[{"type": "CUSTOM", "name": "digest"}],
            schedule=SCHEDULE,
            is_active=True,
            priority=50,
        )
        setup.add(trigger)
        await setup.flush()
        setup.add_all(
            [
                ScheduledExecution(
                    agency_id=agency.id,
                    trigger_id=trigger.id,
                    scheduled_for=now - timedelta(minutes=minutes),
                    status=ScheduledExecutionStatus.SCHEDULED.value,
                    schedule=SCHEDULE,
                )
                for minutes in (5, 10)
            ]
            + [
                ScheduledExecution(
                    agency_id=agency.id,
                    trigger_id=trigger.id,
                    scheduled_for=now + timedelta(hours=1),
                    status=ScheduledExecutionStatus.SCHEDULED.value,
                    schedule=SCHEDULE,
                )
            ]
        )
        agency_id = agency.id

    try:
        async with session_factory() as first, first.begin():
            claimed = await ScheduledExecutionRepository(first).claim_due(agency_id, now, 10)
            async with session_factory() as second, second.begin():
                skipped = await ScheduledExecutionRepository(second).claim_due(
                    agency_id, now, 10
                )
        async with session_factory() as third, third.begin():
            released = await ScheduledExecutionRepository(third).claim_due(agency_id, now, 1)
    finally:
        async with session_factory() as cleanup, cleanup.begin():
            await cleanup.execute(delete(Agency).where(Agency.id == agency_id))

    assert [row.scheduled_for for row in claimed] == [
        now - timedelta(minutes=10),
        now - timedelta(minutes=5),
    ]
    assert skipped == []
    assert len(released) == 1
