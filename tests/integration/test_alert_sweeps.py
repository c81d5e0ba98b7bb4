"""Alert sweeps on Postgres: at most one unresolved alert per task, even under concurrency."""

import asyncio
from datetime import timedelta

import pytest
from sqlalchemy import delete, func, select

from app.api.v1.dependencies.alert import build_alert_service
from app.domain.enums import AlertCheck, AlertType
from app.infrastructure.persistence.models.agency import Agency
from app.infrastructure.persistence.models.alert import Alert
from app.infrastructure.persistence.models.lead import Lead
from app.infrastructure.persistence.models.messaging import Notification
from app.infrastructure.persistence.models.task import Task
from app.shared.utils.generators import generate_cuid

pytestmark = pytest.mark.requires_db


async def _overdue_task(session, now) -> tuple[str, str]:
    """Agency with one lead-linked task three days overdue; returns (agency_id, task_id)."""
    agency = Agency(subdomain=f"it-{generate_cuid()[:12]}", name="Integration Agency")
    session.add(agency)
    await session.flush()
    lead = Lead(agency_id=agency.id, first_name="Ada", last_name="Lovelace", status="NEW")
    session.add(lead)
    await session.flush()
    task = Task(
        agency_id=agency.id,
        title="Send transcript",
        task_type="GENERAL",
        priority="MEDIUM",
        status="PENDING",
        due_date=now - timedelta(days=3),
        lead_id=lead.id,
    )
    session.add(task)
    await session.flush()
    return agency.id, task.id


async def _count(session, model, agency_id: str) -> int:
    return await session.scalar(
        select(func.count()).select_from(model).where(model.agency_id == agency_id)
    )


async def test_repeated_sweeps_create_one_alert(db_session, now) -> None:
    agency_id, task_id = await _overdue_task(db_session, now)
    service = build_alert_service(db_session)

    first = await service.run_check(agency_id, AlertCheck.OVERDUE_TASKS, now)
    second = await service.run_check(agency_id, AlertCheck.OVERDUE_TASKS, now)

    assert (first.scanned, first.created) == (1, 1)
    assert (second.scanned, second.created) == (1, 0)
    alert = (
        await db_session.execute(select(Alert).where(Alert.agency_id == agency_id))
    ).scalar_one()
    assert alert.alert_type == AlertType.TASK_OVERDUE.value
    assert alert.entity_id == task_id
    assert await _count(db_session, Notification, agency_id) == 1


async def test_resolved_alert_is_raised_again_by_next_sweep(db_session, now) -> None:
    agency_id, _ = await _overdue_task(db_session, now)
    service = build_alert_service(db_session)

    first = await service.run_check(agency_id, AlertCheck.OVERDUE_TASKS, now)
    await service.resolve_alert(agency_id, first.alert_ids[0])
    second = await service.run_check(agency_id, AlertCheck.OVERDUE_TASKS, now)

    assert second.created == 1
    assert await _count(db_session, Alert, agency_id) == 2


async def test_concurrent_sweeps_create_one_alert(session_factory, now) -> None:
    async with session_factory() as setup, setup.begin():
        agency_id, _ = await _overdue_task(setup, now)

    async def sweep():
        async with session_factory() as session, session.begin():
            return await build_alert_service(session).run_check(
                agency_id, AlertCheck.OVERDUE_TASKS, now
            )

    try:
        results = await asyncio.gather(sweep(), sweep())
        async with session_factory() as session:
            alerts = await _count(session, Alert, agency_id)
    finally:
        async with session_factory() as cleanup, cleanup.begin():
            await cleanup.execute(delete(Agency).where(Agency.id == agency_id))

    assert sorted(r.created for r in results) == [0, 1]
    assert alerts == 1
