"""Run due scheduled automations and every alert sweep for each active agency.

Usage:
    python -m scripts.run_automation_jobs [agency_id_or_subdomain]
If the argument is omitted, processes all active agencies. Intended for cron;
each agency runs in its own transaction so one failing agency does not roll
back the others.
"""

import asyncio
import sys

import httpx

from app.api.v1.dependencies.alert import build_alert_service
from app.api.v1.dependencies.automation import (
    build_automation_engine,
    get_scheduled_run_service,
)
from app.core.config import get_settings
import app.infrastructure.persistence.database as database
from app.domain.enums import AlertCheck
from app.infrastructure.persistence.repositories import AgencyRepository
from app.infrastructure.services.template_renderer import TemplateRenderer
from app.shared.telemetry.logging import get_logger, setup_logging

logger = get_logger(__name__)


async def main() -> None:
    """For each agency, execute due scheduled triggers then run the alert sweeps."""
    settings = get_settings()
    setup_logging()
    database._ensure_engine()
    if database.AsyncSessionLocal is None:
        print("AsyncSessionLocal not configured", file=sys.stderr)
        sys.exit(1)

    agency_filter = sys.argv[1] if len(sys.argv) > 1 else None

    async with database.AsyncSessionLocal() as session:
        async with session.begin():
            agencies = await AgencyRepository(session).list_active()
    if agency_filter:
        agencies = [
            a for a in agencies if a.id == agency_filter or a.subdomain == agency_filter
        ]
        if not agencies:
            print(f"Agency not found: {agency_filter}", file=sys.stderr)
            sys.exit(1)

    renderer = TemplateRenderer()
    total_executed = 0
    total_alerts = 0
    failed = 0

    async with httpx.AsyncClient(timeout=settings.webhook_timeout_seconds) as http_client:
        for agency in agencies:
            try:
                async with database.AsyncSessionLocal() as session:
                    async with session.begin():
                        engine = build_automation_engine(session, renderer, http_client)
                        runner = await get_scheduled_run_service(session, engine)
                        run = await runner.run_due(agency.id)

                        alerts = build_alert_service(session)
                        created = 0
                        for check in AlertCheck:
                            sweep = await alerts.run_check(agency.id, check)
                            created += sweep.created
            except (AssertionError, AttributeError, IndexError, KeyError, NameError, TypeError):
                raise
            except Exception:
                logger.exception("Automation jobs failed for agency %s", agency.subdomain)
                failed += 1
                continue

            total_executed += run.executed
            total_alerts += created
            if run.claimed or created:
                print(
                    f"Agency {agency.subdomain}: executed {run.executed}, "
                    f"cancelled {run.cancelled}, alerts {created}"
                )

    print(
        f"Done. Executed: {total_executed}, alerts created: {total_alerts}, "
        f"failed agencies: {failed}"
    )
    if database.engine is not None:
        await database.engine.dispose()
    if failed:
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
