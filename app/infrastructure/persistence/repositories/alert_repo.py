"""Alert repository: listing, dedupe lookup and the per-entity advisory lock."""

import hashlib
from typing import Any

from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.models.alert import Alert
from app.infrastructure.persistence.repositories.base import AgencyScopedRepository


def _advisory_lock_key(agency_id: str, alert_type: str, entity_id: str) -> int:
    """Stable 63-bit key for pg_advisory_xact_lock (agency + alert type + entity)."""
    raw = hashlib.sha256(f"{agency_id}:{alert_type}:{entity_id}".encode()).digest()[:8]
    return int.from_bytes(raw, "big") % (2**63)


class AlertRepository(AgencyScopedRepository[Alert]):
    filterable = frozenset({"alert_type", "severity", "recipient_id", "recipient_type"})

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Alert)

    async def list_alerts(
        self,
        agency_id: str,
        *,
        skip: int = 0,
        limit: int = 100,
        filters: dict[str, Any] | None = None,
        unresolved_only: bool = False,
    ) -> tuple[list[Alert], int]:
        """Return (page, total) for the agency's alerts, newest first."""
        q = self._apply_filters(self._scoped(agency_id), filters)
        count_q = self._apply_filters(
            select(func.count(Alert.id)).where(Alert.agency_id == agency_id), filters
        )
        if unresolved_only:
            q = q.where(Alert.resolved_at.is_(None))
            count_q = count_q.where(Alert.resolved_at.is_(None))
        rows = await self.db.execute(
            q.order_by(Alert.created_at.desc()).offset(skip).limit(limit)
        )
        total = await self.db.execute(count_q)
        return list(rows.scalars().all()), total.scalar_one() or 0

    async def find_unresolved(
        self, agency_id: str, alert_type: str, entity_id: str
    ) -> Alert | None:
        result = await self.db.execute(
            self._scoped(agency_id)
            .where(
                Alert.alert_type == alert_type,
                Alert.entity_id == entity_id,
                Alert.resolved_at.is_(None),
            )
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def lock_for_entity(self, agency_id: str, alert_type: str, entity_id: str) -> None:
        """Serialize check-then-create for one (agency, type, entity) until transaction end.

        Requires PostgreSQL; on other dialects (tests on SQLite) this is a no-op.
        """
        if self.db.bind.dialect.name != "postgresql":
            return
        await self.db.execute(
            text("SELECT pg_advisory_xact_lock(:key)"),
            {"key": _advisory_lock_key(agency_id, alert_type, entity_id)},
        )
