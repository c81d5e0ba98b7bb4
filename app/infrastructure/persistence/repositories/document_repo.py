"""Document repository."""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.models.document import Document
from app.infrastructure.persistence.repositories.base import AgencyScopedRepository


class DocumentRepository(AgencyScopedRepository[Document]):
    filterable = frozenset(
        {"status", "category", "document_type", "student_id", "application_id"}
    )

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Document)

    async def find_expiring_before(self, agency_id: str, until: datetime) -> list[Document]:
        """Documents with an expiry date at or before until (already expired included)."""
        q = (
            self._scoped(agency_id)
            .where(Document.expires_at.is_not(None), Document.expires_at <= until)
            .order_by(Document.expires_at.asc())
        )
        result = await self.db.execute(q)
        return list(result.scalars().all())
