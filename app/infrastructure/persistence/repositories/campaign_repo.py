"""Campaign and enrollment repositories."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.models.campaign import Campaign, CampaignEnrollment
from app.infrastructure.persistence.repositories.base import AgencyScopedRepository


class CampaignRepository(AgencyScopedRepository[Campaign]):
    filterable = frozenset({"status", "campaign_type"})

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Campaign)


class CampaignEnrollmentRepository(AgencyScopedRepository[CampaignEnrollment]):
    filterable = frozenset({"campaign_id", "status", "lead_id", "student_id"})

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, CampaignEnrollment)

    async def find_existing(
        self,
        campaign_id: str,
        *,
        lead_id: str | None = None,
        student_id: str | None = None,
    ) -> CampaignEnrollment | None:
        """Enrollment of this lead/student in the campaign, if any."""
        q = select(CampaignEnrollment).where(CampaignEnrollment.campaign_id == campaign_id)
        q = q.where(
            CampaignEnrollment.lead_id == lead_id
            if lead_id is not None
            else CampaignEnrollment.lead_id.is_(None)
        )
        q = q.where(
            CampaignEnrollment.student_id == student_id
            if student_id is not None
            else CampaignEnrollment.student_id.is_(None)
        )
        result = await self.db.execute(q.limit(1))
        return result.scalar_one_or_none()
