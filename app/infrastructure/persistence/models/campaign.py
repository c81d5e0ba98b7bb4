"""Campaign and CampaignEnrollment ORM models."""

from datetime import datetime

import sqlalchemy as sa
from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import CampaignStatus, EnrollmentStatus
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import AgencyScopedModel, enum_check


class Campaign(AgencyScopedModel, Base):
    """Nurturing campaign (steps are run by an external sender). Table: campaign."""

    __tablename__ = "campaign"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    campaign_type: Mapped[str] = mapped_column(String(32), nullable=False, default="EMAIL")
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=CampaignStatus.DRAFT.value
    )
    starts_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    ends_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        enum_check("status", CampaignStatus.values(), "campaign_status_check"),
    )


class CampaignEnrollment(AgencyScopedModel, Base):
    """A lead or student enrolled in a campaign. Table: campaign_enrollment."""

    __tablename__ = "campaign_enrollment"

    campaign_id: Mapped[str] = mapped_column(
        String, ForeignKey("campaign.id", ondelete="CASCADE"), nullable=False, index=True
    )
    lead_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("lead.id", ondelete="CASCADE"), nullable=True
    )
    student_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("student.id", ondelete="CASCADE"), nullable=True
    )
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=EnrollmentStatus.ACTIVE.value
    )
    current_step: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=sa.text("0")
    )
    enrolled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_campaign_enrollment_campaign_lead", "campaign_id", "lead_id"),
        Index("ix_campaign_enrollment_campaign_student", "campaign_id", "student_id"),
        enum_check("status", EnrollmentStatus.values(), "campaign_enrollment_status_check"),
    )
