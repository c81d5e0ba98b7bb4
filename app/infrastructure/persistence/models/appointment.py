"""Appointment ORM model (consultations, interviews, follow-ups)."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import AppointmentStatus, Priority
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import AgencyScopedModel, enum_check


class Appointment(AgencyScopedModel, Base):
    """Scheduled meeting with a student or lead. Table: appointment."""

    __tablename__ = "appointment"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    appointment_type: Mapped[str] = mapped_column(
        String(32), nullable=False, default="CONSULTATION"
    )
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=AppointmentStatus.SCHEDULED.value, index=True
    )
    priority: Mapped[str] = mapped_column(
        String(16), nullable=False, default=Priority.MEDIUM.value
    )
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    student_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("student.id", ondelete="CASCADE"), nullable=True, index=True
    )
    lead_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("lead.id", ondelete="CASCADE"), nullable=True, index=True
    )
    assigned_to: Mapped[str | None] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_appointment_agency_start", "agency_id", "start_time"),
        enum_check("status", AppointmentStatus.values(), "appointment_status_check"),
    )
