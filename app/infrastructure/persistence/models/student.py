"""Student ORM model."""

from datetime import date

from sqlalchemy import JSON, Date, Float, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import StudentStatus
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import (
    AgencyScopedModel,
    ExtraDataMixin,
    enum_check,
)


class Student(AgencyScopedModel, ExtraDataMixin, Base):
    """Student record, optionally converted from a lead. Table: student."""

    __tablename__ = "student"

    first_name: Mapped[str] = mapped_column(String(120), nullable=False)
    last_name: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(40), nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    nationality: Mapped[str | None] = mapped_column(String(80), nullable=True)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=StudentStatus.PROSPECT.value, index=True
    )
    stage: Mapped[str | None] = mapped_column(String(64), nullable=True)
    gpa: Mapped[float | None] = mapped_column(Float, nullable=True)
    budget: Mapped[float | None] = mapped_column(Float, nullable=True)
    preferred_countries: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    lead_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("lead.id", ondelete="SET NULL"), nullable=True
    )
    assigned_to: Mapped[str | None] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_student_agency_email", "agency_id", "email"),
        enum_check("status", StudentStatus.values(), "student_status_check"),
    )
