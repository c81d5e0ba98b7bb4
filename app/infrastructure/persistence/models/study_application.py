"""Study application ORM model (a student's application to a university program)."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import ApplicationStatus
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import (
    AgencyScopedModel,
    ExtraDataMixin,
    enum_check,
)


class StudyApplication(AgencyScopedModel, ExtraDataMixin, Base):
    """University application. Table: application."""

    __tablename__ = "application"

    student_id: Mapped[str] = mapped_column(
        String, ForeignKey("student.id", ondelete="CASCADE"), nullable=False, index=True
    )
    university_name: Mapped[str] = mapped_column(String(255), nullable=False)
    program: Mapped[str] = mapped_column(String(255), nullable=False)
    intake: Mapped[str | None] = mapped_column(String(64), nullable=True)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=ApplicationStatus.DRAFT.value, index=True
    )
    deadline: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    assigned_to: Mapped[str | None] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_application_agency_deadline", "agency_id", "deadline"),
        enum_check("status", ApplicationStatus.values(), "application_status_check"),
    )
