"""Task ORM model. Staff to-do, created manually or by a CREATE_TASK action."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import Priority, TaskStatus
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import (
    AgencyScopedModel,
    ExtraDataMixin,
    enum_check,
)


class Task(AgencyScopedModel, ExtraDataMixin, Base):
    """Task assignable to a staff user, linked to a student or lead. Table: task."""

    __tablename__ = "task"

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    task_type: Mapped[str] = mapped_column(
        String(64), nullable=False, default="GENERAL", server_default="GENERAL"
    )
    category: Mapped[str | None] = mapped_column(String(64), nullable=True)
    priority: Mapped[str] = mapped_column(
        String(16), nullable=False, default=Priority.MEDIUM.value
    )
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=TaskStatus.PENDING.value, index=True
    )
    due_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    assigned_to: Mapped[str | None] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True, index=True
    )
    student_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("student.id", ondelete="CASCADE"), nullable=True, index=True
    )
    lead_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("lead.id", ondelete="CASCADE"), nullable=True, index=True
    )

    __table_args__ = (
        Index("ix_task_agency_status_due", "agency_id", "status", "due_date"),
        enum_check("status", TaskStatus.values(), "task_status_check"),
        enum_check("priority", Priority.values(), "task_priority_check"),
    )
