"""Document ORM model. File metadata only; bytes live in external storage."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import DocumentStatus
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import (
    AgencyScopedModel,
    ExtraDataMixin,
    enum_check,
)


class Document(AgencyScopedModel, ExtraDataMixin, Base):
    """Uploaded document (passport, transcript, visa...). Table: document."""

    __tablename__ = "document"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    document_type: Mapped[str] = mapped_column(String(32), nullable=False)
    category: Mapped[str] = mapped_column(String(64), nullable=False)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_path: Mapped[str] = mapped_column(String(1024), nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    mime_type: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=DocumentStatus.PENDING.value, index=True
    )
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    verified_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    student_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("student.id", ondelete="CASCADE"), nullable=True, index=True
    )
    application_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("application.id", ondelete="SET NULL"), nullable=True
    )

    __table_args__ = (
        Index("ix_document_agency_expires", "agency_id", "expires_at"),
        enum_check("status", DocumentStatus.values(), "document_status_check"),
    )
