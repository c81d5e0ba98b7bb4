"""Alert ORM model."""

from datetime import datetime

import sqlalchemy as sa
from sqlalchemy import Boolean, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import AlertSeverity, AlertType, EntityType, RecipientType
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import (
    AgencyScopedModel,
    ExtraDataMixin,
    enum_check,
)


class Alert(AgencyScopedModel, ExtraDataMixin, Base):
    """Operational alert raised by sweeps or created manually. Table: alert."""

    __tablename__ = "alert"

    alert_type: Mapped[str] = mapped_column(String(32), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    severity: Mapped[str] = mapped_column(String(16), nullable=False)
    entity_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    entity_id: Mapped[str | None] = mapped_column(String, nullable=True)
    recipient_id: Mapped[str] = mapped_column(String, nullable=False)
    recipient_type: Mapped[str] = mapped_column(String(16), nullable=False)
    action_required: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=sa.text("false")
    )
    action_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    resolved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        Index("ix_alert_dedupe", "agency_id", "alert_type", "entity_id"),
        enum_check("alert_type", AlertType.values(), "alert_type_check"),
        enum_check("severity", AlertSeverity.values(), "alert_severity_check"),
        enum_check("entity_type", EntityType.values(), "alert_entity_type_check"),
        enum_check("recipient_type", RecipientType.values(), "alert_recipient_type_check"),
    )
