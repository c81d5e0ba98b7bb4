"""Outbox ORM models: in-app notifications, email and SMS messages.

Rows are written by automation actions and alert creation; delivery is
handled outside this service.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import NotificationChannel, Priority, RecipientType
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import AgencyScopedModel, enum_check
from app.shared.enums import MessageStatus, NotificationStatus


class Notification(AgencyScopedModel, Base):
    """In-app notification. Table: notification."""

    __tablename__ = "notification"

    notification_type: Mapped[str] = mapped_column(String(32), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    recipient_id: Mapped[str] = mapped_column(String, nullable=False)
    recipient_type: Mapped[str] = mapped_column(String(16), nullable=False)
    channel: Mapped[str] = mapped_column(
        String(16), nullable=False, default=NotificationChannel.IN_APP.value
    )
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=NotificationStatus.PENDING.value
    )
    priority: Mapped[str] = mapped_column(
        String(16), nullable=False, default=Priority.MEDIUM.value
    )
    data: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    read_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        Index("ix_notification_agency_recipient", "agency_id", "recipient_id"),
        enum_check("recipient_type", RecipientType.values(), "notification_recipient_type_check"),
        enum_check("status", NotificationStatus.values(), "notification_status_check"),
    )


class EmailMessage(AgencyScopedModel, Base):
    """Queued email. Table: email_message."""

    __tablename__ = "email_message"

    to_email: Mapped[str] = mapped_column(String(320), nullable=False)
    subject: Mapped[str] = mapped_column(String(500), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=MessageStatus.SCHEDULED.value, index=True
    )
    recipient_id: Mapped[str | None] = mapped_column(String, nullable=True)
    recipient_type: Mapped[str | None] = mapped_column(String(16), nullable=True)
    data: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    __table_args__ = (
        enum_check("status", MessageStatus.values(), "email_message_status_check"),
    )


class SmsMessage(AgencyScopedModel, Base):
    """Queued SMS. Table: sms_message."""

    __tablename__ = "sms_message"

    to_phone: Mapped[str] = mapped_column(String(40), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=MessageStatus.SCHEDULED.value, index=True
    )
    recipient_id: Mapped[str | None] = mapped_column(String, nullable=True)
    recipient_type: Mapped[str | None] = mapped_column(String(16), nullable=True)

    __table_args__ = (
        enum_check("status", MessageStatus.values(), "sms_message_status_check"),
    )
