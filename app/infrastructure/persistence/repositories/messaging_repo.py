"""Outbox repositories: notifications, email and SMS messages."""

from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.models.messaging import (
    EmailMessage,
    Notification,
    SmsMessage,
)
from app.infrastructure.persistence.repositories.base import AgencyScopedRepository


class NotificationRepository(AgencyScopedRepository[Notification]):
    filterable = frozenset({"recipient_id", "recipient_type", "status", "notification_type"})

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Notification)


class EmailMessageRepository(AgencyScopedRepository[EmailMessage]):
    filterable = frozenset({"status"})

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, EmailMessage)


class SmsMessageRepository(AgencyScopedRepository[SmsMessage]):
    filterable = frozenset({"status"})

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, SmsMessage)
