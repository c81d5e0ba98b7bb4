"""User ORM model. Agency staff member (assignee of tasks, alert recipient)."""

import sqlalchemy as sa
from sqlalchemy import Boolean, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import UserRole
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import AgencyScopedModel, enum_check


class User(AgencyScopedModel, Base):
    """Staff user. Table: app_user (avoids the reserved word 'user'). Email unique per agency."""

    __tablename__ = "app_user"

    email: Mapped[str] = mapped_column(String(320), nullable=False)
    first_name: Mapped[str] = mapped_column(String(120), nullable=False)
    last_name: Mapped[str] = mapped_column(String(120), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(40), nullable=True)
    role: Mapped[str] = mapped_column(
        String(32), nullable=False, default=UserRole.STAFF.value
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=sa.text("true")
    )

    __table_args__ = (
        UniqueConstraint("agency_id", "email", name="uq_app_user_agency_email"),
        enum_check("role", UserRole.values(), "app_user_role_check"),
    )
