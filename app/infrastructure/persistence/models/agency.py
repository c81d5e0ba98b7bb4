"""Agency ORM model. Root entity for the multi-tenant hierarchy (no agency_id)."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import AgencyStatus
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import (
    CuidMixin,
    TimestampMixin,
    enum_check,
)


class Agency(CuidMixin, TimestampMixin, Base):
    """Root tenant entity addressed by its subdomain. Table: agency."""

    __tablename__ = "agency"

    subdomain: Mapped[str] = mapped_column(
        String(63), unique=True, nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=AgencyStatus.ACTIVE.value, index=True
    )

    __table_args__ = (
        enum_check("status", AgencyStatus.values(), "agency_status_check"),
    )
