"""SQLAlchemy mixins for common model patterns (DRY).

Provides: CuidMixin, AgencyMixin, TimestampMixin, ExtraDataMixin and the
combined AgencyScopedModel used by every tenant-owned table.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, CheckConstraint, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column
from sqlalchemy.sql import func

from app.shared.utils.generators import generate_cuid


def enum_check(column: str, values: list[str], name: str) -> CheckConstraint:
    """CheckConstraint restricting column to the given enum values."""
    return CheckConstraint(
        "{} IN ({})".format(
            column,
            ", ".join("'{}'".format(v.replace("'", "''")) for v in values),
        ),
        name=name,
    )


class CuidMixin:
    """Mixin for models using CUID as primary key. Provides id with default generate_cuid."""

    @declared_attr
    def id(cls) -> Mapped[str]:
        return mapped_column(String, primary_key=True, default=generate_cuid)


class AgencyMixin:
    """Mixin for tenant-owned models. Provides agency_id FK to agency with CASCADE delete."""

    @declared_attr
    def agency_id(cls) -> Mapped[str]:
        return mapped_column(
            String,
            ForeignKey("agency.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )


class TimestampMixin:
    """Mixin for created_at and updated_at (server defaults, timezone-aware)."""

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True), server_default=func.now(), nullable=False
        )

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            server_default=func.now(),
            onupdate=func.now(),
            nullable=False,
        )


class ExtraDataMixin:
    """Free-form JSON column exposed as 'metadata' in the API (the attribute name is reserved by SQLAlchemy)."""

    @declared_attr
    def extra_data(cls) -> Mapped[dict[str, Any] | None]:
        return mapped_column("metadata", JSON, nullable=True)


class AgencyScopedModel(CuidMixin, AgencyMixin, TimestampMixin):
    """Combined mixin: CUID + agency_id + created_at/updated_at."""

    __abstract__ = True
