"""Workflow ORM model. Designer graph plus execution bookkeeping."""

from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlalchemy import JSON, Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import AgencyScopedModel


class Workflow(AgencyScopedModel, Base):
    """Workflow definition. Table: workflow.

    nodes/edges are the designer graph and are stored opaquely; behaviour
    comes from the automation triggers linked through workflow_id.
    """

    __tablename__ = "workflow"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=sa.text("true")
    )
    nodes: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)
    edges: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)
    execution_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=sa.text("0")
    )
    last_executed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
