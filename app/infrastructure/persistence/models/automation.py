"""Automation ORM models: triggers, execution records, scheduled executions."""

from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import EntityType, TriggerEventType, TriggerType
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import (
    AgencyScopedModel,
    ExtraDataMixin,
    enum_check,
)
from app.shared.enums import ExecutionStatus, ScheduledExecutionStatus


class AutomationTrigger(AgencyScopedModel, ExtraDataMixin, Base):
    """Trigger definition. Table: automation_trigger.

    conditions, actions and schedule are JSON blobs validated into typed
    variants on write and parsed again on read.
    """

    __tablename__ = "automation_trigger"

    workflow_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("workflow.id", ondelete="SET NULL"), nullable=True, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    trigger_type: Mapped[str] = mapped_column(String(32), nullable=False)
    event_type: Mapped[str] = mapped_column(String(64), nullable=False)
    conditions: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    actions: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    schedule: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=sa.text("true")
    )
    priority: Mapped[int] = mapped_column(
        Integer, nullable=False, default=50, server_default=sa.text("50")
    )

    __table_args__ = (
        Index(
            "ix_automation_trigger_dispatch",
            "agency_id",
            "event_type",
            "is_active",
        ),
        enum_check("trigger_type", TriggerType.values(), "automation_trigger_type_check"),
        enum_check("event_type", TriggerEventType.values(), "automation_trigger_event_type_check"),
        CheckConstraint(
            "priority >= 0 AND priority <= 100", name="automation_trigger_priority_check"
        ),
    )


class AutomationExecution(AgencyScopedModel, Base):
    """One run of a trigger's actions. Table: automation_execution."""

    __tablename__ = "automation_execution"

    trigger_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("automation_trigger.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    entity_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    entity_id: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=ExecutionStatus.RUNNING.value
    )
    success_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=sa.text("0")
    )
    error_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=sa.text("0")
    )
    data: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    execution_log: Mapped[list[dict[str, Any]] | None] = mapped_column(
        JSON, nullable=True
    )
    executed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        Index("ix_automation_execution_trigger_executed", "trigger_id", "executed_at"),
        enum_check("status", ExecutionStatus.values(), "automation_execution_status_check"),
        enum_check("entity_type", EntityType.values(), "automation_execution_entity_type_check"),
    )


class ScheduledExecution(AgencyScopedModel, Base):
    """Pending occurrence of a time-based trigger. Table: scheduled_execution."""

    __tablename__ = "scheduled_execution"

    trigger_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("automation_trigger.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    scheduled_for: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=ScheduledExecutionStatus.SCHEDULED.value
    )
    schedule: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    execution_id: Mapped[str | None] = mapped_column(
        String,
        ForeignKey("automation_execution.id", ondelete="SET NULL"),
        nullable=True,
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        Index("ix_scheduled_execution_due", "status", "scheduled_for"),
        enum_check("status", ScheduledExecutionStatus.values(), "scheduled_execution_status_check"),
    )
