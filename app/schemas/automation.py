"""Automation API schemas: triggers, executions, manual dispatch, scheduled runs.

Conditions, actions and schedules reuse the typed variants from
app.application.dtos.automation, so the API rejects malformed blobs
before they reach the database.
"""

from datetime import datetime
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.application.dtos.automation import Condition, TriggerAction, TriggerSchedule
from app.domain.enums import EntityType, TriggerEventType, TriggerType


# Trigger columns a partial update may not clear.
_TRIGGER_NOT_NULL = frozenset(
    {"name", "trigger_type", "event_type", "conditions", "actions", "is_active", "priority"}
)


def _known_operators(conditions: list[Condition] | None) -> list[Condition] | None:
    for condition in conditions or []:
        if condition.known_operator is None:
            raise ValueError(f"Unknown condition operator: {condition.operator!r}")
    return conditions


class TriggerCreateRequest(BaseModel):
    """Request body for creating a trigger. TIME_BASED triggers need a schedule.

    priority defaults to DEFAULT_TRIGGER_PRIORITY.
    """

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    trigger_type: TriggerType
    event_type: TriggerEventType
    conditions: list[Condition] = Field(default_factory=list)
    actions: list[TriggerAction] = Field(..., min_length=1)
    schedule: TriggerSchedule | None = None
    is_active: bool = True
    priority: int | None = Field(default=None, ge=0, le=100)
    workflow_id: str | None = None
    metadata: dict[str, Any] | None = None

    @field_validator("conditions")
    @classmethod
    def check_operators(cls, v: list[Condition] | None) -> list[Condition] | None:
        return _known_operators(v)


class TriggerUpdateRequest(BaseModel):
    """Request body for updating a trigger (partial; only sent fields change)."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    trigger_type: TriggerType | None = None
    event_type: TriggerEventType | None = None
    conditions: list[Condition] | None = None
    actions: list[TriggerAction] | None = Field(default=None, min_length=1)
    schedule: TriggerSchedule | None = None
    is_active: bool | None = None
    priority: int | None = Field(default=None, ge=0, le=100)
    workflow_id: str | None = None
    metadata: dict[str, Any] | None = None

    @field_validator("conditions")
    @classmethod
    def check_operators(cls, v: list[Condition] | None) -> list[Condition] | None:
        return _known_operators(v)

    @model_validator(mode="after")
    def reject_null_required(self) -> Self:
        cleared = sorted(
            name
            for name in self.model_fields_set & _TRIGGER_NOT_NULL
            if getattr(self, name) is None
        )
        if cleared:
            raise ValueError(f"Fields cannot be null: {', '.join(cleared)}")
        return self

    def changes(self) -> dict[str, Any]:
        """Fields the client sent, with typed values kept (not dumped to dicts)."""
        return {name: getattr(self, name) for name in self.model_fields_set}


class ExecutionResponse(BaseModel):
    """One automation execution record."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    trigger_id: str
    entity_type: EntityType | None
    entity_id: str | None
    status: str
    success_count: int
    error_count: int
    data: dict[str, Any] | None
    execution_log: list[dict[str, Any]] | None
    executed_at: datetime
    completed_at: datetime | None


class TriggerResponse(BaseModel):
    """Trigger in get/create/update responses."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    agency_id: str
    workflow_id: str | None
    name: str
    description: str | None
    trigger_type: TriggerType
    event_type: TriggerEventType
    conditions: list[dict[str, Any]]
    actions: list[dict[str, Any]]
    schedule: dict[str, Any] | None
    is_active: bool
    priority: int
    metadata: dict[str, Any] | None = Field(default=None, validation_alias="extra_data")
    created_at: datetime
    updated_at: datetime


class TriggerListItem(TriggerResponse):
    """Trigger in list responses, with its latest executions (newest first)."""

    recent_executions: list[ExecutionResponse] = Field(default_factory=list)


class DispatchEventRequest(BaseModel):
    """Request body for POST /automation/events (manual dispatch)."""

    event_type: TriggerEventType
    entity_type: EntityType
    entity_id: str = Field(..., min_length=1)
    data: dict[str, Any] = Field(default_factory=dict)


class DispatchEventResponse(BaseModel):
    executed: int
    executions: list[ExecutionResponse]


class ScheduledRunResponse(BaseModel):
    """Result of POST /automation/scheduled/run."""

    claimed: int
    executed: int
    cancelled: int
    execution_ids: list[str]
