"""Workflow API schemas."""

from datetime import datetime
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.domain.enums import EntityType
from app.schemas.automation import ExecutionResponse


class WorkflowCreateRequest(BaseModel):
    """Request body for creating a workflow. nodes/edges are the designer graph, stored as-is."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    is_active: bool = True
    nodes: list[dict[str, Any]] | None = None
    edges: list[dict[str, Any]] | None = None


class WorkflowUpdate(BaseModel):
    """Request body for updating a workflow (partial)."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    is_active: bool | None = None
    nodes: list[dict[str, Any]] | None = None
    edges: list[dict[str, Any]] | None = None

    @model_validator(mode="after")
    def reject_null_required(self) -> Self:
        for name in ("name", "is_active"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class WorkflowResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    agency_id: str
    name: str
    description: str | None
    is_active: bool
    nodes: list[dict[str, Any]] | None
    edges: list[dict[str, Any]] | None
    execution_count: int
    last_executed_at: datetime | None
    created_at: datetime
    updated_at: datetime


class WorkflowExecuteRequest(BaseModel):
    """Optional target entity and data for POST /workflows/{id}/execute."""

    entity_type: EntityType | None = None
    entity_id: str | None = Field(default=None, min_length=1)
    data: dict[str, Any] = Field(default_factory=dict)


class WorkflowExecuteResponse(BaseModel):
    workflow: WorkflowResponse
    executions: list[ExecutionResponse]
