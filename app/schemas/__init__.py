"""Pydantic request/response schemas for the API."""

from app.schemas.agency import AgencyProvisionRequest, AgencyProvisionResponse
from app.schemas.alert import AlertCreateRequest, AlertResponse, SweepResponse
from app.schemas.automation import (
    DispatchEventRequest,
    DispatchEventResponse,
    ExecutionResponse,
    ScheduledRunResponse,
    TriggerCreateRequest,
    TriggerListItem,
    TriggerResponse,
    TriggerUpdateRequest,
)
from app.schemas.common import Page
from app.schemas.health import HealthResponse, ReadinessErrorResponse, ReadinessResponse
from app.schemas.workflow import (
    WorkflowCreateRequest,
    WorkflowExecuteRequest,
    WorkflowExecuteResponse,
    WorkflowResponse,
    WorkflowUpdate,
)

__all__ = [
    "AgencyProvisionRequest",
    "AgencyProvisionResponse",
    "AlertCreateRequest",
    "AlertResponse",
    "DispatchEventRequest",
    "DispatchEventResponse",
    "ExecutionResponse",
    "HealthResponse",
    "Page",
    "ReadinessErrorResponse",
    "ReadinessResponse",
    "ScheduledRunResponse",
    "SweepResponse",
    "TriggerCreateRequest",
    "TriggerListItem",
    "TriggerResponse",
    "TriggerUpdateRequest",
    "WorkflowCreateRequest",
    "WorkflowExecuteRequest",
    "WorkflowExecuteResponse",
    "WorkflowResponse",
    "WorkflowUpdate",
]
