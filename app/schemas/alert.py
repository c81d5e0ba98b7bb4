"""Alert API schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.domain.enums import AlertCheck, AlertSeverity, AlertType, EntityType, RecipientType


class AlertCreateRequest(BaseModel):
    """Request body for creating an alert manually. The recipient must belong to the agency."""

    alert_type: AlertType
    title: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    severity: AlertSeverity = AlertSeverity.MEDIUM
    recipient_id: str = Field(..., min_length=1)
    recipient_type: RecipientType
    entity_type: EntityType | None = None
    entity_id: str | None = Field(default=None, min_length=1)
    action_required: bool = True
    action_url: str | None = Field(default=None, max_length=1024)
    metadata: dict[str, Any] | None = None


class AlertResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    alert_type: AlertType
    title: str
    message: str
    severity: AlertSeverity
    entity_type: EntityType | None
    entity_id: str | None
    recipient_id: str
    recipient_type: RecipientType
    action_required: bool
    action_url: str | None
    metadata: dict[str, Any] | None = Field(default=None, validation_alias="extra_data")
    resolved_at: datetime | None
    created_at: datetime


class SweepResponse(BaseModel):
    """Result of POST /alerts/checks/{check}."""

    check: AlertCheck
    scanned: int
    created: int
    alert_ids: list[str]
