"""Typed automation variants: conditions, actions and schedules.

Trigger rows store these as JSON. They are validated into the closed sets
below when a trigger is written and parsed back before the engine uses
them, so handlers never read ad hoc keys out of raw dicts.
"""

from __future__ import annotations

from dataclasses import dataclass, field as dc_field
from datetime import datetime
from typing import Annotated, Any, Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from croniter import croniter
from jinja2 import TemplateSyntaxError
from jinja2.sandbox import SandboxedEnvironment
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)

from app.domain.enums import (
    ConditionOperator,
    EntityType,
    IntervalUnit,
    NotificationChannel,
    NotificationType,
    Priority,
    TriggerEventType,
    TriggerType,
)
from app.domain.value_objects import EntityRef


# Parses only; rendering is TemplateRenderer's job.
_template_env = SandboxedEnvironment(autoescape=False)


def _check_template(v: str) -> str:
    """Reject action text that would fail to compile at run time."""
    if "{" in v:
        try:
            _template_env.parse(v)
        except TemplateSyntaxError as e:
            raise ValueError(f"Invalid template: {e.message}") from e
    return v


class _Variant(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", use_enum_values=False)


class Condition(_Variant):
    """field/operator/value triple.

    field: dot path; 'data.' prefix reads the event payload, anything else
    reads the loaded entity. operator is kept as text so stored rows with an
    operator outside ConditionOperator still parse (and evaluate to False).
    """

    field: str = Field(..., min_length=1, max_length=255)
    operator: str = Field(..., min_length=1, max_length=32)
    value: Any = None

    @property
    def known_operator(self) -> ConditionOperator | None:
        try:
            return ConditionOperator(self.operator)
        except ValueError:
            return None


class SendNotificationAction(_Variant):
    type: Literal["SEND_NOTIFICATION"] = "SEND_NOTIFICATION"
    title: str = "Automated Notification"
    message: str = ""
    notification_type: NotificationType = NotificationType.INFO
    channel: NotificationChannel = NotificationChannel.IN_APP
    priority: Priority = Priority.MEDIUM

    @field_validator("title", "message")
    @classmethod
    def _templates(cls, v: str) -> str:
        return _check_template(v)


class SendEmailAction(_Variant):
    type: Literal["SEND_EMAIL"] = "SEND_EMAIL"
    subject: str = "Automated Email"
    body: str = ""

    @field_validator("subject", "body")
    @classmethod
    def _templates(cls, v: str) -> str:
        return _check_template(v)


class SendSmsAction(_Variant):
    type: Literal["SEND_SMS"] = "SEND_SMS"
    message: str = ""

    @field_validator("message")
    @classmethod
    def _templates(cls, v: str) -> str:
        return _check_template(v)


class CreateTaskAction(_Variant):
    """Creates a task linked to the triggering lead/student.

    due_date wins over delay/delay_unit; without either the task is due in one day.
    """

    type: Literal["CREATE_TASK"] = "CREATE_TASK"
    title: str = "Automated Task"
    description: str = ""
    task_type: str = "GENERAL"
    priority: Priority = Priority.MEDIUM
    assigned_to: str | None = None
    due_date: datetime | None = None
    delay: int = Field(default=1, ge=0)
    delay_unit: IntervalUnit = IntervalUnit.DAYS

    @field_validator("title", "description")
    @classmethod
    def _templates(cls, v: str) -> str:
        return _check_template(v)


class FieldUpdate(_Variant):
    field: str = Field(..., min_length=1, max_length=128)
    value: Any = None


class UpdateEntityAction(_Variant):
    type: Literal["UPDATE_ENTITY"] = "UPDATE_ENTITY"
    updates: list[FieldUpdate] = Field(default_factory=list)


class EnrollInCampaignAction(_Variant):
    type: Literal["ENROLL_IN_CAMPAIGN"] = "ENROLL_IN_CAMPAIGN"
    campaign_id: str = Field(..., min_length=1)


class WebhookAction(_Variant):
    type: Literal["WEBHOOK"] = "WEBHOOK"
    url: str = Field(..., min_length=1, max_length=2048)
    method: Literal["POST", "PUT", "PATCH"] = "POST"
    headers: dict[str, str] = Field(default_factory=dict)

    @field_validator("url")
    @classmethod
    def _http_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("Webhook url must start with http:// or https://")
        return v


class CustomAction(_Variant):
    type: Literal["CUSTOM"] = "CUSTOM"
    name: str = Field(..., min_length=1, max_length=255)
    params: dict[str, Any] = Field(default_factory=dict)


TriggerAction = Annotated[
    SendNotificationAction
    | SendEmailAction
    | SendSmsAction
    | CreateTaskAction
    | UpdateEntityAction
    | EnrollInCampaignAction
    | WebhookAction
    | CustomAction,
    Field(discriminator="type"),
]


class ScheduleTarget(_Variant):
    """Entity a scheduled run executes against (optional)."""

    entity_type: EntityType
    entity_id: str = Field(..., min_length=1)

    def to_ref(self) -> EntityRef:
        return EntityRef(self.entity_type, self.entity_id)


class CronSchedule(_Variant):
    type: Literal["CRON"] = "CRON"
    cron_expression: str = Field(..., min_length=1, max_length=255)
    timezone: str = "UTC"
    target: ScheduleTarget | None = None

    @field_validator("cron_expression")
    @classmethod
    def _valid_cron(cls, v: str) -> str:
        if not croniter.is_valid(v):
            raise ValueError(f"Invalid cron expression: {v!r}")
        return v

    @field_validator("timezone")
    @classmethod
    def _valid_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v!r}") from e
        return v


class IntervalSchedule(_Variant):
    type: Literal["INTERVAL"] = "INTERVAL"
    interval: int = Field(..., ge=1)
    unit: IntervalUnit
    target: ScheduleTarget | None = None


TriggerSchedule = Annotated[CronSchedule | IntervalSchedule, Field(discriminator="type")]

_action_adapter: TypeAdapter[TriggerAction] = TypeAdapter(TriggerAction)
_schedule_adapter: TypeAdapter[TriggerSchedule] = TypeAdapter(TriggerSchedule)


def parse_action(raw: Any) -> TriggerAction:
    """Parse one stored action. Raises pydantic ValidationError when malformed."""
    return _action_adapter.validate_python(raw)


def parse_schedule(raw: Any) -> TriggerSchedule:
    """Parse a stored schedule. Raises pydantic ValidationError when malformed."""
    return _schedule_adapter.validate_python(raw)


def parse_conditions(raw: Any) -> list[Condition] | None:
    """Parse stored conditions; None when the blob is unusable (callers fail closed)."""
    if raw is None:
        return []
    if not isinstance(raw, list):
        return None
    try:
        return [Condition.model_validate(item) for item in raw]
    except ValidationError:
        return None


def dump_variant(variant: BaseModel) -> dict[str, Any]:
    """JSON-safe dict for storage on a trigger row."""
    return variant.model_dump(mode="json", exclude_none=True)


@dataclass(frozen=True)
class TriggerDefinition:
    """Validated input for creating a trigger."""

    name: str
    trigger_type: TriggerType
    event_type: TriggerEventType
    actions: list[TriggerAction]
    conditions: list[Condition] = dc_field(default_factory=list)
    description: str | None = None
    workflow_id: str | None = None
    schedule: CronSchedule | IntervalSchedule | None = None
    is_active: bool = True
    priority: int = 50
    metadata: dict[str, Any] | None = None


@dataclass
class ScheduledRunResult:
    """Outcome of one pass over due scheduled executions."""

    claimed: int = 0
    executed: int = 0
    cancelled: int = 0
    execution_ids: list[str] = dc_field(default_factory=list)
