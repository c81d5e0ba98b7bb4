"""Automation action handlers.

One handler per ActionType. Each performs at most one persistence write
(or one HTTP call for WEBHOOK) and reports success or a skip; failures
raise and are recorded by the engine.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx
from sqlalchemy import DateTime, inspect

from app.application.dtos.automation import (
    CreateTaskAction,
    CustomAction,
    EnrollInCampaignAction,
    SendEmailAction,
    SendNotificationAction,
    SendSmsAction,
    TriggerAction,
    UpdateEntityAction,
    WebhookAction,
)
from app.application.interfaces.services import ITemplateRenderer
from app.application.services.schedule_calculator import interval_delta
from app.core.config import Settings
from app.domain.enums import (
    UPDATABLE_ENTITY_TYPES,
    ActionType,
    EntityType,
    EnrollmentStatus,
    RecipientType,
    TaskStatus,
)
from app.domain.exceptions import ActionExecutionException
from app.domain.value_objects import EntityRef
from app.infrastructure.persistence.models.campaign import CampaignEnrollment
from app.infrastructure.persistence.models.messaging import (
    EmailMessage,
    Notification,
    SmsMessage,
)
from app.infrastructure.persistence.models.task import Task
from app.infrastructure.persistence.repositories.campaign_repo import (
    CampaignEnrollmentRepository,
    CampaignRepository,
)
from app.infrastructure.persistence.repositories.entity_repo import (
    EntityRepository,
    entity_context,
)
from app.infrastructure.persistence.repositories.messaging_repo import (
    EmailMessageRepository,
    NotificationRepository,
    SmsMessageRepository,
)
from app.infrastructure.persistence.repositories.student_repo import StudentRepository
from app.infrastructure.persistence.repositories.task_repo import TaskRepository
from app.infrastructure.persistence.repositories.user_repo import UserRepository
from app.shared.enums import MessageStatus, NotificationStatus
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import ensure_utc, parse_iso_datetime, utc_now

logger = get_logger(__name__)

# Columns an UPDATE_ENTITY action may never touch.
_PROTECTED_COLUMNS = frozenset({"id", "agency_id", "created_at", "updated_at"})


@dataclass(frozen=True)
class Recipient:
    """Party an outbound message is addressed to."""

    id: str
    type: RecipientType
    email: str | None = None
    phone: str | None = None


@dataclass
class ActionContext:
    """Everything a handler may read for one trigger run."""

    agency_id: str
    trigger_id: str
    entity_ref: EntityRef | None
    entity: Any | None
    data: Mapping[str, Any] = field(default_factory=dict)
    recipient: Recipient | None = None

    def template_context(self) -> dict[str, Any]:
        """Entity columns overlaid with event data (event data wins)."""
        ctx: dict[str, Any] = entity_context(self.entity) if self.entity is not None else {}
        ctx.update(self.data)
        return ctx

    def provenance(self) -> dict[str, Any]:
        info: dict[str, Any] = {"automated": True, "trigger_id": self.trigger_id}
        if self.entity_ref is not None:
            info.update(self.entity_ref.as_dict())
        return info


@dataclass(frozen=True)
class ActionResult:
    """Handler outcome. skipped=True means nothing was written (still not a failure)."""

    skipped: bool = False
    reason: str | None = None
    info: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def done(cls, **info: Any) -> ActionResult:
        return cls(info=info)

    @classmethod
    def skip(cls, reason: str) -> ActionResult:
        return cls(skipped=True, reason=reason)


class ActionHandlers:
    """Dispatches typed actions to their handler."""

    def __init__(
        self,
        *,
        settings: Settings,
        renderer: ITemplateRenderer,
        notification_repo: NotificationRepository,
        email_repo: EmailMessageRepository,
        sms_repo: SmsMessageRepository,
        task_repo: TaskRepository,
        user_repo: UserRepository,
        student_repo: StudentRepository,
        campaign_repo: CampaignRepository,
        enrollment_repo: CampaignEnrollmentRepository,
        entity_repo: EntityRepository,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings
        self.renderer = renderer
        self.notification_repo = notification_repo
        self.email_repo = email_repo
        self.sms_repo = sms_repo
        self.task_repo = task_repo
        self.user_repo = user_repo
        self.student_repo = student_repo
        self.campaign_repo = campaign_repo
        self.enrollment_repo = enrollment_repo
        self.entity_repo = entity_repo
        self._http = http_client
        self._handlers: dict[ActionType, Callable[[Any, ActionContext], Awaitable[ActionResult]]] = {
            ActionType.SEND_NOTIFICATION: self._send_notification,
            ActionType.SEND_EMAIL: self._send_email,
            ActionType.SEND_SMS: self._send_sms,
            ActionType.CREATE_TASK: self._create_task,
            ActionType.UPDATE_ENTITY: self._update_entity,
            ActionType.ENROLL_IN_CAMPAIGN: self._enroll_in_campaign,
            ActionType.WEBHOOK: self._webhook,
            ActionType.CUSTOM: self._custom,
        }

    async def execute(self, action: TriggerAction, ctx: ActionContext) -> ActionResult:
        handler = self._handlers[ActionType(action.type)]
        return await handler(action, ctx)

    async def resolve_recipient(self, ctx: ActionContext) -> Recipient | None:
        """Lead -> the lead, student -> the student, application -> its student; else None."""
        entity = ctx.entity
        if entity is None or ctx.entity_ref is None:
            return None
        entity_type = ctx.entity_ref.entity_type
        if entity_type is EntityType.LEAD:
            return Recipient(entity.id, RecipientType.LEAD, entity.email, entity.phone)
        if entity_type is EntityType.STUDENT:
            return Recipient(entity.id, RecipientType.STUDENT, entity.email, entity.phone)
        if entity_type is EntityType.APPLICATION:
            student = await self.student_repo.get_by_id_and_agency(
                entity.student_id, ctx.agency_id
            )
            if student is None:
                return None
            return Recipient(student.id, RecipientType.STUDENT, student.email, student.phone)
        return None

    def _render(self, template: str, ctx: ActionContext) -> str:
        return self.renderer.render(template, ctx.template_context())

    async def _send_notification(
        self, action: SendNotificationAction, ctx: ActionContext
    ) -> ActionResult:
        if ctx.recipient is None:
            return ActionResult.skip("no recipient for entity")
        notification = await self.notification_repo.create(
            Notification(
                agency_id=ctx.agency_id,
                notification_type=action.notification_type.value,
                title=self._render(action.title, ctx),
                message=self._render(action.message, ctx),
                recipient_id=ctx.recipient.id,
                recipient_type=ctx.recipient.type.value,
                channel=action.channel.value,
                status=NotificationStatus.PENDING.value,
                priority=action.priority.value,
                data=ctx.provenance(),
            )
        )
        return ActionResult.done(notification_id=notification.id)

    async def _send_email(self, action: SendEmailAction, ctx: ActionContext) -> ActionResult:
        if ctx.recipient is None or not ctx.recipient.email:
            return ActionResult.skip("recipient has no email address")
        message = await self.email_repo.create(
            EmailMessage(
                agency_id=ctx.agency_id,
                to_email=ctx.recipient.email,
                subject=self._render(action.subject, ctx),
                body=self._render(action.body, ctx),
                status=MessageStatus.SCHEDULED.value,
                recipient_id=ctx.recipient.id,
                recipient_type=ctx.recipient.type.value,
                data=ctx.provenance(),
            )
        )
        return ActionResult.done(email_id=message.id)

    async def _send_sms(self, action: SendSmsAction, ctx: ActionContext) -> ActionResult:
        if ctx.recipient is None or not ctx.recipient.phone:
            return ActionResult.skip("recipient has no phone number")
        message = await self.sms_repo.create(
            SmsMessage(
                agency_id=ctx.agency_id,
                to_phone=ctx.recipient.phone,
                message=self._render(action.message, ctx),
                status=MessageStatus.SCHEDULED.value,
                recipient_id=ctx.recipient.id,
                recipient_type=ctx.recipient.type.value,
            )
        )
        return ActionResult.done(sms_id=message.id)

    async def _create_task(self, action: CreateTaskAction, ctx: ActionContext) -> ActionResult:
        if ctx.recipient is None:
            return ActionResult.skip("no recipient for entity")
        if action.assigned_to:
            assignee = await self.user_repo.get_by_id_and_agency(
                action.assigned_to, ctx.agency_id
            )
            if assignee is None:
                raise ActionExecutionException(
                    ActionType.CREATE_TASK.value,
                    f"assignee {action.assigned_to} is not a user of this agency",
                )
        due = (
            ensure_utc(action.due_date)
            if action.due_date is not None
            else utc_now() + interval_delta(action.delay, action.delay_unit)
        )
        is_student = ctx.recipient.type is RecipientType.STUDENT
        task = await self.task_repo.create(
            Task(
                agency_id=ctx.agency_id,
                title=self._render(action.title, ctx),
                description=self._render(action.description, ctx),
                task_type=action.task_type,
                category="AUTOMATION",
                priority=action.priority.value,
                status=TaskStatus.PENDING.value,
                due_date=due,
                assigned_to=action.assigned_to,
                student_id=ctx.recipient.id if is_student else None,
                lead_id=None if is_student else ctx.recipient.id,
                extra_data=ctx.provenance(),
            )
        )
        return ActionResult.done(task_id=task.id)

    async def _update_entity(
        self, action: UpdateEntityAction, ctx: ActionContext
    ) -> ActionResult:
        if ctx.entity is None or ctx.entity_ref is None:
            return ActionResult.skip("no entity to update")
        if ctx.entity_ref.entity_type not in UPDATABLE_ENTITY_TYPES:
            return ActionResult.skip(
                f"{ctx.entity_ref.entity_type.value} records cannot be updated by automation"
            )
        if not action.updates:
            return ActionResult.skip("no updates configured")
        columns = {attr.key: attr for attr in inspect(ctx.entity).mapper.column_attrs}
        values: dict[str, Any] = {}
        for update in action.updates:
            key = "extra_data" if update.field == "metadata" else update.field
            if key in _PROTECTED_COLUMNS or key not in columns:
                raise ActionExecutionException(
                    ActionType.UPDATE_ENTITY.value, f"field {update.field!r} cannot be updated"
                )
            value = update.value
            column_type = columns[key].columns[0].type
            if isinstance(column_type, DateTime) and isinstance(value, str):
                value = parse_iso_datetime(value)
                if value is None:
                    raise ActionExecutionException(
                        ActionType.UPDATE_ENTITY.value,
                        f"field {update.field!r} expects an ISO-8601 timestamp",
                    )
            values[key] = value
        # The row is only touched once every update has been accepted.
        for key, value in values.items():
            setattr(ctx.entity, key, value)
        await self.entity_repo.save(ctx.entity)
        return ActionResult.done(updated_fields=[u.field for u in action.updates])

    async def _enroll_in_campaign(
        self, action: EnrollInCampaignAction, ctx: ActionContext
    ) -> ActionResult:
        ref = ctx.entity_ref
        if ref is None or ref.entity_type not in (EntityType.LEAD, EntityType.STUDENT):
            return ActionResult.skip("only leads and students can be enrolled")
        campaign = await self.campaign_repo.get_by_id_and_agency(
            action.campaign_id, ctx.agency_id
        )
        if campaign is None:
            return ActionResult.skip(f"campaign {action.campaign_id} not found")
        lead_id = ref.entity_id if ref.entity_type is EntityType.LEAD else None
        student_id = ref.entity_id if ref.entity_type is EntityType.STUDENT else None
        existing = await self.enrollment_repo.find_existing(
            campaign.id, lead_id=lead_id, student_id=student_id
        )
        if existing is not None:
            return ActionResult.skip("already enrolled")
        enrollment = await self.enrollment_repo.create(
            CampaignEnrollment(
                agency_id=ctx.agency_id,
                campaign_id=campaign.id,
                lead_id=lead_id,
                student_id=student_id,
                status=EnrollmentStatus.ACTIVE.value,
                current_step=0,
                enrolled_at=utc_now(),
            )
        )
        return ActionResult.done(enrollment_id=enrollment.id)

    async def _webhook(self, action: WebhookAction, ctx: ActionContext) -> ActionResult:
        if not self.settings.webhook_actions_enabled:
            logger.info(
                "Webhook action not delivered (disabled): trigger=%s url=%s",
                ctx.trigger_id,
                action.url,
            )
            return ActionResult.skip("webhook delivery disabled")
        payload = {
            "agency_id": ctx.agency_id,
            "trigger_id": ctx.trigger_id,
            "entity": ctx.entity_ref.as_dict() if ctx.entity_ref else None,
            "data": dict(ctx.data),
            "sent_at": utc_now().isoformat(),
        }
        if self._http is not None:
            response = await self._send(self._http, action, payload)
        else:
            async with httpx.AsyncClient(
                timeout=self.settings.webhook_timeout_seconds
            ) as client:
                response = await self._send(client, action, payload)
        response.raise_for_status()
        return ActionResult.done(status_code=response.status_code)

    async def _send(
        self, client: httpx.AsyncClient, action: WebhookAction, payload: dict[str, Any]
    ) -> httpx.Response:
        return await client.request(
            action.method,
            action.url,
            json=payload,
            headers=action.headers,
            timeout=self.settings.webhook_timeout_seconds,
        )

    async def _custom(self, action: CustomAction, ctx: ActionContext) -> ActionResult:
        logger.info(
            "Custom action %r for trigger %s (entity=%s); no handler registered",
            action.name,
            ctx.trigger_id,
            ctx.entity_ref.as_dict() if ctx.entity_ref else None,
        )
        return ActionResult.done(name=action.name, handled=False)
