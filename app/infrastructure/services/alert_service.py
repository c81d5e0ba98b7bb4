"""Alert service: manual alerts, idempotent sweeps and resolution.

Every alert is announced with an in-app notification to its recipient.
Sweeps create at most one unresolved alert per (agency, type, entity);
the check-then-create runs under a transaction-scoped advisory lock.
"""

from __future__ import annotations

import math
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta
from typing import Any

from app.application.dtos.alert import AlertDraft, SweepResult
from app.core.config import Settings
from app.domain.entities.alert import (
    application_deadline_severity,
    notification_priority_for,
    notification_type_for,
    overdue_task_severity,
)
from app.domain.enums import (
    AlertCheck,
    AlertSeverity,
    AlertType,
    ApplicationStatus,
    AppointmentStatus,
    EntityType,
    NotificationChannel,
    RecipientType,
    TaskStatus,
)
from app.domain.exceptions import ResourceNotFoundException
from app.domain.value_objects import EntityRef
from app.infrastructure.persistence.models.alert import Alert
from app.infrastructure.persistence.models.messaging import Notification
from app.infrastructure.persistence.repositories.alert_repo import AlertRepository
from app.infrastructure.persistence.repositories.application_repo import (
    ApplicationRepository,
)
from app.infrastructure.persistence.repositories.appointment_repo import (
    AppointmentRepository,
)
from app.infrastructure.persistence.repositories.document_repo import DocumentRepository
from app.infrastructure.persistence.repositories.lead_repo import LeadRepository
from app.infrastructure.persistence.repositories.messaging_repo import (
    NotificationRepository,
)
from app.infrastructure.persistence.repositories.student_repo import StudentRepository
from app.infrastructure.persistence.repositories.task_repo import TaskRepository
from app.infrastructure.persistence.repositories.user_repo import UserRepository
from app.shared.enums import NotificationStatus
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import add_span_attributes, traced
from app.shared.utils.datetime import ensure_utc, utc_now

logger = get_logger(__name__)

_OPEN_TASK_STATUSES = (TaskStatus.PENDING.value, TaskStatus.IN_PROGRESS.value)
_UNATTENDED_APPOINTMENT_STATUSES = (
    AppointmentStatus.SCHEDULED.value,
    AppointmentStatus.CONFIRMED.value,
)
_OPEN_APPLICATION_STATUSES = (
    ApplicationStatus.PENDING.value,
    ApplicationStatus.UNDER_REVIEW.value,
    ApplicationStatus.IN_PROGRESS.value,
)


def _owner(row: Any) -> tuple[str, RecipientType] | None:
    """Assigned staff user first, then the linked student, then the linked lead."""
    if getattr(row, "assigned_to", None):
        return row.assigned_to, RecipientType.USER
    if getattr(row, "student_id", None):
        return row.student_id, RecipientType.STUDENT
    if getattr(row, "lead_id", None):
        return row.lead_id, RecipientType.LEAD
    return None


class AlertService:
    """Creates, sweeps and resolves operational alerts for one agency at a time."""

    def __init__(
        self,
        *,
        settings: Settings,
        alert_repo: AlertRepository,
        notification_repo: NotificationRepository,
        user_repo: UserRepository,
        student_repo: StudentRepository,
        lead_repo: LeadRepository,
        task_repo: TaskRepository,
        appointment_repo: AppointmentRepository,
        document_repo: DocumentRepository,
        application_repo: ApplicationRepository,
    ) -> None:
        self.settings = settings
        self.alert_repo = alert_repo
        self.notification_repo = notification_repo
        self.user_repo = user_repo
        self.student_repo = student_repo
        self.lead_repo = lead_repo
        self.task_repo = task_repo
        self.appointment_repo = appointment_repo
        self.document_repo = document_repo
        self.application_repo = application_repo
        self._checks: dict[
            AlertCheck, Callable[[str, datetime, SweepResult], Awaitable[None]]
        ] = {
            AlertCheck.OVERDUE_TASKS: self._check_overdue_tasks,
            AlertCheck.MISSED_APPOINTMENTS: self._check_missed_appointments,
            AlertCheck.EXPIRED_DOCUMENTS: self._check_documents,
            AlertCheck.APPLICATION_DEADLINES: self._check_application_deadlines,
        }

    async def create_alert(self, agency_id: str, draft: AlertDraft) -> Alert:
        """Create an alert after checking the recipient belongs to the agency.

        Raises:
            ResourceNotFoundException: recipient is not a user/student/lead of the agency.
        """
        repo = {
            RecipientType.USER: self.user_repo,
            RecipientType.STUDENT: self.student_repo,
            RecipientType.LEAD: self.lead_repo,
        }[draft.recipient_type]
        if await repo.get_by_id_and_agency(draft.recipient_id, agency_id) is None:
            raise ResourceNotFoundException(
                draft.recipient_type.value.lower(), draft.recipient_id
            )
        return await self._persist(agency_id, draft)

    async def resolve_alert(self, agency_id: str, alert_id: str) -> Alert:
        alert = await self.alert_repo.get_by_id_and_agency(alert_id, agency_id)
        if alert is None:
            raise ResourceNotFoundException("alert", alert_id)
        if alert.resolved_at is None:
            alert.resolved_at = utc_now()
            alert = await self.alert_repo.update(alert)
        return alert

    @traced("alerts.run_check")
    async def run_check(
        self, agency_id: str, check: AlertCheck, now: datetime | None = None
    ) -> SweepResult:
        """Run one sweep and return how many rows were scanned and alerts created."""
        add_span_attributes(check=check.value)
        result = SweepResult(check=check, scanned=0, created=0)
        await self._checks[check](agency_id, ensure_utc(now) or utc_now(), result)
        logger.info(
            "Alert sweep %s for agency %s: scanned=%d created=%d",
            check.value,
            agency_id,
            result.scanned,
            result.created,
        )
        return result

    async def _persist(self, agency_id: str, draft: AlertDraft) -> Alert:
        alert = await self.alert_repo.create(
            Alert(
                agency_id=agency_id,
                alert_type=draft.alert_type.value,
                title=draft.title,
                message=draft.message,
                severity=draft.severity.value,
                entity_type=draft.entity_ref.entity_type.value if draft.entity_ref else None,
                entity_id=draft.entity_ref.entity_id if draft.entity_ref else None,
                recipient_id=draft.recipient_id,
                recipient_type=draft.recipient_type.value,
                action_required=draft.action_required,
                action_url=draft.action_url,
                extra_data=draft.metadata,
            )
        )
        await self.notification_repo.create(
            Notification(
                agency_id=agency_id,
                notification_type=notification_type_for(draft.severity).value,
                title=draft.title,
                message=draft.message,
                recipient_id=draft.recipient_id,
                recipient_type=draft.recipient_type.value,
                channel=NotificationChannel.IN_APP.value,
                status=NotificationStatus.PENDING.value,
                priority=notification_priority_for(draft.severity).value,
                data={
                    "alert_id": alert.id,
                    "alert_type": draft.alert_type.value,
                    "action_required": draft.action_required,
                    "action_url": draft.action_url,
                },
            )
        )
        return alert

    async def _create_once(
        self, agency_id: str, draft: AlertDraft, result: SweepResult
    ) -> None:
        """Create draft unless an unresolved alert of its type exists for the same entity."""
        result.scanned += 1
        if draft.entity_ref is None:
            raise ValueError("Sweep alerts must reference an entity")
        entity_id = draft.entity_ref.entity_id
        alert_type = draft.alert_type.value
        await self.alert_repo.lock_for_entity(agency_id, alert_type, entity_id)
        if await self.alert_repo.find_unresolved(agency_id, alert_type, entity_id):
            return
        alert = await self._persist(agency_id, draft)
        result.created += 1
        result.alert_ids.append(alert.id)

    async def _check_overdue_tasks(
        self, agency_id: str, now: datetime, result: SweepResult
    ) -> None:
        for task in await self.task_repo.find_overdue(agency_id, now, _OPEN_TASK_STATUSES):
            owner = _owner(task)
            if owner is None:
                continue
            due = ensure_utc(task.due_date)
            days_overdue = (now - due).days
            await self._create_once(
                agency_id,
                AlertDraft(
                    alert_type=AlertType.TASK_OVERDUE,
                    title="Task Overdue",
                    message=f'Task "{task.title}" is overdue and requires attention',
                    severity=overdue_task_severity(days_overdue),
                    recipient_id=owner[0],
                    recipient_type=owner[1],
                    entity_ref=EntityRef(EntityType.TASK, task.id),
                    action_required=True,
                    action_url=f"/tasks/{task.id}",
                    metadata={
                        "taskTitle": task.title,
                        "dueDate": due.isoformat(),
                        "daysOverdue": days_overdue,
                    },
                ),
                result,
            )

    async def _check_missed_appointments(
        self, agency_id: str, now: datetime, result: SweepResult
    ) -> None:
        window_start = now - timedelta(minutes=self.settings.alert_missed_appointment_minutes)
        appointments = await self.appointment_repo.find_started_between(
            agency_id, window_start, now, _UNATTENDED_APPOINTMENT_STATUSES
        )
        for appointment in appointments:
            owner = _owner(appointment)
            if owner is None:
                continue
            start = ensure_utc(appointment.start_time)
            await self._create_once(
                agency_id,
                AlertDraft(
                    alert_type=AlertType.APPOINTMENT_MISSED,
                    title="Appointment Missed",
                    message=f'Appointment "{appointment.title}" was not attended',
                    severity=AlertSeverity.MEDIUM,
                    recipient_id=owner[0],
                    recipient_type=owner[1],
                    entity_ref=EntityRef(EntityType.APPOINTMENT, appointment.id),
                    action_required=True,
                    action_url=f"/appointments/{appointment.id}",
                    metadata={
                        "appointmentTitle": appointment.title,
                        "startTime": start.isoformat(),
                    },
                ),
                result,
            )

    async def _check_documents(
        self, agency_id: str, now: datetime, result: SweepResult
    ) -> None:
        until = now + timedelta(days=self.settings.alert_document_expiry_warning_days)
        for document in await self.document_repo.find_expiring_before(agency_id, until):
            if not document.student_id:
                continue
            expires_at = ensure_utc(document.expires_at)
            if expires_at < now:
                alert_type, severity = AlertType.DOCUMENT_EXPIRED, AlertSeverity.HIGH
                title = "Document Expired"
                message = f'Document "{document.name}" has expired'
            elif expires_at > now:
                alert_type, severity = AlertType.DOCUMENT_EXPIRING, AlertSeverity.MEDIUM
                title = "Document Expiring Soon"
                days_left = math.ceil((expires_at - now) / timedelta(days=1))
                message = f'Document "{document.name}" expires in {days_left} days'
            else:
                continue
            await self._create_once(
                agency_id,
                AlertDraft(
                    alert_type=alert_type,
                    title=title,
                    message=message,
                    severity=severity,
                    recipient_id=document.student_id,
                    recipient_type=RecipientType.STUDENT,
                    entity_ref=EntityRef(EntityType.DOCUMENT, document.id),
                    action_required=True,
                    action_url=f"/documents/{document.id}",
                    metadata={
                        "documentName": document.name,
                        "expiresAt": expires_at.isoformat(),
                    },
                ),
                result,
            )

    async def _check_application_deadlines(
        self, agency_id: str, now: datetime, result: SweepResult
    ) -> None:
        until = now + timedelta(days=self.settings.alert_application_deadline_days)
        applications = await self.application_repo.find_deadlines_between(
            agency_id, now, until, _OPEN_APPLICATION_STATUSES
        )
        for application in applications:
            deadline = ensure_utc(application.deadline)
            days = math.ceil((deadline - now) / timedelta(days=1))
            await self._create_once(
                agency_id,
                AlertDraft(
                    alert_type=AlertType.APPLICATION_DEADLINE,
                    title="Application Deadline Approaching",
                    message=(
                        f"Application to {application.university_name} "
                        f"deadline is in {days} days"
                    ),
                    severity=application_deadline_severity(days),
                    recipient_id=application.student_id,
                    recipient_type=RecipientType.STUDENT,
                    entity_ref=EntityRef(EntityType.APPLICATION, application.id),
                    action_required=True,
                    action_url=f"/applications/{application.id}",
                    metadata={
                        "university": application.university_name,
                        "program": application.program,
                        "deadline": deadline.isoformat(),
                        "daysUntilDeadline": days,
                    },
                ),
                result,
            )
