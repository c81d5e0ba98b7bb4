"""Initial schema: agencies, records, outbox, automation, alerts

Revision ID: a0f1c2d3e4b5
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a0f1c2d3e4b5"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ENTITY_TYPES = ["LEAD", "STUDENT", "APPLICATION", "TASK", "APPOINTMENT", "DOCUMENT"]
RECIPIENT_TYPES = ["USER", "STUDENT", "LEAD"]
PRIORITIES = ["LOW", "MEDIUM", "HIGH", "URGENT"]
TRIGGER_TYPES = ["EVENT_BASED", "TIME_BASED", "CONDITION_BASED", "WEBHOOK"]
TRIGGER_EVENT_TYPES = [
    "LEAD_CREATED",
    "LEAD_UPDATED",
    "LEAD_DELETED",
    "STUDENT_CREATED",
    "STUDENT_UPDATED",
    "STUDENT_DELETED",
    "APPLICATION_CREATED",
    "APPLICATION_UPDATED",
    "APPLICATION_DELETED",
    "DOCUMENT_UPLOADED",
    "DOCUMENT_VERIFIED",
    "APPOINTMENT_CREATED",
    "APPOINTMENT_UPDATED",
    "APPOINTMENT_CANCELLED",
    "MESSAGE_RECEIVED",
    "MESSAGE_SENT",
    "CAMPAIGN_ENROLLED",
    "CAMPAIGN_COMPLETED",
    "TASK_CREATED",
    "TASK_COMPLETED",
    "TASK_OVERDUE",
    "PIPELINE_STAGE_CHANGED",
    "CUSTOM",
]


def _check(column: str, values: list[str], name: str) -> sa.CheckConstraint:
    quoted = ", ".join(f"'{v}'" for v in values)
    return sa.CheckConstraint(f"{column} IN ({quoted})", name=name)


def _id() -> sa.Column:
    return sa.Column("id", sa.String(), primary_key=True)


def _agency_id() -> sa.Column:
    return sa.Column(
        "agency_id",
        sa.String(),
        sa.ForeignKey("agency.id", ondelete="CASCADE"),
        nullable=False,
    )


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def _fk(column: str, target: str, ondelete: str, nullable: bool = True) -> sa.Column:
    return sa.Column(
        column, sa.String(), sa.ForeignKey(target, ondelete=ondelete), nullable=nullable
    )


def upgrade() -> None:
    """Create the agency schema."""
    op.create_table(
        "agency",
        _id(),
        sa.Column("subdomain", sa.String(63), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("status", sa.String(32), nullable=False),
        *_timestamps(),
        _check("status", ["ACTIVE", "SUSPENDED"], "agency_status_check"),
    )
    op.create_index("ix_agency_subdomain", "agency", ["subdomain"], unique=True)
    op.create_index("ix_agency_status", "agency", ["status"])

    op.create_table(
        "app_user",
        _id(),
        _agency_id(),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("first_name", sa.String(120), nullable=False),
        sa.Column("last_name", sa.String(120), nullable=False),
        sa.Column("phone", sa.String(40), nullable=True),
        sa.Column("role", sa.String(32), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("agency_id", "email", name="uq_app_user_agency_email"),
        _check("role", ["ADMIN", "MANAGER", "CONSULTANT", "STAFF"], "app_user_role_check"),
    )
    op.create_index("ix_app_user_agency_id", "app_user", ["agency_id"])

    op.create_table(
        "lead",
        _id(),
        _agency_id(),
        sa.Column("first_name", sa.String(120), nullable=False),
        sa.Column("last_name", sa.String(120), nullable=False),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("phone", sa.String(40), nullable=True),
        sa.Column("source", sa.String(64), nullable=True),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("score", sa.Integer(), nullable=True),
        _fk("assigned_to", "app_user.id", "SET NULL"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        *_timestamps(),
        _check(
            "status",
            ["NEW", "CONTACTED", "QUALIFIED", "CONVERTED", "LOST"],
            "lead_status_check",
        ),
    )
    op.create_index("ix_lead_agency_id", "lead", ["agency_id"])
    op.create_index("ix_lead_status", "lead", ["status"])
    op.create_index("ix_lead_agency_status", "lead", ["agency_id", "status"])

    op.create_table(
        "student",
        _id(),
        _agency_id(),
        sa.Column("first_name", sa.String(120), nullable=False),
        sa.Column("last_name", sa.String(120), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("phone", sa.String(40), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("nationality", sa.String(80), nullable=True),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("stage", sa.String(64), nullable=True),
        sa.Column("gpa", sa.Float(), nullable=True),
        sa.Column("budget", sa.Float(), nullable=True),
        sa.Column("preferred_countries", sa.JSON(), nullable=True),
        _fk("lead_id", "lead.id", "SET NULL"),
        _fk("assigned_to", "app_user.id", "SET NULL"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        *_timestamps(),
        _check(
            "status",
            ["PROSPECT", "APPLIED", "ACCEPTED", "ENROLLED", "GRADUATED", "WITHDRAWN"],
            "student_status_check",
        ),
    )
    op.create_index("ix_student_agency_id", "student", ["agency_id"])
    op.create_index("ix_student_status", "student", ["status"])
    op.create_index("ix_student_agency_email", "student", ["agency_id", "email"])

    op.create_table(
        "application",
        _id(),
        _agency_id(),
        _fk("student_id", "student.id", "CASCADE", nullable=False),
        sa.Column("university_name", sa.String(255), nullable=False),
        sa.Column("program", sa.String(255), nullable=False),
        sa.Column("intake", sa.String(64), nullable=True),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("deadline", sa.DateTime(timezone=True), nullable=True),
        _fk("assigned_to", "app_user.id", "SET NULL"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        *_timestamps(),
        _check(
            "status",
            [
                "DRAFT",
                "PENDING",
                "SUBMITTED",
                "UNDER_REVIEW",
                "IN_PROGRESS",
                "APPROVED",
                "REJECTED",
                "WITHDRAWN",
            ],
            "application_status_check",
        ),
    )
    op.create_index("ix_application_agency_id", "application", ["agency_id"])
    op.create_index("ix_application_student_id", "application", ["student_id"])
    op.create_index("ix_application_status", "application", ["status"])
    op.create_index("ix_application_agency_deadline", "application", ["agency_id", "deadline"])

    op.create_table(
        "task",
        _id(),
        _agency_id(),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("task_type", sa.String(64), server_default="GENERAL", nullable=False),
        sa.Column("category", sa.String(64), nullable=True),
        sa.Column("priority", sa.String(16), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        _fk("assigned_to", "app_user.id", "SET NULL"),
        _fk("student_id", "student.id", "CASCADE"),
        _fk("lead_id", "lead.id", "CASCADE"),
        sa.Column("metadata", sa.JSON(), nullable=True),
        *_timestamps(),
        _check(
            "status",
            ["PENDING", "IN_PROGRESS", "COMPLETED", "CANCELLED"],
            "task_status_check",
        ),
        _check("priority", PRIORITIES, "task_priority_check"),
    )
    op.create_index("ix_task_agency_id", "task", ["agency_id"])
    op.create_index("ix_task_status", "task", ["status"])
    op.create_index("ix_task_assigned_to", "task", ["assigned_to"])
    op.create_index("ix_task_student_id", "task", ["student_id"])
    op.create_index("ix_task_lead_id", "task", ["lead_id"])
    op.create_index("ix_task_agency_status_due", "task", ["agency_id", "status", "due_date"])

    op.create_table(
        "appointment",
        _id(),
        _agency_id(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("appointment_type", sa.String(32), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("priority", sa.String(16), nullable=False),
        sa.Column("location", sa.String(255), nullable=True),
        _fk("student_id", "student.id", "CASCADE"),
        _fk("lead_id", "lead.id", "CASCADE"),
        _fk("assigned_to", "app_user.id", "SET NULL"),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        _check(
            "status",
            ["SCHEDULED", "CONFIRMED", "IN_PROGRESS", "COMPLETED", "CANCELLED", "NO_SHOW"],
            "appointment_status_check",
        ),
    )
    op.create_index("ix_appointment_agency_id", "appointment", ["agency_id"])
    op.create_index("ix_appointment_status", "appointment", ["status"])
    op.create_index("ix_appointment_student_id", "appointment", ["student_id"])
    op.create_index("ix_appointment_lead_id", "appointment", ["lead_id"])
    op.create_index("ix_appointment_agency_start", "appointment", ["agency_id", "start_time"])

    op.create_table(
        "document",
        _id(),
        _agency_id(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("document_type", sa.String(32), nullable=False),
        sa.Column("category", sa.String(64), nullable=False),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("file_path", sa.String(1024), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=False),
        sa.Column("mime_type", sa.String(255), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        _fk("student_id", "student.id", "CASCADE"),
        _fk("application_id", "application.id", "SET NULL"),
        sa.Column("metadata", sa.JSON(), nullable=True),
        *_timestamps(),
        _check("status", ["PENDING", "VERIFIED", "REJECTED"], "document_status_check"),
    )
    op.create_index("ix_document_agency_id", "document", ["agency_id"])
    op.create_index("ix_document_status", "document", ["status"])
    op.create_index("ix_document_student_id", "document", ["student_id"])
    op.create_index("ix_document_agency_expires", "document", ["agency_id", "expires_at"])

    op.create_table(
        "notification",
        _id(),
        _agency_id(),
        sa.Column("notification_type", sa.String(32), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("recipient_id", sa.String(), nullable=False),
        sa.Column("recipient_type", sa.String(16), nullable=False),
        sa.Column("channel", sa.String(16), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("priority", sa.String(16), nullable=False),
        sa.Column("data", sa.JSON(), nullable=True),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        _check("recipient_type", RECIPIENT_TYPES, "notification_recipient_type_check"),
        _check(
            "status",
            ["PENDING", "SENT", "DELIVERED", "READ", "DISMISSED", "FAILED"],
            "notification_status_check",
        ),
    )
    op.create_index("ix_notification_agency_id", "notification", ["agency_id"])
    op.create_index(
        "ix_notification_agency_recipient", "notification", ["agency_id", "recipient_id"]
    )

    op.create_table(
        "email_message",
        _id(),
        _agency_id(),
        sa.Column("to_email", sa.String(320), nullable=False),
        sa.Column("subject", sa.String(500), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("recipient_id", sa.String(), nullable=True),
        sa.Column("recipient_type", sa.String(16), nullable=True),
        sa.Column("data", sa.JSON(), nullable=True),
        *_timestamps(),
        _check("status", ["SCHEDULED", "SENT", "FAILED"], "email_message_status_check"),
    )
    op.create_index("ix_email_message_agency_id", "email_message", ["agency_id"])
    op.create_index("ix_email_message_status", "email_message", ["status"])

    op.create_table(
        "sms_message",
        _id(),
        _agency_id(),
        sa.Column("to_phone", sa.String(40), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("recipient_id", sa.String(), nullable=True),
        sa.Column("recipient_type", sa.String(16), nullable=True),
        *_timestamps(),
        _check("status", ["SCHEDULED", "SENT", "FAILED"], "sms_message_status_check"),
    )
    op.create_index("ix_sms_message_agency_id", "sms_message", ["agency_id"])
    op.create_index("ix_sms_message_status", "sms_message", ["status"])

    op.create_table(
        "campaign",
        _id(),
        _agency_id(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("campaign_type", sa.String(32), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("starts_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("ends_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        _check(
            "status", ["DRAFT", "ACTIVE", "PAUSED", "COMPLETED"], "campaign_status_check"
        ),
    )
    op.create_index("ix_campaign_agency_id", "campaign", ["agency_id"])

    op.create_table(
        "campaign_enrollment",
        _id(),
        _agency_id(),
        _fk("campaign_id", "campaign.id", "CASCADE", nullable=False),
        _fk("lead_id", "lead.id", "CASCADE"),
        _fk("student_id", "student.id", "CASCADE"),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("current_step", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("enrolled_at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        _check(
            "status",
            ["ACTIVE", "COMPLETED", "CANCELLED"],
            "campaign_enrollment_status_check",
        ),
    )
    op.create_index("ix_campaign_enrollment_agency_id", "campaign_enrollment", ["agency_id"])
    op.create_index(
        "ix_campaign_enrollment_campaign_id", "campaign_enrollment", ["campaign_id"]
    )
    op.create_index(
        "ix_campaign_enrollment_campaign_lead",
        "campaign_enrollment",
        ["campaign_id", "lead_id"],
    )
    op.create_index(
        "ix_campaign_enrollment_campaign_student",
        "campaign_enrollment",
        ["campaign_id", "student_id"],
    )

    op.create_table(
        "workflow",
        _id(),
        _agency_id(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.Column("nodes", sa.JSON(), nullable=True),
        sa.Column("edges", sa.JSON(), nullable=True),
        sa.Column(
            "execution_count", sa.Integer(), server_default=sa.text("0"), nullable=False
        ),
        sa.Column("last_executed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_workflow_agency_id", "workflow", ["agency_id"])

    op.create_table(
        "automation_trigger",
        _id(),
        _agency_id(),
        _fk("workflow_id", "workflow.id", "SET NULL"),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("trigger_type", sa.String(32), nullable=False),
        sa.Column("event_type", sa.String(64), nullable=False),
        sa.Column("conditions", sa.JSON(), nullable=False),
        sa.Column("actions", sa.JSON(), nullable=False),
        sa.Column("schedule", sa.JSON(), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.Column("priority", sa.Integer(), server_default=sa.text("50"), nullable=False),
        sa.Column("metadata", sa.JSON(), nullable=True),
        *_timestamps(),
        _check("trigger_type", TRIGGER_TYPES, "automation_trigger_type_check"),
        _check("event_type", TRIGGER_EVENT_TYPES, "automation_trigger_event_type_check"),
        sa.CheckConstraint(
            "priority >= 0 AND priority <= 100", name="automation_trigger_priority_check"
        ),
    )
    op.create_index("ix_automation_trigger_agency_id", "automation_trigger", ["agency_id"])
    op.create_index("ix_automation_trigger_workflow_id", "automation_trigger", ["workflow_id"])
    op.create_index(
        "ix_automation_trigger_dispatch",
        "automation_trigger",
        ["agency_id", "event_type", "is_active"],
    )

    op.create_table(
        "automation_execution",
        _id(),
        _agency_id(),
        _fk("trigger_id", "automation_trigger.id", "CASCADE", nullable=False),
        sa.Column("entity_type", sa.String(32), nullable=True),
        sa.Column("entity_id", sa.String(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("success_count", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("error_count", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("data", sa.JSON(), nullable=True),
        sa.Column("execution_log", sa.JSON(), nullable=True),
        sa.Column("executed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        _check(
            "status", ["RUNNING", "COMPLETED", "PARTIAL"], "automation_execution_status_check"
        ),
        _check("entity_type", ENTITY_TYPES, "automation_execution_entity_type_check"),
    )
    op.create_index(
        "ix_automation_execution_agency_id", "automation_execution", ["agency_id"]
    )
    op.create_index(
        "ix_automation_execution_trigger_id", "automation_execution", ["trigger_id"]
    )
    op.create_index(
        "ix_automation_execution_trigger_executed",
        "automation_execution",
        ["trigger_id", "executed_at"],
    )

    op.create_table(
        "scheduled_execution",
        _id(),
        _agency_id(),
        _fk("trigger_id", "automation_trigger.id", "CASCADE", nullable=False),
        sa.Column("scheduled_for", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("schedule", sa.JSON(), nullable=False),
        _fk("execution_id", "automation_execution.id", "SET NULL"),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        _check(
            "status",
            ["SCHEDULED", "RUNNING", "COMPLETED", "CANCELLED"],
            "scheduled_execution_status_check",
        ),
    )
    op.create_index("ix_scheduled_execution_agency_id", "scheduled_execution", ["agency_id"])
    op.create_index(
        "ix_scheduled_execution_trigger_id", "scheduled_execution", ["trigger_id"]
    )
    op.create_index(
        "ix_scheduled_execution_due", "scheduled_execution", ["status", "scheduled_for"]
    )

    op.create_table(
        "alert",
        _id(),
        _agency_id(),
        sa.Column("alert_type", sa.String(32), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("severity", sa.String(16), nullable=False),
        sa.Column("entity_type", sa.String(32), nullable=True),
        sa.Column("entity_id", sa.String(), nullable=True),
        sa.Column("recipient_id", sa.String(), nullable=False),
        sa.Column("recipient_type", sa.String(16), nullable=False),
        sa.Column(
            "action_required", sa.Boolean(), server_default=sa.text("false"), nullable=False
        ),
        sa.Column("action_url", sa.String(1024), nullable=True),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        *_timestamps(),
        _check(
            "alert_type",
            [
                "TASK_OVERDUE",
                "APPOINTMENT_MISSED",
                "DOCUMENT_EXPIRED",
                "DOCUMENT_EXPIRING",
                "APPLICATION_DEADLINE",
                "CAMPAIGN_INACTIVE",
            ],
            "alert_type_check",
        ),
        _check("severity", ["LOW", "MEDIUM", "HIGH", "CRITICAL"], "alert_severity_check"),
        _check("entity_type", ENTITY_TYPES, "alert_entity_type_check"),
        _check("recipient_type", RECIPIENT_TYPES, "alert_recipient_type_check"),
    )
    op.create_index("ix_alert_agency_id", "alert", ["agency_id"])
    op.create_index("ix_alert_dedupe", "alert", ["agency_id", "alert_type", "entity_id"])


def downgrade() -> None:
    """Drop the agency schema."""
    for table in (
        "alert",
        "scheduled_execution",
        "automation_execution",
        "automation_trigger",
        "workflow",
        "campaign_enrollment",
        "campaign",
        "sms_message",
        "email_message",
        "notification",
        "document",
        "appointment",
        "task",
        "application",
        "student",
        "lead",
        "app_user",
        "agency",
    ):
        op.drop_table(table)
