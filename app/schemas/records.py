"""Request/response schemas for agency records.

Create and update models store enum members as plain values so they can
be assigned straight onto ORM rows. Update models are partial: only the
fields a client sends are applied.
"""

from datetime import date, datetime
from typing import Any, ClassVar, Self

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from app.domain.enums import (
    ApplicationStatus,
    AppointmentStatus,
    CampaignStatus,
    DocumentStatus,
    LeadStatus,
    Priority,
    RecipientType,
    StudentStatus,
    TaskStatus,
    UserRole,
)


class _Write(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    # Columns that cannot be cleared by sending null on an update.
    _not_null: ClassVar[frozenset[str]] = frozenset()
    # Partial bodies apply only the fields the client sent.
    _partial: ClassVar[bool] = True

    @model_validator(mode="after")
    def reject_null_required(self) -> Self:
        cleared = sorted(
            name
            for name in self.model_fields_set & self._not_null
            if getattr(self, name) is None
        )
        if cleared:
            raise ValueError(f"Fields cannot be null: {', '.join(cleared)}")
        return self

    def changes(self) -> dict[str, Any]:
        """Fields as ORM column values ('metadata' maps to extra_data).

        Updates return only sent fields; creates include defaults.
        """
        values = self.model_dump(exclude_unset=self._partial)
        if "metadata" in values:
            values["extra_data"] = values.pop("metadata")
        return values


class _Create(_Write):
    _partial: ClassVar[bool] = False


class _Record(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    agency_id: str
    created_at: datetime
    updated_at: datetime


# ---- Leads ----


class LeadCreate(_Create):
    first_name: str = Field(..., min_length=1, max_length=120)
    last_name: str = Field(..., min_length=1, max_length=120)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=40)
    source: str | None = Field(default=None, max_length=64)
    status: LeadStatus = LeadStatus.NEW
    score: int | None = Field(default=None, ge=0, le=100)
    assigned_to: str | None = None
    notes: str | None = None
    metadata: dict[str, Any] | None = None


class LeadUpdate(_Write):
    _not_null: ClassVar[frozenset[str]] = frozenset({"first_name", "last_name", "status"})

    first_name: str | None = Field(default=None, min_length=1, max_length=120)
    last_name: str | None = Field(default=None, min_length=1, max_length=120)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=40)
    source: str | None = Field(default=None, max_length=64)
    status: LeadStatus | None = None
    score: int | None = Field(default=None, ge=0, le=100)
    assigned_to: str | None = None
    notes: str | None = None
    metadata: dict[str, Any] | None = None


class LeadResponse(_Record):
    first_name: str
    last_name: str
    email: str | None
    phone: str | None
    source: str | None
    status: LeadStatus
    score: int | None
    assigned_to: str | None
    notes: str | None
    metadata: dict[str, Any] | None = Field(default=None, validation_alias="extra_data")


# ---- Students ----


class StudentCreate(_Create):
    first_name: str = Field(..., min_length=1, max_length=120)
    last_name: str = Field(..., min_length=1, max_length=120)
    email: EmailStr
    phone: str | None = Field(default=None, max_length=40)
    date_of_birth: date | None = None
    nationality: str | None = Field(default=None, max_length=80)
    status: StudentStatus = StudentStatus.PROSPECT
    stage: str | None = Field(default=None, max_length=64)
    gpa: float | None = Field(default=None, ge=0)
    budget: float | None = Field(default=None, ge=0)
    preferred_countries: list[str] | None = None
    lead_id: str | None = None
    assigned_to: str | None = None
    notes: str | None = None
    metadata: dict[str, Any] | None = None


class StudentUpdate(_Write):
    _not_null: ClassVar[frozenset[str]] = frozenset(
        {"first_name", "last_name", "email", "status"}
    )

    first_name: str | None = Field(default=None, min_length=1, max_length=120)
    last_name: str | None = Field(default=None, min_length=1, max_length=120)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=40)
    date_of_birth: date | None = None
    nationality: str | None = Field(default=None, max_length=80)
    status: StudentStatus | None = None
    stage: str | None = Field(default=None, max_length=64)
    gpa: float | None = Field(default=None, ge=0)
    budget: float | None = Field(default=None, ge=0)
    preferred_countries: list[str] | None = None
    assigned_to: str | None = None
    notes: str | None = None
    metadata: dict[str, Any] | None = None


class StudentResponse(_Record):
    first_name: str
    last_name: str
    email: str
    phone: str | None
    date_of_birth: date | None
    nationality: str | None
    status: StudentStatus
    stage: str | None
    gpa: float | None
    budget: float | None
    preferred_countries: list[str] | None
    lead_id: str | None
    assigned_to: str | None
    notes: str | None
    metadata: dict[str, Any] | None = Field(default=None, validation_alias="extra_data")


# ---- Applications ----


class ApplicationCreate(_Create):
    student_id: str = Field(..., min_length=1)
    university_name: str = Field(..., min_length=1, max_length=255)
    program: str = Field(..., min_length=1, max_length=255)
    intake: str | None = Field(default=None, max_length=64)
    status: ApplicationStatus = ApplicationStatus.DRAFT
    deadline: datetime | None = None
    assigned_to: str | None = None
    notes: str | None = None
    metadata: dict[str, Any] | None = None


class ApplicationUpdate(_Write):
    _not_null: ClassVar[frozenset[str]] = frozenset({"university_name", "program", "status"})

    university_name: str | None = Field(default=None, min_length=1, max_length=255)
    program: str | None = Field(default=None, min_length=1, max_length=255)
    intake: str | None = Field(default=None, max_length=64)
    status: ApplicationStatus | None = None
    deadline: datetime | None = None
    assigned_to: str | None = None
    notes: str | None = None
    metadata: dict[str, Any] | None = None


class ApplicationResponse(_Record):
    student_id: str
    university_name: str
    program: str
    intake: str | None
    status: ApplicationStatus
    deadline: datetime | None
    assigned_to: str | None
    notes: str | None
    metadata: dict[str, Any] | None = Field(default=None, validation_alias="extra_data")


# ---- Tasks ----


class TaskCreate(_Create):
    title: str = Field(..., min_length=1, max_length=500)
    description: str | None = None
    task_type: str = Field(default="GENERAL", max_length=64)
    category: str | None = Field(default=None, max_length=64)
    priority: Priority = Priority.MEDIUM
    status: TaskStatus = TaskStatus.PENDING
    due_date: datetime | None = None
    assigned_to: str | None = None
    student_id: str | None = None
    lead_id: str | None = None
    metadata: dict[str, Any] | None = None


class TaskUpdate(_Write):
    _not_null: ClassVar[frozenset[str]] = frozenset({"title", "priority", "status"})

    title: str | None = Field(default=None, min_length=1, max_length=500)
    description: str | None = None
    category: str | None = Field(default=None, max_length=64)
    priority: Priority | None = None
    status: TaskStatus | None = None
    due_date: datetime | None = None
    assigned_to: str | None = None
    metadata: dict[str, Any] | None = None


class TaskResponse(_Record):
    title: str
    description: str | None
    task_type: str
    category: str | None
    priority: Priority
    status: TaskStatus
    due_date: datetime | None
    completed_at: datetime | None
    assigned_to: str | None
    student_id: str | None
    lead_id: str | None
    metadata: dict[str, Any] | None = Field(default=None, validation_alias="extra_data")


# ---- Appointments ----


class AppointmentCreate(_Create):
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    appointment_type: str = Field(default="CONSULTATION", max_length=32)
    start_time: datetime
    end_time: datetime
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    priority: Priority = Priority.MEDIUM
    location: str | None = Field(default=None, max_length=255)
    student_id: str | None = None
    lead_id: str | None = None
    assigned_to: str | None = None
    notes: str | None = None


class AppointmentUpdate(_Write):
    _not_null: ClassVar[frozenset[str]] = frozenset(
        {"title", "start_time", "end_time", "status", "priority"}
    )

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    status: AppointmentStatus | None = None
    priority: Priority | None = None
    location: str | None = Field(default=None, max_length=255)
    assigned_to: str | None = None
    notes: str | None = None


class AppointmentResponse(_Record):
    title: str
    description: str | None
    appointment_type: str
    start_time: datetime
    end_time: datetime
    status: AppointmentStatus
    priority: Priority
    location: str | None
    student_id: str | None
    lead_id: str | None
    assigned_to: str | None
    notes: str | None


# ---- Documents ----


class DocumentCreate(_Create):
    """Document metadata; the file itself is uploaded to external storage by the client."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    document_type: str = Field(..., min_length=1, max_length=32)
    category: str = Field(..., min_length=1, max_length=64)
    file_name: str = Field(..., min_length=1, max_length=255)
    file_path: str = Field(..., min_length=1, max_length=1024)
    file_size: int = Field(..., ge=0)
    mime_type: str = Field(..., min_length=1, max_length=255)
    expires_at: datetime | None = None
    student_id: str | None = None
    application_id: str | None = None
    metadata: dict[str, Any] | None = None


class DocumentUpdate(_Write):
    _not_null: ClassVar[frozenset[str]] = frozenset({"name", "category", "status"})

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    category: str | None = Field(default=None, min_length=1, max_length=64)
    status: DocumentStatus | None = None
    expires_at: datetime | None = None
    metadata: dict[str, Any] | None = None


class DocumentResponse(_Record):
    name: str
    description: str | None
    document_type: str
    category: str
    file_name: str
    file_path: str
    file_size: int
    mime_type: str
    status: DocumentStatus
    expires_at: datetime | None
    verified_at: datetime | None
    student_id: str | None
    application_id: str | None
    metadata: dict[str, Any] | None = Field(default=None, validation_alias="extra_data")


# ---- Users, campaigns, notifications ----


class UserCreate(_Create):
    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=120)
    last_name: str = Field(..., min_length=1, max_length=120)
    phone: str | None = Field(default=None, max_length=40)
    role: UserRole = UserRole.STAFF


class UserResponse(_Record):
    email: str
    first_name: str
    last_name: str
    phone: str | None
    role: UserRole
    is_active: bool


class CampaignCreate(_Create):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    campaign_type: str = Field(default="EMAIL", max_length=32)
    status: CampaignStatus = CampaignStatus.DRAFT
    starts_at: datetime | None = None
    ends_at: datetime | None = None


class CampaignResponse(_Record):
    name: str
    description: str | None
    campaign_type: str
    status: CampaignStatus
    starts_at: datetime | None
    ends_at: datetime | None


class NotificationResponse(_Record):
    notification_type: str
    title: str
    message: str
    recipient_id: str
    recipient_type: RecipientType
    channel: str
    status: str
    priority: Priority
    data: dict[str, Any] | None
    read_at: datetime | None
