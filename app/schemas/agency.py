"""Agency provisioning API schemas."""

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.domain.value_objects import SUBDOMAIN_MAX_LENGTH


class AgencyProvisionRequest(BaseModel):
    """Request body for POST /agencies (creates the agency and its admin user).

    The subdomain is normalized (trimmed, lowercased) before validation.
    """

    subdomain: str = Field(
        ...,
        min_length=1,
        max_length=SUBDOMAIN_MAX_LENGTH,
        pattern=r"^[a-z0-9]([a-z0-9-]*[a-z0-9])?$",
        description="Unique DNS label used in /api/{subdomain}/...",
    )
    name: str = Field(..., min_length=1, max_length=255)
    admin_email: EmailStr
    admin_first_name: str = Field(default="Admin", min_length=1, max_length=120)
    admin_last_name: str = Field(default="User", min_length=1, max_length=120)

    @field_validator("subdomain", mode="before")
    @classmethod
    def normalize_subdomain(cls, v: str) -> str:
        return v.strip().lower() if isinstance(v, str) else v


class AgencyProvisionResponse(BaseModel):
    agency_id: str
    subdomain: str
    name: str
    admin_user_id: str
    admin_email: str
