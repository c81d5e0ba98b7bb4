"""DTOs for agency resolution and provisioning (no dependency on ORM)."""

from dataclasses import dataclass

from app.domain.enums import AgencyStatus


@dataclass(frozen=True)
class AgencyResult:
    """Agency read-model returned by the resolver and provisioning."""

    id: str
    subdomain: str
    name: str
    status: AgencyStatus
    email: str | None = None

    @property
    def is_active(self) -> bool:
        return self.status == AgencyStatus.ACTIVE
