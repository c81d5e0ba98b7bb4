"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
ORM row types are referenced as Any; application code only reads attributes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from app.application.dtos.agency import AgencyResult
    from app.domain.value_objects import EntityRef


class IAgencyRepository(Protocol):
    """Protocol for agency resolution and provisioning."""

    async def get_by_subdomain(self, subdomain: str) -> AgencyResult | None:
        """Return the agency for subdomain (any status), or None."""

    async def create_agency(
        self, subdomain: str, name: str, email: str | None = None
    ) -> AgencyResult:
        """Create an ACTIVE agency; raise AgencyAlreadyExistsException when taken."""


class IUserRepository(Protocol):
    """Protocol for agency staff users."""

    async def create_user(self, user: Any) -> Any:
        """Persist a staff user; raise DuplicateRecordException on duplicate email."""

    async def get_by_id_and_agency(self, entity_id: str, agency_id: str) -> Any | None:
        """Return user in agency or None."""


class IEntityRepository(Protocol):
    """Protocol for loading automation target rows by EntityRef."""

    async def load(self, agency_id: str, ref: EntityRef) -> Any | None:
        """Return the agency-owned row for ref, or None."""
