"""Agency provisioning: new agency + its first admin user."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from app.application.interfaces.repositories import IAgencyRepository, IUserRepository
from app.core.tenant_validation import normalize_subdomain
from app.domain.enums import UserRole
from app.domain.exceptions import AgencyAlreadyExistsException
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class AgencyProvisioningResult:
    """Result of provisioning (new agency + admin user)."""

    agency_id: str
    subdomain: str
    name: str
    admin_user_id: str
    admin_email: str


class AgencyProvisioningService:
    """Creates an agency and its admin user in the caller's transaction."""

    def __init__(
        self,
        agency_repo: IAgencyRepository,
        user_repo: IUserRepository,
        user_factory: Callable[..., Any],
    ) -> None:
        self.agency_repo = agency_repo
        self.user_repo = user_repo
        # Builds the ORM user row; injected so this layer stays ORM-free.
        self._user_factory = user_factory

    async def provision(
        self,
        subdomain: str,
        name: str,
        admin_email: str,
        admin_first_name: str = "Admin",
        admin_last_name: str = "User",
    ) -> AgencyProvisioningResult:
        """Create agency + ADMIN user. Raises AgencyAlreadyExistsException when subdomain is taken.

        Caller must run this within one transaction (get_db_transactional) so a
        failed user insert does not leave an agency without an admin.
        """
        normalized = normalize_subdomain(subdomain)
        existing = await self.agency_repo.get_by_subdomain(normalized)
        if existing:
            raise AgencyAlreadyExistsException(normalized)

        agency = await self.agency_repo.create_agency(
            subdomain=normalized, name=name, email=admin_email
        )
        admin = await self.user_repo.create_user(
            self._user_factory(
                agency_id=agency.id,
                email=admin_email,
                first_name=admin_first_name,
                last_name=admin_last_name,
                role=UserRole.ADMIN.value,
                is_active=True,
            )
        )
        logger.info("Provisioned agency %s (subdomain=%s)", agency.id, normalized)
        return AgencyProvisioningResult(
            agency_id=agency.id,
            subdomain=normalized,
            name=agency.name,
            admin_user_id=admin.id,
            admin_email=admin_email,
        )
