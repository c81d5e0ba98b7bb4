"""Application layer: interfaces, services, use cases.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (repositories, engine, renderer, cache).
"""

from app.application.interfaces import (
    IAgencyRepository,
    IAutomationEngine,
    ICacheService,
    IEntityRepository,
    ITemplateRenderer,
    IUserRepository,
)
from app.application.services import AgencyProvisioningService
from app.application.use_cases import EntityEventDispatcher

__all__ = [
    "AgencyProvisioningService",
    "EntityEventDispatcher",
    "IAgencyRepository",
    "IAutomationEngine",
    "ICacheService",
    "IEntityRepository",
    "ITemplateRenderer",
    "IUserRepository",
]
