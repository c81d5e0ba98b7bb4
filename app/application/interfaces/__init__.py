"""Application interfaces (ports): repository and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from app.infrastructure or app.api.
"""

from app.application.interfaces.repositories import (
    IAgencyRepository,
    IEntityRepository,
    IUserRepository,
)
from app.application.interfaces.services import (
    IAutomationEngine,
    ICacheService,
    ITemplateRenderer,
)

__all__ = [
    "IAgencyRepository",
    "IAutomationEngine",
    "ICacheService",
    "IEntityRepository",
    "ITemplateRenderer",
    "IUserRepository",
]
