"""Domain layer: entities, value objects, enums, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.entities import ExecutionTally
from app.domain.enums import AgencyStatus, EntityType
from app.domain.exceptions import (
    AgencyFlowException,
    AgencyNotFoundException,
    InvalidSubdomainException,
    ResourceNotFoundException,
    ValidationException,
)
from app.domain.value_objects import EntityRef, Subdomain

__all__ = [
    # Entities
    "ExecutionTally",
    # Enums
    "AgencyStatus",
    "EntityType",
    # Exceptions
    "AgencyFlowException",
    "AgencyNotFoundException",
    "InvalidSubdomainException",
    "ResourceNotFoundException",
    "ValidationException",
    # Value objects
    "EntityRef",
    "Subdomain",
]
