"""Domain value objects and shared value types."""

from app.domain.value_objects.core import (
    SUBDOMAIN_MAX_LENGTH,
    EntityRef,
    Subdomain,
    is_valid_subdomain,
)

__all__ = [
    "EntityRef",
    "SUBDOMAIN_MAX_LENGTH",
    "Subdomain",
    "is_valid_subdomain",
]
