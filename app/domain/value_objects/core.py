"""Domain value objects for the agencyflow application.

Value objects are immutable types that represent domain concepts with
self-validation. They have no identity, only value.
"""

import re
from dataclasses import dataclass

from app.domain.enums import EntityType

SUBDOMAIN_MAX_LENGTH = 63
# DNS label: lowercase alphanumeric, inner hyphens allowed (e.g. acme, acme-study).
_SUBDOMAIN_RE = re.compile(r"^[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?$")


def is_valid_subdomain(value: str | None) -> bool:
    """Return True if value is a usable agency subdomain (single DNS label)."""
    if not value or len(value) > SUBDOMAIN_MAX_LENGTH:
        return False
    return bool(_SUBDOMAIN_RE.fullmatch(value))


@dataclass(frozen=True)
class Subdomain:
    """Value object for an agency subdomain.

    Subdomains are normalized to lowercase and must be a single DNS label
    of at most 63 characters.
    """

    value: str

    def __post_init__(self) -> None:
        if not is_valid_subdomain(self.value):
            raise ValueError(
                "Subdomain must be lowercase alphanumeric with optional inner hyphens "
                "(e.g., 'acme', 'acme-study'), max 63 characters"
            )

    @classmethod
    def parse(cls, raw: str) -> "Subdomain":
        """Normalize (strip, lowercase) and validate raw input."""
        return cls((raw or "").strip().lower())

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class EntityRef:
    """Typed reference to one agency record: (entity type, id).

    Replaces the free-form entityType/entityId string pair; the type is a
    closed enum so lookups are dispatched exhaustively.
    """

    entity_type: EntityType
    entity_id: str

    def __post_init__(self) -> None:
        if not isinstance(self.entity_type, EntityType):
            object.__setattr__(self, "entity_type", EntityType(self.entity_type))
        if not self.entity_id:
            raise ValueError("Entity id must be a non-empty string")

    def as_dict(self) -> dict[str, str]:
        """Serialize for execution data and log entries."""
        return {"entity_type": self.entity_type.value, "entity_id": self.entity_id}
