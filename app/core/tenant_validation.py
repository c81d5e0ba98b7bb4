"""Subdomain validation for the tenant resolver and middleware.

Shared by dependencies (get_agency) and TenantContextMiddleware so
malformed subdomains are rejected consistently before any lookup.
"""

from app.domain.exceptions import InvalidSubdomainException
from app.domain.value_objects import is_valid_subdomain


def normalize_subdomain(raw: str | None) -> str:
    """Return the lowercase subdomain or raise InvalidSubdomainException (400)."""
    value = (raw or "").strip().lower()
    if not is_valid_subdomain(value):
        raise InvalidSubdomainException(raw)
    return value
