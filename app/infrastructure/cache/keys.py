"""Cache key builders for agency resolution.

Key components must not contain CACHE_KEY_SEP; subdomains are DNS labels
and cuids are alphanumeric, so a violation means a caller bug.
"""

from app.core.constants import CACHE_KEY_SEP, CACHE_PREFIX_AGENCY


def _check_component(value: str, name: str) -> None:
    if CACHE_KEY_SEP in value:
        raise ValueError(
            f"Cache key component {name!r} must not contain separator {CACHE_KEY_SEP!r}"
        )


def agency_subdomain_key(subdomain: str) -> str:
    """Cache key for the agency resolved from a subdomain."""
    _check_component(subdomain, "subdomain")
    return f"{CACHE_PREFIX_AGENCY}{CACHE_KEY_SEP}subdomain{CACHE_KEY_SEP}{subdomain}"
