"""Tenant context middleware.

Reads the agency subdomain from /api/{subdomain}/... and stores it in the
request's context variable so every log line carries it. Resolution to an
agency (400/404) happens in the get_agency dependency, not here.
"""

from typing import Callable

from app.core.tenant_context import set_subdomain
from app.domain.value_objects import is_valid_subdomain

_API_PREFIX = "/api/"
# First path segments under /api/ that are not agency subdomains.
_RESERVED_SEGMENTS = frozenset({"health", "agencies", "docs", "openapi.json"})


def subdomain_from_path(path: str) -> str | None:
    """Return the subdomain segment of an agency route, or None."""
    if not path.startswith(_API_PREFIX):
        return None
    segment = path[len(_API_PREFIX) :].split("/", 1)[0].lower()
    if segment in _RESERVED_SEGMENTS or not is_valid_subdomain(segment):
        return None
    return segment


def TenantContextMiddleware(app: Callable) -> Callable:
    """Set the current subdomain for the duration of each HTTP request. Raw ASGI."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        set_subdomain(subdomain_from_path(scope.get("path", "")))
        try:
            await app(scope, receive, send)
        finally:
            set_subdomain(None)

    return asgi_app
