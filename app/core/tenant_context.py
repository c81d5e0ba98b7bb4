"""Tenant context for request-scoped logging.

Middleware sets the current agency subdomain in this context variable;
the logging filter in app.shared.telemetry.logging stamps it on every
record emitted while the request is served.
"""

from contextvars import ContextVar

# Current agency subdomain for the request (set by middleware, read by logging).
current_subdomain: ContextVar[str | None] = ContextVar(
    "current_subdomain", default=None
)


def set_subdomain(subdomain: str | None) -> None:
    """Set the current subdomain for this context (e.g. request)."""
    current_subdomain.set(subdomain)


def get_subdomain() -> str | None:
    """Return the current subdomain if set."""
    return current_subdomain.get()
