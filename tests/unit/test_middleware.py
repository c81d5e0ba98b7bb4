"""Raw ASGI middleware: subdomain context, body size limit, subdomain rules."""

import json

import pytest

from app.core.tenant_context import get_subdomain
from app.core.tenant_validation import normalize_subdomain
from app.domain.exceptions import InvalidSubdomainException
from app.domain.value_objects import Subdomain, is_valid_subdomain
from app.middleware import RequestSizeLimitMiddleware, TenantContextMiddleware
from app.middleware.tenant_context import subdomain_from_path


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("/api/acme/leads", "acme"),
        ("/api/Acme-Study/automation/triggers", "acme-study"),
        ("/api/acme", "acme"),
        ("/api/health", None),
        ("/api/agencies", None),
        ("/api/bad_sub/leads", None),
        ("/docs", None),
        ("/", None),
    ],
)
def test_subdomain_from_path(path: str, expected) -> None:
    assert subdomain_from_path(path) == expected


@pytest.mark.parametrize(
    ("value", "valid"),
    [
        ("acme", True),
        ("acme-study", True),
        ("a1", True),
        ("-acme", False),
        ("acme-", False),
        ("ac_me", False),
        ("ACME", False),
        ("a" * 63, True),
        ("a" * 64, False),
        ("", False),
    ],
)
def test_is_valid_subdomain(value: str, valid: bool) -> None:
    assert is_valid_subdomain(value) is valid


def test_normalize_subdomain() -> None:
    assert normalize_subdomain("  Acme ") == "acme"
    assert str(Subdomain.parse("Acme")) == "acme"
    with pytest.raises(InvalidSubdomainException):
        normalize_subdomain("bad_sub")
    with pytest.raises(InvalidSubdomainException):
        normalize_subdomain(None)


async def test_tenant_context_set_during_request_and_cleared_after() -> None:
    seen: list[str | None] = []

    async def inner(scope, receive, send) -> None:
        seen.append(get_subdomain())

    middleware = TenantContextMiddleware(inner)
    await middleware({"type": "http", "path": "/api/acme/leads"}, None, None)

    assert seen == ["acme"]
    assert get_subdomain() is None


async def _call(app, body: bytes, headers: list[tuple[bytes, bytes]]):
    sent: list[dict] = []
    messages = [{"type": "http.request", "body": body, "more_body": False}]

    async def receive() -> dict:
        return messages.pop(0)

    async def send(message: dict) -> None:
        sent.append(message)

    scope = {"type": "http", "method": "POST", "path": "/api/acme/leads", "headers": headers}
    await app(scope, receive, send)
    return sent


async def test_request_size_limit_rejects_declared_length() -> None:
    async def inner(scope, receive, send) -> None:
        raise AssertionError("inner app must not run")

    app = RequestSizeLimitMiddleware(inner, max_bytes=10)
    sent = await _call(app, b"x" * 20, [(b"content-length", b"20")])

    assert sent[0]["status"] == 413
    assert json.loads(sent[1]["body"])["error"] == "PAYLOAD_TOO_LARGE"


async def test_request_size_limit_replays_small_chunked_body() -> None:
    received: list[bytes] = []

    async def inner(scope, receive, send) -> None:
        message = await receive()
        received.append(message["body"])

    app = RequestSizeLimitMiddleware(inner, max_bytes=10)
    await _call(app, b"hello", [])

    assert received == [b"hello"]
