"""Correlation ID middleware.

Propagates X-Correlation-ID across services: forwarded from the client when
present, otherwise the request ID, otherwise a fresh UUID. Raw ASGI.
"""

import uuid
from typing import Callable

from app.middleware._asgi import get_header, with_header


def CorrelationIDMiddleware(
    app: Callable, header_name: str = "X-Correlation-ID"
) -> Callable:
    """Add or forward the correlation id on scope state and on the response."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        correlation_id = (
            get_header(scope, header_name)
            or scope.get("state", {}).get("request_id")
            or str(uuid.uuid4())
        )
        scope.setdefault("state", {})["correlation_id"] = correlation_id

        async def send_wrapper(message: dict) -> None:
            if message["type"] == "http.response.start":
                with_header(message, header_name, correlation_id)
            await send(message)

        await app(scope, receive, send_wrapper)

    return asgi_app
