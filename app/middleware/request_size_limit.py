"""Request body size limit middleware.

Rejects bodies larger than max_request_body_size with 413. A declared
Content-Length is checked up front; bodies without one are buffered up to
the limit and replayed to the app. Raw ASGI.
"""

from typing import Callable

from app.middleware._asgi import get_header, send_error


async def _too_large(send: Callable, max_bytes: int, actual: int) -> None:
    await send_error(
        send,
        413,
        "PAYLOAD_TOO_LARGE",
        f"Request body must be at most {max_bytes} bytes",
        {"max_bytes": max_bytes, "content_length": actual},
    )


def RequestSizeLimitMiddleware(app: Callable, max_bytes: int) -> Callable:
    """Reject requests whose body exceeds max_bytes."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http" or scope.get("method") in ("GET", "HEAD", "OPTIONS"):
            await app(scope, receive, send)
            return

        declared = get_header(scope, "content-length")
        if declared is not None and declared.isdigit():
            if int(declared) > max_bytes:
                await _too_large(send, max_bytes, int(declared))
                return
            await app(scope, receive, send)
            return

        chunks: list[bytes] = []
        total = 0
        while True:
            message = await receive()
            if message["type"] != "http.request":
                # Client went away before sending the whole body.
                await app(scope, receive, send)
                return
            body = message.get("body", b"")
            total += len(body)
            if total > max_bytes:
                await _too_large(send, max_bytes, total)
                return
            chunks.append(body)
            if not message.get("more_body", False):
                break

        pending = list(chunks)

        async def replay() -> dict:
            if pending:
                return {
                    "type": "http.request",
                    "body": pending.pop(0),
                    "more_body": bool(pending),
                }
            return await receive()

        await app(scope, replay, send)

    return asgi_app
