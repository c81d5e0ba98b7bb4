"""Span helpers for automation, alert and workflow services."""

import inspect
from collections.abc import Awaitable, Callable
from enum import Enum
from functools import wraps
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

# Argument names recorded on spans. Event payloads, rendered templates and
# recipient contact details never are.
SPAN_ARGUMENTS = frozenset({
    "agency_id",
    "event_type",
    "trigger_id",
    "workflow_id",
    "entity_ref",
    "check",
})


def _attribute_value(value: Any) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    if hasattr(value, "as_dict"):
        return ":".join(value.as_dict().values())
    return str(value)


def span_arguments(signature: inspect.Signature, args: tuple, kwargs: dict) -> dict[str, str]:
    """Allowlisted call arguments (positional or keyword) as span attributes."""
    try:
        bound = signature.bind_partial(*args, **kwargs)
    except TypeError:
        return {}
    return {
        f"arg.{name}": _attribute_value(value)
        for name, value in bound.arguments.items()
        if name in SPAN_ARGUMENTS and value is not None
    }


def traced(operation_name: str) -> Callable:
    """Run an async service method inside a span named operation_name.

    Exceptions mark the span as failed and are re-raised unchanged.
    """

    def decorator(func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
        tracer = trace.get_tracer(func.__module__)
        signature = inspect.signature(func)

        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            with tracer.start_as_current_span(
                operation_name,
                attributes=span_arguments(signature, args, kwargs),
                record_exception=False,
                set_status_on_exception=False,
            ) as span:
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    span.set_status(Status(StatusCode.ERROR, type(e).__name__))
                    span.record_exception(e)
                    raise
                span.set_status(Status(StatusCode.OK))
                return result

        return wrapper

    return decorator


def add_span_attributes(**attributes: str | int | float | bool) -> None:
    """Attach result counters (claimed, created, ...) to the current span."""
    span = trace.get_current_span()
    if span.is_recording():
        span.set_attributes(attributes)
