"""Application use cases: one entry point per workflow."""

from app.application.use_cases.automation import (
    EntityChange,
    EntityEventDispatcher,
    events_for_change,
)

__all__ = [
    "EntityChange",
    "EntityEventDispatcher",
    "events_for_change",
]
