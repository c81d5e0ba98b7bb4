"""Automation use cases: dispatch entity lifecycle events to triggers."""

from app.application.use_cases.automation.dispatch_entity_event import (
    EntityChange,
    EntityEventDispatcher,
    events_for_change,
)

__all__ = [
    "EntityChange",
    "EntityEventDispatcher",
    "events_for_change",
]
