"""Entity lifecycle -> trigger event dispatch.

Routes that create, update or delete agency records call the dispatcher
after their own write. Automation failures never fail that write: runtime
errors are logged and swallowed, programming errors propagate.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from contextlib import AbstractAsyncContextManager
from enum import Enum
from typing import TYPE_CHECKING, Any

from app.domain.enums import (
    AppointmentStatus,
    DocumentStatus,
    EntityType,
    TaskStatus,
    TriggerEventType,
)
from app.domain.value_objects import EntityRef
from app.shared.telemetry.logging import get_logger

if TYPE_CHECKING:
    from app.application.interfaces.services import IAutomationEngine

logger = get_logger(__name__)


class EntityChange(str, Enum):
    CREATED = "CREATED"
    UPDATED = "UPDATED"
    DELETED = "DELETED"


_T = TriggerEventType

_PLAIN_EVENTS: dict[tuple[EntityType, EntityChange], TriggerEventType] = {
    (EntityType.LEAD, EntityChange.CREATED): _T.LEAD_CREATED,
    (EntityType.LEAD, EntityChange.UPDATED): _T.LEAD_UPDATED,
    (EntityType.LEAD, EntityChange.DELETED): _T.LEAD_DELETED,
    (EntityType.STUDENT, EntityChange.CREATED): _T.STUDENT_CREATED,
    (EntityType.STUDENT, EntityChange.UPDATED): _T.STUDENT_UPDATED,
    (EntityType.STUDENT, EntityChange.DELETED): _T.STUDENT_DELETED,
    (EntityType.APPLICATION, EntityChange.CREATED): _T.APPLICATION_CREATED,
    (EntityType.APPLICATION, EntityChange.UPDATED): _T.APPLICATION_UPDATED,
    (EntityType.APPLICATION, EntityChange.DELETED): _T.APPLICATION_DELETED,
    (EntityType.APPOINTMENT, EntityChange.CREATED): _T.APPOINTMENT_CREATED,
    (EntityType.APPOINTMENT, EntityChange.UPDATED): _T.APPOINTMENT_UPDATED,
    (EntityType.TASK, EntityChange.CREATED): _T.TASK_CREATED,
    (EntityType.DOCUMENT, EntityChange.CREATED): _T.DOCUMENT_UPLOADED,
}

# Status transitions that raise their own event on update.
_STATUS_EVENTS: dict[tuple[EntityType, str], TriggerEventType] = {
    (EntityType.APPOINTMENT, AppointmentStatus.CANCELLED.value): _T.APPOINTMENT_CANCELLED,
    (EntityType.TASK, TaskStatus.COMPLETED.value): _T.TASK_COMPLETED,
    (EntityType.DOCUMENT, DocumentStatus.VERIFIED.value): _T.DOCUMENT_VERIFIED,
}


def events_for_change(
    entity_type: EntityType,
    change: EntityChange,
    *,
    previous_status: str | None = None,
    status: str | None = None,
) -> list[TriggerEventType]:
    """Events raised by one write, in dispatch order.

    A status event fires only on the update that moves the record into
    that status, not on later updates that leave it there.
    """
    events: list[TriggerEventType] = []
    plain = _PLAIN_EVENTS.get((entity_type, change))
    if plain is not None:
        events.append(plain)
    if change is EntityChange.UPDATED and status and status != previous_status:
        transition = _STATUS_EVENTS.get((entity_type, status))
        if transition is not None:
            events.append(transition)
    return events


class EntityEventDispatcher:
    """Dispatches trigger events for entity writes with failure isolation."""

    def __init__(
        self,
        engine_provider: Callable[[], IAutomationEngine | None],
        isolation: Callable[[], AbstractAsyncContextManager[Any]] | None = None,
    ) -> None:
        """
        Args:
            engine_provider: Returns the automation engine (resolved lazily).
            isolation: Optional context manager factory (e.g. a savepoint) wrapped
                around each dispatch so a failed dispatch leaves the caller's
                transaction usable.
        """
        self._engine_provider = engine_provider
        self._isolation = isolation

    async def dispatch(
        self,
        agency_id: str,
        event_type: TriggerEventType,
        entity_ref: EntityRef,
        data: Mapping[str, Any] | None = None,
    ) -> list[Any]:
        """Run matching triggers for one event; return execution records ([] on failure)."""
        engine = self._engine_provider()
        if engine is None:
            return []
        try:
            if self._isolation is None:
                return await engine.handle_trigger_event(
                    agency_id, event_type.value, entity_ref, data
                )
            async with self._isolation():
                return await engine.handle_trigger_event(
                    agency_id, event_type.value, entity_ref, data
                )
        except (AssertionError, AttributeError, IndexError, KeyError, NameError, TypeError):
            raise
        except Exception:
            logger.exception(
                "Automation dispatch failed for %s on %s %s",
                event_type.value,
                entity_ref.entity_type.value,
                entity_ref.entity_id,
            )
            return []

    async def dispatch_change(
        self,
        agency_id: str,
        entity_ref: EntityRef,
        change: EntityChange,
        *,
        previous_status: str | None = None,
        status: str | None = None,
        data: Mapping[str, Any] | None = None,
    ) -> list[Any]:
        """Dispatch every event a create/update/delete of entity_ref raises."""
        executions: list[Any] = []
        for event_type in events_for_change(
            entity_ref.entity_type,
            change,
            previous_status=previous_status,
            status=status,
        ):
            executions.extend(
                await self.dispatch(agency_id, event_type, entity_ref, data)
            )
        return executions
