"""Service interfaces (ports) for the application layer.

Protocols define contracts for application services (DIP).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from app.domain.value_objects import EntityRef


class IAutomationEngine(Protocol):
    """Protocol for trigger dispatch and execution."""

    async def handle_trigger_event(
        self,
        agency_id: str,
        event_type: str,
        entity_ref: EntityRef,
        data: Mapping[str, Any] | None = None,
    ) -> list[Any]:
        """Run every matching active trigger for the event; return execution records."""

    async def execute_trigger(
        self,
        trigger: Any,
        entity_ref: EntityRef | None,
        data: Mapping[str, Any] | None = None,
        *,
        entity: Any | None = None,
    ) -> Any:
        """Execute one trigger's actions (conditions already checked); return the execution record."""


class ITemplateRenderer(Protocol):
    """Protocol for personalizing action text."""

    def render(self, template: str, context: Mapping[str, Any]) -> str:
        """Substitute {{key}} placeholders; missing keys render as ''."""


class ICacheService(Protocol):
    """Protocol for cache (get/set/delete)."""

    def is_available(self) -> bool:
        """Return True if the cache backend is reachable."""

    async def get(self, key: str) -> Any:
        """Return cached value or None."""

    async def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        """Store value with TTL in seconds."""

    async def delete(self, key: str) -> bool:
        """Remove key from cache."""
