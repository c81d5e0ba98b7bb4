"""DTOs for alert creation and sweeps (no dependency on ORM)."""

from dataclasses import dataclass, field
from typing import Any

from app.domain.enums import AlertCheck, AlertSeverity, AlertType, RecipientType
from app.domain.value_objects import EntityRef


@dataclass(frozen=True)
class AlertDraft:
    """Input for creating an alert (manual or sweep-generated)."""

    alert_type: AlertType
    title: str
    message: str
    severity: AlertSeverity
    recipient_id: str
    recipient_type: RecipientType
    entity_ref: EntityRef | None = None
    action_required: bool = False
    action_url: str | None = None
    metadata: dict[str, Any] | None = None


@dataclass
class SweepResult:
    """Outcome of one alert sweep (filled in while the sweep runs)."""

    check: AlertCheck
    scanned: int
    created: int
    alert_ids: list[str] = field(default_factory=list)
