"""Application DTOs (no ORM dependency)."""

from app.application.dtos.agency import AgencyResult
from app.application.dtos.alert import AlertDraft, SweepResult

__all__ = [
    "AgencyResult",
    "AlertDraft",
    "SweepResult",
]
