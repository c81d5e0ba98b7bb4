"""Application services: condition evaluation, scheduling, agency provisioning."""

from app.application.services.agency_provisioning_service import (
    AgencyProvisioningResult,
    AgencyProvisioningService,
)
from app.application.services.condition_evaluator import (
    evaluate_condition,
    evaluate_conditions,
    evaluate_operator,
)
from app.application.services.schedule_calculator import interval_delta, next_run_at

__all__ = [
    "AgencyProvisioningResult",
    "AgencyProvisioningService",
    "evaluate_condition",
    "evaluate_conditions",
    "evaluate_operator",
    "interval_delta",
    "next_run_at",
]
