"""Automation execution tally.

Accumulates per-action outcomes for one trigger run and derives the final
execution status from them.
"""

from dataclasses import dataclass, field
from typing import Any

from app.shared.enums import ActionOutcome, ExecutionStatus


@dataclass
class ExecutionTally:
    """Success/error counters plus the ordered execution log of one run.

    Skipped actions (missing recipient, campaign already joined) count as
    successes: they are logged, but they did not fail.
    """

    success_count: int = 0
    error_count: int = 0
    log: list[dict[str, Any]] = field(default_factory=list)

    def record_success(self, action_type: str, **info: Any) -> None:
        self.success_count += 1
        self.log.append(
            {"action": action_type, "status": ActionOutcome.SUCCESS.value, **info}
        )

    def record_skip(self, action_type: str, reason: str) -> None:
        self.success_count += 1
        self.log.append(
            {"action": action_type, "status": ActionOutcome.SKIPPED.value, "reason": reason}
        )

    def record_failure(self, action_type: str, error: str) -> None:
        self.error_count += 1
        self.log.append(
            {"action": action_type, "status": ActionOutcome.FAILED.value, "error": error}
        )

    @property
    def total(self) -> int:
        return self.success_count + self.error_count

    @property
    def status(self) -> ExecutionStatus:
        """PARTIAL when any action failed (including all of them), else COMPLETED."""
        if self.error_count > 0:
            return ExecutionStatus.PARTIAL
        return ExecutionStatus.COMPLETED
