"""Infrastructure implementations of application service interfaces."""

from app.infrastructure.services.action_handlers import ActionHandlers
from app.infrastructure.services.alert_service import AlertService
from app.infrastructure.services.automation_engine import AutomationEngine
from app.infrastructure.services.scheduled_run_service import ScheduledRunService
from app.infrastructure.services.template_renderer import TemplateRenderer
from app.infrastructure.services.trigger_service import TriggerService
from app.infrastructure.services.workflow_service import WorkflowService

__all__ = [
    "ActionHandlers",
    "AlertService",
    "AutomationEngine",
    "ScheduledRunService",
    "TemplateRenderer",
    "TriggerService",
    "WorkflowService",
]
