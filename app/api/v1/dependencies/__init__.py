"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for agency resolution, repositories and
services. Routes depend only on these, not on infrastructure directly.
"""

from app.api.v1.dependencies.alert import (
    build_alert_service,
    get_alert_repo,
    get_alert_service,
)
from app.api.v1.dependencies.automation import (
    build_automation_engine,
    get_automation_engine,
    get_event_dispatcher,
    get_scheduled_run_service,
    get_trigger_service,
    get_trigger_service_for_write,
)
from app.api.v1.dependencies.common import PageParams, get_page_params
from app.api.v1.dependencies.records import (
    get_application_repo,
    get_application_repo_for_write,
    get_appointment_repo,
    get_appointment_repo_for_write,
    get_campaign_repo,
    get_campaign_repo_for_write,
    get_document_repo,
    get_document_repo_for_write,
    get_lead_repo,
    get_lead_repo_for_write,
    get_notification_repo,
    get_notification_repo_for_write,
    get_student_repo,
    get_student_repo_for_write,
    get_task_repo,
    get_task_repo_for_write,
    get_user_repo,
    get_user_repo_for_write,
)
from app.api.v1.dependencies.tenant import (
    get_agency,
    get_agency_repo,
    get_provisioning_service,
    require_provisioning_secret,
)
from app.api.v1.dependencies.workflow import get_workflow_repo, get_workflow_service

__all__ = [
    "PageParams",
    "build_alert_service",
    "build_automation_engine",
    "get_agency",
    "get_agency_repo",
    "get_alert_repo",
    "get_alert_service",
    "get_application_repo",
    "get_application_repo_for_write",
    "get_appointment_repo",
    "get_appointment_repo_for_write",
    "get_automation_engine",
    "get_campaign_repo",
    "get_campaign_repo_for_write",
    "get_document_repo",
    "get_document_repo_for_write",
    "get_event_dispatcher",
    "get_lead_repo",
    "get_lead_repo_for_write",
    "get_notification_repo",
    "get_notification_repo_for_write",
    "get_page_params",
    "get_provisioning_service",
    "get_scheduled_run_service",
    "get_student_repo",
    "get_student_repo_for_write",
    "get_task_repo",
    "get_task_repo_for_write",
    "get_trigger_service",
    "get_trigger_service_for_write",
    "get_user_repo",
    "get_user_repo_for_write",
    "get_workflow_repo",
    "get_workflow_service",
    "require_provisioning_secret",
]
