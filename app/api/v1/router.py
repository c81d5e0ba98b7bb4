"""API router aggregation.

Platform routes (health, agency provisioning) sit directly under the API
prefix; everything else is agency-scoped under /{subdomain}, resolved by
the get_agency dependency.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import (
    agencies,
    alerts,
    applications,
    appointments,
    automation,
    campaigns,
    documents,
    health,
    leads,
    notifications,
    students,
    tasks,
    users,
    workflows,
)

agency_router = APIRouter(prefix="/{subdomain}")

agency_router.include_router(automation.router, prefix="/automation", tags=["automation"])
agency_router.include_router(alerts.router, prefix="/alerts", tags=["alerts"])
agency_router.include_router(workflows.router, prefix="/workflows", tags=["workflows"])
agency_router.include_router(leads.router, prefix="/leads", tags=["leads"])
agency_router.include_router(students.router, prefix="/students", tags=["students"])
agency_router.include_router(
    applications.router, prefix="/applications", tags=["applications"]
)
agency_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
agency_router.include_router(
    appointments.router, prefix="/appointments", tags=["appointments"]
)
agency_router.include_router(documents.router, prefix="/documents", tags=["documents"])
agency_router.include_router(users.router, prefix="/users", tags=["users"])
agency_router.include_router(campaigns.router, prefix="/campaigns", tags=["campaigns"])
agency_router.include_router(
    notifications.router, prefix="/notifications", tags=["notifications"]
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(agencies.router, prefix="/agencies", tags=["agencies"])
api_router.include_router(agency_router)
