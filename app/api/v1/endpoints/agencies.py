"""Agency provisioning API (platform-level, not agency-scoped)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import get_provisioning_service, require_provisioning_secret
from app.application.services.agency_provisioning_service import (
    AgencyProvisioningService,
)
from app.core.limiter import limit_provision_agency
from app.schemas.agency import AgencyProvisionRequest, AgencyProvisionResponse

router = APIRouter()


@router.post(
    "",
    response_model=AgencyProvisionResponse,
    status_code=201,
    dependencies=[Depends(require_provisioning_secret)],
)
@limit_provision_agency
async def provision_agency(
    request: Request,
    body: AgencyProvisionRequest,
    service: Annotated[AgencyProvisioningService, Depends(get_provisioning_service)],
) -> AgencyProvisionResponse:
    """Create an agency and its ADMIN user.

    Requires X-Provisioning-Secret. Returns 409 when the subdomain is taken.
    """
    result = await service.provision(
        subdomain=body.subdomain,
        name=body.name,
        admin_email=str(body.admin_email),
        admin_first_name=body.admin_first_name,
        admin_last_name=body.admin_last_name,
    )
    return AgencyProvisionResponse(
        agency_id=result.agency_id,
        subdomain=result.subdomain,
        name=result.name,
        admin_user_id=result.admin_user_id,
        admin_email=result.admin_email,
    )
