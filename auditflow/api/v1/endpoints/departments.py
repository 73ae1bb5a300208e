"""Department HOD pointer consistency: report and repair drift."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from auditflow.api.v1.dependencies import get_hod_projection, require_capability
from auditflow.application.services.hod_projection import DepartmentHodProjection
from auditflow.core.limiter import limit_writes
from auditflow.domain.entities.principal import Principal
from auditflow.schemas.department import HodDriftResponse

router = APIRouter()


@router.get("/hod-drift", response_model=list[HodDriftResponse])
async def hod_drift(
    principal: Annotated[Principal, Depends(require_capability("department:read"))],
    projection: Annotated[DepartmentHodProjection, Depends(get_hod_projection)],
):
    """Departments whose hod_id disagrees with their HOD role assignments."""
    drift = await projection.find_drift(principal.tenant_id)
    return [HodDriftResponse.model_validate(d) for d in drift]


@router.post("/hod-sync", response_model=list[HodDriftResponse])
@limit_writes
async def hod_sync(
    request: Request,
    principal: Annotated[Principal, Depends(require_capability("department:update"))],
    projection: Annotated[DepartmentHodProjection, Depends(get_hod_projection)],
):
    """Rewrite drifted hod_id pointers from the assignments; returns what changed."""
    changed = await projection.sync(principal.tenant_id)
    return [HodDriftResponse.model_validate(d) for d in changed]
