"""Role grant administration: which capabilities each tenant role grants or denies."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from auditflow.api.v1.dependencies import get_role_permission_service, require_capability
from auditflow.application.dtos.permission import RolePermissionChange
from auditflow.application.services.role_permission_service import RolePermissionService
from auditflow.core.limiter import limit_writes
from auditflow.domain.entities.principal import Principal
from auditflow.schemas.permission import (
    RolePermissionBatchRequest,
    RolePermissionBatchResponse,
    RolePermissionResponse,
    RolePermissionUpdate,
)

router = APIRouter()

_UPDATE = "role:update"


@router.put("/batch", response_model=RolePermissionBatchResponse)
@limit_writes
async def batch_role_permissions(
    request: Request,
    body: RolePermissionBatchRequest,
    principal: Annotated[Principal, Depends(require_capability(_UPDATE))],
    service: Annotated[RolePermissionService, Depends(get_role_permission_service)],
):
    """Apply several role grants in one transaction (400 if empty, 409 on repeated pairs)."""
    results = await service.set_grants(
        principal.tenant_id,
        [
            RolePermissionChange(role_id=c.role_id, capability=c.capability, allowed=c.allowed)
            for c in body.changes
        ],
    )
    return RolePermissionBatchResponse(
        updated_count=len(results),
        results=[RolePermissionResponse.model_validate(r) for r in results],
    )


@router.put("/{role_id}/{capability}", response_model=RolePermissionResponse)
@limit_writes
async def set_role_permission(
    request: Request,
    role_id: str,
    capability: str,
    body: RolePermissionUpdate,
    principal: Annotated[Principal, Depends(require_capability(_UPDATE))],
    service: Annotated[RolePermissionService, Depends(get_role_permission_service)],
):
    """Grant (allowed=true) or explicitly deny (allowed=false) a capability on a role."""
    result = await service.set_grant(principal.tenant_id, role_id, capability, body.allowed)
    return RolePermissionResponse.model_validate(result)
