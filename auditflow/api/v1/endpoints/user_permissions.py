"""Per-user permission overrides: list, grant/revoke, batch, remove (tenant-scoped)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response

from auditflow.api.v1.dependencies import get_override_service, require_capability
from auditflow.application.dtos.permission import OverrideChange
from auditflow.application.services.override_service import PermissionOverrideService
from auditflow.core.limiter import limit_writes
from auditflow.domain.entities.principal import Principal
from auditflow.schemas.permission import (
    PermissionOverrideBatchRequest,
    PermissionOverrideBatchResponse,
    PermissionOverrideCreate,
    PermissionOverrideResponse,
)

router = APIRouter()

_MANAGE = "userPermission:manage"


@router.get("/permission-overrides", response_model=list[PermissionOverrideResponse])
async def list_tenant_permission_overrides(
    principal: Annotated[Principal, Depends(require_capability(_MANAGE))],
    service: Annotated[PermissionOverrideService, Depends(get_override_service)],
):
    """Every override held by users of the caller's tenant, expired ones included."""
    overrides = await service.list_for_tenant(principal.tenant_id)
    return [PermissionOverrideResponse.model_validate(o) for o in overrides]


@router.post(
    "/permission-overrides/batch", response_model=PermissionOverrideBatchResponse
)
@limit_writes
async def batch_permission_overrides(
    request: Request,
    body: PermissionOverrideBatchRequest,
    principal: Annotated[Principal, Depends(require_capability(_MANAGE))],
    service: Annotated[PermissionOverrideService, Depends(get_override_service)],
):
    """Grant or revoke several overrides at once; nothing is written if any entry is invalid."""
    results = await service.batch(
        principal.tenant_id,
        [
            OverrideChange(
                user_id=c.user_id,
                capability=c.capability,
                allowed=c.allowed,
                expires_at=c.expires_at,
                reason=c.reason,
            )
            for c in body.changes
        ],
        granted_by=principal.id,
    )
    return PermissionOverrideBatchResponse(
        updated_count=len(results),
        results=[PermissionOverrideResponse.model_validate(r) for r in results],
    )


@router.get(
    "/{user_id}/permission-overrides",
    response_model=list[PermissionOverrideResponse],
)
async def list_permission_overrides(
    user_id: str,
    principal: Annotated[Principal, Depends(require_capability(_MANAGE))],
    service: Annotated[PermissionOverrideService, Depends(get_override_service)],
):
    overrides = await service.list_for_user(principal.tenant_id, user_id)
    return [PermissionOverrideResponse.model_validate(o) for o in overrides]


@router.post(
    "/{user_id}/permission-overrides",
    response_model=PermissionOverrideResponse,
    status_code=201,
)
@limit_writes
async def set_permission_override(
    request: Request,
    user_id: str,
    body: PermissionOverrideCreate,
    principal: Annotated[Principal, Depends(require_capability(_MANAGE))],
    service: Annotated[PermissionOverrideService, Depends(get_override_service)],
):
    """Grant (allowed=true) or revoke (allowed=false) a capability for one user."""
    if body.allowed:
        result = await service.grant(
            principal.tenant_id,
            user_id,
            body.capability,
            granted_by=principal.id,
            expires_at=body.expires_at,
            reason=body.reason,
        )
    else:
        result = await service.revoke(
            principal.tenant_id,
            user_id,
            body.capability,
            revoked_by=principal.id,
            reason=body.reason,
        )
    return PermissionOverrideResponse.model_validate(result)


@router.delete("/{user_id}/permission-overrides/{capability}", status_code=204)
@limit_writes
async def remove_permission_override(
    request: Request,
    user_id: str,
    capability: str,
    principal: Annotated[Principal, Depends(require_capability(_MANAGE))],
    service: Annotated[PermissionOverrideService, Depends(get_override_service)],
) -> Response:
    """Remove the override so the user's roles decide again."""
    await service.remove(principal.tenant_id, user_id, capability)
    return Response(status_code=204)
