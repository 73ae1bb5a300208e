"""Capability checks and recipient discovery."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from auditflow.api.v1.dependencies import (
    get_authorization_service,
    get_current_principal,
    get_override_service,
    get_recipient_discovery,
    require_capability,
)
from auditflow.application.services.authorization_service import AuthorizationService
from auditflow.application.services.override_service import PermissionOverrideService
from auditflow.application.services.recipient_discovery import (
    RecipientDiscoveryService,
)
from auditflow.domain.entities.principal import Principal
from auditflow.domain.value_objects.capability import Capability
from auditflow.schemas.permission import (
    CapabilityCheckResponse,
    RecipientResponse,
    UserCapabilityCheckResponse,
)

router = APIRouter()
recipients_router = APIRouter()


@router.get("/check", response_model=CapabilityCheckResponse)
async def check_capability(
    principal: Annotated[Principal, Depends(get_current_principal)],
    auth_svc: Annotated[AuthorizationService, Depends(get_authorization_service)],
    capability: str = Query(..., examples=["auditProgram:approve"]),
):
    """Return whether the caller holds module:action (400 if malformed, 404 if unknown)."""
    cap = Capability.parse(capability)
    allowed = await auth_svc.has_capability(principal, cap)
    return CapabilityCheckResponse(capability=cap.code, allowed=allowed)


@router.get("/check/{user_id}", response_model=UserCapabilityCheckResponse)
async def check_user_capability(
    user_id: str,
    principal: Annotated[Principal, Depends(require_capability("user:read"))],
    service: Annotated[PermissionOverrideService, Depends(get_override_service)],
    capability: str = Query(..., examples=["auditProgram:approve"]),
):
    """Whether another user of the caller's tenant holds module:action (404 if not a member)."""
    cap = Capability.parse(capability)
    allowed = await service.check_for_user(principal.tenant_id, user_id, cap)
    return UserCapabilityCheckResponse(capability=cap.code, allowed=allowed, user_id=user_id)


@recipients_router.get("", response_model=list[RecipientResponse])
async def list_recipients(
    principal: Annotated[Principal, Depends(require_capability("user:read"))],
    discovery: Annotated[RecipientDiscoveryService, Depends(get_recipient_discovery)],
    module: str = Query(..., min_length=1),
    action: str = Query(..., min_length=1),
    department: str | None = None,
):
    """List users of the caller's tenant who hold module:action through their roles."""
    recipients = await discovery.find_eligible_recipients(
        principal.tenant_id, module, action, department
    )
    return [RecipientResponse.model_validate(r) for r in recipients]
