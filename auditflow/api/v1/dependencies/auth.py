"""Principal and capability dependencies.

The principal comes from the Bearer JWT (sub, tenant_id, roles). Resolving it
also sets the tenant and actor context variables for the request.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from auditflow.application.services.authorization_service import AuthorizationService
from auditflow.core.config import get_settings
from auditflow.core.tenant_context import is_valid_tenant_id_format, set_tenant_id
from auditflow.domain.entities.principal import Principal
from auditflow.domain.exceptions import AuthenticationException, ValidationException
from auditflow.domain.value_objects.capability import Capability
from auditflow.infrastructure.security.jwt import verify_token
from auditflow.shared.context import set_current_user

from .services import get_authorization_service

_http_bearer = HTTPBearer(auto_error=False)


async def get_current_principal(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
) -> Principal:
    """Return the principal from the JWT; 401 if missing or invalid.

    When the tenant header is sent it must be well formed (400) and match the
    token's tenant (403).
    """
    if not credentials:
        raise AuthenticationException("Not authenticated")
    try:
        payload = verify_token(credentials.credentials)
    except ValueError:
        raise AuthenticationException("Invalid or expired token") from None
    try:
        principal = Principal.from_claims(payload)
    except ValidationException:
        raise AuthenticationException("Token has no tenant") from None

    header_name = get_settings().tenant_header_name
    header_tenant = request.headers.get(header_name)
    if header_tenant and not is_valid_tenant_id_format(header_tenant):
        raise ValidationException(f"Invalid {header_name} header", field=header_name)
    if header_tenant and header_tenant != principal.tenant_id:
        raise HTTPException(status_code=403, detail="Forbidden")

    set_tenant_id(principal.tenant_id)
    set_current_user(principal.id)
    return principal


def require_capability(capability: str):
    """Dependency factory: require JWT auth and that the principal holds module:action.

    The capability string is parsed once here so a typo fails at import time.
    """
    cap = Capability.parse(capability)

    async def _require(
        principal: Annotated[Principal, Depends(get_current_principal)],
        auth_svc: Annotated[AuthorizationService, Depends(get_authorization_service)],
    ) -> Principal:
        await auth_svc.require_capability(principal, cap)
        return principal

    return _require
