"""Role grant administration: set one or many RolePermission rows for tenant roles.

A role grant can change the answer for every holder of the role, so the
whole tenant's cached decisions are dropped once the write is committed.
"""

from __future__ import annotations

from collections.abc import Sequence

from auditflow.application.dtos.permission import (
    PermissionResult,
    RolePermissionChange,
    RolePermissionResult,
    RoleRef,
)
from auditflow.application.interfaces.repositories import (
    IPermissionStore,
    IRolePermissionRepository,
    IUnitOfWork,
)
from auditflow.application.services.authorization_service import AuthorizationService
from auditflow.domain.exceptions import (
    DuplicateAssignmentException,
    ResourceNotFoundException,
    TenantNotFoundException,
    ValidationException,
)
from auditflow.domain.value_objects.capability import Capability
from auditflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class RolePermissionService:
    def __init__(
        self,
        store: IPermissionStore,
        grants: IRolePermissionRepository,
        uow: IUnitOfWork,
        authorization: AuthorizationService,
    ) -> None:
        self._store = store
        self._grants = grants
        self._uow = uow
        self._authorization = authorization

    async def _resolve(
        self, tenant_id: str, role_id: str, capability: str | Capability
    ) -> tuple[RoleRef, PermissionResult]:
        cap = capability if isinstance(capability, Capability) else Capability.parse(capability)
        roles = await self._store.get_roles([role_id])
        # A role of another tenant is reported exactly like a missing one.
        if not roles or roles[0].tenant_id != tenant_id:
            raise ResourceNotFoundException("role", role_id)
        permission = await self._store.get_permission(cap.module, cap.action)
        if permission is None:
            raise ResourceNotFoundException("capability", cap.code)
        return roles[0], permission

    async def set_grant(
        self,
        tenant_id: str,
        role_id: str,
        capability: str | Capability,
        allowed: bool,
    ) -> RolePermissionResult:
        """Create or update the grant of capability to one role of the tenant."""
        if not await self._store.tenant_exists(tenant_id):
            raise TenantNotFoundException(tenant_id)
        role, permission = await self._resolve(tenant_id, role_id, capability)
        result = await self._grants.upsert_grant(role.id, permission.id, allowed=allowed)
        await self._uow.commit()
        await self._authorization.invalidate_tenant_cache(tenant_id)
        logger.info(
            "Role %s (%s) %s %s in tenant %s",
            role.name,
            role.id,
            "grants" if allowed else "denies",
            permission.code,
            tenant_id,
        )
        return result

    async def set_grants(
        self, tenant_id: str, changes: Sequence[RolePermissionChange]
    ) -> list[RolePermissionResult]:
        """Apply several role grants in one commit; every pair is checked before any write.

        Raises:
            ValidationException: empty batch.
            DuplicateAssignmentException: the same role+capability twice.
            ResourceNotFoundException: role not in tenant or capability unknown.
        """
        if not changes:
            raise ValidationException("At least one change is required", field="changes")
        if not await self._store.tenant_exists(tenant_id):
            raise TenantNotFoundException(tenant_id)

        planned: list[tuple[RoleRef, PermissionResult, bool]] = []
        seen: set[tuple[str, str]] = set()
        for change in changes:
            role, permission = await self._resolve(tenant_id, change.role_id, change.capability)
            if (role.id, permission.id) in seen:
                raise DuplicateAssignmentException(
                    f"Grant of {permission.code} to role {role.id} listed twice",
                    "role_permission",
                    {"role_id": role.id, "capability": permission.code},
                )
            seen.add((role.id, permission.id))
            planned.append((role, permission, change.allowed))

        results = [
            await self._grants.upsert_grant(role.id, permission.id, allowed=allowed)
            for role, permission, allowed in planned
        ]
        await self._uow.commit()
        await self._authorization.invalidate_tenant_cache(tenant_id)
        logger.info("Batch updated %d role grants in tenant %s", len(results), tenant_id)
        return results
