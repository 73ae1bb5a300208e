"""Per-user permission override administration: grant, revoke, remove, list, batch.

Every write is committed before the user's cached decisions are dropped, so a
check racing the write can only re-cache the committed state.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from auditflow.application.dtos.permission import (
    OverrideChange,
    PermissionResult,
    UserPermissionResult,
)
from auditflow.application.interfaces.repositories import (
    IPermissionStore,
    IUnitOfWork,
    IUserPermissionRepository,
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
from auditflow.shared.utils.datetime import ensure_utc, utc_now

logger = get_logger(__name__)

DEFAULT_REVOKE_REASON = "Permission revoked"


def _check_expiry(allowed: bool, expires_at: datetime | None) -> datetime | None:
    expires_at = ensure_utc(expires_at)
    if expires_at is None:
        return None
    if not allowed:
        raise ValidationException(
            "expires_at is only accepted when granting", field="expires_at"
        )
    if expires_at <= utc_now():
        raise ValidationException("expires_at must be in the future", field="expires_at")
    return expires_at


class PermissionOverrideService:
    """Writes UserPermission rows, commits, then invalidates cached decisions."""

    def __init__(
        self,
        store: IPermissionStore,
        overrides: IUserPermissionRepository,
        uow: IUnitOfWork,
        authorization: AuthorizationService,
    ) -> None:
        self._store = store
        self._overrides = overrides
        self._uow = uow
        self._authorization = authorization

    async def _require_tenant(self, tenant_id: str) -> None:
        if not await self._store.tenant_exists(tenant_id):
            raise TenantNotFoundException(tenant_id)

    async def _resolve_target(
        self, tenant_id: str, user_id: str, capability: str | Capability
    ) -> PermissionResult:
        cap = capability if isinstance(capability, Capability) else Capability.parse(capability)
        await self._require_tenant(tenant_id)
        if not await self._store.principal_exists(user_id, tenant_id):
            raise ResourceNotFoundException("user", user_id)
        permission = await self._store.get_permission(cap.module, cap.action)
        if permission is None:
            raise ResourceNotFoundException("capability", cap.code)
        return permission

    async def _commit_and_invalidate(self, tenant_id: str, user_ids: Sequence[str]) -> None:
        await self._uow.commit()
        for user_id in dict.fromkeys(user_ids):
            await self._authorization.invalidate_user_cache(user_id, tenant_id)

    async def grant(
        self,
        tenant_id: str,
        user_id: str,
        capability: str | Capability,
        granted_by: str | None,
        expires_at: datetime | None = None,
        reason: str | None = None,
    ) -> UserPermissionResult:
        """Grant capability directly to the user (replaces any existing override)."""
        expires_at = _check_expiry(True, expires_at)
        permission = await self._resolve_target(tenant_id, user_id, capability)
        result = await self._overrides.upsert_override(
            user_id,
            permission.id,
            allowed=True,
            granted_by=granted_by,
            expires_at=expires_at,
            reason=reason,
        )
        await self._commit_and_invalidate(tenant_id, [user_id])
        logger.info(
            "Granted %s to user %s in tenant %s (by %s, expires %s)",
            permission.code,
            user_id,
            tenant_id,
            granted_by,
            expires_at,
        )
        return result

    async def revoke(
        self,
        tenant_id: str,
        user_id: str,
        capability: str | Capability,
        revoked_by: str | None,
        reason: str | None = None,
    ) -> UserPermissionResult:
        """Deny capability for the user even if a role grants it."""
        permission = await self._resolve_target(tenant_id, user_id, capability)
        result = await self._overrides.upsert_override(
            user_id,
            permission.id,
            allowed=False,
            granted_by=revoked_by,
            expires_at=None,
            reason=reason or DEFAULT_REVOKE_REASON,
        )
        await self._commit_and_invalidate(tenant_id, [user_id])
        logger.info(
            "Revoked %s for user %s in tenant %s (by %s)",
            permission.code,
            user_id,
            tenant_id,
            revoked_by,
        )
        return result

    async def remove(
        self, tenant_id: str, user_id: str, capability: str | Capability
    ) -> None:
        """Delete the override so roles decide again. Raises if none existed."""
        permission = await self._resolve_target(tenant_id, user_id, capability)
        deleted = await self._overrides.delete_override(user_id, permission.id)
        if not deleted:
            raise ResourceNotFoundException(
                "permission override", f"{user_id}:{permission.code}"
            )
        await self._commit_and_invalidate(tenant_id, [user_id])
        logger.info("Removed override %s for user %s", permission.code, user_id)

    async def batch(
        self,
        tenant_id: str,
        changes: Sequence[OverrideChange],
        granted_by: str | None,
    ) -> list[UserPermissionResult]:
        """Apply several grants/revokes in one commit; all targets are checked first.

        Raises:
            ValidationException: empty batch or a bad expiry.
            DuplicateAssignmentException: the same user+capability twice.
            ResourceNotFoundException: unknown user or capability.
        """
        if not changes:
            raise ValidationException("At least one change is required", field="changes")

        planned: list[tuple[OverrideChange, PermissionResult, datetime | None]] = []
        seen: set[tuple[str, str]] = set()
        for change in changes:
            expires_at = _check_expiry(change.allowed, change.expires_at)
            permission = await self._resolve_target(tenant_id, change.user_id, change.capability)
            key = (change.user_id, permission.code)
            if key in seen:
                raise DuplicateAssignmentException(
                    f"Override for {permission.code} on user {change.user_id} listed twice",
                    "user_permission",
                    {"user_id": change.user_id, "capability": permission.code},
                )
            seen.add(key)
            planned.append((change, permission, expires_at))

        results = []
        for change, permission, expires_at in planned:
            reason = change.reason
            if not change.allowed and not reason:
                reason = DEFAULT_REVOKE_REASON
            results.append(
                await self._overrides.upsert_override(
                    change.user_id,
                    permission.id,
                    allowed=change.allowed,
                    granted_by=granted_by,
                    expires_at=expires_at,
                    reason=reason,
                )
            )
        await self._commit_and_invalidate(tenant_id, [c.user_id for c in changes])
        logger.info(
            "Batch updated %d overrides in tenant %s (by %s)",
            len(results),
            tenant_id,
            granted_by,
        )
        return results

    async def list_for_user(
        self, tenant_id: str, user_id: str
    ) -> list[UserPermissionResult]:
        if not await self._store.principal_exists(user_id, tenant_id):
            raise ResourceNotFoundException("user", user_id)
        return await self._overrides.list_for_user(user_id)

    async def list_for_tenant(self, tenant_id: str) -> list[UserPermissionResult]:
        await self._require_tenant(tenant_id)
        return await self._overrides.list_for_tenant(tenant_id)

    async def check_for_user(
        self, tenant_id: str, user_id: str, capability: str | Capability
    ) -> bool:
        """Resolve capability for another user of the tenant from stored assignments."""
        await self._require_tenant(tenant_id)
        principal = await self._store.load_principal(user_id, tenant_id)
        if principal is None:
            raise ResourceNotFoundException("user", user_id)
        return await self._authorization.has_capability(principal, capability)
