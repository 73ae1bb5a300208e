"""UserPermission repository: per-user overrides (implements IUserPermissionRepository)."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from auditflow.application.dtos.permission import UserPermissionResult
from auditflow.infrastructure.persistence.models.permission import (
    Permission,
    UserPermission,
)
from auditflow.infrastructure.persistence.models.user import User
from auditflow.infrastructure.persistence.repositories.base import BaseRepository
from auditflow.shared.utils.datetime import utc_now


def _to_result(up: UserPermission, perm: Permission) -> UserPermissionResult:
    return UserPermissionResult(
        id=up.id,
        user_id=up.user_id,
        permission_id=up.permission_id,
        module=perm.module,
        action=perm.action,
        allowed=up.allowed,
        expires_at=up.expires_at,
        granted_by=up.granted_by,
        granted_at=up.granted_at,
        reason=up.reason,
    )


class UserPermissionRepository(BaseRepository[UserPermission]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, UserPermission)

    async def upsert_override(
        self,
        user_id: str,
        permission_id: str,
        *,
        allowed: bool,
        granted_by: str | None,
        expires_at: datetime | None,
        reason: str | None,
    ) -> UserPermissionResult:
        result = await self.db.execute(
            select(UserPermission).where(
                UserPermission.user_id == user_id,
                UserPermission.permission_id == permission_id,
            )
        )
        up = result.scalar_one_or_none()
        if up is None:
            up = await self.create(
                UserPermission(
                    user_id=user_id,
                    permission_id=permission_id,
                    allowed=allowed,
                    granted_by=granted_by,
                    expires_at=expires_at,
                    reason=reason,
                )
            )
        else:
            up.allowed = allowed
            up.granted_by = granted_by
            up.granted_at = utc_now()
            up.expires_at = expires_at
            up.reason = reason
            await self.db.flush()
        perm = await self.db.get(Permission, permission_id)
        return _to_result(up, perm)

    async def delete_override(self, user_id: str, permission_id: str) -> bool:
        result = await self.db.execute(
            delete(UserPermission).where(
                UserPermission.user_id == user_id,
                UserPermission.permission_id == permission_id,
            )
        )
        return (result.rowcount or 0) > 0

    async def list_for_user(self, user_id: str) -> list[UserPermissionResult]:
        result = await self.db.execute(
            select(UserPermission, Permission)
            .join(Permission, Permission.id == UserPermission.permission_id)
            .where(UserPermission.user_id == user_id)
            .order_by(Permission.module, Permission.action)
        )
        return [_to_result(up, perm) for up, perm in result.all()]

    async def list_for_tenant(self, tenant_id: str) -> list[UserPermissionResult]:
        result = await self.db.execute(
            select(UserPermission, Permission)
            .join(Permission, Permission.id == UserPermission.permission_id)
            .join(User, User.id == UserPermission.user_id)
            .where(User.tenant_id == tenant_id)
            .order_by(UserPermission.user_id, Permission.module, Permission.action)
        )
        return [_to_result(up, perm) for up, perm in result.all()]
