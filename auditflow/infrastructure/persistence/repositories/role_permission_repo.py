"""RolePermission repository: role grants (implements IRolePermissionRepository)."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from auditflow.application.dtos.permission import RolePermissionResult
from auditflow.infrastructure.persistence.models.permission import (
    Permission,
    RolePermission,
)
from auditflow.infrastructure.persistence.repositories.base import BaseRepository


class RolePermissionRepository(BaseRepository[RolePermission]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, RolePermission)

    async def upsert_grant(
        self, role_id: str, permission_id: str, *, allowed: bool
    ) -> RolePermissionResult:
        result = await self.db.execute(
            select(RolePermission).where(
                RolePermission.role_id == role_id,
                RolePermission.permission_id == permission_id,
            )
        )
        grant = result.scalar_one_or_none()
        if grant is None:
            grant = await self.create(
                RolePermission(role_id=role_id, permission_id=permission_id, allowed=allowed)
            )
        else:
            grant.allowed = allowed
            await self.db.flush()
        perm = await self.db.get(Permission, permission_id)
        return RolePermissionResult(
            id=grant.id,
            role_id=grant.role_id,
            permission_id=grant.permission_id,
            module=perm.module,
            action=perm.action,
            allowed=grant.allowed,
        )
