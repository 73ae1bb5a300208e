"""Permission store: capability catalog, role grants, assignments and overrides (implements IPermissionStore)."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from auditflow.application.dtos.permission import (
    DepartmentRoleRef,
    PermissionResult,
    PrincipalRoleSnapshot,
    RoleRef,
)
from auditflow.domain.entities.principal import (
    DepartmentScopedRole,
    PermissionOverride,
    Principal,
    RoleAssignment,
    TenantWideRole,
)
from auditflow.domain.value_objects.capability import Capability
from auditflow.infrastructure.persistence.models.department import Department
from auditflow.infrastructure.persistence.models.permission import (
    Permission,
    RolePermission,
    UserDepartmentRole,
    UserPermission,
    UserRole,
)
from auditflow.infrastructure.persistence.models.role import Role
from auditflow.infrastructure.persistence.models.tenant import Tenant
from auditflow.infrastructure.persistence.models.user import User


def _role_ref(role: Role) -> RoleRef:
    return RoleRef(id=role.id, name=role.name, tenant_id=role.tenant_id)


class SqlPermissionStore:
    """Read-side queries for resolution and discovery. Never writes."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_permission(self, module: str, action: str) -> PermissionResult | None:
        result = await self.db.execute(
            select(Permission).where(Permission.module == module, Permission.action == action)
        )
        row = result.scalar_one_or_none()
        if row is None:
            return None
        return PermissionResult(
            id=row.id, module=row.module, action=row.action, description=row.description
        )

    async def tenant_exists(self, tenant_id: str) -> bool:
        result = await self.db.execute(select(Tenant.id).where(Tenant.id == tenant_id))
        return result.scalar_one_or_none() is not None

    async def principal_exists(self, user_id: str, tenant_id: str) -> bool:
        result = await self.db.execute(
            select(User.id).where(User.id == user_id, User.tenant_id == tenant_id)
        )
        return result.scalar_one_or_none() is not None

    async def load_principal(self, user_id: str, tenant_id: str) -> Principal | None:
        """Assignments as a login would put them in the token: tenant-wide first."""
        if not await self.principal_exists(user_id, tenant_id):
            return None
        assignments: list[RoleAssignment] = []
        result = await self.db.execute(
            select(UserRole)
            .where(UserRole.user_id == user_id)
            .order_by(UserRole.is_default.desc(), UserRole.role_id)
        )
        assignments.extend(
            TenantWideRole(role_id=ur.role_id, is_default=ur.is_default)
            for ur in result.scalars().all()
        )
        result = await self.db.execute(
            select(UserDepartmentRole, Department.name)
            .join(Department, Department.id == UserDepartmentRole.department_id)
            .where(UserDepartmentRole.user_id == user_id)
            .order_by(
                UserDepartmentRole.is_primary_department.desc(),
                UserDepartmentRole.is_primary_role.desc(),
                Department.name,
            )
        )
        assignments.extend(
            DepartmentScopedRole(
                role_id=udr.role_id,
                department_id=udr.department_id,
                department_name=name,
                is_primary_role=udr.is_primary_role,
                is_primary_department=udr.is_primary_department,
            )
            for udr, name in result.all()
        )
        return Principal(id=user_id, tenant_id=tenant_id, role_assignments=tuple(assignments))

    async def get_active_overrides(
        self, user_id: str, permission_id: str, now: datetime
    ) -> list[PermissionOverride]:
        result = await self.db.execute(
            select(UserPermission, Permission)
            .join(Permission, Permission.id == UserPermission.permission_id)
            .where(
                UserPermission.user_id == user_id,
                UserPermission.permission_id == permission_id,
                or_(UserPermission.expires_at.is_(None), UserPermission.expires_at > now),
            )
        )
        return [
            PermissionOverride(
                capability=Capability(module=perm.module, action=perm.action),
                allowed=up.allowed,
                expires_at=up.expires_at,
                granted_by=up.granted_by,
                reason=up.reason,
            )
            for up, perm in result.all()
        ]

    async def get_roles(self, role_ids: Sequence[str]) -> list[RoleRef]:
        if not role_ids:
            return []
        result = await self.db.execute(select(Role).where(Role.id.in_(list(role_ids))))
        return [_role_ref(r) for r in result.scalars().all()]

    async def find_granting_role(
        self, role_ids: Sequence[str], permission_id: str, tenant_id: str
    ) -> RoleRef | None:
        if not role_ids:
            return None
        result = await self.db.execute(
            select(Role)
            .join(RolePermission, RolePermission.role_id == Role.id)
            .where(
                Role.id.in_(list(role_ids)),
                Role.tenant_id == tenant_id,
                RolePermission.permission_id == permission_id,
                RolePermission.allowed.is_(True),
            )
            .order_by(Role.name)
            .limit(1)
        )
        role = result.scalar_one_or_none()
        return _role_ref(role) if role is not None else None

    async def get_granting_role_ids(self, permission_id: str, tenant_id: str) -> set[str]:
        result = await self.db.execute(
            select(RolePermission.role_id)
            .join(Role, Role.id == RolePermission.role_id)
            .where(
                RolePermission.permission_id == permission_id,
                RolePermission.allowed.is_(True),
                Role.tenant_id == tenant_id,
            )
        )
        return {row[0] for row in result.all()}

    async def list_tenant_principals(self, tenant_id: str) -> list[PrincipalRoleSnapshot]:
        """Three bulk queries (users, tenant-wide roles, department roles) instead of one per user."""
        users = await self.db.execute(
            select(User.id)
            .where(User.tenant_id == tenant_id, User.is_active.is_(True))
            .order_by(User.created_at, User.id)
        )
        user_ids = list(users.scalars().all())
        if not user_ids:
            return []

        tenant_roles: dict[str, list[RoleRef]] = defaultdict(list)
        result = await self.db.execute(
            select(UserRole.user_id, Role)
            .join(Role, Role.id == UserRole.role_id)
            .join(User, User.id == UserRole.user_id)
            .where(User.tenant_id == tenant_id)
            .order_by(UserRole.is_default.desc(), Role.name)
        )
        for user_id, role in result.all():
            tenant_roles[user_id].append(_role_ref(role))

        department_roles: dict[str, list[DepartmentRoleRef]] = defaultdict(list)
        result = await self.db.execute(
            select(UserDepartmentRole, Role, Department.name)
            .join(Role, Role.id == UserDepartmentRole.role_id)
            .join(Department, Department.id == UserDepartmentRole.department_id)
            .join(User, User.id == UserDepartmentRole.user_id)
            .where(User.tenant_id == tenant_id)
            .order_by(
                UserDepartmentRole.is_primary_department.desc(),
                UserDepartmentRole.is_primary_role.desc(),
                Department.name,
            )
        )
        for udr, role, department_name in result.all():
            department_roles[udr.user_id].append(
                DepartmentRoleRef(
                    role=_role_ref(role),
                    department_id=udr.department_id,
                    department_name=department_name,
                )
            )

        return [
            PrincipalRoleSnapshot(
                principal_id=user_id,
                tenant_roles=tuple(tenant_roles.get(user_id, ())),
                department_roles=tuple(department_roles.get(user_id, ())),
            )
            for user_id in user_ids
        ]
