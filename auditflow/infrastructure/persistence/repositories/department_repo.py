"""Department repository: HOD pointer reads/writes (implements IDepartmentRepository)."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from auditflow.infrastructure.persistence.models.department import Department
from auditflow.infrastructure.persistence.models.permission import UserDepartmentRole
from auditflow.infrastructure.persistence.models.role import Role
from auditflow.infrastructure.persistence.repositories.base import BaseRepository


class DepartmentRepository(BaseRepository[Department]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Department)

    async def list_hod_pointers(self, tenant_id: str) -> dict[str, tuple[str, str | None]]:
        result = await self.db.execute(
            select(Department.id, Department.name, Department.hod_id).where(
                Department.tenant_id == tenant_id
            )
        )
        return {dept_id: (name, hod_id) for dept_id, name, hod_id in result.all()}

    async def list_hod_assignments(
        self, tenant_id: str, role_names: Sequence[str]
    ) -> dict[str, list[tuple[str, bool]]]:
        result = await self.db.execute(
            select(
                UserDepartmentRole.department_id,
                UserDepartmentRole.user_id,
                UserDepartmentRole.is_primary_role,
            )
            .join(Role, Role.id == UserDepartmentRole.role_id)
            .join(Department, Department.id == UserDepartmentRole.department_id)
            .where(
                Department.tenant_id == tenant_id,
                Role.tenant_id == tenant_id,
                Role.name.in_(list(role_names)),
            )
        )
        assignments: dict[str, list[tuple[str, bool]]] = defaultdict(list)
        for dept_id, user_id, is_primary in result.all():
            assignments[dept_id].append((user_id, is_primary))
        return dict(assignments)

    async def set_hod_pointer(self, department_id: str, hod_id: str | None) -> None:
        await self.db.execute(
            update(Department).where(Department.id == department_id).values(hod_id=hod_id)
        )
