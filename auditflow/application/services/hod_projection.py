"""Department HOD pointer projection.

Department.hod_id is derived data. Department-scoped assignments of a role
named HOD (or HOD AUDITOR / HOD_AUDITOR) are the source of truth; this
service computes the pointer from them, reports departments whose stored
pointer has drifted and rewrites those pointers through one write path.
"""

from __future__ import annotations

from dataclasses import dataclass

from auditflow.application.interfaces.repositories import IDepartmentRepository
from auditflow.domain.enums import HOD_ROLE_NAMES
from auditflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class HodDrift:
    department_id: str
    department_name: str
    stored_hod_id: str | None
    expected_hod_id: str | None


def expected_hod(assignments: list[tuple[str, bool]]) -> str | None:
    """Pick the HOD from (user_id, is_primary_role) pairs: primary role first, then lowest id."""
    if not assignments:
        return None
    primary = sorted(uid for uid, is_primary in assignments if is_primary)
    if primary:
        return primary[0]
    return sorted(uid for uid, _ in assignments)[0]


class DepartmentHodProjection:
    def __init__(self, departments: IDepartmentRepository) -> None:
        self._departments = departments

    async def find_drift(self, tenant_id: str) -> list[HodDrift]:
        """Return departments whose stored hod_id disagrees with role assignments."""
        pointers = await self._departments.list_hod_pointers(tenant_id)
        assignments = await self._departments.list_hod_assignments(
            tenant_id, sorted(HOD_ROLE_NAMES)
        )
        drift: list[HodDrift] = []
        for department_id, (name, stored) in sorted(pointers.items()):
            expected = expected_hod(assignments.get(department_id, []))
            if stored != expected:
                drift.append(HodDrift(department_id, name, stored, expected))
        if drift:
            logger.warning(
                "HOD pointer drift in tenant %s: %d department(s)", tenant_id, len(drift)
            )
        return drift

    async def sync(self, tenant_id: str) -> list[HodDrift]:
        """Rewrite drifted pointers from the assignment table; returns what changed."""
        drift = await self.find_drift(tenant_id)
        for item in drift:
            await self._departments.set_hod_pointer(item.department_id, item.expected_hod_id)
            logger.info(
                "HOD pointer for department %s (%s): %s -> %s",
                item.department_id,
                item.department_name,
                item.stored_hod_id,
                item.expected_hod_id,
            )
        return drift
