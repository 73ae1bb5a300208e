"""Capability-based recipient discovery: who in a tenant can module:action.

Discovery is role-structural. It walks tenant-wide and department-scoped role
assignments against role grants and does not consult per-user overrides, so a
user granted a capability only by override is not discovered, and a user
denied by override may still be. The resolution engine remains the authority
for "may this user do X".
"""

from __future__ import annotations

from auditflow.application.dtos.permission import EligibleRecipient, PrincipalRoleSnapshot
from auditflow.application.interfaces.repositories import IPermissionStore
from auditflow.domain.value_objects.capability import Capability
from auditflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class RecipientDiscoveryService:
    """Finds principals holding a capability via role assignments (implements IRecipientDiscovery)."""

    def __init__(self, store: IPermissionStore) -> None:
        self._store = store

    async def find_eligible_recipients(
        self,
        tenant_id: str,
        module: str,
        action: str,
        department: str | None = None,
    ) -> list[EligibleRecipient]:
        """Return deduplicated recipients; first matching role/department wins the labels.

        With a department, a tenant-wide role counts only if the user is also
        attached to that department; a department-scoped role counts only in a
        department whose name matches after trimming.
        """
        capability = Capability(module=module, action=action)
        permission = await self._store.get_permission(capability.module, capability.action)
        if permission is None:
            logger.warning(
                "Recipient discovery: capability %s not in catalog, no recipients",
                capability,
            )
            return []

        granting_ids = await self._store.get_granting_role_ids(permission.id, tenant_id)
        if not granting_ids:
            logger.info(
                "Recipient discovery: no role in tenant %s grants %s", tenant_id, capability
            )
            return []

        wanted = department.strip() if department is not None else None
        snapshots = await self._store.list_tenant_principals(tenant_id)

        recipients: dict[str, EligibleRecipient] = {}
        for snapshot in snapshots:
            if snapshot.principal_id in recipients:
                continue
            match = _match(snapshot, tenant_id, granting_ids, wanted)
            if match is not None:
                recipients[snapshot.principal_id] = match

        logger.debug(
            "Recipient discovery: %d recipients for %s in tenant %s (department=%r)",
            len(recipients),
            capability,
            tenant_id,
            wanted,
        )
        return list(recipients.values())


def _match(
    snapshot: PrincipalRoleSnapshot,
    tenant_id: str,
    granting_ids: set[str],
    department: str | None,
) -> EligibleRecipient | None:
    attached = snapshot.department_names() if department is not None else set()

    for role in snapshot.tenant_roles:
        if role.tenant_id != tenant_id or role.id not in granting_ids:
            continue
        if department is None:
            return EligibleRecipient(snapshot.principal_id, role.name, None)
        if department in attached:
            return EligibleRecipient(snapshot.principal_id, role.name, department)

    for assignment in snapshot.department_roles:
        role = assignment.role
        if role.tenant_id != tenant_id or role.id not in granting_ids:
            continue
        name = assignment.department_name.strip()
        if department is None or name == department:
            return EligibleRecipient(snapshot.principal_id, role.name, name)

    return None
