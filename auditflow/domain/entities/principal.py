"""Principal entity and its role assignments.

A principal is an authenticated user scoped to exactly one tenant. Every role
a principal might hold is carried in one normalized list of RoleAssignment
values, either tenant-wide or department-scoped. Once collected, both kinds
are evaluated identically by the resolution engine.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from auditflow.domain.exceptions import AuthenticationException, ValidationException
from auditflow.domain.value_objects.capability import Capability
from auditflow.shared.utils.datetime import ensure_utc


@dataclass(frozen=True)
class TenantWideRole:
    """Role assignment not scoped to any department."""

    role_id: str
    is_default: bool = False


@dataclass(frozen=True)
class DepartmentScopedRole:
    """Role assignment tied to one department."""

    role_id: str
    department_id: str
    department_name: str | None = None
    is_primary_role: bool = False
    is_primary_department: bool = False


RoleAssignment = TenantWideRole | DepartmentScopedRole


@dataclass(frozen=True)
class PermissionOverride:
    """Direct per-user grant or denial of a capability.

    An override whose expires_at is in the past is treated as absent.
    """

    capability: Capability
    allowed: bool
    expires_at: datetime | None = None
    granted_by: str | None = None
    reason: str | None = None

    def is_active(self, now: datetime) -> bool:
        expires_at = ensure_utc(self.expires_at)
        return expires_at is None or expires_at > now


@dataclass(frozen=True)
class Principal:
    """Authenticated user within one tenant, with a flat list of role assignments."""

    id: str
    tenant_id: str
    role_assignments: tuple[RoleAssignment, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.id:
            raise AuthenticationException("Principal has no identifier")
        if not self.tenant_id:
            raise ValidationException("Principal has no tenant context", field="tenant_id")

    @property
    def tenant_wide_roles(self) -> tuple[TenantWideRole, ...]:
        return tuple(a for a in self.role_assignments if isinstance(a, TenantWideRole))

    @property
    def department_roles(self) -> tuple[DepartmentScopedRole, ...]:
        return tuple(
            a for a in self.role_assignments if isinstance(a, DepartmentScopedRole)
        )

    def candidate_role_ids(self) -> list[str]:
        """Distinct role ids from every assignment, in assignment order."""
        seen: dict[str, None] = {}
        for assignment in self.role_assignments:
            seen.setdefault(assignment.role_id, None)
        return list(seen)

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> Principal:
        """Build a principal from decoded JWT claims.

        Expected shape::

            {"sub": "...", "tenant_id": "...",
             "roles": [{"role_id": "...", "is_default": true},
                       {"role_id": "...", "department_id": "...",
                        "department_name": "...", "is_primary_role": false,
                        "is_primary_department": true}]}

        The roles claim is what the user held at login; the engine re-checks each
        role's tenant against the store before trusting it.
        """
        return cls(
            id=claims.get("sub") or "",
            tenant_id=claims.get("tenant_id") or "",
            role_assignments=tuple(_parse_role_claims(claims.get("roles") or [])),
        )

    def to_claims(self) -> dict[str, Any]:
        """Inverse of from_claims (used when issuing tokens)."""
        roles: list[dict[str, Any]] = []
        for a in self.role_assignments:
            if isinstance(a, DepartmentScopedRole):
                roles.append(
                    {
                        "role_id": a.role_id,
                        "department_id": a.department_id,
                        "department_name": a.department_name,
                        "is_primary_role": a.is_primary_role,
                        "is_primary_department": a.is_primary_department,
                    }
                )
            else:
                roles.append({"role_id": a.role_id, "is_default": a.is_default})
        return {"sub": self.id, "tenant_id": self.tenant_id, "roles": roles}


def _parse_role_claims(items: Iterable[Any]) -> Iterable[RoleAssignment]:
    for item in items:
        if not isinstance(item, dict) or not item.get("role_id"):
            continue
        if item.get("department_id"):
            yield DepartmentScopedRole(
                role_id=item["role_id"],
                department_id=item["department_id"],
                department_name=item.get("department_name"),
                is_primary_role=bool(item.get("is_primary_role", False)),
                is_primary_department=bool(item.get("is_primary_department", False)),
            )
        else:
            yield TenantWideRole(
                role_id=item["role_id"],
                is_default=bool(item.get("is_default", False)),
            )
