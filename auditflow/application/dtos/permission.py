"""DTOs for permission resolution and discovery (no dependency on ORM)."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class PermissionResult:
    """Capability catalog entry."""

    id: str
    module: str
    action: str
    description: str | None = None

    @property
    def code(self) -> str:
        return f"{self.module}:{self.action}"


@dataclass(frozen=True)
class RoleRef:
    """Role identity plus the tenant that owns it."""

    id: str
    name: str
    tenant_id: str


@dataclass(frozen=True)
class DepartmentRoleRef:
    """A department-scoped role assignment as seen by bulk discovery."""

    role: RoleRef
    department_id: str
    department_name: str


@dataclass(frozen=True)
class PrincipalRoleSnapshot:
    """One tenant user with every role assignment, loaded for bulk discovery."""

    principal_id: str
    tenant_roles: tuple[RoleRef, ...] = ()
    department_roles: tuple[DepartmentRoleRef, ...] = ()

    def department_names(self) -> set[str]:
        """Trimmed names of every department the user holds an assignment in."""
        return {d.department_name.strip() for d in self.department_roles}


@dataclass(frozen=True)
class EligibleRecipient:
    """A principal that holds a capability, with the first role/department it matched through."""

    principal_id: str
    role_name: str
    department_name: str | None = None


@dataclass(frozen=True)
class UserPermissionResult:
    """Per-user override read-model."""

    id: str
    user_id: str
    permission_id: str
    module: str
    action: str
    allowed: bool
    expires_at: datetime | None = None
    granted_by: str | None = None
    granted_at: datetime | None = None
    reason: str | None = None


@dataclass(frozen=True)
class CapabilityDecision:
    """Outcome of one resolution, with the stage that decided it (for diagnostics).

    expires_at is the earliest expiry among the overrides that decided it;
    past that instant the same question may get a different answer.
    """

    allowed: bool
    stage: str
    role_id: str | None = None
    rejected_role_ids: tuple[str, ...] = field(default_factory=tuple)
    expires_at: datetime | None = None


@dataclass(frozen=True)
class RolePermissionResult:
    """A role grant (RolePermission row) with its capability code."""

    id: str
    role_id: str
    permission_id: str
    module: str
    action: str
    allowed: bool


@dataclass(frozen=True)
class RolePermissionChange:
    """One entry of a batch role-grant update."""

    role_id: str
    capability: str
    allowed: bool


@dataclass(frozen=True)
class OverrideChange:
    """One entry of a batch per-user override update."""

    user_id: str
    capability: str
    allowed: bool
    expires_at: datetime | None = None
    reason: str | None = None
