"""Repository interfaces (ports) for the application layer.

Protocols define the contracts the permission engine, discovery, router and
workflow use cases need from persistence (DIP). SQLAlchemy implementations
live in auditflow.infrastructure.persistence.repositories.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Any, Protocol

from auditflow.application.dtos.notification import (
    NotificationFilters,
    NotificationPage,
    NotificationResult,
    NotificationStats,
)
from auditflow.application.dtos.permission import (
    PermissionResult,
    PrincipalRoleSnapshot,
    RolePermissionResult,
    RoleRef,
    UserPermissionResult,
)
from auditflow.application.dtos.workflow import (
    AuditProgramResult,
    AuditResult,
    FindingResult,
)
from auditflow.domain.entities.principal import PermissionOverride, Principal


class IUnitOfWork(Protocol):
    """Commits the writes of one request (an AsyncSession satisfies it)."""

    async def commit(self) -> None: ...


class IPermissionStore(Protocol):
    """Read-only access to the capability catalog and role/override assignments."""

    async def get_permission(self, module: str, action: str) -> PermissionResult | None:
        """Return the catalog entry for module:action, or None."""

    async def tenant_exists(self, tenant_id: str) -> bool:
        """Return True if the tenant row exists."""

    async def principal_exists(self, user_id: str, tenant_id: str) -> bool:
        """Return True if the user exists in the tenant."""

    async def load_principal(self, user_id: str, tenant_id: str) -> Principal | None:
        """Build the Principal for a tenant user from stored role assignments."""

    async def get_active_overrides(
        self, user_id: str, permission_id: str, now: datetime
    ) -> list[PermissionOverride]:
        """Return overrides for user+permission whose expires_at is null or after now."""

    async def get_roles(self, role_ids: Sequence[str]) -> list[RoleRef]:
        """Return the roles that exist among role_ids (any tenant)."""

    async def find_granting_role(
        self, role_ids: Sequence[str], permission_id: str, tenant_id: str
    ) -> RoleRef | None:
        """Return one role among role_ids, owned by tenant_id, with an allowed grant."""

    async def get_granting_role_ids(self, permission_id: str, tenant_id: str) -> set[str]:
        """Return ids of tenant roles holding an allowed grant for the permission."""

    async def list_tenant_principals(self, tenant_id: str) -> list[PrincipalRoleSnapshot]:
        """Return every active user in the tenant with tenant-wide and department roles."""


class IUserPermissionRepository(Protocol):
    """Per-user override administration (upsert / delete / list)."""

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
        """Create or replace the override for user+permission."""

    async def delete_override(self, user_id: str, permission_id: str) -> bool:
        """Delete the override; return False if none existed."""

    async def list_for_user(self, user_id: str) -> list[UserPermissionResult]:
        """Return all overrides (including expired) ordered by module, action."""

    async def list_for_tenant(self, tenant_id: str) -> list[UserPermissionResult]:
        """Return every override held by users of the tenant, ordered by user then capability."""


class IRolePermissionRepository(Protocol):
    """Role grant administration (RolePermission rows)."""

    async def upsert_grant(
        self, role_id: str, permission_id: str, *, allowed: bool
    ) -> RolePermissionResult:
        """Create or replace the grant of permission to role."""


class INotificationStore(Protocol):
    """Notification persistence used by the router (one durable record per recipient)."""

    async def create_notification(
        self,
        *,
        type: str,
        title: str,
        message: str,
        tenant_id: str,
        target_user_id: str,
        link: str | None,
        metadata: dict[str, Any] | None,
    ) -> NotificationResult:
        """Persist and return one notification."""


class INotificationInbox(Protocol):
    """Recipient-facing notification queries and updates, always scoped to the user."""

    async def list_for_user(
        self, user_id: str, filters: NotificationFilters
    ) -> NotificationPage: ...

    async def mark_read(self, user_id: str, notification_ids: Sequence[str]) -> int: ...

    async def mark_all_read(self, user_id: str) -> int: ...

    async def delete_many(self, user_id: str, notification_ids: Sequence[str]) -> int: ...

    async def stats(self, user_id: str) -> NotificationStats: ...


class IFindingRepository(Protocol):
    """Audit finding persistence for workflow transitions."""

    async def get_audit(self, audit_id: str) -> AuditResult | None: ...

    async def get_finding(self, finding_id: str) -> FindingResult | None: ...

    async def list_findings(
        self,
        audit_id: str,
        department: str | None = None,
        status: str | None = None,
    ) -> list[FindingResult]: ...

    async def set_status(
        self, finding_ids: Sequence[str], status: str
    ) -> int: ...

    async def record_review(
        self, finding_id: str, status: str, feedback: str | None, reviewed_at: datetime
    ) -> FindingResult: ...

    async def mark_reviewed(self, finding_ids: Sequence[str], reviewed_at: datetime) -> int: ...

    async def mark_categorization_finished(
        self, finding_ids: Sequence[str], finished_at: datetime
    ) -> int: ...


class IAuditProgramRepository(Protocol):
    """Audit program persistence for workflow transitions."""

    async def get(self, program_id: str, tenant_id: str) -> AuditProgramResult | None: ...

    async def update_status(
        self, program_id: str, status: str, **fields: Any
    ) -> AuditProgramResult: ...


class IDepartmentRepository(Protocol):
    """Department HOD pointer access for the projection/consistency check."""

    async def list_hod_pointers(self, tenant_id: str) -> dict[str, tuple[str, str | None]]:
        """Return department_id -> (name, stored hod_id)."""

    async def list_hod_assignments(
        self, tenant_id: str, role_names: Sequence[str]
    ) -> dict[str, list[tuple[str, bool]]]:
        """Return department_id -> [(user_id, is_primary_role)] for HOD-named roles."""

    async def set_hod_pointer(self, department_id: str, hod_id: str | None) -> None: ...
