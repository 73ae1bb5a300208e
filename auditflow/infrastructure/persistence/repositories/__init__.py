"""Persistence repositories. Re-exports for dependency injection."""

from auditflow.infrastructure.persistence.repositories.audit_program_repo import (
    AuditProgramRepository,
)
from auditflow.infrastructure.persistence.repositories.base import BaseRepository
from auditflow.infrastructure.persistence.repositories.department_repo import (
    DepartmentRepository,
)
from auditflow.infrastructure.persistence.repositories.finding_repo import FindingRepository
from auditflow.infrastructure.persistence.repositories.notification_repo import (
    NotificationRepository,
    NotificationStore,
)
from auditflow.infrastructure.persistence.repositories.permission_store import (
    SqlPermissionStore,
)
from auditflow.infrastructure.persistence.repositories.role_permission_repo import (
    RolePermissionRepository,
)
from auditflow.infrastructure.persistence.repositories.user_permission_repo import (
    UserPermissionRepository,
)

__all__ = [
    "AuditProgramRepository",
    "BaseRepository",
    "DepartmentRepository",
    "FindingRepository",
    "NotificationRepository",
    "NotificationStore",
    "RolePermissionRepository",
    "SqlPermissionStore",
    "UserPermissionRepository",
]
