"""Persistence models: ORM entities and mixins."""

from auditflow.infrastructure.persistence.models.audit import (
    Audit,
    AuditFinding,
    AuditProgram,
)
from auditflow.infrastructure.persistence.models.department import Department
from auditflow.infrastructure.persistence.models.mixins import (
    CreatedAtMixin,
    CuidMixin,
    MultiTenantModel,
    TenantMixin,
    TimestampMixin,
)
from auditflow.infrastructure.persistence.models.notification import Notification
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

__all__ = [
    "Tenant",
    "User",
    "Department",
    "Role",
    "Permission",
    "RolePermission",
    "UserRole",
    "UserDepartmentRole",
    "UserPermission",
    "Notification",
    "AuditProgram",
    "Audit",
    "AuditFinding",
    "CuidMixin",
    "CreatedAtMixin",
    "TenantMixin",
    "TimestampMixin",
    "MultiTenantModel",
]
