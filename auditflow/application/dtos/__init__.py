"""Application DTOs (plain dataclasses, no ORM)."""

from auditflow.application.dtos.notification import (
    AudienceMember,
    DeliveryReport,
    NotificationFilters,
    NotificationPage,
    NotificationResult,
    NotificationStats,
    PartialDeliveryFailure,
    TransitionContext,
)
from auditflow.application.dtos.permission import (
    CapabilityDecision,
    DepartmentRoleRef,
    EligibleRecipient,
    PermissionResult,
    PrincipalRoleSnapshot,
    RoleRef,
    UserPermissionResult,
)
from auditflow.application.dtos.workflow import (
    AuditProgramResult,
    AuditResult,
    FindingResult,
)

__all__ = [
    "AudienceMember",
    "AuditProgramResult",
    "AuditResult",
    "CapabilityDecision",
    "DeliveryReport",
    "DepartmentRoleRef",
    "EligibleRecipient",
    "FindingResult",
    "NotificationFilters",
    "NotificationPage",
    "NotificationResult",
    "NotificationStats",
    "PartialDeliveryFailure",
    "PermissionResult",
    "PrincipalRoleSnapshot",
    "RoleRef",
    "TransitionContext",
    "UserPermissionResult",
]
