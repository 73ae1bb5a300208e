"""Ports implemented by infrastructure (Protocols)."""

from auditflow.application.interfaces.repositories import (
    IAuditProgramRepository,
    IDepartmentRepository,
    IFindingRepository,
    INotificationInbox,
    INotificationStore,
    IPermissionStore,
    IUserPermissionRepository,
)
from auditflow.application.interfaces.services import (
    ICacheService,
    ICapabilityChecker,
    INotificationRouter,
    IRealtimeDispatcher,
    IRecipientDiscovery,
)

__all__ = [
    "IAuditProgramRepository",
    "ICacheService",
    "ICapabilityChecker",
    "IDepartmentRepository",
    "IFindingRepository",
    "INotificationInbox",
    "INotificationRouter",
    "INotificationStore",
    "IPermissionStore",
    "IRealtimeDispatcher",
    "IRecipientDiscovery",
    "IUserPermissionRepository",
]
