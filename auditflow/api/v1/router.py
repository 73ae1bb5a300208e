"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from auditflow.api.v1.dependencies.
"""

from fastapi import APIRouter

from auditflow.api.v1.endpoints import (
    audit_programs,
    departments,
    findings,
    health,
    notifications,
    permissions,
    role_permissions,
    user_permissions,
    websocket as ws_endpoint,
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(
    permissions.router, prefix="/permissions", tags=["permissions"]
)
api_router.include_router(
    permissions.recipients_router, prefix="/recipients", tags=["permissions"]
)
api_router.include_router(
    user_permissions.router, prefix="/users", tags=["user-permissions"]
)
api_router.include_router(
    role_permissions.router, prefix="/role-permissions", tags=["role-permissions"]
)
api_router.include_router(
    notifications.router, prefix="/notifications", tags=["notifications"]
)
api_router.include_router(findings.router, tags=["findings"])
api_router.include_router(
    audit_programs.router, prefix="/audit-programs", tags=["audit-programs"]
)
api_router.include_router(
    departments.router, prefix="/departments", tags=["departments"]
)
api_router.include_router(ws_endpoint.router, tags=["websocket"])
