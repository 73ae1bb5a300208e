"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for DB sessions, the current principal, capability
gates and application services.
"""

from .auth import get_current_principal, require_capability
from .db import commit_then_flush, get_db, get_db_transactional
from .services import (
    get_audit_program_workflow,
    get_authorization_service,
    get_commit_findings_use_case,
    get_finish_categorization_use_case,
    get_finish_review_use_case,
    get_hod_projection,
    get_inbox_service,
    get_notification_router,
    get_override_service,
    get_permission_store,
    get_recipient_discovery,
    get_resolution_engine,
    get_review_finding_use_case,
    get_role_permission_service,
)

__all__ = [
    "commit_then_flush",
    "get_audit_program_workflow",
    "get_authorization_service",
    "get_commit_findings_use_case",
    "get_current_principal",
    "get_db",
    "get_db_transactional",
    "get_finish_categorization_use_case",
    "get_finish_review_use_case",
    "get_hod_projection",
    "get_inbox_service",
    "get_notification_router",
    "get_override_service",
    "get_permission_store",
    "get_recipient_discovery",
    "get_resolution_engine",
    "get_review_finding_use_case",
    "get_role_permission_service",
    "require_capability",
]
