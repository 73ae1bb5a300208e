"""Composition root: builds application services from infrastructure.

Routes depend only on these providers. Read paths share the request session
from get_db. Override and role-grant writes use that same session and commit
it themselves before invalidating cached decisions; inbox writes use
get_db_transactional.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from auditflow.application.services.authorization_service import AuthorizationService
from auditflow.application.services.hod_projection import DepartmentHodProjection
from auditflow.application.services.notification_inbox import NotificationInboxService
from auditflow.application.services.notification_router import NotificationRouter
from auditflow.application.services.override_service import PermissionOverrideService
from auditflow.application.services.permission_resolution import (
    PermissionResolutionEngine,
)
from auditflow.application.services.recipient_discovery import (
    RecipientDiscoveryService,
)
from auditflow.application.services.role_permission_service import (
    RolePermissionService,
)
from auditflow.application.use_cases.workflows.audit_programs import (
    AuditProgramWorkflow,
)
from auditflow.application.use_cases.workflows.findings import (
    CommitFindingsUseCase,
    FinishCategorizationUseCase,
    FinishFindingsReviewUseCase,
    ReviewFindingUseCase,
)
from auditflow.core.config import get_settings
from auditflow.infrastructure.persistence.database import (
    get_db,
    get_db_transactional,
    get_session_factory,
)
from auditflow.infrastructure.persistence.repositories import (
    AuditProgramRepository,
    DepartmentRepository,
    FindingRepository,
    NotificationRepository,
    NotificationStore,
    RolePermissionRepository,
    SqlPermissionStore,
    UserPermissionRepository,
)


async def get_permission_store(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SqlPermissionStore:
    """Permission store on the request session (reads)."""
    return SqlPermissionStore(db)


def get_resolution_engine(
    store: Annotated[SqlPermissionStore, Depends(get_permission_store)],
) -> PermissionResolutionEngine:
    return PermissionResolutionEngine(store)


def get_authorization_service(
    request: Request,
    engine: Annotated[PermissionResolutionEngine, Depends(get_resolution_engine)],
) -> AuthorizationService:
    """Engine plus the decision cache from app.state (None when Redis is disabled)."""
    cache = getattr(request.app.state, "cache", None)
    return AuthorizationService(
        engine=engine,
        cache=cache,
        cache_ttl=get_settings().cache_ttl_permissions,
    )


def get_recipient_discovery(
    store: Annotated[SqlPermissionStore, Depends(get_permission_store)],
) -> RecipientDiscoveryService:
    return RecipientDiscoveryService(store)


def get_notification_router(
    request: Request,
    discovery: Annotated[RecipientDiscoveryService, Depends(get_recipient_discovery)],
) -> NotificationRouter:
    """Router with one short transaction per notification and the app's real-time dispatcher."""
    return NotificationRouter(
        discovery=discovery,
        store=NotificationStore(get_session_factory()),
        dispatcher=getattr(request.app.state, "realtime_dispatcher", None),
        concurrency=get_settings().notification_fanout_concurrency,
    )


async def get_override_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    store: Annotated[SqlPermissionStore, Depends(get_permission_store)],
    authorization: Annotated[AuthorizationService, Depends(get_authorization_service)],
) -> PermissionOverrideService:
    """Override admin on the request session; the service commits, then invalidates."""
    return PermissionOverrideService(
        store=store,
        overrides=UserPermissionRepository(db),
        uow=db,
        authorization=authorization,
    )


async def get_role_permission_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    store: Annotated[SqlPermissionStore, Depends(get_permission_store)],
    authorization: Annotated[AuthorizationService, Depends(get_authorization_service)],
) -> RolePermissionService:
    return RolePermissionService(
        store=store,
        grants=RolePermissionRepository(db),
        uow=db,
        authorization=authorization,
    )


async def get_inbox_service(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> NotificationInboxService:
    return NotificationInboxService(
        NotificationRepository(db),
        default_page_size=get_settings().notification_page_size,
    )


async def get_finding_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> FindingRepository:
    return FindingRepository(db)


def get_commit_findings_use_case(
    finding_repo: Annotated[FindingRepository, Depends(get_finding_repo)],
    router: Annotated[NotificationRouter, Depends(get_notification_router)],
) -> CommitFindingsUseCase:
    return CommitFindingsUseCase(finding_repo, router)


def get_review_finding_use_case(
    finding_repo: Annotated[FindingRepository, Depends(get_finding_repo)],
) -> ReviewFindingUseCase:
    return ReviewFindingUseCase(finding_repo)


def get_finish_review_use_case(
    finding_repo: Annotated[FindingRepository, Depends(get_finding_repo)],
) -> FinishFindingsReviewUseCase:
    return FinishFindingsReviewUseCase(finding_repo)


def get_finish_categorization_use_case(
    finding_repo: Annotated[FindingRepository, Depends(get_finding_repo)],
) -> FinishCategorizationUseCase:
    return FinishCategorizationUseCase(finding_repo)


async def get_audit_program_workflow(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AuditProgramWorkflow:
    return AuditProgramWorkflow(AuditProgramRepository(db))


async def get_hod_projection(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> DepartmentHodProjection:
    return DepartmentHodProjection(DepartmentRepository(db))
