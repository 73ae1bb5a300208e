"""Audit finding workflow transitions.

Each route runs the transition in the request transaction, commits, and only
then routes the notifications the transition queued.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from auditflow.api.v1.dependencies import (
    commit_then_flush,
    get_commit_findings_use_case,
    get_db,
    get_finish_categorization_use_case,
    get_finish_review_use_case,
    get_notification_router,
    get_review_finding_use_case,
    require_capability,
)
from auditflow.application.services.notification_router import NotificationRouter
from auditflow.application.use_cases.workflows.findings import (
    CommitFindingsUseCase,
    FinishCategorizationUseCase,
    FinishFindingsReviewUseCase,
    ReviewFindingUseCase,
)
from auditflow.core.limiter import limit_transitions
from auditflow.domain.entities.principal import Principal
from auditflow.schemas.workflow import (
    DeliverySummary,
    FindingResponse,
    FindingReviewRequest,
    FindingReviewResponse,
    FindingTransitionRequest,
    FindingsTransitionResponse,
)

router = APIRouter()


def _findings_response(findings, reports) -> FindingsTransitionResponse:
    return FindingsTransitionResponse(
        findings=[FindingResponse.model_validate(f) for f in findings],
        notifications=[DeliverySummary.from_report(r) for r in reports],
    )


@router.post(
    "/audits/{audit_id}/findings/commit",
    response_model=FindingsTransitionResponse,
)
@limit_transitions
async def commit_findings(
    request: Request,
    audit_id: str,
    principal: Annotated[Principal, Depends(require_capability("auditFinding:commit"))],
    db: Annotated[AsyncSession, Depends(get_db)],
    use_case: Annotated[CommitFindingsUseCase, Depends(get_commit_findings_use_case)],
    router_svc: Annotated[NotificationRouter, Depends(get_notification_router)],
    body: FindingTransitionRequest | None = None,
):
    """Send pending findings to department reviewers (409 if nobody can review them)."""
    department = body.department if body else None
    findings, reports = await commit_then_flush(
        db,
        router_svc,
        use_case.execute(principal.tenant_id, audit_id, principal.id, department),
    )
    return _findings_response(findings, reports)


@router.post(
    "/audits/{audit_id}/findings/finish-review",
    response_model=FindingsTransitionResponse,
)
@limit_transitions
async def finish_findings_review(
    request: Request,
    audit_id: str,
    principal: Annotated[Principal, Depends(require_capability("auditFinding:review"))],
    db: Annotated[AsyncSession, Depends(get_db)],
    use_case: Annotated[FinishFindingsReviewUseCase, Depends(get_finish_review_use_case)],
    router_svc: Annotated[NotificationRouter, Depends(get_notification_router)],
    body: FindingTransitionRequest | None = None,
):
    department = body.department if body else None
    findings, reports = await commit_then_flush(
        db,
        router_svc,
        use_case.execute(principal.tenant_id, audit_id, principal.id, department),
    )
    return _findings_response(findings, reports)


@router.post(
    "/audits/{audit_id}/findings/finish-categorization",
    response_model=FindingsTransitionResponse,
)
@limit_transitions
async def finish_categorization(
    request: Request,
    audit_id: str,
    principal: Annotated[
        Principal, Depends(require_capability("auditFinding:categorize"))
    ],
    db: Annotated[AsyncSession, Depends(get_db)],
    use_case: Annotated[
        FinishCategorizationUseCase, Depends(get_finish_categorization_use_case)
    ],
    router_svc: Annotated[NotificationRouter, Depends(get_notification_router)],
    body: FindingTransitionRequest | None = None,
):
    department = body.department if body else None
    findings, reports = await commit_then_flush(
        db,
        router_svc,
        use_case.execute(principal.tenant_id, audit_id, principal.id, department),
    )
    return _findings_response(findings, reports)


@router.post("/findings/{finding_id}/review", response_model=FindingReviewResponse)
@limit_transitions
async def review_finding(
    request: Request,
    finding_id: str,
    body: FindingReviewRequest,
    principal: Annotated[Principal, Depends(require_capability("auditFinding:review"))],
    db: Annotated[AsyncSession, Depends(get_db)],
    use_case: Annotated[ReviewFindingUseCase, Depends(get_review_finding_use_case)],
    router_svc: Annotated[NotificationRouter, Depends(get_notification_router)],
):
    """Accept or refuse one finding; its creator is notified."""
    finding, reports = await commit_then_flush(
        db,
        router_svc,
        use_case.execute(
            principal.tenant_id, finding_id, principal.id, body.status, body.feedback
        ),
    )
    return FindingReviewResponse(
        finding=FindingResponse.model_validate(finding),
        notifications=[DeliverySummary.from_report(r) for r in reports],
    )
