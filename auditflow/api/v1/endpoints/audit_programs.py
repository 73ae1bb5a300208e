"""Audit program approval transitions: commit, approve, reject."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from auditflow.api.v1.dependencies import (
    commit_then_flush,
    get_audit_program_workflow,
    get_db,
    get_notification_router,
    require_capability,
)
from auditflow.application.services.notification_router import NotificationRouter
from auditflow.application.use_cases.workflows.audit_programs import (
    AuditProgramWorkflow,
)
from auditflow.core.limiter import limit_transitions
from auditflow.domain.entities.principal import Principal
from auditflow.schemas.workflow import (
    AuditProgramDecisionRequest,
    AuditProgramResponse,
    AuditProgramTransitionResponse,
    DeliverySummary,
)

router = APIRouter()


def _program_response(program, reports) -> AuditProgramTransitionResponse:
    return AuditProgramTransitionResponse(
        program=AuditProgramResponse.model_validate(program),
        notifications=[DeliverySummary.from_report(r) for r in reports],
    )


@router.post("/{program_id}/commit", response_model=AuditProgramTransitionResponse)
@limit_transitions
async def commit_audit_program(
    request: Request,
    program_id: str,
    principal: Annotated[Principal, Depends(require_capability("auditProgram:commit"))],
    db: Annotated[AsyncSession, Depends(get_db)],
    workflow: Annotated[AuditProgramWorkflow, Depends(get_audit_program_workflow)],
    router_svc: Annotated[NotificationRouter, Depends(get_notification_router)],
):
    """Submit a DRAFT program for approval; approvers are notified."""
    program, reports = await commit_then_flush(
        db, router_svc, workflow.commit(principal.tenant_id, program_id, principal.id)
    )
    return _program_response(program, reports)


@router.post("/{program_id}/approve", response_model=AuditProgramTransitionResponse)
@limit_transitions
async def approve_audit_program(
    request: Request,
    program_id: str,
    principal: Annotated[Principal, Depends(require_capability("auditProgram:approve"))],
    db: Annotated[AsyncSession, Depends(get_db)],
    workflow: Annotated[AuditProgramWorkflow, Depends(get_audit_program_workflow)],
    router_svc: Annotated[NotificationRouter, Depends(get_notification_router)],
    body: AuditProgramDecisionRequest | None = None,
):
    program, reports = await commit_then_flush(
        db,
        router_svc,
        workflow.approve(
            principal.tenant_id, program_id, principal.id, body.comment if body else None
        ),
    )
    return _program_response(program, reports)


@router.post("/{program_id}/reject", response_model=AuditProgramTransitionResponse)
@limit_transitions
async def reject_audit_program(
    request: Request,
    program_id: str,
    principal: Annotated[Principal, Depends(require_capability("auditProgram:approve"))],
    db: Annotated[AsyncSession, Depends(get_db)],
    workflow: Annotated[AuditProgramWorkflow, Depends(get_audit_program_workflow)],
    router_svc: Annotated[NotificationRouter, Depends(get_notification_router)],
    body: AuditProgramDecisionRequest | None = None,
):
    """Send the program back to DRAFT; its creators are notified with the comment."""
    program, reports = await commit_then_flush(
        db,
        router_svc,
        workflow.reject(
            principal.tenant_id, program_id, principal.id, body.comment if body else None
        ),
    )
    return _program_response(program, reports)
