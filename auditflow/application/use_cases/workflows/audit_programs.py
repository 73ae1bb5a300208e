"""Audit program approval workflow: commit, approve, reject."""

from __future__ import annotations

from auditflow.application.dtos.notification import TransitionContext
from auditflow.application.dtos.workflow import AuditProgramResult
from auditflow.application.interfaces.repositories import IAuditProgramRepository
from auditflow.application.use_cases.workflows.outbox import (
    NotificationOutbox,
    TransitionOutcome,
)
from auditflow.domain.enums import AuditProgramStatus, TriggerType
from auditflow.domain.exceptions import (
    InvalidTransitionException,
    ResourceNotFoundException,
)
from auditflow.shared.telemetry.logging import get_logger
from auditflow.shared.utils.datetime import utc_now

logger = get_logger(__name__)


class AuditProgramWorkflow:
    """DRAFT -> UNDER_REVIEW -> APPROVED, or UNDER_REVIEW -> DRAFT on rejection."""

    def __init__(self, program_repo: IAuditProgramRepository) -> None:
        self._program_repo = program_repo

    async def _load(self, tenant_id: str, program_id: str) -> AuditProgramResult:
        program = await self._program_repo.get(program_id, tenant_id)
        if program is None:
            raise ResourceNotFoundException("audit program", program_id)
        return program

    @staticmethod
    def _context(
        program: AuditProgramResult, actor_id: str, comment: str | None = None
    ) -> TransitionContext:
        return TransitionContext(
            tenant_id=program.tenant_id,
            actor_id=actor_id,
            subject_id=program.id,
            attributes={
                "program_id": program.id,
                "program_title": program.title,
                "created_by": program.created_by_id,
                "comment": comment,
            },
        )

    async def commit(
        self, tenant_id: str, program_id: str, actor_id: str
    ) -> TransitionOutcome[AuditProgramResult]:
        """Submit a DRAFT program with at least one audit for approval."""
        program = await self._load(tenant_id, program_id)
        if program.status != AuditProgramStatus.DRAFT.value:
            raise InvalidTransitionException(
                "audit program", program_id, "Only DRAFT audit programs can be committed"
            )
        if program.audit_count == 0:
            raise InvalidTransitionException(
                "audit program",
                program_id,
                "Audit program must have at least one audit before committing",
            )
        updated = await self._program_repo.update_status(
            program_id, AuditProgramStatus.UNDER_REVIEW.value, committed_at=utc_now()
        )
        outbox = NotificationOutbox()
        outbox.add(TriggerType.AUDIT_PROGRAM_COMMITTED, self._context(program, actor_id))
        logger.info("Audit program %s committed for approval by %s", program_id, actor_id)
        return TransitionOutcome(updated, outbox)

    async def approve(
        self,
        tenant_id: str,
        program_id: str,
        actor_id: str,
        comment: str | None = None,
    ) -> TransitionOutcome[AuditProgramResult]:
        program = await self._load(tenant_id, program_id)
        if program.status != AuditProgramStatus.UNDER_REVIEW.value:
            raise InvalidTransitionException(
                "audit program",
                program_id,
                "Only audit programs under review can be approved",
            )
        updated = await self._program_repo.update_status(
            program_id,
            AuditProgramStatus.APPROVED.value,
            approved_by_id=actor_id,
            approved_at=utc_now(),
            approval_comment=comment,
        )
        outbox = NotificationOutbox()
        outbox.add(
            TriggerType.AUDIT_PROGRAM_APPROVED, self._context(program, actor_id, comment)
        )
        logger.info("Audit program %s approved by %s", program_id, actor_id)
        return TransitionOutcome(updated, outbox)

    async def reject(
        self,
        tenant_id: str,
        program_id: str,
        actor_id: str,
        comment: str | None = None,
    ) -> TransitionOutcome[AuditProgramResult]:
        """Send an UNDER_REVIEW program back to DRAFT with the rejection reason."""
        program = await self._load(tenant_id, program_id)
        if program.status != AuditProgramStatus.UNDER_REVIEW.value:
            raise InvalidTransitionException(
                "audit program",
                program_id,
                "Only audit programs under review can be rejected",
            )
        updated = await self._program_repo.update_status(
            program_id,
            AuditProgramStatus.DRAFT.value,
            approved_by_id=None,
            approved_at=None,
            approval_comment=comment,
        )
        outbox = NotificationOutbox()
        outbox.add(
            TriggerType.AUDIT_PROGRAM_REJECTED, self._context(program, actor_id, comment)
        )
        logger.info("Audit program %s rejected by %s", program_id, actor_id)
        return TransitionOutcome(updated, outbox)
