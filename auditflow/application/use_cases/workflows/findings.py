"""Audit finding workflow use cases: commit, review, finish review, finish categorization.

Each use case mutates state through the repository (inside the caller's
transaction) and returns a NotificationOutbox for the caller to flush after
commit.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from auditflow.application.dtos.notification import TransitionContext
from auditflow.application.dtos.workflow import AuditResult, FindingResult
from auditflow.application.interfaces.repositories import IFindingRepository
from auditflow.application.interfaces.services import INotificationRouter
from auditflow.application.use_cases.workflows.outbox import (
    NotificationOutbox,
    TransitionOutcome,
)
from auditflow.domain.enums import FindingStatus, TriggerType
from auditflow.domain.exceptions import (
    InvalidTransitionException,
    ResourceNotFoundException,
    ValidationException,
)
from auditflow.shared.telemetry.logging import get_logger
from auditflow.shared.utils.datetime import utc_now

logger = get_logger(__name__)

_REVIEW_DECISIONS = (FindingStatus.ACCEPTED.value, FindingStatus.REFUSED.value)


def categorization_summary(
    findings: Iterable[FindingResult], department: str | None = None
) -> str:
    """Human summary of finding categories, e.g.
    'Summary for IT: 3 total findings categorized as 2 compliance, 1 improvement.'
    """
    counts: dict[str, int] = {}
    total = 0
    for finding in findings:
        total += 1
        category = finding.category or "UNCATEGORIZED"
        counts[category] = counts.get(category, 0) + 1
    details = ", ".join(f"{count} {category.lower()}" for category, count in counts.items())
    scope = f" for {department}" if department else ""
    return f"Summary{scope}: {total} total findings categorized as {details}."


def _distinct(values: Iterable[str | None]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(v for v in values if v and v.strip()))


def _audit_attributes(audit: AuditResult, department: str | None) -> dict[str, Any]:
    return {
        "audit_id": audit.id,
        "audit_no": audit.audit_no,
        "program_id": audit.program_id,
        "program_title": audit.program_title,
        "department": department,
    }


async def _load_audit(
    finding_repo: IFindingRepository, tenant_id: str, audit_id: str
) -> AuditResult:
    audit = await finding_repo.get_audit(audit_id)
    if audit is None or audit.tenant_id != tenant_id:
        raise ResourceNotFoundException("audit", audit_id)
    return audit


class CommitFindingsUseCase:
    """PENDING -> UNDER_REVIEW; hands the findings to department reviewers."""

    def __init__(
        self, finding_repo: IFindingRepository, router: INotificationRouter
    ) -> None:
        self._finding_repo = finding_repo
        self._router = router

    async def execute(
        self,
        tenant_id: str,
        audit_id: str,
        actor_id: str,
        department: str | None = None,
    ) -> TransitionOutcome[list[FindingResult]]:
        """Commit pending findings of an audit (optionally one department).

        Raises:
            ResourceNotFoundException: audit not found in tenant.
            InvalidTransitionException: no pending findings, or none of them names a
                department to route the review to.
            EmptyAudienceException: nobody holds auditFinding:read for the department(s);
                nothing is changed in that case.
        """
        audit = await _load_audit(self._finding_repo, tenant_id, audit_id)
        findings = await self._finding_repo.list_findings(
            audit_id, department=department, status=FindingStatus.PENDING.value
        )
        if not findings:
            raise InvalidTransitionException("audit", audit_id, "No pending findings to commit")

        departments = (department,) if department else _distinct(f.department for f in findings)
        if not departments:
            raise InvalidTransitionException(
                "audit", audit_id, "Pending findings have no department to route review to"
            )
        context = TransitionContext(
            tenant_id=tenant_id,
            actor_id=actor_id,
            subject_id=audit_id,
            departments=departments,
            attributes={
                **_audit_attributes(audit, department),
                "finding_count": len(findings),
            },
        )
        # Checked before the update so an unroutable hand-off leaves findings PENDING.
        await self._router.ensure_audience(TriggerType.FINDINGS_COMMITTED, context)

        await self._finding_repo.set_status(
            [f.id for f in findings], FindingStatus.UNDER_REVIEW.value
        )
        outbox = NotificationOutbox()
        outbox.add(TriggerType.FINDINGS_COMMITTED, context)
        logger.info(
            "Committed %d findings of audit %s for review (departments=%s)",
            len(findings),
            audit_id,
            list(departments),
        )
        return TransitionOutcome(findings, outbox)


class ReviewFindingUseCase:
    """Reviewer accepts or refuses one finding; its creator is told."""

    def __init__(self, finding_repo: IFindingRepository) -> None:
        self._finding_repo = finding_repo

    async def execute(
        self,
        tenant_id: str,
        finding_id: str,
        actor_id: str,
        status: str,
        feedback: str | None = None,
    ) -> TransitionOutcome[FindingResult]:
        if status not in _REVIEW_DECISIONS:
            raise ValidationException(
                f"Invalid review status {status!r}: expected ACCEPTED or REFUSED",
                field="status",
            )
        finding = await self._finding_repo.get_finding(finding_id)
        if finding is None:
            raise ResourceNotFoundException("finding", finding_id)
        audit = await self._finding_repo.get_audit(finding.audit_id)
        if audit is None or audit.tenant_id != tenant_id:
            raise ResourceNotFoundException("finding", finding_id)
        if finding.status == FindingStatus.PENDING.value:
            raise InvalidTransitionException(
                "finding", finding_id, "Finding has not been committed for review"
            )

        updated = await self._finding_repo.record_review(
            finding_id, status, feedback, utc_now()
        )
        outbox = NotificationOutbox()
        if finding.created_by_id:
            outbox.add(
                TriggerType.FINDING_REVIEWED,
                TransitionContext(
                    tenant_id=tenant_id,
                    actor_id=actor_id,
                    subject_id=finding_id,
                    target_user_ids=(finding.created_by_id,),
                    attributes={
                        **_audit_attributes(audit, finding.department),
                        "finding_id": finding_id,
                        "finding_title": finding.title,
                        "status": status,
                        "feedback": feedback,
                    },
                ),
            )
        return TransitionOutcome(updated, outbox)


class FinishFindingsReviewUseCase:
    """Marks an audit's findings reviewed and tells their creators."""

    def __init__(self, finding_repo: IFindingRepository) -> None:
        self._finding_repo = finding_repo

    async def execute(
        self,
        tenant_id: str,
        audit_id: str,
        actor_id: str,
        department: str | None = None,
    ) -> TransitionOutcome[list[FindingResult]]:
        audit = await _load_audit(self._finding_repo, tenant_id, audit_id)
        findings = await self._finding_repo.list_findings(audit_id, department=department)
        if not findings:
            raise InvalidTransitionException("audit", audit_id, "No findings to finish review")

        await self._finding_repo.mark_reviewed([f.id for f in findings], utc_now())
        creators = _distinct(f.created_by_id for f in findings)
        outbox = NotificationOutbox()
        if creators:
            outbox.add(
                TriggerType.FINDINGS_REVIEW_FINISHED,
                TransitionContext(
                    tenant_id=tenant_id,
                    actor_id=actor_id,
                    subject_id=audit_id,
                    target_user_ids=creators,
                    attributes=_audit_attributes(audit, department),
                ),
            )
        else:
            logger.warning("Finished review of audit %s but no finding has a creator", audit_id)
        return TransitionOutcome(findings, outbox)


class FinishCategorizationUseCase:
    """Marks categorization finished; tells reviewers and audit program creators."""

    def __init__(self, finding_repo: IFindingRepository) -> None:
        self._finding_repo = finding_repo

    async def execute(
        self,
        tenant_id: str,
        audit_id: str,
        actor_id: str,
        department: str | None = None,
    ) -> TransitionOutcome[list[FindingResult]]:
        audit = await _load_audit(self._finding_repo, tenant_id, audit_id)
        findings = await self._finding_repo.list_findings(audit_id, department=department)
        if not findings:
            raise InvalidTransitionException(
                "audit", audit_id, "No findings to finish categorization"
            )

        await self._finding_repo.mark_categorization_finished(
            [f.id for f in findings], utc_now()
        )
        summary = categorization_summary(findings, department)
        departments = (department,) if department else _distinct(f.department for f in findings)
        outbox = NotificationOutbox()
        outbox.add(
            TriggerType.FINDINGS_CATEGORIZATION_FINISHED,
            TransitionContext(
                tenant_id=tenant_id,
                actor_id=actor_id,
                subject_id=audit_id,
                departments=departments,
                attributes={
                    **_audit_attributes(audit, department),
                    "categorization_summary": summary,
                },
            ),
        )
        return TransitionOutcome(findings, outbox)
