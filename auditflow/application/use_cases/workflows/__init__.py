"""Audit, finding and document workflow transitions."""

from auditflow.application.use_cases.workflows.audit_programs import (
    AuditProgramWorkflow,
)
from auditflow.application.use_cases.workflows.findings import (
    CommitFindingsUseCase,
    FinishCategorizationUseCase,
    FinishFindingsReviewUseCase,
    ReviewFindingUseCase,
    categorization_summary,
)
from auditflow.application.use_cases.workflows.outbox import (
    NotificationOutbox,
    PendingNotification,
    TransitionOutcome,
)

__all__ = [
    "AuditProgramWorkflow",
    "CommitFindingsUseCase",
    "FinishCategorizationUseCase",
    "FinishFindingsReviewUseCase",
    "NotificationOutbox",
    "PendingNotification",
    "ReviewFindingUseCase",
    "TransitionOutcome",
    "categorization_summary",
]
