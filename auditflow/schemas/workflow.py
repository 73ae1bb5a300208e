"""Audit finding and audit program workflow API schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from auditflow.application.dtos.notification import DeliveryReport


class FindingTransitionRequest(BaseModel):
    """Optional department scope for commit / finish-review / finish-categorization."""

    department: str | None = Field(default=None, max_length=200)


class FindingReviewRequest(BaseModel):
    status: Literal["ACCEPTED", "REFUSED"]
    feedback: str | None = Field(default=None, max_length=5000)


class FindingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    audit_id: str
    department: str
    title: str
    status: str
    category: str | None
    created_by_id: str | None
    reviewed: bool
    hod_feedback: str | None


class DeliverySummary(BaseModel):
    """Outcome of the notification fan-out that followed a transition."""

    trigger: str
    notified: int
    dispatched: int
    failed: int

    @classmethod
    def from_report(cls, report: DeliveryReport) -> "DeliverySummary":
        return cls(
            trigger=report.trigger.value,
            notified=report.notified_count,
            dispatched=len(report.dispatched),
            failed=len(report.failures),
        )


class FindingsTransitionResponse(BaseModel):
    findings: list[FindingResponse]
    notifications: list[DeliverySummary]


class FindingReviewResponse(BaseModel):
    finding: FindingResponse
    notifications: list[DeliverySummary]


class AuditProgramDecisionRequest(BaseModel):
    """Optional comment for approve / reject."""

    comment: str | None = Field(default=None, max_length=5000)


class AuditProgramResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    tenant_id: str
    title: str
    status: str
    created_by_id: str | None
    audit_count: int
    committed_at: datetime | None
    approved_by_id: str | None
    approved_at: datetime | None
    approval_comment: str | None


class AuditProgramTransitionResponse(BaseModel):
    program: AuditProgramResponse
    notifications: list[DeliverySummary]
