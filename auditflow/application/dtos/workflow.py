"""DTOs for audit workflow use cases (findings, audit programs)."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class AuditResult:
    """Audit with the program fields notifications need."""

    id: str
    audit_no: int | None
    tenant_id: str
    program_id: str
    program_title: str


@dataclass(frozen=True)
class FindingResult:
    id: str
    audit_id: str
    department: str
    title: str
    status: str
    category: str | None
    created_by_id: str | None
    reviewed: bool = False
    hod_feedback: str | None = None


@dataclass(frozen=True)
class AuditProgramResult:
    id: str
    tenant_id: str
    title: str
    status: str
    created_by_id: str | None
    audit_count: int = 0
    committed_at: datetime | None = None
    approved_by_id: str | None = None
    approved_at: datetime | None = None
    approval_comment: str | None = None
