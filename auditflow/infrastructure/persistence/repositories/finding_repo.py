"""Audit finding repository for workflow transitions (implements IFindingRepository)."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from auditflow.application.dtos.workflow import AuditResult, FindingResult
from auditflow.domain.exceptions import ResourceNotFoundException
from auditflow.infrastructure.persistence.models.audit import (
    Audit,
    AuditFinding,
    AuditProgram,
)
from auditflow.infrastructure.persistence.repositories.base import BaseRepository


def _to_result(f: AuditFinding) -> FindingResult:
    return FindingResult(
        id=f.id,
        audit_id=f.audit_id,
        department=f.department,
        title=f.title,
        status=f.status,
        category=f.category,
        created_by_id=f.created_by_id,
        reviewed=f.reviewed,
        hod_feedback=f.hod_feedback,
    )


class FindingRepository(BaseRepository[AuditFinding]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, AuditFinding)

    async def get_audit(self, audit_id: str) -> AuditResult | None:
        result = await self.db.execute(
            select(Audit, AuditProgram)
            .join(AuditProgram, AuditProgram.id == Audit.audit_program_id)
            .where(Audit.id == audit_id)
        )
        row = result.first()
        if row is None:
            return None
        audit, program = row
        return AuditResult(
            id=audit.id,
            audit_no=audit.audit_no,
            tenant_id=program.tenant_id,
            program_id=program.id,
            program_title=program.title,
        )

    async def get_finding(self, finding_id: str) -> FindingResult | None:
        finding = await self.get_by_id(finding_id)
        return _to_result(finding) if finding is not None else None

    async def list_findings(
        self,
        audit_id: str,
        department: str | None = None,
        status: str | None = None,
    ) -> list[FindingResult]:
        stmt = select(AuditFinding).where(AuditFinding.audit_id == audit_id)
        if department:
            stmt = stmt.where(AuditFinding.department == department)
        if status:
            stmt = stmt.where(AuditFinding.status == status)
        result = await self.db.execute(stmt.order_by(AuditFinding.created_at, AuditFinding.id))
        return [_to_result(f) for f in result.scalars().all()]

    async def set_status(self, finding_ids: Sequence[str], status: str) -> int:
        result = await self.db.execute(
            update(AuditFinding)
            .where(AuditFinding.id.in_(list(finding_ids)))
            .values(status=status)
        )
        return result.rowcount or 0

    async def record_review(
        self, finding_id: str, status: str, feedback: str | None, reviewed_at: datetime
    ) -> FindingResult:
        finding = await self.get_by_id(finding_id)
        if finding is None:
            raise ResourceNotFoundException("finding", finding_id)
        finding.status = status
        finding.hod_feedback = feedback
        finding.reviewed = True
        finding.reviewed_at = reviewed_at
        await self.db.flush()
        return _to_result(finding)

    async def mark_reviewed(self, finding_ids: Sequence[str], reviewed_at: datetime) -> int:
        result = await self.db.execute(
            update(AuditFinding)
            .where(AuditFinding.id.in_(list(finding_ids)))
            .values(reviewed=True, reviewed_at=reviewed_at)
        )
        return result.rowcount or 0

    async def mark_categorization_finished(
        self, finding_ids: Sequence[str], finished_at: datetime
    ) -> int:
        result = await self.db.execute(
            update(AuditFinding)
            .where(AuditFinding.id.in_(list(finding_ids)))
            .values(categorization_finished=True, categorization_finished_at=finished_at)
        )
        return result.rowcount or 0
