"""Audit program repository for the approval workflow (implements IAuditProgramRepository)."""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from auditflow.application.dtos.workflow import AuditProgramResult
from auditflow.domain.exceptions import ResourceNotFoundException
from auditflow.infrastructure.persistence.models.audit import Audit, AuditProgram
from auditflow.infrastructure.persistence.repositories.base import BaseRepository

_UPDATABLE = frozenset({"committed_at", "approved_by_id", "approved_at", "approval_comment"})


class AuditProgramRepository(BaseRepository[AuditProgram]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, AuditProgram)

    async def _to_result(self, program: AuditProgram) -> AuditProgramResult:
        audit_count = await self.db.scalar(
            select(func.count()).select_from(Audit).where(Audit.audit_program_id == program.id)
        )
        return AuditProgramResult(
            id=program.id,
            tenant_id=program.tenant_id,
            title=program.title,
            status=program.status,
            created_by_id=program.created_by_id,
            audit_count=audit_count or 0,
            committed_at=program.committed_at,
            approved_by_id=program.approved_by_id,
            approved_at=program.approved_at,
            approval_comment=program.approval_comment,
        )

    async def get(self, program_id: str, tenant_id: str) -> AuditProgramResult | None:
        result = await self.db.execute(
            select(AuditProgram).where(
                AuditProgram.id == program_id, AuditProgram.tenant_id == tenant_id
            )
        )
        program = result.scalar_one_or_none()
        return await self._to_result(program) if program is not None else None

    async def update_status(
        self, program_id: str, status: str, **fields: Any
    ) -> AuditProgramResult:
        unknown = set(fields) - _UPDATABLE
        if unknown:
            raise ValueError(f"Cannot update audit program fields: {sorted(unknown)}")
        program = await self.get_by_id(program_id)
        if program is None:
            raise ResourceNotFoundException("audit program", program_id)
        program.status = status
        for name, value in fields.items():
            setattr(program, name, value)
        await self.db.flush()
        return await self._to_result(program)
