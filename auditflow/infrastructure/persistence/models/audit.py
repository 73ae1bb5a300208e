"""Audit program, audit and finding ORM models (workflow columns only)."""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from auditflow.domain.enums import AuditProgramStatus, FindingStatus
from auditflow.infrastructure.persistence.database import Base
from auditflow.infrastructure.persistence.models.mixins import (
    CuidMixin,
    MultiTenantModel,
    TimestampMixin,
)


class AuditProgram(MultiTenantModel, Base):
    """Audit program. Table: audit_program."""

    __tablename__ = "audit_program"

    title: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=AuditProgramStatus.DRAFT.value, index=True
    )
    created_by_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True
    )
    committed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    approved_by_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True
    )
    approved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    approval_comment: Mapped[str | None] = mapped_column(Text, nullable=True)


class Audit(CuidMixin, TimestampMixin, Base):
    """Audit within a program. Table: audit. Tenant comes from the program."""

    __tablename__ = "audit"

    audit_program_id: Mapped[str] = mapped_column(
        String, ForeignKey("audit_program.id", ondelete="CASCADE"), nullable=False, index=True
    )
    audit_no: Mapped[int | None] = mapped_column(Integer, nullable=True)


class AuditFinding(CuidMixin, TimestampMixin, Base):
    """Audit finding. Table: audit_finding. department holds the department name."""

    __tablename__ = "audit_finding"

    audit_id: Mapped[str] = mapped_column(
        String, ForeignKey("audit.id", ondelete="CASCADE"), nullable=False
    )
    department: Mapped[str] = mapped_column(String, nullable=False)
    title: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=FindingStatus.PENDING.value
    )
    category: Mapped[str | None] = mapped_column(String, nullable=True)
    created_by_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True
    )
    reviewed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false")
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    hod_feedback: Mapped[str | None] = mapped_column(Text, nullable=True)
    categorization_finished: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false")
    )
    categorization_finished_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        Index("ix_audit_finding_audit_department", "audit_id", "department", "status"),
    )
