"""Tests for AuditProgramWorkflow (commit, approve, reject)."""

import pytest

from auditflow.application.dtos.workflow import AuditProgramResult
from auditflow.application.use_cases.workflows.audit_programs import AuditProgramWorkflow
from auditflow.domain.enums import AuditProgramStatus, TriggerType
from auditflow.domain.exceptions import InvalidTransitionException, ResourceNotFoundException
from tests.conftest import TENANT_A, TENANT_B
from tests.fakes import InMemoryAuditProgramRepository


def _program(status: str = "DRAFT", audits: int = 2) -> AuditProgramResult:
    return AuditProgramResult(
        id="prog-1",
        tenant_id=TENANT_A,
        title="FY26 Controls",
        status=status,
        created_by_id="author",
        audit_count=audits,
    )


async def test_commit_draft() -> None:
    repo = InMemoryAuditProgramRepository([_program()])

    outcome = await AuditProgramWorkflow(repo).commit(TENANT_A, "prog-1", "author")

    assert outcome.value.status == AuditProgramStatus.UNDER_REVIEW.value
    assert outcome.value.committed_at is not None
    entry = outcome.outbox.entries[0]
    assert entry.trigger is TriggerType.AUDIT_PROGRAM_COMMITTED
    assert entry.context.actor_id == "author"
    assert entry.context.attributes["program_title"] == "FY26 Controls"


async def test_commit_requires_audits() -> None:
    repo = InMemoryAuditProgramRepository([_program(audits=0)])

    with pytest.raises(InvalidTransitionException):
        await AuditProgramWorkflow(repo).commit(TENANT_A, "prog-1", "author")


async def test_commit_twice_is_invalid() -> None:
    repo = InMemoryAuditProgramRepository([_program()])
    workflow = AuditProgramWorkflow(repo)
    await workflow.commit(TENANT_A, "prog-1", "author")

    with pytest.raises(InvalidTransitionException):
        await workflow.commit(TENANT_A, "prog-1", "author")


async def test_approve_under_review() -> None:
    repo = InMemoryAuditProgramRepository([_program("UNDER_REVIEW")])

    outcome = await AuditProgramWorkflow(repo).approve(
        TENANT_A, "prog-1", "manager", comment="Go ahead"
    )

    assert outcome.value.status == "APPROVED"
    assert outcome.value.approved_by_id == "manager"
    assert outcome.outbox.entries[0].context.attributes["comment"] == "Go ahead"


async def test_reject_returns_to_draft() -> None:
    repo = InMemoryAuditProgramRepository([_program("UNDER_REVIEW")])

    outcome = await AuditProgramWorkflow(repo).reject(
        TENANT_A, "prog-1", "manager", comment="Scope too wide"
    )

    assert outcome.value.status == "DRAFT"
    assert outcome.value.approval_comment == "Scope too wide"
    assert outcome.outbox.entries[0].trigger is TriggerType.AUDIT_PROGRAM_REJECTED


async def test_approve_draft_is_invalid() -> None:
    repo = InMemoryAuditProgramRepository([_program()])

    with pytest.raises(InvalidTransitionException):
        await AuditProgramWorkflow(repo).approve(TENANT_A, "prog-1", "manager")


async def test_program_in_other_tenant_not_found() -> None:
    repo = InMemoryAuditProgramRepository([_program()])

    with pytest.raises(ResourceNotFoundException):
        await AuditProgramWorkflow(repo).commit(TENANT_B, "prog-1", "author")
