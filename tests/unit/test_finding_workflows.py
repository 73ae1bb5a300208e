"""Tests for the audit finding workflow use cases."""

import pytest

from auditflow.application.dtos.permission import EligibleRecipient
from auditflow.application.dtos.workflow import AuditResult, FindingResult
from auditflow.application.services.notification_router import NotificationRouter
from auditflow.application.use_cases.workflows.findings import (
    CommitFindingsUseCase,
    FinishCategorizationUseCase,
    FinishFindingsReviewUseCase,
    ReviewFindingUseCase,
    categorization_summary,
)
from auditflow.domain.enums import FindingStatus, TriggerType
from auditflow.domain.exceptions import (
    EmptyAudienceException,
    InvalidTransitionException,
    ResourceNotFoundException,
    ValidationException,
)
from tests.conftest import TENANT_A, TENANT_B
from tests.fakes import InMemoryFindingRepository, InMemoryNotificationStore


class DepartmentDiscovery:
    """One reviewer per department name listed in holders."""

    def __init__(self, holders: dict[str | None, list[str]]):
        self.holders = holders

    async def find_eligible_recipients(self, tenant_id, module, action, department=None):
        return [
            EligibleRecipient(uid, "HOD", department) for uid in self.holders.get(department, [])
        ]


def _finding(fid: str, department: str, status: str = "PENDING", **kw) -> FindingResult:
    return FindingResult(
        id=fid,
        audit_id="audit-1",
        department=department,
        title=f"Finding {fid}",
        status=status,
        category=kw.get("category"),
        created_by_id=kw.get("created_by_id", "auditor"),
    )


@pytest.fixture
def repo() -> InMemoryFindingRepository:
    repo = InMemoryFindingRepository()
    repo.add_audit(
        AuditResult(
            id="audit-1",
            audit_no=12,
            tenant_id=TENANT_A,
            program_id="prog-1",
            program_title="FY26 Controls",
        )
    )
    repo.add_finding(_finding("f1", "IT"))
    repo.add_finding(_finding("f2", "HR"))
    repo.add_finding(_finding("f3", "IT", status="UNDER_REVIEW"))
    return repo


def _router(holders) -> NotificationRouter:
    return NotificationRouter(DepartmentDiscovery(holders), InMemoryNotificationStore())


async def test_commit_moves_pending_to_under_review(repo) -> None:
    use_case = CommitFindingsUseCase(repo, _router({"IT": ["hod-it"], "HR": ["hod-hr"]}))

    outcome = await use_case.execute(TENANT_A, "audit-1", "auditor")

    assert {f.id for f in outcome.value} == {"f1", "f2"}
    assert repo.findings["f1"].status == FindingStatus.UNDER_REVIEW.value
    assert repo.findings["f2"].status == FindingStatus.UNDER_REVIEW.value
    assert len(outcome.outbox) == 1
    entry = outcome.outbox.entries[0]
    assert entry.trigger is TriggerType.FINDINGS_COMMITTED
    assert entry.context.departments == ("IT", "HR")
    assert entry.context.attributes["finding_count"] == 2


async def test_commit_single_department(repo) -> None:
    use_case = CommitFindingsUseCase(repo, _router({"IT": ["hod-it"]}))

    outcome = await use_case.execute(TENANT_A, "audit-1", "auditor", department="IT")

    assert [f.id for f in outcome.value] == ["f1"]
    assert repo.findings["f2"].status == "PENDING"
    assert outcome.outbox.entries[0].context.attributes["department"] == "IT"


async def test_commit_without_reviewers_changes_nothing(repo) -> None:
    """If a department has nobody to review, no finding leaves PENDING."""
    use_case = CommitFindingsUseCase(repo, _router({}))

    with pytest.raises(EmptyAudienceException):
        await use_case.execute(TENANT_A, "audit-1", "auditor", department="IT")

    assert repo.findings["f1"].status == "PENDING"


async def test_commit_without_department_is_invalid() -> None:
    """Findings with a blank department are not handed to every reviewer of the tenant."""
    repo = InMemoryFindingRepository()
    repo.add_audit(
        AuditResult(
            id="audit-1",
            audit_no=12,
            tenant_id=TENANT_A,
            program_id="prog-1",
            program_title="FY26 Controls",
        )
    )
    repo.add_finding(_finding("f1", ""))
    repo.add_finding(_finding("f2", "  "))
    use_case = CommitFindingsUseCase(repo, _router({None: ["hod-it", "hod-hr"]}))

    with pytest.raises(InvalidTransitionException):
        await use_case.execute(TENANT_A, "audit-1", "auditor")

    assert repo.findings["f1"].status == "PENDING"


async def test_commit_without_pending_findings_is_invalid(repo) -> None:
    use_case = CommitFindingsUseCase(repo, _router({"IT": ["hod-it"]}))
    await use_case.execute(TENANT_A, "audit-1", "auditor", department="IT")

    with pytest.raises(InvalidTransitionException):
        await use_case.execute(TENANT_A, "audit-1", "auditor", department="IT")


async def test_commit_audit_in_other_tenant_not_found(repo) -> None:
    use_case = CommitFindingsUseCase(repo, _router({"IT": ["hod-it"]}))

    with pytest.raises(ResourceNotFoundException):
        await use_case.execute(TENANT_B, "audit-1", "auditor")


async def test_review_notifies_creator(repo) -> None:
    outcome = await ReviewFindingUseCase(repo).execute(
        TENANT_A, "f3", "hod-it", "ACCEPTED", "Looks right"
    )

    assert outcome.value.status == "ACCEPTED"
    assert outcome.value.hod_feedback == "Looks right"
    entry = outcome.outbox.entries[0]
    assert entry.trigger is TriggerType.FINDING_REVIEWED
    assert entry.context.target_user_ids == ("auditor",)


async def test_review_rejects_bad_status(repo) -> None:
    with pytest.raises(ValidationException):
        await ReviewFindingUseCase(repo).execute(TENANT_A, "f3", "hod", "MAYBE")


async def test_review_of_uncommitted_finding_is_invalid(repo) -> None:
    with pytest.raises(InvalidTransitionException):
        await ReviewFindingUseCase(repo).execute(TENANT_A, "f1", "hod", "REFUSED")


async def test_review_from_other_tenant_not_found(repo) -> None:
    with pytest.raises(ResourceNotFoundException):
        await ReviewFindingUseCase(repo).execute(TENANT_B, "f3", "hod", "ACCEPTED")


async def test_review_without_creator_has_empty_outbox(repo) -> None:
    repo.add_finding(_finding("f9", "IT", status="UNDER_REVIEW", created_by_id=None))

    outcome = await ReviewFindingUseCase(repo).execute(TENANT_A, "f9", "hod", "ACCEPTED")

    assert len(outcome.outbox) == 0


async def test_finish_review_targets_distinct_creators(repo) -> None:
    repo.add_finding(_finding("f4", "IT", created_by_id="auditor-2"))

    outcome = await FinishFindingsReviewUseCase(repo).execute(
        TENANT_A, "audit-1", "hod-it", department="IT"
    )

    assert all(repo.findings[f.id].reviewed for f in outcome.value)
    context = outcome.outbox.entries[0].context
    assert context.target_user_ids == ("auditor", "auditor-2")


async def test_finish_categorization_summary(repo) -> None:
    repo.add_finding(_finding("f5", "IT", category="COMPLIANCE"))

    outcome = await FinishCategorizationUseCase(repo).execute(
        TENANT_A, "audit-1", "auditor", department="IT"
    )

    assert repo.categorized == {"f1", "f3", "f5"}
    context = outcome.outbox.entries[0].context
    assert context.departments == ("IT",)
    assert context.attributes["categorization_summary"].startswith("Summary for IT: 3 total")


def test_categorization_summary_counts() -> None:
    findings = [
        _finding("a", "IT", category="COMPLIANCE"),
        _finding("b", "IT", category="COMPLIANCE"),
        _finding("c", "IT", category="IMPROVEMENT"),
    ]
    assert categorization_summary(findings, "IT") == (
        "Summary for IT: 3 total findings categorized as 2 compliance, 1 improvement."
    )
