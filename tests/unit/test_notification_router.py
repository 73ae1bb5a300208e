"""Tests for NotificationRouter: audience, self-exclusion, persist-then-dispatch."""

import asyncio

import pytest

from auditflow.application.dtos.notification import TransitionContext
from auditflow.application.dtos.permission import EligibleRecipient
from auditflow.application.services.notification_router import NotificationRouter
from auditflow.application.services.recipient_discovery import RecipientDiscoveryService
from auditflow.domain.enums import TriggerType
from auditflow.domain.exceptions import EmptyAudienceException, ValidationException
from tests.conftest import TENANT_A
from tests.fakes import (
    InMemoryNotificationStore,
    InMemoryPermissionStore,
    RecordingDispatcher,
)


class StubDiscovery:
    """Returns canned recipients per (capability, department) and records queries."""

    def __init__(self, results: dict[tuple[str, str | None], list[EligibleRecipient]]):
        self.results = results
        self.queries: list[tuple[str, str, str | None]] = []

    async def find_eligible_recipients(self, tenant_id, module, action, department=None):
        self.queries.append((tenant_id, f"{module}:{action}", department))
        return list(self.results.get((f"{module}:{action}", department), []))


def _findings_context(actor: str | None = "auditor", departments=("IT",)) -> TransitionContext:
    return TransitionContext(
        tenant_id=TENANT_A,
        actor_id=actor,
        subject_id="audit-1",
        departments=tuple(departments),
        attributes={
            "audit_id": "audit-1",
            "audit_no": 7,
            "program_id": "prog-1",
            "program_title": "FY26 Controls",
            "department": departments[0] if len(departments) == 1 else None,
        },
    )


def _program_context(actor: str = "author") -> TransitionContext:
    return TransitionContext(
        tenant_id=TENANT_A,
        actor_id=actor,
        subject_id="prog-1",
        attributes={"program_id": "prog-1", "program_title": "FY26 Controls"},
    )


async def test_routes_to_discovered_holders() -> None:
    """Each recipient gets one persisted record and one real-time push."""
    discovery = StubDiscovery(
        {
            ("auditProgram:approve", None): [
                EligibleRecipient("m1", "Audit Manager"),
                EligibleRecipient("m2", "Audit Manager"),
            ]
        }
    )
    store = InMemoryNotificationStore()
    dispatcher = RecordingDispatcher()
    router = NotificationRouter(discovery, store, dispatcher)

    report = await router.route(TriggerType.AUDIT_PROGRAM_COMMITTED, _program_context())

    assert report.audience == ["m1", "m2"]
    assert [n.target_user_id for n in report.persisted] == ["m1", "m2"]
    assert report.dispatched == ["m1", "m2"]
    assert report.failures == []
    assert report.notified_count == 2
    n = store.created[0]
    assert n.type == "AUDIT_PROGRAM_APPROVAL"
    assert n.title == "Audit Program Pending Approval"
    assert n.link == "/audit-management/audit-programs/prog-1"
    assert n.metadata["actorId"] == "author"
    assert n.metadata["recipientRole"] == "Audit Manager"
    user_id, event, payload = dispatcher.events[0]
    assert event == "notificationCreated"
    assert payload["id"] == n.id
    assert payload["userId"] == user_id


async def test_actor_is_excluded_before_dedup() -> None:
    """The actor never notifies themselves even if they hold the capability."""
    discovery = StubDiscovery(
        {
            ("auditProgram:approve", None): [
                EligibleRecipient("author", "Audit Manager"),
                EligibleRecipient("m1", "Audit Manager"),
            ]
        }
    )
    store = InMemoryNotificationStore()
    router = NotificationRouter(discovery, store, RecordingDispatcher())

    report = await router.route(TriggerType.AUDIT_PROGRAM_COMMITTED, _program_context())

    assert report.audience == ["m1"]
    assert store.for_user("author") == []


async def test_duplicates_across_departments_collapse() -> None:
    """A user discovered for two departments receives one notification; first match wins."""
    discovery = StubDiscovery(
        {
            ("auditFinding:read", "IT"): [
                EligibleRecipient("hod1", "HOD", "IT"),
                EligibleRecipient("shared", "Reviewer", "IT"),
            ],
            ("auditFinding:read", "HR"): [
                EligibleRecipient("shared", "Reviewer", "HR"),
                EligibleRecipient("hod2", "HOD", "HR"),
            ],
        }
    )
    store = InMemoryNotificationStore()
    router = NotificationRouter(discovery, store, RecordingDispatcher())

    report = await router.route(
        TriggerType.FINDINGS_COMMITTED, _findings_context(departments=("IT", "HR"))
    )

    assert report.audience == ["hod1", "shared", "hod2"]
    assert len(store.for_user("shared")) == 1
    assert store.for_user("shared")[0].metadata["recipientDepartment"] == "IT"
    assert [q[2] for q in discovery.queries] == ["IT", "HR"]


async def test_required_trigger_with_empty_audience_raises() -> None:
    discovery = StubDiscovery({})
    store = InMemoryNotificationStore()
    router = NotificationRouter(discovery, store, RecordingDispatcher())

    with pytest.raises(EmptyAudienceException) as exc_info:
        await router.route(TriggerType.FINDINGS_COMMITTED, _findings_context())

    assert exc_info.value.details["departments"] == ["IT"]
    assert exc_info.value.details["capability"] == "auditFinding:read"
    assert store.created == []


async def test_required_trigger_empty_after_self_exclusion_raises() -> None:
    """Only the actor holds the capability, so nobody is left to notify."""
    discovery = StubDiscovery(
        {("auditFinding:read", "IT"): [EligibleRecipient("auditor", "Reviewer", "IT")]}
    )
    router = NotificationRouter(discovery, InMemoryNotificationStore(), RecordingDispatcher())

    with pytest.raises(EmptyAudienceException):
        await router.ensure_audience(TriggerType.FINDINGS_COMMITTED, _findings_context())


async def test_optional_trigger_with_empty_audience_returns_empty_report() -> None:
    router = NotificationRouter(
        StubDiscovery({}), InMemoryNotificationStore(), RecordingDispatcher()
    )

    report = await router.route(TriggerType.AUDIT_PROGRAM_COMMITTED, _program_context())

    assert report.audience == []
    assert report.persisted == []


async def test_persist_failure_is_isolated() -> None:
    """A failed insert for one recipient is recorded; others still get theirs."""
    discovery = StubDiscovery(
        {
            ("auditProgram:approve", None): [
                EligibleRecipient("m1", "Audit Manager"),
                EligibleRecipient("broken", "Audit Manager"),
                EligibleRecipient("m3", "Audit Manager"),
            ]
        }
    )
    store = InMemoryNotificationStore(fail_for={"broken"})
    dispatcher = RecordingDispatcher()
    router = NotificationRouter(discovery, store, dispatcher)

    report = await router.route(TriggerType.AUDIT_PROGRAM_COMMITTED, _program_context())

    assert [n.target_user_id for n in report.persisted] == ["m1", "m3"]
    assert report.dispatched == ["m1", "m3"]
    assert len(report.failures) == 1
    failure = report.failures[0]
    assert failure.principal_id == "broken"
    assert failure.stage == "persist"
    # Nothing is pushed for a record that was never stored.
    assert all(uid != "broken" for uid, _, _ in dispatcher.events)


async def test_dispatch_failure_keeps_record() -> None:
    discovery = StubDiscovery(
        {
            ("auditProgram:approve", None): [
                EligibleRecipient("m1", "Audit Manager"),
                EligibleRecipient("offline", "Audit Manager"),
            ]
        }
    )
    store = InMemoryNotificationStore()
    dispatcher = RecordingDispatcher(fail_for={"offline"})
    router = NotificationRouter(discovery, store, dispatcher)

    report = await router.route(TriggerType.AUDIT_PROGRAM_COMMITTED, _program_context())

    assert len(store.for_user("offline")) == 1
    assert report.dispatched == ["m1"]
    assert [(f.principal_id, f.stage) for f in report.failures] == [("offline", "dispatch")]


async def test_without_dispatcher_only_persists() -> None:
    discovery = StubDiscovery(
        {("auditProgram:approve", None): [EligibleRecipient("m1", "Audit Manager")]}
    )
    store = InMemoryNotificationStore()
    router = NotificationRouter(discovery, store, dispatcher=None)

    report = await router.route(TriggerType.AUDIT_PROGRAM_COMMITTED, _program_context())

    assert len(report.persisted) == 1
    assert report.dispatched == []


async def test_explicit_targets_for_direct_triggers() -> None:
    """Direct triggers notify the named users without any discovery query."""
    discovery = StubDiscovery({})
    store = InMemoryNotificationStore()
    router = NotificationRouter(discovery, store, RecordingDispatcher())
    context = TransitionContext(
        tenant_id=TENANT_A,
        actor_id="hod",
        subject_id="cr-1",
        target_user_ids=("requester", "hod", ""),
        attributes={"change_request_id": "cr-1", "document_title": "Policy"},
    )

    report = await router.route(TriggerType.CHANGE_REQUEST_REJECTED, context)

    assert report.audience == ["requester"]
    assert discovery.queries == []
    assert store.created[0].link == "/change-requests/cr-1"


async def test_missing_tenant_is_rejected() -> None:
    router = NotificationRouter(StubDiscovery({}), InMemoryNotificationStore())

    with pytest.raises(ValidationException):
        await router.route(TriggerType.AUDIT_PROGRAM_COMMITTED, TransitionContext(tenant_id=""))


async def test_empty_rule_table_is_not_replaced_by_defaults() -> None:
    """An explicitly empty rule table is not replaced by the default rules."""
    discovery = StubDiscovery(
        {("auditFinding:read", "IT"): [EligibleRecipient("rev", "Reviewer", "IT")]}
    )
    router = NotificationRouter(discovery, InMemoryNotificationStore(), rules={})

    with pytest.raises(ValidationException):
        await router.route(TriggerType.FINDINGS_COMMITTED, _findings_context())
    assert discovery.queries == []


async def test_report_keeps_audience_order_under_concurrency() -> None:
    """Deliveries finish out of order; the report is still in audience order."""

    class SlowFirstStore(InMemoryNotificationStore):
        async def create_notification(self, **kwargs):
            if kwargs["target_user_id"] == "m1":
                await asyncio.sleep(0.01)
            return await super().create_notification(**kwargs)

    discovery = StubDiscovery(
        {
            ("auditProgram:approve", None): [
                EligibleRecipient(f"m{i}", "Audit Manager") for i in range(1, 5)
            ]
        }
    )
    store = SlowFirstStore()
    router = NotificationRouter(discovery, store, RecordingDispatcher(), concurrency=4)

    report = await router.route(TriggerType.AUDIT_PROGRAM_COMMITTED, _program_context())

    assert store.created[-1].target_user_id == "m1"
    assert [n.target_user_id for n in report.persisted] == ["m1", "m2", "m3", "m4"]
    assert report.dispatched == ["m1", "m2", "m3", "m4"]


async def test_end_to_end_with_real_discovery() -> None:
    """Router over real discovery and the in-memory permission store."""
    perms = InMemoryPermissionStore()
    read = perms.add_permission("auditFinding:read")
    hod = perms.add_role(TENANT_A, "HOD")
    perms.grant(hod, read)
    perms.add_user(TENANT_A, "hod-it")
    perms.assign_department("hod-it", hod, "IT")
    perms.add_user(TENANT_A, "hod-hr")
    perms.assign_department("hod-hr", hod, "HR")
    store = InMemoryNotificationStore()
    router = NotificationRouter(RecipientDiscoveryService(perms), store, RecordingDispatcher())

    report = await router.route(TriggerType.FINDINGS_COMMITTED, _findings_context())

    assert report.audience == ["hod-it"]
    n = store.created[0]
    assert n.title == "Audit Findings for IT Submitted for Review"
    assert n.link == "/hod/findings-review?auditId=audit-1&department=IT"
