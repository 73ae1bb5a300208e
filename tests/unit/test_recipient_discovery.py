"""Tests for RecipientDiscoveryService (capability holders per tenant and department)."""

import pytest

from auditflow.application.services.recipient_discovery import RecipientDiscoveryService
from tests.conftest import TENANT_A, TENANT_B
from tests.fakes import InMemoryPermissionStore


@pytest.fixture
def discovery(store: InMemoryPermissionStore) -> RecipientDiscoveryService:
    return RecipientDiscoveryService(store)


@pytest.fixture
def world(store: InMemoryPermissionStore) -> InMemoryPermissionStore:
    """Tenant A: two tenant-wide reviewers (one attached to IT), two HODs, a viewer.

    Tenant B: one reviewer.
    """
    read = store.add_permission("auditFinding:read")
    reviewer = store.add_role(TENANT_A, "Reviewer")
    hod = store.add_role(TENANT_A, "HOD")
    viewer = store.add_role(TENANT_A, "Viewer")
    member = store.add_role(TENANT_A, "Member")
    other = store.add_role(TENANT_B, "Reviewer")
    for role in (reviewer, hod, other):
        store.grant(role, read)

    store.add_user(TENANT_A, "alice")
    store.assign("alice", reviewer)
    store.assign_department("alice", member, "IT")
    store.add_user(TENANT_A, "bob")
    store.assign_department("bob", hod, " IT ")
    store.add_user(TENANT_A, "carol")
    store.assign_department("carol", hod, "HR")
    store.add_user(TENANT_A, "dave")
    store.assign("dave", viewer)
    store.add_user(TENANT_B, "erin")
    store.assign("erin", other)
    store.add_user(TENANT_A, "frank")
    store.assign("frank", reviewer)
    return store


async def test_tenant_wide_discovery(world, discovery) -> None:
    """Without a department every holder in the tenant is returned, once."""
    recipients = await discovery.find_eligible_recipients(TENANT_A, "auditFinding", "read")

    assert [r.principal_id for r in recipients] == ["alice", "bob", "carol", "frank"]
    alice = recipients[0]
    assert alice.role_name == "Reviewer"
    assert alice.department_name is None


async def test_other_tenant_is_invisible(world, discovery) -> None:
    recipients = await discovery.find_eligible_recipients(TENANT_B, "auditFinding", "read")

    assert [r.principal_id for r in recipients] == ["erin"]


async def test_department_filter_trims_names(world, discovery) -> None:
    """Department names match after trimming on both sides."""
    recipients = await discovery.find_eligible_recipients(
        TENANT_A, "auditFinding", "read", department="IT  "
    )

    ids = {r.principal_id for r in recipients}
    assert ids == {"alice", "bob"}
    bob = next(r for r in recipients if r.principal_id == "bob")
    assert bob.department_name == "IT"
    assert bob.role_name == "HOD"


async def test_tenant_wide_role_needs_department_attachment(world, discovery) -> None:
    """A tenant-wide role only counts in departments the user holds an assignment in."""
    recipients = await discovery.find_eligible_recipients(
        TENANT_A, "auditFinding", "read", department="HR"
    )

    assert [r.principal_id for r in recipients] == ["carol"]


async def test_tenant_wide_holder_without_assignment_row_is_excluded(world, discovery) -> None:
    """frank holds the granting role tenant-wide but no department assignment at all."""
    for department in ("IT", "HR", "Finance"):
        recipients = await discovery.find_eligible_recipients(
            TENANT_A, "auditFinding", "read", department=department
        )
        assert "frank" not in {r.principal_id for r in recipients}


async def test_user_with_several_matching_roles_listed_once(store, discovery) -> None:
    read = store.add_permission("auditFinding:read")
    reviewer = store.add_role(TENANT_A, "Reviewer")
    hod = store.add_role(TENANT_A, "HOD")
    store.grant(reviewer, read)
    store.grant(hod, read)
    store.add_user(TENANT_A, "u1")
    store.assign("u1", reviewer)
    store.assign_department("u1", hod, "IT")
    store.assign_department("u1", hod, "HR")

    recipients = await discovery.find_eligible_recipients(TENANT_A, "auditFinding", "read")

    assert len(recipients) == 1
    assert recipients[0].role_name == "Reviewer"


async def test_unknown_capability_returns_empty(world, discovery) -> None:
    assert await discovery.find_eligible_recipients(TENANT_A, "report", "export") == []


async def test_no_granting_roles_returns_empty(store, discovery) -> None:
    store.add_permission("auditProgram:approve")
    store.add_user(TENANT_A, "u1")

    assert await discovery.find_eligible_recipients(TENANT_A, "auditProgram", "approve") == []


async def test_overrides_are_not_consulted(world, discovery) -> None:
    """A user allowed only by override is not discovered; a denied user still is."""
    read = world.permissions[("auditFinding", "read")]
    world.set_override("dave", read, allowed=True)
    world.set_override("alice", read, allowed=False)

    recipients = await discovery.find_eligible_recipients(TENANT_A, "auditFinding", "read")

    ids = [r.principal_id for r in recipients]
    assert "dave" not in ids
    assert "alice" in ids


async def test_hyphenated_module_is_normalized(world, discovery) -> None:
    recipients = await discovery.find_eligible_recipients(TENANT_A, "audit-finding", "read")

    assert len(recipients) == 4
