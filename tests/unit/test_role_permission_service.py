"""Tests for RolePermissionService (single and batch role grants)."""

import pytest

from auditflow.application.dtos.permission import RolePermissionChange
from auditflow.application.services.authorization_service import AuthorizationService
from auditflow.application.services.permission_resolution import (
    PermissionResolutionEngine,
)
from auditflow.application.services.role_permission_service import RolePermissionService
from auditflow.domain.exceptions import (
    DuplicateAssignmentException,
    ResourceNotFoundException,
    TenantNotFoundException,
    ValidationException,
)
from tests.conftest import TENANT_A, TENANT_B
from tests.fakes import (
    FakeCache,
    FakeUnitOfWork,
    InMemoryPermissionStore,
    InMemoryRolePermissionRepository,
)


@pytest.fixture
def setup(store: InMemoryPermissionStore):
    store.add_permission("document:approve")
    store.add_permission("document:publish")
    reviewer = store.add_role(TENANT_A, "Reviewer")
    store.add_role(TENANT_B, "Reviewer")
    store.add_user(TENANT_A, "carol")
    store.assign("carol", reviewer)
    events: list[str] = []
    cache = FakeCache(events=events)
    authorization = AuthorizationService(PermissionResolutionEngine(store), cache)
    service = RolePermissionService(
        store, InMemoryRolePermissionRepository(store), FakeUnitOfWork(events), authorization
    )
    return service, authorization, cache, reviewer


async def test_grant_reaches_role_holders(store, setup) -> None:
    service, authorization, _, reviewer = setup
    carol = store.principal("carol")
    assert await authorization.has_capability(carol, "document:approve") is False

    result = await service.set_grant(TENANT_A, reviewer.id, "document:approve", True)

    assert (result.role_id, result.module, result.action, result.allowed) == (
        reviewer.id,
        "document",
        "approve",
        True,
    )
    assert await authorization.has_capability(carol, "document:approve") is True


async def test_tenant_cache_dropped_after_commit(setup) -> None:
    service, _, cache, reviewer = setup

    await service.set_grant(TENANT_A, reviewer.id, "document:approve", False)

    assert cache.events == ["commit", f"invalidate:capability:{TENANT_A}:*"]


async def test_role_of_another_tenant_is_not_found(setup) -> None:
    service, _, cache, _ = setup

    with pytest.raises(ResourceNotFoundException) as exc_info:
        await service.set_grant(TENANT_A, f"role-{TENANT_B}-Reviewer", "document:approve", True)
    assert exc_info.value.details["resource_type"] == "role"
    assert cache.events == []


async def test_unknown_capability_is_not_found(setup) -> None:
    service, _, _, reviewer = setup

    with pytest.raises(ResourceNotFoundException) as exc_info:
        await service.set_grant(TENANT_A, reviewer.id, "report:export", True)
    assert exc_info.value.details["resource_type"] == "capability"


async def test_unknown_tenant_is_tenant_not_found(setup) -> None:
    service, _, _, reviewer = setup

    with pytest.raises(TenantNotFoundException):
        await service.set_grant("tenant-gone", reviewer.id, "document:approve", True)


async def test_batch_writes_once(store, setup) -> None:
    service, _, cache, reviewer = setup

    results = await service.set_grants(
        TENANT_A,
        [
            RolePermissionChange(reviewer.id, "document:approve", True),
            RolePermissionChange(reviewer.id, "document:publish", False),
        ],
    )

    assert [r.allowed for r in results] == [True, False]
    assert cache.events == ["commit", f"invalidate:capability:{TENANT_A}:*"]
    assert store.grants[(reviewer.id, "perm-document-publish")] is False


async def test_batch_checks_every_pair_before_writing(store, setup) -> None:
    service, _, cache, reviewer = setup

    with pytest.raises(ResourceNotFoundException):
        await service.set_grants(
            TENANT_A,
            [
                RolePermissionChange(reviewer.id, "document:approve", True),
                RolePermissionChange("role-missing", "document:approve", True),
            ],
        )

    assert (reviewer.id, "perm-document-approve") not in store.grants
    assert cache.events == []


async def test_batch_repeated_pair_is_duplicate(setup) -> None:
    service, _, _, reviewer = setup

    with pytest.raises(DuplicateAssignmentException) as exc_info:
        await service.set_grants(
            TENANT_A,
            [
                RolePermissionChange(reviewer.id, "document:approve", True),
                RolePermissionChange(reviewer.id, "document:approve", False),
            ],
        )
    assert exc_info.value.details["assignment_type"] == "role_permission"
    assert exc_info.value.error_code == "DUPLICATE_ASSIGNMENT"


async def test_empty_batch_is_rejected(setup) -> None:
    service, _, _, _ = setup

    with pytest.raises(ValidationException):
        await service.set_grants(TENANT_A, [])
