"""Capability check and recipient discovery endpoints."""

import pytest
from fastapi import FastAPI
from httpx import AsyncClient

from auditflow.api.v1.dependencies import get_permission_store
from tests.conftest import TENANT_A, TENANT_B, auth_headers
from tests.fakes import InMemoryPermissionStore


@pytest.fixture
def world(app: FastAPI, store: InMemoryPermissionStore) -> InMemoryPermissionStore:
    approve = store.add_permission("auditProgram:approve")
    user_read = store.add_permission("user:read")
    manager = store.add_role(TENANT_A, "Audit Manager")
    admin = store.add_role(TENANT_A, "Admin")
    store.grant(manager, approve)
    store.grant(admin, user_read)
    store.add_user(TENANT_A, "manager")
    store.assign("manager", manager)
    store.add_user(TENANT_A, "admin")
    store.assign("admin", admin)
    store.add_user(TENANT_A, "plain")
    foreign = store.add_role(TENANT_B, "Audit Manager")
    store.grant(foreign, approve)
    store.add_user(TENANT_B, "outsider")
    store.assign("outsider", foreign)
    app.dependency_overrides[get_permission_store] = lambda: store
    return store


async def test_check_granted(client: AsyncClient, world) -> None:
    response = await client.get(
        "/api/v1/permissions/check",
        params={"capability": "audit-program:approve"},
        headers=auth_headers(world.principal("manager")),
    )

    assert response.status_code == 200
    assert response.json() == {"capability": "auditProgram:approve", "allowed": True}


async def test_check_denied_is_200_false(client: AsyncClient, world) -> None:
    response = await client.get(
        "/api/v1/permissions/check",
        params={"capability": "auditProgram:approve"},
        headers=auth_headers(world.principal("plain")),
    )

    assert response.status_code == 200
    assert response.json()["allowed"] is False


async def test_check_with_foreign_tenant_role_is_false(client: AsyncClient, world) -> None:
    """A token carrying another tenant's role id gains nothing from it."""
    forged = world.principal("outsider", tenant_id=TENANT_A)

    response = await client.get(
        "/api/v1/permissions/check",
        params={"capability": "auditProgram:approve"},
        headers=auth_headers(forged),
    )

    assert response.json()["allowed"] is False


async def test_check_malformed_is_400(client: AsyncClient, world) -> None:
    response = await client.get(
        "/api/v1/permissions/check",
        params={"capability": "auditProgram"},
        headers=auth_headers(world.principal("manager")),
    )

    assert response.status_code == 400
    assert response.json()["error"] == "VALIDATION_ERROR"


async def test_check_unknown_capability_is_404(client: AsyncClient, world) -> None:
    response = await client.get(
        "/api/v1/permissions/check",
        params={"capability": "report:export"},
        headers=auth_headers(world.principal("manager")),
    )

    assert response.status_code == 404


async def test_recipients_requires_user_read(client: AsyncClient, world) -> None:
    response = await client.get(
        "/api/v1/recipients",
        params={"module": "auditProgram", "action": "approve"},
        headers=auth_headers(world.principal("manager")),
    )

    assert response.status_code == 403
    assert response.json()["message"] == "Permission denied: requires user:read"


async def test_recipients_lists_tenant_holders(client: AsyncClient, world) -> None:
    response = await client.get(
        "/api/v1/recipients",
        params={"module": "auditProgram", "action": "approve"},
        headers=auth_headers(world.principal("admin")),
    )

    assert response.status_code == 200
    body = response.json()
    assert [r["principal_id"] for r in body] == ["manager"]
    assert body[0]["role_name"] == "Audit Manager"
