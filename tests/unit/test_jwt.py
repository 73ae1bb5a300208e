"""Tests for JWT creation and verification."""

from datetime import timedelta

import pytest

from auditflow.domain.entities.principal import DepartmentScopedRole, Principal, TenantWideRole
from auditflow.infrastructure.security.jwt import (
    create_access_token,
    create_principal_token,
    verify_token,
)


def test_principal_token_round_trip() -> None:
    principal = Principal(
        "u1",
        "t1",
        (TenantWideRole("r1"), DepartmentScopedRole("r2", "d1", "IT")),
    )

    claims = verify_token(create_principal_token(principal))

    assert claims["sub"] == "u1"
    assert claims["tenant_id"] == "t1"
    assert Principal.from_claims(claims) == principal


def test_expired_token_is_rejected() -> None:
    token = create_access_token({"sub": "u1", "tenant_id": "t1"}, timedelta(seconds=-1))

    with pytest.raises(ValueError, match="Invalid token"):
        verify_token(token)


def test_token_without_sub_is_rejected() -> None:
    token = create_access_token({"tenant_id": "t1"})

    with pytest.raises(ValueError):
        verify_token(token)


def test_garbage_token_is_rejected() -> None:
    with pytest.raises(ValueError):
        verify_token("not-a-jwt")
