"""Tests for exception -> HTTP status mapping."""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from auditflow.core.exception_handlers import register_exception_handlers, status_for
from auditflow.domain.exceptions import (
    AuditflowException,
    AuthenticationException,
    AuthorizationException,
    EmptyAudienceException,
    InvalidTransitionException,
    ResourceNotFoundException,
    SqlNotConfiguredException,
    ValidationException,
)
from auditflow.infrastructure.exceptions import RealtimeUnavailableException


@pytest.mark.parametrize(
    ("exc", "status"),
    [
        (ResourceNotFoundException("audit", "a1"), 404),
        (ValidationException("bad"), 400),
        (AuthenticationException(), 401),
        (AuthorizationException(module="document", action="read"), 403),
        (EmptyAudienceException("FINDINGS_COMMITTED", "auditFinding:read"), 409),
        (InvalidTransitionException("audit", "a1", "nope"), 409),
        (SqlNotConfiguredException(), 503),
        (RealtimeUnavailableException("notifications:t1:u1"), 503),
        (AuditflowException("other"), 400),
    ],
)
def test_status_for(exc, status) -> None:
    assert status_for(exc) == status


@pytest.fixture
def handler_app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/denied")
    async def denied():
        raise AuthorizationException(module="auditProgram", action="approve")

    @app.get("/anonymous")
    async def anonymous():
        raise AuthenticationException()

    @app.get("/boom")
    async def boom():
        raise RuntimeError("secret detail")

    return app


async def test_domain_exception_body(handler_app) -> None:
    async with AsyncClient(transport=ASGITransport(app=handler_app), base_url="http://t") as c:
        response = await c.get("/denied")

    assert response.status_code == 403
    assert response.json() == {
        "error": "PERMISSION_DENIED",
        "message": "Permission denied: requires auditProgram:approve",
        "details": {"required_capability": "auditProgram:approve"},
    }


async def test_401_carries_bearer_challenge(handler_app) -> None:
    async with AsyncClient(transport=ASGITransport(app=handler_app), base_url="http://t") as c:
        response = await c.get("/anonymous")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


async def test_unhandled_error_hides_detail(handler_app) -> None:
    transport = ASGITransport(app=handler_app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://t") as c:
        response = await c.get("/boom")

    assert response.status_code == 500
    assert response.json() == {"error": "INTERNAL_ERROR", "message": "Internal server error"}
