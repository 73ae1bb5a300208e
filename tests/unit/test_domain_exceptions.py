"""Tests for domain exceptions (error_code, message, details)."""

from auditflow.domain.exceptions import (
    AuditflowException,
    AuthenticationException,
    AuthorizationException,
    DuplicateAssignmentException,
    EmptyAudienceException,
    InvalidTransitionException,
    ResourceNotFoundException,
    SqlNotConfiguredException,
    TenantNotFoundException,
    ValidationException,
)


def test_auditflow_exception_default_error_code() -> None:
    """Base AuditflowException uses class name as error_code when not provided."""
    exc = AuditflowException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "AuditflowException"
    assert exc.details == {}


def test_auditflow_exception_to_dict() -> None:
    exc = AuditflowException("Oops", error_code="CUSTOM", details={"key": "value"})
    assert exc.to_dict() == {"error": "CUSTOM", "message": "Oops", "details": {"key": "value"}}


def test_authorization_exception_names_capability_only() -> None:
    """The 403 message names the missing capability and nothing about roles."""
    exc = AuthorizationException(module="auditProgram", action="approve")
    assert exc.error_code == "PERMISSION_DENIED"
    assert exc.message == "Permission denied: requires auditProgram:approve"
    assert exc.details == {"required_capability": "auditProgram:approve"}


def test_authorization_exception_without_capability() -> None:
    exc = AuthorizationException()
    assert exc.message == "Permission denied"
    assert exc.details == {}


def test_resource_not_found_details() -> None:
    exc = ResourceNotFoundException("capability", "report:export")
    assert exc.error_code == "RESOURCE_NOT_FOUND"
    assert exc.message == "capability not found: report:export"
    assert exc.details == {"resource_type": "capability", "resource_id": "report:export"}


def test_empty_audience_mentions_departments() -> None:
    exc = EmptyAudienceException("FINDINGS_COMMITTED", "auditFinding:read", ["IT", "HR"])
    assert exc.error_code == "EMPTY_AUDIENCE"
    assert exc.message == "No users with auditFinding:read found for department(s) IT, HR"
    assert exc.details["departments"] == ["IT", "HR"]


def test_empty_audience_without_departments() -> None:
    exc = EmptyAudienceException("AUDIT_PROGRAM_APPROVAL", "auditProgram:approve")
    assert exc.message == "No users with auditProgram:approve found"
    assert exc.details["departments"] == []


def test_simple_codes() -> None:
    assert ValidationException("bad", field="x").details == {"field": "x"}
    assert AuthenticationException().error_code == "AUTHENTICATION_ERROR"
    assert TenantNotFoundException("t1").details == {"tenant_id": "t1"}
    assert InvalidTransitionException("audit", "a1", "nope").error_code == "INVALID_TRANSITION"
    assert (
        DuplicateAssignmentException("dup", "role").details["assignment_type"] == "role"
    )
    assert SqlNotConfiguredException().error_code == "SERVICE_UNAVAILABLE"
