"""Domain exceptions for the auditflow application.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.

"Nobody holds this capability" is not an exception: the resolution engine
returns False and discovery returns an empty list. Only callers that perform a
required hand-off turn an empty audience into EmptyAudienceException.
"""

from typing import Any


class AuditflowException(Exception):
    """Base exception for all auditflow application errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON error responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(AuditflowException):
    """Raised when input validation fails (e.g. malformed capability string)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthenticationException(AuditflowException):
    """Raised when the caller cannot be resolved to a principal."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(AuditflowException):
    """Raised when the principal lacks the capability required for the operation.

    The message names the capability so operators can see what was missing;
    it never names the role that would have granted it.
    """

    def __init__(
        self,
        module: str | None = None,
        action: str | None = None,
        message: str = "Permission denied",
    ) -> None:
        """Initialize with optional module, action, and message.

        Args:
            module: Capability module (e.g. 'auditProgram').
            action: Capability action (e.g. 'approve').
            message: Used when module/action are omitted.
        """
        if module and action:
            message = f"Permission denied: requires {module}:{action}"
        details: dict[str, Any] = {}
        if module and action:
            details["required_capability"] = f"{module}:{action}"
        super().__init__(message, "PERMISSION_DENIED", details)


class TenantNotFoundException(AuditflowException):
    """Raised when a requested tenant is not found."""

    def __init__(self, tenant_id: str) -> None:
        super().__init__(
            f"Tenant not found: {tenant_id}",
            "TENANT_NOT_FOUND",
            {"tenant_id": tenant_id},
        )


class ResourceNotFoundException(AuditflowException):
    """Raised when a requested resource (capability, principal, audit...) is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'capability', 'user').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class EmptyAudienceException(AuditflowException):
    """Raised by a required hand-off when nobody is eligible to act next.

    This is a tenant configuration problem (no role in the department holds
    the capability) that an administrator has to fix.
    """

    def __init__(
        self,
        trigger: str,
        capability: str,
        departments: list[str] | None = None,
    ) -> None:
        scope = f" for department(s) {', '.join(departments)}" if departments else ""
        super().__init__(
            f"No users with {capability} found{scope}",
            "EMPTY_AUDIENCE",
            {
                "trigger": trigger,
                "capability": capability,
                "departments": departments or [],
            },
        )


class InvalidTransitionException(AuditflowException):
    """Raised when a workflow transition is not allowed from the current state."""

    def __init__(self, entity_type: str, entity_id: str, message: str) -> None:
        super().__init__(
            message,
            "INVALID_TRANSITION",
            {"entity_type": entity_type, "entity_id": entity_id},
        )


class DuplicateAssignmentException(AuditflowException):
    """Raised when assigning a role/permission that is already assigned (unique constraint)."""

    def __init__(
        self,
        message: str,
        assignment_type: str,
        details_extra: dict[str, Any] | None = None,
    ) -> None:
        details = details_extra or {}
        details["assignment_type"] = assignment_type
        super().__init__(message, "DUPLICATE_ASSIGNMENT", details)


class SqlNotConfiguredException(AuditflowException):
    """Raised when an operation requires the database but it is not configured."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )
