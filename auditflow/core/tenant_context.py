"""Tenant context for the current request.

The principal dependency sets the current tenant_id so repositories and log
records can read it without threading it through every call.
"""

import re
from contextvars import ContextVar

# Current tenant ID for the request (set by the auth dependency).
current_tenant_id: ContextVar[str | None] = ContextVar(
    "current_tenant_id", default=None
)

# CUID/UUID-style: alphanumeric, hyphen, underscore.
TENANT_ID_MAX_LENGTH = 64
_TENANT_ID_RE = re.compile(
    r"^[a-zA-Z0-9_-]{1," + str(TENANT_ID_MAX_LENGTH) + r"}$"
)


def set_tenant_id(tenant_id: str | None) -> None:
    """Set the current tenant ID for this context (e.g. request)."""
    current_tenant_id.set(tenant_id)


def get_tenant_id() -> str | None:
    """Return the current tenant ID if set."""
    return current_tenant_id.get()


def is_valid_tenant_id_format(value: str) -> bool:
    """Return True if value looks like a tenant ID (header validation)."""
    if not value or len(value) > TENANT_ID_MAX_LENGTH:
        return False
    return bool(_TENANT_ID_RE.fullmatch(value))
