"""Shared enumerations for the auditflow application.

Cross-cutting enums used by application and infrastructure (actor type,
real-time event names). Workflow state enums live in auditflow.domain.enums.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class ActorType(_ValuesMixin, str, Enum):
    """Who performed an action (shown in log records)."""

    USER = "user"
    SYSTEM = "system"


class RealtimeEvent(_ValuesMixin, str, Enum):
    """Event names pushed over per-user real-time channels."""

    NOTIFICATION_CREATED = "notificationCreated"
