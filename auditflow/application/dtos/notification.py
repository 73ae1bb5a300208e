"""DTOs for notifications and fan-out results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from auditflow.domain.enums import TriggerType


@dataclass(frozen=True)
class NotificationResult:
    """Persisted notification read-model."""

    id: str
    tenant_id: str
    target_user_id: str
    type: str
    title: str
    message: str
    link: str | None = None
    metadata: dict[str, Any] | None = None
    is_read: bool = False
    created_at: datetime | None = None

    def to_payload(self) -> dict[str, Any]:
        """JSON-safe payload pushed on the real-time channel."""
        return {
            "id": self.id,
            "tenantId": self.tenant_id,
            "targetUserId": self.target_user_id,
            "userId": self.target_user_id,
            "type": self.type,
            "title": self.title,
            "message": self.message,
            "link": self.link,
            "metadata": self.metadata or {},
            "isRead": self.is_read,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class NotificationFilters:
    """Inbox filters; page is 1-based."""

    is_read: bool | None = None
    type: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    search: str | None = None
    page: int = 1
    limit: int = 20


@dataclass(frozen=True)
class NotificationPage:
    items: list[NotificationResult]
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.limit else 0


@dataclass(frozen=True)
class NotificationStats:
    total: int
    unread: int
    by_type: dict[str, int]

    @property
    def read(self) -> int:
        return self.total - self.unread


@dataclass(frozen=True)
class TransitionContext:
    """What happened, in which tenant, by whom: the input to one fan-out.

    departments scopes department-bound audiences; target_user_ids names the
    audience of direct triggers; attributes feed the title/message templates and
    are echoed into notification metadata.
    """

    tenant_id: str
    actor_id: str | None = None
    subject_id: str | None = None
    departments: tuple[str, ...] = ()
    target_user_ids: tuple[str, ...] = ()
    attributes: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AudienceMember:
    """One resolved recipient plus the rule-specific deep link and labels."""

    principal_id: str
    link: str | None
    role_name: str | None = None
    department_name: str | None = None


@dataclass(frozen=True)
class PartialDeliveryFailure:
    """Per-recipient failure during a fan-out; recorded, never raised."""

    principal_id: str
    stage: str  # "persist" or "dispatch"
    error: str


@dataclass
class DeliveryReport:
    """Result of routing one workflow transition."""

    trigger: TriggerType
    audience: list[str] = field(default_factory=list)
    persisted: list[NotificationResult] = field(default_factory=list)
    dispatched: list[str] = field(default_factory=list)
    failures: list[PartialDeliveryFailure] = field(default_factory=list)

    @property
    def notified_count(self) -> int:
        return len(self.persisted)
