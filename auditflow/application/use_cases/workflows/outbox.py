"""Notification outbox: notifications a transition owes, sent after its commit."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, TypeVar

from auditflow.application.dtos.notification import DeliveryReport, TransitionContext
from auditflow.application.interfaces.services import INotificationRouter
from auditflow.domain.enums import TriggerType
from auditflow.domain.exceptions import AuditflowException
from auditflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class PendingNotification:
    trigger: TriggerType
    context: TransitionContext


@dataclass
class NotificationOutbox:
    """Pending (trigger, context) pairs collected inside a transaction.

    Flush only after the transaction commits. By then the state change is
    durable, so routing errors are logged per entry instead of raised.
    """

    entries: list[PendingNotification] = field(default_factory=list)

    def add(self, trigger: TriggerType, context: TransitionContext) -> None:
        self.entries.append(PendingNotification(trigger, context))

    def __len__(self) -> int:
        return len(self.entries)

    async def flush(self, router: INotificationRouter) -> list[DeliveryReport]:
        """Route every pending entry in order; empties the outbox."""
        reports: list[DeliveryReport] = []
        entries, self.entries = self.entries, []
        for entry in entries:
            try:
                reports.append(await router.route(entry.trigger, entry.context))
            except AuditflowException as exc:
                logger.error(
                    "Notification routing for %s in tenant %s failed after commit: %s",
                    entry.trigger.value,
                    entry.context.tenant_id,
                    exc.message,
                )
        return reports


T = TypeVar("T")


@dataclass
class TransitionOutcome(Generic[T]):
    """Result of a workflow use case: the updated entity plus its outbox."""

    value: T
    outbox: NotificationOutbox
