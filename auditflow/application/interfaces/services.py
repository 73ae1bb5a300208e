"""Service interfaces (ports) for the application layer.

Protocols define contracts for application services and external
collaborators (DIP).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from auditflow.application.dtos.notification import (
        AudienceMember,
        DeliveryReport,
        TransitionContext,
    )
    from auditflow.application.dtos.permission import EligibleRecipient
    from auditflow.domain.entities.principal import Principal
    from auditflow.domain.enums import TriggerType


# Real-time dispatch collaborator
class IRealtimeDispatcher(Protocol):
    """Fire-and-forget push to one recipient's channel. May raise; callers must catch."""

    async def emit_to_channel(
        self, principal_id: str, event_name: str, payload: dict[str, Any]
    ) -> None:
        """Deliver payload as event_name to every connection of principal_id."""


# Capability check interface (used by HTTP dependencies and use cases)
class ICapabilityChecker(Protocol):
    """Principal -> capability decision."""

    async def has_capability(self, principal: Principal, capability: str) -> bool:
        """Return True if the principal holds capability ('module:action')."""


# Recipient discovery interface (used by the router)
class IRecipientDiscovery(Protocol):
    """Capability -> principals holding it via role assignments."""

    async def find_eligible_recipients(
        self,
        tenant_id: str,
        module: str,
        action: str,
        department: str | None = None,
    ) -> list[EligibleRecipient]:
        """Return deduplicated recipients; empty list when nobody qualifies."""


# Workflow notification router interface (used by use cases and the outbox)
class INotificationRouter(Protocol):
    """Fan-out of one workflow transition to its audience."""

    async def route(
        self, trigger: TriggerType, context: TransitionContext
    ) -> DeliveryReport:
        """Persist and dispatch notifications for the transition."""

    async def ensure_audience(
        self, trigger: TriggerType, context: TransitionContext
    ) -> list[AudienceMember]:
        """Return the audience; raise EmptyAudienceException for an empty required hand-off."""


# Cache service interface
class ICacheService(Protocol):
    """Minimal cache protocol for capability decision caching (DIP)."""

    def is_available(self) -> bool:
        """Return True if cache is connected."""

    async def get(self, key: str) -> Any:
        """Return cached value or None."""

    async def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        """Store value with TTL. Returns True on success."""

    async def delete(self, key: str) -> bool:
        """Delete key. Returns True on success."""

    async def delete_pattern(self, pattern: str) -> int:
        """Delete keys matching pattern. Returns count deleted."""
