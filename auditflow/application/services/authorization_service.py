"""Authorization service: capability checks with optional caching (engine + cache)."""

from __future__ import annotations

from auditflow.application.dtos.permission import CapabilityDecision
from auditflow.application.interfaces.services import ICacheService
from auditflow.application.services.permission_resolution import (
    PermissionResolutionEngine,
)
from auditflow.domain.entities.principal import Principal
from auditflow.domain.exceptions import AuthorizationException
from auditflow.domain.value_objects.capability import Capability


def capability_cache_key(tenant_id: str, user_id: str, capability: Capability) -> str:
    return f"capability:{tenant_id}:{user_id}:{capability.module}:{capability.action}"


class AuthorizationService:
    """Centralized capability checking; uses cache when available (5 min TTL typical).

    Only decisions are cached, never errors: a missing catalog entry or a
    malformed capability raises on every call.
    """

    def __init__(
        self,
        engine: PermissionResolutionEngine,
        cache: ICacheService | None = None,
        cache_ttl: int = 300,
    ) -> None:
        self.engine = engine
        self.cache = cache
        self.cache_ttl = cache_ttl

    def _cache_ready(self) -> bool:
        return self.cache is not None and self.cache.is_available()

    def _ttl_for(self, decision: CapabilityDecision) -> int:
        """Seconds a decision may be cached; 0 means do not cache.

        A decision made by an expiring override must not outlive the override.
        """
        if decision.expires_at is None:
            return self.cache_ttl
        remaining = int((decision.expires_at - self.engine.now()).total_seconds())
        return max(0, min(self.cache_ttl, remaining))

    async def has_capability(
        self, principal: Principal, capability: str | Capability
    ) -> bool:
        """Return True if principal holds capability. Uses cache if available."""
        cap = capability if isinstance(capability, Capability) else Capability.parse(capability)
        key = capability_cache_key(principal.tenant_id, principal.id, cap)
        if self._cache_ready():
            cached = await self.cache.get(key)
            if cached is not None:
                return bool(cached)

        decision = await self.engine.decide(principal, cap)
        ttl = self._ttl_for(decision)
        if ttl > 0 and self._cache_ready():
            await self.cache.set(key, decision.allowed, ttl=ttl)
        return decision.allowed

    async def require_capability(
        self, principal: Principal, capability: str | Capability
    ) -> None:
        """Raise AuthorizationException if principal lacks capability."""
        cap = capability if isinstance(capability, Capability) else Capability.parse(capability)
        if not await self.has_capability(principal, cap):
            raise AuthorizationException(module=cap.module, action=cap.action)

    async def invalidate_user_cache(self, user_id: str, tenant_id: str) -> None:
        """Invalidate cached decisions for one user."""
        if self._cache_ready():
            await self.cache.delete_pattern(f"capability:{tenant_id}:{user_id}:*")

    async def invalidate_tenant_cache(self, tenant_id: str) -> None:
        """Invalidate all cached decisions for a tenant (role grants changed)."""
        if self._cache_ready():
            await self.cache.delete_pattern(f"capability:{tenant_id}:*")
