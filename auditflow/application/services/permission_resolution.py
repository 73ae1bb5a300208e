"""Permission resolution engine: principal + capability -> grant or deny.

Resolution order:

1. An active per-user override for the capability decides outright
   (allowed=True grants, allowed=False denies).
2. Otherwise every role the principal carries (tenant-wide and
   department-scoped alike) is re-checked against the store; roles owned by
   another tenant are dropped and logged, never trusted.
3. Any remaining role with an allowed grant for the capability grants.
4. Otherwise deny.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from auditflow.application.dtos.permission import CapabilityDecision
from auditflow.application.interfaces.repositories import IPermissionStore
from auditflow.domain.entities.principal import Principal
from auditflow.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    ResourceNotFoundException,
    ValidationException,
)
from auditflow.domain.value_objects.capability import Capability
from auditflow.shared.telemetry.logging import get_logger
from auditflow.shared.utils.datetime import ensure_utc, utc_now

logger = get_logger(__name__)

STAGE_OVERRIDE_ALLOW = "override_allow"
STAGE_OVERRIDE_DENY = "override_deny"
STAGE_ROLE_GRANT = "role_grant"
STAGE_NO_GRANT = "no_grant"


def _coerce_capability(capability: str | Capability) -> Capability:
    if isinstance(capability, Capability):
        return capability
    return Capability.parse(capability)


class PermissionResolutionEngine:
    """Decides whether a principal holds a capability (implements ICapabilityChecker)."""

    def __init__(
        self,
        store: IPermissionStore,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._clock = clock

    def now(self) -> datetime:
        """Current instant as the engine sees it (override expiry is judged against it)."""
        return self._clock()

    async def decide(
        self, principal: Principal, capability: str | Capability
    ) -> CapabilityDecision:
        """Resolve and return the decision with the stage that produced it.

        Raises:
            AuthenticationException: principal missing or without id.
            ValidationException: tenant missing or capability malformed.
            ResourceNotFoundException: capability not in the catalog.
        """
        if principal is None or not principal.id:
            raise AuthenticationException("Principal has no identifier")
        if not principal.tenant_id:
            raise ValidationException("Principal has no tenant context", field="tenant_id")
        cap = _coerce_capability(capability)

        permission = await self._store.get_permission(cap.module, cap.action)
        if permission is None:
            raise ResourceNotFoundException("capability", cap.code)

        overrides = await self._store.get_active_overrides(
            principal.id, permission.id, self.now()
        )
        if overrides:
            expiries = [
                e for e in (ensure_utc(o.expires_at) for o in overrides) if e is not None
            ]
            expires_at = min(expiries) if expiries else None
            # One row per (user, permission); if several slip through, denial wins.
            if any(not o.allowed for o in overrides):
                logger.debug(
                    "Capability %s denied for user %s by override", cap, principal.id
                )
                return CapabilityDecision(
                    allowed=False, stage=STAGE_OVERRIDE_DENY, expires_at=expires_at
                )
            logger.debug("Capability %s granted to user %s by override", cap, principal.id)
            return CapabilityDecision(
                allowed=True, stage=STAGE_OVERRIDE_ALLOW, expires_at=expires_at
            )

        candidate_ids = principal.candidate_role_ids()
        if not candidate_ids:
            logger.debug(
                "Capability %s denied for user %s: no role assignments", cap, principal.id
            )
            return CapabilityDecision(allowed=False, stage=STAGE_NO_GRANT)

        roles = await self._store.get_roles(candidate_ids)
        owned = [r.id for r in roles if r.tenant_id == principal.tenant_id]
        rejected = tuple(rid for rid in candidate_ids if rid not in owned)
        if rejected:
            logger.warning(
                "Tenant mismatch for user %s in tenant %s: ignoring roles %s",
                principal.id,
                principal.tenant_id,
                list(rejected),
            )

        granting = None
        if owned:
            granting = await self._store.find_granting_role(
                owned, permission.id, principal.tenant_id
            )
        if granting is not None:
            logger.debug(
                "Capability %s granted to user %s via role %s",
                cap,
                principal.id,
                granting.id,
            )
            return CapabilityDecision(
                allowed=True,
                stage=STAGE_ROLE_GRANT,
                role_id=granting.id,
                rejected_role_ids=rejected,
            )

        logger.debug(
            "Capability %s denied for user %s: no granting role among %d",
            cap,
            principal.id,
            len(owned),
        )
        return CapabilityDecision(
            allowed=False, stage=STAGE_NO_GRANT, rejected_role_ids=rejected
        )

    async def resolve(self, principal: Principal, capability: str | Capability) -> bool:
        """Return True if the principal holds the capability in its own tenant."""
        decision = await self.decide(principal, capability)
        return decision.allowed

    async def has_capability(
        self, principal: Principal, capability: str | Capability
    ) -> bool:
        return await self.resolve(principal, capability)

    async def require_capability(
        self, principal: Principal, capability: str | Capability
    ) -> None:
        """Raise AuthorizationException (403) naming the capability if not held."""
        cap = _coerce_capability(capability)
        if not await self.resolve(principal, cap):
            raise AuthorizationException(module=cap.module, action=cap.action)
