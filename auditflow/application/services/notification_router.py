"""Workflow notification router: one transition -> audience -> persisted + pushed notifications.

Per transition:

1. Build the audience from the trigger's rules (capability discovery, per
   department where the rule says so, or explicit target ids).
2. Drop the actor, then deduplicate by principal id (first rule wins the labels).
3. Persist one notification per recipient; a failed insert is recorded and
   does not affect other recipients.
4. Only after a record is persisted, push it on the recipient's real-time
   channel; a failed push is recorded and never undoes the record.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

from auditflow.application.dtos.notification import (
    AudienceMember,
    DeliveryReport,
    NotificationResult,
    PartialDeliveryFailure,
    TransitionContext,
)
from auditflow.application.interfaces.repositories import INotificationStore
from auditflow.application.interfaces.services import (
    IRealtimeDispatcher,
    IRecipientDiscovery,
)
from auditflow.application.services.notification_templates import (
    NotificationTemplateRenderer,
)
from auditflow.domain.enums import TriggerType
from auditflow.domain.exceptions import EmptyAudienceException, ValidationException
from auditflow.domain.value_objects.capability import Capability
from auditflow.shared.enums import RealtimeEvent
from auditflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class AudienceRule:
    """One source of recipients for a trigger.

    capability=None means the explicit target_user_ids of the context.
    per_department runs one discovery query per context department.
    """

    link: str | None
    capability: str | None = None
    per_department: bool = False


@dataclass(frozen=True)
class TriggerRule:
    audiences: tuple[AudienceRule, ...]
    required: bool = False


TRIGGER_RULES: dict[TriggerType, TriggerRule] = {
    TriggerType.FINDINGS_COMMITTED: TriggerRule(
        audiences=(
            AudienceRule("findings_review", "auditFinding:read", per_department=True),
        ),
        required=True,
    ),
    TriggerType.FINDINGS_CATEGORIZATION_FINISHED: TriggerRule(
        audiences=(
            AudienceRule("findings_review", "auditFinding:read", per_department=True),
            AudienceRule("program_audit", "auditProgram:create"),
        ),
    ),
    TriggerType.FINDING_REVIEWED: TriggerRule(
        audiences=(AudienceRule("findings_manager"),),
    ),
    TriggerType.FINDINGS_REVIEW_FINISHED: TriggerRule(
        audiences=(AudienceRule("findings_manager"),),
    ),
    TriggerType.AUDIT_PROGRAM_COMMITTED: TriggerRule(
        audiences=(AudienceRule("audit_program", "auditProgram:approve"),),
    ),
    TriggerType.AUDIT_PROGRAM_APPROVED: TriggerRule(
        audiences=(AudienceRule("audit_program", "auditProgram:read"),),
    ),
    TriggerType.AUDIT_PROGRAM_REJECTED: TriggerRule(
        audiences=(AudienceRule("audit_program", "auditProgram:create"),),
    ),
    TriggerType.DOCUMENT_SUBMITTED_FOR_APPROVAL: TriggerRule(
        audiences=(AudienceRule("document", "document:approve"),),
    ),
    TriggerType.DOCUMENT_PUBLISHED: TriggerRule(
        audiences=(AudienceRule("document", "document:read"),),
    ),
    TriggerType.CHANGE_REQUEST_SUBMITTED: TriggerRule(
        audiences=(
            AudienceRule(
                "change_request", "documentChangeRequest:approve", per_department=True
            ),
        ),
    ),
    TriggerType.CHANGE_REQUEST_APPROVED: TriggerRule(
        audiences=(AudienceRule("change_request", "document:publish"),),
    ),
    TriggerType.CHANGE_REQUEST_REJECTED: TriggerRule(
        audiences=(AudienceRule("change_request"),),
    ),
}


class NotificationRouter:
    """Routes workflow transitions to capability holders (implements INotificationRouter)."""

    def __init__(
        self,
        discovery: IRecipientDiscovery,
        store: INotificationStore,
        dispatcher: IRealtimeDispatcher | None = None,
        renderer: NotificationTemplateRenderer | None = None,
        rules: dict[TriggerType, TriggerRule] | None = None,
        concurrency: int = 5,
    ) -> None:
        self._discovery = discovery
        self._store = store
        self._dispatcher = dispatcher
        self._renderer = renderer or NotificationTemplateRenderer()
        self._rules = TRIGGER_RULES if rules is None else rules
        self._concurrency = max(1, concurrency)

    async def route(
        self, trigger: TriggerType, context: TransitionContext
    ) -> DeliveryReport:
        """Persist and dispatch notifications for one transition.

        Raises:
            ValidationException: no rule for trigger or missing tenant.
            EmptyAudienceException: a required hand-off found nobody to notify.
        """
        members = await self.ensure_audience(trigger, context)
        report = DeliveryReport(trigger=trigger, audience=[m.principal_id for m in members])

        if not members:
            logger.info(
                "No recipients for %s in tenant %s", trigger.value, context.tenant_id
            )
            return report

        title, message = self._renderer.render(trigger, context)
        semaphore = asyncio.Semaphore(self._concurrency)

        async def deliver(member: AudienceMember) -> None:
            async with semaphore:
                await self._deliver_one(trigger, context, member, title, message, report)

        await asyncio.gather(*(deliver(m) for m in members))

        # gather completes in arbitrary order; keep the report in audience order.
        order = {pid: i for i, pid in enumerate(report.audience)}
        report.persisted.sort(key=lambda n: order.get(n.target_user_id, len(order)))
        report.dispatched.sort(key=lambda pid: order.get(pid, len(order)))

        logger.info(
            "Routed %s in tenant %s: %d recipients, %d persisted, %d dispatched, %d failures",
            trigger.value,
            context.tenant_id,
            len(members),
            len(report.persisted),
            len(report.dispatched),
            len(report.failures),
        )
        return report

    route_workflow_notification = route

    def _rule_for(self, trigger: TriggerType, context: TransitionContext) -> TriggerRule:
        rule = self._rules.get(trigger)
        if rule is None:
            raise ValidationException(f"No routing rule for trigger {trigger}", field="trigger")
        if not context.tenant_id:
            raise ValidationException("Transition has no tenant context", field="tenant_id")
        return rule

    async def ensure_audience(
        self, trigger: TriggerType, context: TransitionContext
    ) -> list[AudienceMember]:
        """Return the deduplicated audience (actor excluded) without notifying anyone.

        A required hand-off with nobody to notify raises.

        Use cases call this before mutating state so the transition and its
        hand-off fail together.
        """
        rule = self._rule_for(trigger, context)
        members = await self._collect_audience(rule, context)
        if not members and rule.required:
            capability = next(
                (a.capability for a in rule.audiences if a.capability), "recipient"
            )
            raise EmptyAudienceException(
                trigger.value, capability, list(context.departments)
            )
        return members

    async def _collect_audience(
        self, rule: TriggerRule, context: TransitionContext
    ) -> list[AudienceMember]:
        collected: list[AudienceMember] = []
        for audience in rule.audiences:
            link = self._renderer.render_link(audience.link, context)
            if audience.capability is None:
                collected.extend(
                    AudienceMember(principal_id=uid, link=link)
                    for uid in context.target_user_ids
                    if uid
                )
                continue

            cap = Capability.parse(audience.capability)
            departments: tuple[str | None, ...] = (None,)
            if audience.per_department and context.departments:
                departments = context.departments
            for department in departments:
                found = await self._discovery.find_eligible_recipients(
                    context.tenant_id, cap.module, cap.action, department
                )
                collected.extend(
                    AudienceMember(
                        principal_id=r.principal_id,
                        link=link,
                        role_name=r.role_name,
                        department_name=r.department_name,
                    )
                    for r in found
                )

        # Self-exclusion before deduplication.
        if context.actor_id:
            collected = [m for m in collected if m.principal_id != context.actor_id]

        unique: dict[str, AudienceMember] = {}
        for member in collected:
            unique.setdefault(member.principal_id, member)
        return list(unique.values())

    async def _deliver_one(
        self,
        trigger: TriggerType,
        context: TransitionContext,
        member: AudienceMember,
        title: str,
        message: str,
        report: DeliveryReport,
    ) -> None:
        try:
            notification = await self._store.create_notification(
                type=trigger.value,
                title=title,
                message=message,
                tenant_id=context.tenant_id,
                target_user_id=member.principal_id,
                link=member.link,
                metadata=_metadata(context, member),
            )
        except Exception as exc:
            logger.exception(
                "Failed to persist %s notification for user %s",
                trigger.value,
                member.principal_id,
            )
            report.failures.append(
                PartialDeliveryFailure(member.principal_id, "persist", str(exc))
            )
            return

        report.persisted.append(notification)
        if self._dispatcher is None:
            return
        try:
            await self._dispatch(notification)
        except Exception as exc:
            logger.warning(
                "Real-time dispatch of notification %s to user %s failed: %s",
                notification.id,
                member.principal_id,
                exc,
            )
            report.failures.append(
                PartialDeliveryFailure(member.principal_id, "dispatch", str(exc))
            )
            return
        report.dispatched.append(member.principal_id)

    async def _dispatch(self, notification: NotificationResult) -> None:
        await self._dispatcher.emit_to_channel(
            notification.target_user_id,
            RealtimeEvent.NOTIFICATION_CREATED.value,
            notification.to_payload(),
        )


def _metadata(context: TransitionContext, member: AudienceMember) -> dict[str, Any]:
    metadata: dict[str, Any] = dict(context.attributes)
    if context.actor_id:
        metadata["actorId"] = context.actor_id
    if context.subject_id:
        metadata["subjectId"] = context.subject_id
    if context.departments:
        metadata["departments"] = list(context.departments)
    if member.role_name:
        metadata["recipientRole"] = member.role_name
    if member.department_name:
        metadata["recipientDepartment"] = member.department_name
    return metadata
