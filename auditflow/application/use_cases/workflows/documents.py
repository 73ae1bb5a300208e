"""Document and change-request notification hand-offs.

Document storage and versioning live elsewhere; these builders turn a
document event into an outbox entry with the attributes the templates use.
"""

from __future__ import annotations

from collections.abc import Sequence

from auditflow.application.dtos.notification import TransitionContext
from auditflow.application.use_cases.workflows.outbox import NotificationOutbox
from auditflow.domain.enums import TriggerType


def document_submitted_for_approval(
    tenant_id: str, actor_id: str, document_id: str, document_title: str
) -> NotificationOutbox:
    outbox = NotificationOutbox()
    outbox.add(
        TriggerType.DOCUMENT_SUBMITTED_FOR_APPROVAL,
        TransitionContext(
            tenant_id=tenant_id,
            actor_id=actor_id,
            subject_id=document_id,
            attributes={"document_id": document_id, "document_title": document_title},
        ),
    )
    return outbox


def document_published(
    tenant_id: str, actor_id: str | None, document_id: str, document_title: str
) -> NotificationOutbox:
    outbox = NotificationOutbox()
    outbox.add(
        TriggerType.DOCUMENT_PUBLISHED,
        TransitionContext(
            tenant_id=tenant_id,
            actor_id=actor_id,
            subject_id=document_id,
            attributes={"document_id": document_id, "document_title": document_title},
        ),
    )
    return outbox


def change_request_submitted(
    tenant_id: str,
    requester_id: str,
    change_request_id: str,
    document_id: str,
    document_title: str,
    requester_departments: Sequence[str] = (),
    requester_name: str | None = None,
    clause_number: str | None = None,
) -> NotificationOutbox:
    """Approvers in the requester's departments (any approver if the requester has none)."""
    outbox = NotificationOutbox()
    outbox.add(
        TriggerType.CHANGE_REQUEST_SUBMITTED,
        TransitionContext(
            tenant_id=tenant_id,
            actor_id=requester_id,
            subject_id=change_request_id,
            departments=tuple(dict.fromkeys(d for d in requester_departments if d)),
            attributes={
                "change_request_id": change_request_id,
                "document_id": document_id,
                "document_title": document_title,
                "requester_name": requester_name,
                "clause_number": clause_number,
                "requested_by_id": requester_id,
            },
        ),
    )
    return outbox


def change_request_approved(
    tenant_id: str,
    actor_id: str,
    change_request_id: str,
    document_id: str,
    document_title: str,
) -> NotificationOutbox:
    outbox = NotificationOutbox()
    outbox.add(
        TriggerType.CHANGE_REQUEST_APPROVED,
        TransitionContext(
            tenant_id=tenant_id,
            actor_id=actor_id,
            subject_id=change_request_id,
            attributes={
                "change_request_id": change_request_id,
                "document_id": document_id,
                "document_title": document_title,
            },
        ),
    )
    return outbox


def change_request_rejected(
    tenant_id: str,
    actor_id: str,
    change_request_id: str,
    requester_id: str,
    document_title: str,
) -> NotificationOutbox:
    outbox = NotificationOutbox()
    outbox.add(
        TriggerType.CHANGE_REQUEST_REJECTED,
        TransitionContext(
            tenant_id=tenant_id,
            actor_id=actor_id,
            subject_id=change_request_id,
            target_user_ids=(requester_id,),
            attributes={
                "change_request_id": change_request_id,
                "document_title": document_title,
            },
        ),
    )
    return outbox
