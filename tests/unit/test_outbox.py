"""Tests for NotificationOutbox and commit_then_flush."""

from unittest.mock import AsyncMock

import pytest

from auditflow.api.v1.dependencies.db import commit_then_flush
from auditflow.application.dtos.notification import DeliveryReport, TransitionContext
from auditflow.application.use_cases.workflows.outbox import (
    NotificationOutbox,
    TransitionOutcome,
)
from auditflow.domain.enums import TriggerType
from auditflow.domain.exceptions import EmptyAudienceException, InvalidTransitionException


class RecordingRouter:
    def __init__(self, fail_on: TriggerType | None = None):
        self.routed: list[TriggerType] = []
        self.fail_on = fail_on

    async def route(self, trigger, context):
        if trigger is self.fail_on:
            raise EmptyAudienceException(trigger.value, "auditFinding:read")
        self.routed.append(trigger)
        return DeliveryReport(trigger=trigger)


def _outbox(*triggers: TriggerType) -> NotificationOutbox:
    outbox = NotificationOutbox()
    for trigger in triggers:
        outbox.add(trigger, TransitionContext(tenant_id="t1"))
    return outbox


async def test_flush_routes_in_order_and_empties() -> None:
    outbox = _outbox(TriggerType.DOCUMENT_PUBLISHED, TriggerType.CHANGE_REQUEST_APPROVED)
    router = RecordingRouter()

    reports = await outbox.flush(router)

    assert router.routed == [TriggerType.DOCUMENT_PUBLISHED, TriggerType.CHANGE_REQUEST_APPROVED]
    assert len(reports) == 2
    assert len(outbox) == 0


async def test_flush_logs_and_continues_on_routing_error() -> None:
    """After commit a routing failure cannot undo the transition, so it is not raised."""
    outbox = _outbox(TriggerType.FINDINGS_COMMITTED, TriggerType.DOCUMENT_PUBLISHED)
    router = RecordingRouter(fail_on=TriggerType.FINDINGS_COMMITTED)

    reports = await outbox.flush(router)

    assert router.routed == [TriggerType.DOCUMENT_PUBLISHED]
    assert len(reports) == 1


async def test_commit_then_flush_commits_before_routing() -> None:
    db = AsyncMock()
    order: list[str] = []
    db.commit.side_effect = lambda: order.append("commit")

    async def transition():
        return TransitionOutcome("value", _outbox(TriggerType.DOCUMENT_PUBLISHED))

    class OrderedRouter(RecordingRouter):
        async def route(self, trigger, context):
            order.append("route")
            return await super().route(trigger, context)

    value, reports = await commit_then_flush(db, OrderedRouter(), transition())

    assert value == "value"
    assert len(reports) == 1
    assert order == ["commit", "route"]
    db.rollback.assert_not_awaited()


async def test_commit_then_flush_rolls_back_and_notifies_nobody() -> None:
    db = AsyncMock()
    router = RecordingRouter()

    async def transition():
        raise InvalidTransitionException("audit", "a1", "No pending findings to commit")

    with pytest.raises(InvalidTransitionException):
        await commit_then_flush(db, router, transition())

    db.rollback.assert_awaited_once()
    db.commit.assert_not_awaited()
    assert router.routed == []
