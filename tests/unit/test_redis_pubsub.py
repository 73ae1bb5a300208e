"""Tests for the Redis notification channels and publisher."""

import json
from unittest.mock import AsyncMock

import pytest

from auditflow.infrastructure.exceptions import RealtimeUnavailableException
from auditflow.infrastructure.messaging.redis_pubsub import (
    NotificationPublisher,
    notification_channel,
    parse_notification_channel,
)


def test_channel_round_trip() -> None:
    channel = notification_channel("t1", "u1")

    assert channel == "notifications:t1:u1"
    assert parse_notification_channel(channel) == ("t1", "u1")
    assert parse_notification_channel(channel.encode()) == ("t1", "u1")


@pytest.mark.parametrize(
    "channel",
    [None, "", "notifications:t1", "notifications::u1", "other:t1:u1", "notifications:t1:u1:x"],
)
def test_malformed_channels(channel) -> None:
    assert parse_notification_channel(channel) is None


async def test_publisher_publishes_event_envelope() -> None:
    client = AsyncMock()
    client.publish.return_value = 1
    publisher = NotificationPublisher(client)
    payload = {"id": "n1", "tenantId": "t1", "userId": "u1"}

    await publisher.emit_to_channel("u1", "notificationCreated", payload)

    channel, message = client.publish.await_args.args
    assert channel == "notifications:t1:u1"
    assert json.loads(message) == {"event": "notificationCreated", "data": payload}


async def test_publisher_without_redis_raises() -> None:
    publisher = NotificationPublisher()

    with pytest.raises(RealtimeUnavailableException) as exc_info:
        await publisher.emit_to_channel("u1", "notificationCreated", {"tenantId": "t1"})
    assert exc_info.value.details == {"channel": "notifications:t1:u1"}
