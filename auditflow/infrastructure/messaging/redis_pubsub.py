"""Redis Pub/Sub for real-time notification delivery across workers.

The publisher implements IRealtimeDispatcher: emit_to_channel publishes to
``notifications:{tenant_id}:{user_id}``. Every worker runs
run_notification_relay, which pattern-subscribes to ``notifications:*`` and
hands each message to its local WebSocket ConnectionManager, so a user is
reached whichever worker holds the socket.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import redis.asyncio as redis

from auditflow.core.config import get_settings
from auditflow.infrastructure.exceptions import RealtimeUnavailableException

logger = logging.getLogger(__name__)

CHANNEL_PREFIX = "notifications"


def notification_channel(tenant_id: str, user_id: str) -> str:
    """Channel name for one recipient."""
    return f"{CHANNEL_PREFIX}:{tenant_id}:{user_id}"


def parse_notification_channel(channel: str | bytes | None) -> tuple[str, str] | None:
    """Return (tenant_id, user_id) from a channel name, or None if malformed."""
    if isinstance(channel, bytes):
        channel = channel.decode()
    if not channel:
        return None
    parts = channel.split(":")
    if len(parts) != 3 or parts[0] != CHANNEL_PREFIX or not parts[1] or not parts[2]:
        return None
    return parts[1], parts[2]


class _RedisPubSubBase:
    """Shared Redis connection logic for notification pub/sub."""

    def __init__(self, redis_client: redis.Redis | None = None) -> None:
        """Initialize. Pass redis_client for DI/testing."""
        self.redis = redis_client
        self.settings = get_settings()
        self._connected = redis_client is not None

    async def connect(self) -> None:
        """Establish Redis connection. Call on app startup."""
        if self._connected:
            return
        if self.redis is None:
            try:
                self.redis = redis.Redis(
                    host=self.settings.redis_host,
                    port=self.settings.redis_port,
                    db=self.settings.redis_db,
                    password=(
                        self.settings.redis_password.get_secret_value()
                        if self.settings.redis_password
                        else None
                    ),
                    decode_responses=True,
                    socket_connect_timeout=5,
                )
                await self.redis.ping()
                self._connected = True
                logger.info("Redis pub/sub connected")
            except (redis.ConnectionError, redis.TimeoutError) as e:
                logger.warning("Redis pub/sub connection failed: %s", e)
                self._connected = False
                self.redis = None

    async def disconnect(self) -> None:
        """Close Redis connection. Call on app shutdown."""
        if self.redis:
            await self.redis.aclose()
            self._connected = False
            logger.info("Redis pub/sub disconnected")

    def is_available(self) -> bool:
        """Return True if Redis is connected."""
        return self._connected and self.redis is not None


class NotificationPublisher(_RedisPubSubBase):
    """Publishes notification events to per-recipient Redis channels (implements IRealtimeDispatcher)."""

    async def emit_to_channel(
        self, principal_id: str, event_name: str, payload: dict[str, Any]
    ) -> None:
        """Publish {"event", "data"} to the recipient's channel.

        Raises:
            RealtimeUnavailableException: Redis not connected.
            redis.RedisError: publish failed.
        """
        tenant_id = str(payload.get("tenantId") or "")
        channel = notification_channel(tenant_id, principal_id)
        if not self.is_available() or self.redis is None:
            raise RealtimeUnavailableException(channel)
        message = json.dumps({"event": event_name, "data": payload})
        receivers = await self.redis.publish(channel, message)
        logger.debug("Published %s to %s (%s subscribers)", event_name, channel, receivers)


async def run_notification_relay(app: Any) -> None:
    """Subscribe to notifications:* and forward each message to local WebSocket connections.

    Call as a background task from lifespan when realtime_backend is 'redis'.
    Cancelling the task stops the loop.
    """
    subscriber = _RedisPubSubBase()
    await subscriber.connect()
    if not subscriber.is_available() or subscriber.redis is None:
        logger.warning("Redis not available, notification relay not started")
        return
    pubsub = subscriber.redis.pubsub()
    try:
        await pubsub.psubscribe(f"{CHANNEL_PREFIX}:*")
        logger.info("Subscribed to %s:* for WebSocket relay", CHANNEL_PREFIX)
        async for message in pubsub.listen():
            if message["type"] != "pmessage":
                continue
            target = parse_notification_channel(message.get("channel"))
            if target is None:
                continue
            tenant_id, user_id = target
            try:
                data = json.loads(message["data"])
                event_name = data["event"]
                payload = data["data"]
            except (json.JSONDecodeError, KeyError, TypeError):
                logger.exception("Failed to parse notification message")
                continue
            manager = getattr(app.state, "ws_manager", None)
            if manager is not None:
                await manager.emit_to_channel(
                    user_id, event_name, payload, tenant_id=tenant_id
                )
    except asyncio.CancelledError:
        logger.info("Notification relay task cancelled")
    except Exception:
        logger.exception("Notification relay error")
    finally:
        await pubsub.punsubscribe()
        await pubsub.aclose()
        await subscriber.disconnect()
