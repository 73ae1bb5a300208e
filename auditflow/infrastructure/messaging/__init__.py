"""Messaging: Redis pub/sub publisher and relay for real-time notifications."""

from auditflow.infrastructure.messaging.redis_pubsub import (
    NotificationPublisher,
    run_notification_relay,
)

__all__ = ["NotificationPublisher", "run_notification_relay"]
