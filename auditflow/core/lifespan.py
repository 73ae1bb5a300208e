"""Application lifespan: startup and shutdown.

Only wiring of infrastructure: logging, WebSocket manager, Redis cache,
real-time dispatcher (local sockets or Redis pub/sub + relay), DB engine dispose.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from auditflow.api.websocket import ConnectionManager
from auditflow.core.config import get_settings
from auditflow.infrastructure.persistence.database import dispose_engine
from auditflow.shared.telemetry.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: logging, WebSocket manager, Redis cache (if enabled),
    real-time dispatcher. Shutdown order: relay task, publisher, cache,
    SQL engine dispose.
    """
    settings = get_settings()
    setup_logging()

    # ---- Startup ----
    app.state.ws_manager = ConnectionManager()
    app.state.realtime_dispatcher = app.state.ws_manager
    app.state.notification_publisher = None
    app.state.notification_relay_task = None

    if settings.redis_enabled:
        from auditflow.infrastructure.cache.redis_cache import CacheService

        cache = CacheService()
        await cache.connect()
        app.state.cache = cache
    else:
        app.state.cache = None

    if settings.realtime_backend == "redis":
        from auditflow.infrastructure.messaging.redis_pubsub import (
            NotificationPublisher,
            run_notification_relay,
        )

        publisher = NotificationPublisher()
        await publisher.connect()
        app.state.notification_publisher = publisher
        app.state.realtime_dispatcher = publisher
        app.state.notification_relay_task = asyncio.create_task(
            run_notification_relay(app)
        )
        logger.info("Real-time notifications via Redis pub/sub")
    else:
        logger.info("Real-time notifications via in-process WebSocket manager")

    yield

    # ---- Shutdown ----
    relay_task = getattr(app.state, "notification_relay_task", None)
    if relay_task is not None:
        relay_task.cancel()
        try:
            await relay_task
        except asyncio.CancelledError:
            pass
        logger.info("Notification relay task stopped")

    publisher = getattr(app.state, "notification_publisher", None)
    if publisher is not None:
        await publisher.disconnect()

    if getattr(app.state, "cache", None) is not None:
        await app.state.cache.disconnect()
        logger.info("Cache disconnected")

    await dispose_engine()
    logger.info("Database engine disposed")
