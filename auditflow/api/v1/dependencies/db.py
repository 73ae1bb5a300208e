"""DB session dependencies and the commit-then-flush helper for workflow routes."""

from __future__ import annotations

from collections.abc import Awaitable
from typing import TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from auditflow.application.dtos.notification import DeliveryReport
from auditflow.application.interfaces.services import INotificationRouter
from auditflow.application.use_cases.workflows.outbox import TransitionOutcome
from auditflow.infrastructure.persistence.database import (
    get_db,
    get_db_transactional,
    get_session_factory,
)

__all__ = [
    "commit_then_flush",
    "get_db",
    "get_db_transactional",
    "get_session_factory",
]


T = TypeVar("T")


async def commit_then_flush(
    db: AsyncSession,
    router: INotificationRouter,
    transition: Awaitable[TransitionOutcome[T]],
) -> tuple[T, list[DeliveryReport]]:
    """Run a workflow transition, commit it, then route its outbox.

    The capability check that guarded the route already used this session, so
    the transition joins that transaction and is committed explicitly. Any
    error before commit rolls back and nothing is notified.
    """
    try:
        outcome = await transition
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    reports = await outcome.outbox.flush(router)
    return outcome.value, reports
