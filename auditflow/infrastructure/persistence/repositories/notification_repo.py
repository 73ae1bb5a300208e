"""Notification repositories.

NotificationStore opens one short transaction per notification from the
session factory, so a failed insert for one recipient cannot roll back the
others (implements INotificationStore). NotificationRepository serves the
recipient's inbox on a request session (implements INotificationInbox).
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from auditflow.application.dtos.notification import (
    NotificationFilters,
    NotificationPage,
    NotificationResult,
    NotificationStats,
)
from auditflow.infrastructure.persistence.models.notification import Notification
from auditflow.infrastructure.persistence.repositories.base import BaseRepository


def _to_result(n: Notification) -> NotificationResult:
    return NotificationResult(
        id=n.id,
        tenant_id=n.tenant_id,
        target_user_id=n.target_user_id,
        type=n.type,
        title=n.title,
        message=n.message,
        link=n.link,
        metadata=n.metadata_,
        is_read=n.is_read,
        created_at=n.created_at,
    )


class NotificationStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def create_notification(
        self,
        *,
        type: str,
        title: str,
        message: str,
        tenant_id: str,
        target_user_id: str,
        link: str | None,
        metadata: dict[str, Any] | None,
    ) -> NotificationResult:
        async with self._session_factory() as session:
            async with session.begin():
                notification = Notification(
                    tenant_id=tenant_id,
                    target_user_id=target_user_id,
                    type=type,
                    title=title,
                    message=message,
                    link=link,
                    metadata_=metadata,
                )
                session.add(notification)
                await session.flush()
                await session.refresh(notification)
            return _to_result(notification)


class NotificationRepository(BaseRepository[Notification]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Notification)

    async def list_for_user(
        self, user_id: str, filters: NotificationFilters
    ) -> NotificationPage:
        conditions = [Notification.target_user_id == user_id]
        if filters.is_read is not None:
            conditions.append(Notification.is_read.is_(filters.is_read))
        if filters.type:
            conditions.append(Notification.type == filters.type)
        if filters.start_date is not None:
            conditions.append(Notification.created_at >= filters.start_date)
        if filters.end_date is not None:
            conditions.append(Notification.created_at <= filters.end_date)
        if filters.search:
            pattern = f"%{filters.search}%"
            conditions.append(
                or_(Notification.title.ilike(pattern), Notification.message.ilike(pattern))
            )

        total = await self.db.scalar(
            select(func.count()).select_from(Notification).where(*conditions)
        )
        result = await self.db.execute(
            select(Notification)
            .where(*conditions)
            .order_by(Notification.created_at.desc(), Notification.id)
            .offset((filters.page - 1) * filters.limit)
            .limit(filters.limit)
        )
        return NotificationPage(
            items=[_to_result(n) for n in result.scalars().all()],
            page=filters.page,
            limit=filters.limit,
            total=total or 0,
        )

    async def mark_read(self, user_id: str, notification_ids: Sequence[str]) -> int:
        result = await self.db.execute(
            update(Notification)
            .where(
                Notification.target_user_id == user_id,
                Notification.id.in_(list(notification_ids)),
            )
            .values(is_read=True)
        )
        return result.rowcount or 0

    async def mark_all_read(self, user_id: str) -> int:
        result = await self.db.execute(
            update(Notification)
            .where(Notification.target_user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True)
        )
        return result.rowcount or 0

    async def delete_many(self, user_id: str, notification_ids: Sequence[str]) -> int:
        result = await self.db.execute(
            delete(Notification).where(
                Notification.target_user_id == user_id,
                Notification.id.in_(list(notification_ids)),
            )
        )
        return result.rowcount or 0

    async def stats(self, user_id: str) -> NotificationStats:
        result = await self.db.execute(
            select(
                Notification.type,
                func.count(),
                func.count().filter(Notification.is_read.is_(False)),
            )
            .where(Notification.target_user_id == user_id)
            .group_by(Notification.type)
        )
        by_type: dict[str, int] = {}
        total = unread = 0
        for type_, count, unread_count in result.all():
            by_type[type_] = count
            total += count
            unread += unread_count
        return NotificationStats(total=total, unread=unread, by_type=by_type)
