"""Notification inbox: recipient-scoped listing, read state, deletion, stats."""

from __future__ import annotations

from collections.abc import Sequence

from auditflow.application.dtos.notification import (
    NotificationFilters,
    NotificationPage,
    NotificationStats,
)
from auditflow.application.interfaces.repositories import INotificationInbox
from auditflow.domain.exceptions import ResourceNotFoundException, ValidationException

MAX_PAGE_SIZE = 100


class NotificationInboxService:
    """Every operation is scoped to the requesting user; other users' rows are invisible."""

    def __init__(self, inbox: INotificationInbox, default_page_size: int = 20) -> None:
        self._inbox = inbox
        self._default_page_size = default_page_size

    async def list_for_user(
        self, user_id: str, filters: NotificationFilters | None = None
    ) -> NotificationPage:
        filters = filters or NotificationFilters(limit=self._default_page_size)
        if filters.page < 1:
            raise ValidationException("page must be >= 1", field="page")
        if not 1 <= filters.limit <= MAX_PAGE_SIZE:
            raise ValidationException(
                f"limit must be between 1 and {MAX_PAGE_SIZE}", field="limit"
            )
        if (
            filters.start_date is not None
            and filters.end_date is not None
            and filters.start_date > filters.end_date
        ):
            raise ValidationException("start_date must not be after end_date", field="start_date")
        return await self._inbox.list_for_user(user_id, filters)

    async def mark_read(self, user_id: str, notification_ids: Sequence[str]) -> int:
        """Mark the given notifications read; returns how many belonged to the user."""
        if not notification_ids:
            raise ValidationException("notification_ids must not be empty", field="ids")
        return await self._inbox.mark_read(user_id, list(notification_ids))

    async def mark_all_read(self, user_id: str) -> int:
        return await self._inbox.mark_all_read(user_id)

    async def delete(self, user_id: str, notification_id: str) -> None:
        """Delete one notification. Raises ResourceNotFoundException if not the user's."""
        deleted = await self._inbox.delete_many(user_id, [notification_id])
        if not deleted:
            raise ResourceNotFoundException("notification", notification_id)

    async def delete_many(self, user_id: str, notification_ids: Sequence[str]) -> int:
        if not notification_ids:
            raise ValidationException("notification_ids must not be empty", field="ids")
        return await self._inbox.delete_many(user_id, list(notification_ids))

    async def stats(self, user_id: str) -> NotificationStats:
        return await self._inbox.stats(user_id)
