"""Notification inbox API schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    tenant_id: str
    target_user_id: str
    type: str
    title: str
    message: str
    link: str | None
    metadata: dict[str, Any] | None
    is_read: bool
    created_at: datetime | None


class NotificationListResponse(BaseModel):
    """Paginated inbox page."""

    items: list[NotificationResponse]
    page: int
    limit: int
    total: int
    pages: int


class NotificationStatsResponse(BaseModel):
    total: int
    unread: int
    read: int
    by_type: dict[str, int]


class NotificationIdsRequest(BaseModel):
    """Request body for bulk mark-read / delete."""

    ids: list[str] = Field(..., min_length=1, max_length=500)


class NotificationCountResponse(BaseModel):
    """Number of notifications affected by a bulk operation."""

    count: int
