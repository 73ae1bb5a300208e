"""Notification inbox for the current user."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response

from auditflow.api.v1.dependencies import get_current_principal, get_inbox_service
from auditflow.application.dtos.notification import NotificationFilters
from auditflow.application.services.notification_inbox import (
    MAX_PAGE_SIZE,
    NotificationInboxService,
)
from auditflow.core.limiter import limit_writes
from auditflow.domain.entities.principal import Principal
from auditflow.schemas.notification import (
    NotificationCountResponse,
    NotificationIdsRequest,
    NotificationListResponse,
    NotificationResponse,
    NotificationStatsResponse,
)

router = APIRouter()


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    principal: Annotated[Principal, Depends(get_current_principal)],
    inbox: Annotated[NotificationInboxService, Depends(get_inbox_service)],
    is_read: bool | None = None,
    type: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    search: str | None = Query(default=None, max_length=200),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=MAX_PAGE_SIZE),
):
    """List the caller's notifications, newest first."""
    result = await inbox.list_for_user(
        principal.id,
        NotificationFilters(
            is_read=is_read,
            type=type,
            start_date=start_date,
            end_date=end_date,
            search=search,
            page=page,
            limit=limit,
        ),
    )
    return NotificationListResponse(
        items=[NotificationResponse.model_validate(n) for n in result.items],
        page=result.page,
        limit=result.limit,
        total=result.total,
        pages=result.pages,
    )


@router.get("/stats", response_model=NotificationStatsResponse)
async def notification_stats(
    principal: Annotated[Principal, Depends(get_current_principal)],
    inbox: Annotated[NotificationInboxService, Depends(get_inbox_service)],
):
    stats = await inbox.stats(principal.id)
    return NotificationStatsResponse(
        total=stats.total, unread=stats.unread, read=stats.read, by_type=stats.by_type
    )


@router.post("/read", response_model=NotificationCountResponse)
@limit_writes
async def mark_notifications_read(
    request: Request,
    body: NotificationIdsRequest,
    principal: Annotated[Principal, Depends(get_current_principal)],
    inbox: Annotated[NotificationInboxService, Depends(get_inbox_service)],
):
    count = await inbox.mark_read(principal.id, body.ids)
    return NotificationCountResponse(count=count)


@router.post("/read-all", response_model=NotificationCountResponse)
@limit_writes
async def mark_all_notifications_read(
    request: Request,
    principal: Annotated[Principal, Depends(get_current_principal)],
    inbox: Annotated[NotificationInboxService, Depends(get_inbox_service)],
):
    count = await inbox.mark_all_read(principal.id)
    return NotificationCountResponse(count=count)


@router.post("/delete", response_model=NotificationCountResponse)
@limit_writes
async def delete_notifications(
    request: Request,
    body: NotificationIdsRequest,
    principal: Annotated[Principal, Depends(get_current_principal)],
    inbox: Annotated[NotificationInboxService, Depends(get_inbox_service)],
):
    count = await inbox.delete_many(principal.id, body.ids)
    return NotificationCountResponse(count=count)


@router.delete("/{notification_id}", status_code=204)
@limit_writes
async def delete_notification(
    request: Request,
    notification_id: str,
    principal: Annotated[Principal, Depends(get_current_principal)],
    inbox: Annotated[NotificationInboxService, Depends(get_inbox_service)],
) -> Response:
    await inbox.delete(principal.id, notification_id)
    return Response(status_code=204)
