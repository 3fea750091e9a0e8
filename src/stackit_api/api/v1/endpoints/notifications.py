# src/stackit_api/api/v1/endpoints/notifications.py
"""Notification endpoints for the signed-in user."""

from fastapi import APIRouter, Query

from stackit_api.api.v1.dependencies import CurrentUserDep, SessionDep
from stackit_api.core.settings import settings
from stackit_api.schemas import (
    MarkAllReadResponse,
    MessageResponse,
    NotificationListResponse,
    NotificationOut,
    NotificationReadResponse,
    Pagination,
    UnreadCountResponse,
)
from stackit_api.services import notifications as notification_service

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    db: SessionDep,
    current_user: CurrentUserDep,
    page: int = Query(1, description="Page number, starting at 1"),
    limit: int = Query(settings.notification_page_size, description="Notifications per page"),
    unread_only: bool = Query(False, alias="unreadOnly"),
) -> NotificationListResponse:
    """List the caller's notifications, newest first."""
    result, unread = notification_service.list_notifications(
        db,
        current_user.id,
        page=page,
        page_size=limit,
        unread_only=unread_only,
    )
    return NotificationListResponse(
        notifications=[NotificationOut.from_notification(n) for n in result.items],
        unread_count=unread,
        pagination=Pagination.from_page(result),
    )


@router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(db: SessionDep, current_user: CurrentUserDep) -> UnreadCountResponse:
    return UnreadCountResponse(
        unread_count=notification_service.unread_count(db, current_user.id)
    )


@router.put("/mark-all-read", response_model=MarkAllReadResponse)
async def mark_all_read(db: SessionDep, current_user: CurrentUserDep) -> MarkAllReadResponse:
    updated = notification_service.mark_all_read(db, current_user.id)
    return MarkAllReadResponse(
        message="All notifications marked as read",
        updated_count=updated,
    )


@router.put("/{notification_id}/read", response_model=NotificationReadResponse)
async def mark_read(
    notification_id: int,
    db: SessionDep,
    current_user: CurrentUserDep,
) -> NotificationReadResponse:
    notification = notification_service.mark_read(db, notification_id, current_user.id)
    return NotificationReadResponse(
        message="Notification marked as read",
        notification=NotificationOut.from_notification(notification),
    )


@router.delete("/{notification_id}", response_model=MessageResponse)
async def delete_notification(
    notification_id: int,
    db: SessionDep,
    current_user: CurrentUserDep,
) -> MessageResponse:
    notification_service.delete_notification(db, notification_id, current_user.id)
    return MessageResponse(message="Notification deleted successfully")
