"""Notification-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from .common import ApiModel, Pagination


class NotificationRef(ApiModel):
    """Short reference to the question or answer a notification is about."""

    id: int
    title: str | None = None


class NotificationOut(ApiModel):
    """A notification as shown to its recipient."""

    id: int
    type: str
    title: str
    message: str
    sender_id: int
    is_read: bool
    read_at: datetime | None = None
    created_at: datetime
    question: NotificationRef | None = None
    answer: NotificationRef | None = None

    @classmethod
    def from_notification(cls, notification: Any) -> NotificationOut:
        question = notification.question
        answer = notification.answer
        return cls(
            id=notification.id,
            type=notification.type,
            title=notification.title,
            message=notification.message,
            sender_id=notification.sender_id,
            is_read=notification.is_read,
            read_at=notification.read_at,
            created_at=notification.created_at,
            question=NotificationRef(id=question.id, title=question.title) if question else None,
            answer=NotificationRef(id=answer.id) if answer else None,
        )


class NotificationListResponse(ApiModel):
    notifications: list[NotificationOut]
    unread_count: int
    pagination: Pagination


class UnreadCountResponse(ApiModel):
    unread_count: int


class NotificationReadResponse(ApiModel):
    message: str
    notification: NotificationOut


class MarkAllReadResponse(ApiModel):
    message: str
    updated_count: int
