"""Notification dispatch and read-state management.

The :class:`NotificationDispatcher` writes notifications in its own session,
scheduled as a FastAPI background task so the triggering request has already
been answered. A failed or slow write is logged and dropped; it never undoes
or fails the action that triggered it.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Callable, Iterable
from contextlib import AbstractContextManager
from typing import Any

from fastapi import BackgroundTasks
from fastapi.concurrency import run_in_threadpool
from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from stackit_api.core.errors import NotFound
from stackit_api.core.settings import settings
from stackit_api.db.session import session_scope
from stackit_api.db.time import utcnow
from stackit_api.models import Answer, Notification, NotificationType, Question, User
from stackit_api.services.query import Page, paginate

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], AbstractContextManager[Session]]

TITLE_MAX_LENGTH = 300
MENTION_PATTERN = re.compile(r"(?<![\w@])@([A-Za-z0-9_][A-Za-z0-9_.-]{0,99})")


def extract_mentions(text: str) -> list[str]:
    """Return the distinct ``@username`` handles in ``text``, in order of appearance."""
    seen: dict[str, None] = {}
    for match in MENTION_PATTERN.finditer(text):
        seen.setdefault(match.group(1).rstrip(".-"), None)
    return [name for name in seen if name]


def _clip(text: str, limit: int = TITLE_MAX_LENGTH) -> str:
    return text if len(text) <= limit else text[: limit - 3] + "..."


class NotificationDispatcher:
    """Creates notifications on behalf of triggering actions."""

    def __init__(
        self,
        session_factory: SessionFactory = session_scope,
        timeout_seconds: float | None = None,
    ) -> None:
        self._session_factory = session_factory
        self.timeout_seconds = (
            settings.notification_timeout_seconds if timeout_seconds is None else timeout_seconds
        )

    def notify(
        self,
        *,
        recipient_id: int,
        sender_id: int,
        type: NotificationType,
        title: str,
        message: str,
        question_id: int | None = None,
        answer_id: int | None = None,
    ) -> int | None:
        """Store one notification and return its id.

        Returns None when the notification was suppressed (a user is never
        notified about their own action) or could not be stored.
        """
        if recipient_id == sender_id:
            logger.debug("Suppressed %s notification to its own sender %s", type.value, sender_id)
            return None

        with self._session_factory() as db:
            notification = Notification(
                recipient_id=recipient_id,
                sender_id=sender_id,
                type=type.value,
                title=_clip(title),
                message=message,
                question_id=question_id,
                answer_id=answer_id,
            )
            try:
                db.add(notification)
                db.commit()
            except SQLAlchemyError:
                db.rollback()
                logger.exception(
                    "Failed to store %s notification for user %s", type.value, recipient_id
                )
                return None
            return notification.id

    async def dispatch(self, **payload: Any) -> None:
        """Run :meth:`notify` off the event loop, bounded by the configured timeout."""
        try:
            await asyncio.wait_for(
                run_in_threadpool(lambda: self.notify(**payload)),
                timeout=self.timeout_seconds,
            )
        except TimeoutError:
            logger.warning(
                "Timed out after %.1fs storing %s notification for user %s",
                self.timeout_seconds,
                payload.get("type"),
                payload.get("recipient_id"),
            )

    def schedule(self, background_tasks: BackgroundTasks, **payload: Any) -> None:
        """Queue a notification to be written after the response is sent."""
        if payload.get("recipient_id") == payload.get("sender_id"):
            return
        background_tasks.add_task(self.dispatch, **payload)

    # --- Triggering events -------------------------------------------------------

    def question_answered(
        self,
        background_tasks: BackgroundTasks,
        *,
        question: Question,
        answer: Answer,
        sender: User,
    ) -> None:
        self.schedule(
            background_tasks,
            recipient_id=question.author_id,
            sender_id=sender.id,
            type=NotificationType.QUESTION_ANSWERED,
            title=f"New answer to: {question.title}",
            message=f"{sender.full_name} answered your question",
            question_id=question.id,
            answer_id=answer.id,
        )

    def answer_accepted(
        self,
        background_tasks: BackgroundTasks,
        *,
        question: Question,
        answer: Answer,
        sender: User,
    ) -> None:
        self.schedule(
            background_tasks,
            recipient_id=answer.author_id,
            sender_id=sender.id,
            type=NotificationType.ANSWER_ACCEPTED,
            title=f"Answer accepted on: {question.title}",
            message=f"{sender.full_name} accepted your answer",
            question_id=question.id,
            answer_id=answer.id,
        )

    def question_voted(
        self,
        background_tasks: BackgroundTasks,
        *,
        question: Question,
        sender: User,
        direction: str,
    ) -> None:
        if not settings.notify_on_votes:
            return
        self.schedule(
            background_tasks,
            recipient_id=question.author_id,
            sender_id=sender.id,
            type=NotificationType.QUESTION_VOTED,
            title=f"Your question received a vote: {question.title}",
            message=f"Someone voted your question {direction}",
            question_id=question.id,
        )

    def answer_voted(
        self,
        background_tasks: BackgroundTasks,
        *,
        answer: Answer,
        question_title: str,
        sender: User,
        direction: str,
    ) -> None:
        if not settings.notify_on_votes:
            return
        self.schedule(
            background_tasks,
            recipient_id=answer.author_id,
            sender_id=sender.id,
            type=NotificationType.ANSWER_VOTED,
            title=f"Your answer received a vote: {question_title}",
            message=f"Someone voted your answer {direction}",
            question_id=answer.question_id,
            answer_id=answer.id,
        )

    def users_mentioned(
        self,
        background_tasks: BackgroundTasks,
        *,
        recipients: Iterable[User],
        question: Question,
        answer: Answer,
        sender: User,
    ) -> None:
        if not settings.notify_on_mentions:
            return
        for recipient in recipients:
            self.schedule(
                background_tasks,
                recipient_id=recipient.id,
                sender_id=sender.id,
                type=NotificationType.USER_MENTIONED,
                title=f"You were mentioned in: {question.title}",
                message=f"{sender.full_name} mentioned you in an answer",
                question_id=question.id,
                answer_id=answer.id,
            )


def mentioned_users(db: Session, text: str) -> list[User]:
    """Return the active users whose usernames are mentioned in ``text``."""
    handles = extract_mentions(text)
    if not handles:
        return []
    return list(
        db.scalars(
            select(User).where(User.username.in_(handles), User.is_active.is_(True))
        )
    )


# --- Read side -----------------------------------------------------------------


def unread_count(db: Session, recipient_id: int) -> int:
    """Return how many of the recipient's notifications are unread."""
    return int(
        db.scalar(
            select(func.count())
            .select_from(Notification)
            .where(Notification.recipient_id == recipient_id, Notification.is_read.is_(False))
        )
        or 0
    )


def list_notifications(
    db: Session,
    recipient_id: int,
    *,
    page: int,
    page_size: int,
    unread_only: bool = False,
) -> tuple[Page[Notification], int]:
    """Return one page of notifications (newest first) and the live unread count."""
    stmt = (
        select(Notification)
        .where(Notification.recipient_id == recipient_id)
        .options(selectinload(Notification.question), selectinload(Notification.answer))
        .order_by(Notification.created_at.desc(), Notification.id.desc())
    )
    if unread_only:
        stmt = stmt.where(Notification.is_read.is_(False))
    return paginate(db, stmt, page=page, page_size=page_size), unread_count(db, recipient_id)


def _get_own(db: Session, notification_id: int, recipient_id: int) -> Notification:
    notification = db.scalar(
        select(Notification).where(
            Notification.id == notification_id,
            Notification.recipient_id == recipient_id,
        )
    )
    if notification is None:
        raise NotFound("The notification does not exist or does not belong to you")
    return notification


def mark_read(db: Session, notification_id: int, recipient_id: int) -> Notification:
    """Mark one notification read; marking it again keeps the first ``read_at``."""
    notification = _get_own(db, notification_id, recipient_id)
    db.execute(
        update(Notification)
        .where(Notification.id == notification.id, Notification.is_read.is_(False))
        .values(is_read=True, read_at=utcnow())
        .execution_options(synchronize_session="fetch")
    )
    db.commit()
    db.refresh(notification)
    return notification


def mark_all_read(db: Session, recipient_id: int) -> int:
    """Mark every unread notification of the recipient read; return how many changed."""
    result = db.execute(
        update(Notification)
        .where(Notification.recipient_id == recipient_id, Notification.is_read.is_(False))
        .values(is_read=True, read_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    db.commit()
    db.expire_all()
    return int(result.rowcount or 0)


def delete_notification(db: Session, notification_id: int, recipient_id: int) -> None:
    """Delete a notification owned by the recipient."""
    notification = _get_own(db, notification_id, recipient_id)
    db.delete(notification)
    db.commit()
