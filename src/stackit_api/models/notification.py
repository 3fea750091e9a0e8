# src/stackit_api/models/notification.py
"""SQLAlchemy model for user notifications."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stackit_api.db.session import Base
from stackit_api.db.time import utcnow

from .answer import Answer
from .question import Question


class NotificationType(str, Enum):
    """Events that produce a notification."""

    QUESTION_ANSWERED = "question_answered"
    ANSWER_ACCEPTED = "answer_accepted"
    ANSWER_VOTED = "answer_voted"
    QUESTION_VOTED = "question_voted"
    USER_MENTIONED = "user_mentioned"
    COMMENT_ADDED = "comment_added"


class Notification(Base):
    """A message delivered to one recipient.

    Only the dispatcher creates rows; afterwards only the read state changes.
    """

    __tablename__ = "notification"
    __table_args__ = (
        Index("ix_notification_recipient_read", "recipient_id", "is_read"),
        Index("ix_notification_created_at", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    recipient_id: Mapped[int] = mapped_column(Integer, ForeignKey("app_user.id"), nullable=False)
    sender_id: Mapped[int] = mapped_column(Integer, ForeignKey("app_user.id"), nullable=False)
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    question_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("question.id", ondelete="SET NULL"),
        nullable=True,
    )
    answer_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("answer.id", ondelete="SET NULL"),
        nullable=True,
    )
    is_read: Mapped[bool] = mapped_column(default=False, nullable=False)
    read_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    question: Mapped[Question | None] = relationship("Question")
    answer: Mapped[Answer | None] = relationship("Answer")
