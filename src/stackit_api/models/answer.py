# src/stackit_api/models/answer.py
"""SQLAlchemy model for answers to questions."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stackit_api.db.session import Base
from stackit_api.db.time import utcnow

if TYPE_CHECKING:
    from .question import Question
    from .user import User

ANSWER_MIN_LENGTH = 10


class Answer(Base):
    """An answer posted to a question."""

    __tablename__ = "answer"
    __table_args__ = (
        Index("ix_answer_question_id", "question_id"),
        Index("ix_answer_author_id", "author_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    question_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("question.id"),
        nullable=False,
    )
    author_id: Mapped[int] = mapped_column(Integer, ForeignKey("app_user.id"), nullable=False)

    # At most one accepted answer per question; mirrors Question.accepted_answer_id.
    is_accepted: Mapped[bool] = mapped_column(default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
    last_activity: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    author: Mapped[User] = relationship("User", lazy="joined")
    question: Mapped[Question] = relationship("Question", foreign_keys=[question_id])
