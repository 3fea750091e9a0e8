# src/stackit_api/models/question.py
"""SQLAlchemy models for questions, their tags and viewers."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stackit_api.db.session import Base
from stackit_api.db.time import utcnow

if TYPE_CHECKING:
    from .answer import Answer
    from .user import User

TITLE_MAX_LENGTH = 300
TAG_MAX_LENGTH = 50


class Question(Base):
    """A question asked by a user.

    The vote score and answer count are derived at read time; only the
    view counter is stored.
    """

    __tablename__ = "question"
    __table_args__ = (
        Index("ix_question_created_at", "created_at"),
        Index("ix_question_last_activity", "last_activity"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("app_user.id"),
        nullable=False,
        index=True,
    )
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Must reference an answer of this question; kept in step with Answer.is_accepted.
    accepted_answer_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("answer.id", use_alter=True, name="fk_question_accepted_answer"),
        nullable=True,
    )

    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)
    is_featured: Mapped[bool] = mapped_column(default=False, nullable=False)

    # Bumped by every acceptance change; guards the multi-answer update.
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

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
    tag_rows: Mapped[list[QuestionTag]] = relationship(
        "QuestionTag",
        cascade="all, delete-orphan",
        order_by="QuestionTag.position",
    )
    answers: Mapped[list[Answer]] = relationship(
        "Answer",
        primaryjoin="Question.id == Answer.question_id",
        order_by="Answer.id",
        viewonly=True,
    )

    @property
    def tags(self) -> list[str]:
        """Return the question's tags in the order they were given."""
        return [row.tag for row in self.tag_rows]


class QuestionTag(Base):
    """One lowercase tag attached to a question."""

    __tablename__ = "question_tag"
    __table_args__ = (Index("ix_question_tag_tag", "tag"),)

    question_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("question.id", ondelete="CASCADE"),
        primary_key=True,
    )
    tag: Mapped[str] = mapped_column(String(TAG_MAX_LENGTH), primary_key=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class QuestionView(Base):
    """Records that a signed-in user has viewed a question."""

    __tablename__ = "question_view"

    question_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("question.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("app_user.id"),
        primary_key=True,
    )
    viewed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
