# src/stackit_api/models/vote.py
"""Models capturing votes on questions and answers."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from stackit_api.db.session import Base
from stackit_api.db.time import utcnow


class VoteDirection(str, Enum):
    """Direction of a single vote."""

    UP = "up"
    DOWN = "down"


class VoteMixin:
    """Columns shared by every per-entity vote table.

    The composite primary key (target_id, voter_user_id) makes a vote a map
    entry from voter to direction, so a voter can hold at most one vote per
    entity.
    """

    __target_table__: str

    @declared_attr
    def target_id(cls) -> Mapped[int]:  # noqa: N805
        return mapped_column(
            Integer,
            ForeignKey(f"{cls.__target_table__}.id", ondelete="CASCADE"),
            primary_key=True,
        )

    voter_user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("app_user.id"),
        primary_key=True,
    )
    # "up" or "down".
    direction: Mapped[str] = mapped_column(String(4), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


class QuestionVote(VoteMixin, Base):
    """Per-user vote on a question."""

    __tablename__ = "question_vote"
    __table_args__ = (
        CheckConstraint("direction IN ('up', 'down')", name="ck_question_vote_direction"),
    )
    __target_table__ = "question"


class AnswerVote(VoteMixin, Base):
    """Per-user vote on an answer."""

    __tablename__ = "answer_vote"
    __table_args__ = (
        CheckConstraint("direction IN ('up', 'down')", name="ck_answer_vote_direction"),
    )
    __target_table__ = "answer"
