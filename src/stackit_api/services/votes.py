"""Vote ledger shared by questions and answers.

One :class:`VoteLedger` is bound to an entity model and its vote table.
Casting a vote toggles it: the same direction twice removes the vote, the
opposite direction moves it. Each transition is a single guarded statement,
so two racing requests from the same voter cannot both apply; the loser
re-reads the current vote and retries.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from sqlalchemy import case, delete, func, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from stackit_api.core.errors import Conflict, Forbidden, NotFound, ValidationError
from stackit_api.core.settings import settings
from stackit_api.db.time import utcnow
from stackit_api.models import Answer, AnswerVote, Question, QuestionVote, VoteDirection

logger = logging.getLogger(__name__)


class VoteAction(str, Enum):
    """What a cast vote did to the voter's ballot."""

    ADDED = "added"
    CHANGED = "changed"
    REMOVED = "removed"


@dataclass(frozen=True)
class VoteOutcome:
    """Result of :meth:`VoteLedger.cast_vote`."""

    score: int
    user_vote: VoteDirection | None
    previous_vote: VoteDirection | None
    action: VoteAction


def parse_direction(value: str | VoteDirection) -> VoteDirection:
    """Return ``value`` as a :class:`VoteDirection` or raise ValidationError."""
    try:
        return VoteDirection(value)
    except ValueError as err:
        raise ValidationError('Vote type must be "up" or "down"') from err


class VoteLedger:
    """Per-entity record of which users voted up or down."""

    def __init__(self, entity_model: Any, vote_model: Any, *, label: str) -> None:
        self.entity_model = entity_model
        self.vote_model = vote_model
        self.label = label

    def _score_sum(self) -> Any:
        vote = self.vote_model
        return func.coalesce(
            func.sum(case((vote.direction == VoteDirection.UP.value, 1), else_=-1)),
            0,
        )

    def score_column(self) -> Any:
        """Return a correlated scalar subquery computing each entity's net score."""
        vote = self.vote_model
        return (
            select(self._score_sum())
            .where(vote.target_id == self.entity_model.id)
            .correlate(self.entity_model)
            .scalar_subquery()
        )

    def get_active(self, db: Session, entity_id: int) -> Any:
        """Load an entity, treating soft-deleted rows as missing."""
        entity = db.get(self.entity_model, entity_id)
        if entity is None or not entity.is_active:
            raise NotFound(f"{self.label.capitalize()} not found")
        return entity

    def score(self, db: Session, entity_id: int) -> int:
        """Return count(up) - count(down) for one entity."""
        vote = self.vote_model
        return int(db.scalar(select(self._score_sum()).where(vote.target_id == entity_id)) or 0)

    def scores(self, db: Session, entity_ids: Iterable[int]) -> dict[int, int]:
        """Return net scores for many entities; entities without votes map to 0."""
        ids = list(entity_ids)
        if not ids:
            return {}
        vote = self.vote_model
        rows = db.execute(
            select(vote.target_id, self._score_sum())
            .where(vote.target_id.in_(ids))
            .group_by(vote.target_id)
        ).all()
        result = dict.fromkeys(ids, 0)
        result.update({target_id: int(total) for target_id, total in rows})
        return result

    def user_vote(self, db: Session, entity_id: int, voter_id: int) -> VoteDirection | None:
        """Return the voter's current direction on an entity, if any."""
        vote = self.vote_model
        direction = db.scalar(
            select(vote.direction).where(
                vote.target_id == entity_id,
                vote.voter_user_id == voter_id,
            )
        )
        return VoteDirection(direction) if direction is not None else None

    def user_votes(
        self,
        db: Session,
        entity_ids: Iterable[int],
        voter_id: int,
    ) -> dict[int, VoteDirection]:
        """Return the voter's directions keyed by entity id (entities without a vote omitted)."""
        ids = list(entity_ids)
        if not ids:
            return {}
        vote = self.vote_model
        rows = db.execute(
            select(vote.target_id, vote.direction).where(
                vote.target_id.in_(ids),
                vote.voter_user_id == voter_id,
            )
        ).all()
        return {target_id: VoteDirection(direction) for target_id, direction in rows}

    def _apply(
        self,
        db: Session,
        entity_id: int,
        voter_id: int,
        existing: VoteDirection | None,
        direction: VoteDirection,
    ) -> tuple[VoteAction, VoteDirection | None] | None:
        """Apply one guarded transition; None means the guard missed."""
        vote = self.vote_model
        ballot = (vote.target_id == entity_id, vote.voter_user_id == voter_id)

        if existing is None:
            try:
                with db.begin_nested():
                    db.execute(
                        insert(vote).values(
                            target_id=entity_id,
                            voter_user_id=voter_id,
                            direction=direction.value,
                            created_at=utcnow(),
                        )
                    )
            except IntegrityError:
                return None
            return VoteAction.ADDED, direction

        if existing is direction:
            result = db.execute(
                delete(vote).where(*ballot, vote.direction == existing.value)
            )
            return (VoteAction.REMOVED, None) if result.rowcount == 1 else None

        result = db.execute(
            update(vote)
            .where(*ballot, vote.direction == existing.value)
            .values(direction=direction.value, created_at=utcnow())
        )
        return (VoteAction.CHANGED, direction) if result.rowcount == 1 else None

    def cast_vote(
        self,
        db: Session,
        entity_id: int,
        voter_id: int,
        direction: str | VoteDirection,
    ) -> VoteOutcome:
        """Toggle the voter's vote on an entity.

        Args:
            db: Database session.
            entity_id: Question or answer id, depending on the ledger.
            voter_id: Id of the acting user.
            direction: ``"up"`` or ``"down"``.

        Returns:
            The new net score, the voter's resulting direction, the direction
            held before the call, and the action taken.

        Raises:
            ValidationError: If ``direction`` is not up or down.
            NotFound: If the entity is missing or soft-deleted.
            Forbidden: If the voter authored the entity.
            Conflict: If concurrent writes kept invalidating the guard.
        """
        wanted = parse_direction(direction)
        entity = self.get_active(db, entity_id)
        if entity.author_id == voter_id:
            raise Forbidden(f"You cannot vote on your own {self.label}")

        attempts = max(1, settings.vote_max_retries)
        for attempt in range(1, attempts + 1):
            existing = self.user_vote(db, entity_id, voter_id)
            applied = self._apply(db, entity_id, voter_id, existing, wanted)
            if applied is None:
                logger.info(
                    "Vote by user %s on %s %s raced (attempt %d/%d)",
                    voter_id, self.label, entity_id, attempt, attempts,
                )
                continue

            action, current = applied
            entity.last_activity = utcnow()
            db.commit()
            return VoteOutcome(
                score=self.score(db, entity_id),
                user_vote=current,
                previous_vote=existing,
                action=action,
            )

        db.rollback()
        logger.warning(
            "Giving up on vote by user %s on %s %s after %d attempts",
            voter_id, self.label, entity_id, attempts,
        )
        raise Conflict("Your vote conflicted with another update, please retry")


question_votes = VoteLedger(Question, QuestionVote, label="question")
answer_votes = VoteLedger(Answer, AnswerVote, label="answer")
