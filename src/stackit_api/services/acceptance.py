"""Accepted-answer tracking.

A question points at no more than one accepted answer, and that answer's
``is_accepted`` flag agrees with the pointer. Accepting is an idempotent set:
re-accepting the current answer changes nothing, and clearing the choice is
the separate :func:`unaccept_answer` operation.

Changes to a question's answers are serialised per question: the question
row is locked where the backend supports it, and the pointer update is
guarded by ``Question.version`` so a lost race surfaces as Conflict instead
of leaving two accepted answers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from stackit_api.core.errors import Conflict, Forbidden, NotFound
from stackit_api.db.time import utcnow
from stackit_api.models import Answer, Question, User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AcceptanceOutcome:
    """Result of an accept or unaccept call."""

    question_id: int
    answer_id: int
    accepted: bool
    changed: bool


def _load_for_author(db: Session, answer_id: int, requester: User) -> tuple[Answer, Question]:
    answer = db.get(Answer, answer_id)
    if answer is None or not answer.is_active:
        raise NotFound("Answer not found")

    question = db.execute(
        select(Question).where(Question.id == answer.question_id).with_for_update()
    ).scalar_one_or_none()
    if question is None or not question.is_active:
        raise NotFound("Question not found")

    if question.author_id != requester.id:
        raise Forbidden("Only the question author can accept answers")
    return answer, question


def _set_accepted(db: Session, question: Question, answer_id: int | None) -> None:
    """Point ``question`` at ``answer_id`` (or nothing) and align every answer flag."""
    expected_version = question.version
    result = db.execute(
        update(Question)
        .where(Question.id == question.id, Question.version == expected_version)
        .values(
            accepted_answer_id=answer_id,
            last_activity=utcnow(),
            version=expected_version + 1,
        )
        .execution_options(synchronize_session="evaluate")
    )
    if result.rowcount != 1:
        db.rollback()
        logger.warning(
            "Acceptance change on question %s lost a race at version %s",
            question.id, expected_version,
        )
        raise Conflict("The question was modified concurrently, please retry")

    others = [Answer.question_id == question.id]
    if answer_id is not None:
        others.append(Answer.id != answer_id)
        db.execute(
            update(Answer)
            .where(Answer.id == answer_id)
            .values(is_accepted=True)
            .execution_options(synchronize_session="evaluate")
        )
    db.execute(
        update(Answer)
        .where(*others)
        .values(is_accepted=False)
        .execution_options(synchronize_session="evaluate")
    )
    db.commit()


def accept_answer(db: Session, answer_id: int, requester: User) -> AcceptanceOutcome:
    """Mark an answer as the accepted solution of its question.

    Raises:
        NotFound: If the answer or its question is missing or inactive.
        Forbidden: If ``requester`` did not ask the question.
        Conflict: If another acceptance change won the race.
    """
    answer, question = _load_for_author(db, answer_id, requester)

    if question.accepted_answer_id == answer.id and answer.is_accepted:
        return AcceptanceOutcome(question.id, answer.id, accepted=True, changed=False)

    _set_accepted(db, question, answer.id)
    logger.info("Question %s accepted answer %s", question.id, answer.id)
    return AcceptanceOutcome(question.id, answer.id, accepted=True, changed=True)


def unaccept_answer(db: Session, answer_id: int, requester: User) -> AcceptanceOutcome:
    """Clear the accepted answer if ``answer_id`` is the one currently accepted."""
    answer, question = _load_for_author(db, answer_id, requester)

    if question.accepted_answer_id != answer.id and not answer.is_accepted:
        return AcceptanceOutcome(question.id, answer.id, accepted=False, changed=False)

    _set_accepted(db, question, None)
    logger.info("Question %s cleared accepted answer %s", question.id, answer.id)
    return AcceptanceOutcome(question.id, answer.id, accepted=False, changed=True)


def release_acceptance(db: Session, answer: Answer) -> None:
    """Drop the accepted state of an answer that is being removed.

    The caller commits.
    """
    if not answer.is_accepted:
        return
    answer.is_accepted = False
    question = db.get(Question, answer.question_id)
    if question is not None and question.accepted_answer_id == answer.id:
        question.accepted_answer_id = None
        question.version += 1
