# src/stackit_api/api/v1/endpoints/admin.py
"""Administrative endpoints: dashboard and content removal."""

import logging
from datetime import UTC, datetime, time
from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from stackit_api.api.v1.dependencies import CurrentUserDep, SessionDep, require_permission
from stackit_api.core.errors import NotFound
from stackit_api.core.permissions import Permission
from stackit_api.models import Answer, AnswerVote, Question, QuestionVote, User
from stackit_api.schemas import DashboardResponse, MessageResponse
from stackit_api.schemas.admin import (
    DashboardToday,
    DashboardTotals,
    RecentQuestion,
    RecentUser,
)
from stackit_api.services.acceptance import release_acceptance

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

RECENT_LIMIT = 5


def _count(db: Session, model: Any, *clauses: Any) -> int:
    return int(db.scalar(select(func.count()).select_from(model).where(*clauses)) or 0)


@router.get(
    "/dashboard",
    response_model=DashboardResponse,
    dependencies=[Depends(require_permission(Permission.MODERATE))],
)
async def dashboard(db: SessionDep) -> DashboardResponse:
    """Return site totals, today's activity and the newest questions and users."""
    start_of_day = datetime.combine(datetime.now(UTC).date(), time.min, tzinfo=UTC)

    totals = DashboardTotals(
        users=_count(db, User),
        questions=_count(db, Question, Question.is_active.is_(True)),
        answers=_count(db, Answer, Answer.is_active.is_(True)),
        votes=_count(db, QuestionVote) + _count(db, AnswerVote),
    )
    today = DashboardToday(
        users=_count(db, User, User.created_at >= start_of_day),
        questions=_count(
            db, Question, Question.is_active.is_(True), Question.created_at >= start_of_day
        ),
        answers=_count(db, Answer, Answer.is_active.is_(True), Answer.created_at >= start_of_day),
    )

    recent_questions = db.scalars(
        select(Question)
        .where(Question.is_active.is_(True))
        .order_by(Question.created_at.desc(), Question.id.desc())
        .limit(RECENT_LIMIT)
    ).unique()
    recent_users = db.scalars(
        select(User).order_by(User.created_at.desc(), User.id.desc()).limit(RECENT_LIMIT)
    )

    return DashboardResponse(
        totals=totals,
        today=today,
        recent_questions=[
            RecentQuestion(
                id=q.id,
                title=q.title,
                author_name=q.author.full_name,
                created_at=q.created_at,
            )
            for q in recent_questions
        ],
        recent_users=[
            RecentUser(
                id=u.id,
                name=u.full_name,
                email=u.email,
                role=u.role.value,
                created_at=u.created_at,
            )
            for u in recent_users
        ],
    )


@router.delete(
    "/questions/{question_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_permission(Permission.DELETE))],
)
async def delete_question(
    question_id: int,
    db: SessionDep,
    current_user: CurrentUserDep,
) -> MessageResponse:
    """Soft-delete a question together with its answers."""
    question = db.get(Question, question_id)
    if question is None or not question.is_active:
        raise NotFound("Question not found")

    question.is_active = False
    question.accepted_answer_id = None
    question.version += 1
    db.execute(
        update(Answer)
        .where(Answer.question_id == question.id)
        .values(is_active=False, is_accepted=False)
        .execution_options(synchronize_session="fetch")
    )
    db.commit()
    logger.info("Admin %s deleted question %s", current_user.id, question.id)
    return MessageResponse(message="Question deleted successfully")


@router.delete(
    "/answers/{answer_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_permission(Permission.DELETE))],
)
async def delete_answer(
    answer_id: int,
    db: SessionDep,
    current_user: CurrentUserDep,
) -> MessageResponse:
    """Soft-delete any answer."""
    answer = db.get(Answer, answer_id)
    if answer is None or not answer.is_active:
        raise NotFound("Answer not found")

    release_acceptance(db, answer)
    answer.is_active = False
    db.commit()
    logger.info("Admin %s deleted answer %s", current_user.id, answer.id)
    return MessageResponse(message="Answer deleted successfully")
