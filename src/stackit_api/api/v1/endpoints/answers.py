# src/stackit_api/api/v1/endpoints/answers.py
"""Answer endpoints: posting, editing, voting and acceptance."""

from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.orm import Session

from stackit_api.api.v1.dependencies import (
    CurrentUserDep,
    DispatcherDep,
    SessionDep,
    rate_limit,
    require_permission,
)
from stackit_api.core.errors import Forbidden, NotFound
from stackit_api.core.permissions import Permission, has_permission
from stackit_api.db.time import utcnow
from stackit_api.models import Answer, Question, User
from stackit_api.schemas import (
    AcceptResponse,
    AnswerCreate,
    AnswerCreateResponse,
    AnswerOut,
    AnswerUpdate,
    AnswerUpdateResponse,
    AnswerVoteRequest,
    AnswerVoteResponse,
    AuthorSummary,
    MessageResponse,
)
from stackit_api.schemas.answer import AnswerEdit
from stackit_api.services.acceptance import accept_answer, release_acceptance, unaccept_answer
from stackit_api.services.notifications import mentioned_users
from stackit_api.services.votes import VoteAction, answer_votes

router = APIRouter(prefix="/answers", tags=["answers"])


def _get_answer_or_404(db: Session, answer_id: int) -> Answer:
    answer = db.get(Answer, answer_id)
    if answer is None or not answer.is_active:
        raise NotFound("Answer not found")
    return answer


def _ensure_can_modify(answer: Answer, user: User, action: str) -> None:
    if answer.author_id != user.id and not has_permission(user.role, Permission.MODERATE):
        raise Forbidden(f"You can only {action} your own answers")


@router.post(
    "",
    response_model=AnswerCreateResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_permission(Permission.POST)), Depends(rate_limit("post"))],
)
async def create_answer(
    payload: AnswerCreate,
    db: SessionDep,
    current_user: CurrentUserDep,
    dispatcher: DispatcherDep,
    background_tasks: BackgroundTasks,
) -> AnswerCreateResponse:
    """Post an answer to an active question and notify its author."""
    question = db.get(Question, payload.question_id)
    if question is None or not question.is_active:
        raise NotFound("Question not found")

    answer = Answer(
        body=payload.content,
        question_id=question.id,
        author_id=current_user.id,
    )
    db.add(answer)
    question.last_activity = utcnow()
    db.commit()
    db.refresh(answer)

    dispatcher.question_answered(
        background_tasks, question=question, answer=answer, sender=current_user
    )
    dispatcher.users_mentioned(
        background_tasks,
        recipients=mentioned_users(db, payload.content),
        question=question,
        answer=answer,
        sender=current_user,
    )

    return AnswerCreateResponse(
        message="Answer posted successfully",
        answer=AnswerOut(
            id=answer.id,
            content=answer.body,
            author=AuthorSummary.from_user(current_user),
            votes=0,
            is_accepted=answer.is_accepted,
            created_at=answer.created_at,
            updated_at=answer.updated_at,
        ),
    )


@router.put("/{answer_id}", response_model=AnswerUpdateResponse)
async def update_answer(
    answer_id: int,
    payload: AnswerUpdate,
    db: SessionDep,
    current_user: CurrentUserDep,
) -> AnswerUpdateResponse:
    """Edit an answer; authors edit their own, moderators any."""
    answer = _get_answer_or_404(db, answer_id)
    _ensure_can_modify(answer, current_user, "edit")

    now = utcnow()
    answer.body = payload.content
    answer.updated_at = now
    answer.last_activity = now
    db.commit()
    db.refresh(answer)

    return AnswerUpdateResponse(
        message="Answer updated successfully",
        answer=AnswerEdit(id=answer.id, content=answer.body, updated_at=answer.updated_at),
    )


@router.delete("/{answer_id}", response_model=MessageResponse)
async def delete_answer(
    answer_id: int,
    db: SessionDep,
    current_user: CurrentUserDep,
) -> MessageResponse:
    """Soft-delete an answer, releasing its accepted state."""
    answer = _get_answer_or_404(db, answer_id)
    _ensure_can_modify(answer, current_user, "delete")

    release_acceptance(db, answer)
    answer.is_active = False
    db.commit()
    return MessageResponse(message="Answer deleted successfully")


@router.post(
    "/{answer_id}/vote",
    response_model=AnswerVoteResponse,
    dependencies=[Depends(require_permission(Permission.VOTE)), Depends(rate_limit("vote"))],
)
async def vote_answer(
    answer_id: int,
    payload: AnswerVoteRequest,
    db: SessionDep,
    current_user: CurrentUserDep,
    dispatcher: DispatcherDep,
    background_tasks: BackgroundTasks,
) -> AnswerVoteResponse:
    """Toggle the caller's vote on an answer."""
    outcome = answer_votes.cast_vote(db, answer_id, current_user.id, payload.type)

    if outcome.action is not VoteAction.REMOVED and outcome.user_vote is not None:
        answer = _get_answer_or_404(db, answer_id)
        dispatcher.answer_voted(
            background_tasks,
            answer=answer,
            question_title=answer.question.title,
            sender=current_user,
            direction=outcome.user_vote.value,
        )

    return AnswerVoteResponse(
        message="Vote removed" if outcome.action is VoteAction.REMOVED else "Vote recorded",
        votes=outcome.score,
        user_vote=outcome.user_vote,
    )


@router.post("/{answer_id}/accept", response_model=AcceptResponse)
async def accept(
    answer_id: int,
    db: SessionDep,
    current_user: CurrentUserDep,
    dispatcher: DispatcherDep,
    background_tasks: BackgroundTasks,
) -> AcceptResponse:
    """Mark an answer as the accepted solution; only the question author may."""
    outcome = accept_answer(db, answer_id, current_user)

    if outcome.changed:
        answer = _get_answer_or_404(db, answer_id)
        dispatcher.answer_accepted(
            background_tasks,
            question=answer.question,
            answer=answer,
            sender=current_user,
        )

    return AcceptResponse(
        message="Answer accepted successfully",
        answer_id=outcome.answer_id,
        accepted=outcome.accepted,
    )


@router.delete("/{answer_id}/accept", response_model=AcceptResponse)
async def unaccept(
    answer_id: int,
    db: SessionDep,
    current_user: CurrentUserDep,
) -> AcceptResponse:
    """Clear the accepted answer of the question."""
    outcome = unaccept_answer(db, answer_id, current_user)
    return AcceptResponse(
        message="Answer unaccepted successfully",
        answer_id=outcome.answer_id,
        accepted=outcome.accepted,
    )
