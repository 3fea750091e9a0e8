# src/stackit_api/api/v1/endpoints/questions.py
"""Question-related endpoints for the StackIt API."""

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from stackit_api.api.v1.dependencies import (
    CurrentUserDep,
    DispatcherDep,
    OptionalUserDep,
    SessionDep,
    rate_limit,
    require_permission,
)
from stackit_api.core.errors import NotFound
from stackit_api.core.permissions import Permission
from stackit_api.core.settings import settings
from stackit_api.db.time import utcnow
from stackit_api.models import Answer, Question, QuestionTag, QuestionView, User
from stackit_api.schemas import (
    AnswerOut,
    AuthorSummary,
    Pagination,
    QuestionCreate,
    QuestionCreateResponse,
    QuestionDetail,
    QuestionDetailResponse,
    QuestionListResponse,
    QuestionSummary,
    QuestionVoteRequest,
    QuestionVoteResponse,
)
from stackit_api.services.query import (
    QuestionFilters,
    QuestionSort,
    answer_counts,
    list_questions,
    normalize_tags,
)
from stackit_api.services.votes import VoteAction, answer_votes, question_votes

router = APIRouter(prefix="/questions", tags=["questions"])


def _get_question_or_404(db: Session, question_id: int) -> Question:
    question = db.get(Question, question_id)
    if question is None or not question.is_active:
        raise NotFound("Question not found")
    return question


def _summary(question: Question, votes: int, answers: int) -> QuestionSummary:
    return QuestionSummary(
        id=question.id,
        title=question.title,
        description=question.body,
        tags=question.tags,
        author=AuthorSummary.from_user(question.author),
        votes=votes,
        answers=answers,
        views=question.view_count,
        has_accepted_answer=question.accepted_answer_id is not None,
        created_at=question.created_at,
        last_activity=question.last_activity,
    )


def _record_view(db: Session, question: Question, viewer: User | None) -> None:
    """Count a view: once per signed-in user, every time for guests."""
    if viewer is not None:
        try:
            with db.begin_nested():
                db.execute(
                    insert(QuestionView).values(
                        question_id=question.id,
                        user_id=viewer.id,
                        viewed_at=utcnow(),
                    )
                )
        except IntegrityError:
            return

    db.execute(
        update(Question)
        .where(Question.id == question.id)
        .values(view_count=Question.view_count + 1)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    db.refresh(question)


@router.get("", response_model=QuestionListResponse)
async def get_questions(
    db: SessionDep,
    page: int = Query(1, description="Page number, starting at 1"),
    limit: int = Query(settings.default_page_size, description="Questions per page"),
    sort_by: str | None = Query(None, alias="sortBy", description="newest, oldest, votes, views or activity"),
    tags: str | None = Query(None, description="Comma-separated tags; any overlap matches"),
    search: str | None = Query(None, description="Text searched in title, body and tags"),
    unanswered: bool = Query(False, description="Only questions without active answers"),
    author_id: int | None = Query(None, alias="authorId", description="Only questions asked by this user"),
) -> QuestionListResponse:
    """List active questions with filters, sorting and pagination."""
    filters = QuestionFilters(
        tags=tuple(normalize_tags(tags)),
        search=search,
        unanswered=unanswered,
        author_id=author_id,
    )
    result = list_questions(db, filters, QuestionSort.parse(sort_by), page=page, page_size=limit)

    ids = [question.id for question in result.items]
    scores = question_votes.scores(db, ids)
    counts = answer_counts(db, ids)
    return QuestionListResponse(
        questions=[_summary(q, scores[q.id], counts[q.id]) for q in result.items],
        pagination=Pagination.from_page(result),
    )


@router.get("/{question_id}", response_model=QuestionDetailResponse)
async def get_question(
    question_id: int,
    db: SessionDep,
    user: OptionalUserDep,
) -> QuestionDetailResponse:
    """Return a question with its active answers and count the view."""
    question = _get_question_or_404(db, question_id)
    _record_view(db, question, user)

    answers = list(
        db.scalars(
            select(Answer).where(Answer.question_id == question.id, Answer.is_active.is_(True))
        ).unique()
    )
    answer_ids = [answer.id for answer in answers]
    scores = answer_votes.scores(db, answer_ids)
    answers.sort(key=lambda a: (not a.is_accepted, -scores[a.id], a.created_at, a.id))

    my_answer_votes = answer_votes.user_votes(db, answer_ids, user.id) if user else {}
    my_vote = question_votes.user_vote(db, question.id, user.id) if user else None

    return QuestionDetailResponse(
        question=QuestionDetail(
            id=question.id,
            title=question.title,
            description=question.body,
            tags=question.tags,
            author=AuthorSummary.from_user(question.author),
            votes=question_votes.score(db, question.id),
            views=question.view_count,
            accepted_answer_id=question.accepted_answer_id,
            created_at=question.created_at,
            last_activity=question.last_activity,
            user_vote=my_vote,
            answers=[
                AnswerOut(
                    id=answer.id,
                    content=answer.body,
                    author=AuthorSummary.from_user(answer.author),
                    votes=scores[answer.id],
                    is_accepted=answer.is_accepted,
                    created_at=answer.created_at,
                    updated_at=answer.updated_at,
                    user_vote=my_answer_votes.get(answer.id),
                )
                for answer in answers
            ],
        )
    )


@router.post(
    "",
    response_model=QuestionCreateResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_permission(Permission.POST)), Depends(rate_limit("post"))],
)
async def create_question(
    payload: QuestionCreate,
    db: SessionDep,
    current_user: CurrentUserDep,
) -> QuestionCreateResponse:
    """Ask a new question."""
    question = Question(
        title=payload.title,
        body=payload.description,
        author_id=current_user.id,
        tag_rows=[
            QuestionTag(tag=tag, position=position)
            for position, tag in enumerate(payload.tags)
        ],
    )
    db.add(question)
    db.commit()
    db.refresh(question)

    return QuestionCreateResponse(
        message="Question created successfully",
        question=_summary(question, votes=0, answers=0),
    )


@router.post(
    "/{question_id}/vote",
    response_model=QuestionVoteResponse,
    dependencies=[Depends(require_permission(Permission.VOTE)), Depends(rate_limit("vote"))],
)
async def vote_question(
    question_id: int,
    payload: QuestionVoteRequest,
    db: SessionDep,
    current_user: CurrentUserDep,
    dispatcher: DispatcherDep,
    background_tasks: BackgroundTasks,
) -> QuestionVoteResponse:
    """Toggle the caller's vote on a question."""
    outcome = question_votes.cast_vote(db, question_id, current_user.id, payload.vote_type)

    if outcome.action is not VoteAction.REMOVED and outcome.user_vote is not None:
        dispatcher.question_voted(
            background_tasks,
            question=_get_question_or_404(db, question_id),
            sender=current_user,
            direction=outcome.user_vote.value,
        )

    return QuestionVoteResponse(
        message="Vote removed" if outcome.action is VoteAction.REMOVED else "Vote recorded",
        vote_score=outcome.score,
        user_vote=outcome.user_vote,
        previous_vote=outcome.previous_vote,
    )

