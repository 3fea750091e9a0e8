"""Question listing: filters, sort order and pagination.

The total count and the page itself are two separate reads, so a write
landing between them can skew ``total`` slightly against the page contents.
That tolerance is accepted for listings.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

from sqlalchemy import Select, exists, func, or_, select
from sqlalchemy.orm import Session, selectinload

from stackit_api.core.errors import ValidationError
from stackit_api.core.settings import settings
from stackit_api.models import Answer, Question, QuestionTag
from stackit_api.services.votes import question_votes

T = TypeVar("T")


class QuestionSort(str, Enum):
    """Supported orderings for question listings."""

    NEWEST = "newest"
    OLDEST = "oldest"
    VOTES = "votes"
    VIEWS = "views"
    ACTIVITY = "activity"

    @classmethod
    def parse(cls, value: str | None) -> QuestionSort:
        """Return the matching sort key, falling back to newest for unknown input."""
        try:
            return cls((value or cls.NEWEST.value).lower())
        except ValueError:
            return cls.NEWEST


@dataclass(frozen=True)
class QuestionFilters:
    """Filters combined with AND; ``tags`` match on any overlap."""

    tags: tuple[str, ...] = ()
    search: str | None = None
    unanswered: bool = False
    author_id: int | None = None


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of results plus the metadata clients need to navigate."""

    items: list[T]
    page: int
    page_size: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size) if self.page_size else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1


def normalize_tags(raw: str | Iterable[str] | None) -> list[str]:
    """Lowercase, trim and de-duplicate tags given as a list or comma-separated string."""
    if raw is None:
        return []
    parts: Iterable[str] = raw.split(",") if isinstance(raw, str) else raw
    tags: dict[str, None] = {}
    for part in parts:
        tag = str(part).strip().lower()
        if tag:
            tags.setdefault(tag, None)
    return list(tags)


def validate_paging(page: int, page_size: int, max_page_size: int | None = None) -> None:
    """Reject page numbers below 1 and page sizes outside ``1..max_page_size``."""
    limit = settings.max_page_size if max_page_size is None else max_page_size
    if page < 1:
        raise ValidationError("Page must be 1 or greater")
    if page_size < 1 or page_size > limit:
        raise ValidationError(f"Limit must be between 1 and {limit}")


def paginate(db: Session, stmt: Select[Any], *, page: int, page_size: int) -> Page[Any]:
    """Count the rows ``stmt`` matches and fetch the requested page of them."""
    validate_paging(page, page_size)
    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    total = int(db.scalar(count_stmt) or 0)
    items = list(
        db.scalars(stmt.offset((page - 1) * page_size).limit(page_size)).unique()
    )
    return Page(items=items, page=page, page_size=page_size, total=total)


def _active_answer_exists() -> Any:
    return exists().where(Answer.question_id == Question.id, Answer.is_active.is_(True))


def question_predicates(filters: QuestionFilters) -> list[Any]:
    """Translate filters into WHERE clauses; active-only is always included."""
    clauses: list[Any] = [Question.is_active.is_(True)]

    tags = normalize_tags(filters.tags)
    if tags:
        clauses.append(
            exists().where(QuestionTag.question_id == Question.id, QuestionTag.tag.in_(tags))
        )

    term = (filters.search or "").strip().lower()
    if term:
        clauses.append(
            or_(
                func.lower(Question.title).contains(term, autoescape=True),
                func.lower(Question.body).contains(term, autoescape=True),
                exists().where(
                    QuestionTag.question_id == Question.id,
                    QuestionTag.tag.contains(term, autoescape=True),
                ),
            )
        )

    if filters.unanswered:
        clauses.append(~_active_answer_exists())

    if filters.author_id is not None:
        clauses.append(Question.author_id == filters.author_id)

    return clauses


def question_ordering(sort: QuestionSort) -> Sequence[Any]:
    """Return ORDER BY terms for ``sort``, with id as the stable tie-breaker."""
    match sort:
        case QuestionSort.OLDEST:
            return (Question.created_at.asc(), Question.id.asc())
        case QuestionSort.VOTES:
            return (question_votes.score_column().desc(), Question.id.desc())
        case QuestionSort.VIEWS:
            return (Question.view_count.desc(), Question.id.desc())
        case QuestionSort.ACTIVITY:
            return (Question.last_activity.desc(), Question.id.desc())
        case _:
            return (Question.created_at.desc(), Question.id.desc())


def list_questions(
    db: Session,
    filters: QuestionFilters,
    sort: QuestionSort = QuestionSort.NEWEST,
    page: int = 1,
    page_size: int | None = None,
) -> Page[Question]:
    """Return one page of active questions matching ``filters`` in ``sort`` order."""
    size = settings.default_page_size if page_size is None else page_size
    stmt = (
        select(Question)
        .where(*question_predicates(filters))
        .options(selectinload(Question.tag_rows))
        .order_by(*question_ordering(sort))
    )
    return paginate(db, stmt, page=page, page_size=size)


def answer_counts(db: Session, question_ids: Iterable[int]) -> dict[int, int]:
    """Return the number of active answers per question id."""
    ids = list(question_ids)
    if not ids:
        return {}
    rows = db.execute(
        select(Answer.question_id, func.count())
        .where(Answer.question_id.in_(ids), Answer.is_active.is_(True))
        .group_by(Answer.question_id)
    ).all()
    counts = dict.fromkeys(ids, 0)
    counts.update({question_id: int(total) for question_id, total in rows})
    return counts
