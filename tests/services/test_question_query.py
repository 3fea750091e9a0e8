# mypy: ignore-errors
# tests/services/test_question_query.py
"""Tests for question filters, ordering and pagination."""

from datetime import timedelta

import pytest

from stackit_api.core.errors import ValidationError
from stackit_api.db.time import utcnow
from stackit_api.services.query import (
    QuestionFilters,
    QuestionSort,
    answer_counts,
    list_questions,
    normalize_tags,
    validate_paging,
)
from stackit_api.services.votes import question_votes
from tests.factories import create_answer, create_question


@pytest.fixture()
def catalogue(db_session, author, other_user):
    """Five questions created a minute apart, oldest first."""
    now = utcnow()
    questions = []
    for i in range(5):
        question = create_question(
            db_session,
            author,
            title=f"Question number {i}",
            body="Body about generators" if i == 3 else "Plain body",
            tags=("python", "sql") if i % 2 else ("rust",),
        )
        question.created_at = now - timedelta(minutes=10 - i)
        question.view_count = i * 3 % 5
        questions.append(question)
    db_session.flush()
    return questions


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, []),
        ("Python, SQL ,,python", ["python", "sql"]),
        (["  Rust", "rust", ""], ["rust"]),
    ],
)
def test_normalize_tags(raw, expected) -> None:
    assert normalize_tags(raw) == expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, QuestionSort.NEWEST),
        ("VOTES", QuestionSort.VOTES),
        ("activity", QuestionSort.ACTIVITY),
        ("bogus", QuestionSort.NEWEST),
    ],
)
def test_sort_parse(raw, expected) -> None:
    assert QuestionSort.parse(raw) is expected


def test_validate_paging_bounds() -> None:
    validate_paging(1, 50, max_page_size=50)
    with pytest.raises(ValidationError):
        validate_paging(0, 10)
    with pytest.raises(ValidationError):
        validate_paging(1, 0)
    with pytest.raises(ValidationError):
        validate_paging(1, 51, max_page_size=50)


def test_pages_are_disjoint_and_complete(db_session, catalogue) -> None:
    seen = []
    for page in (1, 2, 3):
        result = list_questions(db_session, QuestionFilters(), QuestionSort.NEWEST, page, 2)
        assert result.total == 5
        assert result.total_pages == 3
        seen.extend(q.id for q in result.items)

    assert seen == [q.id for q in reversed(catalogue)]
    last = list_questions(db_session, QuestionFilters(), QuestionSort.NEWEST, 3, 2)
    assert last.has_next is False
    assert last.has_prev is True


def test_oldest_and_views_ordering(db_session, catalogue) -> None:
    oldest = list_questions(db_session, QuestionFilters(), QuestionSort.OLDEST, 1, 10)
    assert [q.id for q in oldest.items] == [q.id for q in catalogue]

    views = list_questions(db_session, QuestionFilters(), QuestionSort.VIEWS, 1, 10)
    counts = [q.view_count for q in views.items]
    assert counts == sorted(counts, reverse=True)


def test_votes_ordering(db_session, catalogue, other_user, third_user) -> None:
    target = catalogue[1]
    question_votes.cast_vote(db_session, target.id, other_user.id, "up")
    question_votes.cast_vote(db_session, target.id, third_user.id, "up")
    question_votes.cast_vote(db_session, catalogue[2].id, other_user.id, "down")

    result = list_questions(db_session, QuestionFilters(), QuestionSort.VOTES, 1, 10)
    assert result.items[0].id == target.id
    assert result.items[-1].id == catalogue[2].id


def test_tag_filter_matches_any(db_session, catalogue) -> None:
    result = list_questions(db_session, QuestionFilters(tags=("SQL", "golang")), page_size=10)
    assert {q.id for q in result.items} == {catalogue[1].id, catalogue[3].id}


def test_search_covers_title_body_and_tags(db_session, catalogue) -> None:
    by_body = list_questions(db_session, QuestionFilters(search="GENERATORS"), page_size=10)
    assert [q.id for q in by_body.items] == [catalogue[3].id]

    by_title = list_questions(db_session, QuestionFilters(search="number 4"), page_size=10)
    assert [q.id for q in by_title.items] == [catalogue[4].id]

    by_tag = list_questions(db_session, QuestionFilters(search="rus"), page_size=10)
    assert by_tag.total == 3


def test_search_treats_wildcards_literally(db_session, catalogue) -> None:
    result = list_questions(db_session, QuestionFilters(search="%"), page_size=10)
    assert result.total == 0


def test_unanswered_and_inactive_filters(db_session, catalogue, other_user) -> None:
    create_answer(db_session, catalogue[0], other_user)
    catalogue[1].is_active = False
    db_session.flush()

    result = list_questions(db_session, QuestionFilters(unanswered=True), page_size=10)
    assert {q.id for q in result.items} == {q.id for q in catalogue[2:]}


def test_answer_counts_ignore_inactive_answers(db_session, catalogue, other_user) -> None:
    live = create_answer(db_session, catalogue[0], other_user)
    gone = create_answer(db_session, catalogue[0], other_user, body="Removed answer body.")
    gone.is_active = False
    db_session.flush()

    counts = answer_counts(db_session, [catalogue[0].id, catalogue[1].id])
    assert counts == {catalogue[0].id: 1, catalogue[1].id: 0}
    assert live.is_active is True
