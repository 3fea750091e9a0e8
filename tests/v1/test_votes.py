# mypy: ignore-errors
# tests/v1/test_votes.py
"""Tests for question and answer voting endpoints."""

from fastapi import status
from sqlalchemy import select

from stackit_api.core.permissions import Role
from stackit_api.models import Notification, NotificationType


def _vote_question(client, question_id, vote_type, headers):
    return client.post(
        f"/api/v1/questions/{question_id}/vote",
        json={"voteType": vote_type},
        headers=headers,
    )


def _vote_answer(client, answer_id, vote_type, headers):
    return client.post(
        f"/api/v1/answers/{answer_id}/vote",
        json={"type": vote_type},
        headers=headers,
    )


def test_question_vote_toggle_sequence(client, question, other_headers) -> None:
    """Up, up again, then down moves the score 1, 0, -1."""
    first = _vote_question(client, question.id, "up", other_headers)
    assert first.status_code == status.HTTP_200_OK
    assert first.json()["voteScore"] == 1
    assert first.json()["userVote"] == "up"
    assert first.json()["previousVote"] is None

    second = _vote_question(client, question.id, "up", other_headers)
    assert second.json()["voteScore"] == 0
    assert second.json()["userVote"] is None
    assert second.json()["previousVote"] == "up"
    assert second.json()["message"] == "Vote removed"

    third = _vote_question(client, question.id, "down", other_headers)
    assert third.json()["voteScore"] == -1
    assert third.json()["userVote"] == "down"
    assert third.json()["previousVote"] is None


def test_question_vote_switch_direction(client, question, other_headers, third_headers) -> None:
    _vote_question(client, question.id, "up", third_headers)
    _vote_question(client, question.id, "up", other_headers)

    response = _vote_question(client, question.id, "down", other_headers)
    assert response.json()["voteScore"] == 0
    assert response.json()["userVote"] == "down"
    assert response.json()["previousVote"] == "up"


def test_cannot_vote_on_own_question(client, question, author_headers) -> None:
    response = _vote_question(client, question.id, "up", author_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["message"] == "You cannot vote on your own question"

    detail = client.get(f"/api/v1/questions/{question.id}").json()["question"]
    assert detail["votes"] == 0


def test_vote_rejects_unknown_direction(client, question, other_headers) -> None:
    response = _vote_question(client, question.id, "sideways", other_headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"] == "validation_error"


def test_vote_requires_authentication(client, question) -> None:
    response = client.post(f"/api/v1/questions/{question.id}/vote", json={"voteType": "up"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_vote_on_missing_question(client, other_headers) -> None:
    response = _vote_question(client, 424242, "up", other_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_guest_role_cannot_vote(client, db_session, question, third_user, third_headers) -> None:
    third_user.role = Role.GUEST
    db_session.flush()

    response = _vote_question(client, question.id, "up", third_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["error"] == "forbidden"


def test_question_vote_notifies_author_once(client, db_session, question, author, other_headers) -> None:
    _vote_question(client, question.id, "up", other_headers)
    _vote_question(client, question.id, "up", other_headers)  # removal sends nothing

    notifications = db_session.scalars(
        select(Notification).where(Notification.recipient_id == author.id)
    ).all()
    assert [n.type for n in notifications] == [NotificationType.QUESTION_VOTED.value]
    assert notifications[0].question_id == question.id


def test_answer_vote_toggle(client, answer, author_headers) -> None:
    first = _vote_answer(client, answer.id, "up", author_headers)
    assert first.status_code == status.HTTP_200_OK
    assert first.json() == {"message": "Vote recorded", "votes": 1, "userVote": "up"}

    second = _vote_answer(client, answer.id, "up", author_headers)
    assert second.json() == {"message": "Vote removed", "votes": 0, "userVote": None}


def test_cannot_vote_on_own_answer(client, answer, other_headers) -> None:
    response = _vote_answer(client, answer.id, "down", other_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["message"] == "You cannot vote on your own answer"


def test_vote_on_deleted_answer_is_404(client, db_session, answer, author_headers) -> None:
    answer.is_active = False
    db_session.flush()

    response = _vote_answer(client, answer.id, "up", author_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["message"] == "Answer not found"


def test_answer_vote_notifies_answer_author(
    client, db_session, question, answer, other_user, author_headers
) -> None:
    _vote_answer(client, answer.id, "down", author_headers)

    notification = db_session.scalar(
        select(Notification).where(Notification.recipient_id == other_user.id)
    )
    assert notification is not None
    assert notification.type == NotificationType.ANSWER_VOTED.value
    assert notification.answer_id == answer.id
    assert question.title in notification.title
