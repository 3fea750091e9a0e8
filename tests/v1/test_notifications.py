# mypy: ignore-errors
# tests/v1/test_notifications.py
"""Tests for notification endpoints."""

from datetime import timedelta

import pytest
from fastapi import status

from stackit_api.db.time import utcnow
from stackit_api.models import Notification, NotificationType


@pytest.fixture()
def inbox(db_session, author, other_user, question):
    """Three notifications for ``author``: oldest first, the middle one read."""
    now = utcnow()
    rows = []
    for i in range(3):
        rows.append(
            Notification(
                recipient_id=author.id,
                sender_id=other_user.id,
                type=NotificationType.QUESTION_ANSWERED.value,
                title=f"New answer #{i}",
                message="Bob answered your question",
                question_id=question.id,
                is_read=i == 1,
                read_at=now if i == 1 else None,
                created_at=now - timedelta(minutes=10 - i),
            )
        )
    db_session.add_all(rows)
    db_session.flush()
    return rows


def test_notifications_require_authentication(client) -> None:
    response = client.get("/api/v1/notifications")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_list_notifications_newest_first(client, inbox, author_headers) -> None:
    response = client.get("/api/v1/notifications", headers=author_headers)
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert [n["id"] for n in body["notifications"]] == [n.id for n in reversed(inbox)]
    assert body["unreadCount"] == 2
    assert body["pagination"]["total"] == 3
    assert body["notifications"][0]["question"]["title"] == "How do I merge two dicts?"


def test_list_unread_only(client, inbox, author_headers) -> None:
    response = client.get(
        "/api/v1/notifications", params={"unreadOnly": "true"}, headers=author_headers
    )
    body = response.json()
    assert {n["id"] for n in body["notifications"]} == {inbox[0].id, inbox[2].id}
    assert all(n["isRead"] is False for n in body["notifications"])


def test_list_notifications_paginates(client, inbox, author_headers) -> None:
    first = client.get(
        "/api/v1/notifications", params={"page": 1, "limit": 2}, headers=author_headers
    ).json()
    second = client.get(
        "/api/v1/notifications", params={"page": 2, "limit": 2}, headers=author_headers
    ).json()
    first_ids = {n["id"] for n in first["notifications"]}
    second_ids = {n["id"] for n in second["notifications"]}
    assert len(first_ids) == 2
    assert len(second_ids) == 1
    assert first_ids.isdisjoint(second_ids)


def test_other_users_do_not_see_notifications(client, inbox, other_headers) -> None:
    body = client.get("/api/v1/notifications", headers=other_headers).json()
    assert body["notifications"] == []
    assert body["unreadCount"] == 0


def test_unread_count(client, inbox, author_headers) -> None:
    response = client.get("/api/v1/notifications/unread-count", headers=author_headers)
    assert response.json() == {"unreadCount": 2}


def test_mark_read_is_idempotent(client, db_session, inbox, author_headers) -> None:
    target = inbox[0]
    first = client.put(f"/api/v1/notifications/{target.id}/read", headers=author_headers)
    assert first.status_code == status.HTTP_200_OK
    assert first.json()["notification"]["isRead"] is True
    read_at = first.json()["notification"]["readAt"]
    assert read_at is not None

    second = client.put(f"/api/v1/notifications/{target.id}/read", headers=author_headers)
    assert second.status_code == status.HTTP_200_OK
    assert second.json()["notification"]["readAt"] == read_at


def test_mark_read_of_foreign_notification_is_404(client, inbox, other_headers) -> None:
    response = client.put(f"/api/v1/notifications/{inbox[0].id}/read", headers=other_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["message"] == "The notification does not exist or does not belong to you"


def test_mark_all_read(client, inbox, author_headers) -> None:
    response = client.put("/api/v1/notifications/mark-all-read", headers=author_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["updatedCount"] == 2

    count = client.get("/api/v1/notifications/unread-count", headers=author_headers).json()
    assert count == {"unreadCount": 0}

    again = client.put("/api/v1/notifications/mark-all-read", headers=author_headers)
    assert again.json()["updatedCount"] == 0


def test_delete_notification(client, db_session, inbox, author_headers) -> None:
    response = client.delete(f"/api/v1/notifications/{inbox[1].id}", headers=author_headers)
    assert response.status_code == status.HTTP_200_OK
    assert db_session.get(Notification, inbox[1].id) is None

    missing = client.delete(f"/api/v1/notifications/{inbox[1].id}", headers=author_headers)
    assert missing.status_code == status.HTTP_404_NOT_FOUND
