# tests/test_health.py
from typing import Any

from fastapi import status


def test_health_reports_ok(client: Any) -> None:
    """The health endpoint answers without authentication."""
    r = client.get("/health")
    assert r.status_code == status.HTTP_200_OK
    assert r.json() == {"status": "ok"}


def test_root_describes_api(client: Any) -> None:
    r = client.get("/")
    assert r.status_code == status.HTTP_200_OK
    body = r.json()
    assert body["name"] == "StackIt API"
    assert body["docs"] == "/docs"


def test_unknown_route_is_404(client: Any) -> None:
    r = client.get("/api/v1/does-not-exist")
    assert r.status_code == status.HTTP_404_NOT_FOUND
