# tests/test_settings.py
"""Tests for reading settings from the environment."""

import pytest

from stackit_api.core.settings import Settings


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("boss@example.com", ["boss@example.com"]),
        ("boss@example.com, ops@example.com,", ["boss@example.com", "ops@example.com"]),
        ('["boss@example.com", "ops@example.com"]', ["boss@example.com", "ops@example.com"]),
        ("", []),
    ],
)
def test_admin_emails_from_environment(monkeypatch, raw, expected) -> None:
    monkeypatch.setenv("ADMIN_EMAILS", raw)
    assert Settings().admin_emails == expected


def test_admin_email_set_is_normalised(monkeypatch) -> None:
    monkeypatch.setenv("ADMIN_EMAILS", " Boss@Example.com ,ops@example.com")
    assert Settings().admin_email_set == frozenset({"boss@example.com", "ops@example.com"})


def test_cors_origins_accept_plain_list(monkeypatch) -> None:
    monkeypatch.setenv("CORS_ORIGINS", "https://stackit.example,http://localhost:3000")
    assert Settings().cors_origins == ["https://stackit.example", "http://localhost:3000"]
