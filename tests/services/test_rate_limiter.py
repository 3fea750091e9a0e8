# mypy: ignore-errors
# tests/services/test_rate_limiter.py
"""Tests for the fixed-window rate limiter."""

from unittest.mock import MagicMock, patch

import redis

from stackit_api.services.rate_limit import REDIS_RETRY_SECONDS, RateLimiter


def test_limit_is_enforced_per_caller() -> None:
    limiter = RateLimiter()
    with patch("stackit_api.services.rate_limit.time.time", return_value=1_000):
        results = [limiter.hit("post", "user:1", limit=2, window_seconds=60) for _ in range(3)]
        assert results == [True, True, False]
        assert limiter.hit("post", "user:2", limit=2, window_seconds=60) is True
        assert limiter.hit("vote", "user:1", limit=2, window_seconds=60) is True


def test_new_window_resets_count() -> None:
    limiter = RateLimiter()
    with patch("stackit_api.services.rate_limit.time.time", return_value=1_000):
        limiter.hit("post", "user:1", limit=1, window_seconds=60)
        assert limiter.hit("post", "user:1", limit=1, window_seconds=60) is False
    with patch("stackit_api.services.rate_limit.time.time", return_value=1_080):
        assert limiter.hit("post", "user:1", limit=1, window_seconds=60) is True


def test_non_positive_limit_disables_bucket() -> None:
    limiter = RateLimiter()
    assert all(limiter.hit("post", "user:1", limit=0, window_seconds=60) for _ in range(10))


def test_reset_forgets_counters() -> None:
    limiter = RateLimiter()
    limiter.hit("post", "user:1", limit=1, window_seconds=60)
    limiter.reset()
    assert limiter.hit("post", "user:1", limit=1, window_seconds=60) is True


def test_redis_counters_are_used_when_configured() -> None:
    limiter = RateLimiter()
    client = MagicMock()
    client.pipeline.return_value.execute.return_value = [4, True]
    limiter._redis = client

    assert limiter.hit("vote", "user:1", limit=3, window_seconds=60) is False
    client.pipeline.return_value.expire.assert_called_once()


def test_redis_outage_falls_back_to_local_counters(caplog) -> None:
    limiter = RateLimiter()
    client = MagicMock()
    client.pipeline.return_value.execute.side_effect = redis.ConnectionError("refused")
    limiter._redis = client

    with patch("stackit_api.services.rate_limit.time.time", return_value=1_000):
        assert limiter.hit("vote", "user:1", limit=1, window_seconds=60) is True
        assert limiter.hit("vote", "user:1", limit=1, window_seconds=60) is False

    assert client.pipeline.return_value.execute.call_count == 1
    assert "Redis unavailable" in caplog.text


def test_redis_is_retried_after_an_outage() -> None:
    limiter = RateLimiter()
    client = MagicMock()
    execute = client.pipeline.return_value.execute
    execute.side_effect = [redis.ConnectionError("refused"), [1, True]]
    limiter._redis = client

    with patch("stackit_api.services.rate_limit.time.time", return_value=1_000):
        limiter.hit("vote", "user:1", limit=5, window_seconds=60)
    with patch(
        "stackit_api.services.rate_limit.time.time",
        return_value=1_000 + REDIS_RETRY_SECONDS,
    ):
        assert limiter.hit("vote", "user:1", limit=5, window_seconds=60) is True

    assert execute.call_count == 2
    assert limiter._redis is client
