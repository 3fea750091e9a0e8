"""Fixed-window rate limiting for write endpoints."""

from __future__ import annotations

import logging
import time
from functools import lru_cache
from threading import Lock

import redis

from stackit_api.core.settings import settings

logger = logging.getLogger(__name__)

# Seconds to count locally after a Redis failure before trying Redis again.
REDIS_RETRY_SECONDS = 30


class RateLimiter:
    """Counts hits per (bucket, caller) in fixed time windows.

    Counters live in Redis when a URL is configured so every worker shares
    them; otherwise they are kept in this process. While Redis is failing,
    hits are counted locally and Redis is retried after a short pause.
    """

    def __init__(self, redis_url: str | None = None) -> None:
        self._redis = redis.from_url(redis_url) if redis_url else None
        self._redis_retry_at = 0.0
        self._counters: dict[str, list[int]] = {}
        self._lock = Lock()

    def hit(self, bucket: str, caller: str, *, limit: int, window_seconds: int) -> bool:
        """Record one hit and return True while the caller is within ``limit``."""
        if limit <= 0 or window_seconds <= 0:
            return True

        now = time.time()
        window = int(now) // window_seconds
        key = f"rate:{bucket}:{caller}:{window}"

        if self._redis is not None and now >= self._redis_retry_at:
            try:
                pipe = self._redis.pipeline()
                pipe.incr(key)
                pipe.expire(key, window_seconds)
                count, _ = pipe.execute()
                return int(count) <= limit
            except redis.RedisError as exc:
                self._redis_retry_at = now + REDIS_RETRY_SECONDS
                logger.warning(
                    "Redis unavailable for rate limiting, counting locally for %ds: %s",
                    REDIS_RETRY_SECONDS, exc,
                )

        expiry = (window + 1) * window_seconds
        with self._lock:
            self._prune(int(now))
            entry = self._counters.setdefault(key, [0, expiry])
            entry[0] += 1
            return entry[0] <= limit

    def _prune(self, now: int) -> None:
        stale = [key for key, (_, expiry) in self._counters.items() if expiry <= now]
        for key in stale:
            del self._counters[key]

    def reset(self) -> None:
        """Forget all local counters."""
        with self._lock:
            self._counters.clear()


@lru_cache(maxsize=1)
def get_rate_limiter() -> RateLimiter:
    """Return the rate limiter shared by the API dependencies."""
    return RateLimiter(settings.redis_url)
