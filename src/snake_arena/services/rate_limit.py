"""Per-origin rate ceilings for the externally reachable operations."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from functools import lru_cache
from threading import Lock

import redis

from snake_arena.core.settings import settings

logger = logging.getLogger(__name__)


class RateLimiter:
    """Fixed-window request counter keyed by operation and caller origin.

    Backed by Redis if available; falls back to an in-process cache otherwise.
    """

    def __init__(
        self,
        limits: dict[str, tuple[int, int]],
        client: redis.Redis | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._limits = dict(limits)
        self._redis = client
        self._clock = clock
        self._windows: dict[str, list[int]] = {}
        self._lock = Lock()

    @property
    def limits(self) -> dict[str, tuple[int, int]]:
        return dict(self._limits)

    def hit(self, operation: str, origin: str) -> bool:
        """Count one request and return True while it is within the ceiling."""
        limit, window_seconds = self._limits[operation]
        if limit <= 0 or window_seconds <= 0:
            return True
        now = self._clock()
        bucket = int(now // window_seconds)
        key = f"rl:{operation}:{origin}:{bucket}"

        if self._redis is not None:
            try:
                pipe = self._redis.pipeline()
                pipe.incr(key)
                pipe.expire(key, int(window_seconds))
                count, _ = pipe.execute()
                return int(count) <= limit
            except redis.RedisError as err:
                logger.warning("Rate limiter lost Redis, using in-process counters: %s", err)
                self._redis = None

        expiry = int((bucket + 1) * window_seconds)
        with self._lock:
            self._evict_expired(int(now))
            entry = self._windows.get(key)
            if entry is None:
                entry = [0, expiry]
                self._windows[key] = entry
            entry[0] += 1
            return entry[0] <= limit

    def _evict_expired(self, now: int) -> None:
        expired = [key for key, (_, expiry) in self._windows.items() if expiry <= now]
        for key in expired:
            self._windows.pop(key, None)


@lru_cache(maxsize=1)
def get_rate_limiter() -> RateLimiter:
    """Return the process-wide rate limiter."""
    client = redis.from_url(settings.redis_url) if settings.redis_url else None
    return RateLimiter(settings.rate_limits, client)
