"""Per-caller rate limiting for the public endpoints.

Fixed-window counters keyed by (caller, window start).  A caller may make
`limit` calls inside each `window`-second window; the next call is denied
until the window rolls over.  Old windows expire, so state stays bounded.

Two backends:
  - RedisRateLimiter   shared across workers; INCR is atomic server-side
  - MemoryRateLimiter  single process; a lock guards the increment

Select with RATE_LIMIT_BACKEND=redis|memory.
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

import redis.asyncio as redis
from fastapi import Request

from shiptrack.config import settings
from shiptrack.middleware.exceptions import RateLimitExceededError
from shiptrack.utils.redis_client import get_redis

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    reset_at: float  # epoch seconds when the current window closes

    @property
    def retry_after(self) -> int:
        return max(int(self.reset_at - time.time()) + 1, 1)


class RateLimiter(ABC):
    """Bound the call rate per key within a fixed window."""

    @abstractmethod
    async def hit(self, key: str, limit: int, window: int) -> RateLimitResult:
        """Count one call for `key` and report whether it is within budget."""
        raise NotImplementedError

    async def allow(self, key: str, limit: int, window: int = 60) -> bool:
        result = await self.hit(key, limit, window)
        return result.allowed

    async def enforce(self, key: str, limit: int, window: int) -> RateLimitResult:
        """Like hit(), but raise RateLimitExceededError when over budget."""
        result = await self.hit(key, limit, window)
        if not result.allowed:
            logger.warning("Rate limit exceeded for %s (limit=%d/%ds)", key, limit, window)
            raise RateLimitExceededError(retry_after=result.retry_after, limit=limit)
        return result


def _window_start(now: float, window: int) -> int:
    return int(now // window) * window


class RedisRateLimiter(RateLimiter):
    """Fixed window on Redis: INCR + EXPIRE in one MULTI block."""

    def __init__(self, client_factory: Callable = get_redis, clock: Callable[[], float] = time.time):
        self._client_factory = client_factory
        self._clock = clock

    async def hit(self, key: str, limit: int, window: int) -> RateLimitResult:
        now = self._clock()
        start = _window_start(now, window)
        reset_at = start + window
        redis_key = f"ratelimit:{key}:{start}"

        try:
            client = await self._client_factory()
            async with client.pipeline(transaction=True) as pipe:
                pipe.incr(redis_key)
                pipe.expire(redis_key, window)
                count, _ = await pipe.execute()
        except redis.RedisError as e:
            # If Redis fails, allow request (fail open)
            logger.error("Rate limit check failed for %s: %s", key, e)
            return RateLimitResult(True, limit, limit, reset_at)

        count = int(count)
        return RateLimitResult(
            allowed=count <= limit,
            limit=limit,
            remaining=max(limit - count, 0),
            reset_at=reset_at,
        )


class MemoryRateLimiter(RateLimiter):
    """In-process fixed window.  Suitable for a single worker and for tests."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._lock = threading.Lock()
        # (key, window) -> (window_start, count)
        self._windows: dict[tuple[str, int], tuple[int, int]] = {}
        self._last_prune = 0.0

    async def hit(self, key: str, limit: int, window: int) -> RateLimitResult:
        now = self._clock()
        start = _window_start(now, window)

        with self._lock:
            self._prune(now)
            slot = (key, window)
            current_start, count = self._windows.get(slot, (start, 0))
            if current_start != start:
                count = 0
            count += 1
            self._windows[slot] = (start, count)

        return RateLimitResult(
            allowed=count <= limit,
            limit=limit,
            remaining=max(limit - count, 0),
            reset_at=start + window,
        )

    def _prune(self, now: float) -> None:
        """Drop windows that have already closed (caller holds the lock)."""
        if now - self._last_prune < 1.0:
            return
        self._last_prune = now
        stale = [
            slot for slot, (start, _) in self._windows.items()
            if start + slot[1] <= now
        ]
        for slot in stale:
            del self._windows[slot]

    def __len__(self) -> int:
        return len(self._windows)


_limiter: Optional[RateLimiter] = None


def get_rate_limiter() -> RateLimiter:
    """FastAPI dependency returning the process-wide limiter."""
    global _limiter
    if _limiter is None:
        backend = settings.rate_limit_backend.lower()
        if backend == "memory":
            _limiter = MemoryRateLimiter()
        elif backend == "redis":
            _limiter = RedisRateLimiter()
        else:
            raise ValueError(f"Unknown RATE_LIMIT_BACKEND: {settings.rate_limit_backend!r}")
        logger.info("Rate limiter backend: %s", backend)
    return _limiter


def client_key(request: Request) -> str:
    """Rate-limit key for the caller: first X-Forwarded-For hop, else peer IP."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        ip = forwarded.split(",")[0].strip()
    else:
        ip = request.client.host if request.client else "unknown"

    return f"ip:{ip or 'unknown'}"
