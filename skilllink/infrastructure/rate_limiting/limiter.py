"""
Fixed-window rate limiting with a Redis backend.
Falls back to process memory when no Redis URL is configured.
"""

import threading
import time
import logging
from typing import Callable, Dict, Optional
from dataclasses import dataclass

import redis
from fastapi import Request

from skilllink.config import settings

logger = logging.getLogger(__name__)


@dataclass
class RateLimit:
    """Rate limit configuration."""
    requests: int  # Number of requests allowed
    window: int    # Time window in seconds


@dataclass
class RateLimitStatus:
    """Current rate limit status."""
    limit: int
    remaining: int
    reset_time: int
    retry_after: Optional[int] = None

    @property
    def allowed(self) -> bool:
        return self.retry_after is None

    def to_headers(self) -> Dict[str, str]:
        """Convert to HTTP headers."""
        headers = {
            'X-RateLimit-Limit': str(self.limit),
            'X-RateLimit-Remaining': str(self.remaining),
            'X-RateLimit-Reset': str(self.reset_time)
        }
        if self.retry_after is not None:
            headers['Retry-After'] = str(self.retry_after)
        return headers


def _window_bounds(current_time: int, rate_limit: RateLimit) -> int:
    """Return the reset time of the window ``current_time`` falls in."""
    return current_time - (current_time % rate_limit.window) + rate_limit.window


class InMemoryRateLimiter:
    """
    Counts requests per key in fixed windows aligned to the epoch.
    Counters live in this process only; several workers each keep their own.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self.clock = clock
        self.requests: Dict[str, int] = {}
        self.reset_times: Dict[str, int] = {}
        self._lock = threading.Lock()

    def is_allowed(self, key: str, rate_limit: RateLimit) -> RateLimitStatus:
        """Count one request against ``key`` and report whether it may proceed."""
        current_time = int(self.clock())

        with self._lock:
            self._prune(current_time)

            if key not in self.requests:
                self.requests[key] = 0
                self.reset_times[key] = _window_bounds(current_time, rate_limit)

            current_count = self.requests[key]
            reset_time = self.reset_times[key]

            if current_count >= rate_limit.requests:
                return RateLimitStatus(
                    limit=rate_limit.requests,
                    remaining=0,
                    reset_time=reset_time,
                    retry_after=max(1, reset_time - current_time)
                )

            self.requests[key] = current_count + 1

        return RateLimitStatus(
            limit=rate_limit.requests,
            remaining=rate_limit.requests - (current_count + 1),
            reset_time=reset_time
        )

    def _prune(self, current_time: int) -> None:
        # Caller holds the lock
        expired = [key for key, reset_time in self.reset_times.items() if reset_time <= current_time]
        for key in expired:
            self.requests.pop(key, None)
            self.reset_times.pop(key, None)

    def reset(self) -> None:
        with self._lock:
            self.requests.clear()
            self.reset_times.clear()


class RedisRateLimiter:
    """
    Fixed-window counters shared by every worker through Redis.
    Each window gets its own key that expires with the window.
    """

    def __init__(self, redis_client: redis.Redis, clock: Callable[[], float] = time.time):
        self.redis = redis_client
        self.clock = clock

    def is_allowed(self, key: str, rate_limit: RateLimit) -> RateLimitStatus:
        current_time = int(self.clock())
        reset_time = _window_bounds(current_time, rate_limit)
        window_key = f"{key}:{reset_time - rate_limit.window}"

        pipe = self.redis.pipeline()
        pipe.incr(window_key)
        pipe.expire(window_key, rate_limit.window)
        current_count = pipe.execute()[0]

        if current_count > rate_limit.requests:
            return RateLimitStatus(
                limit=rate_limit.requests,
                remaining=0,
                reset_time=reset_time,
                retry_after=max(1, reset_time - current_time)
            )

        return RateLimitStatus(
            limit=rate_limit.requests,
            remaining=max(0, rate_limit.requests - current_count),
            reset_time=reset_time
        )

    def reset(self) -> None:
        keys = list(self.redis.scan_iter(match="rate_limit:*"))
        if keys:
            self.redis.delete(*keys)


class RateLimiter:
    """Picks the Redis backend when a URL is configured and reachable, memory otherwise."""

    def __init__(
        self,
        redis_url: Optional[str] = None,
        clock: Callable[[], float] = time.time
    ):
        self.redis_client = None
        self.limiter = InMemoryRateLimiter(clock)

        if redis_url:
            try:
                self.redis_client = redis.from_url(redis_url)
                self.redis_client.ping()
                self.limiter = RedisRateLimiter(self.redis_client, clock)
                logger.info("Using Redis rate limiter")
            except redis.RedisError as e:
                self.redis_client = None
                logger.warning(f"Failed to connect to Redis, using in-memory limiter: {e}")
        else:
            logger.info("Using in-memory rate limiter")

    @property
    def uses_redis(self) -> bool:
        return isinstance(self.limiter, RedisRateLimiter)

    def is_allowed(self, key: str, rate_limit: RateLimit) -> RateLimitStatus:
        return self.limiter.is_allowed(key, rate_limit)

    def check_rate_limit(
        self,
        request: Request,
        rate_limit: RateLimit,
        key_func: Optional[Callable[[Request], str]] = None
    ) -> RateLimitStatus:
        """Check if request is within rate limit."""
        key = key_func(request) if key_func else self._default_key(request)
        return self.limiter.is_allowed(key, rate_limit)

    def reset(self) -> None:
        self.limiter.reset()

    @staticmethod
    def _default_key(request: Request) -> str:
        client_ip = request.client.host if request.client else 'unknown'
        return f"rate_limit:{client_ip}:{request.url.path}"


# Predefined rate limits
RATE_LIMITS = {
    'default': RateLimit(requests=100, window=60),
    'auth': RateLimit(requests=5, window=60),
    'payment': RateLimit(
        requests=settings.payment_rate_limit_requests,
        window=settings.payment_rate_limit_period
    ),
}


# Global rate limiter instance
rate_limiter = None


def init_rate_limiter(redis_url: Optional[str] = None) -> RateLimiter:
    """Initialize global rate limiter."""
    global rate_limiter
    rate_limiter = RateLimiter(redis_url)
    return rate_limiter


def get_rate_limiter() -> RateLimiter:
    """Get global rate limiter instance."""
    global rate_limiter
    if rate_limiter is None:
        rate_limiter = RateLimiter(settings.redis_url)
    return rate_limiter
