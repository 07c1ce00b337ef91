"""
Rate limiting package for FastAPI applications.
"""

from .limiter import (
    RateLimit, RateLimitStatus, RateLimiter, InMemoryRateLimiter, RedisRateLimiter,
    get_rate_limiter, init_rate_limiter, RATE_LIMITS
)
from .dependencies import (
    create_rate_limit_dependency, create_user_rate_limit_dependency,
    auth_rate_limit, payment_rate_limit, ip_key
)

__all__ = [
    'RateLimit',
    'RateLimitStatus',
    'RateLimiter',
    'InMemoryRateLimiter',
    'RedisRateLimiter',
    'get_rate_limiter',
    'init_rate_limiter',
    'RATE_LIMITS',
    'create_rate_limit_dependency',
    'create_user_rate_limit_dependency',
    'auth_rate_limit',
    'payment_rate_limit',
    'ip_key',
]
