"""
Rate limiting FastAPI dependencies.
"""

from typing import Optional, Callable

from fastapi import Request, HTTPException, status, Depends

from skilllink.config import settings
from skilllink.infrastructure.auth.dependencies import get_current_user_id
from .limiter import RateLimit, RateLimitStatus, get_rate_limiter, RATE_LIMITS


def _enforce(status_result: RateLimitStatus, error_message: str) -> RateLimitStatus:
    if not status_result.allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=error_message,
            headers=status_result.to_headers()
        )
    return status_result


def create_rate_limit_dependency(
    limit_name: str = 'default',
    rate_limit: Optional[RateLimit] = None,
    key_func: Optional[Callable[[Request], str]] = None,
    error_message: str = "Rate limit exceeded"
):
    """
    Create a FastAPI dependency that limits requests by client address.

    Usage:
        auth_limit = create_rate_limit_dependency('auth')

        @router.post("/signin")
        async def signin(..., _: RateLimitStatus = Depends(auth_limit)):
            ...
    """
    async def rate_limit_dependency(request: Request) -> Optional[RateLimitStatus]:
        if not settings.rate_limit_enabled:
            return None
        limit_config = rate_limit or RATE_LIMITS.get(limit_name, RATE_LIMITS['default'])
        status_result = get_rate_limiter().check_rate_limit(request, limit_config, key_func)
        return _enforce(status_result, error_message)

    return rate_limit_dependency


def create_user_rate_limit_dependency(limit_name: str, error_message: str = "Rate limit exceeded"):
    """Like ``create_rate_limit_dependency`` but keyed on the authenticated user."""

    async def user_rate_limit_dependency(
        request: Request,
        user_id: str = Depends(get_current_user_id)
    ) -> Optional[RateLimitStatus]:
        if not settings.rate_limit_enabled:
            return None
        limit_config = RATE_LIMITS.get(limit_name, RATE_LIMITS['default'])
        key = f"rate_limit:user:{user_id}:{limit_name}"
        return _enforce(get_rate_limiter().is_allowed(key, limit_config), error_message)

    return user_rate_limit_dependency


def ip_key(request: Request) -> str:
    """Generate rate limit key based on client IP."""
    client_ip = request.client.host if request.client else 'unknown'
    return f"rate_limit:ip:{client_ip}:{request.url.path}"


auth_rate_limit = create_rate_limit_dependency(
    'auth',
    key_func=ip_key,
    error_message="Too many authentication attempts. Please try again later."
)

payment_rate_limit = create_user_rate_limit_dependency(
    'payment',
    error_message="Too many payment requests. Please wait a minute and try again."
)
