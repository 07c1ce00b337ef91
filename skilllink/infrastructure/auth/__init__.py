"""
Authentication infrastructure module.
Handles JWT validation, user authentication, and authorization.
"""

from .jwt_handler import JWTHandler
from .supabase_auth import SupabaseAuthService
from .dependencies import (
    CurrentUser,
    get_auth_service,
    get_current_user,
    get_current_user_id,
    get_jwt_handler,
    require_admin,
    require_cron_or_admin,
)

__all__ = [
    "JWTHandler",
    "SupabaseAuthService",
    "CurrentUser",
    "get_auth_service",
    "get_current_user",
    "get_current_user_id",
    "get_jwt_handler",
    "require_admin",
    "require_cron_or_admin",
]
