"""
Authentication dependencies for FastAPI.
Resolves the caller from the bearer token and their app roles from the database.
"""

import hmac
import logging
from dataclasses import dataclass, field
from typing import Annotated, List, Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from skilllink.config import settings
from skilllink.domain.models.base import ValidationError
from skilllink.domain.models.user import UserRole
from skilllink.infrastructure.auth.jwt_handler import JWTHandler
from skilllink.infrastructure.auth.supabase_auth import SupabaseAuthService
from skilllink.infrastructure.db.unit_of_work import SQLAlchemyUnitOfWork, get_unit_of_work


logger = logging.getLogger(__name__)

# Security scheme
security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)

# Global instances
jwt_handler = JWTHandler()
auth_service = SupabaseAuthService()

CRON_SECRET_HEADER = "X-Cron-Secret"


@dataclass
class CurrentUser:
    user_id: str
    roles: List[str] = field(default_factory=list)

    @property
    def is_admin(self) -> bool:
        return UserRole.ADMIN.value in self.roles


def get_jwt_handler() -> JWTHandler:
    """Dependency to get JWT handler."""
    return jwt_handler


def get_auth_service() -> SupabaseAuthService:
    """Dependency to get authentication service."""
    return auth_service


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    jwt_handler: Annotated[JWTHandler, Depends(get_jwt_handler)]
) -> str:
    """
    FastAPI dependency to get current authenticated user ID.

    Raises:
        HTTPException: If authentication fails
    """
    try:
        return jwt_handler.get_user_id(credentials.credentials)
    except ValidationError as e:
        raise _unauthorized(e.message)


async def get_current_user(
    user_id: Annotated[str, Depends(get_current_user_id)],
    uow: Annotated[SQLAlchemyUnitOfWork, Depends(get_unit_of_work)]
) -> CurrentUser:
    """Authenticated user with the app roles recorded in user_roles."""
    roles = [role.value for role in uow.roles.get_roles(user_id)]
    return CurrentUser(user_id=user_id, roles=roles)


async def require_admin(
    user: Annotated[CurrentUser, Depends(get_current_user)]
) -> CurrentUser:
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return user


async def require_cron_or_admin(
    request: Request,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(optional_security)],
    jwt_handler: Annotated[JWTHandler, Depends(get_jwt_handler)],
    uow: Annotated[SQLAlchemyUnitOfWork, Depends(get_unit_of_work)]
) -> str:
    """
    Scheduled task guard: the scheduler's shared secret or an admin token.
    Returns "cron" or the admin's user id.
    """
    provided = request.headers.get(CRON_SECRET_HEADER)
    if provided and settings.cron_secret and hmac.compare_digest(provided, settings.cron_secret):
        return "cron"

    if credentials is None:
        raise _unauthorized("Cron secret or admin token required")
    try:
        user_id = jwt_handler.get_user_id(credentials.credentials)
    except ValidationError as e:
        raise _unauthorized(e.message)

    if not uow.roles.has_role(user_id, UserRole.ADMIN):
        logger.warning(f"Non-admin {user_id} tried to run a scheduled task")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return user_id
