"""
Supabase authentication service.
Handles sign-up, sign-in and token refresh with Supabase Auth.
"""

import logging
from typing import Optional, Dict, Any
from supabase import create_client, Client

from skilllink.config import get_settings
from skilllink.domain.models.base import ValidationError


logger = logging.getLogger(__name__)


class SupabaseAuthService:
    """Service for Supabase authentication operations."""

    def __init__(self):
        self.settings = get_settings()
        self._client: Optional[Client] = None

    @property
    def supabase(self) -> Client:
        # Created on first use so the API starts without reaching Supabase
        if self._client is None:
            self._client = create_client(
                self.settings.supabase_url,
                self.settings.supabase_anon_key
            )
        return self._client

    def sign_up(self, email: str, password: str, metadata: Optional[Dict] = None) -> Dict[str, Any]:
        """
        Sign up a new user.

        Returns:
            Dict containing user data and session

        Raises:
            ValidationError: If sign up fails
        """
        try:
            response = self.supabase.auth.sign_up({
                "email": email,
                "password": password,
                "options": {
                    "data": metadata or {}
                }
            })
        except Exception as e:
            logger.warning(f"Supabase sign up failed for {email}: {e}")
            raise ValidationError(f"Sign up failed: {str(e)}")

        if response.user is None:
            raise ValidationError("Failed to create user account")

        return {
            "user": response.user.model_dump(),
            "session": response.session.model_dump() if response.session else None
        }

    def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        """
        Sign in a user.

        Raises:
            ValidationError: If sign in fails
        """
        try:
            response = self.supabase.auth.sign_in_with_password({
                "email": email,
                "password": password
            })
        except Exception as e:
            raise ValidationError(f"Sign in failed: {str(e)}")

        if response.user is None or response.session is None:
            raise ValidationError("Invalid email or password")

        return {
            "user": response.user.model_dump(),
            "session": response.session.model_dump(),
            "access_token": response.session.access_token,
            "refresh_token": response.session.refresh_token
        }

    def refresh_token(self, refresh_token: str) -> Dict[str, Any]:
        """
        Refresh access token.

        Raises:
            ValidationError: If refresh fails
        """
        try:
            response = self.supabase.auth.refresh_session(refresh_token)
        except Exception as e:
            raise ValidationError(f"Token refresh failed: {str(e)}")

        if response.session is None:
            raise ValidationError("Invalid refresh token")

        return {
            "user": response.user.model_dump() if response.user else None,
            "session": response.session.model_dump(),
            "access_token": response.session.access_token,
            "refresh_token": response.session.refresh_token
        }
