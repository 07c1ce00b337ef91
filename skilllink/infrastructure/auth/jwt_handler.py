"""
JWT token handler for Supabase authentication.
Validates access tokens issued by Supabase and extracts the user id.
"""

import time
from typing import Optional, Dict, Any
from jose import JWTError, jwt

from skilllink.config import get_settings
from skilllink.domain.models.base import ValidationError


class JWTHandler:
    """Handles JWT token validation and user extraction."""

    def __init__(self, jwt_secret: Optional[str] = None):
        self.settings = get_settings()
        self.jwt_secret = jwt_secret or self.settings.supabase_jwt_secret
        self.jwt_algorithm = "HS256"

    def verify_token(self, token: str) -> Dict[str, Any]:
        """
        Verify and decode a Supabase JWT token.

        Raises:
            ValidationError: If token is invalid or expired
        """
        if token.startswith('Bearer '):
            token = token[7:]

        try:
            payload = jwt.decode(
                token,
                self.jwt_secret,
                algorithms=[self.jwt_algorithm],
                options={"verify_exp": True, "verify_aud": False}
            )
        except JWTError as e:
            raise ValidationError(f"Invalid JWT token: {str(e)}")

        if 'sub' not in payload:
            raise ValidationError("Token missing user ID (sub claim)")
        if 'exp' not in payload:
            raise ValidationError("Token missing expiration (exp claim)")

        return payload

    def get_user_id(self, token: str) -> str:
        payload = self.verify_token(token)
        return payload['sub']

    def get_user_email(self, token: str) -> Optional[str]:
        try:
            return self.verify_token(token).get('email')
        except ValidationError:
            return None

    def is_token_valid(self, token: str) -> bool:
        try:
            self.verify_token(token)
            return True
        except ValidationError:
            return False

    def generate_test_token(
        self,
        user_id: str,
        email: str = "test@example.com",
        expires_minutes: int = 60
    ) -> str:
        """Generate a Supabase-shaped token for development and tests."""
        now = int(time.time())
        payload = {
            "sub": user_id,
            "email": email,
            "role": "authenticated",
            "iat": now,
            "exp": now + expires_minutes * 60,
            "aud": "authenticated",
            "iss": "supabase"
        }
        return jwt.encode(payload, self.jwt_secret, algorithm=self.jwt_algorithm)
