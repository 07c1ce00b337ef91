"""
Unit tests for bearer token validation.
"""

import pytest
from jose import jwt

from skilllink.domain.models.base import ValidationError
from skilllink.infrastructure.auth.dependencies import CurrentUser
from skilllink.infrastructure.auth.jwt_handler import JWTHandler


SECRET = "test-jwt-secret"


class TestJWTHandler:
    """Test cases for JWTHandler."""

    def setup_method(self):
        self.handler = JWTHandler(jwt_secret=SECRET)

    def test_round_trip(self):
        token = self.handler.generate_test_token("user-42", email="ada@example.com")

        assert self.handler.get_user_id(token) == "user-42"
        assert self.handler.get_user_email(token) == "ada@example.com"

    def test_bearer_prefix_is_stripped(self):
        token = self.handler.generate_test_token("user-42")
        assert self.handler.get_user_id(f"Bearer {token}") == "user-42"

    def test_expired_token(self):
        token = self.handler.generate_test_token("user-42", expires_minutes=-5)

        assert self.handler.is_token_valid(token) is False
        with pytest.raises(ValidationError):
            self.handler.verify_token(token)

    def test_wrong_secret(self):
        token = JWTHandler(jwt_secret="other-secret").generate_test_token("user-42")
        assert self.handler.is_token_valid(token) is False

    def test_missing_subject(self):
        """Test tokens without a user id are refused."""
        token = jwt.encode({"exp": 9999999999, "email": "x@example.com"}, SECRET, algorithm="HS256")

        with pytest.raises(ValidationError, match="sub claim"):
            self.handler.verify_token(token)

    def test_missing_expiry(self):
        token = jwt.encode({"sub": "user-42"}, SECRET, algorithm="HS256")

        with pytest.raises(ValidationError, match="exp claim"):
            self.handler.verify_token(token)

    def test_garbage(self):
        assert self.handler.get_user_email("not-a-token") is None


class TestCurrentUser:

    def test_admin_flag(self):
        assert CurrentUser("admin-1", ["admin", "employer"]).is_admin is True
        assert CurrentUser("talent-1", ["talent"]).is_admin is False
        assert CurrentUser("new-user").roles == []
