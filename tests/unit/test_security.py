"""
Unit tests for security utilities (password hashing and JWT tokens).
"""

from datetime import timedelta
from uuid import UUID, uuid4

import pytest
from jose import JWTError, jwt

from orgsuite.config.settings import get_settings
from orgsuite.security import (
    create_access_token,
    create_refresh_token,
    hash_password,
    verify_password,
    verify_token,
)

pytestmark = pytest.mark.unit

settings = get_settings()


def _decode(token: str) -> dict:
    return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])


class TestPasswordHashing:
    """Test password hashing and verification."""

    def test_hash_password_is_salted(self):
        password = "testpassword123"
        hash1 = hash_password(password)
        hash2 = hash_password(password)

        assert hash1 != password
        assert hash1 != hash2

    def test_verify_password_correct(self):
        hashed = hash_password("testpassword123")

        assert verify_password("testpassword123", hashed) is True

    def test_verify_password_incorrect(self):
        hashed = hash_password("testpassword123")

        assert verify_password("wrongpassword", hashed) is False
        assert verify_password("", hashed) is False

    def test_verify_password_invalid_hash(self):
        """A malformed stored hash is a mismatch, not an error."""
        assert verify_password("testpassword123", "invalid_hash") is False


class TestAccessTokenGeneration:
    """Test access token generation."""

    def test_access_token_contains_tenant_and_role(self):
        user_id = uuid4()
        org_id = uuid4()

        token = create_access_token(
            user_id=user_id, organization_id=org_id, email="ana@school.com", role="academic"
        )
        payload = _decode(token)

        assert payload["sub"] == str(user_id)
        assert payload["email"] == "ana@school.com"
        assert payload["org_id"] == str(org_id)
        assert payload["role"] == "academic"
        assert payload["type"] == "access"
        assert "exp" in payload
        assert "iat" in payload

    def test_super_admin_token_has_no_organization(self):
        token = create_access_token(
            user_id=uuid4(), organization_id=None, email="root@orgsuite.com", role="super_admin"
        )

        assert _decode(token)["org_id"] is None

    def test_access_token_custom_expiration(self):
        token = create_access_token(
            user_id=uuid4(),
            organization_id=uuid4(),
            email="ana@school.com",
            role="admin",
            expires_delta=timedelta(minutes=60),
        )
        payload = _decode(token)

        assert payload["exp"] - payload["iat"] == 3600

    def test_default_expiration_follows_settings(self):
        token = create_access_token(
            user_id=uuid4(), organization_id=uuid4(), email="ana@school.com", role="admin"
        )
        payload = _decode(token)

        assert payload["exp"] - payload["iat"] == settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60


class TestRefreshTokenGeneration:
    """Test refresh token generation."""

    def test_refresh_token_only_identifies_user(self):
        user_id = uuid4()

        payload = _decode(create_refresh_token(user_id=user_id))

        assert payload["sub"] == str(user_id)
        assert payload["type"] == "refresh"
        assert "email" not in payload
        assert "org_id" not in payload
        assert "role" not in payload

    def test_refresh_token_custom_expiration(self):
        token = create_refresh_token(user_id=uuid4(), expires_delta=timedelta(days=14))
        payload = _decode(token)

        assert payload["exp"] - payload["iat"] == 14 * 24 * 60 * 60


class TestTokenVerification:
    """Test token verification."""

    def test_verify_access_token_success(self):
        user_id = uuid4()
        token = create_access_token(
            user_id=user_id, organization_id=uuid4(), email="ana@school.com", role="admin"
        )

        payload = verify_token(token, token_type="access")

        assert payload["sub"] == str(user_id)

    def test_verify_refresh_token_success(self):
        user_id = uuid4()

        payload = verify_token(create_refresh_token(user_id=user_id), token_type="refresh")

        assert payload["sub"] == str(user_id)

    def test_verify_token_wrong_type(self):
        token = create_refresh_token(user_id=uuid4())

        with pytest.raises(ValueError, match="Invalid token type"):
            verify_token(token, token_type="access")

    def test_verify_token_invalid_signature(self):
        token = jwt.encode({"sub": str(uuid4()), "type": "access"}, "wrong_secret_key", algorithm="HS256")

        with pytest.raises(JWTError):
            verify_token(token, token_type="access")

    def test_verify_token_malformed(self):
        with pytest.raises(JWTError):
            verify_token("not.a.valid.token", token_type="access")

    def test_verify_token_expired(self):
        token = create_refresh_token(user_id=uuid4(), expires_delta=timedelta(seconds=-10))

        with pytest.raises(JWTError):
            verify_token(token, token_type="refresh")


class TestTokenUniqueness:
    """Tokens minted in the same second must still differ (jti claim)."""

    def test_tokens_with_same_claims_differ(self):
        user_id = uuid4()
        org_id = uuid4()

        token1 = create_access_token(user_id=user_id, organization_id=org_id, email="a@b.com", role="hr")
        token2 = create_access_token(user_id=user_id, organization_id=org_id, email="a@b.com", role="hr")

        assert token1 != token2
        assert _decode(token1)["jti"] != _decode(token2)["jti"]

    def test_jti_is_uuid_format(self):
        payload = _decode(create_refresh_token(user_id=uuid4()))

        UUID(payload["jti"])
