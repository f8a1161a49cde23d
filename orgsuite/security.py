"""
Password hashing (bcrypt) and JWT access/refresh tokens.

Access tokens carry the user's organization and role so that clients can
route without an extra round trip; the server always re-reads the user
from the database before authorizing anything.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

import bcrypt
from jose import jwt

from orgsuite.config.settings import get_settings

settings = get_settings()


def hash_password(password: str) -> str:
    """Hash a plain text password with a fresh bcrypt salt."""
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt())
    return hashed.decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    """
    Verify a password against its hash.

    A malformed stored hash counts as a mismatch.
    """
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        return False


def _encode(claims: dict, lifetime: timedelta) -> str:
    now = datetime.now(timezone.utc)
    claims.update({"exp": now + lifetime, "iat": now, "jti": str(uuid.uuid4())})
    return jwt.encode(claims, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_access_token(
    user_id: UUID,
    organization_id: Optional[UUID],
    email: str,
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a JWT access token.

    Args:
        user_id: User UUID
        organization_id: Tenant of the user (None for super admins)
        email: User email
        role: User role
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    claims = {
        "sub": str(user_id),
        "email": email,
        "org_id": str(organization_id) if organization_id else None,
        "role": role,
        "type": "access",
    }
    return _encode(claims, expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))


def create_refresh_token(user_id: UUID, expires_delta: Optional[timedelta] = None) -> str:
    """Create a long-lived refresh token that only identifies the user."""
    claims = {"sub": str(user_id), "type": "refresh"}
    return _encode(claims, expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS))


def verify_token(token: str, token_type: str = "access") -> dict:
    """
    Verify and decode a JWT token.

    Raises:
        JWTError: If token is invalid or expired
        ValueError: If token type doesn't match
    """
    payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])

    if payload.get("type") != token_type:
        raise ValueError(f"Invalid token type. Expected {token_type}, got {payload.get('type')}")

    return payload
