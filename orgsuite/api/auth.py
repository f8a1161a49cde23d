"""
Authentication API routes.

Provides endpoints for:
- User login (JWT generation)
- Token refresh
- User logout
- Current user profile
- Password change
- Self-registration (account waits for approval)
"""

from datetime import datetime, timezone
from typing import Dict, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from jose import JWTError
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgsuite.config.settings import get_settings
from orgsuite.database import get_db
from orgsuite.middleware.auth import get_current_active_user, get_current_user
from orgsuite.models import Organization, User
from orgsuite.permissions import Module, Role, role_grants
from orgsuite.security import (
    create_access_token,
    create_refresh_token,
    hash_password,
    verify_password,
    verify_token,
)
from orgsuite.services.activity import log_activity

router = APIRouter(prefix="/api/v1/auth", tags=["authentication"])


# Pydantic schemas
class LoginRequest(BaseModel):
    """Schema for login request."""

    email: EmailStr
    password: str = Field(..., min_length=6)


class TokenResponse(BaseModel):
    """Schema for token response."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds
    force_password_change: bool = False


class RefreshTokenRequest(BaseModel):
    """Schema for refresh token request."""

    refresh_token: str


class SignupRequest(BaseModel):
    """Schema for self-registration."""

    email: EmailStr
    name: str = Field(..., min_length=2, max_length=255)
    password: str = Field(..., min_length=6)


class SignupResponse(BaseModel):
    id: UUID
    email: str
    name: str
    status: str
    message: str = "Account created. An administrator must approve it before you can sign in."


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6)


class MessageResponse(BaseModel):
    """Generic message response."""

    message: str


class ProfileResponse(BaseModel):
    id: UUID
    email: str
    name: str
    role: str
    status: str
    organization_id: Optional[UUID]
    organization_name: Optional[str]
    avatar_url: Optional[str]
    force_password_change: bool
    modules: Dict[str, bool]


def _issue_tokens(user: User) -> TokenResponse:
    settings = get_settings()
    return TokenResponse(
        access_token=create_access_token(
            user_id=user.id,
            organization_id=user.organization_id,
            email=user.email,
            role=user.role,
        ),
        refresh_token=create_refresh_token(user_id=user.id),
        token_type="bearer",
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        force_password_change=user.force_password_change,
    )


@router.post("/login", response_model=TokenResponse)
async def login(login_data: LoginRequest, db: AsyncSession = Depends(get_db)):
    """
    Authenticate user and return JWT tokens.

    Raises:
        HTTPException: 401 on bad credentials, 403 if the account is not active
    """
    result = await db.execute(
        select(User).where(User.email == login_data.email, User.deleted_at.is_(None))
    )
    user = result.scalar_one_or_none()

    if not user or not verify_password(login_data.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        detail = "Account is pending approval" if user.status == "pending" else "Account is disabled"
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)

    user.last_login_at = datetime.now(timezone.utc)
    log_activity(db, user, "LOGIN", "sessions", user.id, message=f"{user.name} signed in.")
    await db.commit()

    return _issue_tokens(user)


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(refresh_data: RefreshTokenRequest, db: AsyncSession = Depends(get_db)):
    """
    Exchange a refresh token for a new token pair.

    Role and organization are re-read, so a changed assignment shows up in
    the new access token.
    """
    invalid = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid refresh token",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = verify_token(refresh_data.refresh_token, token_type="refresh")
        user_id = UUID(payload.get("sub"))
    except (JWTError, ValueError, TypeError):
        raise invalid

    result = await db.execute(select(User).where(User.id == user_id, User.deleted_at.is_(None)))
    user = result.scalar_one_or_none()

    if not user:
        raise invalid

    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is disabled")

    return _issue_tokens(user)


@router.post("/logout", response_model=MessageResponse)
async def logout(current_user: User = Depends(get_current_user)):
    """
    Logout user.

    Tokens are stateless; the client discards them.
    """
    return MessageResponse(message="Logged out successfully. Please discard your tokens.")


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
async def signup(signup_data: SignupRequest, db: AsyncSession = Depends(get_db)):
    """
    Public self-registration.

    The account has no organization and the pending role until a super admin
    approves it.
    """
    result = await db.execute(select(User).where(User.email == signup_data.email))
    if result.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"User with email '{signup_data.email}' already exists",
        )

    new_user = User(
        email=signup_data.email,
        name=signup_data.name,
        hashed_password=hash_password(signup_data.password),
        role=Role.PENDING.value,
        status="pending",
        organization_id=None,
    )
    db.add(new_user)
    await db.commit()
    await db.refresh(new_user)

    return SignupResponse(
        id=new_user.id, email=new_user.email, name=new_user.name, status=new_user.status
    )


@router.get("/me", response_model=ProfileResponse)
async def get_current_user_info(
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Profile of the caller and the modules they can open.

    A module is listed as enabled when the organization has it on and the
    role grants it. Super admins see every module.
    """
    organization = None
    if current_user.organization_id:
        result = await db.execute(
            select(Organization).where(Organization.id == current_user.organization_id)
        )
        organization = result.scalar_one_or_none()

    modules = {}
    for module in Module:
        if current_user.is_super_admin:
            modules[module.value] = True
        else:
            modules[module.value] = bool(
                organization
                and organization.has_module(module.value)
                and role_grants(current_user.role, module)
            )

    return ProfileResponse(
        id=current_user.id,
        email=current_user.email,
        name=current_user.name,
        role=current_user.role,
        status=current_user.status,
        organization_id=current_user.organization_id,
        organization_name=organization.name if organization else None,
        avatar_url=current_user.avatar_url,
        force_password_change=current_user.force_password_change,
        modules=modules,
    )


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    data: ChangePasswordRequest,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Replace the caller's password. The current one must be supplied."""
    if not verify_password(data.current_password, current_user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Current password is incorrect"
        )

    current_user.hashed_password = hash_password(data.new_password)
    current_user.force_password_change = False
    current_user.password_changed_at = datetime.now(timezone.utc)
    await db.commit()

    return MessageResponse(message="Password updated successfully")
