"""
User management API routes.

Provides CRUD operations for users within organizations and the approval of
self-registered accounts.
"""

from typing import List, Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgsuite.api.crud import reject_nulls
from orgsuite.database import get_db
from orgsuite.middleware.auth import get_current_active_user, require_admin, require_super_admin
from orgsuite.models import Organization, User
from orgsuite.permissions import Role
from orgsuite.security import hash_password
from orgsuite.services.activity import log_activity

router = APIRouter(prefix="/api/v1/users", tags=["users"])

RoleName = Literal[tuple(role.value for role in Role)]
UserStatus = Literal["active", "inactive", "pending", "cancelled"]


# Pydantic schemas
class UserCreate(BaseModel):
    """Schema for creating a new user."""

    email: EmailStr
    name: str = Field(..., min_length=2, max_length=255)
    password: str = Field(..., min_length=6)
    role: RoleName
    organization_id: Optional[UUID] = None  # super admins only; admins create in their own
    avatar_url: Optional[str] = Field(None, max_length=500)


class UserUpdate(BaseModel):
    """Schema for updating a user."""

    name: Optional[str] = Field(None, min_length=2, max_length=255)
    role: Optional[RoleName] = None
    status: Optional[UserStatus] = None
    avatar_url: Optional[str] = Field(None, max_length=500)


class ApproveRequest(BaseModel):
    organization_id: UUID
    role: RoleName


class UserResponse(BaseModel):
    """Schema for user response."""

    id: UUID
    organization_id: Optional[UUID]
    email: str
    name: str
    role: str
    status: str
    avatar_url: Optional[str]
    force_password_change: bool

    class Config:
        from_attributes = True


async def _get_user(db: AsyncSession, user_id: UUID) -> User:
    result = await db.execute(select(User).where(User.id == user_id, User.deleted_at.is_(None)))
    user = result.scalar_one_or_none()

    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"User {user_id} not found")
    return user


async def _get_organization(db: AsyncSession, organization_id: UUID) -> Organization:
    result = await db.execute(
        select(Organization).where(
            Organization.id == organization_id, Organization.deleted_at.is_(None)
        )
    )
    organization = result.scalar_one_or_none()

    if not organization:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Organization {organization_id} not found",
        )
    return organization


def _check_same_organization(current_user: User, user: User) -> None:
    if current_user.is_super_admin:
        return
    if current_user.organization_id != user.organization_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied: User does not belong to your organization",
        )


def _check_role_assignment(current_user: User, role: str) -> None:
    if role == Role.SUPER_ADMIN.value and not current_user.is_super_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only a super admin can assign the super_admin role",
        )


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user: UserCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """
    Create a user in an organization.

    Admins create users in their own organization. The new user must change
    the initial password at first login.

    Raises:
        HTTPException: 403 on a forbidden role or organization, 409 if the email exists
    """
    _check_role_assignment(current_user, user.role)

    if current_user.is_super_admin:
        organization_id = user.organization_id
    else:
        if user.organization_id is not None and user.organization_id != current_user.organization_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied: You do not belong to this organization",
            )
        organization_id = current_user.organization_id

    if organization_id is not None:
        await _get_organization(db, organization_id)

    # Email is unique across all tenants
    result = await db.execute(select(User).where(User.email == user.email))
    if result.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"User with email '{user.email}' already exists",
        )

    db_user = User(
        organization_id=organization_id,
        email=user.email,
        name=user.name,
        hashed_password=hash_password(user.password),
        role=user.role,
        status="active",
        avatar_url=user.avatar_url,
        force_password_change=True,
    )
    db.add(db_user)
    await db.flush()

    log_activity(
        db, current_user, "CREATE", "users", db_user.id,
        changes={"email": db_user.email, "role": db_user.role},
        organization_id=organization_id,
    )
    await db.commit()
    await db.refresh(db_user)

    return db_user


@router.get("", response_model=List[UserResponse])
async def list_users(
    role: Optional[RoleName] = None,
    user_status: Optional[UserStatus] = None,
    organization_id: Optional[UUID] = None,
    skip: int = 0,
    limit: int = 100,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """
    List users.

    Admins see their organization. Super admins see every user and may
    narrow by organization (e.g. ``user_status=pending`` for the approval queue).
    """
    query = select(User).where(User.deleted_at.is_(None))

    if current_user.is_super_admin:
        if organization_id is not None:
            query = query.where(User.organization_id == organization_id)
    else:
        query = query.where(User.organization_id == current_user.organization_id)

    if role:
        query = query.where(User.role == role)

    if user_status:
        query = query.where(User.status == user_status)

    query = query.order_by(User.name).offset(skip).limit(limit)
    result = await db.execute(query)
    return result.scalars().all()


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """Get user by ID. Only users of the same organization are visible."""
    user = await _get_user(db, user_id)
    _check_same_organization(current_user, user)
    return user


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: UUID,
    user_update: UserUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """
    Update name, role, status or avatar of a user.

    Raises:
        HTTPException: 403 for another organization's user or a forbidden role
    """
    user = await _get_user(db, user_id)
    _check_same_organization(current_user, user)

    if user.is_super_admin and not current_user.is_super_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Super admin accounts cannot be modified"
        )

    update_data = reject_nulls(User, user_update.model_dump(exclude_unset=True))
    if update_data.get("role"):
        _check_role_assignment(current_user, update_data["role"])

    for field, value in update_data.items():
        setattr(user, field, value)

    log_activity(
        db, current_user, "UPDATE", "users", user.id,
        changes=update_data, organization_id=user.organization_id,
    )
    await db.commit()
    await db.refresh(user)

    return user


@router.post("/{user_id}/approve", response_model=UserResponse)
async def approve_user(
    user_id: UUID,
    approval: ApproveRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_super_admin),
):
    """
    Approve a self-registered account.

    Assigns the organization and role and activates the account.
    """
    user = await _get_user(db, user_id)

    if user.status != "pending":
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=f"User {user_id} is not pending approval"
        )

    if approval.role in (Role.PENDING.value, Role.CANCELLED.value):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Role '{approval.role}' cannot be assigned on approval",
        )

    organization = await _get_organization(db, approval.organization_id)

    user.organization_id = organization.id
    user.role = approval.role
    user.status = "active"

    log_activity(
        db, current_user, "APPROVE", "users", user.id,
        changes={"organization_id": str(organization.id), "role": approval.role},
        message=f"{current_user.name} approved {user.name} for {organization.name}.",
        organization_id=organization.id,
    )
    await db.commit()
    await db.refresh(user)

    return user


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """
    Soft delete user.

    The activity entry keeps the email, name and role of the deleted account.
    """
    user = await _get_user(db, user_id)
    _check_same_organization(current_user, user)

    if user.id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="You cannot delete your own account"
        )

    if user.is_super_admin and not current_user.is_super_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Super admin accounts cannot be deleted"
        )

    log_activity(
        db, current_user, "DELETE", "users", user.id,
        changes={"email": user.email, "name": user.name, "role": user.role},
        message=f"{current_user.name} deleted the user {user.name} ({user.email}).",
        organization_id=user.organization_id,
    )
    user.soft_delete()
    await db.commit()
