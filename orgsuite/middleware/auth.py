"""
JWT authentication and tenant/module authorization.

Provides FastAPI dependencies for:
- JWT token validation
- User authentication
- Role-based authorization
- Organization-level access control
- Per-module access (organization has the module AND the role grants it)
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgsuite.database import get_db
from orgsuite.models import Organization, User
from orgsuite.permissions import Module, Role, role_grants
from orgsuite.security import verify_token


# HTTP Bearer token scheme
security = HTTPBearer()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Validate JWT token and return current user.

    Raises:
        HTTPException: If token is invalid or user not found
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = verify_token(credentials.credentials, token_type="access")
        user_id = UUID(payload["sub"])
    except (JWTError, KeyError, ValueError):
        raise credentials_exception

    result = await db.execute(
        select(User).where(User.id == user_id, User.deleted_at.is_(None))
    )
    user = result.scalar_one_or_none()

    if user is None:
        raise credentials_exception

    return user


async def get_current_active_user(current_user: User = Depends(get_current_user)) -> User:
    """
    Get current user and verify they are active.

    Pending (awaiting approval) and deactivated accounts are refused.
    """
    if not current_user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Inactive user")
    return current_user


def require_roles(*roles: Role):
    """
    Dependency factory for role-based authorization.

    Usage:
        @router.post("", dependencies=[Depends(require_roles(Role.ADMIN))])
    """
    allowed = {role.value for role in roles}

    async def role_checker(current_user: User = Depends(get_current_active_user)) -> User:
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role not allowed: one of {', '.join(sorted(allowed))} required",
            )
        return current_user

    return role_checker


require_super_admin = require_roles(Role.SUPER_ADMIN)
require_admin = require_roles(Role.SUPER_ADMIN, Role.ADMIN)


class OrganizationAccessChecker:
    """
    Dependency class for organization-level access control.

    Ensures the user belongs to the organization named by the
    ``organization_id`` path parameter. Super admins pass for any organization.

    Usage:
        @router.get("/organizations/{organization_id}")
        async def get_organization(
            organization_id: UUID,
            user: User = Depends(OrganizationAccessChecker())
        ):
            ...
    """

    def __call__(
        self,
        organization_id: UUID,
        current_user: User = Depends(get_current_active_user),
    ) -> User:
        if current_user.is_super_admin:
            return current_user
        if current_user.organization_id != organization_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied: You do not belong to this organization",
            )
        return current_user


# Create singleton instance for use as dependency
require_org_access = OrganizationAccessChecker()


@dataclass
class TenantContext:
    """
    Caller of a tenant-scoped endpoint.

    ``organization_id`` is None only for a super admin without an
    organization, who then reads across all tenants.
    """

    user: User
    organization_id: Optional[UUID]

    def scope(self, query, model):
        """Restrict a select() on a tenant model to the caller's organization."""
        if self.organization_id is None:
            return query
        return query.where(model.organization_id == self.organization_id)

    def check(self, record) -> None:
        """Refuse access to a record of another organization."""
        if self.organization_id is not None and record.organization_id != self.organization_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied: You do not belong to this organization",
            )

    def require_organization(self) -> UUID:
        """Organization new records are stamped with."""
        if self.organization_id is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="An organization is required to create records",
            )
        return self.organization_id


async def get_active_organization(db: AsyncSession, user: User) -> Organization:
    """
    Load the user's organization and verify it may be used today.

    Raises:
        HTTPException: 403 if missing or inactive, 402 if the subscription ended
    """
    if user.organization_id is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User is not assigned to an organization",
        )

    result = await db.execute(
        select(Organization).where(
            Organization.id == user.organization_id, Organization.deleted_at.is_(None)
        )
    )
    organization = result.scalar_one_or_none()

    if organization is None or not organization.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Organization is inactive")

    if not organization.subscription_active(date.today()):
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail="Organization subscription has expired",
        )

    return organization


def require_module(module: Module):
    """
    Dependency factory for feature-module access.

    Super admins always pass. Everyone else needs an active organization with
    a current subscription, the module enabled for that organization, and a
    role that grants the module.

    Usage:
        @router.get("/students")
        async def list_students(ctx: TenantContext = Depends(require_module(Module.STUDENTS))):
            ...
    """

    async def module_checker(
        current_user: User = Depends(get_current_active_user),
        db: AsyncSession = Depends(get_db),
    ) -> TenantContext:
        if current_user.is_super_admin:
            return TenantContext(user=current_user, organization_id=current_user.organization_id)

        organization = await get_active_organization(db, current_user)

        if not organization.has_module(module.value):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Module '{module.value}' is not enabled for this organization",
            )

        if not role_grants(current_user.role, module):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Permission denied: role '{current_user.role}' cannot access '{module.value}'",
            )

        return TenantContext(user=current_user, organization_id=organization.id)

    return module_checker
