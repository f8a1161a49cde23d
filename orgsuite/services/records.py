"""Lookups of related records inside one organization."""

from typing import Optional, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgsuite.exceptions import NotFoundError
from orgsuite.models import User

ModelT = TypeVar("ModelT")


async def get_record(
    db: AsyncSession,
    model: type[ModelT],
    organization_id: UUID,
    record_id: UUID,
    label: Optional[str] = None,
) -> ModelT:
    """
    Fetch a tenant record referenced by another one.

    Raises:
        NotFoundError: If it does not exist in the organization
    """
    result = await db.execute(
        select(model).where(model.id == record_id, model.organization_id == organization_id)
    )
    record = result.scalar_one_or_none()
    if record is None:
        raise NotFoundError(f"{label or model.__name__} {record_id} not found")
    return record


async def get_org_user(db: AsyncSession, organization_id: UUID, user_id: UUID) -> User:
    """A non-deleted user of the organization (teacher, assignee, ...)."""
    result = await db.execute(
        select(User).where(
            User.id == user_id,
            User.organization_id == organization_id,
            User.deleted_at.is_(None),
        )
    )
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFoundError(f"User {user_id} not found")
    return user
