"""
Activity feed API route.
"""

from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgsuite.config.settings import get_settings
from orgsuite.database import get_db
from orgsuite.middleware.auth import require_admin
from orgsuite.models import ActivityLog, User

router = APIRouter(prefix="/api/v1/activity", tags=["activity"])


class ActivityResponse(BaseModel):
    id: UUID
    organization_id: Optional[UUID]
    user_id: Optional[UUID]
    user_name: str
    action: str
    resource: str
    resource_id: Optional[str]
    message: str
    changes: Optional[dict[str, Any]]
    created_at: datetime

    class Config:
        from_attributes = True


@router.get("", response_model=List[ActivityResponse])
async def list_activity(
    action: Optional[str] = None,
    resource: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """
    Most recent activity, newest first.

    Admins see their organization; super admins see every tenant.
    """
    query = select(ActivityLog)

    if not current_user.is_super_admin:
        query = query.where(ActivityLog.organization_id == current_user.organization_id)

    if action:
        query = query.where(ActivityLog.action == action.upper())

    if resource:
        query = query.where(ActivityLog.resource == resource)

    query = query.order_by(ActivityLog.created_at.desc()).limit(get_settings().activity_feed_limit)
    result = await db.execute(query)
    return result.scalars().all()
