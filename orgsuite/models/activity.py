"""
Activity log model.

Tracks who created, changed, deleted or approved what, per organization.
Feeds the admin activity view.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, DateTime, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from orgsuite.models.base import Base, _utc_now


class ActivityLog(Base):
    """One user action on one record."""

    __tablename__ = "activity_logs"

    # Primary key
    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True, default=uuid4)

    # Foreign keys (organization is null for platform-level actions)
    organization_id: Mapped[Optional[UUID]] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    user_id: Mapped[Optional[UUID]] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    user_name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Event details
    action: Mapped[str] = mapped_column(String(20), nullable=False, index=True)  # CREATE, UPDATE, DELETE, LOGIN, APPROVE
    resource: Mapped[str] = mapped_column(String(100), nullable=False)  # students, invoices, ...
    resource_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)

    # Changed fields or extra context
    changes: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    # Timestamp
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utc_now, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<ActivityLog(id={self.id}, action={self.action}, resource={self.resource})>"
