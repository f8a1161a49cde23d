"""
Communications: message templates and campaigns.
"""

import datetime as dt
from typing import Optional
from uuid import UUID

from sqlalchemy import DateTime, String, Text
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from orgsuite.models.base import Base, TenantMixin


class Template(TenantMixin, Base):
    __tablename__ = "templates"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)  # whatsapp, email
    subject: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)  # email only
    content: Mapped[str] = mapped_column(Text, nullable=False)


class Campaign(TenantMixin, Base):
    __tablename__ = "campaigns"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    template_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False, index=True)
    target_audience: Mapped[str] = mapped_column(String(20), nullable=False)  # all, prospects, active
    status: Mapped[str] = mapped_column(String(20), default="draft", index=True)  # draft, scheduled, sent
    scheduled_at: Mapped[Optional[dt.datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    sent_at: Mapped[Optional[dt.datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
