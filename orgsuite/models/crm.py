"""
CRM: customers, sales opportunities and logged interactions.
"""

import datetime as dt
from typing import Optional
from uuid import UUID

from sqlalchemy import Boolean, Date, DateTime, Float, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from orgsuite.models.base import Base, TenantMixin


class Customer(TenantMixin, Base):
    __tablename__ = "customers"

    is_business: Mapped[bool] = mapped_column(Boolean, default=False)  # legal entity vs natural person
    identification_type: Mapped[str] = mapped_column(String(20), nullable=False)  # CC, CE, NIT, passport
    identification_number: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    customer_type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)  # prospect, active, inactive, potential

    # Segmentation
    department: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    municipality: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    economic_activity: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)  # CIIU code
    company_size: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    acquisition_channel: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    __table_args__ = (
        UniqueConstraint("organization_id", "identification_number", name="uq_org_customer_identification"),
    )


class Opportunity(TenantMixin, Base):
    __tablename__ = "opportunities"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False, index=True)
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    estimated_value: Mapped[float] = mapped_column(Float, default=0.0)
    status: Mapped[str] = mapped_column(String(20), nullable=False, index=True)  # qualification, proposal, negotiation, won, lost
    assigned_to_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False)
    assigned_to_name: Mapped[str] = mapped_column(String(255), nullable=False)
    closed_at: Mapped[Optional[dt.datetime]] = mapped_column(DateTime(timezone=True), nullable=True)


class Interaction(TenantMixin, Base):
    __tablename__ = "interactions"

    customer_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False)  # call, meeting, email
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    notes: Mapped[str] = mapped_column(Text, nullable=False)
    user_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False)
    user_name: Mapped[str] = mapped_column(String(255), nullable=False)
