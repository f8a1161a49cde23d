"""
Organization model for multi-tenant SaaS.

Each organization represents a separate tenant/customer.
"""

from datetime import date, datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, Boolean, Date, DateTime, Float, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from orgsuite.models.base import Base, _utc_now


class Organization(Base):
    """
    Organization (Tenant) model.

    All data is isolated by organization_id.
    """

    __tablename__ = "organizations"

    # Primary key
    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True, default=uuid4)

    # Organization details
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    tax_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)  # NIT

    # Subscription/contract
    plan_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    subscription_ends: Mapped[date] = mapped_column(Date, nullable=False)
    contract_start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    contract_end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    contract_status: Mapped[str] = mapped_column(String(20), default="pending")  # active, on_trial, expired, cancelled, pending
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)

    # Enabled feature modules: {"hr": true, "finance": false, ...}
    modules: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)

    # Branding
    theme_colors: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    landing_page: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utc_now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now, onupdate=_utc_now, nullable=False
    )
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<Organization(id={self.id}, name={self.name}, plan={self.plan_type})>"

    @property
    def is_deleted(self) -> bool:
        """Check if organization is soft-deleted."""
        return self.deleted_at is not None

    def soft_delete(self) -> None:
        """Soft delete the organization."""
        self.deleted_at = _utc_now()
        self.is_active = False

    def subscription_active(self, today: date) -> bool:
        """Subscription is valid through the end date inclusive."""
        return self.subscription_ends >= today

    def has_module(self, module: str) -> bool:
        return bool((self.modules or {}).get(module, False))


class OrganizationSettings(Base):
    """
    Per-organization system settings.

    One row per organization, created lazily on first read.
    """

    __tablename__ = "organization_settings"

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True, default=uuid4)
    organization_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )

    # Sales / accounting
    tax_rate: Mapped[float] = mapped_column(Float, nullable=False)  # percent
    accounting_sector: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    default_cash_account_id: Mapped[Optional[UUID]] = mapped_column(PG_UUID(as_uuid=True), nullable=True)
    default_sales_revenue_account_id: Mapped[Optional[UUID]] = mapped_column(PG_UUID(as_uuid=True), nullable=True)
    default_tax_payable_account_id: Mapped[Optional[UUID]] = mapped_column(PG_UUID(as_uuid=True), nullable=True)
    default_inventory_account_id: Mapped[Optional[UUID]] = mapped_column(PG_UUID(as_uuid=True), nullable=True)
    default_cogs_account_id: Mapped[Optional[UUID]] = mapped_column(PG_UUID(as_uuid=True), nullable=True)

    # CRM
    acquisition_channels: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    # Communications
    default_email_footer: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now, onupdate=_utc_now, nullable=False
    )

    def __repr__(self) -> str:
        return f"<OrganizationSettings(org_id={self.organization_id}, tax_rate={self.tax_rate})>"

    @property
    def sale_accounts(self) -> Optional[dict[str, UUID]]:
        """All five default accounts needed to post a sale, or None if any is missing."""
        accounts = {
            "cash": self.default_cash_account_id,
            "revenue": self.default_sales_revenue_account_id,
            "tax": self.default_tax_payable_account_id,
            "inventory": self.default_inventory_account_id,
            "cogs": self.default_cogs_account_id,
        }
        if any(value is None for value in accounts.values()):
            return None
        return accounts
