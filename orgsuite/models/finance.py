"""
Finance: chart of accounts, journal entries and invoices.
"""

import datetime as dt
from typing import Optional

from sqlalchemy import JSON, Boolean, Date, Float, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from orgsuite.models.base import Base, TenantMixin


class Account(TenantMixin, Base):
    """Ledger account. Balance follows the account's normal side."""

    __tablename__ = "accounts"

    code: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)  # asset, liability, equity, income, expense
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_parent: Mapped[bool] = mapped_column(Boolean, default=False)
    parent_code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    balance: Mapped[float] = mapped_column(Float, default=0.0)

    __table_args__ = (
        UniqueConstraint("organization_id", "code", name="uq_org_account_code"),
    )


class JournalEntry(TenantMixin, Base):
    """
    Balanced journal entry.

    lines: [{account_id, account_code, account_name, debit, credit}, ...]
    """

    __tablename__ = "journal_entries"

    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    lines: Mapped[list] = mapped_column(JSON, nullable=False)


class Invoice(TenantMixin, Base):
    __tablename__ = "invoices"

    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    due_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    items: Mapped[list] = mapped_column(JSON, nullable=False)  # [{description, quantity, price}]
    total: Mapped[float] = mapped_column(Float, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="draft", index=True)  # draft, sent, paid, overdue
