"""
Human resources: employees, workday attendance and payroll.
"""

import datetime as dt
from typing import Optional
from uuid import UUID

from sqlalchemy import JSON, Date, DateTime, Float, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from orgsuite.models.base import Base, TenantMixin


class Employee(TenantMixin, Base):
    __tablename__ = "employees"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    position: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), default="employee")
    status: Mapped[str] = mapped_column(String(20), default="active", index=True)  # active, inactive
    salary: Mapped[float] = mapped_column(Float, default=0.0)
    contracted_hours: Mapped[int] = mapped_column(Integer, default=160)  # per month
    avatar_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Payment and social security
    bank_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    account_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    eps: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)  # health provider
    arl: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)  # occupational risk insurer


class Attendance(TenantMixin, Base):
    """Daily check-in / check-out of an employee."""

    __tablename__ = "attendance"

    employee_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False, index=True)
    employee_name: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    check_in: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)  # HH:MM
    check_out: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False)  # present, absent, late, finished
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("employee_id", "date", name="uq_attendance_employee_date"),
    )


class Payroll(TenantMixin, Base):
    """
    Payroll of one employee for one period.

    Novelties (bonuses, manual deductions, legal deductions) are stored as
    JSON lists of {id, description, amount, type}; totals are denormalised
    and recalculated whenever a novelty changes.
    """

    __tablename__ = "payrolls"

    employee_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False, index=True)
    employee_name: Mapped[str] = mapped_column(String(255), nullable=False)
    period: Mapped[str] = mapped_column(String(50), nullable=False, index=True)  # "2024-05-01 to 2024-05-31"
    base_salary: Mapped[float] = mapped_column(Float, nullable=False)
    worked_hours: Mapped[float] = mapped_column(Float, default=0.0)
    contracted_hours: Mapped[int] = mapped_column(Integer, nullable=False)

    bonuses: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    deductions: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    legal_deductions: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    total_bonuses: Mapped[float] = mapped_column(Float, default=0.0)
    total_deductions: Mapped[float] = mapped_column(Float, default=0.0)
    total_legal_deductions: Mapped[float] = mapped_column(Float, default=0.0)
    net_pay: Mapped[float] = mapped_column(Float, default=0.0)

    status: Mapped[str] = mapped_column(String(20), default="pending", index=True)  # pending, paid, cancelled
    payment_date: Mapped[Optional[dt.datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
