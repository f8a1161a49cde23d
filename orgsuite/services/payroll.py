"""
Payroll generation and novelty handling.

Net pay of a payroll is always

    base_salary + sum(bonuses) - sum(legal_deductions) - sum(deductions)

and is recalculated every time a novelty is added or removed.
"""

import logging
import uuid
from datetime import date, datetime, timezone
from typing import Iterable, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgsuite.config.settings import get_settings
from orgsuite.exceptions import BusinessRuleError, ConflictError, NotFoundError
from orgsuite.models import Attendance, Employee, Payroll

logger = logging.getLogger(__name__)

LEGAL_HEALTH_ID = "legal_health"
LEGAL_PENSION_ID = "legal_pension"
NOVELTY_TYPES = ("bonus", "deduction")


def _sum(novelties: Iterable[dict]) -> float:
    return sum(float(n["amount"]) for n in novelties)


def calculate_totals(
    base_salary: float,
    bonuses: list[dict],
    deductions: list[dict],
    legal_deductions: list[dict],
) -> dict[str, float]:
    """Totals of a payroll; ``total_deductions`` covers manual deductions only."""
    total_bonuses = _sum(bonuses)
    total_deductions = _sum(deductions)
    total_legal_deductions = _sum(legal_deductions)
    return {
        "total_bonuses": total_bonuses,
        "total_deductions": total_deductions,
        "total_legal_deductions": total_legal_deductions,
        "net_pay": base_salary + total_bonuses - total_legal_deductions - total_deductions,
    }


def legal_deductions_for(base_salary: float) -> list[dict]:
    """Mandatory health and pension contributions withheld from the employee."""
    settings = get_settings()
    health = settings.payroll_health_rate
    pension = settings.payroll_pension_rate
    return [
        {
            "id": LEGAL_HEALTH_ID,
            "description": f"Health contribution ({health * 100:g}%)",
            "amount": base_salary * health,
            "type": "deduction",
        },
        {
            "id": LEGAL_PENSION_ID,
            "description": f"Pension contribution ({pension * 100:g}%)",
            "amount": base_salary * pension,
            "type": "deduction",
        },
    ]


def _minutes(hhmm: str) -> Optional[int]:
    try:
        hours, minutes = hhmm.split(":")
        return int(hours) * 60 + int(minutes)
    except (AttributeError, ValueError):
        return None


def worked_hours(records: Iterable[Attendance]) -> int:
    """
    Whole hours worked across attendance records.

    Each record contributes the truncated hours between check-in and
    check-out; incomplete or inverted records contribute nothing.
    """
    total = 0
    for record in records:
        if not record.check_in or not record.check_out:
            continue
        start, end = _minutes(record.check_in), _minutes(record.check_out)
        if start is None or end is None or end <= start:
            continue
        total += (end - start) // 60
    return total


def period_label(start_date: date, end_date: date) -> str:
    return f"{start_date.isoformat()} to {end_date.isoformat()}"


def apply_totals(payroll: Payroll) -> None:
    totals = calculate_totals(
        payroll.base_salary, payroll.bonuses, payroll.deductions, payroll.legal_deductions
    )
    for key, value in totals.items():
        setattr(payroll, key, value)


async def generate_payrolls(
    db: AsyncSession, organization_id: UUID, start_date: date, end_date: date
) -> list[Payroll]:
    """
    Create one pending payroll per active employee for a period.

    Raises:
        BusinessRuleError: If the range is inverted or there are no active employees
        ConflictError: If the period was already generated for the organization
    """
    if start_date > end_date:
        raise BusinessRuleError("start_date must be on or before end_date")

    period = period_label(start_date, end_date)

    existing = await db.execute(
        select(Payroll.id).where(
            Payroll.organization_id == organization_id, Payroll.period == period
        )
    )
    if existing.first() is not None:
        raise ConflictError(f"Payroll for period {period} has already been generated")

    result = await db.execute(
        select(Employee)
        .where(Employee.organization_id == organization_id, Employee.status == "active")
        .order_by(Employee.name)
    )
    employees = result.scalars().all()
    if not employees:
        raise BusinessRuleError("There are no active employees to generate payroll for")

    default_hours = get_settings().default_contracted_hours
    payrolls = []
    for employee in employees:
        attendance = await db.execute(
            select(Attendance).where(
                Attendance.organization_id == organization_id,
                Attendance.employee_id == employee.id,
                Attendance.date >= start_date,
                Attendance.date <= end_date,
            )
        )
        base_salary = employee.salary or 0.0
        payroll = Payroll(
            organization_id=organization_id,
            employee_id=employee.id,
            employee_name=employee.name,
            period=period,
            base_salary=base_salary,
            worked_hours=worked_hours(attendance.scalars().all()),
            contracted_hours=employee.contracted_hours or default_hours,
            bonuses=[],
            deductions=[],
            legal_deductions=legal_deductions_for(base_salary),
            status="pending",
        )
        apply_totals(payroll)
        db.add(payroll)
        payrolls.append(payroll)

    await db.flush()
    logger.info("Generated %d payrolls for period %s (org %s)", len(payrolls), period, organization_id)
    return payrolls


def _ensure_pending(payroll: Payroll) -> None:
    if payroll.status != "pending":
        raise ConflictError(f"Payroll is {payroll.status}; only pending payrolls can change")


def add_novelty(payroll: Payroll, description: str, amount: float, novelty_type: str) -> dict:
    """
    Append a bonus or deduction and recalculate totals.

    Raises:
        ConflictError: If the payroll is not pending
        BusinessRuleError: If the novelty is invalid
    """
    _ensure_pending(payroll)
    if novelty_type not in NOVELTY_TYPES:
        raise BusinessRuleError(f"Novelty type must be one of {', '.join(NOVELTY_TYPES)}")
    if amount <= 0:
        raise BusinessRuleError("Novelty amount must be greater than zero")

    novelty = {
        "id": str(uuid.uuid4()),
        "description": description,
        "amount": float(amount),
        "type": novelty_type,
    }
    # JSON columns are reassigned, never mutated in place
    if novelty_type == "bonus":
        payroll.bonuses = [*payroll.bonuses, novelty]
    else:
        payroll.deductions = [*payroll.deductions, novelty]
    apply_totals(payroll)
    return novelty


def remove_novelty(payroll: Payroll, novelty_id: str) -> dict:
    """
    Remove a bonus or manual deduction and recalculate totals.

    Raises:
        ConflictError: If the payroll is not pending or the novelty is a legal deduction
        NotFoundError: If no novelty has that id
    """
    _ensure_pending(payroll)
    if any(n["id"] == novelty_id for n in payroll.legal_deductions):
        raise ConflictError("Legal deductions cannot be removed")

    for key in ("bonuses", "deductions"):
        current = getattr(payroll, key)
        remaining = [n for n in current if n["id"] != novelty_id]
        if len(remaining) != len(current):
            removed = next(n for n in current if n["id"] == novelty_id)
            setattr(payroll, key, remaining)
            apply_totals(payroll)
            return removed

    raise NotFoundError(f"Novelty {novelty_id} not found")


def mark_paid(payroll: Payroll) -> None:
    _ensure_pending(payroll)
    payroll.status = "paid"
    payroll.payment_date = datetime.now(timezone.utc)


def cancel(payroll: Payroll) -> None:
    _ensure_pending(payroll)
    payroll.status = "cancelled"
