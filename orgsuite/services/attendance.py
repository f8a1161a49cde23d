"""Employee check-in / check-out from a badge (QR) scan."""

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgsuite.models import Attendance, Employee

logger = logging.getLogger(__name__)


async def record_scan(db: AsyncSession, employee: Employee, now: datetime) -> dict:
    """
    Register a scan for today.

    The first scan of the day opens the workday (check-in, status
    "present"); any later scan closes it (check-out, status "finished"),
    overwriting a previous check-out.
    """
    today = now.date()
    time = now.strftime("%H:%M")

    result = await db.execute(
        select(Attendance).where(
            Attendance.organization_id == employee.organization_id,
            Attendance.employee_id == employee.id,
            Attendance.date == today,
        )
    )
    record = result.scalar_one_or_none()

    if record is None:
        db.add(
            Attendance(
                organization_id=employee.organization_id,
                employee_id=employee.id,
                employee_name=employee.name,
                date=today,
                check_in=time,
                status="present",
            )
        )
        scan_type = "check_in"
    else:
        record.check_out = time
        record.status = "finished"
        scan_type = "check_out"

    await db.flush()
    logger.info("Attendance %s for %s at %s", scan_type, employee.name, time)
    return {"type": scan_type, "time": time, "name": employee.name}
