"""
Human resources API routes.

Provides CRUD for employees and attendance records, and the badge scan
endpoint that opens or closes an employee's workday.
"""

import datetime as dt
from typing import Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgsuite.api.crud import TenantRecordResponse, build_crud_router
from orgsuite.config.settings import get_settings
from orgsuite.database import get_db
from orgsuite.exceptions import ConflictError
from orgsuite.middleware.auth import TenantContext, require_module
from orgsuite.models import Attendance, Employee
from orgsuite.permissions import Module
from orgsuite.services.attendance import record_scan
from orgsuite.services.records import get_record

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"
EmployeeStatus = Literal["active", "inactive"]
AttendanceStatus = Literal["present", "absent", "late", "finished"]


# Employees
class EmployeeCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    email: EmailStr
    position: str = Field(..., min_length=2, max_length=255)
    role: str = Field("employee", max_length=20)
    status: EmployeeStatus = "active"
    salary: float = Field(..., ge=0)
    contracted_hours: int = Field(default_factory=lambda: get_settings().default_contracted_hours, gt=0)
    avatar_url: Optional[str] = None
    bank_name: Optional[str] = Field(None, max_length=100)
    account_number: Optional[str] = Field(None, max_length=50)
    eps: Optional[str] = Field(None, max_length=100)
    arl: Optional[str] = Field(None, max_length=100)


class EmployeeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    email: Optional[EmailStr] = None
    position: Optional[str] = Field(None, min_length=2, max_length=255)
    role: Optional[str] = Field(None, max_length=20)
    status: Optional[EmployeeStatus] = None
    salary: Optional[float] = Field(None, ge=0)
    contracted_hours: Optional[int] = Field(None, gt=0)
    avatar_url: Optional[str] = None
    bank_name: Optional[str] = Field(None, max_length=100)
    account_number: Optional[str] = Field(None, max_length=50)
    eps: Optional[str] = Field(None, max_length=100)
    arl: Optional[str] = Field(None, max_length=100)


class EmployeeResponse(TenantRecordResponse):
    name: str
    email: str
    position: str
    role: str
    status: str
    salary: float
    contracted_hours: int
    avatar_url: Optional[str]
    bank_name: Optional[str]
    account_number: Optional[str]
    eps: Optional[str]
    arl: Optional[str]


# Attendance
class AttendanceCreate(BaseModel):
    employee_id: UUID
    date: dt.date
    check_in: Optional[str] = Field(None, pattern=TIME_PATTERN)
    check_out: Optional[str] = Field(None, pattern=TIME_PATTERN)
    status: AttendanceStatus
    notes: Optional[str] = None


class AttendanceUpdate(BaseModel):
    check_in: Optional[str] = Field(None, pattern=TIME_PATTERN)
    check_out: Optional[str] = Field(None, pattern=TIME_PATTERN)
    status: Optional[AttendanceStatus] = None
    notes: Optional[str] = None


class AttendanceResponse(TenantRecordResponse):
    employee_id: UUID
    employee_name: str
    date: dt.date
    check_in: Optional[str]
    check_out: Optional[str]
    status: str
    notes: Optional[str]


class ScanRequest(BaseModel):
    employee_id: UUID


class ScanResponse(BaseModel):
    type: Literal["check_in", "check_out"]
    time: str
    name: str


async def attendance_before_create(db, ctx, data):
    organization_id = ctx.require_organization()
    employee = await get_record(db, Employee, organization_id, data["employee_id"], "Employee")
    existing = await db.execute(
        select(Attendance.id).where(
            Attendance.employee_id == employee.id, Attendance.date == data["date"]
        )
    )
    if existing.first() is not None:
        raise ConflictError(f"{employee.name} already has an attendance record on {data['date']}")
    data["employee_name"] = employee.name
    return data


employees_router = build_crud_router(
    model=Employee,
    module=Module.HR,
    resource="employees",
    label="Employee",
    prefix="/api/v1/hr/employees",
    tags=["hr"],
    create_schema=EmployeeCreate,
    update_schema=EmployeeUpdate,
    response_schema=EmployeeResponse,
    order_by=[Employee.name],
    filter_fields=("status", "position"),
)

attendance_router = build_crud_router(
    model=Attendance,
    module=Module.HR,
    resource="attendance",
    label="Attendance record",
    prefix="/api/v1/hr/attendance",
    tags=["hr"],
    create_schema=AttendanceCreate,
    update_schema=AttendanceUpdate,
    response_schema=AttendanceResponse,
    order_by=[Attendance.date.desc(), Attendance.employee_name],
    filter_fields=("employee_id", "date", "status"),
    before_create=attendance_before_create,
)


@attendance_router.post("/scan", response_model=ScanResponse)
async def scan_badge(
    scan: ScanRequest,
    db: AsyncSession = Depends(get_db),
    ctx: TenantContext = Depends(require_module(Module.HR)),
):
    """
    Record an employee's badge scan.

    The first scan of the day is the check-in, later scans the check-out.
    """
    employee = await get_record(db, Employee, ctx.require_organization(), scan.employee_id, "Employee")
    result = await record_scan(db, employee, dt.datetime.now())
    await db.commit()
    return result


router = APIRouter()
router.include_router(employees_router)
router.include_router(attendance_router)
