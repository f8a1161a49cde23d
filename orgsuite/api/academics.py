"""
Academics API routes.

Provides CRUD for students, subjects, grades, schedules, academic periods,
grading activities, class attendance, lesson plans and class recordings,
plus period activation.
"""

import datetime as dt
from typing import Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr, Field, model_validator
from sqlalchemy.ext.asyncio import AsyncSession

from orgsuite.api.crud import TenantRecordResponse, build_crud_router, get_tenant_record
from orgsuite.database import get_db
from orgsuite.exceptions import BusinessRuleError
from orgsuite.middleware.auth import TenantContext, require_module
from orgsuite.models import (
    AcademicAttendance,
    AcademicPeriod,
    Grade,
    GradingActivity,
    LessonPlan,
    Schedule,
    Student,
    Subject,
    VideoRecording,
)
from orgsuite.permissions import Module
from orgsuite.services.academics import activate_period, ensure_grading_weight
from orgsuite.services.activity import log_activity
from orgsuite.services.records import get_org_user, get_record

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"
DayOfWeek = Literal["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
Modality = Literal["in_person", "virtual", "hybrid"]


# Students
class StudentCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    email: Optional[EmailStr] = None
    grade: str = Field(..., min_length=1, max_length=50)
    status: Literal["active", "inactive"] = "active"
    avatar_url: Optional[str] = None


class StudentUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    email: Optional[EmailStr] = None
    grade: Optional[str] = Field(None, min_length=1, max_length=50)
    status: Optional[Literal["active", "inactive"]] = None
    avatar_url: Optional[str] = None


class StudentResponse(TenantRecordResponse):
    name: str
    email: Optional[str]
    grade: str
    status: str
    avatar_url: Optional[str]


# Subjects
class SubjectCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    grade: str = Field(..., min_length=1, max_length=50)
    teacher_id: UUID


class SubjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    grade: Optional[str] = Field(None, min_length=1, max_length=50)
    teacher_id: Optional[UUID] = None


class SubjectResponse(TenantRecordResponse):
    name: str
    grade: str
    teacher_id: UUID
    teacher_name: str


async def _with_teacher(db: AsyncSession, organization_id: UUID, data: dict) -> dict:
    if data.get("teacher_id") is not None:
        teacher = await get_org_user(db, organization_id, data["teacher_id"])
        data["teacher_name"] = teacher.name
    return data


async def subject_before_create(db, ctx, data):
    return await _with_teacher(db, ctx.require_organization(), data)


async def subject_before_update(db, ctx, record, data):
    return await _with_teacher(db, record.organization_id, data)


# Grades
class GradeCreate(BaseModel):
    student_id: UUID
    subject_id: UUID
    value: float = Field(..., ge=0, le=5)
    notes: Optional[str] = None
    date: dt.date


class GradeUpdate(BaseModel):
    value: Optional[float] = Field(None, ge=0, le=5)
    notes: Optional[str] = None
    date: Optional[dt.date] = None


class GradeResponse(TenantRecordResponse):
    student_id: UUID
    student_name: str
    subject_id: UUID
    subject_name: str
    value: float
    notes: Optional[str]
    date: dt.date


async def _with_student_and_subject(db: AsyncSession, organization_id: UUID, data: dict) -> dict:
    student = await get_record(db, Student, organization_id, data["student_id"], "Student")
    subject = await get_record(db, Subject, organization_id, data["subject_id"], "Subject")
    data["student_name"] = student.name
    data["subject_name"] = subject.name
    return data


async def grade_before_create(db, ctx, data):
    return await _with_student_and_subject(db, ctx.require_organization(), data)


# Schedules
class ScheduleCreate(BaseModel):
    subject_id: UUID
    day_of_week: DayOfWeek
    start_time: str = Field(..., pattern=TIME_PATTERN)
    end_time: str = Field(..., pattern=TIME_PATTERN)
    classroom: str = Field(..., min_length=2, max_length=100)
    modality: Modality

    @model_validator(mode="after")
    def check_times(self):
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self


class ScheduleUpdate(BaseModel):
    subject_id: Optional[UUID] = None
    day_of_week: Optional[DayOfWeek] = None
    start_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    end_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    classroom: Optional[str] = Field(None, min_length=2, max_length=100)
    modality: Optional[Modality] = None


class ScheduleResponse(TenantRecordResponse):
    subject_id: UUID
    subject_name: str
    teacher_id: UUID
    teacher_name: str
    day_of_week: str
    start_time: str
    end_time: str
    classroom: str
    modality: str


async def _with_subject(db: AsyncSession, organization_id: UUID, data: dict) -> dict:
    if data.get("subject_id") is not None:
        subject = await get_record(db, Subject, organization_id, data["subject_id"], "Subject")
        data["subject_name"] = subject.name
        data["teacher_id"] = subject.teacher_id
        data["teacher_name"] = subject.teacher_name
    return data


async def schedule_before_create(db, ctx, data):
    return await _with_subject(db, ctx.require_organization(), data)


async def schedule_before_update(db, ctx, record, data):
    start = data.get("start_time", record.start_time)
    end = data.get("end_time", record.end_time)
    if start >= end:
        raise BusinessRuleError("start_time must be before end_time")
    return await _with_subject(db, record.organization_id, data)


# Academic periods
class AcademicPeriodCreate(BaseModel):
    name: str = Field(..., min_length=3, max_length=100)
    start_date: dt.date
    end_date: dt.date

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date")
        return self


class AcademicPeriodUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=3, max_length=100)
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None


class AcademicPeriodResponse(TenantRecordResponse):
    name: str
    start_date: dt.date
    end_date: dt.date
    is_active: bool


async def period_before_update(db, ctx, record, data):
    if data.get("start_date", record.start_date) > data.get("end_date", record.end_date):
        raise BusinessRuleError("start_date must be on or before end_date")
    return data


# Grading activities
class GradingActivityCreate(BaseModel):
    name: str = Field(..., min_length=3, max_length=100)
    percentage: float = Field(..., ge=0, le=100)


class GradingActivityUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=3, max_length=100)
    percentage: Optional[float] = Field(None, ge=0, le=100)


class GradingActivityResponse(TenantRecordResponse):
    name: str
    percentage: float


async def grading_before_create(db, ctx, data):
    await ensure_grading_weight(db, ctx.require_organization(), data["percentage"])
    return data


async def grading_before_update(db, ctx, record, data):
    if data.get("percentage") is not None:
        await ensure_grading_weight(db, record.organization_id, data["percentage"], exclude_id=record.id)
    return data


# Class attendance
class AcademicAttendanceCreate(BaseModel):
    student_id: UUID
    subject_id: UUID
    date: dt.date
    check_in_time: str = Field(..., pattern=TIME_PATTERN)
    status: Literal["present", "absent", "late"]


class AcademicAttendanceUpdate(BaseModel):
    check_in_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    status: Optional[Literal["present", "absent", "late"]] = None


class AcademicAttendanceResponse(TenantRecordResponse):
    student_id: UUID
    student_name: str
    subject_id: UUID
    date: dt.date
    check_in_time: str
    status: str


async def attendance_before_create(db, ctx, data):
    data = await _with_student_and_subject(db, ctx.require_organization(), data)
    data.pop("subject_name")
    return data


# Lesson plans
class LessonPlanCreate(BaseModel):
    title: str = Field(..., min_length=3, max_length=255)
    subject: str = Field(..., min_length=2, max_length=255)
    teacher: str = Field(..., min_length=2, max_length=255)
    date: dt.date
    objectives: list[str] = Field(default_factory=list)


class LessonPlanUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=3, max_length=255)
    subject: Optional[str] = Field(None, min_length=2, max_length=255)
    teacher: Optional[str] = Field(None, min_length=2, max_length=255)
    date: Optional[dt.date] = None
    objectives: Optional[list[str]] = None


class LessonPlanResponse(TenantRecordResponse):
    title: str
    subject: str
    teacher: str
    date: dt.date
    objectives: list[str]


# Class recordings
class VideoRecordingCreate(BaseModel):
    title: str = Field(..., min_length=3, max_length=255)
    subject: str = Field(..., min_length=2, max_length=255)
    date: dt.date
    url: str = Field(..., min_length=5, max_length=1000)
    summary: Optional[str] = None


class VideoRecordingUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=3, max_length=255)
    summary: Optional[str] = None


class VideoRecordingResponse(TenantRecordResponse):
    title: str
    subject: str
    date: dt.date
    url: str
    summary: Optional[str]


students_router = build_crud_router(
    model=Student,
    module=Module.STUDENTS,
    resource="students",
    label="Student",
    prefix="/api/v1/students",
    tags=["students"],
    create_schema=StudentCreate,
    update_schema=StudentUpdate,
    response_schema=StudentResponse,
    order_by=[Student.name],
    filter_fields=("grade", "status"),
)

subjects_router = build_crud_router(
    model=Subject,
    module=Module.ACADEMICS,
    resource="subjects",
    label="Subject",
    prefix="/api/v1/subjects",
    tags=["academics"],
    create_schema=SubjectCreate,
    update_schema=SubjectUpdate,
    response_schema=SubjectResponse,
    order_by=[Subject.name],
    filter_fields=("grade", "teacher_id"),
    before_create=subject_before_create,
    before_update=subject_before_update,
)

grades_router = build_crud_router(
    model=Grade,
    module=Module.ACADEMICS,
    resource="grades",
    label="Grade",
    prefix="/api/v1/grades",
    tags=["academics"],
    create_schema=GradeCreate,
    update_schema=GradeUpdate,
    response_schema=GradeResponse,
    order_by=[Grade.date.desc()],
    filter_fields=("student_id", "subject_id"),
    before_create=grade_before_create,
)

schedules_router = build_crud_router(
    model=Schedule,
    module=Module.ACADEMICS,
    resource="schedules",
    label="Schedule",
    prefix="/api/v1/schedules",
    tags=["academics"],
    create_schema=ScheduleCreate,
    update_schema=ScheduleUpdate,
    response_schema=ScheduleResponse,
    order_by=[Schedule.day_of_week, Schedule.start_time],
    filter_fields=("day_of_week", "subject_id", "teacher_id"),
    before_create=schedule_before_create,
    before_update=schedule_before_update,
)

periods_router = build_crud_router(
    model=AcademicPeriod,
    module=Module.ACADEMICS,
    resource="academic_periods",
    label="Academic period",
    prefix="/api/v1/academic-periods",
    tags=["academics"],
    create_schema=AcademicPeriodCreate,
    update_schema=AcademicPeriodUpdate,
    response_schema=AcademicPeriodResponse,
    order_by=[AcademicPeriod.start_date],
    filter_fields=("is_active",),
    before_update=period_before_update,
)

grading_activities_router = build_crud_router(
    model=GradingActivity,
    module=Module.ACADEMICS,
    resource="grading_activities",
    label="Grading activity",
    prefix="/api/v1/grading-activities",
    tags=["academics"],
    create_schema=GradingActivityCreate,
    update_schema=GradingActivityUpdate,
    response_schema=GradingActivityResponse,
    order_by=[GradingActivity.name],
    before_create=grading_before_create,
    before_update=grading_before_update,
)

academic_attendance_router = build_crud_router(
    model=AcademicAttendance,
    module=Module.ACADEMICS,
    resource="academic_attendance",
    label="Attendance record",
    prefix="/api/v1/academic-attendance",
    tags=["academics"],
    create_schema=AcademicAttendanceCreate,
    update_schema=AcademicAttendanceUpdate,
    response_schema=AcademicAttendanceResponse,
    order_by=[AcademicAttendance.date.desc()],
    filter_fields=("student_id", "subject_id", "date", "status"),
    before_create=attendance_before_create,
)

lesson_plans_router = build_crud_router(
    model=LessonPlan,
    module=Module.ACADEMICS,
    resource="lesson_plans",
    label="Lesson plan",
    prefix="/api/v1/lesson-plans",
    tags=["academics"],
    create_schema=LessonPlanCreate,
    update_schema=LessonPlanUpdate,
    response_schema=LessonPlanResponse,
    order_by=[LessonPlan.date.desc()],
    filter_fields=("subject", "teacher"),
)

video_recordings_router = build_crud_router(
    model=VideoRecording,
    module=Module.ACADEMICS,
    resource="video_recordings",
    label="Recording",
    prefix="/api/v1/video-recordings",
    tags=["academics"],
    create_schema=VideoRecordingCreate,
    update_schema=VideoRecordingUpdate,
    response_schema=VideoRecordingResponse,
    order_by=[VideoRecording.date.desc()],
    filter_fields=("subject",),
)


@periods_router.post("/{record_id}/activate", response_model=AcademicPeriodResponse)
async def activate_academic_period(
    record_id: UUID,
    db: AsyncSession = Depends(get_db),
    ctx: TenantContext = Depends(require_module(Module.ACADEMICS)),
):
    """Make this period the only active one of the organization."""
    period = await get_tenant_record(db, ctx, AcademicPeriod, record_id, "Academic period")
    await activate_period(db, period)
    log_activity(
        db, ctx.user, "UPDATE", "academic_periods", period.id,
        changes={"is_active": True}, organization_id=period.organization_id,
    )
    await db.commit()
    await db.refresh(period)
    return period


router = APIRouter()
for _router in (
    students_router,
    subjects_router,
    grades_router,
    schedules_router,
    periods_router,
    grading_activities_router,
    academic_attendance_router,
    lesson_plans_router,
    video_recordings_router,
):
    router.include_router(_router)
