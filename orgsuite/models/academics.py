"""
Academic records: students, subjects, grades, schedules and settings.
"""

import datetime as dt
from typing import Optional
from uuid import UUID

from sqlalchemy import JSON, Boolean, Date, Float, String, Text
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from orgsuite.models.base import Base, TenantMixin


class Student(TenantMixin, Base):
    __tablename__ = "students"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    grade: Mapped[str] = mapped_column(String(50), nullable=False)  # school grade / level
    status: Mapped[str] = mapped_column(String(20), default="active")  # active, inactive
    avatar_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)


class Subject(TenantMixin, Base):
    __tablename__ = "subjects"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    grade: Mapped[str] = mapped_column(String(50), nullable=False)
    teacher_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False, index=True)
    teacher_name: Mapped[str] = mapped_column(String(255), nullable=False)


class Grade(TenantMixin, Base):
    """A single mark (0-5 scale) of a student in a subject."""

    __tablename__ = "grades"

    student_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False, index=True)
    student_name: Mapped[str] = mapped_column(String(255), nullable=False)
    subject_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False, index=True)
    subject_name: Mapped[str] = mapped_column(String(255), nullable=False)
    value: Mapped[float] = mapped_column(Float, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)


class Schedule(TenantMixin, Base):
    __tablename__ = "schedules"

    subject_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False, index=True)
    subject_name: Mapped[str] = mapped_column(String(255), nullable=False)
    teacher_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False)
    teacher_name: Mapped[str] = mapped_column(String(255), nullable=False)
    day_of_week: Mapped[str] = mapped_column(String(10), nullable=False)  # monday .. sunday
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)  # HH:MM
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    classroom: Mapped[str] = mapped_column(String(100), nullable=False)
    modality: Mapped[str] = mapped_column(String(20), nullable=False)  # in_person, virtual, hybrid


class AcademicPeriod(TenantMixin, Base):
    __tablename__ = "academic_periods"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    start_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    end_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=False)


class GradingActivity(TenantMixin, Base):
    """Weighted evaluation type (exam, workshop, ...); weights add up to at most 100%."""

    __tablename__ = "grading_activities"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    percentage: Mapped[float] = mapped_column(Float, nullable=False)


class AcademicAttendance(TenantMixin, Base):
    __tablename__ = "academic_attendance"

    student_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False, index=True)
    student_name: Mapped[str] = mapped_column(String(255), nullable=False)
    subject_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False, index=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    check_in_time: Mapped[str] = mapped_column(String(5), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)  # present, absent, late


class LessonPlan(TenantMixin, Base):
    __tablename__ = "lesson_plans"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    teacher: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    objectives: Mapped[list] = mapped_column(JSON, default=list, nullable=False)


class VideoRecording(TenantMixin, Base):
    """Recorded virtual class."""

    __tablename__ = "video_recordings"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    url: Mapped[str] = mapped_column(String(1000), nullable=False)
    summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
