"""
Database models for the multi-tenant OrgSuite backend.

- Organizations (tenants) and their settings
- Users and the activity log
- One module per feature area, every record scoped by organization_id
"""

from orgsuite.models.organization import Organization, OrganizationSettings
from orgsuite.models.user import User
from orgsuite.models.activity import ActivityLog
from orgsuite.models.academics import (
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
from orgsuite.models.hr import Attendance, Employee, Payroll
from orgsuite.models.finance import Account, Invoice, JournalEntry
from orgsuite.models.inventory import Product, ProductCategory, Sale, Warehouse
from orgsuite.models.crm import Customer, Interaction, Opportunity
from orgsuite.models.communications import Campaign, Template
from orgsuite.models.odontology import Patient

__all__ = [
    "Organization",
    "OrganizationSettings",
    "User",
    "ActivityLog",
    "AcademicAttendance",
    "AcademicPeriod",
    "Grade",
    "GradingActivity",
    "LessonPlan",
    "Schedule",
    "Student",
    "Subject",
    "VideoRecording",
    "Attendance",
    "Employee",
    "Payroll",
    "Account",
    "Invoice",
    "JournalEntry",
    "Product",
    "ProductCategory",
    "Sale",
    "Warehouse",
    "Customer",
    "Interaction",
    "Opportunity",
    "Campaign",
    "Template",
    "Patient",
]
