"""
OrgSuite - Multi-tenant institutional management API

Backend for organizations that run several areas from one place:
- Academics (students, subjects, grades, schedules, periods)
- Human resources (employees, attendance, payroll)
- Finance (chart of accounts, journal entries, invoices)
- Inventory and point of sale
- CRM and communications
- Odontology (patients and odontogram)
"""

__version__ = "1.0.0"

from orgsuite.config import OrgSuiteConfig

__all__ = ["OrgSuiteConfig"]
