"""
OrgSuite API routes.

Provides REST API endpoints for:
- Authentication (login, signup, token refresh, password change)
- Organization and user management
- Activity feed and organization settings
- Public organization landing pages
- Feature modules: academics, HR, payroll, finance, inventory and sales,
  reports, CRM, communications, odontology
"""

from orgsuite.api.academics import router as academics_router
from orgsuite.api.activity import router as activity_router
from orgsuite.api.auth import router as auth_router
from orgsuite.api.communications import router as communications_router
from orgsuite.api.crm import router as crm_router
from orgsuite.api.finance import router as finance_router
from orgsuite.api.hr import router as hr_router
from orgsuite.api.inventory import router as inventory_router
from orgsuite.api.odontology import router as odontology_router
from orgsuite.api.organizations import router as organizations_router
from orgsuite.api.payroll import router as payroll_router
from orgsuite.api.public import router as public_router
from orgsuite.api.reports import router as reports_router
from orgsuite.api.settings import router as settings_router
from orgsuite.api.users import router as users_router

__all__ = [
    "auth_router",
    "organizations_router",
    "users_router",
    "activity_router",
    "settings_router",
    "public_router",
    "academics_router",
    "hr_router",
    "payroll_router",
    "finance_router",
    "inventory_router",
    "reports_router",
    "crm_router",
    "communications_router",
    "odontology_router",
]
