"""
Roles, feature modules and the role -> module access matrix.

A user holds exactly one role. An organization switches feature modules on
or off; a request to a module succeeds only when the organization has it
enabled AND the user's role grants it.
"""

from enum import Enum


class Role(str, Enum):
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    ACADEMIC = "academic"
    HR = "hr"
    FINANCE = "finance"
    SALES = "sales"
    MARKETING = "marketing"
    SUPPORT = "support"
    STUDENT = "student"
    EMPLOYEE = "employee"
    PENDING = "pending"
    UNASSIGNED = "unassigned"
    CANCELLED = "cancelled"


class Module(str, Enum):
    HR = "hr"
    ACADEMICS = "academics"
    STUDENTS = "students"
    FINANCE = "finance"
    INVENTORY = "inventory"
    SALES = "sales"
    REPORTS = "reports"
    LANDING_PAGE = "landing_page"
    COMMUNICATIONS = "communications"
    CRM = "crm"
    ODONTOLOGY = "odontology"


ALL_MODULES = frozenset(Module)

ROLE_MODULES: dict[Role, frozenset[Module]] = {
    Role.SUPER_ADMIN: ALL_MODULES,
    Role.ADMIN: ALL_MODULES,
    Role.ACADEMIC: frozenset({Module.ACADEMICS, Module.STUDENTS, Module.ODONTOLOGY}),
    Role.HR: frozenset({Module.HR}),
    Role.FINANCE: frozenset({Module.FINANCE, Module.INVENTORY, Module.SALES, Module.REPORTS}),
    Role.SALES: frozenset({Module.SALES, Module.INVENTORY, Module.CRM}),
    Role.MARKETING: frozenset({Module.COMMUNICATIONS, Module.CRM, Module.LANDING_PAGE}),
    Role.SUPPORT: frozenset({Module.CRM}),
    Role.STUDENT: frozenset(),
    Role.EMPLOYEE: frozenset(),
    Role.PENDING: frozenset(),
    Role.UNASSIGNED: frozenset(),
    Role.CANCELLED: frozenset(),
}

# Roles an organization admin may hand out
ASSIGNABLE_ROLES = frozenset(Role) - {Role.SUPER_ADMIN}


def role_grants(role: str, module: Module) -> bool:
    """Check whether a role gives access to a module."""
    try:
        return module in ROLE_MODULES[Role(role)]
    except ValueError:
        return False


def normalize_modules(modules: dict[str, bool] | None) -> dict[str, bool]:
    """
    Return a complete module -> enabled mapping.

    Missing modules are disabled.

    Raises:
        ValueError: If an unknown module name is present
    """
    modules = modules or {}
    unknown = set(modules) - {m.value for m in Module}
    if unknown:
        raise ValueError(f"Unknown modules: {', '.join(sorted(unknown))}")
    return {m.value: bool(modules.get(m.value, False)) for m in Module}
