from orgsuite.middleware.auth import (
    OrganizationAccessChecker,
    TenantContext,
    get_current_active_user,
    get_current_user,
    require_admin,
    require_module,
    require_org_access,
    require_roles,
    require_super_admin,
)

__all__ = [
    "OrganizationAccessChecker",
    "TenantContext",
    "get_current_active_user",
    "get_current_user",
    "require_admin",
    "require_module",
    "require_org_access",
    "require_roles",
    "require_super_admin",
]
