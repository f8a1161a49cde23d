"""
Unit tests for the role/module access matrix.
"""

import pytest

from orgsuite.permissions import ASSIGNABLE_ROLES, Module, Role, normalize_modules, role_grants

pytestmark = pytest.mark.unit


class TestRoleGrants:
    @pytest.mark.parametrize(
        "role, module",
        [
            ("academic", Module.ACADEMICS),
            ("academic", Module.ODONTOLOGY),
            ("hr", Module.HR),
            ("finance", Module.INVENTORY),
            ("finance", Module.REPORTS),
            ("sales", Module.CRM),
            ("marketing", Module.LANDING_PAGE),
            ("support", Module.CRM),
        ],
    )
    def test_granted(self, role, module):
        assert role_grants(role, module)

    @pytest.mark.parametrize(
        "role, module",
        [
            ("hr", Module.FINANCE),
            ("support", Module.SALES),
            ("student", Module.ACADEMICS),
            ("employee", Module.HR),
            ("pending", Module.CRM),
        ],
    )
    def test_denied(self, role, module):
        assert not role_grants(role, module)

    def test_unknown_role_grants_nothing(self):
        assert not role_grants("janitor", Module.HR)

    def test_super_admin_cannot_be_assigned_by_admins(self):
        assert Role.SUPER_ADMIN not in ASSIGNABLE_ROLES
        assert Role.ADMIN in ASSIGNABLE_ROLES


class TestNormalizeModules:
    def test_missing_modules_are_disabled(self):
        modules = normalize_modules({"hr": True, "crm": True})

        assert set(modules) == {m.value for m in Module}
        assert modules["hr"] is True
        assert modules["finance"] is False

    def test_none_disables_everything(self):
        assert not any(normalize_modules(None).values())

    def test_unknown_module(self):
        with pytest.raises(ValueError, match="Unknown modules: payroll"):
            normalize_modules({"payroll": True})
