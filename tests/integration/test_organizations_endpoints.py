"""
Integration tests for organization management.
"""

from datetime import date, timedelta
from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from orgsuite.models import ActivityLog, Organization

pytestmark = pytest.mark.integration


def _new_organization(**overrides) -> dict:
    payload = {
        "name": "Smile Dental Clinic",
        "tax_id": "900555666-1",
        "plan_type": "basic",
        "subscription_ends": (date.today() + timedelta(days=30)).isoformat(),
        "modules": {"odontology": True, "finance": True},
        "theme_colors": {"primary": "#0044aa", "background": "#ffffff", "accent": "#ffaa00"},
    }
    payload.update(overrides)
    return payload


class TestCreateOrganization:
    @pytest.mark.asyncio
    async def test_super_admin_creates_organization(
        self, client: AsyncClient, test_db, super_admin_headers: dict
    ):
        response = await client.post(
            "/api/v1/organizations", headers=super_admin_headers, json=_new_organization()
        )

        assert response.status_code == 201
        data = response.json()
        assert data["is_active"] is True
        assert data["contract_status"] == "pending"
        assert data["modules"]["odontology"] is True
        assert data["modules"]["hr"] is False
        assert data["theme_colors"]["accent"] == "#ffaa00"

        result = await test_db.execute(
            select(ActivityLog).where(ActivityLog.resource == "organizations")
        )
        assert result.scalar_one().action == "CREATE"

    @pytest.mark.asyncio
    async def test_unknown_module_is_rejected(self, client: AsyncClient, super_admin_headers: dict):
        response = await client.post(
            "/api/v1/organizations",
            headers=super_admin_headers,
            json=_new_organization(modules={"teleportation": True}),
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_admin_cannot_create(self, client: AsyncClient, admin_headers: dict):
        response = await client.post(
            "/api/v1/organizations", headers=admin_headers, json=_new_organization()
        )

        assert response.status_code == 403


class TestReadOrganizations:
    @pytest.mark.asyncio
    async def test_admin_lists_only_own_organization(
        self, client: AsyncClient, admin_headers: dict, test_organization, other_organization
    ):
        response = await client.get("/api/v1/organizations", headers=admin_headers)

        assert response.status_code == 200
        assert [org["id"] for org in response.json()] == [str(test_organization.id)]

    @pytest.mark.asyncio
    async def test_super_admin_lists_all(
        self, client: AsyncClient, super_admin_headers: dict, test_organization, other_organization
    ):
        response = await client.get("/api/v1/organizations", headers=super_admin_headers)

        assert response.status_code == 200
        assert {org["id"] for org in response.json()} >= {
            str(test_organization.id),
            str(other_organization.id),
        }

    @pytest.mark.asyncio
    async def test_get_foreign_organization(
        self, client: AsyncClient, admin_headers: dict, other_organization
    ):
        response = await client.get(
            f"/api/v1/organizations/{other_organization.id}", headers=admin_headers
        )

        assert response.status_code == 403
        assert "You do not belong to this organization" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_get_missing_organization(self, client: AsyncClient, super_admin_headers: dict):
        response = await client.get(f"/api/v1/organizations/{uuid4()}", headers=super_admin_headers)

        assert response.status_code == 404


class TestUpdateOrganization:
    @pytest.mark.asyncio
    async def test_admin_updates_branding(
        self, client: AsyncClient, admin_headers: dict, test_organization
    ):
        response = await client.put(
            f"/api/v1/organizations/{test_organization.id}",
            headers=admin_headers,
            json={"landing_page": {"title": "Welcome", "description": "Our school"}},
        )

        assert response.status_code == 200
        assert response.json()["landing_page"] == {"title": "Welcome", "description": "Our school"}

    @pytest.mark.asyncio
    async def test_admin_cannot_change_platform_fields(
        self, client: AsyncClient, admin_headers: dict, test_organization
    ):
        response = await client.put(
            f"/api/v1/organizations/{test_organization.id}",
            headers=admin_headers,
            json={"modules": {"hr": True}, "plan_type": "enterprise"},
        )

        assert response.status_code == 403
        assert response.json()["detail"] == "Only a super admin can change: modules, plan_type"

    @pytest.mark.asyncio
    async def test_super_admin_toggles_modules(
        self, client: AsyncClient, super_admin_headers: dict, test_organization
    ):
        response = await client.put(
            f"/api/v1/organizations/{test_organization.id}",
            headers=super_admin_headers,
            json={"modules": {"hr": True}},
        )

        assert response.status_code == 200
        modules = response.json()["modules"]
        assert modules["hr"] is True
        assert modules["finance"] is False

    @pytest.mark.asyncio
    async def test_admin_cannot_update_other_organization(
        self, client: AsyncClient, admin_headers: dict, other_organization
    ):
        response = await client.put(
            f"/api/v1/organizations/{other_organization.id}",
            headers=admin_headers,
            json={"name": "Hijacked"},
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_null_modules_or_subscription_is_rejected(
        self, client: AsyncClient, super_admin_headers: dict, test_organization
    ):
        for payload, field in (({"modules": None}, "modules"), ({"subscription_ends": None}, "subscription_ends")):
            response = await client.put(
                f"/api/v1/organizations/{test_organization.id}",
                headers=super_admin_headers,
                json=payload,
            )

            assert response.status_code == 422
            assert response.json()["detail"] == f"Fields cannot be null: {field}"

        unchanged = await client.get(
            f"/api/v1/organizations/{test_organization.id}", headers=super_admin_headers
        )
        assert unchanged.json()["modules"]["finance"] is True


class TestDeleteOrganization:
    @pytest.mark.asyncio
    async def test_soft_delete(
        self, client: AsyncClient, test_db, super_admin_headers: dict, other_organization
    ):
        response = await client.delete(
            f"/api/v1/organizations/{other_organization.id}", headers=super_admin_headers
        )

        assert response.status_code == 204
        result = await test_db.execute(
            select(Organization).where(Organization.id == other_organization.id)
        )
        organization = result.scalar_one()
        assert organization.deleted_at is not None
        assert organization.is_active is False

        missing = await client.get(
            f"/api/v1/organizations/{other_organization.id}", headers=super_admin_headers
        )
        assert missing.status_code == 404
