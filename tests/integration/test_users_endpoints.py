"""
Integration tests for user management and the approval workflow.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from orgsuite.models import ActivityLog, User

pytestmark = pytest.mark.integration


class TestCreateUser:
    @pytest.mark.asyncio
    async def test_admin_creates_user_in_own_organization(
        self, client: AsyncClient, admin_headers: dict, test_organization
    ):
        response = await client.post(
            "/api/v1/users",
            headers=admin_headers,
            json={
                "email": "cashier@testorg.com",
                "name": "Cash Ier",
                "password": "cashier1",
                "role": "sales",
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["organization_id"] == str(test_organization.id)
        assert data["status"] == "active"
        assert data["force_password_change"] is True
        assert "hashed_password" not in data

        login = await client.post(
            "/api/v1/auth/login", json={"email": "cashier@testorg.com", "password": "cashier1"}
        )
        assert login.status_code == 200
        assert login.json()["force_password_change"] is True

    @pytest.mark.asyncio
    async def test_duplicate_email_across_tenants(
        self, client: AsyncClient, admin_headers: dict, other_admin: User
    ):
        response = await client.post(
            "/api/v1/users",
            headers=admin_headers,
            json={"email": "admin@otherorg.com", "name": "Dupe", "password": "dupe1234", "role": "hr"},
        )

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_admin_cannot_create_in_other_organization(
        self, client: AsyncClient, admin_headers: dict, other_organization
    ):
        response = await client.post(
            "/api/v1/users",
            headers=admin_headers,
            json={
                "email": "spy@otherorg.com",
                "name": "Spy",
                "password": "spy12345",
                "role": "hr",
                "organization_id": str(other_organization.id),
            },
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_cannot_create_super_admin(self, client: AsyncClient, admin_headers: dict):
        response = await client.post(
            "/api/v1/users",
            headers=admin_headers,
            json={"email": "boss@testorg.com", "name": "Boss", "password": "boss1234", "role": "super_admin"},
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_non_admin_cannot_create(self, client: AsyncClient, auth_headers, test_user_hr: User):
        response = await client.post(
            "/api/v1/users",
            headers=auth_headers(test_user_hr),
            json={"email": "x@testorg.com", "name": "Xavier", "password": "xavier12", "role": "hr"},
        )

        assert response.status_code == 403


class TestListAndReadUsers:
    @pytest.mark.asyncio
    async def test_admin_sees_only_own_organization(
        self, client: AsyncClient, admin_headers: dict, test_user_hr: User, other_admin: User
    ):
        response = await client.get("/api/v1/users", headers=admin_headers)

        assert response.status_code == 200
        emails = {user["email"] for user in response.json()}
        assert "hr@testorg.com" in emails
        assert "admin@otherorg.com" not in emails

    @pytest.mark.asyncio
    async def test_approval_queue(
        self, client: AsyncClient, super_admin_headers: dict, test_user_pending: User, test_user_admin: User
    ):
        response = await client.get(
            "/api/v1/users", headers=super_admin_headers, params={"user_status": "pending"}
        )

        assert response.status_code == 200
        assert [user["email"] for user in response.json()] == ["pending@newcomer.com"]

    @pytest.mark.asyncio
    async def test_get_user_of_other_organization(
        self, client: AsyncClient, admin_headers: dict, other_admin: User
    ):
        response = await client.get(f"/api/v1/users/{other_admin.id}", headers=admin_headers)

        assert response.status_code == 403
        assert response.json()["detail"] == "Access denied: User does not belong to your organization"


class TestUpdateUser:
    @pytest.mark.asyncio
    async def test_change_role(self, client: AsyncClient, admin_headers: dict, test_user_hr: User):
        response = await client.put(
            f"/api/v1/users/{test_user_hr.id}", headers=admin_headers, json={"role": "finance"}
        )

        assert response.status_code == 200
        assert response.json()["role"] == "finance"

    @pytest.mark.asyncio
    async def test_unknown_role(self, client: AsyncClient, admin_headers: dict, test_user_hr: User):
        response = await client.put(
            f"/api/v1/users/{test_user_hr.id}", headers=admin_headers, json={"role": "wizard"}
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_null_role_or_name(self, client: AsyncClient, admin_headers: dict, test_user_hr: User):
        response = await client.put(
            f"/api/v1/users/{test_user_hr.id}", headers=admin_headers, json={"role": None, "name": None}
        )

        assert response.status_code == 422
        assert response.json()["detail"] == "Fields cannot be null: name, role"
        assert test_user_hr.role == "hr"

    @pytest.mark.asyncio
    async def test_cannot_update_other_organization_user(
        self, client: AsyncClient, admin_headers: dict, other_admin: User
    ):
        response = await client.put(
            f"/api/v1/users/{other_admin.id}", headers=admin_headers, json={"name": "Renamed"}
        )

        assert response.status_code == 403


class TestApproveUser:
    @pytest.mark.asyncio
    async def test_approve_pending_user(
        self,
        client: AsyncClient,
        test_db,
        super_admin_headers: dict,
        test_user_pending: User,
        test_organization,
    ):
        response = await client.post(
            f"/api/v1/users/{test_user_pending.id}/approve",
            headers=super_admin_headers,
            json={"organization_id": str(test_organization.id), "role": "student"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "active"
        assert data["role"] == "student"
        assert data["organization_id"] == str(test_organization.id)

        result = await test_db.execute(select(ActivityLog).where(ActivityLog.action == "APPROVE"))
        entry = result.scalar_one()
        assert entry.message == "Root Operator approved Pat Pending for Test Organization."

        login = await client.post(
            "/api/v1/auth/login", json={"email": "pending@newcomer.com", "password": "pending123"}
        )
        assert login.status_code == 200

    @pytest.mark.asyncio
    async def test_approve_active_user(
        self, client: AsyncClient, super_admin_headers: dict, test_user_hr: User, test_organization
    ):
        response = await client.post(
            f"/api/v1/users/{test_user_hr.id}/approve",
            headers=super_admin_headers,
            json={"organization_id": str(test_organization.id), "role": "hr"},
        )

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_approve_with_pending_role(
        self, client: AsyncClient, super_admin_headers: dict, test_user_pending: User, test_organization
    ):
        response = await client.post(
            f"/api/v1/users/{test_user_pending.id}/approve",
            headers=super_admin_headers,
            json={"organization_id": str(test_organization.id), "role": "pending"},
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_only_super_admin_approves(
        self, client: AsyncClient, admin_headers: dict, test_user_pending: User, test_organization
    ):
        response = await client.post(
            f"/api/v1/users/{test_user_pending.id}/approve",
            headers=admin_headers,
            json={"organization_id": str(test_organization.id), "role": "student"},
        )

        assert response.status_code == 403


class TestDeleteUser:
    @pytest.mark.asyncio
    async def test_delete_keeps_identity_in_activity_log(
        self, client: AsyncClient, test_db, admin_headers: dict, test_user_student: User
    ):
        response = await client.delete(f"/api/v1/users/{test_user_student.id}", headers=admin_headers)

        assert response.status_code == 204
        result = await test_db.execute(select(ActivityLog).where(ActivityLog.action == "DELETE"))
        entry = result.scalar_one()
        assert entry.changes["email"] == "student@testorg.com"
        assert entry.changes["role"] == "student"

        missing = await client.get(f"/api/v1/users/{test_user_student.id}", headers=admin_headers)
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_cannot_delete_self(self, client: AsyncClient, admin_headers: dict, test_user_admin: User):
        response = await client.delete(f"/api/v1/users/{test_user_admin.id}", headers=admin_headers)

        assert response.status_code == 409
