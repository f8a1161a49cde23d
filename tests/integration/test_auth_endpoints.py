"""
Integration tests for authentication endpoints.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from orgsuite.models import ActivityLog, User

pytestmark = pytest.mark.integration


class TestLoginEndpoint:
    """Test POST /api/v1/auth/login endpoint."""

    @pytest.mark.asyncio
    async def test_login_success(self, client: AsyncClient, test_db, test_user_admin: User):
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "admin@testorg.com", "password": "admin123"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["access_token"]
        assert data["refresh_token"]
        assert data["token_type"] == "bearer"
        assert data["expires_in"] == 1800
        assert data["force_password_change"] is False

        result = await test_db.execute(select(ActivityLog).where(ActivityLog.action == "LOGIN"))
        entry = result.scalar_one()
        assert entry.user_id == test_user_admin.id
        assert test_user_admin.last_login_at is not None

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, client: AsyncClient, test_user_admin: User):
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "admin@testorg.com", "password": "wrongpassword"},
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Incorrect email or password"

    @pytest.mark.asyncio
    async def test_login_unknown_email_gives_same_error(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "nobody@testorg.com", "password": "whatever1"},
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Incorrect email or password"

    @pytest.mark.asyncio
    async def test_login_pending_user(self, client: AsyncClient, test_user_pending: User):
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "pending@newcomer.com", "password": "pending123"},
        )

        assert response.status_code == 403
        assert response.json()["detail"] == "Account is pending approval"

    @pytest.mark.asyncio
    async def test_login_inactive_user(self, client: AsyncClient, test_user_inactive: User):
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "inactive@testorg.com", "password": "inactive123"},
        )

        assert response.status_code == 403
        assert response.json()["detail"] == "Account is disabled"


class TestRefreshEndpoint:
    """Test POST /api/v1/auth/refresh endpoint."""

    @pytest.mark.asyncio
    async def test_refresh_success(self, client: AsyncClient, admin_refresh_token: str):
        response = await client.post(
            "/api/v1/auth/refresh", json={"refresh_token": admin_refresh_token}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["access_token"]
        assert data["refresh_token"]

        me = await client.get(
            "/api/v1/auth/me", headers={"Authorization": f"Bearer {data['access_token']}"}
        )
        assert me.status_code == 200
        assert me.json()["email"] == "admin@testorg.com"

    @pytest.mark.asyncio
    async def test_refresh_rejects_access_token(self, client: AsyncClient, admin_headers: dict):
        access_token = admin_headers["Authorization"].split(" ", 1)[1]

        response = await client.post("/api/v1/auth/refresh", json={"refresh_token": access_token})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid refresh token"

    @pytest.mark.asyncio
    async def test_refresh_garbage(self, client: AsyncClient):
        response = await client.post("/api/v1/auth/refresh", json={"refresh_token": "not-a-token"})

        assert response.status_code == 401


class TestMeEndpoint:
    """Test GET /api/v1/auth/me endpoint."""

    @pytest.mark.asyncio
    async def test_profile_lists_accessible_modules(
        self, client: AsyncClient, auth_headers, test_user_hr: User, test_organization
    ):
        response = await client.get("/api/v1/auth/me", headers=auth_headers(test_user_hr))

        assert response.status_code == 200
        data = response.json()
        assert data["role"] == "hr"
        assert data["organization_id"] == str(test_organization.id)
        assert data["organization_name"] == "Test Organization"
        assert data["modules"]["hr"] is True
        assert data["modules"]["finance"] is False
        assert "hashed_password" not in data

    @pytest.mark.asyncio
    async def test_super_admin_sees_every_module(self, client: AsyncClient, super_admin_headers: dict):
        response = await client.get("/api/v1/auth/me", headers=super_admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["organization_id"] is None
        assert all(data["modules"].values())

    @pytest.mark.asyncio
    async def test_me_without_token(self, client: AsyncClient):
        response = await client.get("/api/v1/auth/me")

        assert response.status_code in (401, 403)

    @pytest.mark.asyncio
    async def test_me_inactive_user(self, client: AsyncClient, auth_headers, test_user_inactive: User):
        response = await client.get("/api/v1/auth/me", headers=auth_headers(test_user_inactive))

        assert response.status_code == 403


class TestSignupEndpoint:
    """Test POST /api/v1/auth/signup endpoint."""

    @pytest.mark.asyncio
    async def test_signup_creates_pending_account(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/auth/signup",
            json={"email": "newbie@school.com", "name": "New Comer", "password": "newbie123"},
        )

        assert response.status_code == 201

        login = await client.post(
            "/api/v1/auth/login", json={"email": "newbie@school.com", "password": "newbie123"}
        )
        assert login.status_code == 403
        assert login.json()["detail"] == "Account is pending approval"

    @pytest.mark.asyncio
    async def test_signup_duplicate_email(self, client: AsyncClient, test_user_admin: User):
        response = await client.post(
            "/api/v1/auth/signup",
            json={"email": "admin@testorg.com", "name": "Copy Cat", "password": "copycat1"},
        )

        assert response.status_code == 409
        assert "already exists" in response.json()["detail"]


class TestChangePasswordEndpoint:
    """Test POST /api/v1/auth/change-password endpoint."""

    @pytest.mark.asyncio
    async def test_change_password(self, client: AsyncClient, admin_headers: dict, test_user_admin: User):
        test_user_admin.force_password_change = True

        response = await client.post(
            "/api/v1/auth/change-password",
            headers=admin_headers,
            json={"current_password": "admin123", "new_password": "brandnew456"},
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Password updated successfully"
        assert test_user_admin.force_password_change is False

        old = await client.post(
            "/api/v1/auth/login", json={"email": "admin@testorg.com", "password": "admin123"}
        )
        new = await client.post(
            "/api/v1/auth/login", json={"email": "admin@testorg.com", "password": "brandnew456"}
        )
        assert old.status_code == 401
        assert new.status_code == 200

    @pytest.mark.asyncio
    async def test_wrong_current_password(self, client: AsyncClient, admin_headers: dict):
        response = await client.post(
            "/api/v1/auth/change-password",
            headers=admin_headers,
            json={"current_password": "nottheone", "new_password": "brandnew456"},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Current password is incorrect"


class TestLogoutEndpoint:
    @pytest.mark.asyncio
    async def test_logout(self, client: AsyncClient, admin_headers: dict):
        response = await client.post("/api/v1/auth/logout", headers=admin_headers)

        assert response.status_code == 200
