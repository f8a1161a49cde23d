"""
Integration tests for patients, odontograms and follow-ups.
"""

import pytest
from httpx import AsyncClient

from orgsuite.models import User

pytestmark = pytest.mark.integration

PATIENT = {
    "name": "Carlos Perez",
    "identification_number": "1012345678",
    "age": 34,
    "gender": "male",
}


@pytest.fixture
def dentist_headers(auth_headers, test_user_academic: User) -> dict:
    return auth_headers(test_user_academic)


async def _patient(client: AsyncClient, headers: dict) -> dict:
    response = await client.post("/api/v1/odontology/patients", headers=headers, json=PATIENT)
    assert response.status_code == 201, response.text
    return response.json()


class TestPatients:
    @pytest.mark.asyncio
    async def test_new_patient_has_empty_history(self, client: AsyncClient, dentist_headers: dict):
        patient = await _patient(client, dentist_headers)

        assert patient["odontogram_state"] == {}
        assert patient["follow_ups"] == []

    @pytest.mark.asyncio
    async def test_identification_number_is_unique(self, client: AsyncClient, dentist_headers: dict):
        await _patient(client, dentist_headers)

        response = await client.post("/api/v1/odontology/patients", headers=dentist_headers, json=PATIENT)

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_module_disabled_for_organization(
        self, client: AsyncClient, test_db, dentist_headers: dict, test_organization
    ):
        test_organization.modules = {**test_organization.modules, "odontology": False}
        await test_db.commit()

        response = await client.get("/api/v1/odontology/patients", headers=dentist_headers)

        assert response.status_code == 403
        assert response.json()["detail"] == "Module 'odontology' is not enabled for this organization"


class TestOdontogram:
    @pytest.mark.asyncio
    async def test_state_round_trips(self, client: AsyncClient, dentist_headers: dict):
        patient = await _patient(client, dentist_headers)
        state = {
            "16": {"status": "present", "conditions": ["caries"]},
            "21": {"status": "crown", "conditions": []},
            "48": {"status": "extraction", "conditions": [], "notes": "impacted"},
        }

        saved = await client.put(
            f"/api/v1/odontology/patients/{patient['id']}/odontogram",
            headers=dentist_headers,
            json={"odontogram_state": state},
        )
        loaded = await client.get(
            f"/api/v1/odontology/patients/{patient['id']}/odontogram", headers=dentist_headers
        )

        assert saved.status_code == 200
        assert loaded.json()["odontogram_state"] == state

        summary = await client.get(
            f"/api/v1/odontology/patients/{patient['id']}/odontogram/summary", headers=dentist_headers
        )
        assert [f["tooth"] for f in summary.json()] == ["16", "21", "48"]
        assert summary.json()[2]["status_name"] == "For extraction"

    @pytest.mark.asyncio
    async def test_invalid_tooth_is_rejected(self, client: AsyncClient, dentist_headers: dict):
        patient = await _patient(client, dentist_headers)

        response = await client.put(
            f"/api/v1/odontology/patients/{patient['id']}/odontogram",
            headers=dentist_headers,
            json={"odontogram_state": {"99": {"status": "present", "conditions": []}}},
        )

        assert response.status_code == 422

        loaded = await client.get(
            f"/api/v1/odontology/patients/{patient['id']}/odontogram", headers=dentist_headers
        )
        assert loaded.json()["odontogram_state"] == {}


class TestFollowUps:
    @pytest.mark.asyncio
    async def test_follow_ups_accumulate(self, client: AsyncClient, dentist_headers: dict):
        patient = await _patient(client, dentist_headers)
        url = f"/api/v1/odontology/patients/{patient['id']}/follow-ups"

        await client.post(url, headers=dentist_headers, json={"date": "2024-03-01", "notes": "Initial cleaning done."})
        response = await client.post(
            url, headers=dentist_headers, json={"date": "2024-09-01", "notes": "Six month control, no caries."}
        )

        assert response.status_code == 201
        follow_ups = response.json()["follow_ups"]
        assert [f["date"] for f in follow_ups] == ["2024-03-01", "2024-09-01"]

    @pytest.mark.asyncio
    async def test_short_note(self, client: AsyncClient, dentist_headers: dict):
        patient = await _patient(client, dentist_headers)

        response = await client.post(
            f"/api/v1/odontology/patients/{patient['id']}/follow-ups",
            headers=dentist_headers,
            json={"date": "2024-03-01", "notes": "ok"},
        )

        assert response.status_code == 422
