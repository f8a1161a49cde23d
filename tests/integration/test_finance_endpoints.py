"""
Integration tests for the chart of accounts, journal entries and invoices.
"""

import pytest
from httpx import AsyncClient

from orgsuite.models import User

pytestmark = pytest.mark.integration


async def _accounts(client: AsyncClient, headers: dict) -> dict:
    response = await client.get("/api/v1/finance/accounts", headers=headers, params={"limit": 500})
    assert response.status_code == 200
    return {account["code"]: account for account in response.json()}


class TestChartOfAccounts:
    @pytest.mark.asyncio
    async def test_first_listing_seeds_the_chart(
        self, client: AsyncClient, auth_headers, test_user_finance: User
    ):
        headers = auth_headers(test_user_finance)

        accounts = await _accounts(client, headers)
        again = await _accounts(client, headers)

        assert len(accounts) == 35
        assert len(again) == 35
        assert accounts["1"]["is_parent"] is True
        assert accounts["11"]["parent_code"] == "1"
        assert accounts["41"]["type"] == "income"

    @pytest.mark.asyncio
    async def test_filter_parent_accounts(self, client: AsyncClient, auth_headers, test_user_finance: User):
        headers = auth_headers(test_user_finance)
        await _accounts(client, headers)

        response = await client.get(
            "/api/v1/finance/accounts", headers=headers, params={"is_parent": "true"}
        )

        assert [a["code"] for a in response.json()] == ["1", "2", "3", "4", "5", "6"]

    @pytest.mark.asyncio
    async def test_duplicate_code(self, client: AsyncClient, auth_headers, test_user_finance: User):
        headers = auth_headers(test_user_finance)
        await _accounts(client, headers)

        response = await client.post(
            "/api/v1/finance/accounts",
            headers=headers,
            json={"code": "11", "name": "Another cash", "type": "asset"},
        )

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_parent_account_cannot_be_deleted(
        self, client: AsyncClient, auth_headers, test_user_finance: User
    ):
        headers = auth_headers(test_user_finance)
        accounts = await _accounts(client, headers)

        response = await client.delete(f"/api/v1/finance/accounts/{accounts['1']['id']}", headers=headers)

        assert response.status_code == 409


class TestJournalEntries:
    @pytest.mark.asyncio
    async def test_post_balanced_entry(self, client: AsyncClient, auth_headers, test_user_finance: User):
        headers = auth_headers(test_user_finance)
        accounts = await _accounts(client, headers)

        response = await client.post(
            "/api/v1/finance/journal-entries",
            headers=headers,
            json={
                "date": "2024-04-01",
                "description": "Tuition collected",
                "lines": [
                    {"account_id": accounts["11"]["id"], "debit": 300000},
                    {"account_id": accounts["41"]["id"], "credit": 300000},
                ],
            },
        )

        assert response.status_code == 201
        lines = response.json()["lines"]
        assert lines[0]["account_code"] == "11"
        assert lines[1]["account_name"] == "Operating income"

        after = await _accounts(client, headers)
        assert after["11"]["balance"] == 300000
        assert after["41"]["balance"] == 300000

        listed = await client.get("/api/v1/finance/journal-entries", headers=headers)
        assert len(listed.json()) == 1

    @pytest.mark.asyncio
    async def test_unbalanced_entry_is_rejected(
        self, client: AsyncClient, auth_headers, test_user_finance: User
    ):
        headers = auth_headers(test_user_finance)
        accounts = await _accounts(client, headers)

        response = await client.post(
            "/api/v1/finance/journal-entries",
            headers=headers,
            json={
                "date": "2024-04-01",
                "description": "Broken entry",
                "lines": [
                    {"account_id": accounts["11"]["id"], "debit": 100},
                    {"account_id": accounts["41"]["id"], "credit": 90},
                ],
            },
        )

        assert response.status_code == 422
        assert "not balanced" in response.json()["detail"]

        after = await _accounts(client, headers)
        assert after["11"]["balance"] == 0


class TestInvoices:
    @pytest.mark.asyncio
    async def test_invoice_total_is_computed(self, client: AsyncClient, auth_headers, test_user_finance: User):
        headers = auth_headers(test_user_finance)

        response = await client.post(
            "/api/v1/finance/invoices",
            headers=headers,
            json={
                "customer_name": "Acme Corp",
                "date": "2024-04-01",
                "due_date": "2024-04-30",
                "items": [
                    {"description": "Consulting", "quantity": 2, "price": 150000},
                    {"description": "Materials", "quantity": 1, "price": 50000},
                ],
            },
        )

        assert response.status_code == 201
        invoice = response.json()
        assert invoice["total"] == 350000
        assert invoice["status"] == "draft"

        updated = await client.put(
            f"/api/v1/finance/invoices/{invoice['id']}",
            headers=headers,
            json={"items": [{"description": "Consulting", "quantity": 1, "price": 150000}], "status": "sent"},
        )
        assert updated.json()["total"] == 150000
        assert updated.json()["status"] == "sent"

    @pytest.mark.asyncio
    async def test_due_date_before_date(self, client: AsyncClient, auth_headers, test_user_finance: User):
        response = await client.post(
            "/api/v1/finance/invoices",
            headers=auth_headers(test_user_finance),
            json={
                "customer_name": "Acme Corp",
                "date": "2024-04-30",
                "due_date": "2024-04-01",
                "items": [{"description": "Consulting", "quantity": 1, "price": 1}],
            },
        )

        assert response.status_code == 422
