"""Integration tests for the import endpoints."""
from decimal import Decimal
from uuid import uuid4

import pytest
from httpx import AsyncClient

from txnflow.config import settings

CHECKING_CSV = (
    "Details,Posting Date,Description,Amount,Type,Balance,Check or Slip #\n"
    "DEBIT,01/15/2024,STARBUCKS STORE #123,-5.75,DEBIT_CARD,994.25,\n"
    "DEBIT,01/16/2024,ZZQX 99812,-12.00,DEBIT_CARD,982.25,\n"
)


def csv_url(user_id):
    return f"/api/v1/users/{user_id}/imports/csv"


def records_url(user_id):
    return f"/api/v1/users/{user_id}/imports/records"


def record(external_id, description="STARBUCKS", amount="-4.50"):
    return {
        "external_id": external_id,
        "description": description,
        "amount": amount,
        "timestamp": "2024-01-15T14:30:00Z",
    }


class TestCSVImport:
    """Test POST /imports/csv."""

    @pytest.mark.asyncio
    async def test_import_checking_export(self, client: AsyncClient):
        response = await client.post(
            csv_url(uuid4()),
            content=CHECKING_CSV.encode("utf-8"),
            headers={"Content-Type": "text/csv"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["format_code"] == "checking"
        assert data["imported"] == 2

        starbucks = data["transactions"][0]
        assert starbucks["category_name"] == "Food & Drink"
        assert starbucks["category_confidence"] == 0.75
        assert Decimal(starbucks["raw_amount"]) == Decimal("-5.75")
        assert Decimal(starbucks["amount"]) == Decimal("5.75")
        assert starbucks["txn_date"] == "2024-01-15"
        assert starbucks["id"] is not None

        assert data["transactions"][1]["needs_review"] is True
        assert data["categorization"]["needs_review"] == 1

    @pytest.mark.asyncio
    async def test_import_generic_layout(self, client: AsyncClient):
        response = await client.post(
            csv_url(uuid4()),
            content="Date,Description,Amount\n01/15/2024,STARBUCKS STORE #123,-5.75",
            headers={"Content-Type": "text/csv"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["format_code"] == "generic"
        txn = data["transactions"][0]
        assert txn["category_name"] == "Food & Drink"
        assert txn["category_source"] == "merchant_table"
        assert txn["category_confidence"] == 0.75
        assert Decimal(txn["raw_amount"]) == Decimal("-5.75")
        assert Decimal(txn["amount"]) == Decimal("5.75")

    @pytest.mark.asyncio
    async def test_admin_merchant_overrides_tables(self, client: AsyncClient, db_session):
        from txnflow.models.admin_merchant import AdminMerchant

        db_session.add(
            AdminMerchant(merchant_name="Starbucks", normalized_name="STARBUCKS", category="Shopping")
        )
        await db_session.commit()

        response = await client.post(
            csv_url(uuid4()), content=CHECKING_CSV, headers={"Content-Type": "text/csv"}
        )

        starbucks = response.json()["transactions"][0]
        assert starbucks["category_name"] == "Shopping"
        assert starbucks["category_source"] == "admin_merchant"
        assert starbucks["category_confidence"] == 1.0

    @pytest.mark.asyncio
    async def test_invalid_content_type(self, client: AsyncClient):
        response = await client.post(
            csv_url(uuid4()), content=CHECKING_CSV, headers={"Content-Type": "application/pdf"}
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "API_001"

    @pytest.mark.asyncio
    async def test_file_too_large(self, client: AsyncClient, monkeypatch):
        monkeypatch.setattr(settings, "csv_max_size_mb", 0)

        response = await client.post(
            csv_url(uuid4()), content=CHECKING_CSV, headers={"Content-Type": "text/csv"}
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "API_002"

    @pytest.mark.asyncio
    async def test_empty_body(self, client: AsyncClient):
        response = await client.post(
            csv_url(uuid4()), content=b"  \n", headers={"Content-Type": "text/csv"}
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "API_005"

    @pytest.mark.asyncio
    async def test_binary_file(self, client: AsyncClient):
        response = await client.post(
            csv_url(uuid4()),
            content=b"PK\x03\x04\x00\x00binary",
            headers={"Content-Type": "application/octet-stream"},
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "IMPORT_001"

    @pytest.mark.asyncio
    async def test_utf16_export(self, client: AsyncClient):
        response = await client.post(
            csv_url(uuid4()),
            content=CHECKING_CSV.encode("utf-16"),
            headers={"Content-Type": "text/csv"},
        )

        assert response.status_code == 201
        assert response.json()["format_code"] == "checking"
        assert response.json()["imported"] == 2

    @pytest.mark.asyncio
    async def test_long_description_imported(self, client: AsyncClient):
        description = "ACH DEBIT " + "X" * 990
        response = await client.post(
            csv_url(uuid4()),
            content=f"Date,Description,Amount\n01/15/2024,{description},-5.75\n",
            headers={"Content-Type": "text/csv"},
        )

        assert response.status_code == 201
        assert response.json()["imported"] == 1
        assert response.json()["transactions"][0]["description"] == description

    @pytest.mark.asyncio
    async def test_unknown_layout(self, client: AsyncClient):
        response = await client.post(
            csv_url(uuid4()), content="Foo,Bar\n1,2\n", headers={"Content-Type": "text/csv"}
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "IMPORT_002"


class TestRecordImport:
    """Test POST /imports/records."""

    @pytest.mark.asyncio
    async def test_duplicates_skipped_across_requests(self, client: AsyncClient):
        user_id = uuid4()

        first = await client.post(records_url(user_id), json={"records": [record("a"), record("b")]})
        second = await client.post(records_url(user_id), json={"records": [record("b"), record("c")]})

        assert first.status_code == 201
        assert first.json()["imported"] == 2
        assert second.json()["imported"] == 1
        assert second.json()["duplicates"] == 1

    @pytest.mark.asyncio
    async def test_same_external_id_other_user(self, client: AsyncClient):
        await client.post(records_url(uuid4()), json={"records": [record("a")]})

        response = await client.post(records_url(uuid4()), json={"records": [record("a")]})

        assert response.json()["imported"] == 1

    @pytest.mark.asyncio
    async def test_category_hint(self, client: AsyncClient):
        payload = record("x", description="SQ *BLUE BOTTLE")
        payload["category_hint"] = {"primary": "TRAVEL"}

        response = await client.post(records_url(uuid4()), json={"records": [payload]})

        txn = response.json()["transactions"][0]
        assert txn["category_name"] == "Travel & Vacation"
        assert txn["category_source"] == "external_hint"
        assert txn["source"] == "aggregator"

    @pytest.mark.asyncio
    async def test_no_records(self, client: AsyncClient):
        response = await client.post(records_url(uuid4()), json={"records": []})

        assert response.status_code == 400
        assert response.json()["error_code"] == "API_005"

    @pytest.mark.asyncio
    async def test_invalid_record(self, client: AsyncClient):
        response = await client.post(
            records_url(uuid4()), json={"records": [{"amount": "1", "timestamp": "2024-01-15"}]}
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "VAL_001"
        assert "description" in response.json()["message"]
