"""Unit tests for error handling middleware and PII filtering."""

import json
import logging
from unittest.mock import Mock

import pytest
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from txnflow.api.middleware.error_handler import (
    handle_generic_error,
    handle_ingestion_error,
    handle_integrity_error,
    handle_validation_error,
)
from txnflow.api.middleware.logging import JSONLogFormatter, filter_pii
from txnflow.core.errors import ERROR_CATALOG, get_error, get_user_message, is_retryable
from txnflow.core.exceptions import (
    DecodingError,
    IngestionError,
    PersistenceError,
    RuleNotFoundError,
    UploadError,
)


def mock_request(path="/api/v1/users/u/imports/csv", method="POST"):
    request = Mock(spec=Request)
    request.url.path = path
    request.method = method
    return request


class TestExceptions:
    """Test exception classes carry catalog codes and statuses."""

    def test_upload_error(self):
        exc = UploadError("API_002", {"max_bytes": 10})
        assert exc.error_code == "API_002"
        assert exc.http_status == 400
        assert exc.details == {"max_bytes": 10}

    def test_decoding_error(self):
        exc = DecodingError()
        assert exc.error_code == "IMPORT_001"
        assert exc.http_status == 400
        assert exc.details == {}

    def test_persistence_error(self):
        assert PersistenceError().http_status == 503

    def test_rule_not_found(self):
        exc = RuleNotFoundError({"rule_id": "x"})
        assert exc.error_code == "API_003"
        assert exc.http_status == 404
        assert isinstance(exc, IngestionError)


class TestErrorCatalog:
    """Test error catalog lookups."""

    def test_every_entry_has_required_fields(self):
        for code, entry in ERROR_CATALOG.items():
            assert entry["code"] == code
            assert {"message", "user_message", "suggestion", "retry_allowed"} <= entry.keys()

    def test_unknown_code(self):
        assert get_error("NOPE_999")["code"] == "UNKNOWN"

    def test_helpers(self):
        assert get_user_message("API_002") == ERROR_CATALOG["API_002"]["user_message"]
        assert is_retryable("DB_001")
        assert not is_retryable("API_001")


class TestIngestionErrorHandler:
    """Test custom exception handling."""

    @pytest.mark.asyncio
    async def test_handle_ingestion_error(self):
        response = await handle_ingestion_error(mock_request(), UploadError("API_001"))

        assert isinstance(response, JSONResponse)
        assert response.status_code == 400
        content = json.loads(response.body.decode())
        assert content["error_code"] == "API_001"
        assert content["user_message"] == ERROR_CATALOG["API_001"]["user_message"]

    @pytest.mark.asyncio
    async def test_error_includes_all_fields(self):
        response = await handle_ingestion_error(mock_request(), RuleNotFoundError())

        assert response.status_code == 404
        content = json.loads(response.body.decode())
        assert set(content) == {
            "error_code",
            "message",
            "user_message",
            "suggestion",
            "retry_allowed",
        }


class TestValidationErrorHandler:
    """Test validation error handling."""

    @pytest.mark.asyncio
    async def test_handle_validation_error(self):
        exc = RequestValidationError(
            errors=[
                {"loc": ("body", "records", 0, "description"), "msg": "field required", "type": "missing"},
                {"loc": ("body", "records", 0, "amount"), "msg": "invalid decimal", "type": "decimal_parsing"},
            ]
        )

        response = await handle_validation_error(mock_request(), exc)

        assert response.status_code == 400
        content = json.loads(response.body.decode())
        assert content["error_code"] == "VAL_001"
        assert "description" in content["message"]
        assert "amount" in content["message"]


class TestIntegrityErrorHandler:
    """Test database integrity error handling."""

    @pytest.mark.asyncio
    async def test_handle_duplicate_key_error(self):
        exc = IntegrityError("statement", "params", "UNIQUE constraint failed")

        response = await handle_integrity_error(mock_request(), exc)

        assert response.status_code == 409
        assert json.loads(response.body.decode())["error_code"] == "DB_002"

    @pytest.mark.asyncio
    async def test_handle_other_integrity_error(self):
        exc = IntegrityError("statement", "params", "NOT NULL constraint failed")

        response = await handle_integrity_error(mock_request(), exc)

        assert response.status_code == 503
        assert json.loads(response.body.decode())["error_code"] == "DB_001"


class TestGenericErrorHandler:
    """Test generic exception handling."""

    @pytest.mark.asyncio
    async def test_handle_generic_error(self):
        response = await handle_generic_error(mock_request(), Exception("secret detail"))

        assert response.status_code == 500
        content = json.loads(response.body.decode())
        assert content["error_code"] == "SYS_001"
        # Should not expose internal error details
        assert "secret detail" not in response.body.decode()


class TestPIIFiltering:
    """Test PII filtering functionality."""

    def test_filter_card_number(self):
        filtered = filter_pii("Card number 4532015112830366 was used")
        assert "4532015112830366" not in filtered
        assert "[CARD]" in filtered

    def test_filter_card_number_with_dashes(self):
        assert "[CARD]" in filter_pii("card 4532-0151-1283-0366")

    def test_filter_email(self):
        filtered = filter_pii("Contact jane.doe@example.com for details")
        assert "jane.doe@example.com" not in filtered
        assert "[EMAIL]" in filtered

    def test_filter_ssn(self):
        assert filter_pii("SSN 123-45-6789") == "SSN [SSN]"

    def test_filter_phone(self):
        assert "[PHONE]" in filter_pii("Call (415) 555-0132 today")

    def test_filter_account_number(self):
        assert filter_pii("account number 12345678") == "account number [ACCOUNT]"

    def test_amounts_and_dates_untouched(self):
        text = "01/15/2024 STARBUCKS STORE #123 -5.75"
        assert filter_pii(text) == text

    def test_empty(self):
        assert filter_pii("") == ""


class TestJSONLogFormatter:
    """Test structured log output."""

    def test_format_includes_extra_fields(self):
        record = logging.LogRecord(
            name="txnflow.test",
            level=logging.INFO,
            pathname=__file__,
            lineno=1,
            msg="Imported for jane@example.com",
            args=(),
            exc_info=None,
        )
        record.request_id = "abc"
        record.imported = 3

        data = json.loads(JSONLogFormatter().format(record))

        assert data["level"] == "INFO"
        assert data["logger"] == "txnflow.test"
        assert data["request_id"] == "abc"
        assert data["imported"] == 3
        assert "jane@example.com" not in data["message"]
