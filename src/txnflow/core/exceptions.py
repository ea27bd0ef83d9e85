"""Custom exception classes for transaction ingestion.

Each exception carries an error_code that maps to the catalog in errors.py.
Only input that cannot be read at all, and infrastructure failures, surface
as exceptions: malformed rows and rules degrade inside the pipeline instead.
"""

from typing import Any


class IngestionError(Exception):
    """Base exception for all ingestion pipeline errors.

    Attributes:
        error_code: Code from the error catalog (e.g., "IMPORT_001")
        details: Additional context about the error (for logging)
        http_status: HTTP status code to return (default: 500)
    """

    def __init__(
        self,
        error_code: str,
        details: dict[str, Any] | None = None,
        http_status: int = 500,
    ):
        self.error_code = error_code
        self.details = details or {}
        self.http_status = http_status
        super().__init__(error_code)


class UploadError(IngestionError):
    """Raised when an uploaded payload is rejected before parsing.

    Common causes:
    - Wrong content type (API_001)
    - Payload over the configured size cap (API_002)
    - Empty body or too many records (API_005)
    """

    def __init__(self, error_code: str, details: dict[str, Any] | None = None):
        super().__init__(error_code, details, http_status=400)


class DecodingError(IngestionError):
    """Raised when uploaded bytes cannot be decoded as text (IMPORT_001)."""

    def __init__(self, details: dict[str, Any] | None = None):
        super().__init__("IMPORT_001", details, http_status=400)


class PersistenceError(IngestionError):
    """Raised when the persistence layer fails (DB_001).

    Admin-merchant and rule lookups are allowed to fail loudly: a failure
    here means the store is unavailable, not that the input was bad.
    """

    def __init__(self, details: dict[str, Any] | None = None):
        super().__init__("DB_001", details, http_status=503)


class RuleNotFoundError(IngestionError):
    """Raised when an automation rule id does not exist for the user (API_003)."""

    def __init__(self, details: dict[str, Any] | None = None):
        super().__init__("API_003", details, http_status=404)
