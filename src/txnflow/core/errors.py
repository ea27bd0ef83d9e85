"""Error codes and user-friendly messages.

Each catalog entry has:
- code: Unique identifier
- message: Technical description (for logs)
- user_message: User-friendly explanation
- suggestion: Actionable guidance for the user
- retry_allowed: Whether the error is retryable
"""

ERROR_CATALOG: dict[str, dict] = {
    "IMPORT_001": {
        "code": "IMPORT_001",
        "message": "Uploaded file could not be decoded as text",
        "user_message": "We couldn't read this file.",
        "suggestion": "Export the transactions again as CSV (UTF-8) and retry.",
        "retry_allowed": True,
    },
    "IMPORT_002": {
        "code": "IMPORT_002",
        "message": "No transactions could be parsed from the uploaded file",
        "user_message": "We couldn't find any transactions in this file.",
        "suggestion": "Check that the file has a header row with date, description and amount columns.",
        "retry_allowed": False,
    },
    "DB_001": {
        "code": "DB_001",
        "message": "Persistence layer unavailable during ingestion",
        "user_message": "We couldn't save your transactions right now.",
        "suggestion": "Please try again in a few moments.",
        "retry_allowed": True,
    },
    "VAL_001": {
        "code": "VAL_001",
        "message": "Request data failed validation",
        "user_message": "The submitted data appears to be incomplete or invalid.",
        "suggestion": "Please check your input and try again.",
        "retry_allowed": False,
    },
    # API-specific errors
    "API_001": {
        "code": "API_001",
        "message": "Invalid content type uploaded",
        "user_message": "Only CSV or tab-separated text files are supported.",
        "suggestion": "Upload the file with Content-Type text/csv or text/plain.",
        "retry_allowed": False,
    },
    "API_002": {
        "code": "API_002",
        "message": "File size exceeds maximum limit",
        "user_message": "The file is too large.",
        "suggestion": "Split the export into smaller date ranges and upload them separately.",
        "retry_allowed": False,
    },
    "API_003": {
        "code": "API_003",
        "message": "Automation rule not found",
        "user_message": "We couldn't find this automation rule.",
        "suggestion": "Please refresh your rules and try again.",
        "retry_allowed": False,
    },
    "API_005": {
        "code": "API_005",
        "message": "Empty or oversized import payload",
        "user_message": "There was nothing to import, or too many records at once.",
        "suggestion": "Send between one record and the configured maximum per request.",
        "retry_allowed": False,
    },
}


def get_error(error_code: str) -> dict:
    """Get error definition by code.

    Unknown codes resolve to a generic definition instead of raising.
    """
    if error_code not in ERROR_CATALOG:
        return {
            "code": "UNKNOWN",
            "message": f"Unknown error code: {error_code}",
            "user_message": "An unexpected error occurred.",
            "suggestion": "Please try again. Contact support if the problem persists.",
            "retry_allowed": True,
        }
    return ERROR_CATALOG[error_code]


def get_user_message(error_code: str) -> str:
    return get_error(error_code)["user_message"]


def is_retryable(error_code: str) -> bool:
    return get_error(error_code)["retry_allowed"]
