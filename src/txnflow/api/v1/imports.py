"""Import endpoints for bank CSV exports and aggregator records."""

from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from txnflow.api.deps import get_ingestion_service
from txnflow.config import settings
from txnflow.core.exceptions import UploadError
from txnflow.schemas.imports import ImportResult, RecordImportRequest
from txnflow.services.ingestion import IngestionService

router = APIRouter(prefix="/users/{user_id}/imports", tags=["imports"])

ALLOWED_CONTENT_TYPES = {
    "text/csv",
    "text/plain",
    "text/tab-separated-values",
    "application/csv",
    "application/vnd.ms-excel",
    "application/octet-stream",
}


async def read_capped_body(request: Request, max_bytes: int) -> bytes:
    """Read the raw request body in-memory with a strict size cap.

    Raises:
        UploadError: API_002 if the body exceeds max_bytes
    """
    buf = bytearray()
    total = 0
    async for chunk in request.stream():
        if not chunk:
            continue
        total += len(chunk)
        if total > max_bytes:
            raise UploadError("API_002", {"max_bytes": max_bytes})
        buf.extend(chunk)
    return bytes(buf)


@router.post(
    "/csv",
    response_model=ImportResult,
    status_code=status.HTTP_201_CREATED,
    summary="Import a bank CSV export",
    description="""
    Parse, categorize and store a checking-account or credit-card export.

    ## File Requirements
    - Request body must be the raw file (`Content-Type: text/csv`)
    - Comma or tab separated, header row first
    - Maximum size: configurable via `CSV_MAX_SIZE_MB` (default: 5MB)

    ## Error Codes
    - API_001: Invalid content type
    - API_002: File too large
    - API_005: Empty body
    - IMPORT_001: File is not text
    - IMPORT_002: Header matches no supported layout
    """,
)
async def import_csv(
    user_id: UUID,
    request: Request,
    service: IngestionService = Depends(get_ingestion_service),
) -> ImportResult:
    content_type = (request.headers.get("content-type") or "").split(";")[0].strip().lower()
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise UploadError("API_001", {"content_type": content_type})

    data = await read_capped_body(request, settings.csv_max_size_mb * 1024 * 1024)
    if not data.strip():
        raise UploadError("API_005", {"reason": "empty body"})

    return await service.import_csv(user_id, data)


@router.post(
    "/records",
    response_model=ImportResult,
    status_code=status.HTTP_201_CREATED,
    summary="Import aggregator records",
)
async def import_records(
    user_id: UUID,
    payload: RecordImportRequest,
    service: IngestionService = Depends(get_ingestion_service),
) -> ImportResult:
    """Categorize records using their aggregator hints and store them.

    Records already imported (same external id) are skipped.
    """
    if not payload.records:
        raise UploadError("API_005", {"reason": "no records"})
    if len(payload.records) > settings.max_records_per_import:
        raise UploadError(
            "API_005",
            {"records": len(payload.records), "max_records": settings.max_records_per_import},
        )

    return await service.import_records(user_id, payload.records)
