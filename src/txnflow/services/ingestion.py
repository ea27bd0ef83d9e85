"""Transaction ingestion service.

This module orchestrates the complete import workflow:
1. Parse the bank export (or accept aggregator records)
2. Categorize each transaction through the cascade
3. Apply the user's automation rules
4. Persist transactions
5. Report categorization statistics and the rule audit trail
"""

import time
import logging
from collections.abc import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from txnflow.categorization.cache import AdminMerchantCache, get_admin_merchant_cache
from txnflow.categorization.engine import CategorizationEngine, categorization_stats
from txnflow.core.exceptions import UploadError
from txnflow.parsers.factory import ParserFactory, decode_text, get_parser_factory
from txnflow.repositories.admin_merchant import AdminMerchantRepository
from txnflow.repositories.transaction import TransactionRepository
from txnflow.schemas.imports import ImportResult, TransactionOut
from txnflow.schemas.internal import (
    AggregatorRecord,
    CategoryMatch,
    ExternalCategoryHint,
    TransactionDraft,
)
from txnflow.services.automation import AutomationService
from txnflow.services.mapping import draft_from_record, draft_from_row, transaction_from_draft

logger = logging.getLogger(__name__)


class IngestionService:
    """Service for importing transactions.

    Coordinates parsing, categorization, automation rules and persistence.
    One malformed row or failing rule never fails the import; persistence
    and lookup failures do.
    """

    def __init__(
        self,
        db: AsyncSession,
        parser_factory: ParserFactory | None = None,
        merchant_cache: AdminMerchantCache | None = None,
    ):
        """Initialize the service.

        Args:
            db: Database session for persistence
            parser_factory: Parser factory (default: shared factory)
            merchant_cache: Admin-merchant cache (default: shared cache)
        """
        self.db = db
        self.parser_factory = parser_factory or get_parser_factory()
        self.merchant_cache = merchant_cache or get_admin_merchant_cache()
        self.admin_merchant_repo = AdminMerchantRepository(db)
        self.transaction_repo = TransactionRepository(db)
        self.automation = AutomationService(db)

    async def import_csv(self, user_id: UUID, data: bytes | str) -> ImportResult:
        """Import a bank CSV/TSV export.

        Complete workflow:
        1. Decode, detect format and parse rows
        2. Categorize rows (admin merchants, static tables, fallback)
        3. Apply automation rules
        4. Persist transactions
        5. Return result

        Args:
            user_id: Owner of the imported transactions
            data: Export content, raw bytes or decoded text

        Returns:
            ImportResult with processing details

        Raises:
            DecodingError: If the bytes are not text
            UploadError: If the header matches no known layout (IMPORT_002)
            PersistenceError: If the store is unavailable
        """
        start_time = time.time()

        if isinstance(data, bytes):
            data = decode_text(data)

        parsed = self.parser_factory.parse_file(data)
        if parsed.format_code is None:
            raise UploadError("IMPORT_002", {"header": parsed.headers})

        drafts = [draft_from_row(row) for row in parsed.rows]
        hints: list[ExternalCategoryHint | None] = [None] * len(drafts)

        result = await self._process(user_id, drafts, hints)
        result.format_code = parsed.format_code
        result.skipped_rows = parsed.skipped_rows
        result.processing_time_ms = int((time.time() - start_time) * 1000)

        logger.info(
            "CSV import complete",
            extra={
                "user_id": str(user_id),
                "format": parsed.format_code,
                "imported": result.imported,
                "skipped_rows": result.skipped_rows,
                "processing_time_ms": result.processing_time_ms,
            },
        )
        return result

    async def import_records(
        self, user_id: UUID, records: Sequence[AggregatorRecord]
    ) -> ImportResult:
        """Import aggregator records, using their category hints.

        Records whose external id was already imported for the user (or
        repeats within the same request) are skipped and counted as
        duplicates.
        """
        start_time = time.time()

        known = await self.transaction_repo.existing_external_ids(
            user_id, [record.external_id for record in records]
        )
        fresh: list[AggregatorRecord] = []
        duplicates = 0
        for record in records:
            if record.external_id and record.external_id in known:
                duplicates += 1
                continue
            if record.external_id:
                known.add(record.external_id)
            fresh.append(record)

        drafts = [draft_from_record(record) for record in fresh]
        hints = [record.category_hint for record in fresh]

        result = await self._process(user_id, drafts, hints)
        result.duplicates = duplicates
        result.processing_time_ms = int((time.time() - start_time) * 1000)

        logger.info(
            "Aggregator import complete",
            extra={
                "user_id": str(user_id),
                "imported": result.imported,
                "duplicates": duplicates,
                "processing_time_ms": result.processing_time_ms,
            },
        )
        return result

    async def _process(
        self,
        user_id: UUID,
        drafts: list[TransactionDraft],
        hints: list[ExternalCategoryHint | None],
    ) -> ImportResult:
        if not drafts:
            return ImportResult()

        try:
            matches = await self._categorize(drafts, hints)
            rule_result = await self.automation.apply(user_id, drafts)

            transactions = [
                transaction_from_draft(user_id, draft) for draft in rule_result.transactions
            ]
            # Counts and rows share one commit; a failed insert rolls back both
            await self.automation.record_applied(rule_result, commit=False)
            transactions = await self.transaction_repo.bulk_create(transactions)
        except Exception:
            # Rollback any partial changes
            await self.db.rollback()
            raise

        return ImportResult(
            imported=len(transactions),
            rule_applications=rule_result.total_applications,
            categorization=categorization_stats(matches),
            transactions=[TransactionOut.model_validate(txn) for txn in transactions],
            applications=rule_result.applications,
        )

    async def _categorize(
        self,
        drafts: list[TransactionDraft],
        hints: list[ExternalCategoryHint | None],
    ) -> list[CategoryMatch]:
        """Categorize drafts in place and return the matches."""
        admin_merchants = await self.merchant_cache.get(self.admin_merchant_repo)
        engine = CategorizationEngine(admin_merchants=admin_merchants)

        matches = engine.categorize_many(
            (draft.description, draft.raw_amount, draft.merchant, hint)
            for draft, hint in zip(drafts, hints)
        )
        for draft, match in zip(drafts, matches):
            draft.apply_match(match)
        return matches
