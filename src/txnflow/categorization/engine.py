"""Categorization cascade.

Tiers are tried in priority order and the first tier that produces a
match wins; scores from different tiers are never blended:

1. Admin-curated merchants (score from the heuristics in scoring.py)
2. External aggregator category hint (confidence from its label)
3. Static merchant patterns (0.75)
4. Static description keywords (0.65)
5. Sign-based fallback: Income for inflows, Uncategorized otherwise (0.0)
"""

import logging
from collections.abc import Iterable, Sequence
from decimal import Decimal

from txnflow.categorization.scoring import AdminMerchantSnapshot, best_admin_match
from txnflow.categorization.tables import (
    KEYWORD_GROUPS,
    KEYWORD_TABLE_CONFIDENCE,
    MERCHANT_PATTERNS,
    MERCHANT_TABLE_CONFIDENCE,
)
from txnflow.categorization.taxonomy import (
    CategoryDefinition,
    Taxonomy,
    get_taxonomy,
    slugify,
)
from txnflow.schemas.internal import (
    BudgetType,
    CategorizationStats,
    CategoryMatch,
    ExternalCategoryHint,
    LedgerType,
    MatchSource,
)

logger = logging.getLogger(__name__)

# Qualitative aggregator confidence label -> numeric confidence
HINT_CONFIDENCE: dict[str, float] = {
    "VERY_HIGH": 0.95,
    "HIGH": 0.85,
    "MEDIUM": 0.75,
    "LOW": 0.65,
}
DEFAULT_HINT_CONFIDENCE = 0.80

FALLBACK_CONFIDENCE = 0.0


def hint_confidence(label: str | None) -> float:
    if not label:
        return DEFAULT_HINT_CONFIDENCE
    return HINT_CONFIDENCE.get(label.strip().upper(), DEFAULT_HINT_CONFIDENCE)


def _to_match(entry: CategoryDefinition, confidence: float, source: MatchSource) -> CategoryMatch:
    return CategoryMatch(
        category_id=entry.id,
        category_name=entry.name,
        subcategory=entry.subcategory,
        confidence=min(max(confidence, 0.0), 1.0),
        source=source,
        ledger_type=entry.ledger_type,
        budget_type=entry.budget_type,
    )


def synthesized_uncategorized() -> CategoryMatch:
    """Uncategorized match used when the taxonomy has no fallback entry."""
    return CategoryMatch(
        category_id="uncategorized",
        category_name="Uncategorized",
        subcategory=None,
        confidence=FALLBACK_CONFIDENCE,
        source=MatchSource.UNCATEGORIZED,
        ledger_type=LedgerType.EXPENSE,
        budget_type=BudgetType.FLEXIBLE,
    )


class CategorizationEngine:
    """Assigns a taxonomy category to a transaction.

    The engine is pure over its inputs, the taxonomy and the admin-merchant
    snapshot it was given; it never raises. Callers refresh admin merchants
    by building a new engine (or passing `admin_merchants` per call) from
    AdminMerchantCache.

    Example:
        >>> engine = CategorizationEngine()
        >>> match = engine.categorize("STARBUCKS STORE #123", Decimal("-5.75"))
        >>> match.category_name, match.confidence
        ('Food & Drink', 0.75)
    """

    def __init__(
        self,
        taxonomy: Taxonomy | None = None,
        admin_merchants: Iterable[AdminMerchantSnapshot] = (),
    ):
        self.taxonomy = taxonomy if taxonomy is not None else get_taxonomy()
        self.admin_merchants: tuple[AdminMerchantSnapshot, ...] = tuple(admin_merchants)

    def categorize(
        self,
        description: str | None,
        signed_amount: Decimal | float | int | None,
        merchant: str | None = None,
        external_hint: ExternalCategoryHint | None = None,
        admin_merchants: Sequence[AdminMerchantSnapshot] | None = None,
    ) -> CategoryMatch:
        """Run the cascade for one transaction.

        Args:
            description: Raw bank description
            signed_amount: Signed amount, positive = inflow
            merchant: Best-effort payee name, if known
            external_hint: Aggregator category hint, if any
            admin_merchants: Override the engine's admin-merchant snapshot

        Returns:
            CategoryMatch from the first tier that matched
        """
        merchants = self.admin_merchants if admin_merchants is None else admin_merchants
        try:
            match = (
                self._match_admin(description, merchant, merchants)
                or self._match_external_hint(external_hint)
                or self._match_merchant_table(description, merchant)
                or self._match_keywords(description)
            )
        except Exception as e:
            logger.error(
                "Categorization cascade failed, using fallback",
                extra={"error": str(e), "error_type": type(e).__name__},
                exc_info=True,
            )
            match = None

        return match or self._fallback(signed_amount)

    def categorize_many(
        self,
        items: Iterable[tuple[str | None, Decimal | None, str | None, ExternalCategoryHint | None]],
    ) -> list[CategoryMatch]:
        """Categorize (description, amount, merchant, hint) tuples, preserving order."""
        merchants = self.admin_merchants
        return [
            self.categorize(description, amount, merchant, hint, admin_merchants=merchants)
            for description, amount, merchant, hint in items
        ]

    def _match_admin(
        self,
        description: str | None,
        merchant: str | None,
        merchants: Sequence[AdminMerchantSnapshot],
    ) -> CategoryMatch | None:
        search_text = merchant or description
        if not search_text or not merchants:
            return None

        best = best_admin_match(search_text, merchants)
        if best is None:
            return None

        record, score = best
        entry = self.taxonomy.find_by_label(record.category)
        logger.debug(
            "Admin merchant match",
            extra={"merchant_id": record.id, "category": record.category, "score": score},
        )
        if entry is not None:
            return _to_match(entry, score, MatchSource.ADMIN_MERCHANT)

        # Admins may curate categories the static table does not know yet
        return CategoryMatch(
            category_id=slugify(record.category),
            category_name=record.category,
            subcategory=None,
            confidence=min(score, 1.0),
            source=MatchSource.ADMIN_MERCHANT,
            ledger_type=LedgerType.EXPENSE,
            budget_type=BudgetType.FLEXIBLE,
        )

    def _match_external_hint(self, hint: ExternalCategoryHint | None) -> CategoryMatch | None:
        if hint is None or not (hint.detailed or hint.primary):
            return None

        entry = self.taxonomy.by_external_detailed(hint.detailed)
        if entry is None:
            entry = self.taxonomy.by_external_primary(hint.primary)
        if entry is None:
            logger.debug(
                "External hint did not map to a category",
                extra={"primary": hint.primary, "detailed": hint.detailed},
            )
            return None

        return _to_match(entry, hint_confidence(hint.confidence_label), MatchSource.EXTERNAL_HINT)

    def _match_merchant_table(self, description: str | None, merchant: str | None) -> CategoryMatch | None:
        text = (merchant or description or "").lower().strip()
        if not text:
            return None

        for patterns, (name, subcategory) in MERCHANT_PATTERNS:
            if any(pattern in text for pattern in patterns):
                entry = self._lookup(name, subcategory)
                if entry is not None:
                    return _to_match(entry, MERCHANT_TABLE_CONFIDENCE, MatchSource.MERCHANT_TABLE)
        return None

    def _match_keywords(self, description: str | None) -> CategoryMatch | None:
        text = (description or "").lower()
        if not text.strip():
            return None

        for keywords, (name, subcategory) in KEYWORD_GROUPS:
            if any(keyword in text for keyword in keywords):
                entry = self._lookup(name, subcategory)
                if entry is not None:
                    return _to_match(entry, KEYWORD_TABLE_CONFIDENCE, MatchSource.KEYWORD_TABLE)
        return None

    def _lookup(self, name: str, subcategory: str | None) -> CategoryDefinition | None:
        entry = self.taxonomy.find(name, subcategory)
        if entry is None:
            logger.warning(
                "Static table references unknown category",
                extra={"category": name, "subcategory": subcategory},
            )
        return entry

    def _fallback(self, signed_amount: Decimal | float | int | None) -> CategoryMatch:
        entry = self.taxonomy.fallback_for(signed_amount)
        if entry is None:
            logger.warning("Taxonomy has no fallback category, synthesizing Uncategorized")
            return synthesized_uncategorized()
        return _to_match(entry, FALLBACK_CONFIDENCE, MatchSource.UNCATEGORIZED)


def categorization_stats(matches: Iterable[CategoryMatch]) -> CategorizationStats:
    """Count matches per source and average their confidence."""
    by_source: dict[str, int] = {source.value: 0 for source in MatchSource}
    total = 0
    confidence_sum = 0.0
    for match in matches:
        total += 1
        by_source[match.source.value] += 1
        confidence_sum += match.confidence

    return CategorizationStats(
        total=total,
        by_source=by_source,
        average_confidence=round(confidence_sum / total, 4) if total else 0.0,
        needs_review=by_source[MatchSource.UNCATEGORIZED.value],
    )
