"""Transaction categorization.

This module provides deterministic, local categorization of transactions:
a priority cascade over admin-curated merchants, aggregator hints and
static tables, plus a quick description-only classifier. It is
intentionally rule-based (no network calls, no model).
"""

from .engine import CategorizationEngine, categorization_stats
from .rules import classify_description, normalize_merchant
from .taxonomy import CategoryDefinition, Taxonomy, get_taxonomy

__all__ = [
    "CategorizationEngine",
    "CategoryDefinition",
    "Taxonomy",
    "categorization_stats",
    "classify_description",
    "get_taxonomy",
    "normalize_merchant",
]
