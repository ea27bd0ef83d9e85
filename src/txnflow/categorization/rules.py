"""Deterministic quick classification from a description and amount sign.

This is the lightweight classifier used where no admin merchants or
aggregator hints are available (e.g. previewing a CSV before import).
Unlike the full cascade it returns a bare taxonomy entry with no
confidence or provenance.

Resolution order:
- card payments, savings transfers and refunds (phrasing that would
  otherwise be swallowed by ordinary keywords)
- streaming/software subscriptions
- taxonomy keywords, in table order
- sign-based fallback
"""

from __future__ import annotations

import re
from decimal import Decimal

from txnflow.categorization.taxonomy import CategoryDefinition, Taxonomy, get_taxonomy


def _norm(text: str) -> str:
    return re.sub(r"\s+", " ", (text or "").strip().upper())


def normalize_merchant(description: str | None) -> str:
    """Normalize a merchant/description string into a stable key.

    This is an exact-match key (not fuzzy matching). It is used for
    admin merchant records and needs-review rollups.
    """
    return _norm(description or "")


# Ordering matters: earlier matches win.
_PRIORITY_RULES: list[tuple[tuple[str, str | None], re.Pattern[str]]] = [
    (("Credit Card Payment", None), re.compile(r"CREDIT CARD|APPLECARD|PAYMENT")),
    (("Savings Transfer", None), re.compile(r"SAVINGS|TRANSFER TO")),
    (("Reimbursement", "Refunds"), re.compile(r"REFUND|RETURN|CREDIT")),
]

SUBSCRIPTION_PATTERNS: tuple[str, ...] = (
    "NETFLIX", "HLU*", "HULUPLUS", "HULU*", "SPOTIFY", "DISNEY+", "DISNEY PLUS",
    "PRIME VIDEO", "HBO", "APPLE TV", "PARAMOUNT", "PEACOCK", "YOUTUBE PREMIUM",
    "APPLE MUSIC", "AMAZON MUSIC", "TIDAL", "PANDORA", "ICLOUD", "GOOGLE ONE",
    "DROPBOX", "ADOBE", "MICROSOFT 365", "OFFICE 365", "CANVA", "ZOOM",
    "SLACK", "NOTION", "EVERNOTE",
)
SUBSCRIPTION_CATEGORY = ("Bills & Utilities", "Streaming")


def classify_description(
    description: str | None,
    amount: Decimal | float | int,
    taxonomy: Taxonomy | None = None,
) -> CategoryDefinition | None:
    """Infer a taxonomy entry from the description and amount sign.

    Args:
        description: Raw bank description text.
        amount: Signed amount, positive = inflow.
        taxonomy: Taxonomy to resolve against (default: shared taxonomy).

    Returns:
        Matching entry, or the Income/Uncategorized fallback. None only if
        the taxonomy has no fallback entry at all.
    """
    if taxonomy is None:
        taxonomy = get_taxonomy()
    text = _norm(description or "")

    if text:
        for (name, subcategory), pattern in _PRIORITY_RULES:
            if pattern.search(text):
                entry = taxonomy.find(name, subcategory)
                if entry is not None:
                    return entry

        if any(pattern in text for pattern in SUBSCRIPTION_PATTERNS):
            entry = taxonomy.find(*SUBSCRIPTION_CATEGORY)
            if entry is not None:
                return entry

        for entry in taxonomy:
            if any(keyword.upper() in text for keyword in entry.keywords):
                return entry

    return taxonomy.fallback_for(amount)
