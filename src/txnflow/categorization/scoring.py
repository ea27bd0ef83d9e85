"""Admin-merchant match scoring.

Each heuristic is an independent pure function returning a score in
[0, 1] for one admin merchant against a piece of transaction text.
`score_merchant` returns the first heuristic that fires for one merchant and
`best_admin_match` picks the best merchant above ADMIN_MATCH_THRESHOLD.

The thresholds below were tuned by hand on real bank descriptions and
have not been calibrated against a labeled dataset.
"""

import json
import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from rapidfuzz.distance import Levenshtein

logger = logging.getLogger(__name__)

# Minimum score for an admin merchant to be accepted at all
ADMIN_MATCH_THRESHOLD = 0.3
# Minimum fraction of merchant words that must match a transaction word
KEYWORD_FRACTION_THRESHOLD = 0.3
# Whole-string similarity must exceed this to count as a fuzzy match
FUZZY_ACCEPT_THRESHOLD = 0.6
# Per-word similarity must exceed this for the keyword-fraction heuristic
WORD_FUZZY_THRESHOLD = 0.8
# Merchant words this short are treated as abbreviations (e.g. "amex")
ABBREVIATION_MAX_LENGTH = 4

EXACT_SCORE = 1.0
PATTERN_SCORE = 0.9
ABBREVIATION_SCORE = 0.8
KEYWORD_WEIGHT = 0.9
FUZZY_WEIGHT = 0.8

_NON_WORD = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class AdminMerchantSnapshot:
    """Immutable view of an admin-curated merchant used by the classifier."""

    id: str
    merchant_name: str
    normalized_name: str
    category: str
    patterns: tuple[str, ...] = ()

    @classmethod
    def from_record(cls, record: Any) -> "AdminMerchantSnapshot":
        """Build a snapshot from an ORM row (or any object with the same attributes)."""
        return cls(
            id=str(record.id),
            merchant_name=record.merchant_name or "",
            normalized_name=record.normalized_name or record.merchant_name or "",
            category=record.category,
            patterns=parse_patterns(record.patterns),
        )


def parse_patterns(raw: str | None) -> tuple[str, ...]:
    """Decode a JSON-encoded pattern list. Invalid JSON yields no patterns."""
    if not raw:
        return ()
    try:
        decoded = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid admin merchant patterns", extra={"patterns": raw})
        return ()
    if isinstance(decoded, str):
        decoded = [decoded]
    if not isinstance(decoded, list):
        return ()
    return tuple(str(p) for p in decoded if p)


def normalize_text(text: str | None) -> str:
    """Lowercase, turn punctuation into spaces and collapse whitespace."""
    text = _NON_WORD.sub(" ", (text or "").lower())
    return _WHITESPACE.sub(" ", text).strip()


def words(text: str) -> list[str]:
    return [word for word in text.split(" ") if len(word) > 1]


def similarity(a: str, b: str) -> float:
    """1 - edit distance normalized by the longer string (1.0 for two empty strings)."""
    if not a and not b:
        return 1.0
    return Levenshtein.normalized_similarity(a, b)


def _names(merchant: AdminMerchantSnapshot) -> list[str]:
    names = [normalize_text(merchant.merchant_name), normalize_text(merchant.normalized_name)]
    return [name for name in names if name]


def _merchant_words(merchant: AdminMerchantSnapshot) -> list[str]:
    seen: list[str] = []
    for name in _names(merchant):
        for word in words(name):
            if word not in seen:
                seen.append(word)
    return seen


def exact_score(text: str, merchant: AdminMerchantSnapshot) -> float:
    """Merchant name (or normalized name) contained in the transaction text."""
    if any(name in text for name in _names(merchant)):
        return EXACT_SCORE
    return 0.0


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a stored admin pattern; `*` is a wildcard for any run of characters."""
    return re.compile(pattern.replace("*", ".*"), re.IGNORECASE)


def pattern_score(text: str, merchant: AdminMerchantSnapshot) -> float:
    for pattern in merchant.patterns:
        try:
            compiled = compile_pattern(pattern)
        except re.error:
            logger.debug(
                "Skipping invalid admin merchant pattern",
                extra={"merchant_id": merchant.id, "pattern": pattern},
            )
            continue
        if compiled.search(text):
            return PATTERN_SCORE
    return 0.0


def abbreviation_score(text: str, merchant: AdminMerchantSnapshot) -> float:
    """A short merchant word contained in, or containing, a transaction word."""
    text_words = words(text)
    for word in _merchant_words(merchant):
        if len(word) > ABBREVIATION_MAX_LENGTH:
            continue
        if any(word in t_word or t_word in word for t_word in text_words):
            return ABBREVIATION_SCORE
    return 0.0


def keyword_fraction_score(text: str, merchant: AdminMerchantSnapshot) -> float:
    merchant_words = _merchant_words(merchant)
    if not merchant_words:
        return 0.0

    text_words = words(text)
    matched = [
        word
        for word in merchant_words
        if any(
            word in t_word or t_word in word or similarity(t_word, word) > WORD_FUZZY_THRESHOLD
            for t_word in text_words
        )
    ]
    fraction = len(matched) / len(merchant_words)
    if fraction >= KEYWORD_FRACTION_THRESHOLD:
        return fraction * KEYWORD_WEIGHT
    return 0.0


def fuzzy_score(text: str, merchant: AdminMerchantSnapshot) -> float:
    names = _names(merchant)
    if not names:
        return 0.0
    best = max(similarity(text, name) for name in names)
    if best > FUZZY_ACCEPT_THRESHOLD:
        return best * FUZZY_WEIGHT
    return 0.0


SCORERS: tuple[Callable[[str, AdminMerchantSnapshot], float], ...] = (
    exact_score,
    pattern_score,
    abbreviation_score,
    keyword_fraction_score,
    fuzzy_score,
)


def score_merchant(text: str, merchant: AdminMerchantSnapshot) -> float:
    """Score of the first heuristic, in SCORERS order, that matches the text.

    Heuristics are tried from most to least specific; a weaker heuristic
    never overrides a stronger one that already fired.
    """
    if not text:
        return 0.0
    for scorer in SCORERS:
        score = scorer(text, merchant)
        if score > 0:
            return score
    return 0.0


def best_admin_match(
    search_text: str | None,
    merchants: Iterable[AdminMerchantSnapshot],
) -> tuple[AdminMerchantSnapshot, float] | None:
    """Highest-scoring merchant with score >= ADMIN_MATCH_THRESHOLD.

    Ties keep the merchant seen first.
    """
    text = normalize_text(search_text)
    if not text:
        return None

    best: tuple[AdminMerchantSnapshot, float] | None = None
    for merchant in merchants:
        score = score_merchant(text, merchant)
        if score >= ADMIN_MATCH_THRESHOLD and (best is None or score > best[1]):
            best = (merchant, score)
    return best
