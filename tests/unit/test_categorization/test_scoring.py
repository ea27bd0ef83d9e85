"""Tests for admin-merchant scoring heuristics."""

import pytest

from txnflow.categorization.scoring import (
    ADMIN_MATCH_THRESHOLD,
    AdminMerchantSnapshot,
    abbreviation_score,
    best_admin_match,
    compile_pattern,
    exact_score,
    fuzzy_score,
    keyword_fraction_score,
    normalize_text,
    parse_patterns,
    pattern_score,
    score_merchant,
    similarity,
)


def merchant(name, category="Shopping", patterns=(), normalized=None, id="m1"):
    return AdminMerchantSnapshot(
        id=id,
        merchant_name=name,
        normalized_name=normalized or name,
        category=category,
        patterns=tuple(patterns),
    )


class TestTextHelpers:
    """Test normalization and string distance helpers."""

    def test_normalize_text(self):
        assert normalize_text("  AMZN Mktp/US*2K4 ") == "amzn mktp us 2k4"
        assert normalize_text(None) == ""

    def test_similarity(self):
        assert similarity("", "") == 1.0
        assert similarity("abcd", "abcd") == 1.0
        assert similarity("abcd", "abce") == pytest.approx(0.75)
        assert similarity("kitten", "sitting") == pytest.approx(4 / 7)


class TestParsePatterns:
    """Test decoding of stored pattern lists."""

    def test_json_list(self):
        assert parse_patterns('["AMZN*", "AMAZON.COM*"]') == ("AMZN*", "AMAZON.COM*")

    def test_json_string(self):
        assert parse_patterns('"AMZN*"') == ("AMZN*",)

    def test_invalid_json(self):
        assert parse_patterns("[not json") == ()

    def test_empty(self):
        assert parse_patterns(None) == ()
        assert parse_patterns("") == ()

    def test_non_list_json(self):
        assert parse_patterns('{"a": 1}') == ()


class TestHeuristics:
    """Test each scoring heuristic in isolation."""

    def test_exact_score(self):
        assert exact_score("amazon mktp us", merchant("Amazon")) == 1.0
        assert exact_score("amzn mktp us", merchant("Amazon")) == 0.0

    def test_exact_score_uses_normalized_name(self):
        m = merchant("Amazon.com, Inc.", normalized="amazon")
        assert exact_score("amazon prime", m) == 1.0

    def test_compile_pattern_replaces_every_wildcard(self):
        assert compile_pattern("A*B*C").search("axxbyyc")

    def test_pattern_score(self):
        m = merchant("Whole Foods Market", patterns=["WFM*"])
        assert pattern_score("wfm 123 austin", m) == 0.9

    def test_invalid_pattern_is_skipped(self):
        m = merchant("Whole Foods Market", patterns=["[", "WFM*"])
        assert pattern_score("wfm 123 austin", m) == 0.9

    def test_invalid_pattern_alone_scores_zero(self):
        m = merchant("Whole Foods Market", patterns=["("])
        assert pattern_score("wfm 123 austin", m) == 0.0

    def test_abbreviation_score(self):
        assert abbreviation_score("cvs pharm 1234", merchant("CVS Pharmacy")) == 0.8

    def test_abbreviation_ignores_long_words(self):
        assert abbreviation_score("walgreens 123", merchant("Walgreens")) == 0.0

    def test_keyword_fraction_score(self):
        m = merchant("Trader Joe's")
        assert keyword_fraction_score("trader joes 552", m) == pytest.approx(0.9)

    def test_keyword_fraction_partial(self):
        m = merchant("Blue Bottle Coffee Company")
        # 2 of 4 merchant words match
        assert keyword_fraction_score("blue bottle 12", m) == pytest.approx(0.45)

    def test_keyword_fraction_below_threshold(self):
        m = merchant("Alpha Bravo Charlie Delta")
        assert keyword_fraction_score("alpha 99", m) == 0.0

    def test_fuzzy_score(self):
        score = fuzzy_score("starbuks", merchant("Starbucks"))
        assert score == pytest.approx((8 / 9) * 0.8)

    def test_fuzzy_score_rejects_dissimilar(self):
        assert fuzzy_score("home depot", merchant("Starbucks")) == 0.0


class TestScoreMerchant:
    """Test the combined score."""

    def test_first_matching_heuristic_wins(self):
        # abbreviation fires (0.8) before keyword fraction (0.9) is tried
        assert score_merchant("cvs pharm 1234", merchant("CVS Pharmacy")) == pytest.approx(0.8)

    def test_pattern_beats_later_heuristics(self):
        m = merchant("Amazon Marketplace", patterns=["amzn mktp*"])
        assert score_merchant("amzn mktp us 2k4", m) == pytest.approx(0.9)

    def test_keyword_fraction_before_fuzzy(self):
        # the misspelled word matches fuzzily, so keyword fraction fires first
        assert score_merchant("starbuks", merchant("Starbucks")) == pytest.approx(0.9)

    def test_falls_through_to_fuzzy(self):
        # single-letter words are ignored, leaving only whole-text similarity
        assert score_merchant("a b c e", merchant("A B C D")) == pytest.approx((6 / 7) * 0.8)

    def test_empty_text(self):
        assert score_merchant("", merchant("Amazon")) == 0.0


class TestBestAdminMatch:
    """Test merchant selection."""

    def test_picks_highest_score(self):
        fuzzy = merchant("Starbucks Reserve", id="fuzzy")
        exact = merchant("Starbucks", id="exact")

        best = best_admin_match("STARBUCKS STORE #123", [fuzzy, exact])

        assert best is not None
        assert best[0].id == "exact"
        assert best[1] == 1.0

    def test_tie_keeps_first_seen(self):
        first = merchant("Amazon", category="Shopping", id="first")
        second = merchant("Amazon", category="Groceries", id="second")

        best = best_admin_match("AMAZON MKTP", [first, second])

        assert best[0].id == "first"

    def test_below_threshold_is_none(self):
        assert best_admin_match("ZZQX 4411", [merchant("Starbucks")]) is None
        assert ADMIN_MATCH_THRESHOLD == 0.3

    def test_empty_inputs(self):
        assert best_admin_match("", [merchant("Amazon")]) is None
        assert best_admin_match("AMAZON", []) is None
