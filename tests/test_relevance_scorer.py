"""
Comprehensive tests for RelevanceScorer.

Tests cover:
- Empty-query popularity prior
- Field weight ladder (whole word, substring, fuzzy fallback)
- Synonym expansion (max across variants, not sum)
- Coverage gate for short and long queries
- Phrase, rating, review and recency bonuses
- Defensive handling of malformed record fields
"""
from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from marketplace_search.domain.entities import (
    Excluded,
    Matched,
    PropertyRecord,
    RecordKind,
    build_record,
)
from marketplace_search.search.fuzzy_matcher import FuzzyMatcher
from marketplace_search.search.relevance_scorer import RelevanceScorer
from marketplace_search.search.tokenizer import tokenize

# ============================================================================
# Test Fixtures
# ============================================================================


@pytest.fixture
def scorer():
    return RelevanceScorer()


def make_property(**fields) -> PropertyRecord:
    """Helper to create property records."""
    return PropertyRecord(data=fields)


def score_query(scorer, record, query, now=None):
    return scorer.score(record, query, tokenize(query), now=now)


# ============================================================================
# Test Empty Query
# ============================================================================


class TestEmptyQuery:
    """Queries without tokens rank by quality alone."""

    def test_popularity_prior(self, scorer, kigali_apartment):
        outcome = scorer.score(make_property(**kigali_apartment), "", [])

        assert isinstance(outcome, Matched)
        assert outcome.score == pytest.approx(4.8 * 8 + 30)

    def test_never_excluded(self, scorer):
        """Even a record with no data is surfaced for an empty query."""
        assert scorer.score(make_property(), "", []) == Matched(0)

    def test_review_count_capped(self, scorer):
        outcome = scorer.score(make_property(rating=0, review_count=500), "", [])

        assert outcome == Matched(30)

    def test_stop_words_only_query(self, scorer, musanze_cabin):
        outcome = score_query(scorer, make_property(**musanze_cabin), "the of and")

        assert outcome.score == pytest.approx(3.0 * 8 + 2)


# ============================================================================
# Test Field Scoring
# ============================================================================


class TestFieldScore:
    """Test the per-field weight ladder."""

    @pytest.fixture
    def bundle(self, kigali_apartment):
        return make_property(**kigali_apartment).to_field_bundle()

    def test_whole_word_matches(self, scorer, bundle):
        # title 60 + location 40
        assert scorer.field_score(bundle, "kigali") == 100

    def test_substring_matches(self, scorer, bundle):
        # title 35 + location 25
        assert scorer.field_score(bundle, "kig") == 60

    def test_amenities_field(self, scorer, bundle):
        assert scorer.field_score(bundle, "wifi") == 14

    def test_category_and_description(self, scorer):
        bundle = make_property(
            title="Hilltop Stay", property_type="Villa", description="Quiet villa garden"
        ).to_field_bundle()

        # category 28 + description 12
        assert scorer.field_score(bundle, "villa") == 40

    def test_fuzzy_fallback(self, scorer, bundle):
        # fuzzy title 20 + fuzzy location 16
        assert scorer.field_score(bundle, "kigaly") == 36

    def test_no_match(self, scorer, bundle):
        assert scorer.field_score(bundle, "qqqqq") == 0

    def test_fuzzy_not_run_after_exact_match(self, bundle):
        """Exact hits never also collect fuzzy points."""
        matcher = MagicMock(wraps=FuzzyMatcher())
        scorer = RelevanceScorer(fuzzy_matcher=matcher)

        assert scorer.field_score(bundle, "kigali") == 100
        matcher.fuzzy_contains.assert_not_called()

        scorer.field_score(bundle, "kigaly")
        assert matcher.fuzzy_contains.called


# ============================================================================
# Test Synonyms
# ============================================================================


class TestSynonyms:
    """Synonym variants are alternatives, not independent boosts."""

    def test_max_not_sum(self, scorer):
        both = make_property(title="Apartment Apt Suite")
        one = make_property(title="Apartment Suite")

        assert score_query(scorer, both, "apartment") == score_query(scorer, one, "apartment")
        # token 60 + phrase in title 120
        assert score_query(scorer, one, "apartment") == Matched(180)

    def test_synonym_matches_when_token_does_not(self, scorer):
        flat = make_property(title="Sunny Flat", location="Kiyovu")

        outcome = score_query(scorer, flat, "apartment")

        assert isinstance(outcome, Matched)
        assert outcome.score == 60

    def test_villa_matches_house(self, scorer):
        house = make_property(title="Garden House")

        assert isinstance(score_query(scorer, house, "villa"), Matched)


# ============================================================================
# Test Coverage Gate
# ============================================================================


class TestCoverageGate:
    """Test exclusion of records matching too few tokens."""

    def test_required_coverage(self, scorer):
        assert scorer.required_coverage(1) == 1.0
        assert scorer.required_coverage(2) == 1.0
        assert scorer.required_coverage(3) == 0.66
        assert scorer.required_coverage(6) == 0.66

    def test_two_of_three_tokens_included(self, scorer, kigali_apartment):
        record = make_property(**kigali_apartment)

        assert isinstance(score_query(scorer, record, "kigali apartment qqqqq"), Matched)

    def test_one_of_two_tokens_excluded(self, scorer, kigali_apartment):
        record = make_property(**kigali_apartment)

        assert score_query(scorer, record, "kigali qqqqq") == Excluded()

    def test_single_token_miss_excluded(self, scorer, musanze_cabin):
        assert isinstance(
            score_query(scorer, make_property(**musanze_cabin), "kigali"), Excluded
        )

    def test_custom_thresholds(self, kigali_apartment):
        strict = RelevanceScorer(long_query_coverage=1.0)
        record = make_property(**kigali_apartment)

        assert isinstance(score_query(strict, record, "kigali apartment qqqqq"), Excluded)

    def test_repeated_tokens_compound(self, scorer):
        record = make_property(title="Kigali City Apartment", location="Kigali")

        # 100 per occurrence, phrase "kigali kigali" appears nowhere
        assert score_query(scorer, record, "kigali kigali") == Matched(200)


# ============================================================================
# Test Bonuses
# ============================================================================


class TestBonuses:
    """Test phrase, quality and recency bonuses."""

    def test_full_scenario_score(self, scorer, kigali_apartment):
        outcome = score_query(scorer, make_property(**kigali_apartment), "kigali apartment")

        # kigali 100 + apartment 60 + rating 38.4 + reviews 30
        assert outcome.score == pytest.approx(228.4)

    def test_phrase_in_title(self, scorer):
        record = make_property(title="Lake Kivu Resort", location="Rubavu")

        # lake 60 + kivu 60 + phrase 120
        assert score_query(scorer, record, "Lake Kivu") == Matched(240)

    def test_phrase_in_location(self, scorer):
        record = make_property(title="Lake Kivu Resort", location="Rubavu")

        # location 40 + phrase in location 80
        assert score_query(scorer, record, "rubavu") == Matched(120)

    @pytest.mark.parametrize("age_days,bonus", [(0, 10), (10, 10), (30, 10), (60, 6), (90, 6), (200, 0)])
    def test_recency_tiers(self, scorer, now, age_days, bonus):
        record = make_property(created_at=(now - timedelta(days=age_days)).isoformat())

        assert scorer.recency_bonus(record, now) == bonus

    def test_recency_accepts_zulu_timestamps(self, scorer, now):
        created = (now - timedelta(days=5)).strftime("%Y-%m-%dT%H:%M:%SZ")

        assert scorer.recency_bonus(make_property(created_at=created), now) == 10

    def test_recency_with_trimmed_fraction(self, scorer, now):
        """Timestamps whose trailing fractional zeros were dropped keep their bonus."""
        created = (now - timedelta(days=5)).strftime("%Y-%m-%dT%H:%M:%S") + ".12345+00:00"

        assert scorer.recency_bonus(make_property(created_at=created), now) == 10

    def test_recency_ignores_bad_dates(self, scorer, now):
        assert scorer.recency_bonus(make_property(created_at="yesterday"), now) == 0
        assert scorer.recency_bonus(make_property(), now) == 0

    def test_recency_added_to_score(self, scorer, now):
        fresh = make_property(title="Kivu Lodge", created_at=now.isoformat())
        stale = make_property(title="Kivu Lodge", created_at="2020-01-01T00:00:00+00:00")

        assert score_query(scorer, fresh, "kivu", now).score == score_query(
            scorer, stale, "kivu", now
        ).score + 10


# ============================================================================
# Test Robustness
# ============================================================================


class TestMalformedRecords:
    """Malformed fields fall back to neutral values."""

    def test_non_numeric_rating(self, scorer):
        record = make_property(title="Kigali Loft", rating="n/a", review_count=None)

        assert score_query(scorer, record, "loft") == Matched(60 + 120)

    @pytest.mark.parametrize("rating", ["NaN", "inf", float("nan"), float("-inf")])
    def test_non_finite_rating(self, scorer, rating):
        record = make_property(title="Kivu Lodge", rating=rating, review_count=float("nan"))

        assert scorer.popularity_score(record) == 0
        assert score_query(scorer, record, "kivu") == Matched(60 + 120)

    def test_overflowing_rating(self, scorer):
        record = make_property(rating="1e308", review_count=3)

        assert scorer.popularity_score(record) == 0

    def test_missing_text_fields(self, scorer):
        assert score_query(scorer, make_property(rating=5), "kigali") == Excluded()

    def test_other_kinds(self, scorer, gorilla_tour, airport_shuttle):
        tour = build_record(RecordKind.TOUR, gorilla_tour)
        vehicle = build_record(RecordKind.TRANSPORT, airport_shuttle)

        assert isinstance(score_query(scorer, tour, "gorilla musanze"), Matched)
        assert isinstance(score_query(scorer, vehicle, "airport minibus"), Matched)


class TestStats:
    def test_get_stats(self, scorer):
        stats = scorer.get_stats()

        assert stats["field_weights"]["title"] == [60, 35]
        assert stats["coverage"] == {"short_query": 1.0, "long_query": 0.66}
        assert stats["fuzzy"]["max_words"] == 120
