"""
Relevance scoring system for search results.

Scores marketplace records against query tokens with a field-weighted
ladder (title > location > category > amenities > description), gates
multi-word queries on token coverage, then adds quality and recency
bonuses.
"""

import logging
import math
import re
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from ..domain.entities import (
    Excluded,
    FieldBundle,
    Matched,
    ScoreOutcome,
    SearchableRecord,
)
from ..domain.normalization import normalize
from .fuzzy_matcher import FuzzyMatcher
from .tokenizer import expand_token

logger = logging.getLogger(__name__)


class RelevanceScorer:
    """
    Calculate relevance scores for candidate records.

    Scoring steps:
    1. Per token, best synonym variant across weighted fields
       (fuzzy fallback only when nothing matched exactly)
    2. Coverage gate: every token for 1-2 token queries, 66% otherwise
    3. Bonuses: full phrase in title/location, rating, reviews, recency

    Queries without tokens fall back to a pure rating/review prior.
    """

    # (whole word, substring) points per field
    FIELD_WEIGHTS: Tuple[Tuple[str, int, int], ...] = (
        ("title", 60, 35),
        ("location", 40, 25),
        ("category", 28, 16),
        ("amenities", 14, 8),
        ("description", 12, 6),
    )

    # Points per field when only a fuzzy match was found
    FUZZY_WEIGHTS: Tuple[Tuple[str, int], ...] = (
        ("title", 20),
        ("location", 16),
        ("category", 12),
        ("amenities", 8),
        ("description", 5),
    )

    # Coverage required before a record may be surfaced
    SHORT_QUERY_TOKENS = 2
    SHORT_QUERY_COVERAGE = 1.0
    LONG_QUERY_COVERAGE = 0.66

    # Bonuses
    PHRASE_IN_TITLE_BONUS = 120
    PHRASE_IN_LOCATION_BONUS = 80
    RATING_MULTIPLIER = 8
    REVIEW_COUNT_CAP = 30
    RECENCY_BONUSES: Tuple[Tuple[int, int], ...] = ((30, 10), (90, 6))

    def __init__(
        self,
        fuzzy_matcher: Optional[FuzzyMatcher] = None,
        short_query_coverage: float = SHORT_QUERY_COVERAGE,
        long_query_coverage: float = LONG_QUERY_COVERAGE,
    ):
        """
        Initialize relevance scorer.

        Args:
            fuzzy_matcher: Matcher used for typo fallback
            short_query_coverage: Coverage required for queries of 1-2 tokens
            long_query_coverage: Coverage required for longer queries
        """
        self.fuzzy_matcher = fuzzy_matcher or FuzzyMatcher()
        self.short_query_coverage = short_query_coverage
        self.long_query_coverage = long_query_coverage

    def score(
        self,
        record: SearchableRecord,
        query: str,
        tokens: List[str],
        now: Optional[datetime] = None,
    ) -> ScoreOutcome:
        """
        Calculate relevance for one record.

        Args:
            record: Candidate record
            query: Raw query text (used for the full-phrase bonus)
            tokens: Tokens produced from the query
            now: Reference time for the recency bonus

        Returns:
            Matched with the score, or Excluded when coverage is too low
        """
        if not tokens:
            return Matched(self.popularity_score(record))

        bundle = record.to_field_bundle()

        total = 0.0
        matched_tokens = 0
        for token in tokens:
            token_score = max(self.field_score(bundle, variant) for variant in expand_token(token))
            if token_score > 0:
                matched_tokens += 1
            total += token_score

        coverage = matched_tokens / len(tokens)
        if coverage < self.required_coverage(len(tokens)):
            return Excluded()

        phrase = normalize(query)
        if phrase and phrase in bundle.title:
            total += self.PHRASE_IN_TITLE_BONUS
        if phrase and phrase in bundle.location:
            total += self.PHRASE_IN_LOCATION_BONUS

        total += self.popularity_score(record)
        total += self.recency_bonus(record, now)

        return Matched(total)

    def required_coverage(self, token_count: int) -> float:
        if token_count <= self.SHORT_QUERY_TOKENS:
            return self.short_query_coverage
        return self.long_query_coverage

    def field_score(self, bundle: FieldBundle, variant: str) -> int:
        """
        Score one token variant against every field of a bundle.

        Exact (whole word) beats substring; fuzzy is tried only when the
        variant matched no field at all.
        """
        pattern = re.compile(rf"\b{re.escape(variant)}\b")
        score = 0

        for field_name, word_points, substring_points in self.FIELD_WEIGHTS:
            text = getattr(bundle, field_name)
            if not text:
                continue
            if pattern.search(text):
                score += word_points
            elif variant in text:
                score += substring_points

        if score:
            return score

        for field_name, fuzzy_points in self.FUZZY_WEIGHTS:
            if self.fuzzy_matcher.fuzzy_contains(getattr(bundle, field_name), variant):
                score += fuzzy_points

        return score

    def popularity_score(self, record: SearchableRecord) -> float:
        """Rating and review-count prior, 0 when the rating overflows."""
        prior = record.rating * self.RATING_MULTIPLIER + min(
            record.review_count, self.REVIEW_COUNT_CAP
        )
        return prior if math.isfinite(prior) else 0.0

    def recency_bonus(self, record: SearchableRecord, now: Optional[datetime] = None) -> int:
        """
        Bonus for recently listed records.

        Tiers:
        - Listed within 30 days: 10 points
        - Listed within 90 days: 6 points
        - Older or unknown: 0 points
        """
        created_at = record.created_at
        if created_at is None:
            return 0

        age_days = ((now or datetime.now(timezone.utc)) - created_at).total_seconds() / 86400
        for max_age_days, bonus in self.RECENCY_BONUSES:
            if age_days <= max_age_days:
                return bonus
        return 0

    def get_stats(self) -> dict:
        """
        Get scorer configuration.

        Returns:
            Dictionary with scorer weights and thresholds
        """
        return {
            "field_weights": {name: [word, sub] for name, word, sub in self.FIELD_WEIGHTS},
            "fuzzy_weights": dict(self.FUZZY_WEIGHTS),
            "coverage": {
                "short_query": self.short_query_coverage,
                "long_query": self.long_query_coverage,
            },
            "fuzzy": self.fuzzy_matcher.get_stats(),
        }
