"""
Business logic service layer.

Orchestrates marketplace searches: fetches candidate records per kind
concurrently, scores them, applies filters and sorts. Record source
failures degrade to an empty candidate set for the failing kind only.
"""

import asyncio
import time
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ..domain.entities import (
    FilterOptions,
    Matched,
    RecordKind,
    ScoredResult,
    SearchType,
    build_record,
)
from ..logging_config import get_logger
from ..metrics import track_scored_record, track_search_query
from ..repositories.record_repository import RECORD_SOURCES, IRecordRepository
from ..search.filters import apply_filters, sort_results
from ..search.intent_parser import parse_intent
from ..search.relevance_scorer import RelevanceScorer
from ..search.tokenizer import tokenize

logger = get_logger(__name__)

POPULAR_SEARCHES = (
    "Kigali apartment",
    "Monthly stay",
    "Lake Kivu resort",
    "Gorilla trekking tour",
    "Akagera safari",
    "Airport transfer",
    "Luxury villa",
    "4x4 rental",
)


class SmartSearchService:
    """
    Marketplace search service.

    Search flow:
    1. Fetch published records for each requested kind (concurrently)
    2. Tokenize the query and parse its intent
    3. Score every candidate, dropping those the relevance gate excludes
    4. Apply explicit filters and query intent
    5. Sort (relevance by default)

    The service keeps no state between calls.
    """

    DEFAULT_MAX_CANDIDATES = 500
    DEFAULT_FETCH_TIMEOUT_SECONDS = 10.0
    LOCATION_SUGGESTION_LIMIT = 10

    def __init__(
        self,
        repository: IRecordRepository,
        scorer: Optional[RelevanceScorer] = None,
        max_candidates_per_kind: int = DEFAULT_MAX_CANDIDATES,
        fetch_timeout_seconds: float = DEFAULT_FETCH_TIMEOUT_SECONDS,
    ):
        """
        Initialize search service.

        Args:
            repository: Source of candidate records
            scorer: Relevance scorer (default configuration if omitted)
            max_candidates_per_kind: Cap on rows fetched per record kind
            fetch_timeout_seconds: Time budget for each record source fetch
        """
        self.repository = repository
        self.scorer = scorer or RelevanceScorer()
        self.max_candidates_per_kind = max_candidates_per_kind
        self.fetch_timeout_seconds = fetch_timeout_seconds

    async def search(
        self, query: str, filters: Optional[FilterOptions] = None
    ) -> List[ScoredResult]:
        """
        Search every requested record kind.

        Args:
            query: Free-text query, may be empty
            filters: Explicit filters and sort order

        Returns:
            Ranked results; empty if nothing matches or ranking fails
        """
        filters = filters or FilterOptions()
        search_type = SearchType(filters.search_type)
        kinds = search_type.record_kinds()
        start_time = time.time()

        batches = await asyncio.gather(*(self._fetch_candidates(kind) for kind in kinds))

        try:
            results = self.rank(query, filters, zip(kinds, batches))
        except Exception as e:
            logger.error(
                "Search ranking failed", query=query, error=str(e), exc_info=True
            )
            track_search_query(search_type.value, False, time.time() - start_time)
            return []

        duration = time.time() - start_time
        track_search_query(search_type.value, True, duration, len(results))
        logger.info(
            "Search complete",
            query=query,
            search_type=search_type.value,
            candidates=sum(len(batch) for batch in batches),
            results=len(results),
            duration_ms=round(duration * 1000, 2),
        )
        return results

    def rank(
        self,
        query: str,
        filters: FilterOptions,
        batches: Iterable[Tuple[RecordKind, List[Dict[str, Any]]]],
        now: Optional[datetime] = None,
    ) -> List[ScoredResult]:
        """
        Score, filter and sort already fetched candidates.

        Args:
            query: Free-text query
            filters: Explicit filters and sort order
            batches: (kind, rows) pairs in emission order
            now: Reference time for recency bonuses

        Returns:
            Ranked results
        """
        tokens = tokenize(query)
        intent = parse_intent(query)
        now = now or datetime.now(timezone.utc)

        scored: List[ScoredResult] = []
        for kind, rows in batches:
            for row in rows:
                if not isinstance(row, dict):
                    continue
                record = build_record(kind, row)
                outcome = self.scorer.score(record, query, tokens, now=now)
                matched = isinstance(outcome, Matched)
                track_scored_record(record.kind.value, matched)
                if matched:
                    scored.append(ScoredResult(record=record, relevance=outcome.score))

        filtered = apply_filters(scored, filters, intent)
        return sort_results(filtered, filters.sort)

    async def _fetch_candidates(self, kind: RecordKind) -> List[Dict[str, Any]]:
        """Fetch candidates for one kind, degrading to [] on any failure."""
        try:
            rows = await asyncio.wait_for(
                self.repository.fetch_records(kind, self.max_candidates_per_kind),
                timeout=self.fetch_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Record source timed out, continuing without kind",
                record_kind=kind.value,
                timeout_seconds=self.fetch_timeout_seconds,
            )
            return []
        except Exception as e:
            logger.warning(
                "Record source failed, continuing without kind",
                record_kind=kind.value,
                error=str(e),
            )
            return []

        return list(rows or [])

    async def _find_matching(
        self, kind: RecordKind, columns: Sequence[str], text: str, limit: int
    ) -> List[Dict[str, Any]]:
        try:
            return await asyncio.wait_for(
                self.repository.find_matching(kind, columns, text, limit),
                timeout=self.fetch_timeout_seconds,
            )
        except Exception as e:
            logger.warning(
                "Suggestion lookup failed", record_kind=kind.value, error=str(e)
            )
            return []

    async def get_location_suggestions(self, query: str) -> List[str]:
        """
        Suggest known locations containing the query text.

        Draws on property and tour locations and tour package cities.

        Args:
            query: Partial location text

        Returns:
            Up to 10 distinct locations in discovery order
        """
        text = query.strip()
        if not text:
            return []

        limit = self.LOCATION_SUGGESTION_LIMIT
        sources = tuple(
            (kind, RECORD_SOURCES[kind].location_column)
            for kind in (RecordKind.PROPERTY, RecordKind.TOUR, RecordKind.TOUR_PACKAGE)
        )
        batches = await asyncio.gather(
            *(self._find_matching(kind, [column], text, limit) for kind, column in sources)
        )

        suggestions: List[str] = []
        for (_, column), rows in zip(sources, batches):
            for row in rows:
                value = row.get(column)
                if value and value not in suggestions:
                    suggestions.append(value)

        return suggestions[:limit]

    async def get_suggestions(self, query: str, limit: int = 5) -> List[str]:
        """
        Autocomplete suggestions from property and tour titles/locations.

        Args:
            query: Partial query text (at least 2 characters)
            limit: Maximum number of suggestions

        Returns:
            Distinct titles and locations containing the text
        """
        text = query.strip()
        if len(text) < 2:
            return []

        columns = ("title", "location")
        kinds = (RecordKind.PROPERTY, RecordKind.TOUR)
        batches = await asyncio.gather(
            *(self._find_matching(kind, columns, text, limit) for kind in kinds)
        )

        needle = text.lower()
        suggestions: List[str] = []
        for rows in batches:
            for row in rows:
                for column in columns:
                    value = row.get(column)
                    if value and needle in str(value).lower() and value not in suggestions:
                        suggestions.append(value)

        return suggestions[:limit]

    def get_popular_searches(self) -> List[str]:
        """Curated searches shown before the user types."""
        return list(POPULAR_SEARCHES)
