"""
Filter and sort pipeline for scored search results.

Applies explicit user filters and query-derived intent to scored results,
then orders them. Every predicate must pass for a result to be kept.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List

from ..domain.entities import (
    FilterOptions,
    Intent,
    MonthlyMode,
    PropertyRecord,
    ScoredResult,
    SearchableRecord,
    SortOption,
    to_number,
)
from ..domain.normalization import normalize

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def record_price(record: SearchableRecord) -> float:
    """Comparable price for a record, 0 when the record has none."""
    return record.price()


def _passes_category(record: SearchableRecord, filters: FilterOptions) -> bool:
    if not filters.category:
        return True

    category = normalize(record.category_text())
    if not category and not isinstance(record, PropertyRecord):
        return True
    return category == normalize(filters.category)


def _passes_monthly_mode(record: SearchableRecord, filters: FilterOptions) -> bool:
    if not isinstance(record, PropertyRecord):
        return True

    mode = MonthlyMode(filters.monthly_mode)
    if mode is MonthlyMode.MONTHLY_ONLY:
        return record.monthly_only
    if mode is MonthlyMode.MONTHLY_AVAILABLE:
        return record.is_monthly_available()
    if mode is MonthlyMode.NIGHTLY_ONLY:
        return not record.monthly_only
    return True


def _passes_intent(record: SearchableRecord, intent: Intent) -> bool:
    if not isinstance(record, PropertyRecord):
        return True

    if intent.monthly_intent and not record.is_monthly_available():
        return False

    minimums = (
        ("bedrooms", intent.bedrooms_min),
        ("bathrooms", intent.bathrooms_min),
        ("max_guests", intent.guests_min),
    )
    for field_name, minimum in minimums:
        if minimum is not None and to_number(record.data.get(field_name)) < minimum:
            return False
    return True


def _passes_amenities(record: SearchableRecord, filters: FilterOptions) -> bool:
    if not filters.amenities or not isinstance(record, PropertyRecord):
        return True

    offered = record.amenity_set()
    return all(normalize(amenity) in offered for amenity in filters.amenities if normalize(amenity))


def _passes_price(record: SearchableRecord, filters: FilterOptions) -> bool:
    if not filters.price_min and not filters.price_max:
        return True

    price = record_price(record)
    if filters.price_min and price < filters.price_min:
        return False
    if filters.price_max and price > filters.price_max:
        return False
    return True


def _passes_rating(record: SearchableRecord, filters: FilterOptions) -> bool:
    if not filters.rating:
        return True
    return record.rating > 0 and record.rating >= filters.rating


def _passes_location(record: SearchableRecord, filters: FilterOptions) -> bool:
    wanted = normalize(filters.location)
    if not wanted:
        return True

    location = normalize(record.location_text())
    return all(word in location for word in wanted.split(" "))


def passes_filters(result: ScoredResult, filters: FilterOptions, intent: Intent) -> bool:
    """Check a single result against every applicable predicate."""
    record = result.record
    return (
        _passes_category(record, filters)
        and _passes_monthly_mode(record, filters)
        and _passes_intent(record, intent)
        and _passes_amenities(record, filters)
        and _passes_price(record, filters)
        and _passes_rating(record, filters)
        and _passes_location(record, filters)
    )


def apply_filters(
    results: List[ScoredResult], filters: FilterOptions, intent: Intent
) -> List[ScoredResult]:
    """
    Drop results failing any filter.

    Args:
        results: Scored results in emission order
        filters: Explicit user filters
        intent: Constraints parsed from the query text

    Returns:
        Results that pass every predicate, order preserved
    """
    kept = [result for result in results if passes_filters(result, filters, intent)]
    logger.debug(f"Filters kept {len(kept)} of {len(results)} results")
    return kept


SORT_KEYS: Dict[SortOption, Callable[[ScoredResult], Any]] = {
    SortOption.RELEVANCE: lambda r: -r.relevance,
    SortOption.PRICE_LOW: lambda r: (record_price(r.record) <= 0, record_price(r.record)),
    SortOption.PRICE_HIGH: lambda r: -record_price(r.record),
    SortOption.RATING: lambda r: -r.record.rating,
    SortOption.NEWEST: lambda r: -(r.record.created_at or EPOCH).timestamp(),
    SortOption.POPULAR: lambda r: -(r.record.review_count * r.record.rating),
}


def sort_results(
    results: List[ScoredResult], sort: SortOption = SortOption.RELEVANCE
) -> List[ScoredResult]:
    """
    Order results for display.

    The sort is stable: ties keep emission order (properties, tours,
    tour packages, transport; source order within each kind).
    Unpriced records sort last for price_low.
    """
    return sorted(results, key=SORT_KEYS[SortOption(sort)])
