"""
Intent parsing for free-text queries.

Reads structured constraints ("3 bedrooms", "4 guests", "monthly") straight
out of the query text so they can act as implicit filters.
"""

import logging
import re
from typing import Optional, Pattern

from ..domain.entities import Intent
from ..domain.normalization import normalize

logger = logging.getLogger(__name__)

MONTHLY_PATTERN = re.compile(r"\b(monthly|month|long term|longterm|extended stay|30 days|30 day)\b")
BEDROOMS_PATTERN = re.compile(r"\b(\d+) ?bed(room)?s?\b")
BATHROOMS_PATTERN = re.compile(r"\b(\d+) ?bath(room)?s?\b")
GUESTS_PATTERN = re.compile(r"\b(\d+) ?(guest|guests|people|persons)\b")


def _capture_int(pattern: Pattern, text: str) -> Optional[int]:
    match = pattern.search(text)
    if not match:
        return None
    return int(match.group(1))


def parse_intent(raw_query: str) -> Intent:
    """
    Extract monthly-stay intent and room/guest minimums from a query.

    Args:
        raw_query: Query exactly as the user typed it

    Returns:
        Intent with unmatched minimums left as None

    Example:
        >>> parse_intent("Monthly 2-bedroom flat for 4 people")
        Intent(monthly_intent=True, bedrooms_min=2, bathrooms_min=None, guests_min=4)
    """
    text = normalize(raw_query)
    if not text:
        return Intent()

    intent = Intent(
        monthly_intent=bool(MONTHLY_PATTERN.search(text)),
        bedrooms_min=_capture_int(BEDROOMS_PATTERN, text),
        bathrooms_min=_capture_int(BATHROOMS_PATTERN, text),
        guests_min=_capture_int(GUESTS_PATTERN, text),
    )
    logger.debug(f"Parsed intent for '{text}': {intent}")
    return intent
