"""
Query normalization and tokenization.

Turns raw search text into significant tokens and expands tokens with
marketplace synonyms (apartment/apt/flat, villa/house...).
"""

from typing import Dict, FrozenSet, List, Tuple

from ..domain.normalization import normalize

__all__ = ["STOP_WORDS", "SYNONYMS", "expand_token", "normalize", "tokenize"]

STOP_WORDS: FrozenSet[str] = frozenset(
    {"the", "a", "an", "in", "at", "to", "for", "of", "and", "with", "near"}
)

SYNONYMS: Dict[str, Tuple[str, ...]] = {
    "apartment": ("apt", "apartments", "flat"),
    "apartments": ("apartment", "apt", "flat"),
    "apt": ("apartment", "apartments", "flat"),
    "flat": ("apartment", "apt", "apartments"),
    "villa": ("house", "home"),
    "monthly": ("month", "longterm", "extended"),
    "month": ("monthly", "longterm", "extended"),
    "kigali": ("kigali city",),
    "guesthouse": ("guest", "house"),
}


def tokenize(text: str) -> List[str]:
    """
    Split text into significant tokens.

    Order is preserved and repeated words are kept, so a repeated word
    counts once per occurrence when scoring.

    Examples:
        "the hotel in kigali" -> ["hotel", "kigali"]
        "" -> []
    """
    normalized = normalize(text)
    if not normalized:
        return []

    return [
        token
        for token in normalized.split(" ")
        if len(token) > 1 and token not in STOP_WORDS
    ]


def expand_token(token: str) -> List[str]:
    """Token followed by its synonyms."""
    return [token, *SYNONYMS.get(token, ())]
