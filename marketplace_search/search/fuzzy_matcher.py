"""
Fuzzy matching engine for marketplace search.

Provides typo-tolerant word matching ("kigaly" -> "kigali") using a
bounded Levenshtein distance, used only after exact and substring
matching have failed.
"""

import logging

from rapidfuzz.distance import Levenshtein

logger = logging.getLogger(__name__)


class FuzzyMatcher:
    """
    Bounded edit-distance matcher for query tokens against record text.

    Allowed distance grows with token length so short tokens stay strict:
    - up to 4 chars: 1 edit
    - up to 8 chars: 2 edits
    - longer: 3 edits
    """

    # Words scanned per field, keeps long descriptions cheap
    DEFAULT_MAX_WORDS = 120

    def __init__(self, max_words: int = DEFAULT_MAX_WORDS):
        """
        Initialize fuzzy matcher.

        Args:
            max_words: Maximum number of words of a text to compare against
        """
        self.max_words = max_words

    @staticmethod
    def max_distance_for(token: str) -> int:
        """Edit budget for a token of this length."""
        if len(token) <= 4:
            return 1
        if len(token) <= 8:
            return 2
        return 3

    @staticmethod
    def bounded_distance(word: str, token: str, max_distance: int) -> int:
        """
        Levenshtein distance capped at ``max_distance + 1``.

        The computation stops as soon as the distance is known to exceed
        the cap, so cost is bounded by the budget rather than word length.
        """
        return Levenshtein.distance(word, token, score_cutoff=max_distance)

    def fuzzy_contains(self, text: str, token: str) -> bool:
        """
        Check whether any word of ``text`` is within the edit budget of ``token``.

        Both arguments are expected to be normalized already.

        Examples:
            fuzzy_contains("kigali city apartment", "kigaly") -> True
            fuzzy_contains("musanze cabin", "kigali") -> False
        """
        if not text or not token:
            return False

        max_distance = self.max_distance_for(token)
        for word in text.split()[: self.max_words]:
            if abs(len(word) - len(token)) > max_distance:
                continue
            if self.bounded_distance(word, token, max_distance) <= max_distance:
                return True
        return False

    def get_stats(self) -> dict:
        """
        Get matcher configuration.

        Returns:
            Dictionary with matcher settings
        """
        return {
            "max_words": self.max_words,
            "algorithm": "rapidfuzz-levenshtein",
            "distance_budget": {"<=4": 1, "<=8": 2, ">8": 3},
        }
