"""
Canonical text form used for every comparison in the search domain.

Records and queries are both reduced to lowercase ASCII words separated by
single spaces, so matching downstream is accent-, case- and
punctuation-insensitive.
"""

import re
import unicodedata

NON_ALPHANUMERIC = re.compile(r"[^a-z0-9\s]")
WHITESPACE = re.compile(r"\s+")


def normalize(text) -> str:
    """
    Normalize free text for comparison.

    Examples:
        "Kigali Café" -> "kigali cafe"
        "  2-Bedroom, APT!! " -> "2 bedroom apt"
    """
    if not text:
        return ""

    decomposed = unicodedata.normalize("NFKD", str(text))
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    cleaned = NON_ALPHANUMERIC.sub(" ", stripped.lower())
    return WHITESPACE.sub(" ", cleaned).strip()
