"""
Search module for marketplace smart search.

Provides tokenization, intent parsing, fuzzy matching, relevance scoring
and the filter/sort pipeline.
"""
from .filters import apply_filters, record_price, sort_results
from .fuzzy_matcher import FuzzyMatcher
from .intent_parser import parse_intent
from .relevance_scorer import RelevanceScorer
from .tokenizer import expand_token, normalize, tokenize

__all__ = [
    "FuzzyMatcher",
    "RelevanceScorer",
    "apply_filters",
    "expand_token",
    "normalize",
    "parse_intent",
    "record_price",
    "sort_results",
    "tokenize",
]
