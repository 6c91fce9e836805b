"""
Marketplace smart search service.

Ranks stays, tours, tour packages and transport vehicles against free-text
queries and explicit filters.
"""

__version__ = "1.0.0"
