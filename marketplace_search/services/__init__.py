"""
Service layer - search orchestration.
"""

from .search_service import SmartSearchService

__all__ = ["SmartSearchService"]
