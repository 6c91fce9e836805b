"""
Supabase client configuration for the search service.

Provides a lazily created Supabase client for reading marketplace records.
"""

from typing import Optional

from supabase import Client, create_client

from ..config import settings
from ..domain.exceptions import ConfigurationException
from ..logging_config import get_logger

logger = get_logger(__name__)

# Global Supabase client instance
_supabase_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """
    Get or create Supabase client instance.

    Returns:
        Configured Supabase client

    Raises:
        ConfigurationException: If Supabase is not properly configured
    """
    global _supabase_client

    if not settings.supabase_configured:
        raise ConfigurationException(
            "SUPABASE_URL/SUPABASE_KEY", "Supabase credentials are not set"
        )

    if _supabase_client is None:
        logger.info("Initializing Supabase client", url=settings.SUPABASE_URL)
        _supabase_client = create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
        logger.info("Supabase client initialized successfully")

    return _supabase_client


def reset_supabase_client() -> None:
    """Drop the cached client (used on shutdown and in tests)."""
    global _supabase_client
    _supabase_client = None
