"""
Repository layer for candidate record retrieval.
"""

from .record_repository import (
    RECORD_SOURCES,
    IRecordRepository,
    InMemoryRecordRepository,
    RecordSource,
)
from .supabase_repository import SupabaseRecordRepository

__all__ = [
    "IRecordRepository",
    "InMemoryRecordRepository",
    "RECORD_SOURCES",
    "RecordSource",
    "SupabaseRecordRepository",
]
