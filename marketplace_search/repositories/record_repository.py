"""
Record repository interface (Abstract Base Class).

Defines the contract for fetching candidate marketplace records
independent of the underlying storage mechanism.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..domain.entities import RecordKind


@dataclass(frozen=True)
class RecordSource:
    """Where a record kind lives and which rows are publicly listed."""

    table: str
    published_column: str
    published_value: Any
    location_column: str = "location"


RECORD_SOURCES: Dict[RecordKind, RecordSource] = {
    RecordKind.PROPERTY: RecordSource("properties", "is_published", True),
    RecordKind.TOUR: RecordSource("tours", "is_published", True),
    RecordKind.TOUR_PACKAGE: RecordSource("tour_packages", "status", "approved", "city"),
    RecordKind.TRANSPORT: RecordSource(
        "transport_vehicles", "is_published", True, "from_location"
    ),
}


class IRecordRepository(ABC):
    """
    Abstract repository interface for candidate record retrieval.

    Implementations return raw rows (dicts) of published records only.
    """

    name: str = "records"

    @abstractmethod
    async def fetch_records(self, kind: RecordKind, limit: int) -> List[Dict[str, Any]]:
        """
        Fetch published records of one kind.

        Args:
            kind: Record kind to fetch
            limit: Maximum number of rows

        Returns:
            List of raw rows, empty if none
        """
        pass

    @abstractmethod
    async def find_matching(
        self, kind: RecordKind, columns: Sequence[str], text: str, limit: int
    ) -> List[Dict[str, Any]]:
        """
        Find published records where any column contains text (case-insensitive).

        Args:
            kind: Record kind to search
            columns: Columns to compare
            text: Text to look for
            limit: Maximum number of rows

        Returns:
            List of raw rows restricted to ``columns``
        """
        pass


class InMemoryRecordRepository(IRecordRepository):
    """
    Repository over rows held in memory.

    Used when no Supabase project is configured and in tests.
    """

    name = "memory"

    def __init__(self, records: Optional[Dict[RecordKind, Iterable[Dict[str, Any]]]] = None):
        self.records: Dict[RecordKind, List[Dict[str, Any]]] = {
            RecordKind(kind): list(rows) for kind, rows in (records or {}).items()
        }

    async def fetch_records(self, kind: RecordKind, limit: int) -> List[Dict[str, Any]]:
        return list(self.records.get(RecordKind(kind), [])[:limit])

    async def find_matching(
        self, kind: RecordKind, columns: Sequence[str], text: str, limit: int
    ) -> List[Dict[str, Any]]:
        needle = text.lower()
        matches = []
        for row in self.records.get(RecordKind(kind), []):
            if any(needle in str(row.get(column) or "").lower() for column in columns):
                matches.append({column: row.get(column) for column in columns})
            if len(matches) >= limit:
                break
        return matches
