"""
Supabase implementation of the record repository.

Reads published properties, tours, tour packages and transport vehicles
through the Supabase (PostgREST) client. The client is synchronous, so
each query runs in a worker thread to let fetches for different kinds
proceed concurrently.
"""

import asyncio
import re
import time
from typing import Any, Dict, List, Sequence

from supabase import Client

from ..domain.entities import RecordKind
from ..domain.exceptions import RecordSourceException
from ..logging_config import get_logger
from ..metrics import track_source_fetch
from .record_repository import RECORD_SOURCES, IRecordRepository

logger = get_logger(__name__)

# Characters with meaning inside a PostgREST or() filter
FILTER_RESERVED = re.compile(r"[,()%*\\]")


class SupabaseRecordRepository(IRecordRepository):
    """
    Record repository backed by Supabase tables.

    Tables:
    - properties (is_published = true)
    - tours (is_published = true)
    - tour_packages (status = 'approved')
    - transport_vehicles (is_published = true)
    """

    name = "supabase"

    def __init__(self, client: Client):
        """
        Initialize repository.

        Args:
            client: Configured Supabase client
        """
        self.client = client

    def _published(self, kind: RecordKind, columns: str = "*"):
        source = RECORD_SOURCES[RecordKind(kind)]
        return (
            self.client.table(source.table)
            .select(columns)
            .eq(source.published_column, source.published_value)
        )

    async def _execute(self, kind: RecordKind, build_query) -> List[Dict[str, Any]]:
        table = RECORD_SOURCES[RecordKind(kind)].table
        start_time = time.time()

        try:
            response = await asyncio.to_thread(lambda: build_query().execute())
        except Exception as e:
            track_source_fetch(RecordKind(kind).value, False, time.time() - start_time)
            logger.error("Supabase query failed", table=table, error=str(e))
            raise RecordSourceException(table, str(e)) from e

        rows = response.data or []
        track_source_fetch(RecordKind(kind).value, True, time.time() - start_time)
        logger.debug("Supabase query complete", table=table, rows=len(rows))
        return rows

    async def fetch_records(self, kind: RecordKind, limit: int) -> List[Dict[str, Any]]:
        return await self._execute(kind, lambda: self._published(kind).limit(limit))

    async def find_matching(
        self, kind: RecordKind, columns: Sequence[str], text: str, limit: int
    ) -> List[Dict[str, Any]]:
        needle = FILTER_RESERVED.sub(" ", text).strip()
        if not needle or not columns:
            return []

        condition = ",".join(f"{column}.ilike.%{needle}%" for column in columns)
        return await self._execute(
            kind,
            lambda: self._published(kind, ",".join(columns)).or_(condition).limit(limit),
        )
