"""
Tests for the Supabase record repository.

The Supabase client is replaced with a MagicMock; the fluent query
builder returns itself so every chained call lands on one mock.
"""

from unittest.mock import MagicMock

import pytest

from marketplace_search.domain.entities import RecordKind
from marketplace_search.domain.exceptions import ConfigurationException, RecordSourceException
from marketplace_search.repositories.supabase_repository import SupabaseRecordRepository


@pytest.fixture
def query():
    """Chainable query builder mock."""
    builder = MagicMock()
    builder.select.return_value = builder
    builder.eq.return_value = builder
    builder.limit.return_value = builder
    builder.or_.return_value = builder
    builder.execute.return_value = MagicMock(data=[{"id": 1, "title": "Kigali City Apartment"}])
    return builder


@pytest.fixture
def client(query):
    supabase = MagicMock()
    supabase.table.return_value = query
    return supabase


@pytest.fixture
def repository(client):
    return SupabaseRecordRepository(client)


class TestFetchRecords:
    """Test published record fetches."""

    @pytest.mark.asyncio
    async def test_fetch_properties(self, repository, client, query):
        rows = await repository.fetch_records(RecordKind.PROPERTY, 500)

        assert rows == [{"id": 1, "title": "Kigali City Apartment"}]
        client.table.assert_called_once_with("properties")
        query.select.assert_called_once_with("*")
        query.eq.assert_called_once_with("is_published", True)
        query.limit.assert_called_once_with(500)

    @pytest.mark.asyncio
    async def test_packages_require_approval(self, repository, client, query):
        await repository.fetch_records(RecordKind.TOUR_PACKAGE, 10)

        client.table.assert_called_once_with("tour_packages")
        query.eq.assert_called_once_with("status", "approved")

    @pytest.mark.asyncio
    async def test_transport_table(self, repository, client):
        await repository.fetch_records(RecordKind.TRANSPORT, 10)

        client.table.assert_called_once_with("transport_vehicles")

    @pytest.mark.asyncio
    async def test_empty_response(self, repository, query):
        query.execute.return_value = MagicMock(data=None)

        assert await repository.fetch_records(RecordKind.TOUR, 10) == []

    @pytest.mark.asyncio
    async def test_failure_raises(self, repository, query):
        query.execute.side_effect = ConnectionError("connection reset")

        with pytest.raises(RecordSourceException) as exc_info:
            await repository.fetch_records(RecordKind.TOUR, 10)

        assert exc_info.value.details["source"] == "tours"
        assert "connection reset" in exc_info.value.message


class TestFindMatching:
    """Test suggestion lookups."""

    @pytest.mark.asyncio
    async def test_ilike_condition(self, repository, query):
        await repository.find_matching(RecordKind.PROPERTY, ["title", "location"], "Kig", 5)

        query.select.assert_called_once_with("title,location")
        query.or_.assert_called_once_with("title.ilike.%Kig%,location.ilike.%Kig%")
        query.limit.assert_called_once_with(5)

    @pytest.mark.asyncio
    async def test_reserved_characters_stripped(self, repository, query):
        await repository.find_matching(RecordKind.TOUR_PACKAGE, ["city"], "ru,bavu)", 10)

        query.or_.assert_called_once_with("city.ilike.%ru bavu%")

    @pytest.mark.asyncio
    async def test_blank_text_skips_query(self, repository, client):
        assert await repository.find_matching(RecordKind.PROPERTY, ["title"], "%*", 5) == []
        client.table.assert_not_called()


class TestSupabaseClient:
    def test_unconfigured_client_raises(self, monkeypatch):
        from marketplace_search.config import settings
        from marketplace_search.core import supabase_client

        monkeypatch.setattr(settings, "SUPABASE_URL", "")
        supabase_client.reset_supabase_client()

        with pytest.raises(ConfigurationException):
            supabase_client.get_supabase_client()
