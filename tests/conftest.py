"""
Test configuration and fixtures
"""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from marketplace_search.app import app
from marketplace_search.dependencies import get_search_service
from marketplace_search.domain.entities import RecordKind
from marketplace_search.repositories.record_repository import InMemoryRecordRepository
from marketplace_search.services.search_service import SmartSearchService

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    """Fixed reference time for recency scoring."""
    return NOW


@pytest.fixture
def kigali_apartment():
    """Well-reviewed Kigali apartment open to monthly stays."""
    return {
        "id": 1,
        "title": "Kigali City Apartment",
        "location": "Kigali",
        "amenities": ["wifi"],
        "rating": 4.8,
        "review_count": 40,
        "price_per_night": 80,
        "available_for_monthly_rental": True,
    }


@pytest.fixture
def musanze_cabin():
    """Modest cabin far from Kigali."""
    return {
        "id": 2,
        "title": "Musanze Cabin",
        "location": "Musanze",
        "rating": 3.0,
        "review_count": 2,
        "price_per_night": 40,
    }


@pytest.fixture
def gorilla_tour():
    return {
        "id": "t-1",
        "title": "Gorilla Trekking Adventure",
        "location": "Musanze",
        "category": "Wildlife",
        "description": "Full day trek in Volcanoes National Park",
        "rating": 4.9,
        "review_count": 120,
        "price_per_adult": 1500,
    }


@pytest.fixture
def lake_package():
    return {
        "id": "p-1",
        "title": "Lake Kivu Weekend",
        "city": "Rubavu",
        "category": "Relaxation",
        "rating": 4.2,
        "review_count": 8,
        "price_per_person": 350,
    }


@pytest.fixture
def airport_shuttle():
    return {
        "id": "v-1",
        "title": "Airport Shuttle Minibus",
        "vehicle_type": "Minibus",
        "from_location": "Kigali International Airport",
        "to_location": "Kigali City Center",
        "rating": 4.5,
        "review_count": 15,
        "price_per_day": 90,
    }


@pytest.fixture
def repository(kigali_apartment, musanze_cabin, gorilla_tour, lake_package, airport_shuttle):
    """In-memory repository holding one or two rows per kind."""
    return InMemoryRecordRepository(
        {
            RecordKind.PROPERTY: [kigali_apartment, musanze_cabin],
            RecordKind.TOUR: [gorilla_tour],
            RecordKind.TOUR_PACKAGE: [lake_package],
            RecordKind.TRANSPORT: [airport_shuttle],
        }
    )


@pytest.fixture
def service(repository):
    """Search service over the in-memory repository."""
    return SmartSearchService(repository=repository, max_candidates_per_kind=50)


@pytest.fixture
def client(service):
    """Create a test client with the search service dependency overridden."""

    async def override_get_search_service():
        return service

    app.dependency_overrides[get_search_service] = override_get_search_service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
