"""
Marketplace search API router.

Handles smart search and suggestion endpoints with validation and
error handling.
"""

from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from ..dependencies import get_search_service
from ..domain.entities import FilterOptions, MonthlyMode, SearchType, SortOption
from ..domain.exceptions import ValidationException
from ..search.intent_parser import parse_intent
from ..services.search_service import SmartSearchService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1/search", tags=["search"])


# Response Models
class SearchResponse(BaseModel):
    """Ranked search results."""

    success: bool = True
    query: str
    count: int
    intent: dict = Field(description="Constraints read from the query text")
    currency: Optional[str] = None
    results: List[dict]


class SuggestionsResponse(BaseModel):
    """Suggestion list response."""

    success: bool = True
    query: str = ""
    suggestions: List[str]


class ErrorResponse(BaseModel):
    """Error response model."""

    success: bool = False
    error: str
    message: str
    details: dict = {}


def _validate_filters(filters: FilterOptions) -> None:
    if filters.price_min and filters.price_max and filters.price_min > filters.price_max:
        raise ValidationException(
            "price_min", filters.price_min, "price_min cannot exceed price_max"
        )


@router.get(
    "",
    response_model=SearchResponse,
    responses={
        200: {"description": "Ranked results (possibly empty)"},
        400: {"description": "Invalid filters", "model": ErrorResponse},
    },
    summary="Smart search across stays, tours and transport",
    description="""
    Free-text search with fuzzy matching and relevance ranking.

    The query may carry implicit constraints such as "monthly",
    "3 bedrooms" or "4 guests"; these are applied to stays in addition
    to the explicit filters.
    """,
)
async def search(
    q: str = Query("", max_length=200, description="Free-text query"),
    search_type: SearchType = Query(SearchType.ALL, alias="type"),
    category: Optional[str] = Query(None, max_length=100),
    price_min: Optional[float] = Query(None, ge=0),
    price_max: Optional[float] = Query(None, ge=0),
    location: Optional[str] = Query(None, max_length=200),
    rating: float = Query(0, ge=0, le=5),
    currency: Optional[str] = Query(None, min_length=3, max_length=3),
    monthly_mode: MonthlyMode = Query(MonthlyMode.ALL),
    amenities: List[str] = Query(default=[]),
    sort: SortOption = Query(SortOption.RELEVANCE),
    service: SmartSearchService = Depends(get_search_service),
):
    """Search the marketplace and return ranked results."""
    filters = FilterOptions(
        search_type=search_type,
        category=category,
        price_min=price_min,
        price_max=price_max,
        rating=rating,
        location=location,
        currency=currency,
        monthly_mode=monthly_mode,
        amenities=amenities,
        sort=sort,
    )

    try:
        _validate_filters(filters)
    except ValidationException as e:
        logger.warning("Invalid search filters", error=e.message)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "success": False,
                "error": "validation_error",
                "message": e.message,
                "details": e.details,
            },
        )

    results = await service.search(q, filters)

    return SearchResponse(
        query=q,
        count=len(results),
        intent=parse_intent(q).to_dict(),
        currency=currency,
        results=[result.to_dict() for result in results],
    )


@router.get(
    "/suggestions",
    response_model=SuggestionsResponse,
    summary="Autocomplete suggestions",
)
async def suggestions(
    q: str = Query("", max_length=100),
    limit: int = Query(5, ge=1, le=20),
    service: SmartSearchService = Depends(get_search_service),
):
    """Titles and locations containing the partial query."""
    return SuggestionsResponse(query=q, suggestions=await service.get_suggestions(q, limit))


@router.get(
    "/locations",
    response_model=SuggestionsResponse,
    summary="Location suggestions",
)
async def location_suggestions(
    q: str = Query("", max_length=100),
    service: SmartSearchService = Depends(get_search_service),
):
    """Known locations containing the partial text."""
    return SuggestionsResponse(query=q, suggestions=await service.get_location_suggestions(q))


@router.get(
    "/popular",
    response_model=SuggestionsResponse,
    summary="Popular searches",
)
async def popular_searches(service: SmartSearchService = Depends(get_search_service)):
    """Curated searches to show before the user types."""
    return SuggestionsResponse(suggestions=service.get_popular_searches())
