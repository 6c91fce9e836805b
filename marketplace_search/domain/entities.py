"""
Domain entities for marketplace search.

Candidate records (stays, tours, tour packages, vehicles), the options that
constrain a search, and the scored results handed back to callers.
These entities are framework-agnostic and contain only business logic.
"""

import math
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Set, Tuple, Type, Union

from .normalization import normalize

# Fractional seconds of any precision, padded or cut to microseconds before parsing
FRACTIONAL_SECONDS = re.compile(r"\.(\d+)")


class RecordKind(str, Enum):
    """Kinds of bookable records the marketplace lists."""

    PROPERTY = "property"
    TOUR = "tour"
    TOUR_PACKAGE = "tour_package"
    TRANSPORT = "transport"


class SearchType(str, Enum):
    """Which record kinds a search covers."""

    ALL = "all"
    PROPERTIES = "properties"
    TOURS = "tours"
    TRANSPORT = "transport"

    def record_kinds(self) -> List[RecordKind]:
        """
        Record kinds fetched for this search type, in emission order.

        Tours cover both single tours and tour packages.
        """
        if self is SearchType.PROPERTIES:
            return [RecordKind.PROPERTY]
        if self is SearchType.TOURS:
            return [RecordKind.TOUR, RecordKind.TOUR_PACKAGE]
        if self is SearchType.TRANSPORT:
            return [RecordKind.TRANSPORT]
        return [
            RecordKind.PROPERTY,
            RecordKind.TOUR,
            RecordKind.TOUR_PACKAGE,
            RecordKind.TRANSPORT,
        ]


class MonthlyMode(str, Enum):
    """Long-stay constraint for property listings."""

    ALL = "all"
    MONTHLY_AVAILABLE = "monthly_available"
    MONTHLY_ONLY = "monthly_only"
    NIGHTLY_ONLY = "nightly_only"


class SortOption(str, Enum):
    """Result orderings offered by the search page."""

    RELEVANCE = "relevance"
    PRICE_LOW = "price_low"
    PRICE_HIGH = "price_high"
    RATING = "rating"
    NEWEST = "newest"
    POPULAR = "popular"


@dataclass(frozen=True)
class Intent:
    """
    Constraints read directly from the free-text query.

    Absent minimums are None, never 0.
    """

    monthly_intent: bool = False
    bedrooms_min: Optional[int] = None
    bathrooms_min: Optional[int] = None
    guests_min: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "monthly_intent": self.monthly_intent,
            "bedrooms_min": self.bedrooms_min,
            "bathrooms_min": self.bathrooms_min,
            "guests_min": self.guests_min,
        }


@dataclass
class FilterOptions:
    """
    Explicit constraints supplied alongside the query.

    Attributes:
        search_type: Record kinds to search
        category: Exact (normalized) category to keep
        price_min: Inclusive lower price bound, None/0 for no bound
        price_max: Inclusive upper price bound, None/0 for no bound
        rating: Minimum rating, 0 for no constraint
        location: Free-text location, every word must match
        currency: Display currency requested by the caller (not converted)
        monthly_mode: Long-stay constraint for properties
        amenities: Amenities every property must offer
        sort: Result ordering
    """

    search_type: SearchType = SearchType.ALL
    category: Optional[str] = None
    price_min: Optional[float] = None
    price_max: Optional[float] = None
    rating: float = 0
    location: Optional[str] = None
    currency: Optional[str] = None
    monthly_mode: MonthlyMode = MonthlyMode.ALL
    amenities: List[str] = field(default_factory=list)
    sort: SortOption = SortOption.RELEVANCE


@dataclass(frozen=True)
class FieldBundle:
    """Normalized text projection of a record, used only for scoring."""

    title: str = ""
    location: str = ""
    description: str = ""
    category: str = ""
    amenities: str = ""
    all: str = ""


def to_number(value: Any) -> float:
    """Coerce a record field to a number, treating junk and gaps as 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def to_datetime(value: Any) -> Optional[datetime]:
    """Parse a created_at style field into an aware datetime."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(
                FRACTIONAL_SECONDS.sub(
                    lambda m: "." + m.group(1)[:6].ljust(6, "0"), value.replace("Z", "+00:00")
                )
            )
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class SearchableRecord:
    """
    A candidate row from one record source.

    The raw row is kept unmodified in ``data``; subclasses only declare
    which source fields carry location, category and price for their kind.
    """

    data: Dict[str, Any]

    kind: ClassVar[RecordKind]
    LOCATION_FIELDS: ClassVar[Tuple[str, ...]] = ("location",)
    CATEGORY_FIELDS: ClassVar[Tuple[str, ...]] = ("category", "property_type", "vehicle_type")
    PRICE_FIELDS: ClassVar[Tuple[str, ...]] = (
        "price_per_night",
        "price_per_person",
        "price_per_adult",
        "price_per_day",
    )

    def _first_text(self, fields: Tuple[str, ...]) -> str:
        for name in fields:
            value = self.data.get(name)
            if value:
                return str(value)
        return ""

    @property
    def id(self) -> Any:
        return self.data.get("id")

    @property
    def title(self) -> str:
        return self._first_text(("title", "name"))

    @property
    def description(self) -> str:
        return self._first_text(("description",))

    @property
    def rating(self) -> float:
        return to_number(self.data.get("rating"))

    @property
    def review_count(self) -> float:
        return to_number(self.data.get("review_count"))

    @property
    def created_at(self) -> Optional[datetime]:
        return to_datetime(self.data.get("created_at"))

    def location_text(self) -> str:
        return self._first_text(self.LOCATION_FIELDS)

    def category_text(self) -> str:
        return self._first_text(self.CATEGORY_FIELDS)

    def amenities_text(self) -> str:
        amenities = self.data.get("amenities")
        if isinstance(amenities, (list, tuple)):
            return " ".join(str(item) for item in amenities if item)
        if isinstance(amenities, str):
            return amenities
        return ""

    def amenity_set(self) -> Set[str]:
        """Normalized amenity names offered by the record."""
        amenities = self.data.get("amenities")
        if isinstance(amenities, str):
            amenities = amenities.split(",")
        if not isinstance(amenities, (list, tuple)):
            return set()
        return {normalize(item) for item in amenities if normalize(item)}

    def price(self) -> float:
        """First populated price field for this kind, 0 when none is set."""
        for name in self.PRICE_FIELDS:
            value = to_number(self.data.get(name))
            if value:
                return value
        return 0.0

    def is_monthly_available(self) -> bool:
        return False

    def to_field_bundle(self) -> FieldBundle:
        title = self.title
        location = self.location_text()
        description = self.description
        category = self.category_text()
        amenities = self.amenities_text()

        return FieldBundle(
            title=normalize(title),
            location=normalize(location),
            description=normalize(description),
            category=normalize(category),
            amenities=normalize(amenities),
            all=normalize(
                " ".join([title, location, description, category, amenities, self.kind.value])
            ),
        )


@dataclass
class PropertyRecord(SearchableRecord):
    """A stay listing (apartment, villa, guesthouse...)."""

    kind: ClassVar[RecordKind] = RecordKind.PROPERTY
    LOCATION_FIELDS: ClassVar[Tuple[str, ...]] = ("location", "address", "city")

    @property
    def monthly_only(self) -> bool:
        return bool(self.data.get("monthly_only_listing"))

    def is_monthly_available(self) -> bool:
        return self.monthly_only or bool(self.data.get("available_for_monthly_rental"))

    def price(self) -> float:
        """Monthly price for monthly-only listings, otherwise nightly with monthly fallback."""
        if self.monthly_only:
            return to_number(self.data.get("price_per_month"))
        nightly = to_number(self.data.get("price_per_night"))
        return nightly or to_number(self.data.get("price_per_month"))


@dataclass
class TourRecord(SearchableRecord):
    kind: ClassVar[RecordKind] = RecordKind.TOUR
    LOCATION_FIELDS: ClassVar[Tuple[str, ...]] = ("location", "city")


@dataclass
class TourPackageRecord(SearchableRecord):
    kind: ClassVar[RecordKind] = RecordKind.TOUR_PACKAGE
    LOCATION_FIELDS: ClassVar[Tuple[str, ...]] = ("city", "location")


@dataclass
class TransportRecord(SearchableRecord):
    """A rentable vehicle or transfer route."""

    kind: ClassVar[RecordKind] = RecordKind.TRANSPORT
    LOCATION_FIELDS: ClassVar[Tuple[str, ...]] = ("from_location", "location", "to_location")


RECORD_TYPES: Dict[RecordKind, Type[SearchableRecord]] = {
    RecordKind.PROPERTY: PropertyRecord,
    RecordKind.TOUR: TourRecord,
    RecordKind.TOUR_PACKAGE: TourPackageRecord,
    RecordKind.TRANSPORT: TransportRecord,
}


def build_record(kind: RecordKind, data: Dict[str, Any]) -> SearchableRecord:
    """Wrap a raw source row in the record variant for its kind."""
    return RECORD_TYPES[RecordKind(kind)](data=data)


@dataclass(frozen=True)
class Matched:
    """Record passed the relevance gate with the given score."""

    score: float


@dataclass(frozen=True)
class Excluded:
    """Record failed the relevance gate and must not be surfaced."""

    reason: str = "coverage"


ScoreOutcome = Union[Matched, Excluded]


@dataclass
class ScoredResult:
    """A surfaced search hit: the untouched record plus its relevance."""

    record: SearchableRecord
    relevance: float

    @property
    def search_type(self) -> RecordKind:
        return self.record.kind

    def to_dict(self) -> dict:
        """Original row with ``searchType`` and ``relevance`` added."""
        result = dict(self.record.data)
        result["searchType"] = self.search_type.value
        result["relevance"] = round(self.relevance, 2)
        return result
