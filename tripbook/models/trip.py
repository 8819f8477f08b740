"""
Core Trip Data Models for Tripbook

These models define the schema of the trip tree:
Trip -> DayPlan -> ScheduledActivity -> ActivityExpense, plus the
trip-wide records (global expenses, owners, transport, destinations).

They are designed to:
1. Be immutable - the store produces new objects, never edits old ones
2. Read and write the camelCase JSON snapshot format unchanged
3. Keep every amount in the base currency at a fixed precision
4. Enforce the owner invariant at construction time

DESIGN DECISION: Models are frozen and collections are tuples.
A consumer holding a Trip can never change what the store owns, and
untouched sub-trees are shared between successive snapshots.
"""

import re
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Annotated, Any, Optional
from uuid import uuid4

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


SHARED_OWNER_ID = "shared"
STORAGE_DECIMAL_PLACES = 6
AMOUNT_QUANTUM = Decimal(1).scaleb(-STORAGE_DECIMAL_PLACES)


def new_id() -> str:
    """Fresh entity identifier."""
    return str(uuid4())


def utc_now() -> datetime:
    """Current time, timezone-aware UTC."""
    return datetime.now(timezone.utc)


def quantize_amount(value: Decimal) -> Decimal:
    """Round an amount to the persisted precision."""
    try:
        return value.quantize(AMOUNT_QUANTUM)
    except InvalidOperation as e:
        raise ValueError("Amount is too large to store") from e


def _amount_to_json(value: Decimal) -> int | float:
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def _empty_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


# Decimal stored at 6 places, written to JSON as a plain number
Amount = Annotated[
    Decimal,
    AfterValidator(quantize_amount),
    PlainSerializer(_amount_to_json, return_type=float, when_used="json"),
]

# Legacy snapshots use "" for unknown dates
OptionalDate = Annotated[Optional[date], BeforeValidator(_empty_to_none)]


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class ActivityType(str, Enum):
    """Category of a plannable item."""
    ATTRACTION = "attraction"
    SHOPPING = "shopping"
    MEAL = "meal"
    TRANSPORT = "transport"
    FREE = "free"


class ExpenseCategory(str, Enum):
    """
    Category of a global (trip-wide) expense.

    DESIGN DECISION: A closed set rather than free text keeps the
    per-category budget breakdown stable.
    """
    ACCOMMODATION = "accommodation"
    FOOD = "food"
    TRANSPORT = "transport"
    ATTRACTION = "attraction"
    SHOPPING = "shopping"
    ENTERTAINMENT = "entertainment"
    OTHER = "other"


class Currency(str, Enum):
    """Currencies the planner can display and recognise on receipts."""
    EUR = "EUR"
    KRW = "KRW"
    USD = "USD"
    JPY = "JPY"
    CNY = "CNY"

    @property
    def symbol(self) -> str:
        return CURRENCY_SYMBOLS[self]

    @property
    def has_minor_unit(self) -> bool:
        """KRW and JPY amounts are never shown with cents."""
        return self not in ZERO_DECIMAL_CURRENCIES


CURRENCY_SYMBOLS: dict[Currency, str] = {
    Currency.EUR: "€",
    Currency.KRW: "₩",
    Currency.USD: "$",
    Currency.JPY: "¥",
    Currency.CNY: "¥",
}

ZERO_DECIMAL_CURRENCIES = frozenset({Currency.KRW, Currency.JPY})


class TransportType(str, Enum):
    """Mode of an inter-city transport leg."""
    TRAIN = "train"
    BUS = "bus"
    TAXI = "taxi"
    RENTAL_CAR = "rental_car"
    FLIGHT = "flight"


class LocalTransportType(str, Enum):
    """Mode of getting around inside a destination."""
    TRAIN = "train"
    BUS = "bus"
    TAXI = "taxi"
    RENTAL_CAR = "rental_car"
    WALK = "walk"
    METRO = "metro"


class ImmigrationType(str, Enum):
    DEPARTURE = "departure"
    ARRIVAL = "arrival"


class MediaType(str, Enum):
    IMAGE = "image"
    VIDEO = "video"


# =============================================================================
# BASE
# =============================================================================

class TripRecord(BaseModel):
    """
    Base for every record in the trip tree.

    Frozen, camelCase on the wire, snake_case in Python.
    Unknown keys in snapshots are ignored; unknown keys in partial
    updates are rejected by the store helpers.
    """
    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )


# =============================================================================
# OWNERS AND EXPENSES
# =============================================================================

class OwnerConfig(TripRecord):
    """
    A billable party.

    The owner with id "shared" is the reserved pool that is split evenly
    among all real owners. It always exists and can never be removed.
    """

    id: str = Field(..., min_length=1)
    name: str = Field(..., description="Display name")
    color: str = Field(default="gray", description="Color tag used by the UI")

    @property
    def is_shared(self) -> bool:
        return self.id == SHARED_OWNER_ID


def default_owners() -> tuple[OwnerConfig, ...]:
    """Owner list of a brand-new trip: only the shared pool."""
    return (OwnerConfig(id=SHARED_OWNER_ID, name="Shared", color="gray"),)


class ActivityExpense(TripRecord):
    """
    Money spent on one activity.

    The amount is in the base currency. `currency` only records what
    the user typed the amount in.
    """

    id: str = Field(default_factory=new_id)
    amount: Amount
    currency: str = Field(default="EUR")
    description: str = Field(default="")
    created_at: datetime = Field(default_factory=utc_now)
    owner: str = Field(default=SHARED_OWNER_ID)


class TripExpense(TripRecord):
    """
    A global expense, not tied to an activity.

    May be linked to a day (for the per-day actual cost) and carries a
    budget category.
    """

    id: str = Field(default_factory=new_id)
    day_id: Optional[str] = Field(default=None)
    category: ExpenseCategory = Field(default=ExpenseCategory.OTHER)
    amount: Amount
    currency: str = Field(default="EUR")
    description: str = Field(default="")
    expense_date: OptionalDate = Field(default=None, alias="date")
    owner: str = Field(default=SHARED_OWNER_ID)

    @field_validator('day_id', mode='before')
    @classmethod
    def blank_day_is_unlinked(cls, v: Any) -> Any:
        return _empty_to_none(v)


class PendingCameraExpense(TripRecord):
    """Amount handed over from a receipt scan, waiting for the entry form."""

    amount: Amount
    currency: str


# =============================================================================
# ACTIVITY
# =============================================================================

class BookingInfo(TripRecord):
    confirmation_number: Optional[str] = None
    voucher_url: Optional[str] = None
    voucher_file: Optional[str] = None
    notes: str = ""
    booking_date: Optional[str] = None
    provider: Optional[str] = None


class MediaItem(TripRecord):
    id: str = Field(default_factory=new_id)
    type: MediaType = MediaType.IMAGE
    data_url: str
    thumbnail: Optional[str] = None
    caption: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)


_DURATION_RE = re.compile(
    r"^(?:(?P<hours>\d+(?:\.\d+)?)\s*h(?:ours?|rs?)?)?"
    r"\s*(?:(?P<minutes>\d+)\s*m(?:in(?:utes?|s)?)?)?$",
    re.IGNORECASE,
)


def parse_duration_minutes(token: str) -> Optional[int]:
    """
    Parse a free-form duration token into minutes.

    "2h" -> 120, "90min" -> 90, "1h30m" -> 90, "1.5h" -> 90.
    Empty or unrecognised tokens return None.
    """
    token = (token or "").strip()
    if not token:
        return None
    match = _DURATION_RE.match(token)
    if match is None or not (match.group("hours") or match.group("minutes")):
        return None
    hours = Decimal(match.group("hours") or 0)
    minutes = int(match.group("minutes") or 0)
    return int(hours * 60) + minutes


class ScheduledActivity(TripRecord):
    """
    One plannable item within a day.

    `estimated_cost` is in the base currency regardless of what the user
    is viewing. Completed and skipped are mutually exclusive.
    """

    id: str = Field(default_factory=new_id)
    content_id: Optional[str] = None
    name: str
    name_ko: str = ""
    time: str = Field(default="", description="Start time, e.g. 09:30")
    duration: str = Field(default="", description="Free-form, e.g. 2h or 90min")
    type: ActivityType = ActivityType.ATTRACTION
    estimated_cost: Amount = Decimal(0)
    currency: str = "EUR"
    is_booked: bool = False
    is_completed: bool = False
    is_skipped: bool = False
    booking: Optional[BookingInfo] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    memos: tuple[str, ...] = ()
    expenses: tuple[ActivityExpense, ...] = ()
    media: tuple[MediaItem, ...] = ()

    @field_validator('memos', 'expenses', 'media', mode='before')
    @classmethod
    def null_is_empty(cls, v: Any) -> Any:
        return () if v is None else v

    @model_validator(mode='after')
    def validate_status_flags(self) -> 'ScheduledActivity':
        if self.is_completed and self.is_skipped:
            raise ValueError("An activity cannot be both completed and skipped")
        return self

    @property
    def duration_minutes(self) -> Optional[int]:
        return parse_duration_minutes(self.duration)

    @property
    def display_name(self) -> str:
        return self.name_ko or self.name


# =============================================================================
# DAY
# =============================================================================

class FlightInfo(TripRecord):
    id: str = Field(default_factory=new_id)
    airline: str = ""
    flight_number: str = ""
    departure: str = ""
    arrival: str = ""
    departure_time: str = ""
    arrival_time: str = ""
    confirmation_number: Optional[str] = None
    notes: Optional[str] = None


class AccommodationInfo(TripRecord):
    id: str = Field(default_factory=new_id)
    name: str
    address: str = ""
    check_in: Optional[str] = None
    check_out: Optional[str] = None
    confirmation_number: Optional[str] = None
    cost: Amount = Decimal(0)
    currency: str = "EUR"
    notes: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None


class DayPlan(TripRecord):
    """
    One calendar day of a trip.

    `day_number` is 1-based and always equals the day's position in the
    trip; the store renumbers after every structural change.
    """

    id: str = Field(default_factory=new_id)
    day_number: int = Field(default=1, ge=1)
    day_date: OptionalDate = Field(default=None, alias="date")
    destination: str = ""
    destination_id: str = ""
    activities: tuple[ScheduledActivity, ...] = ()
    notes: str = ""
    flights: tuple[FlightInfo, ...] = ()
    accommodation: Optional[AccommodationInfo] = None

    @field_validator('activities', 'flights', mode='before')
    @classmethod
    def null_is_empty(cls, v: Any) -> Any:
        return () if v is None else v

    def find_activity(self, activity_id: str) -> Optional[ScheduledActivity]:
        return next((a for a in self.activities if a.id == activity_id), None)


# =============================================================================
# TRIP-WIDE RECORDS
# =============================================================================

class RestaurantComment(TripRecord):
    id: str = Field(default_factory=new_id)
    restaurant_id: str
    text: str
    rating: Optional[float] = None
    comment_date: OptionalDate = Field(default=None, alias="date")


class ImmigrationSchedule(TripRecord):
    id: str = Field(default_factory=new_id)
    type: ImmigrationType
    schedule_date: OptionalDate = Field(default=None, alias="date")
    time: str = ""
    airport: str = ""
    airline: Optional[str] = None
    flight_number: Optional[str] = None
    terminal: Optional[str] = None
    gate: Optional[str] = None
    confirmation_number: Optional[str] = None
    notes: Optional[str] = None


class InterCityTransport(TripRecord):
    """A leg between the destinations of two days."""

    id: str = Field(default_factory=new_id)
    from_day_id: str
    to_day_id: str
    type: TransportType
    departure: Optional[str] = None
    arrival: Optional[str] = None
    departure_time: Optional[str] = None
    arrival_time: Optional[str] = None
    operator: Optional[str] = None
    confirmation_number: Optional[str] = None
    estimated_cost: Optional[Amount] = None
    currency: Optional[str] = None
    notes: Optional[str] = None


class Phrase(TripRecord):
    situation: str
    spanish: str = ""
    pronunciation: str = ""
    korean: str = ""


class Restaurant(TripRecord):
    id: str
    name: str
    cuisine: str = ""
    price_range: str = ""
    rating: float = 0
    address: str = ""
    description: str = ""
    must_try: tuple[str, ...] = ()
    lat: float = 0
    lng: float = 0


class Content(TripRecord):
    """A suggested activity at a destination."""

    id: str
    name: str
    name_ko: str = ""
    type: ActivityType = ActivityType.ATTRACTION
    description: str = ""
    estimated_cost: Amount = Decimal(0)
    currency: str = "EUR"
    duration: str = ""
    address: str = ""
    lat: float = 0
    lng: float = 0
    image_url: Optional[str] = None
    tips: tuple[str, ...] = ()


class Transportation(TripRecord):
    from_: str = Field(alias="from")
    to: str
    type: LocalTransportType
    duration: str = ""
    estimated_cost: Amount = Decimal(0)
    currency: str = "EUR"
    notes: str = ""
    booking_url: Optional[str] = None


class WeatherInfo(TripRecord):
    avg_temp_high: float
    avg_temp_low: float
    rainfall: str = ""
    description: str = ""
    clothing: str = ""


class Destination(TripRecord):
    """A user-defined destination and its travel guide data."""

    id: str
    name: str
    name_ko: str = ""
    lat: float = 0
    lng: float = 0
    timezone: str = ""
    description: str = ""
    tips: tuple[str, ...] = ()
    phrases: tuple[Phrase, ...] = ()
    restaurants: tuple[Restaurant, ...] = ()
    contents: tuple[Content, ...] = ()
    transportation: tuple[Transportation, ...] = ()
    weather_info: Optional[WeatherInfo] = None


# =============================================================================
# TRIP
# =============================================================================

class Trip(TripRecord):
    """
    One complete travel plan.

    CRITICAL: Exactly one owner has the reserved id "shared".
    A trip built without it gets it seeded; a trip with two is rejected.
    """

    id: str = Field(default_factory=new_id)
    trip_name: str = ""
    start_date: OptionalDate = None
    end_date: OptionalDate = None
    days: tuple[DayPlan, ...] = ()
    current_day_index: int = Field(default=0, ge=0)
    total_budget: Amount = Decimal(0)
    expenses: tuple[TripExpense, ...] = ()
    restaurant_comments: tuple[RestaurantComment, ...] = ()
    custom_destinations: tuple[Destination, ...] = ()
    immigration_schedules: tuple[ImmigrationSchedule, ...] = ()
    inter_city_transports: tuple[InterCityTransport, ...] = ()
    owners: tuple[OwnerConfig, ...] = Field(default_factory=default_owners)
    pending_camera_expense: Optional[PendingCameraExpense] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    emoji: Optional[str] = None

    @field_validator(
        'days', 'expenses', 'restaurant_comments', 'custom_destinations',
        'immigration_schedules', 'inter_city_transports',
        mode='before',
    )
    @classmethod
    def null_is_empty(cls, v: Any) -> Any:
        return () if v is None else v

    @field_validator('owners', mode='before')
    @classmethod
    def null_owners_are_default(cls, v: Any) -> Any:
        return default_owners() if not v else v

    @field_validator('owners')
    @classmethod
    def validate_owners(cls, v: tuple[OwnerConfig, ...]) -> tuple[OwnerConfig, ...]:
        """Seed the shared pool if missing, reject duplicates."""
        ids = [o.id for o in v]
        if len(ids) != len(set(ids)):
            raise ValueError("Owner ids must be unique")
        if SHARED_OWNER_ID not in ids:
            return default_owners() + v
        return v

    @property
    def owner_ids(self) -> frozenset[str]:
        return frozenset(o.id for o in self.owners)

    @property
    def non_shared_owners(self) -> tuple[OwnerConfig, ...]:
        return tuple(o for o in self.owners if not o.is_shared)

    @property
    def current_day(self) -> Optional[DayPlan]:
        if 0 <= self.current_day_index < len(self.days):
            return self.days[self.current_day_index]
        return None

    def find_day(self, day_id: str) -> Optional[DayPlan]:
        return next((d for d in self.days if d.id == day_id), None)


class TripDraft(BaseModel):
    """
    What a caller supplies to create a trip.

    The store fills in identity, timestamps and the shared owner.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    trip_name: str = Field(..., min_length=1)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    days: tuple[DayPlan, ...] = ()
    total_budget: Decimal = Field(default=Decimal(0), ge=0)
    owners: tuple[OwnerConfig, ...] = ()
    emoji: Optional[str] = None
