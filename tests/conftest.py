"""
Shared fixtures for Tripbook tests.

No real API calls in tests: the rate endpoint is served by
httpx.MockTransport and the OCR engine is a fake recogniser.
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from tripbook.audit import AuditLogger
from tripbook.models.trip import (
    SHARED_OWNER_ID,
    ActivityExpense,
    DayPlan,
    OwnerConfig,
    ScheduledActivity,
    Trip,
    TripExpense,
)
from tripbook.services.storage import InMemoryAuditStorage
from tripbook.store import StoreState, TripStore


FIXED_NOW = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)


class TickingClock:
    """Returns a later time on every call."""

    def __init__(self, start: datetime = FIXED_NOW, step: timedelta = timedelta(seconds=1)):
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        self.now += self.step
        return self.now


def make_activity(name: str, time: str = "", cost: str = "0", **kwargs) -> ScheduledActivity:
    return ScheduledActivity(name=name, time=time, estimated_cost=Decimal(cost), **kwargs)


def make_day(number: int, activities=(), day_date=None, **kwargs) -> DayPlan:
    return DayPlan(
        day_number=number,
        day_date=day_date,
        activities=tuple(activities),
        **kwargs,
    )


def make_trip(name: str = "Spain", days=(), owners=(), expenses=(), **kwargs) -> Trip:
    return Trip(
        trip_name=name,
        days=tuple(days),
        owners=(OwnerConfig(id=SHARED_OWNER_ID, name="Shared"),) + tuple(owners),
        expenses=tuple(expenses),
        created_at=FIXED_NOW,
        updated_at=FIXED_NOW,
        **kwargs,
    )


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def alice():
    return OwnerConfig(id="alice", name="Alice", color="blue")


@pytest.fixture
def bob():
    return OwnerConfig(id="bob", name="Bob", color="pink")


@pytest.fixture
def three_day_trip(alice, bob):
    """Three days, three activities on day 1, expenses in both pools."""
    day1 = make_day(
        1,
        [
            make_activity("Sagrada Familia", "09:00", "26", id="a1"),
            make_activity("Lunch", "12:00", "20", id="a2", type="meal"),
            make_activity(
                "Park Guell", "15:00", "10", id="a3",
                expenses=(ActivityExpense(id="ae1", amount=Decimal("12"), owner="alice"),),
            ),
        ],
        day_date=date(2026, 6, 1),
        id="d1",
    )
    day2 = make_day(2, [make_activity("Montjuic", "10:00", "5", id="a4")], day_date=date(2026, 6, 2), id="d2")
    day3 = make_day(3, day_date=date(2026, 6, 3), id="d3")
    return make_trip(
        days=[day1, day2, day3],
        owners=[alice, bob],
        expenses=[
            TripExpense(id="e1", amount=Decimal("100"), category="accommodation", day_id="d1", owner="shared"),
            TripExpense(id="e2", amount=Decimal("30"), category="food", owner="bob"),
        ],
        start_date=date(2026, 6, 1),
        end_date=date(2026, 6, 3),
        total_budget=Decimal("500"),
        id="trip-1",
    )


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def audit_logger(audit_storage):
    return AuditLogger(audit_storage)


@pytest.fixture
def store(three_day_trip, audit_logger, clock):
    return TripStore(
        StoreState(trips=(three_day_trip,), current_trip_id=three_day_trip.id),
        audit_logger=audit_logger,
        clock=clock,
    )
