"""
Day reducers: Trip -> Trip.

Every operation that changes which days exist or their order renumbers
day_number to 1..N. The "currently viewed" day follows its day through
reorders; after a removal the index is clamped into range.
"""

from datetime import date
from typing import Any, Optional

from tripbook.models.trip import AccommodationInfo, DayPlan, Trip
from tripbook.store.helpers import map_days, merge_model, new_id, renumber_days


def _with_days(trip: Trip, days: tuple[DayPlan, ...], current_day_id: Optional[str] = None) -> Trip:
    """Renumber and keep the viewed day selected where it still exists."""
    days = renumber_days(days)
    index = trip.current_day_index
    if current_day_id is not None:
        index = next((i for i, d in enumerate(days) if d.id == current_day_id), 0)
    index = max(0, min(index, len(days) - 1))
    return trip.model_copy(update={"days": days, "current_day_index": index})


def _current_day_id(trip: Trip) -> Optional[str]:
    day = trip.current_day
    return day.id if day else None


def set_current_day(trip: Trip, index: int) -> Trip:
    if not 0 <= index < len(trip.days) or index == trip.current_day_index:
        return trip
    return trip.model_copy(update={"current_day_index": index})


def go_to_next_day(trip: Trip) -> Trip:
    return set_current_day(trip, min(trip.current_day_index + 1, len(trip.days) - 1))


def go_to_prev_day(trip: Trip) -> Trip:
    return set_current_day(trip, max(trip.current_day_index - 1, 0))


def add_day(trip: Trip, day: DayPlan, insert_at: Optional[int] = None) -> Trip:
    """Append a day, or insert it at a position when one is given."""
    days = list(trip.days)
    if insert_at is not None and 0 <= insert_at <= len(days):
        days.insert(insert_at, day)
    else:
        days.append(day)
    return _with_days(trip, tuple(days), _current_day_id(trip))


def remove_day(trip: Trip, day_id: str) -> Trip:
    if trip.find_day(day_id) is None:
        return trip
    days = tuple(d for d in trip.days if d.id != day_id)
    return _with_days(trip, days)


def update_day(trip: Trip, day_id: str, updates: dict[str, Any]) -> Trip:
    """Partial update of one day. id and day_number cannot be changed."""
    return map_days(
        trip,
        day_id,
        lambda day: merge_model(day, updates, protected=("id", "day_number")),
    )


def reorder_days(trip: Trip, old_index: int, new_index: int) -> Trip:
    """Move the day at old_index to new_index (remove, then insert)."""
    count = len(trip.days)
    if not (0 <= old_index < count and 0 <= new_index < count) or old_index == new_index:
        return trip
    days = list(trip.days)
    moved = days.pop(old_index)
    days.insert(new_index, moved)
    return _with_days(trip, tuple(days), _current_day_id(trip))


def sort_days_by_date(trip: Trip) -> Trip:
    """Order days chronologically; undated days go last, in their current order."""
    ordered = sorted(
        trip.days,
        key=lambda d: (d.day_date is None, d.day_date or date.min),
    )
    if all(a is b for a, b in zip(ordered, trip.days)):
        return trip
    return _with_days(trip, tuple(ordered), _current_day_id(trip))


def duplicate_day(trip: Trip, day_id: str) -> Trip:
    """
    Append a copy of a day.

    Activities get fresh ids; completion, expenses and media start over.
    """
    day = trip.find_day(day_id)
    if day is None:
        return trip
    activities = tuple(
        a.model_copy(update={
            "id": new_id(),
            "is_completed": False,
            "is_skipped": False,
            "expenses": (),
            "media": (),
        })
        for a in day.activities
    )
    copy = day.model_copy(update={"id": new_id(), "activities": activities})
    return _with_days(trip, trip.days + (copy,), _current_day_id(trip))


def update_day_notes(trip: Trip, day_id: str, notes: str) -> Trip:
    return map_days(
        trip,
        day_id,
        lambda day: day if day.notes == notes else day.model_copy(update={"notes": notes}),
    )


def update_accommodation_by_destination(
    trip: Trip,
    destination_id: str,
    accommodation: Optional[AccommodationInfo],
) -> Trip:
    """Set the same accommodation on every day at a destination."""
    if not any(d.destination_id == destination_id for d in trip.days):
        return trip
    days = tuple(
        d.model_copy(update={"accommodation": accommodation})
        if d.destination_id == destination_id else d
        for d in trip.days
    )
    return trip.model_copy(update={"days": days})
