"""
Immutable-update helpers shared by every reducer module.

A reducer never edits a record. It builds a new one with model_copy,
which is shallow: every sub-tree it does not touch is shared with the
previous snapshot.

Reducers signal "nothing to do" by returning the object they were given.
update_current_trip relies on that identity to skip the updated_at stamp.
"""

from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from tripbook.models.trip import (
    DayPlan,
    ScheduledActivity,
    Trip,
    new_id,
    utc_now,
)

__all__ = [
    "StoreState",
    "current_trip",
    "find_trip",
    "map_activities",
    "map_days",
    "merge_model",
    "new_id",
    "renumber_days",
    "replace_where",
    "update_current_trip",
    "utc_now",
]

ModelT = TypeVar("ModelT", bound=BaseModel)
Clock = Callable[[], datetime]
TripUpdater = Callable[[Trip], Trip]


class StoreState(BaseModel):
    """
    The whole store: every trip plus which one is active.

    Frozen like the records it holds. An empty current_trip_id means
    no trip has been loaded yet.
    """
    model_config = ConfigDict(frozen=True)

    trips: tuple[Trip, ...] = Field(default_factory=tuple)
    current_trip_id: str = ""


def find_trip(state: StoreState, trip_id: str) -> Optional[Trip]:
    return next((t for t in state.trips if t.id == trip_id), None)


def current_trip(state: StoreState) -> Optional[Trip]:
    """Get the active trip, or None if the pointer is dangling."""
    return find_trip(state, state.current_trip_id)


def update_current_trip(
    state: StoreState,
    updater: TripUpdater,
    clock: Clock = utc_now,
) -> StoreState:
    """
    Apply a trip-level reducer to the active trip.

    The rewritten trip gets a fresh updated_at. If there is no active
    trip, or the reducer returned the trip unchanged, the original state
    object is returned.
    """
    trip = current_trip(state)
    if trip is None:
        return state

    updated = updater(trip)
    if updated is trip:
        return state

    updated = updated.model_copy(update={"updated_at": clock()})
    return state.model_copy(update={
        "trips": tuple(updated if t.id == trip.id else t for t in state.trips),
    })


def replace_where(
    items: tuple[ModelT, ...],
    item_id: str,
    fn: Callable[[ModelT], ModelT],
) -> tuple[ModelT, ...]:
    """
    Rewrite the item with a matching id.

    Returns the original tuple when nothing matched or fn changed nothing.
    """
    changed = False
    result = []
    for item in items:
        if getattr(item, "id", None) == item_id:
            new_item = fn(item)
            changed = changed or new_item is not item
            result.append(new_item)
        else:
            result.append(item)
    return tuple(result) if changed else items


def map_days(trip: Trip, day_id: str, fn: Callable[[DayPlan], DayPlan]) -> Trip:
    """Rewrite one day of a trip."""
    days = replace_where(trip.days, day_id, fn)
    if days is trip.days:
        return trip
    return trip.model_copy(update={"days": days})


def map_activities(
    trip: Trip,
    day_id: str,
    activity_id: str,
    fn: Callable[[ScheduledActivity], ScheduledActivity],
) -> Trip:
    """Rewrite one activity within one day."""
    def rewrite_day(day: DayPlan) -> DayPlan:
        activities = replace_where(day.activities, activity_id, fn)
        if activities is day.activities:
            return day
        return day.model_copy(update={"activities": activities})

    return map_days(trip, day_id, rewrite_day)


def renumber_days(days: Iterable[DayPlan]) -> tuple[DayPlan, ...]:
    """
    Set day_number to 1..N in list order.

    Days that already carry the right number are reused as-is.
    """
    return tuple(
        day if day.day_number == index else day.model_copy(update={"day_number": index})
        for index, day in enumerate(days, start=1)
    )


def merge_model(
    model: ModelT,
    updates: dict[str, Any],
    protected: Iterable[str] = ("id",),
) -> ModelT:
    """
    Apply a partial update and re-validate the result.

    Keys are Python field names. Protected fields are silently kept.
    Unknown keys raise ValueError. Nested records that are not updated
    are passed through without being copied.

    Raises:
        ValueError: unknown field name
        pydantic.ValidationError: the updated values are invalid
    """
    fields = type(model).model_fields
    unknown = sorted(set(updates) - set(fields))
    if unknown:
        raise ValueError(
            f"Unknown field(s) for {type(model).__name__}: {', '.join(unknown)}"
        )

    protected = set(protected)
    changes = {k: v for k, v in updates.items() if k not in protected}
    if not changes:
        return model

    values = {name: getattr(model, name) for name in fields}
    values.update(changes)
    return type(model).model_validate(values)
