"""
Trip-collection reducers: StoreState -> StoreState.

These are the only reducers that see more than one trip. Refused
operations (deleting the last trip, switching to an unknown id) return
the state object they were given.
"""

from datetime import datetime
from typing import Optional

from tripbook.models.trip import SHARED_OWNER_ID, DayPlan, Trip, TripDraft, default_owners
from tripbook.store.helpers import StoreState, find_trip, new_id, renumber_days, utc_now


def set_trips(state: StoreState, trips: list[Trip], current_id: Optional[str] = None) -> StoreState:
    """Replace the whole collection, e.g. after loading from a persister."""
    trips = tuple(trips)
    return StoreState(
        trips=trips,
        current_trip_id=current_id or (trips[0].id if trips else ""),
    )


def create_trip(state: StoreState, draft: TripDraft, now: Optional[datetime] = None) -> tuple[StoreState, Trip]:
    """
    Append a new trip built from a draft and make it active.

    The shared owner is seeded ahead of any owners in the draft.
    """
    now = now or utc_now()
    owners = default_owners() + tuple(o for o in draft.owners if o.id != SHARED_OWNER_ID)
    trip = Trip(
        id=new_id(),
        trip_name=draft.trip_name,
        start_date=draft.start_date,
        end_date=draft.end_date,
        days=renumber_days(draft.days),
        total_budget=draft.total_budget,
        owners=owners,
        emoji=draft.emoji,
        created_at=now,
        updated_at=now,
    )
    new_state = state.model_copy(update={
        "trips": state.trips + (trip,),
        "current_trip_id": trip.id,
    })
    return new_state, trip


def can_delete_trip(state: StoreState, trip_id: str) -> bool:
    return len(state.trips) > 1 and find_trip(state, trip_id) is not None


def delete_trip(state: StoreState, trip_id: str) -> StoreState:
    """
    Remove a trip.

    CRITICAL: The last remaining trip is never deleted. If the active
    trip is removed, the first remaining trip becomes active.
    """
    if not can_delete_trip(state, trip_id):
        return state
    remaining = tuple(t for t in state.trips if t.id != trip_id)
    current_id = state.current_trip_id
    if current_id == trip_id:
        current_id = remaining[0].id
    return StoreState(trips=remaining, current_trip_id=current_id)


def switch_trip(state: StoreState, trip_id: str) -> StoreState:
    if trip_id == state.current_trip_id or find_trip(state, trip_id) is None:
        return state
    return state.model_copy(update={"current_trip_id": trip_id})


def _reset_day(day: DayPlan) -> DayPlan:
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
    return day.model_copy(update={"id": new_id(), "activities": activities})


def duplicate_trip(
    state: StoreState,
    trip_id: str,
    now: Optional[datetime] = None,
) -> tuple[StoreState, Optional[Trip]]:
    """
    Append a copy of a trip with fresh ids for the trip, days and activities.

    The copy keeps the plan but not the money: global and activity
    expenses, media and completion flags start over. Global expenses
    are dropped so no day link points back into the source trip.
    The active trip does not change.
    """
    source = find_trip(state, trip_id)
    if source is None:
        return state, None

    now = now or utc_now()
    copy = source.model_copy(update={
        "id": new_id(),
        "trip_name": f"{source.trip_name} (copy)",
        "days": tuple(_reset_day(d) for d in source.days),
        "expenses": (),
        "pending_camera_expense": None,
        "created_at": now,
        "updated_at": now,
    })
    return state.model_copy(update={"trips": state.trips + (copy,)}), copy


def add_imported_trips(state: StoreState, trips: list[Trip]) -> StoreState:
    """Append already-parsed trips; the first becomes active."""
    if not trips:
        return state
    return state.model_copy(update={
        "trips": state.trips + tuple(trips),
        "current_trip_id": trips[0].id,
    })
