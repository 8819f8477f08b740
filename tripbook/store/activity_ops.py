"""
Activity reducers: Trip -> Trip.

Each operation targets one day and, where it names one, one activity.
An unknown day or activity id leaves the trip untouched.
"""

from typing import Any, Callable, Optional

from tripbook.models.trip import BookingInfo, DayPlan, MediaItem, ScheduledActivity, Trip
from tripbook.store.helpers import map_activities, map_days, merge_model, new_id


def _with_activities(day: DayPlan, activities: tuple[ScheduledActivity, ...]) -> DayPlan:
    return day.model_copy(update={"activities": activities})


def _rewrite_activity(
    trip: Trip,
    day_id: str,
    activity_id: str,
    updates: Callable[[ScheduledActivity], dict[str, Any]],
) -> Trip:
    return map_activities(
        trip, day_id, activity_id,
        lambda a: a.model_copy(update=updates(a)),
    )


def add_activity(
    trip: Trip,
    day_id: str,
    activity: ScheduledActivity,
    insert_at: Optional[int] = None,
) -> Trip:
    """Append an activity to a day, or insert it at a valid index."""
    def rewrite(day: DayPlan) -> DayPlan:
        items = list(day.activities)
        if insert_at is not None and 0 <= insert_at <= len(items):
            items.insert(insert_at, activity)
        else:
            items.append(activity)
        return _with_activities(day, tuple(items))

    return map_days(trip, day_id, rewrite)


def remove_activity(trip: Trip, day_id: str, activity_id: str) -> Trip:
    def rewrite(day: DayPlan) -> DayPlan:
        if day.find_activity(activity_id) is None:
            return day
        return _with_activities(day, tuple(a for a in day.activities if a.id != activity_id))

    return map_days(trip, day_id, rewrite)


def update_activity(
    trip: Trip,
    day_id: str,
    activity_id: str,
    updates: dict[str, Any],
) -> Trip:
    """
    Partial update of one activity. The id cannot be changed.

    Setting is_completed or is_skipped to True clears the other flag
    unless the update sets it explicitly.
    """
    updates = dict(updates)
    for flag, other in (("is_completed", "is_skipped"), ("is_skipped", "is_completed")):
        if updates.get(flag) is True and other not in updates:
            updates[other] = False
    return map_activities(trip, day_id, activity_id, lambda a: merge_model(a, updates))


def reorder_activities(trip: Trip, day_id: str, old_index: int, new_index: int) -> Trip:
    """
    Move an activity within its day.

    CRITICAL: Time slots belong to positions, not to activities.
    After the move every activity takes the start time that was at its
    new index before the move.
    """
    def rewrite(day: DayPlan) -> DayPlan:
        count = len(day.activities)
        if not (0 <= old_index < count and 0 <= new_index < count) or old_index == new_index:
            return day
        time_slots = [a.time for a in day.activities]
        items = list(day.activities)
        moved = items.pop(old_index)
        items.insert(new_index, moved)
        return _with_activities(day, tuple(
            a if a.time == time_slots[i] else a.model_copy(update={"time": time_slots[i]})
            for i, a in enumerate(items)
        ))

    return map_days(trip, day_id, rewrite)


def update_booking(trip: Trip, day_id: str, activity_id: str, booking: BookingInfo) -> Trip:
    """Attach booking details; an activity with a booking is booked."""
    return _rewrite_activity(
        trip, day_id, activity_id,
        lambda a: {"booking": booking, "is_booked": True},
    )


def toggle_booked(trip: Trip, day_id: str, activity_id: str) -> Trip:
    return _rewrite_activity(
        trip, day_id, activity_id,
        lambda a: {"is_booked": not a.is_booked},
    )


def toggle_completed(trip: Trip, day_id: str, activity_id: str) -> Trip:
    return _rewrite_activity(
        trip, day_id, activity_id,
        lambda a: {"is_completed": not a.is_completed, "is_skipped": False},
    )


def toggle_skipped(trip: Trip, day_id: str, activity_id: str) -> Trip:
    return _rewrite_activity(
        trip, day_id, activity_id,
        lambda a: {"is_skipped": not a.is_skipped, "is_completed": False},
    )


def add_memo(trip: Trip, day_id: str, activity_id: str, text: str) -> Trip:
    return _rewrite_activity(
        trip, day_id, activity_id,
        lambda a: {"memos": a.memos + (text,)},
    )


def remove_memo(trip: Trip, day_id: str, activity_id: str, memo_index: int) -> Trip:
    def rewrite(a: ScheduledActivity) -> ScheduledActivity:
        if not 0 <= memo_index < len(a.memos):
            return a
        return a.model_copy(update={
            "memos": a.memos[:memo_index] + a.memos[memo_index + 1:],
        })

    return map_activities(trip, day_id, activity_id, rewrite)


def add_media(trip: Trip, day_id: str, activity_id: str, media: MediaItem) -> Trip:
    return _rewrite_activity(
        trip, day_id, activity_id,
        lambda a: {"media": a.media + (media,)},
    )


def remove_media(trip: Trip, day_id: str, activity_id: str, media_id: str) -> Trip:
    def rewrite(a: ScheduledActivity) -> ScheduledActivity:
        media = tuple(m for m in a.media if m.id != media_id)
        if len(media) == len(a.media):
            return a
        return a.model_copy(update={"media": media})

    return map_activities(trip, day_id, activity_id, rewrite)


def duplicate_activity(trip: Trip, day_id: str, activity_id: str) -> Trip:
    """
    Insert a copy right after the source activity.

    The copy keeps the plan (name, time, cost, notes) but starts
    unbooked and not done, with no expenses or media.
    """
    def rewrite(day: DayPlan) -> DayPlan:
        index = next((i for i, a in enumerate(day.activities) if a.id == activity_id), None)
        if index is None:
            return day
        copy = day.activities[index].model_copy(update={
            "id": new_id(),
            "is_completed": False,
            "is_skipped": False,
            "is_booked": False,
            "booking": None,
            "expenses": (),
            "media": (),
        })
        items = list(day.activities)
        items.insert(index + 1, copy)
        return _with_activities(day, tuple(items))

    return map_days(trip, day_id, rewrite)
