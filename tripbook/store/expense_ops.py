"""
Expense and owner reducers: Trip -> Trip.

CRITICAL: Every expense must be attributed to an owner that exists on
the trip. An add or update that names an unknown owner is refused and
the trip is returned unchanged.

Owner removal is the one operation that touches both expense pools:
global expenses and every activity's expenses are reassigned to the
shared owner in the same rewrite that drops the owner.
"""

from typing import Any, Optional

from tripbook.models.trip import (
    SHARED_OWNER_ID,
    ActivityExpense,
    DayPlan,
    OwnerConfig,
    PendingCameraExpense,
    ScheduledActivity,
    Trip,
    TripExpense,
)
from tripbook.store.helpers import map_activities, merge_model, replace_where


def owner_is_known(trip: Trip, owner_id: str) -> bool:
    return owner_id in trip.owner_ids


def count_owner_expenses(trip: Trip, owner_id: str) -> int:
    """Number of global and activity expenses attributed to an owner."""
    count = sum(1 for e in trip.expenses if e.owner == owner_id)
    for day in trip.days:
        for activity in day.activities:
            count += sum(1 for e in activity.expenses if e.owner == owner_id)
    return count


# =============================================================================
# GLOBAL EXPENSES
# =============================================================================

def add_expense(trip: Trip, expense: TripExpense) -> Trip:
    if not owner_is_known(trip, expense.owner):
        return trip
    return trip.model_copy(update={"expenses": trip.expenses + (expense,)})


def update_expense(trip: Trip, expense_id: str, updates: dict[str, Any]) -> Trip:
    """Partial update of a global expense. The id cannot be changed."""
    if "owner" in updates and not owner_is_known(trip, updates["owner"]):
        return trip
    expenses = replace_where(trip.expenses, expense_id, lambda e: merge_model(e, updates))
    if expenses is trip.expenses:
        return trip
    return trip.model_copy(update={"expenses": expenses})


def remove_expense(trip: Trip, expense_id: str) -> Trip:
    expenses = tuple(e for e in trip.expenses if e.id != expense_id)
    if len(expenses) == len(trip.expenses):
        return trip
    return trip.model_copy(update={"expenses": expenses})


# =============================================================================
# ACTIVITY EXPENSES
# =============================================================================

def add_activity_expense(
    trip: Trip,
    day_id: str,
    activity_id: str,
    expense: ActivityExpense,
) -> Trip:
    if not owner_is_known(trip, expense.owner):
        return trip
    return map_activities(
        trip, day_id, activity_id,
        lambda a: a.model_copy(update={"expenses": a.expenses + (expense,)}),
    )


def update_activity_expense(
    trip: Trip,
    day_id: str,
    activity_id: str,
    expense_id: str,
    updates: dict[str, Any],
) -> Trip:
    if "owner" in updates and not owner_is_known(trip, updates["owner"]):
        return trip

    def rewrite(a: ScheduledActivity) -> ScheduledActivity:
        expenses = replace_where(a.expenses, expense_id, lambda e: merge_model(e, updates))
        if expenses is a.expenses:
            return a
        return a.model_copy(update={"expenses": expenses})

    return map_activities(trip, day_id, activity_id, rewrite)


def remove_activity_expense(
    trip: Trip,
    day_id: str,
    activity_id: str,
    expense_id: str,
) -> Trip:
    def rewrite(a: ScheduledActivity) -> ScheduledActivity:
        expenses = tuple(e for e in a.expenses if e.id != expense_id)
        if len(expenses) == len(a.expenses):
            return a
        return a.model_copy(update={"expenses": expenses})

    return map_activities(trip, day_id, activity_id, rewrite)


def set_pending_camera_expense(trip: Trip, pending: Optional[PendingCameraExpense]) -> Trip:
    if trip.pending_camera_expense == pending:
        return trip
    return trip.model_copy(update={"pending_camera_expense": pending})


# =============================================================================
# OWNERS
# =============================================================================

def add_owner(trip: Trip, owner: OwnerConfig) -> Trip:
    """Register a billable party. An id already on the trip is a no-op."""
    if owner_is_known(trip, owner.id):
        return trip
    return trip.model_copy(update={"owners": trip.owners + (owner,)})


def update_owner(trip: Trip, owner_id: str, updates: dict[str, Any]) -> Trip:
    """Rename or recolor an owner. The id is immutable."""
    owners = replace_where(trip.owners, owner_id, lambda o: merge_model(o, updates))
    if owners is trip.owners:
        return trip
    return trip.model_copy(update={"owners": owners})


def _reassign(expenses: tuple, owner_id: str) -> tuple:
    if not any(e.owner == owner_id for e in expenses):
        return expenses
    return tuple(
        e.model_copy(update={"owner": SHARED_OWNER_ID}) if e.owner == owner_id else e
        for e in expenses
    )


def _reassign_day(day: DayPlan, owner_id: str) -> DayPlan:
    changed = False
    activities = []
    for activity in day.activities:
        expenses = _reassign(activity.expenses, owner_id)
        if expenses is not activity.expenses:
            activity = activity.model_copy(update={"expenses": expenses})
            changed = True
        activities.append(activity)
    if not changed:
        return day
    return day.model_copy(update={"activities": tuple(activities)})


def remove_owner(trip: Trip, owner_id: str) -> Trip:
    """
    Drop an owner and hand their expenses to the shared pool.

    The shared owner can never be removed; asking to is a no-op, as is
    removing an id that is not on the trip.
    """
    if owner_id == SHARED_OWNER_ID or not owner_is_known(trip, owner_id):
        return trip
    return trip.model_copy(update={
        "owners": tuple(o for o in trip.owners if o.id != owner_id),
        "expenses": _reassign(trip.expenses, owner_id),
        "days": tuple(_reassign_day(d, owner_id) for d in trip.days),
    })
