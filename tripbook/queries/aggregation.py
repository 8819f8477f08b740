"""
Cost Aggregation

DESIGN DECISION: Every function here is a pure read over one Trip
snapshot. Nothing is cached and nothing is written back, so calling
the same function twice on the same trip always gives the same answer.

Two expense pools exist side by side:
- global expenses (Trip.expenses), optionally linked to a day
- activity expenses (ScheduledActivity.expenses)
"Actual" totals always merge both pools. "Estimated" totals only look at
activity estimated costs.

All amounts are base-currency Decimals.
"""

from collections.abc import Iterator
from decimal import Decimal
from typing import Union

from tripbook.models.budget import CategoryTotal, DayCost
from tripbook.models.trip import ActivityExpense, ExpenseCategory, Trip, TripExpense

ALL_OWNERS = "all"

ZERO = Decimal(0)

Expense = Union[TripExpense, ActivityExpense]


def _matches(owner_filter: str, owner: str) -> bool:
    return owner_filter == ALL_OWNERS or owner == owner_filter


def iter_activity_expenses(trip: Trip) -> Iterator[ActivityExpense]:
    for day in trip.days:
        for activity in day.activities:
            yield from activity.expenses


def iter_all_expenses(trip: Trip) -> Iterator[Expense]:
    """Global expenses first, then activity expenses in day order."""
    yield from trip.expenses
    yield from iter_activity_expenses(trip)


# =============================================================================
# ESTIMATES
# =============================================================================

def total_estimated_cost(trip: Trip) -> Decimal:
    """Sum of estimated_cost over every activity of every day."""
    return sum(
        (a.estimated_cost for day in trip.days for a in day.activities),
        ZERO,
    )


def day_estimated_cost(trip: Trip, day_id: str) -> Decimal:
    day = trip.find_day(day_id)
    if day is None:
        return ZERO
    return sum((a.estimated_cost for a in day.activities), ZERO)


# =============================================================================
# ACTUALS
# =============================================================================

def day_actual_cost(trip: Trip, day_id: str, owner: str = ALL_OWNERS) -> Decimal:
    """
    What was actually spent on a day.

    The day's activity expenses plus the global expenses linked to the
    day by id. Unknown day ids cost nothing.
    """
    day = trip.find_day(day_id)
    if day is None:
        return ZERO
    activity_total = sum(
        (e.amount for a in day.activities for e in a.expenses if _matches(owner, e.owner)),
        ZERO,
    )
    global_total = sum(
        (e.amount for e in trip.expenses if e.day_id == day_id and _matches(owner, e.owner)),
        ZERO,
    )
    return activity_total + global_total


def total_actual_expenses(trip: Trip) -> Decimal:
    """All global plus all activity expenses, trip-wide."""
    return sum((e.amount for e in iter_all_expenses(trip)), ZERO)


def total_expenses_by_owner(trip: Trip, owner: str = ALL_OWNERS) -> Decimal:
    """Same as total_actual_expenses, restricted to one owner unless "all"."""
    return sum(
        (e.amount for e in iter_all_expenses(trip) if _matches(owner, e.owner)),
        ZERO,
    )


def owner_expense_map(trip: Trip) -> dict[str, Decimal]:
    """
    Totals keyed by owner id, plus an "all" entry.

    Every owner on the trip appears, with zero if they spent nothing.
    Expenses naming an owner that is not on the trip only count
    toward "all".
    """
    totals = {o.id: ZERO for o in trip.owners}
    grand_total = ZERO
    for e in iter_all_expenses(trip):
        grand_total += e.amount
        if e.owner in totals:
            totals[e.owner] += e.amount
    return {ALL_OWNERS: grand_total, **totals}


def expenses_by_category(trip: Trip, owner: str = ALL_OWNERS) -> list[CategoryTotal]:
    """
    Global expenses grouped by category, in category declaration order.

    Activity expenses have no category and are not included.
    Categories with nothing spent are left out.
    """
    totals = {category: ZERO for category in ExpenseCategory}
    for e in trip.expenses:
        if _matches(owner, e.owner):
            totals[e.category] += e.amount
    return [
        CategoryTotal(category=category, total=total)
        for category, total in totals.items()
        if total > 0
    ]


def remaining_budget(trip: Trip) -> Decimal:
    """Budget minus everything spent by everyone. Negative when over."""
    return trip.total_budget - total_actual_expenses(trip)


def day_cost_breakdown(trip: Trip, owner: str = ALL_OWNERS) -> list[DayCost]:
    return [
        DayCost(
            day_id=day.id,
            day_number=day.day_number,
            estimated=day_estimated_cost(trip, day.id),
            actual=day_actual_cost(trip, day.id, owner),
        )
        for day in trip.days
    ]
