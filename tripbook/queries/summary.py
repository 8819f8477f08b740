"""
Budget summary

Bundles every figure the budget view shows into one BudgetSummary,
computed from a single trip snapshot.
"""

from tripbook.models.budget import BudgetSummary
from tripbook.models.trip import Trip
from tripbook.queries.aggregation import (
    ALL_OWNERS,
    day_cost_breakdown,
    expenses_by_category,
    owner_expense_map,
    remaining_budget,
    total_estimated_cost,
)
from tripbook.queries.settlement import compute_settlement


class UnknownOwnerFilterError(ValueError):
    """Owner filter names an owner the trip does not have."""
    pass


def build_budget_summary(trip: Trip, owner_filter: str = ALL_OWNERS) -> BudgetSummary:
    """
    Build the budget summary for a trip.

    The owner filter narrows `filtered_actual`, the category breakdown
    and the per-day actuals. The remaining budget and the settlement
    always cover every owner.

    Raises:
        UnknownOwnerFilterError: owner_filter is neither "all" nor an owner id
    """
    if owner_filter != ALL_OWNERS and owner_filter not in trip.owner_ids:
        raise UnknownOwnerFilterError(f"Unknown owner: {owner_filter}")

    by_owner = owner_expense_map(trip)
    return BudgetSummary(
        trip_id=trip.id,
        owner_filter=owner_filter,
        total_budget=trip.total_budget,
        estimated_total=total_estimated_cost(trip),
        actual_total=by_owner[ALL_OWNERS],
        filtered_actual=by_owner[owner_filter],
        remaining=remaining_budget(trip),
        by_category=expenses_by_category(trip, owner_filter),
        by_owner={k: v for k, v in by_owner.items() if k != ALL_OWNERS},
        settlement=compute_settlement(trip),
        days=day_cost_breakdown(trip, owner_filter),
    )
