"""Read-only cost, budget and settlement queries."""

from tripbook.queries.aggregation import (
    ALL_OWNERS,
    day_actual_cost,
    day_cost_breakdown,
    day_estimated_cost,
    expenses_by_category,
    owner_expense_map,
    remaining_budget,
    total_actual_expenses,
    total_estimated_cost,
    total_expenses_by_owner,
)
from tripbook.queries.settlement import compute_settlement
from tripbook.queries.summary import UnknownOwnerFilterError, build_budget_summary

__all__ = [
    "ALL_OWNERS",
    "day_actual_cost",
    "day_cost_breakdown",
    "day_estimated_cost",
    "expenses_by_category",
    "owner_expense_map",
    "remaining_budget",
    "total_actual_expenses",
    "total_estimated_cost",
    "total_expenses_by_owner",
    "compute_settlement",
    "UnknownOwnerFilterError",
    "build_budget_summary",
]
