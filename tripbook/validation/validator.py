"""
Trip Consistency Validation

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Types, required fields, enum values, completed/skipped exclusivity,
  the shared-owner invariant
- Done by the pydantic models themselves when a Trip is built

STAGE 2 - CONSISTENCY VALIDATION (this module):
- Cross-record checks a single model cannot see: day numbering,
  duplicate ids, owner references, day links, date order
- Runs on a Trip that already passed stage 1

Errors make an import fail. Warnings are reported and the data is
kept as it is.

IMPORTANT: Validation NEVER silently fixes issues.
It reports them.
"""

from collections import Counter

from tripbook.models.trip import SHARED_OWNER_ID, Trip
from tripbook.models.validation import ValidationIssue, ValidationResult


class TripValidator:
    """Cross-record consistency checks for one trip."""

    def _check_days(self, trip: Trip) -> list[ValidationIssue]:
        issues = []

        for index, day in enumerate(trip.days):
            if day.day_number != index + 1:
                issues.append(ValidationIssue(
                    field=f"days[{index}].day_number",
                    issue_type="gap",
                    message=f"Day at position {index + 1} is numbered {day.day_number}",
                    severity="error",
                    suggested_fix="Renumber days 1..N in list order",
                ))

        duplicated = [i for i, n in Counter(d.id for d in trip.days).items() if n > 1]
        for day_id in duplicated:
            issues.append(ValidationIssue(
                field="days",
                issue_type="duplicate_id",
                message=f"Day id {day_id} is used more than once",
                severity="error",
            ))

        if trip.days and trip.current_day_index >= len(trip.days):
            issues.append(ValidationIssue(
                field="current_day_index",
                issue_type="out_of_range",
                message="Current day index points past the last day",
                severity="warning",
                suggested_fix="Reset to the first day",
            ))

        for index, day in enumerate(trip.days):
            repeated = [i for i, n in Counter(a.id for a in day.activities).items() if n > 1]
            for activity_id in repeated:
                issues.append(ValidationIssue(
                    field=f"days[{index}].activities",
                    issue_type="duplicate_id",
                    message=f"Activity id {activity_id} is used more than once on day {day.day_number}",
                    severity="warning",
                ))

        return issues

    def _check_owners(self, trip: Trip) -> list[ValidationIssue]:
        issues = []

        shared_count = sum(1 for o in trip.owners if o.id == SHARED_OWNER_ID)
        if shared_count != 1:
            issues.append(ValidationIssue(
                field="owners",
                issue_type="shared_owner",
                message=f"Expected exactly one shared owner, found {shared_count}",
                severity="error",
            ))

        known = trip.owner_ids
        for index, expense in enumerate(trip.expenses):
            if expense.owner not in known:
                issues.append(ValidationIssue(
                    field=f"expenses[{index}].owner",
                    issue_type="unknown_owner",
                    message=f"Expense '{expense.description}' belongs to unknown owner '{expense.owner}'",
                    severity="warning",
                    suggested_fix="Add the owner or reassign the expense to shared",
                ))

        for day in trip.days:
            for activity in day.activities:
                for expense in activity.expenses:
                    if expense.owner not in known:
                        issues.append(ValidationIssue(
                            field=f"activities[{activity.id}].expenses[{expense.id}].owner",
                            issue_type="unknown_owner",
                            message=f"Activity expense belongs to unknown owner '{expense.owner}'",
                            severity="warning",
                            suggested_fix="Add the owner or reassign the expense to shared",
                        ))

        return issues

    def _check_expenses(self, trip: Trip) -> list[ValidationIssue]:
        issues = []
        day_ids = {d.id for d in trip.days}

        for index, expense in enumerate(trip.expenses):
            if expense.day_id and expense.day_id not in day_ids:
                issues.append(ValidationIssue(
                    field=f"expenses[{index}].day_id",
                    issue_type="unknown_day",
                    message=f"Expense '{expense.description}' is linked to a day that does not exist",
                    severity="warning",
                    suggested_fix="Unlink the expense from its day",
                ))
            if expense.amount < 0:
                issues.append(ValidationIssue(
                    field=f"expenses[{index}].amount",
                    issue_type="invalid_value",
                    message="Expense amount is negative",
                    severity="warning",
                ))

        if trip.total_budget < 0:
            issues.append(ValidationIssue(
                field="total_budget",
                issue_type="invalid_value",
                message="Total budget cannot be negative",
                severity="error",
            ))

        return issues

    def _check_dates(self, trip: Trip) -> list[ValidationIssue]:
        issues = []

        if trip.start_date and trip.end_date and trip.start_date > trip.end_date:
            issues.append(ValidationIssue(
                field="end_date",
                issue_type="date_order",
                message="Trip ends before it starts",
                severity="warning",
                suggested_fix="Swap the start and end dates",
            ))

        if trip.start_date and trip.end_date:
            for index, day in enumerate(trip.days):
                if day.day_date and not trip.start_date <= day.day_date <= trip.end_date:
                    issues.append(ValidationIssue(
                        field=f"days[{index}].date",
                        issue_type="outside_trip",
                        message=f"Day {day.day_number} falls outside the trip dates",
                        severity="info",
                    ))

        return issues

    def validate(self, trip: Trip) -> ValidationResult:
        """Run every consistency check on a trip."""
        issues = (
            self._check_days(trip)
            + self._check_owners(trip)
            + self._check_expenses(trip)
            + self._check_dates(trip)
        )
        return ValidationResult(trip_id=trip.id, issues=issues)
