"""
Tests for trip consistency validation.
"""

from datetime import date
from decimal import Decimal

import pytest

from tests.conftest import make_activity, make_day, make_trip
from tripbook.models.trip import ActivityExpense, OwnerConfig, Trip, TripExpense
from tripbook.validation import TripValidator


@pytest.fixture
def validator():
    return TripValidator()


def issue_types(result, severity=None):
    return [i.issue_type for i in result.issues if severity is None or i.severity == severity]


class TestTripValidator:
    """Tests for TripValidator."""

    def test_consistent_trip(self, validator, three_day_trip):
        result = validator.validate(three_day_trip)
        assert result.is_valid
        assert result.issues == []
        assert result.trip_id == "trip-1"

    def test_day_number_gap(self, validator):
        """Test that numbering must follow list order."""
        trip = make_trip(days=[make_day(1, id="a"), make_day(3, id="b")])
        result = validator.validate(trip)
        assert issue_types(result, "error") == ["gap"]
        assert result.issues[0].field == "days[1].day_number"

    def test_duplicate_day_ids(self, validator):
        trip = make_trip(days=[make_day(1, id="a"), make_day(2, id="a")])
        assert "duplicate_id" in issue_types(validator.validate(trip), "error")

    def test_duplicate_activity_ids_warn(self, validator):
        day = make_day(1, [make_activity("x", id="same"), make_activity("y", id="same")], id="a")
        result = validator.validate(make_trip(days=[day]))
        assert result.is_valid
        assert issue_types(result, "warning") == ["duplicate_id"]

    def test_current_day_out_of_range(self, validator):
        trip = make_trip(days=[make_day(1, id="a")], current_day_index=4)
        assert issue_types(validator.validate(trip), "warning") == ["out_of_range"]

    def test_shared_owner_count(self, validator, three_day_trip):
        """Test a trip whose owner list was built without validation."""
        broken = three_day_trip.model_copy(
            update={"owners": (OwnerConfig(id="alice", name="Alice"),)}
        )
        result = validator.validate(broken)
        assert "shared_owner" in issue_types(result, "error")

    def test_unknown_owners_warn(self, validator):
        activity = make_activity("x", expenses=(ActivityExpense(amount=Decimal("1"), owner="ghost"),))
        trip = make_trip(
            days=[make_day(1, [activity], id="a")],
            expenses=[TripExpense(amount=Decimal("2"), owner="ghost")],
        )
        result = validator.validate(trip)
        assert result.is_valid
        assert issue_types(result, "warning") == ["unknown_owner", "unknown_owner"]

    def test_unknown_day_link(self, validator):
        trip = make_trip(expenses=[TripExpense(amount=Decimal("2"), day_id="gone")])
        assert issue_types(validator.validate(trip), "warning") == ["unknown_day"]

    def test_negative_amounts(self, validator):
        trip = make_trip(
            expenses=[TripExpense(amount=Decimal("-2"))],
            total_budget=Decimal("-1"),
        )
        result = validator.validate(trip)
        assert issue_types(result, "warning") == ["invalid_value"]
        assert issue_types(result, "error") == ["invalid_value"]

    def test_date_order(self, validator):
        trip = make_trip(start_date=date(2026, 6, 5), end_date=date(2026, 6, 1))
        result = validator.validate(trip)
        assert issue_types(result, "warning") == ["date_order"]

    def test_day_outside_trip_is_info(self, validator, three_day_trip):
        late = make_day(4, day_date=date(2026, 7, 1), id="d4")
        trip = three_day_trip.model_copy(update={"days": three_day_trip.days + (late,)})
        result = validator.validate(trip)
        assert result.is_valid
        assert issue_types(result, "info") == ["outside_trip"]

    def test_never_fixes(self, validator):
        trip = make_trip(days=[make_day(2, id="a")])
        validator.validate(trip)
        assert trip.days[0].day_number == 2
        assert isinstance(trip, Trip)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
