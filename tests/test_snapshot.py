"""
Tests for snapshot import/export and the expense CSV.
"""

import json
from decimal import Decimal

import pytest

from tests.conftest import FIXED_NOW
from tripbook.models.audit import AuditEventType
from tripbook.models.trip import ActivityExpense
from tripbook.queries import total_estimated_cost
from tripbook.store import SNAPSHOT_VERSION, SnapshotError, export_expenses_csv, parse_snapshot
from tripbook.store.snapshot import expense_rows


LEGACY_PAYLOAD = {
    "version": 3,
    "tripName": "Old Spain",
    "startDate": "2025-04-01",
    "days": [
        {
            "id": "legacy-day",
            "dayNumber": 4,
            "date": "2025-04-01",
            "activities": [
                {"id": "x1", "name": "Alhambra", "estimatedCost": 30},
                {"id": "x2", "name": "Tapas", "estimatedCost": 20, "type": "meal"},
            ],
        },
    ],
}


def last_event_type(audit_storage):
    return audit_storage.get_recent_events(limit=1)[0].event_type


class TestParseSnapshot:
    """Tests for parse_snapshot."""

    def test_legacy_single_trip(self):
        """Test that a version 3 snapshot becomes one trip with defaults."""
        trips, version = parse_snapshot(json.dumps(LEGACY_PAYLOAD), FIXED_NOW)

        assert version == 3
        assert len(trips) == 1
        trip = trips[0]
        assert trip.trip_name == "Old Spain"
        assert trip.total_budget == Decimal("5000")
        assert [o.id for o in trip.owners] == ["shared"]
        assert trip.days[0].day_number == 1
        assert trip.updated_at == FIXED_NOW
        assert total_estimated_cost(trip) == Decimal("50")

    def test_legacy_without_name(self):
        payload = {"days": []}
        trips, version = parse_snapshot(payload, FIXED_NOW)
        assert version is None
        assert trips[0].trip_name == "Imported trip"

    def test_multi_trip(self):
        payload = {
            "version": 6,
            "exportedAt": "2026-04-01T00:00:00Z",
            "trips": [
                {"id": "a", "tripName": "One", "days": []},
                {"id": "b", "tripName": "Two", "days": [], "totalBudget": 900},
            ],
        }
        trips, version = parse_snapshot(payload, FIXED_NOW)
        assert version == 6
        assert [t.trip_name for t in trips] == ["One", "Two"]
        assert trips[1].total_budget == Decimal("900")

    def test_imported_trips_get_fresh_ids(self):
        payload = {"version": 5, "trips": [{"id": "a", "tripName": "One"}]}
        trips, _ = parse_snapshot(payload)
        assert trips[0].id != "a"

    def test_invalid_json(self):
        with pytest.raises(SnapshotError, match="not valid JSON"):
            parse_snapshot("{not json")

    def test_not_an_object(self):
        with pytest.raises(SnapshotError):
            parse_snapshot("[1, 2]")

    def test_missing_days(self):
        with pytest.raises(SnapshotError, match="no days"):
            parse_snapshot({"version": 3, "tripName": "x"})

    def test_empty_trip_list(self):
        with pytest.raises(SnapshotError, match="no trips"):
            parse_snapshot({"version": 6, "trips": []})

    def test_schema_error(self):
        payload = {"days": [{"activities": [{"estimatedCost": 3}]}]}
        with pytest.raises(SnapshotError) as exc_info:
            parse_snapshot(payload)
        assert exc_info.value.reason == "Trip data failed validation"
        assert exc_info.value.details["errors"]

    def test_duplicate_day_ids_rejected(self):
        payload = {"days": [{"id": "d"}, {"id": "d"}]}
        with pytest.raises(SnapshotError, match="inconsistent"):
            parse_snapshot(payload)

    def test_amount_too_large_to_store(self):
        payload = {"days": [], "expenses": [{"amount": 1e30}]}
        with pytest.raises(SnapshotError) as exc_info:
            parse_snapshot(payload)
        assert exc_info.value.reason == "Trip data failed validation"

    def test_unknown_owner_is_only_a_warning(self):
        payload = {"days": [], "expenses": [{"amount": 5, "owner": "ghost"}]}
        trips, _ = parse_snapshot(payload)
        assert trips[0].expenses[0].owner == "ghost"


class TestStoreImportExport:
    """Tests for TripStore.import_trip_data and export_data."""

    def test_import_activates_first_trip(self, store, audit_storage):
        assert store.import_trip_data(json.dumps(LEGACY_PAYLOAD)) is True
        assert len(store.trips) == 2
        assert store.current_trip.trip_name == "Old Spain"
        assert last_event_type(audit_storage) == AuditEventType.TRIP_IMPORTED

    def test_failed_import_leaves_store_alone(self, store, audit_storage):
        before = store.state
        assert store.import_trip_data("{broken") is False
        assert store.import_trip_data({"version": 3}) is False
        assert store.state is before
        assert last_event_type(audit_storage) == AuditEventType.IMPORT_FAILED

    def test_out_of_range_budget_fails_import(self, store, audit_storage):
        before = store.state
        payload = json.dumps({"version": 3, "days": [], "totalBudget": 1e30})
        assert store.import_trip_data(payload) is False
        assert store.state is before
        assert last_event_type(audit_storage) == AuditEventType.IMPORT_FAILED

    def test_export_format(self, store):
        document = json.loads(store.export_data())
        assert document["version"] == SNAPSHOT_VERSION
        assert "exportedAt" in document
        trip = document["trips"][0]
        assert trip["tripName"] == "Spain"
        assert trip["totalBudget"] == 500
        assert trip["days"][0]["date"] == "2026-06-01"
        assert trip["days"][0]["activities"][0]["estimatedCost"] == 26

    def test_export_selected_trips(self, store):
        store.duplicate_trip("trip-1")
        document = json.loads(store.export_data([t.id for t in store.trips]))
        assert len(document["trips"]) == 2

    def test_export_then_import(self, store):
        exported = store.export_data()
        assert store.import_trip_data(exported) is True
        imported = store.current_trip
        assert imported.id != "trip-1"
        assert imported.trip_name == "Spain"
        assert [d.id for d in imported.days] == ["d1", "d2", "d3"]
        assert imported.expenses == store.get_trip("trip-1").expenses


class TestExpenseCsv:
    """Tests for the expense CSV export."""

    def test_rows(self, three_day_trip):
        rows = expense_rows(three_day_trip)
        assert rows[0] == ["", "Day 1", "accommodation", "", "100", "EUR", "shared"]
        assert rows[1] == ["", "", "food", "", "30", "EUR", "bob"]
        assert rows[2][1:] == ["Day 1", "activity", "Park Guell: ", "12", "EUR", "alice"]

    def test_activity_row_date(self, three_day_trip):
        activity = three_day_trip.days[0].activities[2]
        expense = ActivityExpense(amount=Decimal("2.5"), description="Water", created_at=FIXED_NOW)
        trip = three_day_trip.model_copy(update={"expenses": (), "days": (
            three_day_trip.days[0].model_copy(update={"activities": (
                activity.model_copy(update={"expenses": (expense,)}),
            )}),
        )})
        assert expense_rows(trip) == [
            ["2026-05-01", "Day 1", "activity", "Park Guell: Water", "2.5", "EUR", "shared"],
        ]

    def test_csv_text(self, three_day_trip):
        lines = export_expenses_csv(three_day_trip).splitlines()
        assert lines[0] == "Date,Day,Category,Description,Amount,Currency,Owner"
        assert lines[1] == ",Day 1,accommodation,,100,EUR,shared"
        assert len(lines) == 4


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
