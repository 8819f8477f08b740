"""
Tests for Tripbook models

Test strategy:
1. Unit tests for individual components (models, validators)
2. Integration tests for flows (with fake external services)
3. No real API calls in tests
"""

import json

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

from pydantic import ValidationError

from tripbook.models.trip import (
    SHARED_OWNER_ID,
    ActivityExpense,
    Currency,
    DayPlan,
    ExpenseCategory,
    OwnerConfig,
    ScheduledActivity,
    Trip,
    TripDraft,
    TripExpense,
    parse_duration_minutes,
)
from tripbook.models.audit import (
    AUDIT_COLUMNS,
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
    events_to_csv,
)
from tripbook.models.budget import DayCost, OwnerDeviation
from tripbook.models.receipt import CameraScanResult, ExtractedAmount
from tripbook.models.validation import ValidationIssue, ValidationResult


class TestTripModels:
    """Tests for the trip tree models."""

    def test_amount_quantized_to_storage_precision(self):
        """Test that amounts keep six decimal places."""
        expense = TripExpense(amount=Decimal("10.1234567"))
        assert expense.amount == Decimal("10.123457")

    def test_amount_json_is_plain_number(self):
        whole = TripExpense(amount=Decimal("12")).model_dump(mode="json", by_alias=True)
        part = TripExpense(amount=Decimal("12.5")).model_dump(mode="json", by_alias=True)
        assert whole["amount"] == 12
        assert isinstance(whole["amount"], int)
        assert part["amount"] == 12.5

    def test_camel_case_wire_format(self):
        """Test that snapshots use camelCase keys and 'date' for dates."""
        day = DayPlan.model_validate({
            "id": "d1",
            "dayNumber": 2,
            "date": "2026-06-01",
            "destinationId": "bcn",
            "activities": [{"name": "Museum", "estimatedCost": 15, "isBooked": True}],
        })
        assert day.day_number == 2
        assert day.day_date == date(2026, 6, 1)
        assert day.activities[0].estimated_cost == Decimal("15")
        assert day.activities[0].is_booked is True

        dumped = day.model_dump(mode="json", by_alias=True)
        assert dumped["date"] == "2026-06-01"
        assert dumped["destinationId"] == "bcn"
        assert dumped["activities"][0]["estimatedCost"] == 15

    def test_blank_date_is_none(self):
        expense = TripExpense.model_validate({"amount": 3, "date": "", "dayId": ""})
        assert expense.expense_date is None
        assert expense.day_id is None

    def test_null_collections_are_empty(self):
        activity = ScheduledActivity.model_validate({"name": "x", "memos": None, "expenses": None})
        assert activity.memos == ()
        assert activity.expenses == ()

    def test_unknown_keys_ignored(self):
        owner = OwnerConfig.model_validate({"id": "a", "name": "A", "avatar": "cat.png"})
        assert owner.id == "a"

    def test_records_are_frozen(self):
        """Test that a record cannot be edited in place."""
        owner = OwnerConfig(id="a", name="A")
        with pytest.raises(ValidationError):
            owner.name = "B"

    def test_completed_and_skipped_exclusive(self):
        with pytest.raises(ValidationError):
            ScheduledActivity(name="x", is_completed=True, is_skipped=True)

    def test_trip_seeds_shared_owner(self):
        """Test that a trip without the shared pool gets one."""
        trip = Trip(owners=(OwnerConfig(id="alice", name="Alice"),))
        assert trip.owners[0].id == SHARED_OWNER_ID
        assert [o.id for o in trip.non_shared_owners] == ["alice"]

    def test_trip_default_owners(self):
        assert [o.id for o in Trip().owners] == [SHARED_OWNER_ID]
        assert [o.id for o in Trip.model_validate({"owners": None}).owners] == [SHARED_OWNER_ID]

    def test_trip_rejects_duplicate_owner_ids(self):
        with pytest.raises(ValidationError):
            Trip(owners=(
                OwnerConfig(id=SHARED_OWNER_ID, name="Shared"),
                OwnerConfig(id=SHARED_OWNER_ID, name="Pool"),
            ))

    def test_current_day(self):
        trip = Trip(days=(DayPlan(id="d1"), DayPlan(id="d2", day_number=2)), current_day_index=1)
        assert trip.current_day.id == "d2"
        assert trip.find_day("d1").id == "d1"
        assert trip.find_day("nope") is None
        assert Trip().current_day is None

    def test_display_name_prefers_localised(self):
        assert ScheduledActivity(name="Cathedral", name_ko="대성당").display_name == "대성당"
        assert ScheduledActivity(name="Cathedral").display_name == "Cathedral"

    def test_trip_draft_validation(self):
        """Test that a draft needs a name and a non-negative budget."""
        with pytest.raises(ValidationError):
            TripDraft(trip_name="   ")
        with pytest.raises(ValidationError):
            TripDraft(trip_name="Spain", total_budget=Decimal("-5"))
        assert TripDraft(trip_name="  Spain ").trip_name == "Spain"

    def test_expense_category_closed_set(self):
        with pytest.raises(ValidationError):
            TripExpense(amount=Decimal("1"), category="souvenirs")
        assert TripExpense(amount=Decimal("1"), category="food").category == ExpenseCategory.FOOD


class TestDuration:
    """Tests for free-form duration parsing."""

    @pytest.mark.parametrize("token,minutes", [
        ("2h", 120),
        ("90min", 90),
        ("1h30m", 90),
        ("1.5h", 90),
        ("45 minutes", 45),
        ("3 hours", 180),
    ])
    def test_parses(self, token, minutes):
        assert parse_duration_minutes(token) == minutes

    @pytest.mark.parametrize("token", ["", "   ", "soon", "h"])
    def test_unparseable(self, token):
        assert parse_duration_minutes(token) is None

    def test_activity_property(self):
        assert ScheduledActivity(name="x", duration="2h").duration_minutes == 120


class TestCurrency:
    """Tests for the currency enum."""

    def test_symbols(self):
        assert Currency.EUR.symbol == "€"
        assert Currency.KRW.symbol == "₩"
        assert Currency.JPY.symbol == Currency.CNY.symbol == "¥"

    def test_minor_units(self):
        assert Currency.EUR.has_minor_unit
        assert Currency.USD.has_minor_unit
        assert not Currency.KRW.has_minor_unit
        assert not Currency.JPY.has_minor_unit


class TestResultModels:
    """Tests for derived result models."""

    def test_day_cost_over(self):
        assert DayCost(day_id="d", day_number=1, estimated=Decimal("10"), actual=Decimal("12")).is_over
        assert not DayCost(day_id="d", day_number=1, estimated=Decimal("10"), actual=Decimal("0")).is_over

    def test_owner_deviation(self):
        assert OwnerDeviation(owner_id="a", deviation=Decimal("5")).owes_more
        assert not OwnerDeviation(owner_id="a", deviation=Decimal("-5")).owes_more

    def test_extracted_amount_positive(self):
        with pytest.raises(ValidationError):
            ExtractedAmount(amount=Decimal("0"), currency=Currency.EUR)

    def test_scan_result_manual_entry(self):
        assert CameraScanResult(message="none").needs_manual_entry
        found = CameraScanResult(
            message="Found",
            extracted=ExtractedAmount(amount=Decimal("4.5"), currency=Currency.EUR),
        )
        assert not found.needs_manual_entry

    def test_validation_result_counts(self):
        result = ValidationResult(trip_id="t", issues=[
            ValidationIssue(field="a", issue_type="gap", message="m", severity="error"),
            ValidationIssue(field="b", issue_type="x", message="m", severity="warning"),
        ])
        assert result.has_errors
        assert not result.is_valid
        assert result.error_count == 1
        assert len(result.warnings) == 1

    def test_validation_issue_severity_pattern(self):
        with pytest.raises(ValidationError):
            ValidationIssue(field="a", issue_type="x", message="m", severity="fatal")


class TestAuditModels:
    """Tests for audit event models."""

    def test_audit_event_creation(self):
        """Test AuditEvent creation."""
        event = AuditEvent(
            event_type=AuditEventType.TRIP_CREATED,
            entity_type="trip",
            entity_id="trip-1",
            description="Trip created",
        )
        assert event.event_type == AuditEventType.TRIP_CREATED
        assert event.severity == AuditSeverity.INFO
        assert event.event_id is not None
        assert event.timestamp.tzinfo is not None

    def test_audit_event_to_log_dict(self):
        correlation_id = uuid4()
        event = AuditEventBuilder.owner_removed("trip-1", "alice", 3)
        event = event.model_copy(update={"correlation_id": correlation_id})

        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "owner_removed"
        assert log_dict["details"]["reassigned_expenses"] == 3
        assert log_dict["correlation_id"] == str(correlation_id)

    def test_audit_event_to_row(self):
        event = AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            description="boom",
            details={"when": datetime(2026, 1, 1, tzinfo=timezone.utc)},
        )
        row = event.to_row()
        assert len(row) == len(AUDIT_COLUMNS)
        assert row[2] == "system_error"
        assert json.loads(row[8])["when"].startswith("2026-01-01")

    def test_builder_refusals_are_warnings(self):
        """Test that refused mutations are logged at warning level."""
        for event in (
            AuditEventBuilder.trip_delete_refused("t", "last remaining trip"),
            AuditEventBuilder.owner_remove_refused("t", "shared", "shared owner is permanent"),
            AuditEventBuilder.expense_rejected("t", "e", "carol"),
        ):
            assert event.severity == AuditSeverity.WARNING

    def test_amount_extracted_event(self):
        scan_id = uuid4()
        event = AuditEventBuilder.amount_extracted(
            scan_id=scan_id,
            amount="45.90",
            currency="EUR",
            is_fallback=False,
            correlation_id=None,
        )
        assert event.entity_id == str(scan_id)
        assert event.details["currency"] == "EUR"

    def test_events_to_csv(self):
        events = [
            AuditEventBuilder.trip_created("t1", "Spain"),
            AuditEventBuilder.trip_switched("t1"),
        ]
        lines = events_to_csv(events).splitlines()
        assert lines[0] == ",".join(AUDIT_COLUMNS)
        assert len(lines) == 3


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
