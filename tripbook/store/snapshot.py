"""
Snapshot import and export.

Two JSON shapes are accepted on import:
- Multi-trip (version >= 5): {"version": 6, "trips": [...], "exportedAt": ...}
- Legacy single trip (any other version): the trip's fields at the top
  level; a "days" array is required.

DESIGN DECISION: Parsing never touches store state. It turns a payload
into fresh Trip records or raises SnapshotError with the reason, and the
caller decides what to do with either outcome.
"""

import csv
import io
import json
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional, Union

from pydantic import ValidationError

from tripbook.config import get_settings
from tripbook.models.trip import Trip, default_owners, new_id, utc_now
from tripbook.store.helpers import renumber_days
from tripbook.validation import TripValidator


SNAPSHOT_VERSION = 6
MULTI_TRIP_MIN_VERSION = 5

CSV_HEADER = ["Date", "Day", "Category", "Description", "Amount", "Currency", "Owner"]


class SnapshotError(ValueError):
    """A payload that cannot be imported."""

    def __init__(self, reason: str, details: Optional[dict] = None):
        super().__init__(reason)
        self.reason = reason
        self.details = details or {}


# =============================================================================
# IMPORT
# =============================================================================

def _load(payload: Union[str, bytes, dict]) -> dict:
    if isinstance(payload, dict):
        return payload
    try:
        data = json.loads(payload)
    except (TypeError, ValueError) as e:
        raise SnapshotError("Payload is not valid JSON", {"error": str(e)}) from e
    if not isinstance(data, dict):
        raise SnapshotError("Payload must be a JSON object")
    return data


def _version(data: dict) -> Optional[int]:
    version = data.get("version")
    if isinstance(version, bool) or not isinstance(version, (int, float)):
        return None
    return int(version)


def _build_trip(raw: dict, now: datetime) -> Trip:
    """Validate one trip dict, giving it a fresh id and renumbered days."""
    try:
        trip = Trip.model_validate({**raw, "id": new_id(), "updatedAt": now})
    except ValidationError as e:
        raise SnapshotError(
            "Trip data failed validation",
            {"errors": e.errors(include_url=False, include_context=False)},
        ) from e

    trip = trip.model_copy(update={"days": renumber_days(trip.days)})
    result = TripValidator().validate(trip)
    if result.has_errors:
        raise SnapshotError(
            "Trip data is inconsistent",
            {"issues": [i.message for i in result.issues if i.severity == "error"]},
        )
    return trip


def _legacy_trip(data: dict, now: datetime) -> dict:
    """Fill in what a single-trip snapshot may leave out."""
    app = get_settings().app
    return {
        "tripName": data.get("tripName") or app.default_trip_name,
        "startDate": data.get("startDate"),
        "endDate": data.get("endDate"),
        "days": data["days"],
        "currentDayIndex": 0,
        "totalBudget": data.get("totalBudget", app.default_total_budget),
        "expenses": data.get("expenses") or [],
        "restaurantComments": data.get("restaurantComments") or [],
        "customDestinations": data.get("customDestinations") or [],
        "immigrationSchedules": data.get("immigrationSchedules") or [],
        "interCityTransports": data.get("interCityTransports") or [],
        "owners": data.get("owners") or default_owners(),
        "pendingCameraExpense": None,
        "createdAt": now,
        "emoji": data.get("emoji"),
    }


def parse_snapshot(
    payload: Union[str, bytes, dict],
    now: Optional[datetime] = None,
) -> tuple[list[Trip], Optional[int]]:
    """
    Turn an import payload into new Trip records.

    Every trip gets a fresh id and an updated_at of `now`.

    Returns:
        (trips, version) - trips is never empty

    Raises:
        SnapshotError: malformed JSON, missing days, or invalid trip data
    """
    now = now or utc_now()
    data = _load(payload)
    version = _version(data)

    trips_raw = data.get("trips")
    if version is not None and version >= MULTI_TRIP_MIN_VERSION and isinstance(trips_raw, list):
        if not trips_raw:
            raise SnapshotError("Snapshot contains no trips", {"version": version})
        if not all(isinstance(t, dict) for t in trips_raw):
            raise SnapshotError("Every trip must be a JSON object", {"version": version})
        return [_build_trip(t, now) for t in trips_raw], version

    if not isinstance(data.get("days"), list):
        raise SnapshotError("Single-trip snapshot has no days array", {"version": version})
    return [_build_trip(_legacy_trip(data, now), now)], version


# =============================================================================
# EXPORT
# =============================================================================

def export_trip_data(trips: list[Trip], exported_at: Optional[datetime] = None) -> str:
    """Serialize trips as a multi-trip JSON snapshot."""
    document = {
        "trips": [t.model_dump(mode="json", by_alias=True) for t in trips],
        "exportedAt": (exported_at or utc_now()).isoformat(),
        "version": SNAPSHOT_VERSION,
    }
    return json.dumps(document, ensure_ascii=False, indent=2)


def _format_amount(value: Decimal) -> str:
    if value == value.to_integral_value():
        return str(int(value))
    return format(value.normalize(), "f")


def expense_rows(trip: Trip) -> list[list[Any]]:
    """
    Flatten a trip's expenses into CSV rows.

    Global expenses first, then activity expenses in day and activity
    order. Activity rows use the category "activity" and prefix the
    description with the activity name.
    """
    day_labels = {d.id: f"Day {d.day_number}" for d in trip.days}
    rows = []

    for e in trip.expenses:
        rows.append([
            e.expense_date.isoformat() if e.expense_date else "",
            day_labels.get(e.day_id, "") if e.day_id else "",
            e.category.value,
            e.description,
            _format_amount(e.amount),
            e.currency,
            e.owner,
        ])

    for day in trip.days:
        for activity in day.activities:
            for e in activity.expenses:
                rows.append([
                    e.created_at.date().isoformat(),
                    f"Day {day.day_number}",
                    "activity",
                    f"{activity.display_name}: {e.description}",
                    _format_amount(e.amount),
                    e.currency,
                    e.owner,
                ])

    return rows


def export_expenses_csv(trip: Trip) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    writer.writerows(expense_rows(trip))
    return buffer.getvalue()
