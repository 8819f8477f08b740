"""
Trip store package.

Pure reducer modules (trip_ops, day_ops, activity_ops, expense_ops,
transport_ops, destination_ops) plus the TripStore container that
dispatches to them.
"""

from tripbook.store.helpers import StoreState, current_trip, find_trip, update_current_trip
from tripbook.store.snapshot import (
    MULTI_TRIP_MIN_VERSION,
    SNAPSHOT_VERSION,
    SnapshotError,
    export_expenses_csv,
    export_trip_data,
    parse_snapshot,
)
from tripbook.store.store import TripStore

__all__ = [
    "StoreState",
    "TripStore",
    "current_trip",
    "find_trip",
    "update_current_trip",
    # Snapshots
    "MULTI_TRIP_MIN_VERSION",
    "SNAPSHOT_VERSION",
    "SnapshotError",
    "export_expenses_csv",
    "export_trip_data",
    "parse_snapshot",
]
