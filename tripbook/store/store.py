"""
TripStore - the single owned state container.

DESIGN DECISION: There is no module-level store. Each TripStore is
constructed with its initial state, an optional audit logger and a
clock, and is handed to whatever needs it. Tests build as many
isolated stores as they like.

Every mutation method is a thin dispatch to a pure reducer in one of
the *_ops modules. Trip-level reducers run through update_current_trip,
which stamps updated_at only when the reducer actually changed the
trip. A refused mutation leaves `state` as the very same object.

Persisting the new state is the caller's job: read `state` after a
mutation and hand it to the persister. Concurrent edits from other
clients are resolved last-write-wins on Trip.updated_at by that
persister; the store itself is single-writer.
"""

from datetime import date
from decimal import Decimal
from functools import partial
from typing import Any, Optional, Union

from tripbook.audit import AuditLogger
from tripbook.models.audit import AuditEventBuilder
from tripbook.models.trip import (
    AccommodationInfo,
    ActivityExpense,
    BookingInfo,
    DayPlan,
    Destination,
    FlightInfo,
    ImmigrationSchedule,
    InterCityTransport,
    MediaItem,
    OwnerConfig,
    PendingCameraExpense,
    RestaurantComment,
    ScheduledActivity,
    Trip,
    TripDraft,
    TripExpense,
    utc_now,
)
from tripbook.store import (
    activity_ops,
    day_ops,
    destination_ops,
    expense_ops,
    snapshot,
    transport_ops,
    trip_ops,
)
from tripbook.store.helpers import (
    Clock,
    StoreState,
    TripUpdater,
    current_trip,
    find_trip,
    update_current_trip,
)


class TripStore:
    """
    Holds every trip plus the active-trip pointer.

    Read accessors return frozen records; the only way to change
    anything is through the methods below.
    """

    def __init__(
        self,
        state: Optional[StoreState] = None,
        audit_logger: Optional[AuditLogger] = None,
        clock: Clock = utc_now,
    ):
        self._state = state or StoreState()
        self._audit_logger = audit_logger
        self._clock = clock

    # =========================================================================
    # READ ACCESSORS
    # =========================================================================

    @property
    def state(self) -> StoreState:
        return self._state

    @property
    def trips(self) -> tuple[Trip, ...]:
        return self._state.trips

    @property
    def current_trip_id(self) -> str:
        return self._state.current_trip_id

    @property
    def current_trip(self) -> Optional[Trip]:
        return current_trip(self._state)

    def get_trip(self, trip_id: str) -> Optional[Trip]:
        return find_trip(self._state, trip_id)

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _log(self, event) -> None:
        if self._audit_logger:
            self._audit_logger.log(event)

    def _apply(self, updater: TripUpdater) -> bool:
        """Run a trip-level reducer on the active trip. True if it changed."""
        new_state = update_current_trip(self._state, updater, self._clock)
        changed = new_state is not self._state
        self._state = new_state
        return changed

    # =========================================================================
    # TRIPS
    # =========================================================================

    def set_trips(self, trips: list[Trip], current_id: Optional[str] = None) -> None:
        self._state = trip_ops.set_trips(self._state, trips, current_id)

    def create_trip(self, draft: TripDraft) -> Trip:
        self._state, trip = trip_ops.create_trip(self._state, draft, self._clock())
        self._log(AuditEventBuilder.trip_created(trip.id, trip.trip_name))
        return trip

    def delete_trip(self, trip_id: str) -> bool:
        new_state = trip_ops.delete_trip(self._state, trip_id)
        if new_state is self._state:
            reason = "last remaining trip" if len(self.trips) <= 1 else "unknown trip"
            self._log(AuditEventBuilder.trip_delete_refused(trip_id, reason))
            return False
        self._state = new_state
        self._log(AuditEventBuilder.trip_deleted(trip_id, new_state.current_trip_id))
        return True

    def switch_trip(self, trip_id: str) -> bool:
        if trip_id == self.current_trip_id:
            return True
        new_state = trip_ops.switch_trip(self._state, trip_id)
        if new_state is self._state:
            self._log(AuditEventBuilder.trip_switch_ignored(trip_id))
            return False
        self._state = new_state
        self._log(AuditEventBuilder.trip_switched(trip_id))
        return True

    def duplicate_trip(self, trip_id: str) -> Optional[Trip]:
        self._state, copy = trip_ops.duplicate_trip(self._state, trip_id, self._clock())
        if copy is not None:
            self._log(AuditEventBuilder.trip_duplicated(trip_id, copy.id))
        return copy

    def import_trip_data(self, payload: Union[str, bytes, dict]) -> bool:
        """
        Import a JSON snapshot (legacy single-trip or multi-trip).

        Returns False, leaving the store untouched, if the payload is
        malformed. On success the first imported trip becomes active.
        """
        try:
            trips, version = snapshot.parse_snapshot(payload, self._clock())
        except snapshot.SnapshotError as e:
            self._log(AuditEventBuilder.import_failed(e.reason, e.details))
            return False
        self._state = trip_ops.add_imported_trips(self._state, trips)
        self._log(AuditEventBuilder.trip_imported([t.id for t in trips], version))
        return True

    def export_data(self, trip_ids: Optional[list[str]] = None) -> str:
        """Multi-trip JSON snapshot of the given trips (default: the active one)."""
        if trip_ids is None:
            trips = [self.current_trip] if self.current_trip else []
        else:
            trips = [t for t in self.trips if t.id in trip_ids]
        return snapshot.export_trip_data(trips, self._clock())

    def export_expenses_csv(self) -> str:
        trip = self.current_trip
        if trip is None:
            return ",".join(snapshot.CSV_HEADER) + "\n"
        return snapshot.export_expenses_csv(trip)

    # =========================================================================
    # TRIP HEADER AND DESTINATIONS
    # =========================================================================

    def set_trip_name(self, name: str) -> bool:
        return self._apply(partial(destination_ops.set_trip_name, name=name))

    def set_start_date(self, start_date: Optional[date]) -> bool:
        return self._apply(partial(destination_ops.set_start_date, start_date=start_date))

    def set_end_date(self, end_date: Optional[date]) -> bool:
        return self._apply(partial(destination_ops.set_end_date, end_date=end_date))

    def set_total_budget(self, budget: Decimal) -> bool:
        return self._apply(partial(destination_ops.set_total_budget, budget=budget))

    def add_custom_destination(self, destination: Destination) -> bool:
        return self._apply(partial(destination_ops.add_custom_destination, destination=destination))

    def add_restaurant_comment(self, comment: RestaurantComment) -> bool:
        return self._apply(partial(destination_ops.add_restaurant_comment, comment=comment))

    def remove_restaurant_comment(self, comment_id: str) -> bool:
        return self._apply(partial(destination_ops.remove_restaurant_comment, comment_id=comment_id))

    def restaurant_comments_for(self, restaurant_id: str) -> tuple[RestaurantComment, ...]:
        trip = self.current_trip
        if trip is None:
            return ()
        return destination_ops.restaurant_comments_for(trip, restaurant_id)

    # =========================================================================
    # DAYS
    # =========================================================================

    def set_current_day(self, index: int) -> bool:
        return self._apply(partial(day_ops.set_current_day, index=index))

    def go_to_next_day(self) -> bool:
        return self._apply(day_ops.go_to_next_day)

    def go_to_prev_day(self) -> bool:
        return self._apply(day_ops.go_to_prev_day)

    def add_day(self, day: DayPlan, insert_at: Optional[int] = None) -> bool:
        return self._apply(partial(day_ops.add_day, day=day, insert_at=insert_at))

    def remove_day(self, day_id: str) -> bool:
        return self._apply(partial(day_ops.remove_day, day_id=day_id))

    def update_day(self, day_id: str, updates: dict[str, Any]) -> bool:
        return self._apply(partial(day_ops.update_day, day_id=day_id, updates=updates))

    def reorder_days(self, old_index: int, new_index: int) -> bool:
        return self._apply(partial(day_ops.reorder_days, old_index=old_index, new_index=new_index))

    def sort_days_by_date(self) -> bool:
        return self._apply(day_ops.sort_days_by_date)

    def duplicate_day(self, day_id: str) -> bool:
        return self._apply(partial(day_ops.duplicate_day, day_id=day_id))

    def update_day_notes(self, day_id: str, notes: str) -> bool:
        return self._apply(partial(day_ops.update_day_notes, day_id=day_id, notes=notes))

    def update_accommodation_by_destination(
        self,
        destination_id: str,
        accommodation: Optional[AccommodationInfo],
    ) -> bool:
        return self._apply(partial(
            day_ops.update_accommodation_by_destination,
            destination_id=destination_id,
            accommodation=accommodation,
        ))

    # =========================================================================
    # ACTIVITIES
    # =========================================================================

    def add_activity(self, day_id: str, activity: ScheduledActivity, insert_at: Optional[int] = None) -> bool:
        return self._apply(partial(
            activity_ops.add_activity, day_id=day_id, activity=activity, insert_at=insert_at,
        ))

    def remove_activity(self, day_id: str, activity_id: str) -> bool:
        return self._apply(partial(activity_ops.remove_activity, day_id=day_id, activity_id=activity_id))

    def update_activity(self, day_id: str, activity_id: str, updates: dict[str, Any]) -> bool:
        return self._apply(partial(
            activity_ops.update_activity, day_id=day_id, activity_id=activity_id, updates=updates,
        ))

    def reorder_activities(self, day_id: str, old_index: int, new_index: int) -> bool:
        return self._apply(partial(
            activity_ops.reorder_activities, day_id=day_id, old_index=old_index, new_index=new_index,
        ))

    def update_booking(self, day_id: str, activity_id: str, booking: BookingInfo) -> bool:
        return self._apply(partial(
            activity_ops.update_booking, day_id=day_id, activity_id=activity_id, booking=booking,
        ))

    def toggle_booked(self, day_id: str, activity_id: str) -> bool:
        return self._apply(partial(activity_ops.toggle_booked, day_id=day_id, activity_id=activity_id))

    def toggle_completed(self, day_id: str, activity_id: str) -> bool:
        return self._apply(partial(activity_ops.toggle_completed, day_id=day_id, activity_id=activity_id))

    def toggle_skipped(self, day_id: str, activity_id: str) -> bool:
        return self._apply(partial(activity_ops.toggle_skipped, day_id=day_id, activity_id=activity_id))

    def add_memo(self, day_id: str, activity_id: str, text: str) -> bool:
        return self._apply(partial(activity_ops.add_memo, day_id=day_id, activity_id=activity_id, text=text))

    def remove_memo(self, day_id: str, activity_id: str, memo_index: int) -> bool:
        return self._apply(partial(
            activity_ops.remove_memo, day_id=day_id, activity_id=activity_id, memo_index=memo_index,
        ))

    def add_media(self, day_id: str, activity_id: str, media: MediaItem) -> bool:
        return self._apply(partial(activity_ops.add_media, day_id=day_id, activity_id=activity_id, media=media))

    def remove_media(self, day_id: str, activity_id: str, media_id: str) -> bool:
        return self._apply(partial(
            activity_ops.remove_media, day_id=day_id, activity_id=activity_id, media_id=media_id,
        ))

    def duplicate_activity(self, day_id: str, activity_id: str) -> bool:
        return self._apply(partial(activity_ops.duplicate_activity, day_id=day_id, activity_id=activity_id))

    # =========================================================================
    # EXPENSES AND OWNERS
    # =========================================================================

    def _check_owner(self, expense_id: str, owner: Optional[str]) -> bool:
        """Log and refuse expenses attributed to an owner the trip does not have."""
        trip = self.current_trip
        if trip is None or owner is None or expense_ops.owner_is_known(trip, owner):
            return True
        self._log(AuditEventBuilder.expense_rejected(trip.id, expense_id, owner))
        return False

    def add_expense(self, expense: TripExpense) -> bool:
        if not self._check_owner(expense.id, expense.owner):
            return False
        return self._apply(partial(expense_ops.add_expense, expense=expense))

    def update_expense(self, expense_id: str, updates: dict[str, Any]) -> bool:
        if not self._check_owner(expense_id, updates.get("owner")):
            return False
        return self._apply(partial(expense_ops.update_expense, expense_id=expense_id, updates=updates))

    def remove_expense(self, expense_id: str) -> bool:
        return self._apply(partial(expense_ops.remove_expense, expense_id=expense_id))

    def add_activity_expense(self, day_id: str, activity_id: str, expense: ActivityExpense) -> bool:
        if not self._check_owner(expense.id, expense.owner):
            return False
        return self._apply(partial(
            expense_ops.add_activity_expense, day_id=day_id, activity_id=activity_id, expense=expense,
        ))

    def update_activity_expense(
        self,
        day_id: str,
        activity_id: str,
        expense_id: str,
        updates: dict[str, Any],
    ) -> bool:
        if not self._check_owner(expense_id, updates.get("owner")):
            return False
        return self._apply(partial(
            expense_ops.update_activity_expense,
            day_id=day_id,
            activity_id=activity_id,
            expense_id=expense_id,
            updates=updates,
        ))

    def remove_activity_expense(self, day_id: str, activity_id: str, expense_id: str) -> bool:
        return self._apply(partial(
            expense_ops.remove_activity_expense,
            day_id=day_id,
            activity_id=activity_id,
            expense_id=expense_id,
        ))

    def set_pending_camera_expense(self, pending: Optional[PendingCameraExpense]) -> bool:
        return self._apply(partial(expense_ops.set_pending_camera_expense, pending=pending))

    def add_owner(self, owner: OwnerConfig) -> bool:
        changed = self._apply(partial(expense_ops.add_owner, owner=owner))
        if changed:
            self._log(AuditEventBuilder.owner_added(self.current_trip_id, owner.id, owner.name))
        return changed

    def update_owner(self, owner_id: str, updates: dict[str, Any]) -> bool:
        return self._apply(partial(expense_ops.update_owner, owner_id=owner_id, updates=updates))

    def remove_owner(self, owner_id: str) -> bool:
        """
        Remove an owner, moving their expenses to the shared pool.

        Refused (and audited) for the shared owner and for unknown ids.
        """
        trip = self.current_trip
        if trip is None:
            return False
        reassigned = expense_ops.count_owner_expenses(trip, owner_id)
        changed = self._apply(partial(expense_ops.remove_owner, owner_id=owner_id))
        if changed:
            self._log(AuditEventBuilder.owner_removed(trip.id, owner_id, reassigned))
        else:
            reason = "shared owner is permanent" if owner_id == "shared" else "unknown owner"
            self._log(AuditEventBuilder.owner_remove_refused(trip.id, owner_id, reason))
        return changed

    # =========================================================================
    # TRANSPORT
    # =========================================================================

    def add_flight(self, day_id: str, flight: FlightInfo) -> bool:
        return self._apply(partial(transport_ops.add_flight, day_id=day_id, flight=flight))

    def update_flight(self, day_id: str, flight_id: str, updates: dict[str, Any]) -> bool:
        return self._apply(partial(
            transport_ops.update_flight, day_id=day_id, flight_id=flight_id, updates=updates,
        ))

    def remove_flight(self, day_id: str, flight_id: str) -> bool:
        return self._apply(partial(transport_ops.remove_flight, day_id=day_id, flight_id=flight_id))

    def add_immigration_schedule(self, schedule: ImmigrationSchedule) -> bool:
        return self._apply(partial(transport_ops.add_immigration_schedule, schedule=schedule))

    def update_immigration_schedule(self, schedule_id: str, updates: dict[str, Any]) -> bool:
        return self._apply(partial(
            transport_ops.update_immigration_schedule, schedule_id=schedule_id, updates=updates,
        ))

    def remove_immigration_schedule(self, schedule_id: str) -> bool:
        return self._apply(partial(transport_ops.remove_immigration_schedule, schedule_id=schedule_id))

    def add_inter_city_transport(self, transport: InterCityTransport) -> bool:
        return self._apply(partial(transport_ops.add_inter_city_transport, transport=transport))

    def update_inter_city_transport(self, transport_id: str, updates: dict[str, Any]) -> bool:
        return self._apply(partial(
            transport_ops.update_inter_city_transport, transport_id=transport_id, updates=updates,
        ))

    def remove_inter_city_transport(self, transport_id: str) -> bool:
        return self._apply(partial(transport_ops.remove_inter_city_transport, transport_id=transport_id))
