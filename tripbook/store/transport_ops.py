"""
Transport reducers: flights per day, immigration schedules and
inter-city legs per trip.
"""

from typing import Any

from tripbook.models.trip import DayPlan, FlightInfo, ImmigrationSchedule, InterCityTransport, Trip
from tripbook.store.helpers import map_days, merge_model, replace_where


def _update_trip_list(trip: Trip, field: str, item_id: str, updates: dict[str, Any]) -> Trip:
    items = getattr(trip, field)
    new_items = replace_where(items, item_id, lambda item: merge_model(item, updates))
    if new_items is items:
        return trip
    return trip.model_copy(update={field: new_items})


def _remove_from_trip_list(trip: Trip, field: str, item_id: str) -> Trip:
    items = getattr(trip, field)
    kept = tuple(item for item in items if item.id != item_id)
    if len(kept) == len(items):
        return trip
    return trip.model_copy(update={field: kept})


# Flights

def add_flight(trip: Trip, day_id: str, flight: FlightInfo) -> Trip:
    return map_days(
        trip, day_id,
        lambda day: day.model_copy(update={"flights": day.flights + (flight,)}),
    )


def update_flight(trip: Trip, day_id: str, flight_id: str, updates: dict[str, Any]) -> Trip:
    def rewrite(day: DayPlan) -> DayPlan:
        flights = replace_where(day.flights, flight_id, lambda f: merge_model(f, updates))
        if flights is day.flights:
            return day
        return day.model_copy(update={"flights": flights})

    return map_days(trip, day_id, rewrite)


def remove_flight(trip: Trip, day_id: str, flight_id: str) -> Trip:
    def rewrite(day: DayPlan) -> DayPlan:
        flights = tuple(f for f in day.flights if f.id != flight_id)
        if len(flights) == len(day.flights):
            return day
        return day.model_copy(update={"flights": flights})

    return map_days(trip, day_id, rewrite)


# Immigration

def add_immigration_schedule(trip: Trip, schedule: ImmigrationSchedule) -> Trip:
    return trip.model_copy(update={
        "immigration_schedules": trip.immigration_schedules + (schedule,),
    })


def update_immigration_schedule(trip: Trip, schedule_id: str, updates: dict[str, Any]) -> Trip:
    return _update_trip_list(trip, "immigration_schedules", schedule_id, updates)


def remove_immigration_schedule(trip: Trip, schedule_id: str) -> Trip:
    return _remove_from_trip_list(trip, "immigration_schedules", schedule_id)


# Inter-city legs

def add_inter_city_transport(trip: Trip, transport: InterCityTransport) -> Trip:
    return trip.model_copy(update={
        "inter_city_transports": trip.inter_city_transports + (transport,),
    })


def update_inter_city_transport(trip: Trip, transport_id: str, updates: dict[str, Any]) -> Trip:
    return _update_trip_list(trip, "inter_city_transports", transport_id, updates)


def remove_inter_city_transport(trip: Trip, transport_id: str) -> Trip:
    return _remove_from_trip_list(trip, "inter_city_transports", transport_id)
