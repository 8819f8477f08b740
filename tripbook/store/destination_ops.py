"""
Destination, restaurant comment and trip-header reducers.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from tripbook.models.trip import Destination, RestaurantComment, Trip, quantize_amount


def add_custom_destination(trip: Trip, destination: Destination) -> Trip:
    """Add a user-defined destination. An id already present is a no-op."""
    if any(d.id == destination.id for d in trip.custom_destinations):
        return trip
    return trip.model_copy(update={
        "custom_destinations": trip.custom_destinations + (destination,),
    })


def add_restaurant_comment(trip: Trip, comment: RestaurantComment) -> Trip:
    return trip.model_copy(update={
        "restaurant_comments": trip.restaurant_comments + (comment,),
    })


def remove_restaurant_comment(trip: Trip, comment_id: str) -> Trip:
    comments = tuple(c for c in trip.restaurant_comments if c.id != comment_id)
    if len(comments) == len(trip.restaurant_comments):
        return trip
    return trip.model_copy(update={"restaurant_comments": comments})


def restaurant_comments_for(trip: Trip, restaurant_id: str) -> tuple[RestaurantComment, ...]:
    return tuple(c for c in trip.restaurant_comments if c.restaurant_id == restaurant_id)


def _set_field(trip: Trip, field: str, value) -> Trip:
    if getattr(trip, field) == value:
        return trip
    return trip.model_copy(update={field: value})


def set_trip_name(trip: Trip, name: str) -> Trip:
    return _set_field(trip, "trip_name", name)


def set_start_date(trip: Trip, start_date: Optional[date]) -> Trip:
    return _set_field(trip, "start_date", start_date)


def set_end_date(trip: Trip, end_date: Optional[date]) -> Trip:
    return _set_field(trip, "end_date", end_date)


def set_total_budget(trip: Trip, budget: Decimal) -> Trip:
    """Set the budget (base currency). Negative or unstorable budgets are refused."""
    try:
        budget = quantize_amount(Decimal(budget))
    except ValueError:
        return trip
    if budget < 0:
        return trip
    return _set_field(trip, "total_budget", budget)
