# ride_booking/shared/events/__init__.py
"""
Realtime notification events.

Every event is a pydantic model whose `event_type` is the name pushed to
clients; `to_message()` produces the `{"event", "data"}` envelope.
"""

from ride_booking.shared.events.base import DomainEvent, EventMetadata
from ride_booking.shared.events.booking_events import (
    BookingAssigned,
    BookingCreated,
    BookingDeleted,
    BookingNew,
    BookingOpenMarket,
    BookingStatusUpdate,
    BookingUpdated,
    DriverLocation,
    RideCancelled,
)
from ride_booking.shared.events.fleet_events import VehicleUpdated

__all__ = [
    "DomainEvent",
    "EventMetadata",
    "BookingAssigned",
    "BookingCreated",
    "BookingDeleted",
    "BookingNew",
    "BookingOpenMarket",
    "BookingStatusUpdate",
    "BookingUpdated",
    "DriverLocation",
    "RideCancelled",
    "VehicleUpdated",
]
