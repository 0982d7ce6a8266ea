# ride_booking/shared/events/booking_events.py
"""
Booking lifecycle events delivered over the realtime channel.
"""

from __future__ import annotations

from typing import Any, Literal

from ride_booking.shared.events.base import DomainEvent


class BookingCreated(DomainEvent):
    """Sent to the customer once their ride is booked."""

    event_type: Literal["booking:created"] = "booking:created"

    booking: dict[str, Any]


class BookingNew(DomainEvent):
    """Sent to the vendor that owns the auto-assigned vehicle."""

    event_type: Literal["booking:new"] = "booking:new"

    booking: dict[str, Any]


class BookingOpenMarket(DomainEvent):
    """Broadcast to all vendors for a booking nobody was matched to."""

    event_type: Literal["booking:open_market"] = "booking:open_market"

    booking: dict[str, Any]


class BookingAssigned(DomainEvent):
    """Sent to the driver a booking was assigned to."""

    event_type: Literal["booking:assigned"] = "booking:assigned"

    booking: dict[str, Any]


class BookingStatusUpdate(DomainEvent):
    """Status change pushed to the customer (with a message) and the vendor."""

    event_type: Literal["booking:status_update"] = "booking:status_update"

    booking_id: str
    booking_code: str
    status: str
    message: str | None = None
    booking: dict[str, Any] | None = None


class BookingUpdated(DomainEvent):
    """Vendor-side refresh after an edit or a cancellation."""

    event_type: Literal["booking:update"] = "booking:update"

    booking: dict[str, Any]


class BookingDeleted(DomainEvent):
    """Booking removed by an administrator."""

    event_type: Literal["booking:delete"] = "booking:delete"

    booking_id: str
    booking_code: str


class RideCancelled(DomainEvent):
    """Sent to the assigned driver when the customer cancels."""

    event_type: Literal["ride:cancelled"] = "ride:cancelled"

    booking_id: str
    booking_code: str
    reason: str | None = None


class DriverLocation(DomainEvent):
    """Position of the assigned driver, relayed to the customer while the ride is tracked."""

    event_type: Literal["driver:location"] = "driver:location"

    booking_id: str
    driver_id: str
    lat: float
    lng: float
    heading: float | None = None
    speed_kmh: float | None = None
