# ride_booking/shared/events/fleet_events.py
"""
Fleet events delivered to the owning vendor.
"""

from __future__ import annotations

from typing import Any, Literal

from ride_booking.shared.events.base import DomainEvent


class VehicleUpdated(DomainEvent):
    """A vehicle of the vendor's fleet was created, changed or removed."""

    event_type: Literal["vehicle:update"] = "vehicle:update"

    action: Literal["created", "updated", "deleted"]
    vehicle: dict[str, Any]
