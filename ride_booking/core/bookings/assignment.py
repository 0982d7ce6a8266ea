# ride_booking/core/bookings/assignment.py
"""
Vehicle assignment for new bookings.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from ride_booking.common.constants import TypeMsg
from ride_booking.common.logger import log_info
from ride_booking.core.fleet.models import Vehicle
from ride_booking.core.fleet.repository import FleetRepository


@dataclass
class Assignment:
    """Resolved vehicle with its vendor and driver; all None when nothing matched."""
    vehicle: Vehicle | None = None
    vendor_id: UUID | None = None
    driver_id: UUID | None = None

    @property
    def degraded(self) -> bool:
        return self.vehicle is None

    @classmethod
    def unassigned(cls) -> "Assignment":
        return cls()

    @classmethod
    def for_vehicle(cls, vehicle: Vehicle) -> "Assignment":
        return cls(vehicle=vehicle, vendor_id=vehicle.vendor_id, driver_id=vehicle.driver_id)


def parse_vehicle_id(ref: str) -> UUID | None:
    try:
        return UUID(ref)
    except (TypeError, ValueError):
        return None


class AssignmentResolver:
    """
    Turns a vehicle reference into a concrete vehicle.

    A reference that parses as an id is looked up exactly; anything else is
    treated as a vehicle class and the oldest available vehicle wins. No
    match yields an unassigned result so the booking can go to the open market.
    """

    def __init__(self, fleet: FleetRepository) -> None:
        self._fleet = fleet

    async def resolve(self, vehicle_ref: str, vendor_id: UUID | None = None) -> Assignment:
        vehicle_id = parse_vehicle_id(vehicle_ref)
        if vehicle_id is not None:
            vehicle = await self._fleet.get_available_vehicle(vehicle_id)
        else:
            vehicle = await self._fleet.first_available_by_type(vehicle_ref, vendor_id=vendor_id)

        if vehicle is None or (vendor_id is not None and vehicle.vendor_id != vendor_id):
            await log_info(f"No available vehicle for '{vehicle_ref}', booking stays unassigned", type_msg=TypeMsg.DEBUG)
            return Assignment.unassigned()

        return Assignment.for_vehicle(vehicle)
