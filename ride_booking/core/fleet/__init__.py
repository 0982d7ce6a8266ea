# ride_booking/core/fleet/__init__.py
"""
Vehicles, drivers and vendors.
"""

from ride_booking.core.fleet.models import Driver, Vehicle, Vendor
from ride_booking.core.fleet.repository import FleetRepository
from ride_booking.core.fleet.service import FleetService

__all__ = [
    "Driver",
    "Vehicle",
    "Vendor",
    "FleetRepository",
    "FleetService",
]
