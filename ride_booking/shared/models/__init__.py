# ride_booking/shared/models/__init__.py
"""
Request/response DTOs validated at the API boundary.
"""

from ride_booking.shared.models.booking_dto import (
    BookingUpdateRequest,
    CancelRideRequest,
    DriverLocationMessage,
    DriverStatusRequest,
    ManualBookingRequest,
    RideBookingRequest,
    RideEstimateRequest,
)
from ride_booking.shared.models.common import HealthStatus
from ride_booking.shared.models.location_dto import AddressLocation, LocationInput, PointLocation
from ride_booking.shared.models.vehicle_dto import VehicleCreateRequest, VehicleUpdateRequest

__all__ = [
    "BookingUpdateRequest",
    "CancelRideRequest",
    "DriverLocationMessage",
    "DriverStatusRequest",
    "ManualBookingRequest",
    "RideBookingRequest",
    "RideEstimateRequest",
    "HealthStatus",
    "AddressLocation",
    "LocationInput",
    "PointLocation",
    "VehicleCreateRequest",
    "VehicleUpdateRequest",
]
