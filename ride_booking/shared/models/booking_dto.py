# ride_booking/shared/models/booking_dto.py
"""
Booking request bodies.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Optional
from uuid import UUID

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from ride_booking.common.constants import BookingStatus, BookingType, PaymentMethod, VehicleType
from ride_booking.shared.models.location_dto import LocationInput


def check_vehicle_ref(v: Optional[str]) -> Optional[str]:
    """Vehicle class name or the id of a specific vehicle."""
    if v is None:
        return v
    v = v.strip()
    if v in {t.value for t in VehicleType}:
        return v
    try:
        UUID(v)
    except ValueError:
        raise ValueError("vehicle_type must be a vehicle class or a vehicle id") from None
    return v


VehicleRef = Annotated[Optional[str], AfterValidator(check_vehicle_ref)]


class RideEstimateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    pickup: LocationInput
    drop: LocationInput
    # Accepted so the estimate form can post the booking body; the fare ignores it
    vehicle_type: VehicleRef = None


class RideBookingRequest(BaseModel):
    """Customer self-service booking."""

    model_config = ConfigDict(extra="forbid")

    pickup: LocationInput
    drop: LocationInput
    # Vehicle class name or the id of a specific vehicle
    vehicle_type: VehicleRef = None
    booking_type: BookingType = BookingType.INSTANT
    pickup_time: Optional[datetime] = None
    payment_method: Optional[PaymentMethod] = None
    pickup_notes: Optional[str] = Field(None, max_length=500)
    drop_notes: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = Field(None, max_length=1000)


class ManualBookingRequest(RideBookingRequest):
    """Booking entered by a vendor or an administrator on a customer's behalf."""

    customer_id: UUID


class BookingUpdateRequest(BaseModel):
    """Fields a vendor or administrator may change."""

    model_config = ConfigDict(extra="forbid")

    status: Optional[BookingStatus] = None
    driver_id: Optional[UUID] = None
    vehicle_id: Optional[UUID] = None
    notes: Optional[str] = Field(None, max_length=1000)


class CancelRideRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class DriverStatusRequest(BaseModel):
    # Plain string: targets outside the driver chain are a state error, not a schema error
    status: str


class DriverLocationMessage(BaseModel):
    """`location:update` sent by a driver over the realtime channel."""

    booking_id: UUID
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    heading: Optional[float] = Field(None, ge=0, lt=360)
    speed_kmh: Optional[float] = Field(None, ge=0)
