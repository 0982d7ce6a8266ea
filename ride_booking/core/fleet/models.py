# ride_booking/core/fleet/models.py
"""
Fleet data models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ride_booking.common.constants import VehicleType
from ride_booking.core.geo.models import GeoPoint


class Vendor(BaseModel):
    """Fleet owner."""

    id: UUID
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    is_active: bool = True


class Driver(BaseModel):
    """Driver employed by a vendor; may have a login account."""

    id: UUID
    vendor_id: UUID
    name: str
    phone: Optional[str] = None
    license_number: Optional[str] = None
    rating: float = Field(5.0, ge=0.0, le=5.0)
    is_active: bool = True

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Driver":
        return cls.model_validate(dict(row))


class Vehicle(BaseModel):
    """Vehicle owned by one vendor, optionally with an assigned driver."""

    id: UUID
    vendor_id: UUID
    driver_id: Optional[UUID] = None
    type: VehicleType
    plate_number: str
    model: str
    year: Optional[int] = None
    color: Optional[str] = None
    seating_capacity: int = Field(4, ge=1)
    price_per_km: float = Field(12.0, ge=0.0)
    # None means "never set" and counts as available
    available: Optional[bool] = True
    current_lng: Optional[float] = None
    current_lat: Optional[float] = None
    created_at: Optional[datetime] = None

    @property
    def is_available(self) -> bool:
        return self.available is not False

    @property
    def current_location(self) -> GeoPoint | None:
        if self.current_lat is None or self.current_lng is None:
            return None
        return GeoPoint(lat=self.current_lat, lng=self.current_lng)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Vehicle":
        return cls.model_validate(dict(row))

    def public_dict(self) -> dict[str, Any]:
        """Listing shape: location as a GeoJSON point."""
        data = self.model_dump(mode="json", exclude={"current_lng", "current_lat"})
        location = self.current_location
        data["current_location"] = (
            {"type": "Point", "coordinates": location.as_lng_lat()} if location else None
        )
        return data
