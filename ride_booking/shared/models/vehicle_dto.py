# ride_booking/shared/models/vehicle_dto.py
"""
Vehicle management request bodies.
"""

from __future__ import annotations

from typing import Annotated, Any, Optional
from uuid import UUID

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from ride_booking.common.constants import VehicleType

NULLABLE_FIELDS = frozenset({"driver_id", "year", "color", "available", "current_lat", "current_lng"})


def _normalize_plate(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip().upper()
    if not v:
        raise ValueError("plate_number must not be empty")
    return v


class VehicleCreateRequest(BaseModel):
    """New vehicle for a vendor's fleet. Admins name the vendor, vendors get their own."""

    model_config = ConfigDict(extra="forbid")

    type: VehicleType
    plate_number: Annotated[str, AfterValidator(_normalize_plate)] = Field(..., max_length=20)
    model: str = Field(..., min_length=1, max_length=100)
    year: Optional[int] = Field(None, ge=2000, le=2100)
    color: Optional[str] = Field(None, max_length=50)
    seating_capacity: int = Field(4, ge=2, le=20)
    price_per_km: float = Field(12.0, ge=0)
    available: bool = True
    driver_id: Optional[UUID] = None
    vendor_id: Optional[UUID] = None
    current_lat: Optional[float] = Field(None, ge=-90, le=90)
    current_lng: Optional[float] = Field(None, ge=-180, le=180)


class VehicleUpdateRequest(BaseModel):
    """
    Partial update. Only fields present in the body change; an explicit
    null driver_id unlinks the driver.
    """

    model_config = ConfigDict(extra="forbid")

    type: Optional[VehicleType] = None
    plate_number: Annotated[Optional[str], AfterValidator(_normalize_plate)] = Field(None, max_length=20)
    model: Optional[str] = Field(None, min_length=1, max_length=100)
    year: Optional[int] = Field(None, ge=2000, le=2100)
    color: Optional[str] = Field(None, max_length=50)
    seating_capacity: Optional[int] = Field(None, ge=2, le=20)
    price_per_km: Optional[float] = Field(None, ge=0)
    available: Optional[bool] = None
    driver_id: Optional[UUID] = None
    current_lat: Optional[float] = Field(None, ge=-90, le=90)
    current_lng: Optional[float] = Field(None, ge=-180, le=180)

    def changes(self) -> dict[str, Any]:
        data = self.model_dump(exclude_unset=True)
        # Columns without a NULL state ignore an explicit null
        return {k: v for k, v in data.items() if v is not None or k in NULLABLE_FIELDS}
