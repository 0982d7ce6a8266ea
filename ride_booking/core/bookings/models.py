# ride_booking/core/bookings/models.py
"""
Booking data models.

Storage keeps a flat row; the model nests pickup, drop, fare, payment and
cancellation the way clients consume them. Coordinates are [lng, lat].
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ride_booking.common.constants import (
    BookingStatus,
    BookingType,
    CancelledBy,
    PaymentMethod,
    PaymentStatus,
)
from ride_booking.core.geo.models import GeoPoint


class PickupInfo(BaseModel):
    address: str
    coordinates: tuple[float, float] = Field(..., description="[lng, lat]")
    time: datetime
    notes: Optional[str] = None


class DropInfo(BaseModel):
    address: str
    coordinates: tuple[float, float] = Field(..., description="[lng, lat]")
    estimated_distance_km: float = Field(0.0, ge=0.0)
    estimated_duration_min: int = Field(1, ge=1)
    notes: Optional[str] = None


class Fare(BaseModel):
    base: float
    distance: float
    time: float
    surge: float = 1.0
    total: float
    currency: str = "INR"
    is_paid: bool = False


class Payment(BaseModel):
    method: PaymentMethod = PaymentMethod.CASH
    status: PaymentStatus = PaymentStatus.PENDING
    amount: float
    transaction_id: Optional[str] = None
    refunded_at: Optional[datetime] = None

    @property
    def is_online(self) -> bool:
        return self.method != PaymentMethod.CASH


class Cancellation(BaseModel):
    by: CancelledBy
    reason: Optional[str] = None
    timestamp: datetime


class Booking(BaseModel):
    """Persisted booking."""

    id: UUID
    booking_code: str
    customer_id: UUID
    vehicle_type: str
    vehicle_id: Optional[UUID] = None
    driver_id: Optional[UUID] = None
    vendor_id: Optional[UUID] = None
    booking_type: BookingType = BookingType.INSTANT
    status: BookingStatus = BookingStatus.PENDING

    pickup: PickupInfo
    drop: DropInfo
    fare: Fare
    payment: Payment

    route_geometry: Optional[dict[str, Any]] = None
    route_is_fallback: bool = False
    cancellation: Optional[Cancellation] = None
    notes: Optional[str] = None

    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @property
    def is_active(self) -> bool:
        return self.status not in (
            BookingStatus.COMPLETED,
            BookingStatus.CANCELLED,
            BookingStatus.REJECTED,
        )

    def to_public(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Booking":
        r = dict(row)
        cancellation = None
        if r.get("cancelled_by"):
            cancellation = Cancellation(
                by=r["cancelled_by"],
                reason=r.get("cancellation_reason"),
                timestamp=r["cancelled_at"],
            )
        return cls(
            id=r["id"],
            booking_code=r["booking_code"],
            customer_id=r["customer_id"],
            vehicle_type=r["vehicle_type"],
            vehicle_id=r.get("vehicle_id"),
            driver_id=r.get("driver_id"),
            vendor_id=r.get("vendor_id"),
            booking_type=r["booking_type"],
            status=r["status"],
            pickup=PickupInfo(
                address=r["pickup_address"],
                coordinates=(r["pickup_lng"], r["pickup_lat"]),
                time=r["pickup_time"],
                notes=r.get("pickup_notes"),
            ),
            drop=DropInfo(
                address=r["drop_address"],
                coordinates=(r["drop_lng"], r["drop_lat"]),
                estimated_distance_km=r["estimated_distance_km"],
                estimated_duration_min=r["estimated_duration_min"],
                notes=r.get("drop_notes"),
            ),
            fare=Fare(
                base=r["fare_base"],
                distance=r["fare_distance"],
                time=r["fare_time"],
                surge=r["fare_surge"],
                total=r["fare_total"],
                currency=r["currency"],
                is_paid=r["fare_paid"],
            ),
            payment=Payment(
                method=r["payment_method"],
                status=r["payment_status"],
                amount=r["payment_amount"],
                transaction_id=r.get("payment_transaction_id"),
                refunded_at=r.get("payment_refunded_at"),
            ),
            route_geometry=r.get("route_geometry"),
            route_is_fallback=r.get("route_is_fallback", False),
            cancellation=cancellation,
            notes=r.get("notes"),
            start_time=r.get("start_time"),
            end_time=r.get("end_time"),
            created_at=r["created_at"],
            updated_at=r["updated_at"],
        )


@dataclass
class BookingDraft:
    """Everything needed to insert a booking; storage fills id and timestamps."""

    customer_id: UUID
    vehicle_type: str
    status: BookingStatus
    booking_type: BookingType
    pickup_address: str
    pickup_point: GeoPoint
    pickup_time: datetime
    drop_address: str
    drop_point: GeoPoint
    distance_km: float
    duration_min: int
    fare_base: float
    fare_distance: float
    fare_time: float
    fare_surge: float
    fare_total: float
    currency: str
    payment_method: PaymentMethod
    route_geometry: dict[str, Any] = field(default_factory=dict)
    route_is_fallback: bool = False
    vehicle_id: UUID | None = None
    driver_id: UUID | None = None
    vendor_id: UUID | None = None
    pickup_notes: str | None = None
    drop_notes: str | None = None
    notes: str | None = None

    def to_row(self, booking_code: str) -> dict[str, Any]:
        return {
            "booking_code": booking_code,
            "customer_id": self.customer_id,
            "vehicle_type": self.vehicle_type,
            "vehicle_id": self.vehicle_id,
            "driver_id": self.driver_id,
            "vendor_id": self.vendor_id,
            "booking_type": self.booking_type.value,
            "status": self.status.value,
            "pickup_address": self.pickup_address,
            "pickup_lng": self.pickup_point.lng,
            "pickup_lat": self.pickup_point.lat,
            "pickup_time": self.pickup_time,
            "pickup_notes": self.pickup_notes,
            "drop_address": self.drop_address,
            "drop_lng": self.drop_point.lng,
            "drop_lat": self.drop_point.lat,
            "estimated_distance_km": self.distance_km,
            "estimated_duration_min": self.duration_min,
            "drop_notes": self.drop_notes,
            "fare_base": self.fare_base,
            "fare_distance": self.fare_distance,
            "fare_time": self.fare_time,
            "fare_surge": self.fare_surge,
            "fare_total": self.fare_total,
            "currency": self.currency,
            "fare_paid": False,
            "payment_method": self.payment_method.value,
            "payment_status": PaymentStatus.PENDING.value,
            # Payment starts out equal to the fare
            "payment_amount": self.fare_total,
            "route_geometry": self.route_geometry,
            "route_is_fallback": self.route_is_fallback,
            "notes": self.notes,
        }


@dataclass
class Page:
    """One page of a listing."""

    items: list[Booking]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [b.to_public() for b in self.items],
            "pagination": {
                "total": self.total,
                "page": self.page,
                "pages": self.pages,
                "limit": self.limit,
            },
        }
