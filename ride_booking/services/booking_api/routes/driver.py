# ride_booking/services/booking_api/routes/driver.py
"""
Driver endpoints.
"""

from __future__ import annotations

from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, Query

from ride_booking.common.constants import BookingStatus
from ride_booking.services.booking_api.dependencies import Bookings, Driver
from ride_booking.shared.models.booking_dto import DriverStatusRequest

router = APIRouter(prefix="/driver", tags=["Driver"])


@router.get("/bookings")
async def driver_bookings(
    user: Driver,
    service: Bookings,
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
) -> dict[str, Any]:
    result = await service.driver_bookings(user, status=status_filter, page=page, limit=limit)
    return {"success": True, "data": result.to_dict()}


@router.patch("/bookings/{booking_id}/status")
async def update_booking_status(
    booking_id: UUID,
    request: DriverStatusRequest,
    user: Driver,
    service: Bookings,
) -> dict[str, Any]:
    booking = await service.update_status_by_driver(user, booking_id, request.status)
    return {"success": True, "data": booking.to_public()}


@router.get("/profile")
async def driver_profile(user: Driver, service: Bookings) -> dict[str, Any]:
    return {"success": True, "data": await service.driver_profile(user)}
