# ride_booking/services/booking_api/routes/bookings.py
"""
Dashboard booking management for vendors and administrators.

Endpoints:
- POST /bookings - manual booking on a customer's behalf
- GET /bookings - listing (vendors see their own)
- GET /bookings/user/{user_id} - a customer's bookings
- GET /bookings/{id} - details
- PUT /bookings/{id} - edit notes, vehicle, driver, status
- DELETE /bookings/{id} - hard delete (admin)
"""

from __future__ import annotations

from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, Query, status

from ride_booking.common.constants import BookingStatus
from ride_booking.services.booking_api.dependencies import Admin, Bookings, CurrentUser, VendorOrAdmin
from ride_booking.shared.models.booking_dto import BookingUpdateRequest, ManualBookingRequest

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_booking(
    request: ManualBookingRequest,
    user: VendorOrAdmin,
    service: Bookings,
) -> dict[str, Any]:
    booking = await service.create_booking(user, request)
    return {"success": True, "data": booking.to_public()}


@router.get("")
async def list_bookings(
    user: VendorOrAdmin,
    service: Bookings,
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    vendor_id: Optional[UUID] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
) -> dict[str, Any]:
    result = await service.list_bookings(
        user, status=status_filter, vendor_id=vendor_id, page=page, limit=limit
    )
    return {"success": True, "data": result.to_dict()}


@router.get("/user/{user_id}")
async def list_user_bookings(
    user_id: UUID,
    user: CurrentUser,
    service: Bookings,
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
) -> dict[str, Any]:
    result = await service.list_for_user(user, user_id, status=status_filter, page=page, limit=limit)
    return {"success": True, "data": result.to_dict()}


@router.get("/{booking_id}")
async def get_booking(booking_id: UUID, user: VendorOrAdmin, service: Bookings) -> dict[str, Any]:
    booking = await service.get_booking(user, booking_id)
    return {"success": True, "data": booking.to_public()}


@router.put("/{booking_id}")
async def update_booking(
    booking_id: UUID,
    request: BookingUpdateRequest,
    user: VendorOrAdmin,
    service: Bookings,
) -> dict[str, Any]:
    booking = await service.update_booking(user, booking_id, request)
    return {"success": True, "data": booking.to_public()}


@router.delete("/{booking_id}")
async def delete_booking(booking_id: UUID, user: Admin, service: Bookings) -> dict[str, Any]:
    booking = await service.delete_booking(booking_id)
    return {"success": True, "data": {"id": str(booking.id), "booking_code": booking.booking_code}}
