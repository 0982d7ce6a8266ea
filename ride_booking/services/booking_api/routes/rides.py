# ride_booking/services/booking_api/routes/rides.py
"""
Customer ride flow: estimate, book, history, details, cancel.
"""

from __future__ import annotations

from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, Query, status

from ride_booking.common.constants import BookingStatus
from ride_booking.services.booking_api.dependencies import Bookings, CurrentUser, Customer
from ride_booking.shared.models.booking_dto import CancelRideRequest, RideBookingRequest, RideEstimateRequest

router = APIRouter(prefix="/ride", tags=["Rides"])


@router.post("/estimate")
async def estimate_ride(request: RideEstimateRequest, user: CurrentUser, service: Bookings) -> dict[str, Any]:
    """Distance, duration and fare without booking anything."""
    estimate = await service.estimate(request.pickup, request.drop)
    return {"success": True, "data": estimate.to_dict()}


@router.post("/book", status_code=status.HTTP_201_CREATED)
async def book_ride(request: RideBookingRequest, user: Customer, service: Bookings) -> dict[str, Any]:
    booking = await service.book_ride(user, request)
    return {"success": True, "data": booking.to_public()}


@router.get("/history")
async def ride_history(
    user: Customer,
    service: Bookings,
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
) -> dict[str, Any]:
    result = await service.ride_history(user, status=status_filter, page=page, limit=limit)
    return {"success": True, "data": result.to_dict()}


@router.get("/{booking_id}")
async def get_ride(booking_id: UUID, user: CurrentUser, service: Bookings) -> dict[str, Any]:
    """Ride details for its customer or the assigned driver."""
    booking = await service.get_booking(user, booking_id)
    return {"success": True, "data": booking.to_public()}


@router.post("/{booking_id}/cancel")
async def cancel_ride(
    booking_id: UUID,
    user: Customer,
    service: Bookings,
    request: Optional[CancelRideRequest] = None,
) -> dict[str, Any]:
    reason = request.reason if request else None
    booking = await service.cancel_ride(user, booking_id, reason)
    return {"success": True, "data": booking.to_public()}
