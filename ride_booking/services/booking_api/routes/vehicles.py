# ride_booking/services/booking_api/routes/vehicles.py
"""
Vehicle listing and fleet management.

Endpoints:
- GET /vehicles/available - public listing of bookable vehicles
- POST /vehicles - add a vehicle (vendor: own fleet, admin: any vendor)
- GET /vehicles - the vendor's fleet (admin: every vehicle)
- GET /vehicles/{id} - details
- PUT /vehicles/{id} - partial update, including availability and driver
- DELETE /vehicles/{id} - remove from the fleet
"""

from __future__ import annotations

from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, Query, status

from ride_booking.common.constants import VehicleType
from ride_booking.services.booking_api.dependencies import Fleet, VendorOrAdmin, Vehicles
from ride_booking.shared.models.vehicle_dto import VehicleCreateRequest, VehicleUpdateRequest

router = APIRouter(prefix="/vehicles", tags=["Vehicles"])


# Declared before /{vehicle_id} so "available" is not parsed as an id
@router.get("/available")
async def available_vehicles(
    fleet: Fleet,
    vehicle_type: Optional[VehicleType] = Query(None, alias="type"),
) -> dict[str, Any]:
    vehicles = await fleet.list_available(vehicle_type.value if vehicle_type else None)
    return {"success": True, "data": [v.public_dict() for v in vehicles]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_vehicle(request: VehicleCreateRequest, user: VendorOrAdmin, service: Vehicles) -> dict[str, Any]:
    vehicle = await service.create_vehicle(user, request)
    return {"success": True, "data": vehicle.public_dict()}


@router.get("")
async def list_vehicles(user: VendorOrAdmin, service: Vehicles) -> dict[str, Any]:
    vehicles = await service.list_vehicles(user)
    return {"success": True, "data": [v.public_dict() for v in vehicles]}


@router.get("/{vehicle_id}")
async def get_vehicle(vehicle_id: UUID, user: VendorOrAdmin, service: Vehicles) -> dict[str, Any]:
    vehicle = await service.get_vehicle(user, vehicle_id)
    return {"success": True, "data": vehicle.public_dict()}


@router.put("/{vehicle_id}")
async def update_vehicle(
    vehicle_id: UUID,
    request: VehicleUpdateRequest,
    user: VendorOrAdmin,
    service: Vehicles,
) -> dict[str, Any]:
    vehicle = await service.update_vehicle(user, vehicle_id, request)
    return {"success": True, "data": vehicle.public_dict()}


@router.delete("/{vehicle_id}")
async def delete_vehicle(vehicle_id: UUID, user: VendorOrAdmin, service: Vehicles) -> dict[str, Any]:
    vehicle = await service.delete_vehicle(user, vehicle_id)
    return {"success": True, "data": {"id": str(vehicle.id), "message": "Vehicle deleted"}}
