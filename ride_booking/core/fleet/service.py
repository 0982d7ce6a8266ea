# ride_booking/core/fleet/service.py
"""
Vehicle management for vendors and administrators.

Vendors work on their own fleet only; a vehicle of another vendor is
reported as not found. Administrators see every vehicle and must name the
vendor when creating one. Every change is pushed to the owning vendor as
`vehicle:update`.
"""

from __future__ import annotations

from typing import Any, Literal
from uuid import UUID

from ride_booking.common.constants import ActorType, TypeMsg, UserRole
from ride_booking.common.errors import (
    AuthorizationError,
    ConflictError,
    DuplicateError,
    NotFoundError,
    ValidationError,
)
from ride_booking.common.logger import log_info
from ride_booking.core.fleet.models import Vehicle
from ride_booking.core.fleet.repository import PLATE_NUMBER_CONSTRAINT, FleetRepository
from ride_booking.core.notifications.hub import NotificationHub
from ride_booking.core.users.models import User
from ride_booking.shared.events import VehicleUpdated
from ride_booking.shared.models.vehicle_dto import VehicleCreateRequest, VehicleUpdateRequest


class FleetService:
    """Vehicle CRUD scoped to the acting vendor."""

    def __init__(self, fleet: FleetRepository, hub: NotificationHub) -> None:
        self._fleet = fleet
        self._hub = hub

    @staticmethod
    def _vendor_scope(actor: User) -> UUID | None:
        """None for administrators, the actor's vendor id otherwise."""
        if actor.role == UserRole.ADMIN:
            return None
        if actor.role != UserRole.VENDOR:
            raise AuthorizationError("Only vendors and admins can manage vehicles")
        if actor.vendor_id is None:
            raise AuthorizationError("Vendor profile not linked to this account")
        return actor.vendor_id

    async def _check_driver(self, driver_id: UUID | None, vendor_id: UUID) -> None:
        if driver_id is None:
            return
        driver = await self._fleet.get_driver(driver_id)
        if driver is None:
            raise NotFoundError("Driver not found", details={"driver_id": str(driver_id)})
        if driver.vendor_id != vendor_id:
            raise AuthorizationError("Driver belongs to another vendor")

    async def _announce(self, action: Literal["created", "updated", "deleted"], vehicle: Vehicle) -> None:
        await log_info(
            f"Vehicle {vehicle.plate_number} {action} (vendor {vehicle.vendor_id})",
            type_msg=TypeMsg.INFO,
        )
        await self._hub.publish(
            vehicle.vendor_id,
            ActorType.VENDOR,
            VehicleUpdated(action=action, vehicle=vehicle.public_dict()),
        )

    @staticmethod
    def _duplicate_plate(error: ConflictError, plate_number: str | None) -> Exception:
        if error.constraint == PLATE_NUMBER_CONSTRAINT:
            return DuplicateError(
                "Plate number already registered",
                details={"plate_number": plate_number},
            )
        return error

    # ===== READS =====

    async def list_vehicles(self, actor: User) -> list[Vehicle]:
        return await self._fleet.list_vehicles(self._vendor_scope(actor))

    async def get_vehicle(self, actor: User, vehicle_id: UUID) -> Vehicle:
        scope = self._vendor_scope(actor)
        vehicle = await self._fleet.get_vehicle(vehicle_id)
        if vehicle is None or (scope is not None and vehicle.vendor_id != scope):
            raise NotFoundError("Vehicle not found", details={"vehicle_id": str(vehicle_id)})
        return vehicle

    # ===== WRITES =====

    async def create_vehicle(self, actor: User, request: VehicleCreateRequest) -> Vehicle:
        scope = self._vendor_scope(actor)
        if scope is None:
            if request.vendor_id is None:
                raise ValidationError("vendor_id is required when an administrator adds a vehicle")
            if await self._fleet.get_vendor(request.vendor_id) is None:
                raise NotFoundError("Vendor not found", details={"vendor_id": str(request.vendor_id)})
            vendor_id = request.vendor_id
        else:
            if request.vendor_id is not None and request.vendor_id != scope:
                raise AuthorizationError("Vehicles can only be added to your own fleet")
            vendor_id = scope

        await self._check_driver(request.driver_id, vendor_id)

        row: dict[str, Any] = request.model_dump(exclude={"vendor_id"})
        row["type"] = request.type.value
        row["vendor_id"] = vendor_id
        try:
            vehicle = await self._fleet.create_vehicle(row)
        except ConflictError as e:
            raise self._duplicate_plate(e, request.plate_number) from e

        await self._announce("created", vehicle)
        return vehicle

    async def update_vehicle(self, actor: User, vehicle_id: UUID, request: VehicleUpdateRequest) -> Vehicle:
        current = await self.get_vehicle(actor, vehicle_id)
        changes = request.changes()
        if changes.get("type") is not None:
            changes["type"] = changes["type"].value
        await self._check_driver(changes.get("driver_id"), current.vendor_id)

        try:
            vehicle = await self._fleet.update_vehicle(vehicle_id, changes, vendor_id=current.vendor_id)
        except ConflictError as e:
            raise self._duplicate_plate(e, changes.get("plate_number")) from e
        if vehicle is None:
            raise NotFoundError("Vehicle not found", details={"vehicle_id": str(vehicle_id)})

        await self._announce("updated", vehicle)
        return vehicle

    async def delete_vehicle(self, actor: User, vehicle_id: UUID) -> Vehicle:
        vehicle = await self._fleet.delete_vehicle(vehicle_id, vendor_id=self._vendor_scope(actor))
        if vehicle is None:
            raise NotFoundError("Vehicle not found", details={"vehicle_id": str(vehicle_id)})
        await self._announce("deleted", vehicle)
        return vehicle
