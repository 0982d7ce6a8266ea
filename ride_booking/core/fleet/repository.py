# ride_booking/core/fleet/repository.py
"""
Fleet queries: vehicle listing and management, driver and vendor lookups.
"""

from __future__ import annotations

from typing import Any, Optional
from uuid import UUID

from ride_booking.core.fleet.models import Driver, Vehicle, Vendor
from ride_booking.infra.database import DatabaseManager

VEHICLE_COLUMNS = """
    id, vendor_id, driver_id, type, plate_number, model, year, color,
    seating_capacity, price_per_km, available, current_lng, current_lat, created_at
"""

# Columns a vendor may change on an existing vehicle
VEHICLE_UPDATABLE_COLUMNS = frozenset({
    "driver_id",
    "type",
    "plate_number",
    "model",
    "year",
    "color",
    "seating_capacity",
    "price_per_km",
    "available",
    "current_lng",
    "current_lat",
})

PLATE_NUMBER_CONSTRAINT = "vehicles_plate_number_key"


class FleetRepository:
    """Vehicles, drivers and vendors."""

    def __init__(self, db: DatabaseManager) -> None:
        self._db = db

    async def get_vehicle(self, vehicle_id: UUID) -> Optional[Vehicle]:
        row = await self._db.fetchrow(
            f"SELECT {VEHICLE_COLUMNS} FROM vehicles WHERE id = $1",
            vehicle_id,
        )
        return Vehicle.from_row(row) if row else None

    async def get_available_vehicle(self, vehicle_id: UUID) -> Optional[Vehicle]:
        """Vehicle by id, unless it has been explicitly marked unavailable."""
        row = await self._db.fetchrow(
            f"""
            SELECT {VEHICLE_COLUMNS} FROM vehicles
            WHERE id = $1 AND available IS DISTINCT FROM FALSE
            """,
            vehicle_id,
        )
        return Vehicle.from_row(row) if row else None

    async def first_available_by_type(
        self,
        vehicle_type: str,
        vendor_id: UUID | None = None,
    ) -> Optional[Vehicle]:
        """Oldest available vehicle of a class, optionally within one vendor's fleet."""
        row = await self._db.fetchrow(
            f"""
            SELECT {VEHICLE_COLUMNS} FROM vehicles
            WHERE type = $1
              AND available IS DISTINCT FROM FALSE
              AND ($2::uuid IS NULL OR vendor_id = $2)
            ORDER BY created_at, id
            LIMIT 1
            """,
            vehicle_type,
            vendor_id,
        )
        return Vehicle.from_row(row) if row else None

    async def list_available(self, vehicle_type: str | None = None) -> list[Vehicle]:
        if vehicle_type:
            rows = await self._db.fetch(
                f"""
                SELECT {VEHICLE_COLUMNS} FROM vehicles
                WHERE available IS DISTINCT FROM FALSE AND type = $1
                ORDER BY created_at, id
                """,
                vehicle_type,
            )
        else:
            rows = await self._db.fetch(
                f"""
                SELECT {VEHICLE_COLUMNS} FROM vehicles
                WHERE available IS DISTINCT FROM FALSE
                ORDER BY created_at, id
                """
            )
        return [Vehicle.from_row(row) for row in rows]

    # ===== VEHICLE MANAGEMENT =====

    async def list_vehicles(self, vendor_id: UUID | None = None) -> list[Vehicle]:
        """A vendor's fleet, or every vehicle when no vendor is given."""
        rows = await self._db.fetch(
            f"""
            SELECT {VEHICLE_COLUMNS} FROM vehicles
            WHERE $1::uuid IS NULL OR vendor_id = $1
            ORDER BY created_at, id
            """,
            vendor_id,
        )
        return [Vehicle.from_row(row) for row in rows]

    async def create_vehicle(self, row: dict[str, Any]) -> Vehicle:
        """Inserts a vehicle; a taken plate number raises ConflictError."""
        columns = list(row.keys())
        placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))
        record = await self._db.fetchrow(
            f"INSERT INTO vehicles ({', '.join(columns)}) VALUES ({placeholders}) RETURNING {VEHICLE_COLUMNS}",
            *row.values(),
        )
        return Vehicle.from_row(record)

    async def update_vehicle(
        self,
        vehicle_id: UUID,
        changes: dict[str, Any],
        vendor_id: UUID | None = None,
    ) -> Optional[Vehicle]:
        """Applies changes; with vendor_id set only that vendor's vehicle matches."""
        unknown = set(changes) - VEHICLE_UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Columns not updatable: {sorted(unknown)}")
        if not changes:
            vehicle = await self.get_vehicle(vehicle_id)
            if vehicle is None or (vendor_id is not None and vehicle.vendor_id != vendor_id):
                return None
            return vehicle

        columns = list(changes.keys())
        assignments = ", ".join(f"{col} = ${i}" for i, col in enumerate(columns, start=3))
        record = await self._db.fetchrow(
            f"""
            UPDATE vehicles SET {assignments}
            WHERE id = $1 AND ($2::uuid IS NULL OR vendor_id = $2)
            RETURNING {VEHICLE_COLUMNS}
            """,
            vehicle_id,
            vendor_id,
            *changes.values(),
        )
        return Vehicle.from_row(record) if record else None

    async def delete_vehicle(self, vehicle_id: UUID, vendor_id: UUID | None = None) -> Optional[Vehicle]:
        record = await self._db.fetchrow(
            f"""
            DELETE FROM vehicles
            WHERE id = $1 AND ($2::uuid IS NULL OR vendor_id = $2)
            RETURNING {VEHICLE_COLUMNS}
            """,
            vehicle_id,
            vendor_id,
        )
        return Vehicle.from_row(record) if record else None

    async def get_driver(self, driver_id: UUID) -> Optional[Driver]:
        row = await self._db.fetchrow(
            """
            SELECT id, vendor_id, name, phone, license_number, rating, is_active
            FROM drivers WHERE id = $1
            """,
            driver_id,
        )
        return Driver.from_row(row) if row else None

    async def get_vendor(self, vendor_id: UUID) -> Optional[Vendor]:
        row = await self._db.fetchrow(
            "SELECT id, name, phone, email, is_active FROM vendors WHERE id = $1",
            vendor_id,
        )
        return Vendor.model_validate(dict(row)) if row else None
