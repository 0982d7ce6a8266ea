# tests/core/test_fleet_repository.py
"""
Tests for fleet models and queries.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from ride_booking.core.fleet.models import Vehicle
from ride_booking.core.fleet.repository import FleetRepository


def vehicle_row(**overrides: Any) -> dict[str, Any]:
    row: dict[str, Any] = {
        "id": uuid4(),
        "vendor_id": uuid4(),
        "driver_id": None,
        "type": "suv",
        "plate_number": "KA05MN4321",
        "model": "Innova",
        "year": 2021,
        "color": "white",
        "seating_capacity": 7,
        "price_per_km": 16.0,
        "available": None,
        "current_lng": None,
        "current_lat": None,
        "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
    }
    row.update(overrides)
    return row


class TestVehicle:
    def test_unset_availability_counts_as_available(self) -> None:
        assert Vehicle.from_row(vehicle_row()).is_available is True
        assert Vehicle.from_row(vehicle_row(available=False)).is_available is False

    def test_public_dict_without_location(self) -> None:
        data = Vehicle.from_row(vehicle_row()).public_dict()

        assert data["current_location"] is None
        assert "current_lat" not in data
        assert data["type"] == "suv"


class TestFleetRepository:
    """Query shape tests."""

    @pytest.mark.asyncio
    async def test_available_vehicle_skips_unavailable(self, mock_db: AsyncMock) -> None:
        row = vehicle_row()
        mock_db.fetchrow.return_value = row

        vehicle = await FleetRepository(mock_db).get_available_vehicle(row["id"])

        assert vehicle.id == row["id"]
        assert "available IS DISTINCT FROM FALSE" in mock_db.fetchrow.call_args.args[0]

    @pytest.mark.asyncio
    async def test_first_by_type_is_ordered(self, mock_db: AsyncMock) -> None:
        vendor_id = uuid4()

        result = await FleetRepository(mock_db).first_available_by_type("suv", vendor_id=vendor_id)

        assert result is None
        query = mock_db.fetchrow.call_args.args[0]
        assert "ORDER BY created_at, id" in query
        assert "LIMIT 1" in query
        assert mock_db.fetchrow.call_args.args[1:] == ("suv", vendor_id)

    @pytest.mark.asyncio
    async def test_list_available_by_type(self, mock_db: AsyncMock) -> None:
        mock_db.fetch.return_value = [vehicle_row(), vehicle_row()]

        vehicles = await FleetRepository(mock_db).list_available("suv")

        assert len(vehicles) == 2
        assert mock_db.fetch.call_args.args[1] == "suv"

    @pytest.mark.asyncio
    async def test_list_all(self, mock_db: AsyncMock) -> None:
        await FleetRepository(mock_db).list_available()

        assert len(mock_db.fetch.call_args.args) == 1

    @pytest.mark.asyncio
    async def test_get_driver(self, mock_db: AsyncMock) -> None:
        driver_id = uuid4()
        mock_db.fetchrow.return_value = {
            "id": driver_id,
            "vendor_id": uuid4(),
            "name": "Ravi Kumar",
            "phone": None,
            "license_number": "KA0120230001234",
            "rating": 4.8,
            "is_active": True,
        }

        driver = await FleetRepository(mock_db).get_driver(driver_id)

        assert driver.id == driver_id
        assert driver.rating == 4.8

    @pytest.mark.asyncio
    async def test_missing_vendor(self, mock_db: AsyncMock) -> None:
        assert await FleetRepository(mock_db).get_vendor(uuid4()) is None


class TestVehicleManagement:
    """Write queries used by the fleet endpoints."""

    @pytest.mark.asyncio
    async def test_list_vehicles_scoped_to_vendor(self, mock_db: AsyncMock) -> None:
        vendor_id = uuid4()
        mock_db.fetch.return_value = [vehicle_row(vendor_id=vendor_id)]

        vehicles = await FleetRepository(mock_db).list_vehicles(vendor_id)

        assert vehicles[0].vendor_id == vendor_id
        assert "$1::uuid IS NULL OR vendor_id = $1" in mock_db.fetch.call_args.args[0]
        assert mock_db.fetch.call_args.args[1] == vendor_id

    @pytest.mark.asyncio
    async def test_create_vehicle(self, mock_db: AsyncMock) -> None:
        row = vehicle_row()
        mock_db.fetchrow.return_value = row
        values = {"vendor_id": row["vendor_id"], "type": "suv", "plate_number": "KA05MN4321", "model": "Innova"}

        vehicle = await FleetRepository(mock_db).create_vehicle(values)

        assert vehicle.id == row["id"]
        query = mock_db.fetchrow.call_args.args[0]
        assert query.startswith("INSERT INTO vehicles (vendor_id, type, plate_number, model) VALUES ($1, $2, $3, $4)")
        assert "RETURNING" in query
        assert mock_db.fetchrow.call_args.args[1:] == tuple(values.values())

    @pytest.mark.asyncio
    async def test_update_vehicle(self, mock_db: AsyncMock) -> None:
        row = vehicle_row(available=False)
        mock_db.fetchrow.return_value = row

        vehicle = await FleetRepository(mock_db).update_vehicle(row["id"], {"available": False}, vendor_id=row["vendor_id"])

        assert vehicle.is_available is False
        args = mock_db.fetchrow.call_args.args
        assert "SET available = $3" in args[0]
        assert "($2::uuid IS NULL OR vendor_id = $2)" in args[0]
        assert args[1:] == (row["id"], row["vendor_id"], False)

    @pytest.mark.asyncio
    async def test_update_rejects_unknown_columns(self, mock_db: AsyncMock) -> None:
        with pytest.raises(ValueError, match="vendor_id"):
            await FleetRepository(mock_db).update_vehicle(uuid4(), {"vendor_id": uuid4()})

        mock_db.fetchrow.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_update_respects_vendor(self, mock_db: AsyncMock) -> None:
        row = vehicle_row()
        mock_db.fetchrow.return_value = row
        repo = FleetRepository(mock_db)

        assert (await repo.update_vehicle(row["id"], {}, vendor_id=row["vendor_id"])).id == row["id"]
        assert await repo.update_vehicle(row["id"], {}, vendor_id=uuid4()) is None

    @pytest.mark.asyncio
    async def test_delete_vehicle_not_found(self, mock_db: AsyncMock) -> None:
        vehicle_id, vendor_id = uuid4(), uuid4()

        assert await FleetRepository(mock_db).delete_vehicle(vehicle_id, vendor_id=vendor_id) is None
        assert mock_db.fetchrow.call_args.args[0].strip().startswith("DELETE FROM vehicles")
        assert mock_db.fetchrow.call_args.args[1:] == (vehicle_id, vendor_id)
