# tests/core/test_assignment.py
"""
Tests for AssignmentResolver.
"""

from __future__ import annotations

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from ride_booking.core.bookings.assignment import Assignment, AssignmentResolver, parse_vehicle_id
from ride_booking.core.fleet.models import Vehicle


class TestParseVehicleId:
    def test_uuid(self) -> None:
        vehicle_id = uuid4()
        assert parse_vehicle_id(str(vehicle_id)) == vehicle_id

    def test_class_name(self) -> None:
        assert parse_vehicle_id("sedan") is None


class TestAssignmentResolver:
    """Tests for AssignmentResolver.resolve."""

    @pytest.mark.asyncio
    async def test_vehicle_id_matches_exactly(self, fleet: AsyncMock, vehicle: Vehicle) -> None:
        assignment = await AssignmentResolver(fleet).resolve(str(vehicle.id))

        assert assignment.vehicle is vehicle
        assert assignment.vendor_id == vehicle.vendor_id
        assert assignment.driver_id == vehicle.driver_id
        assert assignment.degraded is False
        fleet.get_available_vehicle.assert_awaited_once_with(vehicle.id)
        fleet.first_available_by_type.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_vehicle_id_is_unassigned(self, fleet: AsyncMock) -> None:
        assignment = await AssignmentResolver(fleet).resolve(str(uuid4()))

        assert assignment == Assignment.unassigned()
        assert assignment.degraded is True

    @pytest.mark.asyncio
    async def test_class_picks_first_available(self, fleet: AsyncMock, vehicle: Vehicle) -> None:
        assignment = await AssignmentResolver(fleet).resolve("sedan")

        assert assignment.vehicle is vehicle
        fleet.first_available_by_type.assert_awaited_once_with("sedan", vendor_id=None)

    @pytest.mark.asyncio
    async def test_class_without_vehicles_is_unassigned(self, fleet: AsyncMock) -> None:
        assignment = await AssignmentResolver(fleet).resolve("luxury")

        assert assignment.vehicle is None
        assert assignment.vendor_id is None
        assert assignment.driver_id is None

    @pytest.mark.asyncio
    async def test_vendor_scope_rejects_foreign_vehicle(self, fleet: AsyncMock, vehicle: Vehicle) -> None:
        assignment = await AssignmentResolver(fleet).resolve(str(vehicle.id), vendor_id=uuid4())

        assert assignment.degraded is True

    @pytest.mark.asyncio
    async def test_vendor_scope_passed_to_class_lookup(self, fleet: AsyncMock, vehicle: Vehicle) -> None:
        assignment = await AssignmentResolver(fleet).resolve("sedan", vendor_id=vehicle.vendor_id)

        assert assignment.vehicle is vehicle
        fleet.first_available_by_type.assert_awaited_once_with("sedan", vendor_id=vehicle.vendor_id)

    @pytest.mark.asyncio
    async def test_vehicle_without_driver(self, fleet: AsyncMock, vehicle: Vehicle) -> None:
        driverless = vehicle.model_copy(update={"driver_id": None})
        fleet.get_available_vehicle = AsyncMock(return_value=driverless)

        assignment = await AssignmentResolver(fleet).resolve(str(vehicle.id))

        assert assignment.vendor_id == vehicle.vendor_id
        assert assignment.driver_id is None
