# tests/conftest.py
"""
Shared fixtures.

Service tests run against an in-memory booking store whose transaction()
serializes callers the way row locks do, so concurrency properties can be
exercised without PostgreSQL.
"""

from __future__ import annotations

import asyncio
import json
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, AsyncGenerator, Callable
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest

# Environment must be set before ride_booking.config is imported
os.environ.setdefault("TOKEN_SECRET", "test-secret")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "")

from ride_booking.common.constants import UserRole, VehicleType  # noqa: E402
from ride_booking.common.errors import ConflictError  # noqa: E402
from ride_booking.core.bookings.assignment import AssignmentResolver  # noqa: E402
from ride_booking.core.bookings.models import Booking  # noqa: E402
from ride_booking.core.bookings.repository import (  # noqa: E402
    BOOKING_CODE_CONSTRAINT,
    UPDATABLE_COLUMNS,
    BookingFilter,
)
from ride_booking.core.bookings.service import BookingService  # noqa: E402
from ride_booking.core.fleet.models import Driver, Vehicle, Vendor  # noqa: E402
from ride_booking.core.geo.models import GeocodedAddress, RouteEstimate  # noqa: E402
from ride_booking.core.notifications import NotificationHub  # noqa: E402
from ride_booking.core.pricing.service import FareCalculator  # noqa: E402
from ride_booking.core.users.models import User  # noqa: E402

FIXED_NOW = datetime(2024, 5, 17, 9, 30, tzinfo=timezone.utc)


# =============================================================================
# CONFIGURATION
# =============================================================================

@pytest.fixture(scope="session")
def project_root() -> Path:
    return Path(__file__).parent.parent


@pytest.fixture
def mock_config() -> dict[str, Any]:
    """Minimal config.json content."""
    return {
        "_comment_system": "system",
        "PROJECT_NAME": "ride_booking_test",
        "VERSION": "1.0.0-test",
        "DEBUG": False,
        "ENVIRONMENT": "test",
        "HOST": "127.0.0.1",
        "PORT": 5001,
        "ALLOWED_ORIGINS": ["http://localhost:3000"],
        "LOG_LEVEL": "DEBUG",
        "LOG_FORMAT": "json",
        "BASE_FARE": 40.0,
        "FARE_PER_KM": 10.0,
        "FARE_PER_MINUTE": 2.0,
        "MIN_FARE": 60.0,
        "CURRENCY": "INR",
        "DEFAULT_VEHICLE_TYPE": "suv",
    }


@pytest.fixture
def temp_config_file(tmp_path: Path, mock_config: dict[str, Any]) -> Path:
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps(mock_config, indent=2))
    return config_file


# =============================================================================
# INFRASTRUCTURE FAKES
# =============================================================================

@pytest.fixture
def mock_db() -> AsyncMock:
    """Mock DatabaseManager for repository tests."""
    db = AsyncMock()
    db.fetchrow = AsyncMock(return_value=None)
    db.fetch = AsyncMock(return_value=[])
    db.execute = AsyncMock(return_value="UPDATE 1")
    db.fetchval = AsyncMock(return_value=0)
    return db


class FakeSocket:
    """Connection handle that records what it was sent."""

    def __init__(self, fail: bool = False) -> None:
        self.sent: list[dict[str, Any]] = []
        self.fail = fail

    async def send_json(self, data: Any) -> None:
        if self.fail:
            raise ConnectionResetError("socket closed")
        self.sent.append(data)

    def events(self) -> list[str]:
        return [m["event"] for m in self.sent]


class FakeDatabase:
    """transaction() holds one lock, standing in for the booking row lock."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self.transactions = 0

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[object, None]:
        async with self._lock:
            self.transactions += 1
            yield object()


class InMemoryBookingRepository:
    """BookingRepository over a dict; rows use the same columns as the table."""

    def __init__(self) -> None:
        self.rows: dict[UUID, dict[str, Any]] = {}

    async def insert(self, row: dict[str, Any], conn: Any = None) -> Booking:
        await asyncio.sleep(0)
        if any(r["booking_code"] == row["booking_code"] for r in self.rows.values()):
            raise ConflictError("Unique constraint violated", constraint=BOOKING_CODE_CONSTRAINT)
        stored = {
            **row,
            "id": uuid4(),
            "cancelled_by": None,
            "cancellation_reason": None,
            "cancelled_at": None,
            "payment_transaction_id": None,
            "payment_refunded_at": None,
            "start_time": None,
            "end_time": None,
            "created_at": FIXED_NOW,
            "updated_at": FIXED_NOW,
        }
        self.rows[stored["id"]] = stored
        return Booking.from_row(stored)

    async def get(self, booking_id: UUID, conn: Any = None) -> Booking | None:
        row = self.rows.get(booking_id)
        return Booking.from_row(row) if row else None

    async def get_for_update(self, booking_id: UUID, conn: Any) -> Booking | None:
        # Yield so concurrent callers interleave unless the lock serializes them
        await asyncio.sleep(0)
        return await self.get(booking_id)

    async def update(self, booking_id: UUID, changes: dict[str, Any], conn: Any = None) -> Booking | None:
        unknown = set(changes) - UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Columns not updatable: {sorted(unknown)}")
        await asyncio.sleep(0)
        row = self.rows.get(booking_id)
        if row is None:
            return None
        row.update(changes)
        return Booking.from_row(row)

    async def delete(self, booking_id: UUID) -> Booking | None:
        row = self.rows.pop(booking_id, None)
        return Booking.from_row(row) if row else None

    def _matching(self, filters: BookingFilter) -> list[dict[str, Any]]:
        wanted = dict(zip((c.split(" = ")[0] for c in filters.conditions), filters.args))
        return [r for r in self.rows.values() if all(r.get(k) == v for k, v in wanted.items())]

    async def find(self, filters: BookingFilter, *, limit: int, offset: int) -> list[Booking]:
        rows = self._matching(filters)[offset:offset + limit]
        return [Booking.from_row(r) for r in rows]

    async def count(self, filters: BookingFilter) -> int:
        return len(self._matching(filters))

    async def driver_stats(self, driver_id: UUID, now: datetime | None = None) -> dict[str, Any]:
        return {
            "total_bookings": 0,
            "completed_bookings": 0,
            "today_bookings": 0,
            "total_earnings": 0.0,
            "completion_rate": 0.0,
        }


@pytest.fixture
def socket_factory() -> Callable[..., FakeSocket]:
    return FakeSocket


@pytest.fixture
def hub() -> NotificationHub:
    return NotificationHub()


# =============================================================================
# DOMAIN DATA
# =============================================================================

@pytest.fixture
def vendor() -> Vendor:
    return Vendor(id=uuid4(), name="City Cabs", phone="+919800000001")


@pytest.fixture
def driver(vendor: Vendor) -> Driver:
    return Driver(id=uuid4(), vendor_id=vendor.id, name="Ravi Kumar", phone="+919800000002")


@pytest.fixture
def vehicle(vendor: Vendor, driver: Driver) -> Vehicle:
    return Vehicle(
        id=uuid4(),
        vendor_id=vendor.id,
        driver_id=driver.id,
        type=VehicleType.SEDAN,
        plate_number="KA01AB1234",
        model="Dzire",
        current_lng=77.5946,
        current_lat=12.9716,
    )


@pytest.fixture
def customer() -> User:
    return User(id=uuid4(), name="Asha", email="asha@example.com", role=UserRole.CUSTOMER)


@pytest.fixture
def vendor_user(vendor: Vendor) -> User:
    return User(id=uuid4(), name="Fleet Desk", email="desk@citycabs.in", role=UserRole.VENDOR, vendor_id=vendor.id)


@pytest.fixture
def driver_user(driver: Driver) -> User:
    return User(id=uuid4(), name="Ravi Kumar", email="ravi@citycabs.in", role=UserRole.DRIVER, driver_id=driver.id)


@pytest.fixture
def admin_user() -> User:
    return User(id=uuid4(), name="Admin", email="admin@example.com", role=UserRole.ADMIN)


@pytest.fixture
def booking_row_factory(customer: User) -> Callable[..., dict[str, Any]]:
    """Full bookings row as asyncpg would return it."""

    def make(**overrides: Any) -> dict[str, Any]:
        row: dict[str, Any] = {
            "id": uuid4(),
            "booking_code": f"BK-20240517-{uuid4().hex[:12].upper()}",
            "customer_id": customer.id,
            "vehicle_type": "sedan",
            "vehicle_id": None,
            "driver_id": None,
            "vendor_id": None,
            "booking_type": "instant",
            "status": "pending",
            "pickup_address": "MG Road, Bengaluru",
            "pickup_lng": 77.6075,
            "pickup_lat": 12.9756,
            "pickup_time": FIXED_NOW,
            "pickup_notes": None,
            "drop_address": "Kempegowda International Airport",
            "drop_lng": 77.7066,
            "drop_lat": 13.1986,
            "estimated_distance_km": 33.4,
            "estimated_duration_min": 52,
            "drop_notes": None,
            "fare_base": 50.0,
            "fare_distance": 400.8,
            "fare_time": 52.0,
            "fare_surge": 1.0,
            "fare_total": 503.0,
            "currency": "INR",
            "fare_paid": False,
            "payment_method": "cash",
            "payment_status": "pending",
            "payment_amount": 503.0,
            "payment_transaction_id": None,
            "payment_refunded_at": None,
            "route_geometry": {"type": "LineString", "coordinates": [[77.6075, 12.9756], [77.7066, 13.1986]]},
            "route_is_fallback": False,
            "cancelled_by": None,
            "cancellation_reason": None,
            "cancelled_at": None,
            "notes": None,
            "start_time": None,
            "end_time": None,
            "created_at": FIXED_NOW,
            "updated_at": FIXED_NOW,
        }
        row.update(overrides)
        return row

    return make


# =============================================================================
# SERVICE WIRING
# =============================================================================

@pytest.fixture
def booking_repo() -> InMemoryBookingRepository:
    return InMemoryBookingRepository()


@pytest.fixture
def fake_db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def fleet(vehicle: Vehicle, driver: Driver, vendor: Vendor) -> AsyncMock:
    """Fleet with one available sedan."""
    repo = AsyncMock()

    async def available(vehicle_id: UUID) -> Vehicle | None:
        return vehicle if vehicle_id == vehicle.id else None

    async def first_by_type(vehicle_type: str, vendor_id: UUID | None = None) -> Vehicle | None:
        if vehicle_type == vehicle.type.value and vendor_id in (None, vehicle.vendor_id):
            return vehicle
        return None

    async def get_driver(driver_id: UUID) -> Driver | None:
        return driver if driver_id == driver.id else None

    repo.get_available_vehicle = AsyncMock(side_effect=available)
    repo.get_vehicle = AsyncMock(side_effect=available)
    repo.first_available_by_type = AsyncMock(side_effect=first_by_type)
    repo.get_driver = AsyncMock(side_effect=get_driver)
    repo.get_vendor = AsyncMock(return_value=vendor)
    repo.list_available = AsyncMock(return_value=[vehicle])
    return repo


@pytest.fixture
def users(customer: User) -> AsyncMock:
    repo = AsyncMock()

    async def get_by_id(user_id: UUID) -> User | None:
        return customer if user_id == customer.id else None

    repo.get_by_id = AsyncMock(side_effect=get_by_id)
    return repo


@pytest.fixture
def geo() -> AsyncMock:
    resolver = AsyncMock()
    resolver.resolve = AsyncMock(
        side_effect=lambda address: GeocodedAddress(
            lat=12.9716, lng=77.5946, normalized_address=f"{address}, Bengaluru, Karnataka, India"
        )
    )
    return resolver


@pytest.fixture
def router() -> AsyncMock:
    estimator = AsyncMock()
    estimator.route = AsyncMock(
        return_value=RouteEstimate(
            distance_km=10.0,
            duration_min=20,
            geometry={"type": "LineString", "coordinates": [[77.5946, 12.9716], [77.6408, 12.9784]]},
        )
    )
    return estimator


@pytest.fixture
def fares() -> FareCalculator:
    return FareCalculator(base_fare=50.0, per_km=12.0, per_minute=1.0, min_fare=80.0, surge=1.0, currency="INR")


@pytest.fixture
def booking_service(
    fake_db: FakeDatabase,
    booking_repo: InMemoryBookingRepository,
    users: AsyncMock,
    fleet: AsyncMock,
    geo: AsyncMock,
    router: AsyncMock,
    fares: FareCalculator,
    hub: NotificationHub,
) -> BookingService:
    return BookingService(
        fake_db,  # type: ignore[arg-type]
        booking_repo,  # type: ignore[arg-type]
        users,
        fleet,
        AssignmentResolver(fleet),
        geo,
        router,
        fares,
        hub,
        clock=lambda: FIXED_NOW,
    )
