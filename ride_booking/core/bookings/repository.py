# ride_booking/core/bookings/repository.py
"""
Booking persistence.

Methods accept an optional `conn` so the service can run several of them
inside one transaction; without it they go through the pool.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from uuid import UUID

from asyncpg import Connection

from ride_booking.core.bookings.models import Booking
from ride_booking.infra.database import DatabaseManager

# Columns a status transition or vendor edit may touch
UPDATABLE_COLUMNS = frozenset({
    "status",
    "vehicle_id",
    "driver_id",
    "vendor_id",
    "notes",
    "start_time",
    "end_time",
    "fare_paid",
    "payment_status",
    "payment_refunded_at",
    "cancelled_by",
    "cancellation_reason",
    "cancelled_at",
})

BOOKING_CODE_CONSTRAINT = "bookings_booking_code_key"


class BookingFilter:
    """WHERE clause builder for listings."""

    def __init__(
        self,
        *,
        status: str | None = None,
        customer_id: UUID | None = None,
        vendor_id: UUID | None = None,
        driver_id: UUID | None = None,
    ) -> None:
        self.conditions: list[str] = []
        self.args: list[Any] = []
        for column, value in (
            ("status", status),
            ("customer_id", customer_id),
            ("vendor_id", vendor_id),
            ("driver_id", driver_id),
        ):
            if value is not None:
                self.args.append(value)
                self.conditions.append(f"{column} = ${len(self.args)}")

    @property
    def sql(self) -> str:
        return f"WHERE {' AND '.join(self.conditions)}" if self.conditions else ""


class BookingRepository:
    """Bookings table access."""

    def __init__(self, db: DatabaseManager) -> None:
        self._db = db

    def _executor(self, conn: Connection | None) -> Any:
        return conn if conn is not None else self._db

    async def insert(self, row: dict[str, Any], conn: Connection | None = None) -> Booking:
        columns = list(row.keys())
        placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))
        record = await self._executor(conn).fetchrow(
            f"INSERT INTO bookings ({', '.join(columns)}) VALUES ({placeholders}) RETURNING *",
            *row.values(),
        )
        return Booking.from_row(record)

    async def get(self, booking_id: UUID, conn: Connection | None = None) -> Optional[Booking]:
        record = await self._executor(conn).fetchrow("SELECT * FROM bookings WHERE id = $1", booking_id)
        return Booking.from_row(record) if record else None

    async def get_for_update(self, booking_id: UUID, conn: Connection) -> Optional[Booking]:
        """Reads and row-locks a booking until the surrounding transaction ends."""
        record = await conn.fetchrow("SELECT * FROM bookings WHERE id = $1 FOR UPDATE", booking_id)
        return Booking.from_row(record) if record else None

    async def update(
        self,
        booking_id: UUID,
        changes: dict[str, Any],
        conn: Connection | None = None,
    ) -> Optional[Booking]:
        unknown = set(changes) - UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Columns not updatable: {sorted(unknown)}")
        if not changes:
            return await self.get(booking_id, conn)

        columns = list(changes.keys())
        assignments = ", ".join(f"{col} = ${i}" for i, col in enumerate(columns, start=2))
        record = await self._executor(conn).fetchrow(
            f"UPDATE bookings SET {assignments}, updated_at = NOW() WHERE id = $1 RETURNING *",
            booking_id,
            *changes.values(),
        )
        return Booking.from_row(record) if record else None

    async def delete(self, booking_id: UUID) -> Optional[Booking]:
        record = await self._db.fetchrow("DELETE FROM bookings WHERE id = $1 RETURNING *", booking_id)
        return Booking.from_row(record) if record else None

    async def find(self, filters: BookingFilter, *, limit: int, offset: int) -> list[Booking]:
        n = len(filters.args)
        records = await self._db.fetch(
            f"""
            SELECT * FROM bookings {filters.sql}
            ORDER BY created_at DESC, id
            LIMIT ${n + 1} OFFSET ${n + 2}
            """,
            *filters.args,
            limit,
            offset,
        )
        return [Booking.from_row(r) for r in records]

    async def count(self, filters: BookingFilter) -> int:
        return await self._db.fetchval(f"SELECT COUNT(*) FROM bookings {filters.sql}", *filters.args)

    async def driver_stats(self, driver_id: UUID, now: datetime | None = None) -> dict[str, Any]:
        """Totals for the driver dashboard; "today" is the current UTC day."""
        now = now or datetime.now(timezone.utc)
        day_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        record = await self._db.fetchrow(
            """
            SELECT
                COUNT(*) AS total_bookings,
                COUNT(*) FILTER (WHERE status = 'completed') AS completed_bookings,
                COUNT(*) FILTER (WHERE created_at >= $2 AND created_at < $3) AS today_bookings,
                -- Earnings count only rides whose payment was collected
                COALESCE(
                    SUM(payment_amount) FILTER (WHERE status = 'completed' AND payment_status = 'completed'),
                    0
                ) AS total_earnings
            FROM bookings
            WHERE driver_id = $1
            """,
            driver_id,
            day_start,
            day_start + timedelta(days=1),
        )
        total = record["total_bookings"]
        completed = record["completed_bookings"]
        return {
            "total_bookings": total,
            "completed_bookings": completed,
            "today_bookings": record["today_bookings"],
            "total_earnings": float(record["total_earnings"]),
            "completion_rate": round(completed / total * 100, 1) if total else 0.0,
        }
