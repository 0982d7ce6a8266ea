# ride_booking/core/users/repository.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from ride_booking.core.users.models import User
from ride_booking.infra.database import DatabaseManager


class UserRepository:
    """Account lookups for token verification."""

    def __init__(self, db: DatabaseManager) -> None:
        self._db = db

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        row = await self._db.fetchrow(
            """
            SELECT id, name, email, phone, role, vendor_id, driver_id, is_active, created_at
            FROM users WHERE id = $1
            """,
            user_id,
        )
        return User.from_row(row) if row else None
