# ride_booking/core/users/models.py
"""
Account model.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional
from uuid import UUID

from pydantic import BaseModel

from ride_booking.common.constants import ActorType, UserRole


class User(BaseModel):
    """Login identity with a role and optional vendor/driver profile link."""

    id: UUID
    name: str
    email: str
    phone: Optional[str] = None
    role: UserRole = UserRole.CUSTOMER
    vendor_id: Optional[UUID] = None
    driver_id: Optional[UUID] = None
    is_active: bool = True
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "User":
        return cls.model_validate(dict(row))

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def channel(self) -> tuple[ActorType, UUID] | None:
        """
        Realtime channel this account listens on: drivers on their driver
        profile, vendors on their vendor id, customers (and admins) on the
        account id. None when a profile link is missing.
        """
        if self.role == UserRole.DRIVER:
            return (ActorType.DRIVER, self.driver_id) if self.driver_id else None
        if self.role == UserRole.VENDOR:
            return (ActorType.VENDOR, self.vendor_id) if self.vendor_id else None
        return ActorType.CUSTOMER, self.id
