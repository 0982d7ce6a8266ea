# tests/core/test_users_repository.py
"""
Tests for accounts.
"""

from __future__ import annotations

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from ride_booking.common.constants import ActorType, UserRole
from ride_booking.core.users.models import User
from ride_booking.core.users.repository import UserRepository


class TestUserChannel:
    """Tests for User.channel."""

    def test_customer_listens_on_account_id(self, customer: User) -> None:
        assert customer.channel() == (ActorType.CUSTOMER, customer.id)

    def test_driver_listens_on_profile(self, driver_user: User) -> None:
        assert driver_user.channel() == (ActorType.DRIVER, driver_user.driver_id)

    def test_vendor_listens_on_vendor_id(self, vendor_user: User) -> None:
        assert vendor_user.channel() == (ActorType.VENDOR, vendor_user.vendor_id)

    @pytest.mark.parametrize("role", [UserRole.DRIVER, UserRole.VENDOR])
    def test_unlinked_profile(self, role: UserRole) -> None:
        user = User(id=uuid4(), name="X", email="x@example.com", role=role)
        assert user.channel() is None

    def test_admin(self, admin_user: User) -> None:
        assert admin_user.is_admin
        assert admin_user.channel() == (ActorType.CUSTOMER, admin_user.id)


class TestUserRepository:
    @pytest.mark.asyncio
    async def test_get_by_id(self, mock_db: AsyncMock) -> None:
        user_id = uuid4()
        mock_db.fetchrow.return_value = {
            "id": user_id,
            "name": "Asha",
            "email": "asha@example.com",
            "phone": None,
            "role": "customer",
            "vendor_id": None,
            "driver_id": None,
            "is_active": True,
            "created_at": None,
        }

        user = await UserRepository(mock_db).get_by_id(user_id)

        assert user.id == user_id
        assert user.role == UserRole.CUSTOMER
        assert mock_db.fetchrow.call_args.args[1] == user_id

    @pytest.mark.asyncio
    async def test_missing(self, mock_db: AsyncMock) -> None:
        assert await UserRepository(mock_db).get_by_id(uuid4()) is None
