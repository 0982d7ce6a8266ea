# ride_booking/core/users/__init__.py
"""
User accounts.
"""

from ride_booking.core.users.models import User
from ride_booking.core.users.repository import UserRepository

__all__ = [
    "User",
    "UserRepository",
]
