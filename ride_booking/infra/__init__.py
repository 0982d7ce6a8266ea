# ride_booking/infra/__init__.py
"""
Infrastructure layer: PostgreSQL access.
"""

from ride_booking.infra.database import DatabaseManager, get_db

__all__ = [
    "DatabaseManager",
    "get_db",
]
