# ride_booking/config/__init__.py
"""
Application configuration.
"""

from ride_booking.config.loader import Settings, get_settings, settings

__all__ = ["Settings", "get_settings", "settings"]
