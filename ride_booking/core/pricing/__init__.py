# ride_booking/core/pricing/__init__.py
"""
Fare calculation.
"""

from ride_booking.core.pricing.service import FareBreakdown, FareCalculator

__all__ = [
    "FareBreakdown",
    "FareCalculator",
]
