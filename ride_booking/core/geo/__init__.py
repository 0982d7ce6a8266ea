# ride_booking/core/geo/__init__.py
"""
Geocoding and routing against OpenStreetMap services.
"""

from ride_booking.core.geo.geocoder import GeoResolver, RateLimiter
from ride_booking.core.geo.models import GeocodedAddress, GeoPoint, RouteEstimate
from ride_booking.core.geo.router import RouteEstimator

__all__ = [
    "GeoResolver",
    "RateLimiter",
    "GeocodedAddress",
    "GeoPoint",
    "RouteEstimate",
    "RouteEstimator",
]
