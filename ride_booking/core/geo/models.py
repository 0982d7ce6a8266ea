# ride_booking/core/geo/models.py
"""
Geo value objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class GeoPoint:
    """WGS84 coordinate."""
    lat: float
    lng: float

    def as_lng_lat(self) -> list[float]:
        """GeoJSON order."""
        return [self.lng, self.lat]


@dataclass(frozen=True)
class GeocodedAddress:
    """Geocoder match for a free-text address."""
    lat: float
    lng: float
    normalized_address: str

    @property
    def point(self) -> GeoPoint:
        return GeoPoint(lat=self.lat, lng=self.lng)


@dataclass
class RouteEstimate:
    """Route between two points; `is_fallback` marks a straight-line estimate."""
    distance_km: float
    duration_min: int
    geometry: dict[str, Any] = field(default_factory=dict)
    is_fallback: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "distance_km": self.distance_km,
            "duration_min": self.duration_min,
            "geometry": self.geometry,
            "is_fallback": self.is_fallback,
        }
