# ride_booking/core/geo/geo_utils.py
import math

from ride_booking.core.geo.models import GeoPoint

EARTH_RADIUS_KM = 6371.0


def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Great-circle distance between two points in km (haversine).
    """
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)

    a = (math.sin(dlat / 2) ** 2 +
         math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) *
         math.sin(dlon / 2) ** 2)

    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def straight_line(pickup: GeoPoint, drop: GeoPoint) -> dict:
    """GeoJSON LineString joining two points."""
    return {
        "type": "LineString",
        "coordinates": [pickup.as_lng_lat(), drop.as_lng_lat()],
    }


def minutes_at_speed(distance_km: float, speed_kmh: float) -> int:
    """Travel time rounded up to whole minutes, never below one."""
    return max(1, math.ceil(distance_km / speed_kmh * 60))
