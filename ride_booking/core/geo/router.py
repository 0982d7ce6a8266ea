# ride_booking/core/geo/router.py
"""
Driving routes through an OSRM-compatible API.

A routing failure never fails a booking: the estimator falls back to the
great-circle distance at a fixed average speed and flags the result.
"""

from __future__ import annotations

import math

import httpx

from ride_booking.common.constants import TypeMsg
from ride_booking.common.logger import log_info
from ride_booking.core.geo.geo_utils import calculate_distance, minutes_at_speed, straight_line
from ride_booking.core.geo.models import GeoPoint, RouteEstimate


def _positive_number(value: object) -> bool:
    # json accepts NaN and Infinity; bool is an int subclass
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
        and value > 0
    )


class RouteEstimator:
    """Distance, duration and geometry between two points."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        fallback_speed_kmh: float | None = None,
    ) -> None:
        from ride_booking.config import settings

        geo = settings.geo
        self._base_url = (base_url or geo.ROUTER_URL).rstrip("/")
        self._timeout = timeout if timeout is not None else geo.ROUTER_TIMEOUT
        self._speed_kmh = fallback_speed_kmh or geo.FALLBACK_SPEED_KMH
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _url(self, pickup: GeoPoint, drop: GeoPoint) -> str:
        return (
            f"{self._base_url}/route/v1/driving/"
            f"{pickup.lng},{pickup.lat};{drop.lng},{drop.lat}"
        )

    async def route(self, pickup: GeoPoint, drop: GeoPoint) -> RouteEstimate:
        try:
            response = await self._client.get(
                self._url(pickup, drop),
                params={
                    "overview": "full",
                    "geometries": "geojson",
                    "steps": "false",
                    "alternatives": "false",
                },
                timeout=self._timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            await log_info(f"Routing service failed, using straight-line estimate: {e}", type_msg=TypeMsg.WARNING)
            return self.fallback(pickup, drop)

        routes = data.get("routes") if isinstance(data, dict) else None
        if not isinstance(routes, list) or not routes or not isinstance(routes[0], dict):
            await log_info("Routing service found no route, using straight-line estimate", type_msg=TypeMsg.WARNING)
            return self.fallback(pickup, drop)

        best = routes[0]
        distance_m = best.get("distance")
        duration_s = best.get("duration")
        if not _positive_number(distance_m) or not _positive_number(duration_s):
            await log_info("Routing service returned an unusable route, using straight-line estimate", type_msg=TypeMsg.WARNING)
            return self.fallback(pickup, drop)

        geometry = best.get("geometry")
        if not isinstance(geometry, dict):
            geometry = straight_line(pickup, drop)

        return RouteEstimate(
            distance_km=round(distance_m / 1000, 1),
            duration_min=max(1, math.ceil(duration_s / 60)),
            geometry=geometry,
            is_fallback=False,
        )

    def fallback(self, pickup: GeoPoint, drop: GeoPoint) -> RouteEstimate:
        """Haversine distance at the configured average speed."""
        distance = calculate_distance(pickup.lat, pickup.lng, drop.lat, drop.lng)
        return RouteEstimate(
            distance_km=round(distance, 1),
            duration_min=minutes_at_speed(distance, self._speed_kmh),
            geometry=straight_line(pickup, drop),
            is_fallback=True,
        )
