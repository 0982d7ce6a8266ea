# ride_booking/core/geo/geocoder.py
"""
Address geocoding through a Nominatim-compatible API.

Nominatim's usage policy allows one request per second, so every
GeoResolver in the process shares one RateLimiter by default.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Awaitable, Callable

import httpx

from ride_booking.common.constants import TypeMsg
from ride_booking.common.errors import NotFoundError, UpstreamError, ValidationError
from ride_booking.common.logger import log_error, log_info
from ride_booking.core.geo.models import GeocodedAddress


class RateLimiter:
    """
    Enforces a minimum interval between calls.
    Callers queue on the lock, so concurrent requests are spaced out
    instead of bursting.
    """

    def __init__(
        self,
        min_interval: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()
        self._last_request: float | None = None

    @property
    def last_request_time(self) -> float | None:
        return self._last_request

    async def wait(self) -> None:
        async with self._lock:
            if self._last_request is not None:
                remaining = self.min_interval - (self._clock() - self._last_request)
                if remaining > 0:
                    await self._sleep(remaining)
            self._last_request = self._clock()


_default_limiter: RateLimiter | None = None


def get_default_rate_limiter() -> RateLimiter:
    """Process-wide limiter shared by every resolver."""
    global _default_limiter
    if _default_limiter is None:
        from ride_booking.config import settings
        _default_limiter = RateLimiter(settings.geo.GEOCODER_MIN_INTERVAL)
    return _default_limiter


class GeoResolver:
    """
    Resolves free-text addresses to coordinates.

    Results are restricted to the configured country and bounding box.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        base_url: str | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
        language: str | None = None,
        country_codes: str | None = None,
        viewbox: str | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        from ride_booking.config import settings

        geo = settings.geo
        self._base_url = (base_url or geo.GEOCODER_URL).rstrip("/")
        self._user_agent = user_agent or geo.GEOCODER_USER_AGENT
        self._timeout = timeout if timeout is not None else geo.GEOCODER_TIMEOUT
        self._language = language or geo.GEOCODER_LANGUAGE
        self._country_codes = country_codes or geo.GEOCODER_COUNTRY_CODES
        self._viewbox = viewbox or geo.GEOCODER_VIEWBOX
        self._limiter = rate_limiter or get_default_rate_limiter()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _params(self, address: str) -> dict[str, Any]:
        return {
            "q": address,
            "format": "json",
            "limit": 1,
            "addressdetails": 1,
            "accept-language": self._language,
            "countrycodes": self._country_codes,
            "viewbox": self._viewbox,
            "bounded": 1,
        }

    async def resolve(self, address: str) -> GeocodedAddress:
        """
        Geocodes an address.

        Raises:
            ValidationError: Empty address
            NotFoundError: Geocoder returned no match
            UpstreamError: Network failure, timeout or unusable response
        """
        query = (address or "").strip()
        if not query:
            raise ValidationError("Address must not be empty")

        await self._limiter.wait()

        try:
            response = await self._client.get(
                f"{self._base_url}/search",
                params=self._params(query),
                headers={"User-Agent": self._user_agent},
                timeout=self._timeout,
            )
            response.raise_for_status()
            results = response.json()
        except httpx.TimeoutException as e:
            await log_error(f"Geocoder timed out for '{query}': {e}")
            raise UpstreamError("Geocoding service timed out", details={"address": query}) from e
        except httpx.HTTPError as e:
            await log_error(f"Geocoder request failed for '{query}': {e}")
            raise UpstreamError("Geocoding service unavailable", details={"address": query}) from e
        except ValueError as e:
            raise UpstreamError("Geocoding service returned invalid JSON", details={"address": query}) from e

        if not isinstance(results, list):
            raise UpstreamError("Unexpected geocoder response", details={"address": query})
        if not results:
            await log_info(f"No geocoding match for '{query}'", type_msg=TypeMsg.WARNING)
            raise NotFoundError(f"Address not found: {query}", details={"address": query})

        first = results[0]
        try:
            return GeocodedAddress(
                lat=float(first["lat"]),
                lng=float(first["lon"]),
                normalized_address=first.get("display_name") or query,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamError("Unexpected geocoder response", details={"address": query}) from e
