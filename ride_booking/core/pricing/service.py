# ride_booking/core/pricing/service.py
"""
Fare calculation from route distance and duration.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any

from ride_booking.common.errors import ValidationError


@dataclass(frozen=True)
class FareBreakdown:
    """Fare components; `total` is rounded up to a whole currency unit."""
    base: float
    distance: float
    time: float
    surge: float
    total: float
    currency: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class FareCalculator:
    """
    total = ceil(max((base + per_km * d + per_min * t) * surge, minimum))

    Rates are read from settings unless passed explicitly. No I/O.
    """

    def __init__(
        self,
        base_fare: float | None = None,
        per_km: float | None = None,
        per_minute: float | None = None,
        min_fare: float | None = None,
        surge: float | None = None,
        currency: str | None = None,
    ) -> None:
        from ride_booking.config import settings

        fares = settings.fares
        self.base_fare = fares.BASE_FARE if base_fare is None else base_fare
        self.per_km = fares.FARE_PER_KM if per_km is None else per_km
        self.per_minute = fares.FARE_PER_MINUTE if per_minute is None else per_minute
        self.min_fare = fares.MIN_FARE if min_fare is None else min_fare
        self.surge = fares.SURGE_MULTIPLIER if surge is None else surge
        self.currency = currency or fares.CURRENCY

        if self.surge < 1.0:
            raise ValidationError("Surge multiplier must be >= 1.0")

    def calculate(self, distance_km: float, duration_min: float) -> FareBreakdown:
        if distance_km < 0 or duration_min < 0:
            raise ValidationError(
                "Distance and duration must be non-negative",
                details={"distance_km": distance_km, "duration_min": duration_min},
            )

        distance_component = self.per_km * distance_km
        time_component = self.per_minute * duration_min
        subtotal = (self.base_fare + distance_component + time_component) * self.surge
        total = math.ceil(max(subtotal, self.min_fare))

        return FareBreakdown(
            base=round(self.base_fare, 2),
            distance=round(distance_component, 2),
            time=round(time_component, 2),
            surge=self.surge,
            total=float(total),
            currency=self.currency,
        )
