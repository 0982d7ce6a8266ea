# ride_booking/shared/models/location_dto.py
"""
Location input.

A location is either an explicit point or a free-text address that still
has to be geocoded. The `kind` field selects the variant; unknown fields
are rejected so an ambiguous payload never gets coerced.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PointLocation(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["point"]
    lat: float = Field(..., ge=-90.0, le=90.0)
    lng: float = Field(..., ge=-180.0, le=180.0)
    address: str = ""

    def label(self) -> str:
        return self.address.strip() or f"{self.lat:.6f}, {self.lng:.6f}"


class AddressLocation(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["address"]
    address: str = Field(..., min_length=1)

    @field_validator("address")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("address must not be blank")
        return v.strip()


LocationInput = Annotated[Union[PointLocation, AddressLocation], Field(discriminator="kind")]
