# tests/shared/test_dto.py
"""
Tests for request DTOs.
"""

from __future__ import annotations

from uuid import uuid4

import pytest
from pydantic import ValidationError

from ride_booking.common.constants import BookingType, PaymentMethod
from ride_booking.shared.models import (
    AddressLocation,
    BookingUpdateRequest,
    DriverLocationMessage,
    ManualBookingRequest,
    PointLocation,
    RideBookingRequest,
    RideEstimateRequest,
    VehicleCreateRequest,
    VehicleUpdateRequest,
)


class TestLocationInput:
    """Tests for the point/address union."""

    def test_point(self) -> None:
        request = RideEstimateRequest.model_validate({
            "pickup": {"kind": "point", "lat": 12.97, "lng": 77.59},
            "drop": {"kind": "address", "address": "  Indiranagar  "},
        })

        assert isinstance(request.pickup, PointLocation)
        assert isinstance(request.drop, AddressLocation)
        assert request.drop.address == "Indiranagar"

    def test_unknown_kind(self) -> None:
        with pytest.raises(ValidationError):
            RideEstimateRequest.model_validate({
                "pickup": {"kind": "plus_code", "code": "7J4VWHGV+"},
                "drop": {"kind": "address", "address": "Indiranagar"},
            })

    def test_ambiguous_payload_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AddressLocation.model_validate({"kind": "address", "address": "MG Road", "lat": 12.9})

    @pytest.mark.parametrize("coords", [{"lat": 91.0, "lng": 0.0}, {"lat": 0.0, "lng": -181.0}])
    def test_out_of_range(self, coords: dict) -> None:
        with pytest.raises(ValidationError):
            PointLocation.model_validate({"kind": "point", **coords})

    def test_blank_address(self) -> None:
        with pytest.raises(ValidationError):
            AddressLocation.model_validate({"kind": "address", "address": "   "})

    def test_point_label(self) -> None:
        assert PointLocation(kind="point", lat=1.5, lng=2.25).label() == "1.500000, 2.250000"
        assert PointLocation(kind="point", lat=1.5, lng=2.25, address=" Home ").label() == "Home"


class TestRideBookingRequest:
    BASE = {
        "pickup": {"kind": "address", "address": "MG Road"},
        "drop": {"kind": "address", "address": "Indiranagar"},
    }

    def test_defaults(self) -> None:
        request = RideBookingRequest.model_validate(self.BASE)

        assert request.vehicle_type is None
        assert request.booking_type == BookingType.INSTANT
        assert request.payment_method is None

    def test_vehicle_class(self) -> None:
        request = RideBookingRequest.model_validate({**self.BASE, "vehicle_type": " suv "})
        assert request.vehicle_type == "suv"

    def test_vehicle_id(self) -> None:
        vehicle_id = str(uuid4())
        request = RideBookingRequest.model_validate({**self.BASE, "vehicle_type": vehicle_id})
        assert request.vehicle_type == vehicle_id

    def test_unknown_vehicle_ref(self) -> None:
        with pytest.raises(ValidationError, match="vehicle class or a vehicle id"):
            RideBookingRequest.model_validate({**self.BASE, "vehicle_type": "rickshaw"})

    def test_payment_method(self) -> None:
        request = RideBookingRequest.model_validate({**self.BASE, "payment_method": "upi"})
        assert request.payment_method == PaymentMethod.UPI

    def test_extra_field_forbidden(self) -> None:
        with pytest.raises(ValidationError):
            RideBookingRequest.model_validate({**self.BASE, "fare": 10})

    def test_manual_requires_customer(self) -> None:
        with pytest.raises(ValidationError):
            ManualBookingRequest.model_validate(self.BASE)


class TestBookingUpdateRequest:
    def test_all_optional(self) -> None:
        assert BookingUpdateRequest().model_dump(exclude_none=True) == {}

    def test_unknown_status(self) -> None:
        with pytest.raises(ValidationError):
            BookingUpdateRequest.model_validate({"status": "teleported"})


class TestRideEstimateRequest:
    BASE = TestRideBookingRequest.BASE

    def test_accepts_vehicle_class(self) -> None:
        request = RideEstimateRequest.model_validate({**self.BASE, "vehicle_type": "sedan"})
        assert request.vehicle_type == "sedan"

    def test_vehicle_type_optional(self) -> None:
        assert RideEstimateRequest.model_validate(self.BASE).vehicle_type is None

    def test_unknown_vehicle_ref(self) -> None:
        with pytest.raises(ValidationError, match="vehicle class or a vehicle id"):
            RideEstimateRequest.model_validate({**self.BASE, "vehicle_type": "rickshaw"})

    def test_other_fields_still_forbidden(self) -> None:
        with pytest.raises(ValidationError):
            RideEstimateRequest.model_validate({**self.BASE, "payment_method": "cash"})


class TestVehicleRequests:
    def test_create_normalizes_plate(self) -> None:
        request = VehicleCreateRequest.model_validate({"type": "suv", "plate_number": " ka01mn0001 ", "model": "XUV"})

        assert request.plate_number == "KA01MN0001"
        assert request.available is True
        assert request.seating_capacity == 4

    @pytest.mark.parametrize(
        "body",
        [
            {"type": "rickshaw", "plate_number": "KA01", "model": "Ape"},
            {"type": "sedan", "plate_number": "   ", "model": "City"},
            {"type": "sedan", "plate_number": "KA01", "model": "City", "seating_capacity": 1},
            {"type": "sedan", "plate_number": "KA01", "model": "City", "insurance": "VALID"},
        ],
    )
    def test_create_rejects(self, body: dict) -> None:
        with pytest.raises(ValidationError):
            VehicleCreateRequest.model_validate(body)

    def test_update_changes_only_sent_fields(self) -> None:
        request = VehicleUpdateRequest.model_validate({"available": False, "color": "White"})
        assert request.changes() == {"available": False, "color": "White"}

    def test_update_null_driver_unlinks(self) -> None:
        request = VehicleUpdateRequest.model_validate({"driver_id": None})
        assert request.changes() == {"driver_id": None}

    def test_update_null_on_required_column_ignored(self) -> None:
        request = VehicleUpdateRequest.model_validate({"model": None, "plate_number": None})
        assert request.changes() == {}


class TestDriverLocationMessage:
    def test_valid(self) -> None:
        booking_id = uuid4()
        message = DriverLocationMessage.model_validate({"booking_id": str(booking_id), "lat": 12.9, "lng": 77.6})

        assert message.booking_id == booking_id
        assert message.heading is None

    @pytest.mark.parametrize("coords", [{"lat": 95.0, "lng": 77.6}, {"lat": 12.9, "lng": 200.0}])
    def test_out_of_range(self, coords: dict) -> None:
        with pytest.raises(ValidationError):
            DriverLocationMessage.model_validate({"booking_id": str(uuid4()), **coords})
