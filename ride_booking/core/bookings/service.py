# ride_booking/core/bookings/service.py
"""
Booking orchestration.

Creation runs assignment -> geocoding -> routing -> pricing -> insert, then
announces the booking. Every later mutation is a read-verify-write inside
one transaction holding the booking's row lock; notifications go out only
after commit.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable
from uuid import UUID, uuid4

from ride_booking.common.constants import (
    REASSIGNABLE_STATUSES,
    STATUS_MESSAGES,
    TRACKABLE_STATUSES,
    ActorType,
    BookingStatus,
    PaymentMethod,
    TypeMsg,
    UserRole,
)
from ride_booking.common.errors import (
    AuthorizationError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
    UpstreamError,
)
from ride_booking.common.logger import log_info, log_warning
from ride_booking.core.bookings.assignment import Assignment, AssignmentResolver
from ride_booking.core.bookings.models import Booking, BookingDraft, Page
from ride_booking.core.bookings.repository import BOOKING_CODE_CONSTRAINT, BookingFilter, BookingRepository
from ride_booking.core.bookings.state_machine import BookingStateMachine
from ride_booking.core.fleet.repository import FleetRepository
from ride_booking.core.geo.geocoder import GeoResolver
from ride_booking.core.geo.models import GeoPoint, RouteEstimate
from ride_booking.core.geo.router import RouteEstimator
from ride_booking.core.notifications.hub import NotificationHub
from ride_booking.core.pricing.service import FareBreakdown, FareCalculator
from ride_booking.core.users.models import User
from ride_booking.core.users.repository import UserRepository
from ride_booking.infra.database import DatabaseManager
from ride_booking.shared.events import (
    BookingAssigned,
    BookingCreated,
    BookingDeleted,
    BookingNew,
    BookingOpenMarket,
    BookingStatusUpdate,
    BookingUpdated,
    DriverLocation,
    RideCancelled,
)
from ride_booking.shared.models.booking_dto import (
    BookingUpdateRequest,
    DriverLocationMessage,
    ManualBookingRequest,
    RideBookingRequest,
)
from ride_booking.shared.models.location_dto import LocationInput, PointLocation


def generate_booking_code(now: datetime | None = None) -> str:
    """BK-YYYYMMDD-XXXXXXXXXXXX; 48 random bits per day keep collisions rare."""
    now = now or datetime.now(timezone.utc)
    return f"BK-{now:%Y%m%d}-{uuid4().hex[:12].upper()}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ResolvedPlace:
    point: GeoPoint
    address: str

    def to_dict(self) -> dict[str, Any]:
        return {"address": self.address, "coordinates": self.point.as_lng_lat()}


@dataclass
class RideEstimate:
    pickup: ResolvedPlace
    drop: ResolvedPlace
    route: RouteEstimate
    fare: FareBreakdown

    def to_dict(self) -> dict[str, Any]:
        return {
            "pickup": self.pickup.to_dict(),
            "drop": self.drop.to_dict(),
            "distance_km": self.route.distance_km,
            "duration_min": self.route.duration_min,
            "is_fallback": self.route.is_fallback,
            "geometry": self.route.geometry,
            "fare": self.fare.to_dict(),
        }


class BookingService:
    """Use cases of the booking lifecycle."""

    def __init__(
        self,
        db: DatabaseManager,
        bookings: BookingRepository,
        users: UserRepository,
        fleet: FleetRepository,
        assignment: AssignmentResolver,
        geo: GeoResolver,
        router: RouteEstimator,
        fares: FareCalculator,
        hub: NotificationHub,
        *,
        default_vehicle_type: str = "sedan",
        default_payment_method: PaymentMethod = PaymentMethod.CASH,
        code_attempts: int = 5,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._db = db
        self._bookings = bookings
        self._users = users
        self._fleet = fleet
        self._assignment = assignment
        self._geo = geo
        self._router = router
        self._fares = fares
        self._hub = hub
        self._default_vehicle_type = default_vehicle_type
        self._default_payment_method = default_payment_method
        self._code_attempts = max(1, code_attempts)
        self._clock = clock

    # =========================================================================
    # ESTIMATION
    # =========================================================================

    async def _locate(self, location: LocationInput) -> ResolvedPlace:
        if isinstance(location, PointLocation):
            return ResolvedPlace(GeoPoint(lat=location.lat, lng=location.lng), location.label())
        match = await self._geo.resolve(location.address)
        return ResolvedPlace(match.point, match.normalized_address)

    async def estimate(self, pickup: LocationInput, drop: LocationInput) -> RideEstimate:
        """
        Distance, duration and fare for a trip.
        Geocoding failures propagate; routing failures fall back to a straight line.
        """
        pickup_place = await self._locate(pickup)
        drop_place = await self._locate(drop)
        route = await self._router.route(pickup_place.point, drop_place.point)
        fare = self._fares.calculate(route.distance_km, route.duration_min)
        return RideEstimate(pickup=pickup_place, drop=drop_place, route=route, fare=fare)

    # =========================================================================
    # CREATION
    # =========================================================================

    async def book_ride(self, customer: User, request: RideBookingRequest) -> Booking:
        """Customer self-service booking."""
        return await self._create(customer.id, request, vendor_scope=None)

    async def create_booking(self, actor: User, request: ManualBookingRequest) -> Booking:
        """
        Booking entered from the vendor/admin dashboard. Vendors can only
        assign vehicles of their own fleet.
        """
        if await self._users.get_by_id(request.customer_id) is None:
            raise NotFoundError("Customer not found", details={"customer_id": str(request.customer_id)})

        vendor_scope = None
        if actor.role == UserRole.VENDOR:
            if actor.vendor_id is None:
                raise AuthorizationError("Vendor profile not linked to this account")
            vendor_scope = actor.vendor_id
        return await self._create(request.customer_id, request, vendor_scope=vendor_scope)

    async def _create(
        self,
        customer_id: UUID,
        request: RideBookingRequest,
        vendor_scope: UUID | None,
    ) -> Booking:
        vehicle_ref = request.vehicle_type or self._default_vehicle_type
        assignment = await self._assignment.resolve(vehicle_ref, vendor_id=vendor_scope)

        try:
            estimate = await self.estimate(request.pickup, request.drop)
        except UpstreamError as e:
            # Hand the request back so the client can retry it unchanged
            e.details["intent"] = request.model_dump(mode="json")
            raise

        draft = self._draft(customer_id, request, vehicle_ref, assignment, estimate, vendor_scope)
        booking = await self._insert(draft)

        await log_info(
            f"Booking {booking.booking_code} created ({booking.status.value}, "
            f"vendor={booking.vendor_id}, fallback_route={booking.route_is_fallback})",
            type_msg=TypeMsg.INFO,
        )
        await self._announce_created(booking)
        return booking

    def _draft(
        self,
        customer_id: UUID,
        request: RideBookingRequest,
        vehicle_ref: str,
        assignment: Assignment,
        estimate: RideEstimate,
        vendor_scope: UUID | None,
    ) -> BookingDraft:
        vendor_id = assignment.vendor_id or vendor_scope
        status = BookingStateMachine.initial_status(
            vehicle_assigned=assignment.vehicle is not None,
            vendor_assigned=vendor_id is not None,
        )
        fare = estimate.fare
        return BookingDraft(
            customer_id=customer_id,
            vehicle_type=assignment.vehicle.type.value if assignment.vehicle else vehicle_ref,
            status=status,
            booking_type=request.booking_type,
            pickup_address=estimate.pickup.address,
            pickup_point=estimate.pickup.point,
            pickup_time=request.pickup_time or self._clock(),
            drop_address=estimate.drop.address,
            drop_point=estimate.drop.point,
            distance_km=estimate.route.distance_km,
            duration_min=estimate.route.duration_min,
            fare_base=fare.base,
            fare_distance=fare.distance,
            fare_time=fare.time,
            fare_surge=fare.surge,
            fare_total=fare.total,
            currency=fare.currency,
            payment_method=request.payment_method or self._default_payment_method,
            route_geometry=estimate.route.geometry,
            route_is_fallback=estimate.route.is_fallback,
            vehicle_id=assignment.vehicle.id if assignment.vehicle else None,
            driver_id=assignment.driver_id,
            vendor_id=vendor_id,
            pickup_notes=request.pickup_notes,
            drop_notes=request.drop_notes,
            notes=request.notes,
        )

    async def _insert(self, draft: BookingDraft) -> Booking:
        """Inserts with a fresh booking code, retrying on a code collision."""
        for attempt in range(1, self._code_attempts + 1):
            code = generate_booking_code(self._clock())
            try:
                return await self._bookings.insert(draft.to_row(code))
            except ConflictError as e:
                if e.constraint != BOOKING_CODE_CONSTRAINT or attempt == self._code_attempts:
                    raise
                await log_warning(f"Booking code {code} already taken, retrying ({attempt}/{self._code_attempts})")
        raise AssertionError("unreachable")

    async def _announce_created(self, booking: Booking) -> None:
        snapshot = booking.to_public()
        await self._hub.publish(booking.customer_id, ActorType.CUSTOMER, BookingCreated(booking=snapshot))
        if booking.vendor_id is not None:
            await self._hub.publish(booking.vendor_id, ActorType.VENDOR, BookingNew(booking=snapshot))
        else:
            event = BookingOpenMarket(booking=snapshot)
            await self._hub.broadcast(ActorType.VENDOR, event.event_type, event.payload())
        if booking.driver_id is not None:
            await self._hub.publish(booking.driver_id, ActorType.DRIVER, BookingAssigned(booking=snapshot))

    # =========================================================================
    # READS
    # =========================================================================

    @staticmethod
    def _can_view(actor: User, booking: Booking) -> bool:
        if actor.role == UserRole.ADMIN:
            return True
        if actor.role == UserRole.VENDOR:
            # Unassigned bookings are visible to every vendor (open market)
            return actor.vendor_id is not None and booking.vendor_id in (None, actor.vendor_id)
        if actor.role == UserRole.DRIVER:
            return actor.driver_id is not None and booking.driver_id == actor.driver_id
        return booking.customer_id == actor.id

    async def get_booking(self, actor: User, booking_id: UUID) -> Booking:
        booking = await self._bookings.get(booking_id)
        if booking is None:
            raise NotFoundError("Booking not found", details={"booking_id": str(booking_id)})
        if not self._can_view(actor, booking):
            raise AuthorizationError("Not authorized to view this booking")
        return booking

    async def _page(self, filters: BookingFilter, page: int, limit: int) -> Page:
        page = max(1, page)
        limit = max(1, min(limit, 100))
        items = await self._bookings.find(filters, limit=limit, offset=(page - 1) * limit)
        total = await self._bookings.count(filters)
        return Page(items=items, total=total, page=page, limit=limit)

    async def list_bookings(
        self,
        actor: User,
        *,
        status: BookingStatus | None = None,
        vendor_id: UUID | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> Page:
        """Dashboard listing: vendors see their own bookings, admins may filter by vendor."""
        if actor.role == UserRole.VENDOR:
            if actor.vendor_id is None:
                raise AuthorizationError("Vendor profile not linked to this account")
            vendor_id = actor.vendor_id
        elif actor.role != UserRole.ADMIN:
            raise AuthorizationError("Only vendors and admins can list bookings")

        filters = BookingFilter(status=status.value if status else None, vendor_id=vendor_id)
        return await self._page(filters, page, limit)

    async def list_for_user(
        self,
        actor: User,
        user_id: UUID,
        *,
        status: BookingStatus | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> Page:
        if actor.id != user_id and actor.role != UserRole.ADMIN:
            raise AuthorizationError("Not authorized to view these bookings")
        filters = BookingFilter(status=status.value if status else None, customer_id=user_id)
        return await self._page(filters, page, limit)

    async def ride_history(
        self,
        customer: User,
        *,
        status: BookingStatus | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> Page:
        return await self.list_for_user(customer, customer.id, status=status, page=page, limit=limit)

    async def driver_bookings(
        self,
        driver: User,
        *,
        status: BookingStatus | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> Page:
        driver_id = self._driver_profile_id(driver)
        filters = BookingFilter(status=status.value if status else None, driver_id=driver_id)
        return await self._page(filters, page, limit)

    async def driver_profile(self, driver: User) -> dict[str, Any]:
        driver_id = self._driver_profile_id(driver)
        profile = await self._fleet.get_driver(driver_id)
        if profile is None:
            raise NotFoundError("Driver profile not found")
        vendor = await self._fleet.get_vendor(profile.vendor_id)
        stats = await self._bookings.driver_stats(driver_id, now=self._clock())
        return {
            "driver": profile.model_dump(mode="json"),
            "vendor": vendor.model_dump(mode="json") if vendor else None,
            "stats": stats,
        }

    @staticmethod
    def _driver_profile_id(driver: User) -> UUID:
        if driver.driver_id is None:
            raise AuthorizationError("Driver profile not linked to this account")
        return driver.driver_id

    # =========================================================================
    # TRANSITIONS
    # =========================================================================

    async def update_status_by_driver(self, driver: User, booking_id: UUID, target: str) -> Booking:
        """Driver moves their booking one step along the ride chain."""
        driver_id = self._driver_profile_id(driver)
        now = self._clock()

        async with self._db.transaction() as conn:
            booking = await self._bookings.get_for_update(booking_id, conn)
            if booking is None:
                raise NotFoundError("Booking not found", details={"booking_id": str(booking_id)})
            if booking.driver_id != driver_id:
                raise AuthorizationError("Booking is not assigned to this driver")
            changes = BookingStateMachine.driver_transition(booking, target, now)
            updated = await self._bookings.update(booking_id, changes, conn)

        await log_info(
            f"Booking {updated.booking_code}: {booking.status.value} -> {updated.status.value} (driver {driver_id})",
            type_msg=TypeMsg.INFO,
        )
        await self._hub.publish(
            updated.customer_id,
            ActorType.CUSTOMER,
            BookingStatusUpdate(
                booking_id=str(updated.id),
                booking_code=updated.booking_code,
                status=updated.status.value,
                message=STATUS_MESSAGES.get(updated.status),
            ),
        )
        await self._hub.publish(
            updated.vendor_id,
            ActorType.VENDOR,
            BookingStatusUpdate(
                booking_id=str(updated.id),
                booking_code=updated.booking_code,
                status=updated.status.value,
                booking=updated.to_public(),
            ),
        )
        return updated

    async def cancel_ride(self, customer: User, booking_id: UUID, reason: str | None = None) -> Booking:
        """Customer cancellation, with the refund flag set atomically."""
        now = self._clock()

        async with self._db.transaction() as conn:
            booking = await self._bookings.get_for_update(booking_id, conn)
            if booking is None:
                raise NotFoundError("Ride not found", details={"booking_id": str(booking_id)})
            if booking.customer_id != customer.id:
                raise AuthorizationError("Not authorized to cancel this ride")
            changes = BookingStateMachine.cancellation(booking, reason, now)
            updated = await self._bookings.update(booking_id, changes, conn)

        await log_info(
            f"Booking {updated.booking_code} cancelled by customer (payment {updated.payment.status.value})",
            type_msg=TypeMsg.INFO,
        )
        await self._hub.publish(
            updated.driver_id,
            ActorType.DRIVER,
            RideCancelled(
                booking_id=str(updated.id),
                booking_code=updated.booking_code,
                reason=updated.cancellation.reason if updated.cancellation else None,
            ),
        )
        await self._hub.publish(updated.vendor_id, ActorType.VENDOR, BookingUpdated(booking=updated.to_public()))
        return updated

    async def update_booking(self, actor: User, booking_id: UUID, request: BookingUpdateRequest) -> Booking:
        """Vendor/admin edit: notes, vehicle, driver and vendor-side status changes."""
        async with self._db.transaction() as conn:
            booking = await self._bookings.get_for_update(booking_id, conn)
            if booking is None:
                raise NotFoundError("Booking not found", details={"booking_id": str(booking_id)})
            if actor.role != UserRole.ADMIN and (actor.vendor_id is None or booking.vendor_id != actor.vendor_id):
                raise AuthorizationError("Not authorized to modify this booking")

            changes = await self._edit_changes(actor, booking, request)
            updated = await self._bookings.update(booking_id, changes, conn)

        await self._announce_edit(booking, updated)
        return updated

    async def _edit_changes(self, actor: User, booking: Booking, request: BookingUpdateRequest) -> dict[str, Any]:
        is_admin = actor.role == UserRole.ADMIN
        if (request.driver_id is not None or request.vehicle_id is not None) \
                and booking.status not in REASSIGNABLE_STATUSES:
            raise InvalidStateError(
                f"Cannot change the driver or vehicle of a {booking.status.value} booking",
                current_status=booking.status.value,
            )
        changes: dict[str, Any] = {}
        if request.notes is not None:
            changes["notes"] = request.notes

        vendor_id = booking.vendor_id
        if request.vehicle_id is not None:
            vehicle = await self._fleet.get_vehicle(request.vehicle_id)
            if vehicle is None:
                raise NotFoundError("Vehicle not found", details={"vehicle_id": str(request.vehicle_id)})
            if not is_admin and vehicle.vendor_id != actor.vendor_id:
                raise AuthorizationError("Vehicle belongs to another vendor")
            vendor_id = vehicle.vendor_id
            changes["vehicle_id"] = vehicle.id
            changes["vendor_id"] = vehicle.vendor_id

        target = request.status
        driver_id = booking.driver_id
        if request.driver_id is not None:
            driver = await self._fleet.get_driver(request.driver_id)
            if driver is None:
                raise NotFoundError("Driver not found", details={"driver_id": str(request.driver_id)})
            if vendor_id is not None and driver.vendor_id != vendor_id:
                raise AuthorizationError("Driver belongs to another vendor")
            driver_id = driver.id
            changes["driver_id"] = driver.id
            if target is None and booking.status == BookingStatus.CONFIRMED:
                target = BookingStatus.DRIVER_ASSIGNED

        if target is not None:
            changes.update(BookingStateMachine.vendor_transition(booking, target))
            if target == BookingStatus.DRIVER_ASSIGNED and driver_id is None:
                raise InvalidStateError(
                    "Assign a driver before marking the booking driver_assigned",
                    current_status=booking.status.value,
                )
            if target == BookingStatus.CONFIRMED and vendor_id is None:
                raise InvalidStateError(
                    "Booking has no vendor to confirm it",
                    current_status=booking.status.value,
                )
            if target == BookingStatus.CONFIRMED and booking.status == BookingStatus.DRIVER_ASSIGNED \
                    and request.driver_id is None:
                # Back to confirmed releases the driver
                changes["driver_id"] = None
        return changes

    async def _announce_edit(self, before: Booking, after: Booking) -> None:
        snapshot = after.to_public()
        await self._hub.publish(after.vendor_id, ActorType.VENDOR, BookingUpdated(booking=snapshot))
        if after.driver_id is not None and after.driver_id != before.driver_id:
            await self._hub.publish(after.driver_id, ActorType.DRIVER, BookingAssigned(booking=snapshot))
        if after.status != before.status:
            await self._hub.publish(
                after.customer_id,
                ActorType.CUSTOMER,
                BookingStatusUpdate(
                    booking_id=str(after.id),
                    booking_code=after.booking_code,
                    status=after.status.value,
                    message=STATUS_MESSAGES.get(after.status),
                ),
            )

    async def delete_booking(self, booking_id: UUID) -> Booking:
        """Administrative hard delete."""
        booking = await self._bookings.delete(booking_id)
        if booking is None:
            raise NotFoundError("Booking not found", details={"booking_id": str(booking_id)})
        await log_warning(f"Booking {booking.booking_code} deleted by administrator")
        await self._hub.publish(
            booking.vendor_id,
            ActorType.VENDOR,
            BookingDeleted(booking_id=str(booking.id), booking_code=booking.booking_code),
        )
        return booking

    # =========================================================================
    # TRACKING
    # =========================================================================

    async def relay_driver_location(self, driver: User, message: DriverLocationMessage) -> bool:
        """
        Forwards the assigned driver's position to the booking's customer.
        Only while the ride is tracked; returns whether the customer is connected.
        """
        driver_id = self._driver_profile_id(driver)
        booking = await self._bookings.get(message.booking_id)
        if booking is None:
            raise NotFoundError("Booking not found", details={"booking_id": str(message.booking_id)})
        if booking.driver_id != driver_id:
            raise AuthorizationError("Booking is not assigned to this driver")
        if booking.status not in TRACKABLE_STATUSES:
            raise InvalidStateError(
                f"Location is not shared for a {booking.status.value} booking",
                current_status=booking.status.value,
            )
        return await self._hub.publish(
            booking.customer_id,
            ActorType.CUSTOMER,
            DriverLocation(
                booking_id=str(booking.id),
                driver_id=str(driver_id),
                lat=message.lat,
                lng=message.lng,
                heading=message.heading,
                speed_kmh=message.speed_kmh,
            ),
        )
