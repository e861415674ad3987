"""Booking orchestration: passenger checks, estimation and persistence."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Optional

from ...errors import InvalidStateError, NotFoundError
from ...models.domain import RideBooking, RideStatus
from ...persistence.repositories import BookingRepository, UserRepository
from ...schemas.bookings import CreateRideBookingRequest
from .cancellation import cancel
from .estimator import ensure_aware, estimate, utc_now
from .models import EstimateOverrides, FareEstimate, PricingPolicy


class BookingService:
    def __init__(
        self,
        bookings: BookingRepository,
        users: UserRepository,
        policy: Optional[PricingPolicy] = None,
    ) -> None:
        self.bookings = bookings
        self.users = users
        self.policy = policy or PricingPolicy.from_settings()

    def quote(self, payload: CreateRideBookingRequest, *, now: Optional[datetime] = None) -> FareEstimate:
        return estimate(
            payload.route(),
            payload.vehicle_type,
            EstimateOverrides(
                distance_km=payload.estimated_distance_km,
                duration_minutes=payload.estimated_duration_minutes,
            ),
            payload.scheduled_at,
            policy=self.policy,
            now=now,
        )

    def create_booking(
        self,
        passenger_id: str,
        payload: CreateRideBookingRequest,
        *,
        now: Optional[datetime] = None,
    ) -> RideBooking:
        passenger = self.users.get(passenger_id)
        if passenger is None or passenger.is_deleted:
            raise NotFoundError("Passenger not found")
        if not passenger.is_active:
            raise InvalidStateError("Passenger account is inactive")

        now = ensure_aware(now or utc_now())
        result = self.quote(payload, now=now)
        route = payload.route()

        booking = RideBooking(
            id=str(uuid.uuid4()),
            passenger_id=passenger.id,
            pickup_location=route[0],
            destination_location=route[-1],
            stops=route[1:-1],
            vehicle_type=payload.vehicle_type,
            note=payload.note,
            scheduled_at=ensure_aware(payload.scheduled_at) if payload.scheduled_at else None,
            is_instant=not result.is_scheduled,
            status=result.initial_status,
            estimated_fare=result.fare,
            estimated_distance_km=result.distance_km,
            estimated_duration_minutes=result.duration_minutes,
            estimated_arrival=result.arrival,
            cancellation_window_minutes=result.cancellation_window_minutes,
            created_at=now,
            updated_at=now,
        )
        self.bookings.add(booking)
        logging.info(
            f"Created booking {booking.id} for passenger {passenger.id}: "
            f"status={booking.status.value}, fare={booking.estimated_fare}, distance_km={booking.estimated_distance_km}"
        )
        return booking

    def get_booking(self, booking_id: str, passenger_id: str) -> RideBooking:
        booking = self.bookings.get(booking_id)
        if booking is None or booking.passenger_id != passenger_id:
            raise NotFoundError("Ride not found")
        return booking

    def list_bookings(self, passenger_id: str, status: Optional[RideStatus] = None) -> list[RideBooking]:
        return self.bookings.list_for_passenger(passenger_id, status)

    def cancel_booking(
        self,
        passenger_id: str,
        booking_id: str,
        reason: Optional[str] = None,
        *,
        now: Optional[datetime] = None,
    ) -> RideBooking:
        booking = self.get_booking(booking_id, passenger_id)
        outcome = cancel(booking, reason, policy=self.policy, now=now)
        self.bookings.save(booking)
        logging.info(
            f"Cancelled booking {booking.id}: penalty={outcome.penalty}, "
            f"minutes_until_pickup={outcome.minutes_until_pickup:.1f}"
        )
        return booking
