from datetime import datetime, timedelta, timezone

import pytest

from taxi_booking.config import Settings
from taxi_booking.errors import InvalidStateError, NotFoundError
from taxi_booking.models.domain import RideStatus, User
from taxi_booking.persistence.repositories import InMemoryBookingRepository, InMemoryUserRepository
from taxi_booking.schemas.bookings import CreateRideBookingRequest
from taxi_booking.services.booking import BookingService, PricingPolicy
from taxi_booking.services.booking.estimator import round_half_up

NOW = datetime(2026, 3, 14, 9, 0, tzinfo=timezone.utc)


def _user(user_id: str = "passenger-1", **overrides) -> User:
    values = dict(
        id=user_id,
        email=f"{user_id}@example.com",
        first_name="Amal",
        last_name="Rider",
        password_hash="not-used",
        created_at=NOW - timedelta(days=30),
        updated_at=NOW - timedelta(days=30),
    )
    values.update(overrides)
    return User(**values)


def _request(**overrides) -> CreateRideBookingRequest:
    payload = {
        "pickup": {"address": "King Abdulaziz Airport", "latitude": 21.6796, "longitude": 39.1565},
        "destination": {"address": "Al-Balad", "latitude": 21.4858, "longitude": 39.1925},
        "vehicle_type": "ECONOMY",
    }
    payload.update(overrides)
    return CreateRideBookingRequest(**payload)


@pytest.fixture
def users() -> InMemoryUserRepository:
    repository = InMemoryUserRepository()
    repository.add(_user())
    return repository


@pytest.fixture
def service(users) -> BookingService:
    return BookingService(InMemoryBookingRepository(), users, PricingPolicy.from_settings(Settings()))


def test_create_instant_booking(service):
    booking = service.create_booking("passenger-1", _request(), now=NOW)

    assert booking.status == RideStatus.PENDING_DRIVER
    assert booking.is_instant is True
    assert booking.cancellation_window_minutes == 5
    assert booking.stops == []
    assert booking.estimated_distance_km == pytest.approx(21.87, abs=0.1)
    assert booking.estimated_duration_minutes == 41
    assert booking.estimated_arrival == NOW + timedelta(minutes=41)
    assert booking.created_at == NOW

    stored = service.get_booking(booking.id, "passenger-1")
    assert stored.estimated_fare == booking.estimated_fare


def test_create_scheduled_booking_with_stops(service):
    scheduled_at = NOW + timedelta(hours=3)
    request = _request(
        stops=[{"address": "Corniche", "note": "pick up a friend"}],
        vehicle_type="EXECUTIVE",
        scheduled_at=scheduled_at.isoformat(),
        estimated_distance_km=25,
        estimated_duration_minutes=40,
    )

    booking = service.create_booking("passenger-1", request, now=NOW)

    assert booking.status == RideStatus.SCHEDULED
    assert booking.is_instant is False
    assert booking.cancellation_window_minutes == 30
    assert [stop.address for stop in booking.stops] == ["Corniche"]
    assert booking.estimated_fare == pytest.approx(6.00 + 1.60 * 25 + 0.60 * 40 + 1.25 + 1.50)
    assert booking.estimated_arrival == scheduled_at + timedelta(minutes=40)


def test_quote_does_not_persist(service):
    result = service.quote(_request(), now=NOW)

    assert result.fare > 0
    assert service.list_bookings("passenger-1") == []


def test_unknown_passenger_is_not_found(service):
    with pytest.raises(NotFoundError):
        service.create_booking("ghost", _request(), now=NOW)


def test_soft_deleted_passenger_is_not_found(users, service):
    users.save(_user(deleted_at=NOW - timedelta(days=1)))

    with pytest.raises(NotFoundError):
        service.create_booking("passenger-1", _request(), now=NOW)


def test_inactive_passenger_is_rejected(users, service):
    users.save(_user(is_active=False))

    with pytest.raises(InvalidStateError):
        service.create_booking("passenger-1", _request(), now=NOW)


def test_bookings_are_private_to_their_passenger(users, service):
    users.add(_user("passenger-2"))
    booking = service.create_booking("passenger-1", _request(), now=NOW)

    with pytest.raises(NotFoundError):
        service.get_booking(booking.id, "passenger-2")
    with pytest.raises(NotFoundError):
        service.cancel_booking("passenger-2", booking.id, now=NOW)


def test_list_bookings_newest_first_with_status_filter(service):
    first = service.create_booking("passenger-1", _request(), now=NOW)
    second = service.create_booking("passenger-1", _request(), now=NOW + timedelta(minutes=30))
    service.cancel_booking("passenger-1", first.id, now=NOW + timedelta(minutes=31))

    listed = service.list_bookings("passenger-1")
    cancelled = service.list_bookings("passenger-1", RideStatus.CANCELLED)

    assert [b.id for b in listed] == [second.id, first.id]
    assert [b.id for b in cancelled] == [first.id]


def test_cancel_persists_outcome(service):
    booking = service.create_booking("passenger-1", _request(), now=NOW)

    cancelled = service.cancel_booking("passenger-1", booking.id, "Driver too far", now=NOW + timedelta(minutes=1))
    stored = service.get_booking(booking.id, "passenger-1")

    assert cancelled.status == RideStatus.CANCELLED
    assert stored.status == RideStatus.CANCELLED
    assert stored.cancellation_reason == "Driver too far"
    assert stored.cancellation_penalty == pytest.approx(max(5.0, round_half_up(booking.estimated_fare * 0.15)))
    assert stored.cancelled_at == NOW + timedelta(minutes=1)


def test_cancelling_twice_is_rejected(service):
    booking = service.create_booking("passenger-1", _request(), now=NOW)
    service.cancel_booking("passenger-1", booking.id, now=NOW)

    with pytest.raises(InvalidStateError):
        service.cancel_booking("passenger-1", booking.id, "again", now=NOW)

    stored = service.get_booking(booking.id, "passenger-1")
    assert stored.cancellation_reason is None
    assert stored.cancelled_at == NOW
