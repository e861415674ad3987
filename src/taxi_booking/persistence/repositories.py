"""Repository contracts and the in-memory store used without Supabase."""

from __future__ import annotations

import copy
import threading
from typing import Optional, Protocol

from ..errors import ConflictError
from ..models.domain import RideBooking, RideStatus, User


class UserRepository(Protocol):
    def get(self, user_id: str) -> Optional[User]: ...

    def find_by_email(self, email: str) -> Optional[User]: ...

    def list_active(self) -> list[User]: ...

    def add(self, user: User) -> User: ...

    def save(self, user: User) -> User: ...


class BookingRepository(Protocol):
    def get(self, booking_id: str) -> Optional[RideBooking]: ...

    def list_for_passenger(self, passenger_id: str, status: Optional[RideStatus] = None) -> list[RideBooking]: ...

    def add(self, booking: RideBooking) -> RideBooking: ...

    def save(self, booking: RideBooking) -> RideBooking: ...


class InMemoryUserRepository:
    """Process-local user store. Lookups include soft-deleted records."""

    def __init__(self) -> None:
        self._users: dict[str, User] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> Optional[User]:
        with self._lock:
            user = self._users.get(user_id)
            return copy.deepcopy(user) if user else None

    def find_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            for user in self._users.values():
                if user.email == email:
                    return copy.deepcopy(user)
        return None

    def list_active(self) -> list[User]:
        with self._lock:
            return [copy.deepcopy(user) for user in self._users.values() if not user.is_deleted]

    def add(self, user: User) -> User:
        with self._lock:
            if any(existing.email == user.email for existing in self._users.values()):
                raise ConflictError("User with this email already exists")
            self._users[user.id] = copy.deepcopy(user)
        return user

    def save(self, user: User) -> User:
        with self._lock:
            if user.id not in self._users:
                raise KeyError(user.id)
            self._users[user.id] = copy.deepcopy(user)
        return user


class InMemoryBookingRepository:
    """Process-local booking store."""

    def __init__(self) -> None:
        self._bookings: dict[str, RideBooking] = {}
        self._lock = threading.Lock()

    def get(self, booking_id: str) -> Optional[RideBooking]:
        with self._lock:
            booking = self._bookings.get(booking_id)
            return copy.deepcopy(booking) if booking else None

    def list_for_passenger(self, passenger_id: str, status: Optional[RideStatus] = None) -> list[RideBooking]:
        with self._lock:
            matches = [
                copy.deepcopy(booking)
                for booking in self._bookings.values()
                if booking.passenger_id == passenger_id and (status is None or booking.status == status)
            ]
        matches.sort(key=lambda booking: booking.created_at, reverse=True)
        return matches

    def add(self, booking: RideBooking) -> RideBooking:
        with self._lock:
            self._bookings[booking.id] = copy.deepcopy(booking)
        return booking

    def save(self, booking: RideBooking) -> RideBooking:
        with self._lock:
            if booking.id not in self._bookings:
                raise KeyError(booking.id)
            self._bookings[booking.id] = copy.deepcopy(booking)
        return booking
