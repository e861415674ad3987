"""Supabase persistence for users and ride bookings."""

from __future__ import annotations

import logging
from datetime import datetime
from functools import lru_cache
from typing import Any, Optional

from supabase import PostgrestAPIError

from ..db.supabase import get_supabase_client
from ..errors import ConflictError
from ..models.domain import LocationPoint, RideBooking, RideStatus, User, VehicleType
from .repositories import (
    BookingRepository,
    InMemoryBookingRepository,
    InMemoryUserRepository,
    UserRepository,
)

USERS_TABLE = "users"
BOOKINGS_TABLE = "ride_bookings"
UNIQUE_VIOLATION = "23505"


def _to_iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _from_iso(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def user_to_row(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "password_hash": user.password_hash,
        "is_confirmed": user.is_confirmed,
        "is_active": user.is_active,
        "created_at": _to_iso(user.created_at),
        "updated_at": _to_iso(user.updated_at),
        "deleted_at": _to_iso(user.deleted_at),
    }


def row_to_user(row: dict[str, Any]) -> User:
    return User(
        id=str(row["id"]),
        email=row["email"],
        first_name=row.get("first_name") or "",
        last_name=row.get("last_name") or "",
        password_hash=row.get("password_hash") or "",
        is_confirmed=bool(row.get("is_confirmed", True)),
        is_active=bool(row.get("is_active", True)),
        created_at=_from_iso(row.get("created_at")),
        updated_at=_from_iso(row.get("updated_at")),
        deleted_at=_from_iso(row.get("deleted_at")),
    )


def booking_to_row(booking: RideBooking) -> dict[str, Any]:
    return {
        "id": booking.id,
        "passenger_id": booking.passenger_id,
        "pickup_location": booking.pickup_location.to_dict(),
        "destination_location": booking.destination_location.to_dict(),
        "stops": [stop.to_dict() for stop in booking.stops],
        "vehicle_type": booking.vehicle_type.value,
        "note": booking.note,
        "scheduled_at": _to_iso(booking.scheduled_at),
        "is_instant": booking.is_instant,
        "status": booking.status.value,
        "estimated_fare": booking.estimated_fare,
        "estimated_distance_km": booking.estimated_distance_km,
        "estimated_duration_minutes": booking.estimated_duration_minutes,
        "estimated_arrival": _to_iso(booking.estimated_arrival),
        "cancellation_window_minutes": booking.cancellation_window_minutes,
        "cancellation_penalty": booking.cancellation_penalty,
        "cancellation_reason": booking.cancellation_reason,
        "cancelled_at": _to_iso(booking.cancelled_at),
        "created_at": _to_iso(booking.created_at),
        "updated_at": _to_iso(booking.updated_at),
    }


def row_to_booking(row: dict[str, Any]) -> RideBooking:
    penalty = row.get("cancellation_penalty")
    window = row.get("cancellation_window_minutes")
    return RideBooking(
        id=str(row["id"]),
        passenger_id=str(row["passenger_id"]),
        pickup_location=LocationPoint.from_dict(row.get("pickup_location") or {}),
        destination_location=LocationPoint.from_dict(row.get("destination_location") or {}),
        stops=[LocationPoint.from_dict(stop) for stop in (row.get("stops") or [])],
        vehicle_type=VehicleType(row["vehicle_type"]),
        note=row.get("note"),
        scheduled_at=_from_iso(row.get("scheduled_at")),
        is_instant=bool(row.get("is_instant", True)),
        status=RideStatus(row.get("status") or RideStatus.PENDING_DRIVER.value),
        estimated_fare=float(row.get("estimated_fare") or 0.0),
        estimated_distance_km=float(row.get("estimated_distance_km") or 0.0),
        estimated_duration_minutes=float(row.get("estimated_duration_minutes") or 0.0),
        estimated_arrival=_from_iso(row.get("estimated_arrival")),
        cancellation_window_minutes=int(window) if window is not None else None,
        cancellation_penalty=float(penalty) if penalty is not None else None,
        cancellation_reason=row.get("cancellation_reason"),
        cancelled_at=_from_iso(row.get("cancelled_at")),
        created_at=_from_iso(row.get("created_at")),
        updated_at=_from_iso(row.get("updated_at")),
    )


class SupabaseUserRepository:
    """User storage backed by the ``users`` table."""

    def __init__(self, client) -> None:
        self.client = client

    def get(self, user_id: str) -> Optional[User]:
        response = self.client.table(USERS_TABLE).select("*").eq("id", user_id).limit(1).execute()
        rows = response.data or []
        return row_to_user(rows[0]) if rows else None

    def find_by_email(self, email: str) -> Optional[User]:
        response = self.client.table(USERS_TABLE).select("*").eq("email", email).limit(1).execute()
        rows = response.data or []
        return row_to_user(rows[0]) if rows else None

    def list_active(self) -> list[User]:
        response = self.client.table(USERS_TABLE).select("*").is_("deleted_at", "null").execute()
        return [row_to_user(row) for row in (response.data or [])]

    def add(self, user: User) -> User:
        try:
            self.client.table(USERS_TABLE).insert(user_to_row(user)).execute()
        except PostgrestAPIError as exc:
            if exc.code == UNIQUE_VIOLATION:
                raise ConflictError("User with this email already exists") from exc
            raise
        return user

    def save(self, user: User) -> User:
        row = user_to_row(user)
        row.pop("id")
        self.client.table(USERS_TABLE).update(row).eq("id", user.id).execute()
        return user


class SupabaseBookingRepository:
    """Booking storage backed by the ``ride_bookings`` table."""

    def __init__(self, client) -> None:
        self.client = client

    def get(self, booking_id: str) -> Optional[RideBooking]:
        response = self.client.table(BOOKINGS_TABLE).select("*").eq("id", booking_id).limit(1).execute()
        rows = response.data or []
        return row_to_booking(rows[0]) if rows else None

    def list_for_passenger(self, passenger_id: str, status: Optional[RideStatus] = None) -> list[RideBooking]:
        query = self.client.table(BOOKINGS_TABLE).select("*").eq("passenger_id", passenger_id)
        if status is not None:
            query = query.eq("status", status.value)
        response = query.order("created_at", desc=True).execute()
        return [row_to_booking(row) for row in (response.data or [])]

    def add(self, booking: RideBooking) -> RideBooking:
        self.client.table(BOOKINGS_TABLE).insert(booking_to_row(booking)).execute()
        return booking

    def save(self, booking: RideBooking) -> RideBooking:
        row = booking_to_row(booking)
        row.pop("id")
        self.client.table(BOOKINGS_TABLE).update(row).eq("id", booking.id).execute()
        return booking


@lru_cache(maxsize=1)
def get_user_repository() -> UserRepository:
    client = get_supabase_client()
    if client is None:
        logging.info("Supabase not configured - users will be kept in memory")
        return InMemoryUserRepository()
    return SupabaseUserRepository(client)


@lru_cache(maxsize=1)
def get_booking_repository() -> BookingRepository:
    client = get_supabase_client()
    if client is None:
        logging.info("Supabase not configured - bookings will be kept in memory")
        return InMemoryBookingRepository()
    return SupabaseBookingRepository(client)
