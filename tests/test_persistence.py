from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from supabase import PostgrestAPIError

from taxi_booking.errors import ConflictError
from taxi_booking.models.domain import LocationPoint, RideBooking, RideStatus, User, VehicleType
from taxi_booking.persistence import database
from taxi_booking.persistence.database import (
    SupabaseBookingRepository,
    SupabaseUserRepository,
    booking_to_row,
    row_to_booking,
)
from taxi_booking.persistence.repositories import InMemoryBookingRepository, InMemoryUserRepository

NOW = datetime(2026, 3, 14, 9, 0, tzinfo=timezone.utc)


class FakeQuery:
    """Minimal stand-in for the supabase-py query builder."""

    def __init__(self, rows: list[dict]):
        self.rows = rows
        self.filters: list = []
        self.payload = None
        self.action = "select"
        self.descending_by = None

    def select(self, *args, **kwargs):
        return self

    def insert(self, row):
        self.action, self.payload = "insert", row
        return self

    def update(self, row):
        self.action, self.payload = "update", row
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def is_(self, column, value):
        self.filters.append(lambda row: row.get(column) is None)
        return self

    def limit(self, count):
        return self

    def order(self, column, desc=False):
        self.descending_by = (column, desc)
        return self

    def execute(self):
        if self.action == "insert":
            self.rows.append(dict(self.payload))
            return SimpleNamespace(data=[self.payload])
        matched = [row for row in self.rows if all(check(row) for check in self.filters)]
        if self.action == "update":
            for row in matched:
                row.update(self.payload)
            return SimpleNamespace(data=matched)
        if self.descending_by:
            column, desc = self.descending_by
            matched = sorted(matched, key=lambda row: row[column], reverse=desc)
        return SimpleNamespace(data=[dict(row) for row in matched])


class FakeSupabase:
    def __init__(self):
        self.tables: dict[str, list[dict]] = {}

    def table(self, name):
        return FakeQuery(self.tables.setdefault(name, []))


def _user(user_id: str = "u-1", email: str = "sara@example.com", **overrides) -> User:
    values = dict(
        id=user_id,
        email=email,
        first_name="Sara",
        last_name="Nasser",
        password_hash="$2b$04$hash",
        created_at=NOW,
        updated_at=NOW,
    )
    values.update(overrides)
    return User(**values)


def _booking(booking_id: str = "b-1", created_at: datetime = NOW, **overrides) -> RideBooking:
    values = dict(
        id=booking_id,
        passenger_id="u-1",
        pickup_location=LocationPoint(address="Mall", latitude=24.71, longitude=46.67),
        destination_location=LocationPoint(address="Office", note="Gate 3"),
        stops=[LocationPoint(address="Bakery", latitude=24.72, longitude=46.68)],
        vehicle_type=VehicleType.SUV,
        is_instant=False,
        status=RideStatus.SCHEDULED,
        estimated_fare=31.4,
        estimated_distance_km=9.5,
        estimated_duration_minutes=18,
        estimated_arrival=created_at + timedelta(hours=1),
        scheduled_at=created_at + timedelta(minutes=42),
        cancellation_window_minutes=30,
        created_at=created_at,
        updated_at=created_at,
    )
    values.update(overrides)
    return RideBooking(**values)


def test_in_memory_store_returns_copies():
    repository = InMemoryBookingRepository()
    booking = _booking()
    repository.add(booking)

    loaded = repository.get("b-1")
    loaded.status = RideStatus.CANCELLED

    assert repository.get("b-1").status == RideStatus.SCHEDULED


def test_in_memory_users_enforce_unique_email():
    repository = InMemoryUserRepository()
    repository.add(_user())

    with pytest.raises(ConflictError):
        repository.add(_user("u-2"))


def test_booking_row_round_trip_keeps_locations_and_times():
    booking = _booking()

    row = booking_to_row(booking)
    restored = row_to_booking(row)

    assert row["vehicle_type"] == "SUV"
    assert row["scheduled_at"] == booking.scheduled_at.isoformat()
    assert restored == booking


def test_row_to_booking_accepts_zulu_timestamps():
    row = booking_to_row(_booking())
    row["created_at"] = "2026-03-14T09:00:00Z"

    assert row_to_booking(row).created_at == NOW


def test_supabase_user_repository():
    client = FakeSupabase()
    repository = SupabaseUserRepository(client)
    user = _user()
    repository.add(user)

    user.deleted_at = NOW
    repository.save(user)

    assert repository.find_by_email("sara@example.com").deleted_at == NOW
    assert repository.get("u-1").id == "u-1"
    assert repository.list_active() == []
    assert repository.get("missing") is None


class UniqueEmailQuery(FakeQuery):
    def execute(self):
        if self.action == "insert" and any(row["email"] == self.payload["email"] for row in self.rows):
            raise PostgrestAPIError({"code": "23505", "message": "duplicate key value violates unique constraint"})
        return super().execute()


class UniqueEmailSupabase(FakeSupabase):
    def table(self, name):
        return UniqueEmailQuery(self.tables.setdefault(name, []))


def test_supabase_unique_violation_becomes_conflict():
    repository = SupabaseUserRepository(UniqueEmailSupabase())
    repository.add(_user())

    with pytest.raises(ConflictError):
        repository.add(_user("u-2"))


def test_supabase_booking_repository_lists_newest_first():
    client = FakeSupabase()
    repository = SupabaseBookingRepository(client)
    repository.add(_booking("b-1", created_at=NOW))
    repository.add(_booking("b-2", created_at=NOW + timedelta(minutes=5)))
    repository.add(_booking("b-3", created_at=NOW + timedelta(minutes=9), passenger_id="u-2"))

    cancelled = repository.get("b-1")
    cancelled.status = RideStatus.CANCELLED
    cancelled.cancellation_penalty = 0.0
    repository.save(cancelled)

    assert [b.id for b in repository.list_for_passenger("u-1")] == ["b-2", "b-1"]
    assert [b.id for b in repository.list_for_passenger("u-1", RideStatus.CANCELLED)] == ["b-1"]
    assert repository.get("b-1").cancellation_penalty == 0.0


def test_repositories_fall_back_to_memory_without_supabase(monkeypatch):
    monkeypatch.setattr(database, "get_supabase_client", lambda: None)
    database.get_user_repository.cache_clear()
    database.get_booking_repository.cache_clear()
    try:
        assert isinstance(database.get_user_repository(), InMemoryUserRepository)
        assert isinstance(database.get_booking_repository(), InMemoryBookingRepository)
    finally:
        database.get_user_repository.cache_clear()
        database.get_booking_repository.cache_clear()
