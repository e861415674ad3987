"""Domain models for passengers and ride bookings."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class VehicleType(str, Enum):
    """Supported vehicle categories for taxi bookings."""

    ECONOMY = "ECONOMY"
    PREMIUM = "PREMIUM"
    SUV = "SUV"
    EXECUTIVE = "EXECUTIVE"


class RideStatus(str, Enum):
    """Lifecycle states for a ride booking."""

    PENDING_DRIVER = "PENDING_DRIVER"
    SCHEDULED = "SCHEDULED"
    DRIVER_ASSIGNED = "DRIVER_ASSIGNED"
    EN_ROUTE_TO_PICKUP = "EN_ROUTE_TO_PICKUP"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


TERMINAL_STATUSES = frozenset({RideStatus.CANCELLED, RideStatus.COMPLETED})


@dataclass(slots=True)
class LocationPoint:
    """A pickup, stop or destination. Coordinates are optional."""

    address: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    note: Optional[str] = None

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def to_dict(self) -> dict:
        return {
            "address": self.address,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "note": self.note,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LocationPoint":
        return cls(
            address=data.get("address", ""),
            latitude=data.get("latitude"),
            longitude=data.get("longitude"),
            note=data.get("note"),
        )


@dataclass(slots=True)
class User:
    """Passenger account. ``deleted_at`` marks a soft-deleted record."""

    id: str
    email: str
    first_name: str
    last_name: str
    password_hash: str
    created_at: datetime
    updated_at: datetime
    is_confirmed: bool = True
    is_active: bool = True
    deleted_at: Optional[datetime] = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


@dataclass(slots=True)
class RideBooking:
    """A persisted ride request with its fare and ETA estimates."""

    id: str
    passenger_id: str
    pickup_location: LocationPoint
    destination_location: LocationPoint
    vehicle_type: VehicleType
    is_instant: bool
    status: RideStatus
    estimated_fare: float
    estimated_distance_km: float
    estimated_duration_minutes: float
    estimated_arrival: datetime
    created_at: datetime
    updated_at: datetime
    stops: List[LocationPoint] = field(default_factory=list)
    note: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    cancellation_window_minutes: Optional[int] = None
    cancellation_penalty: Optional[float] = None
    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None

    @property
    def route(self) -> List[LocationPoint]:
        return [self.pickup_location, *self.stops, self.destination_location]
