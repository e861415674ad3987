"""Booking request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from ..models.domain import LocationPoint, RideBooking, RideStatus, VehicleType


class LocationInput(BaseModel):
    address: str = Field(..., min_length=1, max_length=255)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    note: Optional[str] = Field(None, max_length=255)

    def to_domain(self) -> LocationPoint:
        return LocationPoint(
            address=self.address.strip(),
            latitude=self.latitude,
            longitude=self.longitude,
            note=self.note,
        )


class CreateRideBookingRequest(BaseModel):
    pickup: LocationInput
    destination: LocationInput
    stops: Optional[List[LocationInput]] = None
    vehicle_type: VehicleType
    note: Optional[str] = Field(None, max_length=500)
    scheduled_at: Optional[datetime] = None
    estimated_distance_km: Optional[float] = Field(
        default=None,
        gt=0,
        description="Optional manual override for total distance in km",
    )
    estimated_duration_minutes: Optional[float] = Field(
        default=None,
        gt=0,
        description="Optional manual override for total duration in minutes",
    )

    def route(self) -> list[LocationPoint]:
        stops = [stop.to_domain() for stop in (self.stops or [])]
        return [self.pickup.to_domain(), *stops, self.destination.to_domain()]


class CancelRideRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=255)


class LocationModel(BaseModel):
    address: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    note: Optional[str] = None

    @classmethod
    def from_domain(cls, point: LocationPoint) -> "LocationModel":
        return cls(**point.to_dict())


class FareEstimateResponse(BaseModel):
    distance_km: float
    duration_minutes: int
    fare: float
    arrival: datetime
    is_scheduled: bool
    cancellation_window_minutes: int
    breakdown: Dict[str, float]


class RideBookingResponse(BaseModel):
    id: str
    passenger_id: str
    pickup_location: LocationModel
    destination_location: LocationModel
    stops: List[LocationModel]
    vehicle_type: VehicleType
    note: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    is_instant: bool
    status: RideStatus
    estimated_fare: float
    estimated_distance_km: float
    estimated_duration_minutes: float
    estimated_arrival: datetime
    cancellation_window_minutes: Optional[int] = None
    cancellation_penalty: Optional[float] = None
    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, booking: RideBooking) -> "RideBookingResponse":
        return cls(
            id=booking.id,
            passenger_id=booking.passenger_id,
            pickup_location=LocationModel.from_domain(booking.pickup_location),
            destination_location=LocationModel.from_domain(booking.destination_location),
            stops=[LocationModel.from_domain(stop) for stop in booking.stops],
            vehicle_type=booking.vehicle_type,
            note=booking.note,
            scheduled_at=booking.scheduled_at,
            is_instant=booking.is_instant,
            status=booking.status,
            estimated_fare=booking.estimated_fare,
            estimated_distance_km=booking.estimated_distance_km,
            estimated_duration_minutes=booking.estimated_duration_minutes,
            estimated_arrival=booking.estimated_arrival,
            cancellation_window_minutes=booking.cancellation_window_minutes,
            cancellation_penalty=booking.cancellation_penalty,
            cancellation_reason=booking.cancellation_reason,
            cancelled_at=booking.cancelled_at,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
        )
