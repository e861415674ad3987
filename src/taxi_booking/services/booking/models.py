"""Booking calculation value objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Mapping, Optional

from ...config import Settings, VehicleRate, settings
from ...models.domain import RideStatus, VehicleType


@dataclass(frozen=True, slots=True)
class PricingPolicy:
    """Tariffs and thresholds consumed by the estimator and cancellation policy."""

    vehicle_pricing: Mapping[str, VehicleRate]
    average_speed_kmh: float
    default_segment_distance_km: float
    minimum_distance_km: float
    minimum_duration_minutes: int
    stop_fee: float
    scheduled_fee: float
    scheduled_threshold_minutes: int
    scheduled_cancellation_window_minutes: int
    instant_cancellation_window_minutes: int
    cancellation_penalty_rate: float
    minimum_cancellation_penalty: float

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> "PricingPolicy":
        config = config or settings
        return cls(
            vehicle_pricing=dict(config.vehicle_pricing),
            average_speed_kmh=config.average_speed_kmh,
            default_segment_distance_km=config.default_segment_distance_km,
            minimum_distance_km=config.minimum_distance_km,
            minimum_duration_minutes=config.minimum_duration_minutes,
            stop_fee=config.stop_fee,
            scheduled_fee=config.scheduled_fee,
            scheduled_threshold_minutes=config.scheduled_threshold_minutes,
            scheduled_cancellation_window_minutes=config.scheduled_cancellation_window_minutes,
            instant_cancellation_window_minutes=config.instant_cancellation_window_minutes,
            cancellation_penalty_rate=config.cancellation_penalty_rate,
            minimum_cancellation_penalty=config.minimum_cancellation_penalty,
        )

    def rate_for(self, vehicle_type: VehicleType | str) -> VehicleRate:
        key = vehicle_type.value if isinstance(vehicle_type, VehicleType) else str(vehicle_type).upper()
        try:
            return self.vehicle_pricing[key]
        except KeyError as exc:
            raise ValueError(f"No pricing configured for vehicle type '{key}'.") from exc

    def cancellation_window_for(self, is_scheduled: bool) -> int:
        if is_scheduled:
            return self.scheduled_cancellation_window_minutes
        return self.instant_cancellation_window_minutes


@dataclass(slots=True)
class EstimateOverrides:
    distance_km: Optional[float] = None
    duration_minutes: Optional[float] = None


@dataclass(slots=True)
class FareEstimate:
    distance_km: float
    duration_minutes: int
    fare: float
    arrival: datetime
    is_scheduled: bool
    cancellation_window_minutes: int
    stop_count: int = 0
    breakdown: dict[str, float] = field(default_factory=dict)

    @property
    def initial_status(self) -> RideStatus:
        return RideStatus.SCHEDULED if self.is_scheduled else RideStatus.PENDING_DRIVER


@dataclass(slots=True)
class CancellationOutcome:
    status: RideStatus
    penalty: float
    cancelled_at: datetime
    minutes_until_pickup: float
