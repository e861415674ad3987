"""Fare, distance and arrival estimation for ride bookings.

All functions are pure: the evaluation time is passed in (or defaults to the
current UTC time) so results are reproducible in tests.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence

from ...models.domain import LocationPoint, VehicleType
from ..geospatial import haversine_km
from .models import EstimateOverrides, FareEstimate, PricingPolicy


def round_half_up(value: float, places: int = 2) -> float:
    """Round to ``places`` decimals with halves going up (12.5 -> 13, 2.125 -> 2.13)."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def segment_distance_km(start: LocationPoint, end: LocationPoint, policy: PricingPolicy) -> float:
    if start.has_coordinates and end.has_coordinates:
        distance = haversine_km(start.latitude, start.longitude, end.latitude, end.longitude)
        return round_half_up(distance)
    return policy.default_segment_distance_km


def route_distance_km(points: Sequence[LocationPoint], policy: PricingPolicy) -> float:
    """Sum of segment distances along the route, before any floor is applied."""
    if len(points) < 2:
        return policy.default_segment_distance_km
    return sum(segment_distance_km(points[i], points[i + 1], policy) for i in range(len(points) - 1))


def resolve_distance(
    points: Sequence[LocationPoint],
    policy: PricingPolicy,
    manual_distance_km: Optional[float] = None,
) -> float:
    if manual_distance_km and manual_distance_km > 0:
        distance = manual_distance_km
    else:
        distance = route_distance_km(points, policy)
    return max(round_half_up(distance), policy.minimum_distance_km)


def resolve_duration(
    distance_km: float,
    policy: PricingPolicy,
    manual_duration_minutes: Optional[float] = None,
) -> int:
    if manual_duration_minutes and manual_duration_minutes > 0:
        minutes = round_half_up(manual_duration_minutes, 0)
    else:
        minutes = round_half_up(distance_km / policy.average_speed_kmh * 60, 0)
    return max(policy.minimum_duration_minutes, int(minutes))


def is_scheduled_ride(
    scheduled_at: Optional[datetime],
    policy: PricingPolicy,
    now: Optional[datetime] = None,
) -> bool:
    if scheduled_at is None:
        return False
    now = ensure_aware(now or utc_now())
    threshold = timedelta(minutes=policy.scheduled_threshold_minutes)
    return ensure_aware(scheduled_at) - now > threshold


def fare_breakdown(
    vehicle_type: VehicleType | str,
    distance_km: float,
    duration_minutes: float,
    stop_count: int,
    is_scheduled: bool,
    policy: PricingPolicy,
) -> dict[str, float]:
    rate = policy.rate_for(vehicle_type)
    return {
        "base": rate.base,
        "distance": rate.per_km * distance_km,
        "duration": rate.per_minute * duration_minutes,
        "stops": stop_count * policy.stop_fee,
        "scheduling": policy.scheduled_fee if is_scheduled else 0.0,
    }


def calculate_fare(
    vehicle_type: VehicleType | str,
    distance_km: float,
    duration_minutes: float,
    stop_count: int,
    is_scheduled: bool,
    policy: PricingPolicy,
) -> float:
    parts = fare_breakdown(vehicle_type, distance_km, duration_minutes, stop_count, is_scheduled, policy)
    return round_half_up(sum(parts.values()))


def estimate_arrival(
    scheduled_at: Optional[datetime],
    duration_minutes: float,
    now: Optional[datetime] = None,
) -> datetime:
    now = ensure_aware(now or utc_now())
    base = now
    if scheduled_at is not None and ensure_aware(scheduled_at) > now:
        base = ensure_aware(scheduled_at)
    return base + timedelta(minutes=duration_minutes)


def estimate(
    route: Sequence[LocationPoint],
    vehicle_type: VehicleType | str,
    overrides: Optional[EstimateOverrides] = None,
    scheduled_at: Optional[datetime] = None,
    *,
    policy: Optional[PricingPolicy] = None,
    now: Optional[datetime] = None,
) -> FareEstimate:
    """Estimate distance, duration, fare and arrival for an ordered route.

    ``route`` is pickup, any stops, then destination. Every point between the
    first and the last counts as a stop for the stop fee.
    """
    policy = policy or PricingPolicy.from_settings()
    overrides = overrides or EstimateOverrides()
    now = ensure_aware(now or utc_now())

    stop_count = max(0, len(route) - 2)
    scheduled = is_scheduled_ride(scheduled_at, policy, now)
    distance_km = resolve_distance(route, policy, overrides.distance_km)
    duration_minutes = resolve_duration(distance_km, policy, overrides.duration_minutes)
    breakdown = fare_breakdown(vehicle_type, distance_km, duration_minutes, stop_count, scheduled, policy)

    return FareEstimate(
        distance_km=distance_km,
        duration_minutes=duration_minutes,
        fare=calculate_fare(vehicle_type, distance_km, duration_minutes, stop_count, scheduled, policy),
        arrival=estimate_arrival(scheduled_at, duration_minutes, now),
        is_scheduled=scheduled,
        cancellation_window_minutes=policy.cancellation_window_for(scheduled),
        stop_count=stop_count,
        breakdown={key: round_half_up(value) for key, value in breakdown.items()},
    )
