"""Cancellation policy for ride bookings."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...errors import InvalidStateError
from ...models.domain import TERMINAL_STATUSES, RideBooking, RideStatus
from .estimator import ensure_aware, round_half_up, utc_now
from .models import CancellationOutcome, PricingPolicy


def ensure_cancellable(booking: RideBooking) -> None:
    if booking.status in TERMINAL_STATUSES:
        raise InvalidStateError("Ride can no longer be cancelled")


def pickup_reference(booking: RideBooking) -> datetime:
    """Instant rides count from creation; scheduled rides from the requested time."""
    if booking.is_instant or booking.scheduled_at is None:
        return ensure_aware(booking.created_at)
    return ensure_aware(booking.scheduled_at)


def minutes_until_pickup(booking: RideBooking, now: Optional[datetime] = None) -> float:
    now = ensure_aware(now or utc_now())
    return (pickup_reference(booking) - now).total_seconds() / 60


def calculate_penalty(
    booking: RideBooking,
    policy: PricingPolicy,
    now: Optional[datetime] = None,
) -> float:
    window = booking.cancellation_window_minutes
    if window is None:
        window = policy.cancellation_window_for(not booking.is_instant)

    if minutes_until_pickup(booking, now) >= window:
        return 0.0

    penalty = max(policy.minimum_cancellation_penalty, booking.estimated_fare * policy.cancellation_penalty_rate)
    return round_half_up(penalty)


def cancel(
    booking: RideBooking,
    reason: Optional[str] = None,
    *,
    policy: Optional[PricingPolicy] = None,
    now: Optional[datetime] = None,
) -> CancellationOutcome:
    """Cancel ``booking`` in place and return the applied outcome.

    Raises ``InvalidStateError`` without touching the booking when it is
    already cancelled or completed.
    """
    ensure_cancellable(booking)
    policy = policy or PricingPolicy.from_settings()
    now = ensure_aware(now or utc_now())

    remaining = minutes_until_pickup(booking, now)
    penalty = calculate_penalty(booking, policy, now)

    booking.status = RideStatus.CANCELLED
    booking.cancellation_reason = reason
    booking.cancellation_penalty = penalty
    booking.cancelled_at = now
    booking.updated_at = now

    return CancellationOutcome(
        status=booking.status,
        penalty=penalty,
        cancelled_at=now,
        minutes_until_pickup=remaining,
    )
