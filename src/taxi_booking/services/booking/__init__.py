"""Ride booking services."""

from .cancellation import calculate_penalty, cancel
from .estimator import calculate_fare, estimate
from .models import CancellationOutcome, EstimateOverrides, FareEstimate, PricingPolicy
from .service import BookingService

__all__ = [
    "BookingService",
    "CancellationOutcome",
    "EstimateOverrides",
    "FareEstimate",
    "PricingPolicy",
    "calculate_fare",
    "calculate_penalty",
    "cancel",
    "estimate",
]
