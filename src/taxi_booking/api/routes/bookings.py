"""Ride booking endpoints."""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...errors import InvalidStateError, NotFoundError
from ...models.domain import RideStatus, User
from ...schemas.bookings import (
    CancelRideRequest,
    CreateRideBookingRequest,
    FareEstimateResponse,
    RideBookingResponse,
)
from ...services.booking import BookingService
from ..deps import get_booking_service, get_current_user

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("/estimate", response_model=FareEstimateResponse, status_code=status.HTTP_200_OK)
def estimate_ride(
    payload: CreateRideBookingRequest,
    current_user: User = Depends(get_current_user),
    bookings: BookingService = Depends(get_booking_service),
) -> FareEstimateResponse:
    """Preview distance, duration, fare and arrival without creating a booking."""
    try:
        result = bookings.quote(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return FareEstimateResponse(
        distance_km=result.distance_km,
        duration_minutes=result.duration_minutes,
        fare=result.fare,
        arrival=result.arrival,
        is_scheduled=result.is_scheduled,
        cancellation_window_minutes=result.cancellation_window_minutes,
        breakdown=result.breakdown,
    )


@router.post("", response_model=RideBookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    payload: CreateRideBookingRequest,
    current_user: User = Depends(get_current_user),
    bookings: BookingService = Depends(get_booking_service),
) -> RideBookingResponse:
    """Create a ride booking with fare and ETA estimates."""
    try:
        booking = bookings.create_booking(current_user.id, payload)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error creating booking: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create booking",
        ) from exc
    return RideBookingResponse.from_domain(booking)


@router.get("", response_model=List[RideBookingResponse], status_code=status.HTTP_200_OK)
def list_bookings(
    ride_status: RideStatus | None = Query(default=None, alias="status", description="Optional status filter"),
    current_user: User = Depends(get_current_user),
    bookings: BookingService = Depends(get_booking_service),
) -> List[RideBookingResponse]:
    """List the authenticated passenger's rides, newest first."""
    return [RideBookingResponse.from_domain(booking) for booking in bookings.list_bookings(current_user.id, ride_status)]


@router.get("/{booking_id}", response_model=RideBookingResponse, status_code=status.HTTP_200_OK)
def get_booking(
    booking_id: str,
    current_user: User = Depends(get_current_user),
    bookings: BookingService = Depends(get_booking_service),
) -> RideBookingResponse:
    try:
        return RideBookingResponse.from_domain(bookings.get_booking(booking_id, current_user.id))
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.post("/{booking_id}/cancel", response_model=RideBookingResponse, status_code=status.HTTP_200_OK)
def cancel_booking(
    booking_id: str,
    payload: CancelRideRequest | None = None,
    current_user: User = Depends(get_current_user),
    bookings: BookingService = Depends(get_booking_service),
) -> RideBookingResponse:
    """Cancel a ride, applying the cancellation penalty policy."""
    reason = payload.reason if payload else None
    try:
        booking = bookings.cancel_booking(current_user.id, booking_id, reason)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except InvalidStateError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error cancelling booking {booking_id}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to cancel booking",
        ) from exc
    return RideBookingResponse.from_domain(booking)
