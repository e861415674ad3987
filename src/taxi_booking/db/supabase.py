"""Supabase client for the booking backend."""

import logging
from functools import lru_cache
from supabase import create_client, Client
from ..config import settings


@lru_cache()
def get_supabase_client() -> Client | None:
    """Get cached Supabase client instance.

    Returns:
        Supabase Client instance if configured, None otherwise.
        Note: This does not test the connection - actual queries may fail with network errors.
    """
    if not settings.supabase_url or not settings.supabase_key:
        logging.warning("Supabase credentials not configured (missing URL or key)")
        return None

    try:
        return create_client(settings.supabase_url, settings.supabase_key)
    except Exception as e:
        logging.error(f"Failed to create Supabase client: {e}")
        return None


# Expected tables:
#
# users(id uuid pk, email text unique, first_name text, last_name text,
#       password_hash text, is_confirmed bool, is_active bool,
#       created_at timestamptz, updated_at timestamptz, deleted_at timestamptz null)
#
# ride_bookings(id uuid pk, passenger_id uuid references users(id),
#       pickup_location jsonb, destination_location jsonb, stops jsonb,
#       vehicle_type text, note text, scheduled_at timestamptz, is_instant bool,
#       status text, estimated_fare float8, estimated_distance_km float8,
#       estimated_duration_minutes float8, estimated_arrival timestamptz,
#       cancellation_window_minutes int, cancellation_penalty float8,
#       cancellation_reason text, cancelled_at timestamptz,
#       created_at timestamptz, updated_at timestamptz)
