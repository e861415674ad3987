"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database() -> dict:
    """Report which storage backend is serving users and bookings."""
    from ...db.supabase import get_supabase_client
    from ...persistence.database import BOOKINGS_TABLE

    supabase = get_supabase_client()
    if not supabase:
        return {
            "configured": False,
            "backend": "memory",
            "message": "Supabase not configured. Set TAXI_SUPABASE_URL and TAXI_SUPABASE_KEY environment variables.",
        }

    try:
        supabase.table(BOOKINGS_TABLE).select("id", count="exact").limit(1).execute()
        return {
            "configured": True,
            "connected": True,
            "backend": "supabase",
            "message": "Database connected.",
        }
    except Exception as exc:
        return {
            "configured": True,
            "connected": False,
            "backend": "supabase",
            "error": str(exc),
            "message": f"Database connection error: {exc}",
        }
