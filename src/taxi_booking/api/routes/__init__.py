"""Route group exports."""

from . import bookings, health, users

__all__ = ["bookings", "health", "users"]
