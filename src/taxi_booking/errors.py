"""Domain exceptions raised by the service layer.

Routers translate these into HTTP responses; services never raise
``HTTPException`` themselves.
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base class for expected, caller-facing failures."""


class NotFoundError(ServiceError):
    """A referenced user or booking is missing or soft-deleted."""


class InvalidStateError(ServiceError, ValueError):
    """The entity exists but its state forbids the requested operation."""


class ConflictError(ServiceError):
    """The operation would violate a uniqueness constraint."""


class AuthenticationError(ServiceError):
    """Credentials or access token were rejected."""
