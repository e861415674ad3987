"""Password hashing and access-token helpers."""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any

import bcrypt
import jwt

from ...config import settings
from ...errors import AuthenticationError


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


@lru_cache(maxsize=1)
def _ephemeral_secret() -> str:
    logging.warning(
        "TAXI_JWT_SECRET is not set - using a random per-process secret. "
        "Issued tokens will not survive a restart."
    )
    return secrets.token_urlsafe(48)


def get_jwt_secret() -> str:
    if settings.jwt_secret:
        return settings.jwt_secret
    if settings.environment == "production":
        raise RuntimeError("TAXI_JWT_SECRET must be configured in production.")
    return _ephemeral_secret()


def create_access_token(subject: str, email: str, *, expires_minutes: int | None = None) -> str:
    issued_at = datetime.now(timezone.utc)
    if expires_minutes is None:
        expires_minutes = settings.jwt_expires_minutes
    lifetime = timedelta(minutes=expires_minutes)
    payload = {
        "sub": subject,
        "email": email,
        "iat": issued_at,
        "exp": issued_at + lifetime,
    }
    return jwt.encode(payload, get_jwt_secret(), algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """Return the verified claims of ``token`` or raise ``AuthenticationError``."""
    try:
        claims = jwt.decode(
            token,
            get_jwt_secret(),
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise AuthenticationError("Access token has expired") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthenticationError("Invalid access token") from exc
    return claims
