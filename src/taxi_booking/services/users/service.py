"""Passenger account lifecycle: signup, signin and soft deletion."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from ...errors import AuthenticationError, ConflictError, NotFoundError
from ...models.domain import User
from ...persistence.repositories import UserRepository
from .security import create_access_token, decode_access_token, hash_password, verify_password


@dataclass(slots=True)
class SigninResult:
    access_token: str
    user: User


class UserService:
    def __init__(self, users: UserRepository) -> None:
        self.users = users

    def signup(self, email: str, password: str, first_name: str, last_name: str) -> User:
        """Create an account, or restore a soft-deleted one with the same email."""
        now = datetime.now(timezone.utc)
        existing = self.users.find_by_email(email)

        if existing is not None:
            if not existing.is_deleted:
                raise ConflictError("User with this email already exists")
            existing.deleted_at = None
            existing.is_active = True
            existing.password_hash = hash_password(password)
            existing.first_name = first_name
            existing.last_name = last_name
            existing.updated_at = now
            self.users.save(existing)
            logging.info(f"Restored soft-deleted account {existing.id}")
            return existing

        user = User(
            id=str(uuid.uuid4()),
            email=email,
            first_name=first_name,
            last_name=last_name,
            password_hash=hash_password(password),
            is_confirmed=True,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        self.users.add(user)
        logging.info(f"Created account {user.id}")
        return user

    def signin(self, email: str, password: str) -> SigninResult:
        user = self.users.find_by_email(email)
        if user is None or user.is_deleted:
            raise AuthenticationError("Invalid credentials")
        if not user.is_active:
            raise AuthenticationError("Account is deactivated")
        if not verify_password(password, user.password_hash):
            raise AuthenticationError("Invalid credentials")

        token = create_access_token(user.id, user.email)
        return SigninResult(access_token=token, user=user)

    def get_user(self, user_id: str) -> User:
        user = self.users.get(user_id)
        if user is None or user.is_deleted:
            raise NotFoundError("User not found")
        return user

    def find_by_email(self, email: str) -> Optional[User]:
        user = self.users.find_by_email(email)
        if user is None or user.is_deleted:
            return None
        return user

    def list_users(self) -> list[User]:
        return self.users.list_active()

    def delete_account(self, user_id: str) -> bool:
        user = self.get_user(user_id)
        now = datetime.now(timezone.utc)
        user.deleted_at = now
        user.updated_at = now
        self.users.save(user)
        logging.info(f"Soft-deleted account {user.id}")
        return True

    def authenticate(self, token: str) -> User:
        """Resolve a bearer token to a live, active user."""
        claims = decode_access_token(token)
        user = self.users.get(str(claims["sub"]))
        if user is None or user.is_deleted or not user.is_active:
            raise AuthenticationError("User not found or inactive")
        return user
