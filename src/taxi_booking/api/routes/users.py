"""Account endpoints."""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from ...errors import AuthenticationError, ConflictError, NotFoundError
from ...models.domain import User
from ...schemas.users import AuthResponse, SigninRequest, SignupRequest, UserResponse
from ...services.users.service import UserService
from ..deps import get_current_user, get_user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/signup", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def signup(payload: SignupRequest, users: UserService = Depends(get_user_service)) -> UserResponse:
    try:
        user = users.signup(
            email=payload.email,
            password=payload.password,
            first_name=payload.first_name,
            last_name=payload.last_name,
        )
    except ConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error during signup: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create account",
        ) from exc
    return UserResponse.from_domain(user)


@router.post("/signin", response_model=AuthResponse, status_code=status.HTTP_200_OK)
def signin(payload: SigninRequest, users: UserService = Depends(get_user_service)) -> AuthResponse:
    try:
        result = users.signin(email=payload.email, password=payload.password)
    except AuthenticationError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
    return AuthResponse(access_token=result.access_token, user=UserResponse.from_domain(result.user))


@router.get("/me", response_model=UserResponse, status_code=status.HTTP_200_OK)
def me(current_user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.from_domain(current_user)


@router.delete("/me", status_code=status.HTTP_200_OK)
def delete_account(
    current_user: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
) -> dict:
    """Soft-delete the authenticated account. Signing up again restores it."""
    try:
        deleted = users.delete_account(current_user.id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return {"deleted": deleted}


@router.get("", response_model=List[UserResponse], status_code=status.HTTP_200_OK)
def list_users(
    current_user: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
) -> List[UserResponse]:
    return [UserResponse.from_domain(user) for user in users.list_users()]


@router.get("/{user_id}", response_model=UserResponse, status_code=status.HTTP_200_OK)
def get_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
) -> UserResponse:
    try:
        return UserResponse.from_domain(users.get_user(user_id))
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
