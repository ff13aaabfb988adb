"""User API routes (signup, login, profile, favorites)."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from bookloop.api.schemas import (
    FavoritesResponse,
    ProfileUpdateRequest,
    SignupRequest,
    UserResponse,
)
from bookloop.core.dependencies import get_user_service
from bookloop.services.user_service import UserService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/users", tags=["users"])


@router.post("/signup", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    body: SignupRequest,
    user_service: Annotated[UserService, Depends(get_user_service)],
) -> UserResponse:
    """Register a new user."""
    user = await user_service.signup(
        body.name,
        body.email,
        body.password,
        preferences=body.preferences.to_entity() if body.preferences else None,
    )
    return UserResponse.model_validate(user)


@router.get("/login", response_model=UserResponse)
async def login(
    email: Annotated[str, Query(min_length=1)],
    password: Annotated[str, Query(min_length=1)],
    user_service: Annotated[UserService, Depends(get_user_service)],
) -> UserResponse:
    """Look up a user by email and password."""
    user = await user_service.login(email, password)
    return UserResponse.model_validate(user)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    user_service: Annotated[UserService, Depends(get_user_service)],
) -> UserResponse:
    user = await user_service.get_user(user_id)
    return UserResponse.model_validate(user)


@router.put("/{user_id}/profile", response_model=UserResponse)
async def update_profile(
    user_id: str,
    body: ProfileUpdateRequest,
    user_service: Annotated[UserService, Depends(get_user_service)],
) -> UserResponse:
    """Update name, avatar, location, bio and preferences; omitted fields are kept."""
    user = await user_service.update_profile(
        user_id,
        name=body.name,
        avatar=body.avatar,
        location=body.location.to_entity() if body.location else None,
        bio=body.bio,
        preferences=body.preferences.to_entity() if body.preferences else None,
    )
    return UserResponse.model_validate(user)


# ---------------------------------------------------------------------------
# Favorites
# ---------------------------------------------------------------------------
@router.get("/{user_id}/favorites", response_model=FavoritesResponse)
async def get_favorites(
    user_id: str,
    user_service: Annotated[UserService, Depends(get_user_service)],
) -> FavoritesResponse:
    return FavoritesResponse(favorites=await user_service.get_favorites(user_id))


@router.post("/{user_id}/favorites/{book_id}", response_model=FavoritesResponse)
async def add_favorite(
    user_id: str,
    book_id: str,
    user_service: Annotated[UserService, Depends(get_user_service)],
) -> FavoritesResponse:
    return FavoritesResponse(favorites=await user_service.add_favorite(user_id, book_id))


@router.delete("/{user_id}/favorites/{book_id}", response_model=FavoritesResponse)
async def remove_favorite(
    user_id: str,
    book_id: str,
    user_service: Annotated[UserService, Depends(get_user_service)],
) -> FavoritesResponse:
    return FavoritesResponse(favorites=await user_service.remove_favorite(user_id, book_id))
