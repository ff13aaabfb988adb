"""User accounts: signup, login, profile and favorites."""

import logging
from typing import Optional

from bookloop.core.security import hash_password, verify_password
from bookloop.domain.entities import Location, Preferences, User, new_id
from bookloop.domain.exceptions import AlreadyExistsError, NotFoundError
from bookloop.domain.repositories import IUserRepository

logger = logging.getLogger(__name__)


class UserService:
    """Handles signup, login, profile and favorites."""

    def __init__(self, user_repository: IUserRepository):
        self.user_repository = user_repository

    async def signup(
        self,
        name: str,
        email: str,
        password: str,
        preferences: Optional[Preferences] = None,
    ) -> User:
        """Register a new user."""
        existing = await self.user_repository.get_by_email(email)
        if existing:
            raise AlreadyExistsError("Email already registered")

        user = User(
            id=new_id(),
            name=name,
            email=email,
            hashed_password=hash_password(password),
            preferences=preferences or Preferences(),
        )
        created = await self.user_repository.create(user)
        logger.info("User registered: %s", created.id)
        return created

    async def login(self, email: str, password: str) -> User:
        user = await self.user_repository.get_by_email(email)
        if not user or not verify_password(password, user.hashed_password):
            raise NotFoundError("User not found or incorrect password")
        logger.info("User logged in: %s", user.id)
        return user

    async def get_user(self, user_id: str) -> User:
        user = await self.user_repository.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def update_profile(
        self,
        user_id: str,
        *,
        name: Optional[str] = None,
        avatar: Optional[str] = None,
        location: Optional[Location] = None,
        bio: Optional[str] = None,
        preferences: Optional[Preferences] = None,
    ) -> User:
        """Overwrite only the profile fields that were supplied."""
        user = await self.get_user(user_id)
        if name is not None:
            user.name = name
        if avatar is not None:
            user.avatar = avatar
        if location is not None:
            user.location = location
        if bio is not None:
            user.bio = bio
        if preferences is not None:
            user.preferences = preferences
        return await self.user_repository.update(user)

    # --- favorites ---

    async def get_favorites(self, user_id: str) -> list[str]:
        user = await self.get_user(user_id)
        return user.favorites

    async def add_favorite(self, user_id: str, book_id: str) -> list[str]:
        user = await self.get_user(user_id)
        if book_id not in user.favorites:
            user.favorites.append(book_id)
            user = await self.user_repository.update(user)
        return user.favorites

    async def remove_favorite(self, user_id: str, book_id: str) -> list[str]:
        user = await self.get_user(user_id)
        user.favorites = [f for f in user.favorites if f != book_id]
        user = await self.user_repository.update(user)
        return user.favorites
