"""Book listings."""

import logging
import math
from dataclasses import fields, replace
from typing import Any, Optional

from bookloop.domain.entities import Book, new_id
from bookloop.domain.exceptions import InvalidRequestError, NotFoundError
from bookloop.domain.repositories import IBookRepository, IUserRepository

logger = logging.getLogger(__name__)

KM_PER_DEGREE = 111.0
BOOK_CONDITIONS = ("new", "like-new", "good", "fair")
_UPDATABLE = {f.name for f in fields(Book)} - {"id"}


class BookService:
    """CRUD over book listings, keeping the owner's ``books_owned`` in step."""

    def __init__(self, book_repository: IBookRepository, user_repository: IUserRepository):
        self.book_repository = book_repository
        self.user_repository = user_repository

    async def list_books(
        self,
        lat: Optional[float] = None,
        lng: Optional[float] = None,
        radius_km: float = 50.0,
    ) -> list[Book]:
        """All books, or only those inside a box of ``radius_km`` around (lat, lng)."""
        if lat is None or lng is None:
            return await self.book_repository.list_all()
        lat_range = radius_km / KM_PER_DEGREE
        cos_lat = math.cos(math.radians(lat))
        lng_range = radius_km / (KM_PER_DEGREE * cos_lat) if abs(cos_lat) > 1e-9 else 180.0
        return await self.book_repository.list_within(
            lat - lat_range, lat + lat_range, lng - lng_range, lng + lng_range
        )

    async def get_book(self, book_id: str) -> Book:
        book = await self.book_repository.get_by_id(book_id)
        if book is None:
            raise NotFoundError("Book not found")
        return book

    async def create_book(self, book: Book) -> Book:
        self._check_condition(book.condition)
        created = await self.book_repository.create(replace(book, id=book.id or new_id()))
        await self.user_repository.add_owned_book(created.owner_id, created.id)
        logger.info("Book created: %s owned by %s", created.id, created.owner_id)
        return created

    async def update_book(self, book_id: str, changes: dict[str, Any]) -> Book:
        """Partial overwrite of the given fields."""
        book = await self.get_book(book_id)
        unknown = set(changes) - _UPDATABLE
        if unknown:
            raise InvalidRequestError(f"Unknown book fields: {', '.join(sorted(unknown))}")
        if "condition" in changes:
            self._check_condition(changes["condition"])
        updated = await self.book_repository.update(replace(book, **changes))
        if updated.owner_id != book.owner_id:
            await self.user_repository.remove_owned_book(book.owner_id, book.id)
            await self.user_repository.add_owned_book(updated.owner_id, updated.id)
        return updated

    async def delete_book(self, book_id: str) -> None:
        book = await self.get_book(book_id)
        await self.book_repository.delete(book_id)
        await self.user_repository.remove_owned_book(book.owner_id, book_id)
        logger.info("Book deleted: %s", book_id)

    @staticmethod
    def _check_condition(condition: str) -> None:
        if condition not in BOOK_CONDITIONS:
            raise InvalidRequestError(f"Invalid book condition: {condition}")
