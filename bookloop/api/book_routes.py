"""Book API routes."""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status

from bookloop.api.schemas import (
    BookCreateRequest,
    BookResponse,
    BookUpdateRequest,
    MessageResponse,
)
from bookloop.core.dependencies import get_book_service
from bookloop.services.book_service import BookService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/books", tags=["books"])


@router.get("", response_model=list[BookResponse])
async def list_books(
    book_service: Annotated[BookService, Depends(get_book_service)],
    lat: Annotated[Optional[float], Query(ge=-90, le=90)] = None,
    lng: Annotated[Optional[float], Query(ge=-180, le=180)] = None,
    radius: Annotated[float, Query(gt=0, description="Search radius in km")] = 50.0,
) -> list[BookResponse]:
    """List books, optionally only those near ``lat``/``lng``."""
    books = await book_service.list_books(lat=lat, lng=lng, radius_km=radius)
    return [BookResponse.model_validate(b) for b in books]


@router.post("", response_model=BookResponse, status_code=status.HTTP_201_CREATED)
async def create_book(
    body: BookCreateRequest,
    book_service: Annotated[BookService, Depends(get_book_service)],
) -> BookResponse:
    book = await book_service.create_book(body.to_entity())
    return BookResponse.model_validate(book)


@router.get("/{book_id}", response_model=BookResponse)
async def get_book(
    book_id: str,
    book_service: Annotated[BookService, Depends(get_book_service)],
) -> BookResponse:
    """Get a book by ID."""
    return BookResponse.model_validate(await book_service.get_book(book_id))


@router.put("/{book_id}", response_model=BookResponse)
async def update_book(
    book_id: str,
    body: BookUpdateRequest,
    book_service: Annotated[BookService, Depends(get_book_service)],
) -> BookResponse:
    """Overwrite the fields present in the body."""
    updated = await book_service.update_book(book_id, body.changes())
    return BookResponse.model_validate(updated)


@router.delete("/{book_id}", response_model=MessageResponse)
async def delete_book(
    book_id: str,
    book_service: Annotated[BookService, Depends(get_book_service)],
) -> MessageResponse:
    await book_service.delete_book(book_id)
    return MessageResponse(message="Book deleted")
