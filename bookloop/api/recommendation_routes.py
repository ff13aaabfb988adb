"""Recommendation API routes."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from bookloop.api.schemas import (
    BookRecommendationRequest,
    BookRecommendationResponse,
    CircleRecommendationRequest,
    CircleRecommendationResponse,
)
from bookloop.core.dependencies import get_recommendation_service
from bookloop.domain.services import IRecommendationService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/recommend", tags=["recommendations"])


@router.post("/books", response_model=BookRecommendationResponse)
async def recommend_books(
    body: BookRecommendationRequest,
    recommendation_service: Annotated[IRecommendationService, Depends(get_recommendation_service)],
) -> BookRecommendationResponse:
    """Rank candidate books for a user.

    Books the user owns are never returned. Scoring considers:
      - genre and author preference matches (case-insensitive substring)
      - rating and review count
      - availability
    """
    user = body.user.to_entity()
    ids = await recommendation_service.recommend_books(
        user, [b.to_entity() for b in body.books], top_k=body.top_k
    )
    return BookRecommendationResponse(book_ids=ids)


@router.post("/circles", response_model=CircleRecommendationResponse)
async def recommend_circles(
    body: CircleRecommendationRequest,
    recommendation_service: Annotated[IRecommendationService, Depends(get_recommendation_service)],
) -> CircleRecommendationResponse:
    """Rank candidate circles the user has not joined yet."""
    user = body.user.to_entity()
    ids = await recommendation_service.recommend_circles(
        user, [c.to_entity() for c in body.circles], top_k=body.top_k
    )
    return CircleRecommendationResponse(circle_ids=ids)
