"""Book and circle recommendations.

Two strategies sit behind :class:`RecommendationService`:

  1. An optional remote ranker (:class:`~bookloop.domain.repositories.IRecommender`).
  2. The heuristic scorers below, used whenever the remote ranker is not
     configured or yields nothing usable.

The heuristics are pure functions of ``(user, candidates, top_k)``.
"""

from __future__ import annotations

import logging
from typing import Optional

from bookloop.domain.entities import Book, ReadingCircle, User
from bookloop.domain.repositories import IRecommender
from bookloop.domain.services import IRecommendationService

logger = logging.getLogger(__name__)

DEFAULT_BOOKS_TOP_K = 8
DEFAULT_CIRCLES_TOP_K = 6

# Heuristic weights
GENRE_MATCH = 2.0
AUTHOR_MATCH = 2.0
RATING_WEIGHT = 0.2
REVIEWS_WEIGHT = 0.01
AVAILABLE_BONUS = 0.5
MEMBER_WEIGHT = 0.01


def _matches_any(preferences: list[str], value: Optional[str]) -> bool:
    """Case-insensitive: is any preference a substring of ``value``?"""
    haystack = (value or "").lower()
    return any(str(p).lower() in haystack for p in preferences)


def book_score(user: User, book: Book) -> float:
    score = 0.0
    if _matches_any(user.preferences.genres, book.genre):
        score += GENRE_MATCH
    if _matches_any(user.preferences.authors, book.author):
        score += AUTHOR_MATCH
    score += (book.rating or 0) * RATING_WEIGHT
    score += (book.reviews or 0) * REVIEWS_WEIGHT
    if book.available:
        score += AVAILABLE_BONUS
    return score


def circle_score(user: User, circle: ReadingCircle) -> float:
    score = 0.0
    if _matches_any(user.preferences.genres, circle.description):
        score += GENRE_MATCH
    score += circle.member_count * MEMBER_WEIGHT
    return score


def score_books(user: User, books: list[Book], top_k: int = DEFAULT_BOOKS_TOP_K) -> list[str]:
    """Rank books the user does not own; ties keep input order."""
    scored = [(b.id, book_score(user, b)) for b in books if b.owner_id != user.id]
    scored.sort(key=lambda s: -s[1])
    return [book_id for book_id, _ in scored[:top_k]]


def score_circles(
    user: User, circles: list[ReadingCircle], top_k: int = DEFAULT_CIRCLES_TOP_K
) -> list[str]:
    """Rank circles the user has not joined; ties keep input order."""
    joined = set(user.circles_joined)
    scored = [(c.id, circle_score(user, c)) for c in circles if c.id not in joined]
    scored.sort(key=lambda s: -s[1])
    return [circle_id for circle_id, _ in scored[:top_k]]


class RecommendationService(IRecommendationService):
    """Remote ranker first (when configured), heuristic scorer otherwise."""

    def __init__(self, remote: Optional[IRecommender] = None):
        self.remote = remote

    async def recommend_books(
        self, user: User, books: list[Book], top_k: int = DEFAULT_BOOKS_TOP_K
    ) -> list[str]:
        if self.remote is not None:
            eligible = [b for b in books if b.owner_id != user.id]
            ids = await self.remote.recommend_books(user, eligible, top_k)
            usable = self._known(ids, {b.id for b in eligible}, top_k)
            if usable:
                logger.info("Remote ranker returned %d book(s) for user %s", len(usable), user.id)
                return usable
            logger.warning("Remote ranker gave no usable books; using heuristic scorer")
        return score_books(user, books, top_k)

    async def recommend_circles(
        self, user: User, circles: list[ReadingCircle], top_k: int = DEFAULT_CIRCLES_TOP_K
    ) -> list[str]:
        if self.remote is not None:
            joined = set(user.circles_joined)
            eligible = [c for c in circles if c.id not in joined]
            ids = await self.remote.recommend_circles(user, eligible, top_k)
            usable = self._known(ids, {c.id for c in eligible}, top_k)
            if usable:
                logger.info("Remote ranker returned %d circle(s) for user %s", len(usable), user.id)
                return usable
            logger.warning("Remote ranker gave no usable circles; using heuristic scorer")
        return score_circles(user, circles, top_k)

    @staticmethod
    def _known(ids: list[str], candidate_ids: set[str], top_k: int) -> list[str]:
        """Keep ids that name a candidate, deduplicated, capped at ``top_k``."""
        seen: list[str] = []
        for i in ids:
            if i in candidate_ids and i not in seen:
                seen.append(i)
        return seen[:top_k]
