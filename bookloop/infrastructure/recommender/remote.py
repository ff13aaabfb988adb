"""HTTP-backed recommender.

Posts the user profile and the candidate list to an external ranking
service and expects ``{"bookIds": [...]}`` or ``{"circleIds": [...]}``
back. Every failure (transport error, non-2xx status, unexpected body)
is logged and reported as an empty list so the caller can fall back to
the heuristic scorer.
"""

import logging
from typing import Any

import httpx

from bookloop.domain.entities import Book, ReadingCircle, User
from bookloop.domain.repositories import IRecommender

logger = logging.getLogger(__name__)

BOOKS_INSTRUCTION = (
    "From the provided candidates, suggest up to topK book ids that best match the "
    'user preferences. Respond ONLY as JSON: { "bookIds": ["id1", "id2", ...] }'
)
CIRCLES_INSTRUCTION = (
    "From the provided candidates, suggest up to topK circle ids the user should join. "
    'Respond ONLY as JSON: { "circleIds": ["id1", "id2", ...] }'
)


class HttpRecommender(IRecommender):
    """Remote ranking service called over HTTP with a bounded timeout.

    Constructor args:
        url:      Endpoint receiving the JSON payload.
        api_key:  Sent as a bearer token when non-empty.
        timeout:  Per-request timeout in seconds (default 5).
    """

    def __init__(self, url: str, api_key: str = "", timeout: float = 5.0):
        self.url = url
        self.api_key = api_key
        self.timeout = timeout

    async def recommend_books(self, user: User, books: list[Book], top_k: int) -> list[str]:
        payload = {
            "user": {"id": user.id, "preferences": self._preferences(user)},
            "candidates": [
                {
                    "id": b.id,
                    "title": b.title,
                    "author": b.author,
                    "genre": b.genre,
                    "language": b.language,
                    "rating": b.rating,
                    "reviews": b.reviews,
                    "available": b.available,
                    "ownerId": b.owner_id,
                }
                for b in books
            ],
            "instruction": BOOKS_INSTRUCTION,
            "topK": top_k,
        }
        data = await self._post(payload)
        return self._extract_ids(data, "bookIds")

    async def recommend_circles(
        self, user: User, circles: list[ReadingCircle], top_k: int
    ) -> list[str]:
        payload = {
            "user": {
                "id": user.id,
                "preferences": self._preferences(user),
                "joined": list(user.circles_joined),
            },
            "candidates": [
                {
                    "id": c.id,
                    "name": c.name,
                    "description": c.description,
                    "privacy": c.privacy,
                    "memberCount": c.member_count,
                }
                for c in circles
            ],
            "instruction": CIRCLES_INSTRUCTION,
            "topK": top_k,
        }
        data = await self._post(payload)
        return self._extract_ids(data, "circleIds")

    # -- internal helpers ---------------------------------------------------

    async def _post(self, payload: dict[str, Any]) -> Any:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(self.url, json=payload, headers=headers)
                resp.raise_for_status()
                return resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Remote recommender call to %s failed (%s)", self.url, exc)
            return None

    @staticmethod
    def _extract_ids(data: Any, key: str) -> list[str]:
        if not isinstance(data, dict) or not isinstance(data.get(key), list):
            if data is not None:
                logger.warning("Remote recommender returned unexpected shape for %r", key)
            return []
        return [str(i) for i in data[key] if isinstance(i, (str, int))]

    @staticmethod
    def _preferences(user: User) -> dict[str, list[str]]:
        return {
            "genres": list(user.preferences.genres),
            "authors": list(user.preferences.authors),
            "languages": list(user.preferences.languages),
        }
