"""Domain-level application service interfaces (ports).

Route handlers depend on these abstract classes only. Concrete
implementations live in ``bookloop/services/`` and are wired together by the
composition root in ``bookloop/core/dependencies.py``, so each one can be
replaced through FastAPI's ``app.dependency_overrides``.
"""

from abc import ABC, abstractmethod
from typing import Optional

from bookloop.domain.entities import (
    Book,
    CircleDiscussion,
    Comment,
    Post,
    ReadingCircle,
    Trade,
    User,
)


class IMembershipService(ABC):

    @abstractmethod
    async def join(self, circle_id: str, user_id: str) -> ReadingCircle:
        """Add the user to the circle and notify the other members.

        Raises ``NotFoundError`` for an unknown circle or user and
        ``AlreadyMemberError`` when the user is already listed.
        """
        pass

    @abstractmethod
    async def leave(self, circle_id: str, user_id: str) -> Optional[ReadingCircle]:
        """Remove the user from the circle.

        Succeeds even when the circle no longer exists; returns ``None`` in
        that case.
        """
        pass


class IDiscussionService(ABC):

    @abstractmethod
    async def list_discussions(self) -> list[CircleDiscussion]:
        pass

    @abstractmethod
    async def get_discussion(self, circle_id: str) -> CircleDiscussion:
        pass

    @abstractmethod
    async def create_circle(
        self,
        name: str,
        description: str,
        members: Optional[list[str]] = None,
        current_book: Optional[str] = None,
        avatar: Optional[str] = None,
        privacy: str = "public",
    ) -> ReadingCircle:
        pass

    @abstractmethod
    async def delete_circle(self, circle_id: str) -> None:
        pass

    @abstractmethod
    async def add_post(
        self,
        circle_id: str,
        author_id: str,
        author_name: str,
        content: str,
        author_avatar: Optional[str] = None,
    ) -> Post:
        pass

    @abstractmethod
    async def add_comment(
        self,
        post_id: str,
        author_id: str,
        author_name: str,
        content: str,
        author_avatar: Optional[str] = None,
    ) -> Comment:
        pass

    @abstractmethod
    async def like_post(self, post_id: str) -> Post:
        pass

    @abstractmethod
    async def delete_post(self, post_id: str) -> None:
        pass


class ITradeService(ABC):

    @abstractmethod
    async def create_trade(self, trade: Trade) -> Trade:
        pass

    @abstractmethod
    async def update_trade(
        self,
        trade_id: str,
        *,
        status: Optional[str] = None,
        message: Optional[str] = None,
        trade_description: Optional[str] = None,
        requester_contact: Optional[str] = None,
        requester_location: Optional[str] = None,
    ) -> Trade:
        pass

    @abstractmethod
    async def get_trade(self, trade_id: str) -> Trade:
        pass

    @abstractmethod
    async def list_user_trades(self, user_id: str) -> list[Trade]:
        pass


class IRecommendationService(ABC):

    @abstractmethod
    async def recommend_books(self, user: User, books: list[Book], top_k: int = 8) -> list[str]:
        pass

    @abstractmethod
    async def recommend_circles(
        self, user: User, circles: list[ReadingCircle], top_k: int = 6
    ) -> list[str]:
        pass
