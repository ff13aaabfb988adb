"""Repository interfaces (ports) for dependency inversion."""

from abc import ABC, abstractmethod
from typing import Optional

from bookloop.domain.entities import (
    Book,
    Comment,
    Notification,
    Options,
    Post,
    ReadingCircle,
    Trade,
    User,
)


class IUserRepository(ABC):

    @abstractmethod
    async def create(self, user: User) -> User:
        pass

    @abstractmethod
    async def get_by_id(self, user_id: str) -> Optional[User]:
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        pass

    @abstractmethod
    async def update(self, user: User) -> User:
        pass

    @abstractmethod
    async def add_circle(self, user_id: str, circle_id: str) -> None:
        """Add ``circle_id`` to ``circles_joined`` unless already present."""
        pass

    @abstractmethod
    async def remove_circle(self, user_id: str, circle_id: str) -> None:
        """Drop ``circle_id`` from ``circles_joined``; a no-op when absent."""
        pass

    @abstractmethod
    async def add_owned_book(self, user_id: str, book_id: str) -> None:
        pass

    @abstractmethod
    async def remove_owned_book(self, user_id: str, book_id: str) -> None:
        pass


class IBookRepository(ABC):

    @abstractmethod
    async def create(self, book: Book) -> Book:
        pass

    @abstractmethod
    async def get_by_id(self, book_id: str) -> Optional[Book]:
        pass

    @abstractmethod
    async def list_all(self) -> list[Book]:
        pass

    @abstractmethod
    async def list_within(
        self, min_lat: float, max_lat: float, min_lng: float, max_lng: float
    ) -> list[Book]:
        """Books whose coordinates fall inside the bounding box."""
        pass

    @abstractmethod
    async def update(self, book: Book) -> Book:
        pass

    @abstractmethod
    async def delete(self, book_id: str) -> bool:
        pass


class ICircleRepository(ABC):

    @abstractmethod
    async def create(self, circle: ReadingCircle) -> ReadingCircle:
        pass

    @abstractmethod
    async def get_by_id(self, circle_id: str) -> Optional[ReadingCircle]:
        pass

    @abstractmethod
    async def list_all(self) -> list[ReadingCircle]:
        """All circles in insertion order."""
        pass

    @abstractmethod
    async def add_member(self, circle_id: str, user_id: str) -> Optional[ReadingCircle]:
        """Append ``user_id`` to ``members`` and bump ``memberscount`` by one."""
        pass

    @abstractmethod
    async def remove_member(self, circle_id: str, user_id: str) -> Optional[ReadingCircle]:
        """Drop ``user_id`` from ``members``; ``memberscount`` goes down by one, floored at 0."""
        pass

    @abstractmethod
    async def append_post(self, circle_id: str, post_id: str) -> None:
        pass

    @abstractmethod
    async def remove_post(self, circle_id: str, post_id: str) -> None:
        pass

    @abstractmethod
    async def delete(self, circle_id: str) -> bool:
        pass


class IPostRepository(ABC):

    @abstractmethod
    async def create(self, post: Post) -> Post:
        pass

    @abstractmethod
    async def get_by_id(self, post_id: str) -> Optional[Post]:
        pass

    @abstractmethod
    async def get_by_ids(self, post_ids: list[str]) -> list[Post]:
        """Batch lookup; unknown ids are skipped."""
        pass

    @abstractmethod
    async def list_by_circle(self, circle_id: str) -> list[Post]:
        """Posts whose ``circle_id`` matches, oldest first."""
        pass

    @abstractmethod
    async def append_comment(self, post_id: str, comment_id: str) -> None:
        pass

    @abstractmethod
    async def increment_likes(self, post_id: str) -> Optional[Post]:
        pass

    @abstractmethod
    async def delete(self, post_id: str) -> bool:
        pass

    @abstractmethod
    async def delete_by_circle(self, circle_id: str) -> list[str]:
        """Delete every post of a circle and return their ids."""
        pass


class ICommentRepository(ABC):

    @abstractmethod
    async def create(self, comment: Comment) -> Comment:
        pass

    @abstractmethod
    async def get_by_ids(self, comment_ids: list[str]) -> list[Comment]:
        """Batch lookup; unknown ids are skipped."""
        pass

    @abstractmethod
    async def list_by_post(self, post_id: str) -> list[Comment]:
        """Comments whose ``post_id`` matches, oldest first."""
        pass

    @abstractmethod
    async def delete_by_posts(self, post_ids: list[str]) -> int:
        pass


class ITradeRepository(ABC):

    @abstractmethod
    async def create(self, trade: Trade) -> Trade:
        pass

    @abstractmethod
    async def get_by_id(self, trade_id: str) -> Optional[Trade]:
        pass

    @abstractmethod
    async def list_for_user(self, user_id: str) -> list[Trade]:
        """Trades where the user is either the requester or the owner."""
        pass

    @abstractmethod
    async def update(self, trade: Trade) -> Trade:
        pass


class INotificationRepository(ABC):

    @abstractmethod
    async def create(self, notification: Notification) -> Notification:
        pass

    @abstractmethod
    async def create_many(self, notifications: list[Notification]) -> list[Notification]:
        pass

    @abstractmethod
    async def list_for_user(self, user_id: str, limit: int = 50) -> list[Notification]:
        """Newest first."""
        pass

    @abstractmethod
    async def mark_read(self, notification_id: str) -> bool:
        pass

    @abstractmethod
    async def mark_all_read(self, user_id: str) -> int:
        pass

    @abstractmethod
    async def delete(self, notification_id: str) -> bool:
        pass


class IOptionsRepository(ABC):

    @abstractmethod
    async def get(self) -> Optional[Options]:
        pass

    @abstractmethod
    async def save(self, options: Options) -> Options:
        """Insert or overwrite the singleton."""
        pass


class IRecommender(ABC):
    """External ranking strategy.

    Implementations must never raise: an empty list tells the caller to use
    the heuristic scorer instead.
    """

    @abstractmethod
    async def recommend_books(self, user: User, books: list[Book], top_k: int) -> list[str]:
        pass

    @abstractmethod
    async def recommend_circles(
        self, user: User, circles: list[ReadingCircle], top_k: int
    ) -> list[str]:
        pass
