"""Shared fixtures: in-memory repositories and an API client wired to them."""

import copy
from collections import Counter
from types import SimpleNamespace
from typing import Optional

import pytest
from fastapi.testclient import TestClient

from bookloop.core.config import settings
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
from bookloop.domain.repositories import (
    IBookRepository,
    ICircleRepository,
    ICommentRepository,
    INotificationRepository,
    IOptionsRepository,
    IPostRepository,
    ITradeRepository,
    IUserRepository,
)
from bookloop.services.discussion_service import DiscussionService
from bookloop.services.membership_service import MembershipService
from bookloop.services.notification_service import NotificationService
from bookloop.services.trade_service import TradeService


# ---------------------------------------------------------------------------
# In-memory repositories
#
# Entities are deep-copied on the way in and out so that services only see
# changes they have written back, as with a real database.
# ---------------------------------------------------------------------------
class _Store:

    def __init__(self):
        self.items: dict = {}
        self.calls: Counter = Counter()

    def _put(self, entity):
        self.items[entity.id] = copy.deepcopy(entity)
        return copy.deepcopy(entity)

    def _get(self, entity_id):
        entity = self.items.get(entity_id)
        return copy.deepcopy(entity) if entity is not None else None


class InMemoryUserRepository(_Store, IUserRepository):

    async def create(self, user: User) -> User:
        return self._put(user)

    async def get_by_id(self, user_id: str) -> Optional[User]:
        return self._get(user_id)

    async def get_by_email(self, email: str) -> Optional[User]:
        for user in self.items.values():
            if user.email == email:
                return copy.deepcopy(user)
        return None

    async def update(self, user: User) -> User:
        return self._put(user)

    async def add_circle(self, user_id: str, circle_id: str) -> None:
        user = self.items.get(user_id)
        if user is not None and circle_id not in user.circles_joined:
            user.circles_joined.append(circle_id)

    async def remove_circle(self, user_id: str, circle_id: str) -> None:
        user = self.items.get(user_id)
        if user is not None:
            user.circles_joined = [c for c in user.circles_joined if c != circle_id]

    async def add_owned_book(self, user_id: str, book_id: str) -> None:
        user = self.items.get(user_id)
        if user is not None and book_id not in user.books_owned:
            user.books_owned.append(book_id)

    async def remove_owned_book(self, user_id: str, book_id: str) -> None:
        user = self.items.get(user_id)
        if user is not None:
            user.books_owned = [b for b in user.books_owned if b != book_id]


class InMemoryBookRepository(_Store, IBookRepository):

    async def create(self, book: Book) -> Book:
        return self._put(book)

    async def get_by_id(self, book_id: str) -> Optional[Book]:
        return self._get(book_id)

    async def list_all(self) -> list[Book]:
        return [copy.deepcopy(b) for b in self.items.values()]

    async def list_within(self, min_lat, max_lat, min_lng, max_lng) -> list[Book]:
        return [
            copy.deepcopy(b)
            for b in self.items.values()
            if b.location is not None
            and b.location.lat is not None
            and b.location.lng is not None
            and min_lat <= b.location.lat <= max_lat
            and min_lng <= b.location.lng <= max_lng
        ]

    async def update(self, book: Book) -> Book:
        return self._put(book)

    async def delete(self, book_id: str) -> bool:
        return self.items.pop(book_id, None) is not None


class InMemoryCircleRepository(_Store, ICircleRepository):

    async def create(self, circle: ReadingCircle) -> ReadingCircle:
        return self._put(circle)

    async def get_by_id(self, circle_id: str) -> Optional[ReadingCircle]:
        return self._get(circle_id)

    async def list_all(self) -> list[ReadingCircle]:
        self.calls["list_all"] += 1
        return [copy.deepcopy(c) for c in self.items.values()]

    async def add_member(self, circle_id: str, user_id: str) -> Optional[ReadingCircle]:
        circle = self.items.get(circle_id)
        if circle is None:
            return None
        circle.members = circle.members + [user_id]
        circle.members_count = (circle.members_count or 0) + 1
        return copy.deepcopy(circle)

    async def remove_member(self, circle_id: str, user_id: str) -> Optional[ReadingCircle]:
        circle = self.items.get(circle_id)
        if circle is None:
            return None
        circle.members = [m for m in circle.members if m != user_id]
        circle.members_count = max((circle.members_count or 0) - 1, 0)
        return copy.deepcopy(circle)

    async def append_post(self, circle_id: str, post_id: str) -> None:
        circle = self.items.get(circle_id)
        if circle is not None:
            circle.post_ids = circle.post_ids + [post_id]

    async def remove_post(self, circle_id: str, post_id: str) -> None:
        circle = self.items.get(circle_id)
        if circle is not None:
            circle.post_ids = [p for p in circle.post_ids if p != post_id]

    async def delete(self, circle_id: str) -> bool:
        return self.items.pop(circle_id, None) is not None


class InMemoryPostRepository(_Store, IPostRepository):

    async def create(self, post: Post) -> Post:
        return self._put(post)

    async def get_by_id(self, post_id: str) -> Optional[Post]:
        return self._get(post_id)

    async def get_by_ids(self, post_ids: list[str]) -> list[Post]:
        self.calls["get_by_ids"] += 1
        wanted = set(post_ids)
        return [copy.deepcopy(p) for p in self.items.values() if p.id in wanted]

    async def list_by_circle(self, circle_id: str) -> list[Post]:
        self.calls["list_by_circle"] += 1
        return [copy.deepcopy(p) for p in self.items.values() if p.circle_id == circle_id]

    async def append_comment(self, post_id: str, comment_id: str) -> None:
        post = self.items.get(post_id)
        if post is not None:
            post.comment_ids = post.comment_ids + [comment_id]

    async def increment_likes(self, post_id: str) -> Optional[Post]:
        post = self.items.get(post_id)
        if post is None:
            return None
        post.likes += 1
        return copy.deepcopy(post)

    async def delete(self, post_id: str) -> bool:
        return self.items.pop(post_id, None) is not None

    async def delete_by_circle(self, circle_id: str) -> list[str]:
        ids = [p.id for p in self.items.values() if p.circle_id == circle_id]
        for post_id in ids:
            del self.items[post_id]
        return ids


class InMemoryCommentRepository(_Store, ICommentRepository):

    async def create(self, comment: Comment) -> Comment:
        return self._put(comment)

    async def get_by_ids(self, comment_ids: list[str]) -> list[Comment]:
        self.calls["get_by_ids"] += 1
        wanted = set(comment_ids)
        return [copy.deepcopy(c) for c in self.items.values() if c.id in wanted]

    async def list_by_post(self, post_id: str) -> list[Comment]:
        self.calls["list_by_post"] += 1
        return [copy.deepcopy(c) for c in self.items.values() if c.post_id == post_id]

    async def delete_by_posts(self, post_ids: list[str]) -> int:
        doomed = [c.id for c in self.items.values() if c.post_id in set(post_ids)]
        for comment_id in doomed:
            del self.items[comment_id]
        return len(doomed)


class InMemoryTradeRepository(_Store, ITradeRepository):

    async def create(self, trade: Trade) -> Trade:
        return self._put(trade)

    async def get_by_id(self, trade_id: str) -> Optional[Trade]:
        return self._get(trade_id)

    async def list_for_user(self, user_id: str) -> list[Trade]:
        return [
            copy.deepcopy(t)
            for t in self.items.values()
            if user_id in (t.requester_id, t.owner_id)
        ]

    async def update(self, trade: Trade) -> Trade:
        return self._put(trade)


class InMemoryNotificationRepository(_Store, INotificationRepository):

    async def create(self, notification: Notification) -> Notification:
        return self._put(notification)

    async def create_many(self, notifications: list[Notification]) -> list[Notification]:
        self.calls["create_many"] += 1
        return [self._put(n) for n in notifications]

    async def list_for_user(self, user_id: str, limit: int = 50) -> list[Notification]:
        mine = [n for n in self.items.values() if n.user_id == user_id]
        # Newest first; insertion order breaks timestamp ties.
        ranked = sorted(enumerate(mine), key=lambda p: (p[1].timestamp, p[0]), reverse=True)
        ordered = [n for _, n in ranked]
        return [copy.deepcopy(n) for n in ordered[:limit]]

    async def mark_read(self, notification_id: str) -> bool:
        notification = self.items.get(notification_id)
        if notification is None:
            return False
        notification.read = True
        return True

    async def mark_all_read(self, user_id: str) -> int:
        count = 0
        for notification in self.items.values():
            if notification.user_id == user_id and not notification.read:
                notification.read = True
                count += 1
        return count

    async def delete(self, notification_id: str) -> bool:
        return self.items.pop(notification_id, None) is not None

    def for_user(self, user_id: str) -> list[Notification]:
        return [n for n in self.items.values() if n.user_id == user_id]


class InMemoryOptionsRepository(IOptionsRepository):

    def __init__(self):
        self.options: Optional[Options] = None

    async def get(self) -> Optional[Options]:
        return copy.deepcopy(self.options)

    async def save(self, options: Options) -> Options:
        if self.options is not None:
            options.id = self.options.id
        self.options = copy.deepcopy(options)
        return copy.deepcopy(options)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def fast_password_hashing(monkeypatch):
    monkeypatch.setattr(settings, "password_hash_iterations", 1_000)


@pytest.fixture
def repos():
    return SimpleNamespace(
        users=InMemoryUserRepository(),
        books=InMemoryBookRepository(),
        circles=InMemoryCircleRepository(),
        posts=InMemoryPostRepository(),
        comments=InMemoryCommentRepository(),
        trades=InMemoryTradeRepository(),
        notifications=InMemoryNotificationRepository(),
        options=InMemoryOptionsRepository(),
    )


@pytest.fixture
def notification_service(repos):
    return NotificationService(repos.notifications)


@pytest.fixture
def membership_service(repos, notification_service):
    return MembershipService(repos.circles, repos.users, notification_service)


@pytest.fixture
def discussion_service(repos, notification_service):
    return DiscussionService(
        repos.circles, repos.posts, repos.comments, repos.users, notification_service
    )


@pytest.fixture
def trade_service(repos, notification_service):
    return TradeService(repos.trades, notification_service)


@pytest.fixture
def make_user(repos):
    async def _make(user_id: str, name: Optional[str] = None, **kwargs) -> User:
        user = User(id=user_id, name=name or user_id.title(), email=f"{user_id}@example.com", **kwargs)
        return await repos.users.create(user)

    return _make


@pytest.fixture
def make_circle(repos):
    async def _make(circle_id: str, members: Optional[list[str]] = None, **kwargs) -> ReadingCircle:
        members = list(members or [])
        kwargs.setdefault("members_count", len(members))
        name = kwargs.pop("name", circle_id)
        circle = ReadingCircle(id=circle_id, name=name, members=members, **kwargs)
        created = await repos.circles.create(circle)
        for user_id in members:
            await repos.users.add_circle(user_id, circle_id)
        return created

    return _make


@pytest.fixture
def client(repos):
    from bookloop.core import dependencies as deps
    from bookloop.main import app

    app.dependency_overrides.update(
        {
            deps.get_user_repository: lambda: repos.users,
            deps.get_book_repository: lambda: repos.books,
            deps.get_circle_repository: lambda: repos.circles,
            deps.get_post_repository: lambda: repos.posts,
            deps.get_comment_repository: lambda: repos.comments,
            deps.get_trade_repository: lambda: repos.trades,
            deps.get_notification_repository: lambda: repos.notifications,
            deps.get_options_repository: lambda: repos.options,
            deps.get_recommender: lambda: None,
        }
    )
    # Not entered as a context manager: the lifespan would try to reach the database.
    yield TestClient(app)
    app.dependency_overrides.clear()
