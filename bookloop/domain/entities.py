"""Domain entities for BookLoop."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import uuid4


def new_id() -> str:
    """Public identifier shared by every collection."""
    return str(uuid4())


@dataclass
class Location:
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None


@dataclass
class Preferences:
    genres: list[str] = field(default_factory=list)
    authors: list[str] = field(default_factory=list)
    languages: list[str] = field(default_factory=list)


@dataclass
class User:
    id: str
    name: str
    email: str
    hashed_password: str = ""
    avatar: Optional[str] = None
    location: Location = field(default_factory=Location)
    bio: Optional[str] = None
    books_owned: list[str] = field(default_factory=list)
    circles_joined: list[str] = field(default_factory=list)
    favorites: list[str] = field(default_factory=list)
    preferences: Preferences = field(default_factory=Preferences)


@dataclass
class Book:
    id: str
    title: str
    author: str
    genre: str = ""
    language: str = ""
    owner_id: str = ""
    owner_name: str = ""
    available: bool = True
    rating: float = 0.0
    reviews: int = 0
    description: str = ""
    cover: str = ""
    condition: str = "good"  # new | like-new | good | fair
    location: Optional[Location] = None
    price: Optional[float] = None
    is_for_sale: bool = False
    owner_contact: Optional[str] = None


@dataclass
class ReadingCircle:
    id: str
    name: str
    description: str = ""
    members: list[str] = field(default_factory=list)
    members_count: Optional[int] = 0  # cached len(members); may be absent on legacy rows
    post_ids: list[str] = field(default_factory=list)
    current_book: Optional[str] = None
    avatar: Optional[str] = None
    privacy: str = "public"  # public | private

    @property
    def member_count(self) -> int:
        """Display count: the stored counter when present, else the member list size."""
        if isinstance(self.members_count, int) and not isinstance(self.members_count, bool):
            return self.members_count
        return len(self.members)


@dataclass
class Post:
    id: str
    circle_id: str
    author_id: str
    author_name: str
    content: str
    author_avatar: Optional[str] = None
    comment_ids: list[str] = field(default_factory=list)
    likes: int = 0
    timestamp: datetime = field(default_factory=datetime.utcnow)


@dataclass
class Comment:
    id: str
    post_id: str
    author_id: str
    author_name: str
    content: str
    author_avatar: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.utcnow)


@dataclass
class Trade:
    id: str
    requester_id: str
    requester_name: str
    owner_id: str
    owner_name: str
    book_id: str
    book_title: str
    status: str = "pending"  # pending | accepted | declined | completed
    request_date: datetime = field(default_factory=datetime.utcnow)
    message: str = ""
    trade_description: str = ""
    requester_contact: str = ""
    requester_location: str = ""


@dataclass
class Notification:
    id: str
    user_id: str
    type: str  # trade | circle | system
    title: str
    message: str
    timestamp: datetime = field(default_factory=datetime.utcnow)
    read: bool = False
    action_url: Optional[str] = None
    related_id: Optional[str] = None


@dataclass
class Options:
    """Singleton holding the pickers' global genre / language / author lists."""

    id: str
    genres: list[str] = field(default_factory=list)
    languages: list[str] = field(default_factory=list)
    authors: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Read models produced by the discussion aggregator
# ---------------------------------------------------------------------------
@dataclass
class PostThread:
    post: Post
    comments: list[Comment] = field(default_factory=list)


@dataclass
class CircleDiscussion:
    circle: ReadingCircle
    posts: list[PostThread] = field(default_factory=list)
