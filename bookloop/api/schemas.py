"""Pydantic schemas for API requests and responses.

Bodies are camelCase on the wire; ``populate_by_name`` also accepts the
snake_case field names.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from bookloop.domain.entities import (
    Book,
    CircleDiscussion,
    Location,
    Preferences,
    ReadingCircle,
    User,
)

BookCondition = Literal["new", "like-new", "good", "fair"]
Privacy = Literal["public", "private"]
_NULLABLE_BOOK_FIELDS = {"price", "owner_contact"}


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class MessageResponse(BaseModel):
    message: str


# ---------------------------------------------------------------------------
# Shared value objects
# ---------------------------------------------------------------------------
class LocationSchema(CamelModel):
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    lat: Optional[float] = Field(None, ge=-90, le=90)
    lng: Optional[float] = Field(None, ge=-180, le=180)

    def to_entity(self) -> Location:
        return Location(**self.model_dump())


class PreferencesSchema(CamelModel):
    genres: list[str] = Field(default_factory=list)
    authors: list[str] = Field(default_factory=list)
    languages: list[str] = Field(default_factory=list)

    def to_entity(self) -> Preferences:
        return Preferences(
            genres=list(self.genres), authors=list(self.authors), languages=list(self.languages)
        )


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
class SignupRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6)
    preferences: Optional[PreferencesSchema] = None


class UserResponse(CamelModel):
    id: str
    name: str
    email: str
    avatar: Optional[str] = None
    location: LocationSchema = Field(default_factory=LocationSchema)
    bio: Optional[str] = None
    books_owned: list[str] = Field(default_factory=list)
    circles_joined: list[str] = Field(default_factory=list)
    favorites: list[str] = Field(default_factory=list)
    preferences: PreferencesSchema = Field(default_factory=PreferencesSchema)


class ProfileUpdateRequest(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    avatar: Optional[str] = None
    location: Optional[LocationSchema] = None
    bio: Optional[str] = None
    preferences: Optional[PreferencesSchema] = None


class FavoritesResponse(CamelModel):
    favorites: list[str]


# ---------------------------------------------------------------------------
# Books
# ---------------------------------------------------------------------------
class BookCreateRequest(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    author: str = Field(..., min_length=1, max_length=255)
    genre: str = Field(..., min_length=1, max_length=100)
    language: str = Field(..., min_length=1, max_length=100)
    owner_id: str = Field(..., min_length=1)
    owner_name: str = Field(..., min_length=1)
    available: bool = True
    rating: float = Field(0, ge=0, le=5)
    reviews: int = Field(0, ge=0)
    description: str = ""
    cover: str = ""
    condition: BookCondition = "good"
    location: Optional[LocationSchema] = None
    price: Optional[float] = Field(None, ge=0)
    is_for_sale: bool = False
    owner_contact: Optional[str] = None

    def to_entity(self) -> Book:
        data = self.model_dump(exclude={"location"})
        return Book(
            id="",
            location=self.location.to_entity() if self.location else None,
            **data,
        )


class BookUpdateRequest(CamelModel):
    """Partial update: only the fields present in the body are written."""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    author: Optional[str] = Field(None, min_length=1, max_length=255)
    genre: Optional[str] = None
    language: Optional[str] = None
    owner_id: Optional[str] = None
    owner_name: Optional[str] = None
    available: Optional[bool] = None
    rating: Optional[float] = Field(None, ge=0, le=5)
    reviews: Optional[int] = Field(None, ge=0)
    description: Optional[str] = None
    cover: Optional[str] = None
    condition: Optional[BookCondition] = None
    location: Optional[LocationSchema] = None
    price: Optional[float] = Field(None, ge=0)
    is_for_sale: Optional[bool] = None
    owner_contact: Optional[str] = None

    def changes(self) -> dict:
        data = {
            k: v
            for k, v in self.model_dump(exclude_unset=True, exclude={"location"}).items()
            if v is not None or k in _NULLABLE_BOOK_FIELDS
        }
        if "location" in self.model_fields_set:
            data["location"] = self.location.to_entity() if self.location else None
        return data


class BookResponse(CamelModel):
    id: str
    title: str
    author: str
    genre: str
    language: str
    owner_id: str
    owner_name: str
    available: bool
    rating: float
    reviews: int
    description: str
    cover: str
    condition: str
    location: Optional[LocationSchema] = None
    price: Optional[float] = None
    is_for_sale: bool = False
    owner_contact: Optional[str] = None


# ---------------------------------------------------------------------------
# Circles, posts, comments
# ---------------------------------------------------------------------------
class CircleCreateRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    members: list[str] = Field(default_factory=list)
    current_book: Optional[str] = None
    avatar: Optional[str] = None
    privacy: Privacy = "public"


class MembershipRequest(CamelModel):
    user_id: str = Field(..., min_length=1)


class CommentResponse(CamelModel):
    id: str
    post_id: str
    author_id: str
    author_name: str
    author_avatar: Optional[str] = None
    content: str
    timestamp: datetime


class _PostBase(CamelModel):
    id: str
    circle_id: str
    author_id: str
    author_name: str
    author_avatar: Optional[str] = None
    content: str
    likes: int
    timestamp: datetime


class PostResponse(_PostBase):
    comment_ids: list[str] = Field(default_factory=list, alias="comments")


class PostThreadResponse(_PostBase):
    comments: list[CommentResponse] = Field(default_factory=list)


class _CircleBase(CamelModel):
    id: str
    name: str
    description: str
    members: list[str]
    members_count: Optional[int] = Field(None, alias="memberscount")
    member_count: int = Field(..., alias="memberCount")
    current_book: Optional[str] = None
    avatar: Optional[str] = None
    privacy: str


class CircleResponse(_CircleBase):
    post_ids: list[str] = Field(default_factory=list, alias="posts")

    @classmethod
    def from_entity(cls, circle: ReadingCircle) -> "CircleResponse":
        return cls.model_validate(circle)


class CircleDetailResponse(_CircleBase):
    """A circle with its posts, each carrying its comments."""

    posts: list[PostThreadResponse] = Field(default_factory=list)

    @classmethod
    def from_discussion(cls, discussion: CircleDiscussion) -> "CircleDetailResponse":
        circle = discussion.circle
        return cls(
            id=circle.id,
            name=circle.name,
            description=circle.description,
            members=circle.members,
            members_count=circle.members_count,
            member_count=circle.member_count,
            current_book=circle.current_book,
            avatar=circle.avatar,
            privacy=circle.privacy,
            posts=[
                PostThreadResponse(
                    **_PostBase.model_validate(thread.post).model_dump(),
                    comments=[CommentResponse.model_validate(c) for c in thread.comments],
                )
                for thread in discussion.posts
            ],
        )


class PostCreateRequest(CamelModel):
    author_id: str = Field(..., min_length=1)
    author_name: str = Field(..., min_length=1)
    author_avatar: Optional[str] = None
    content: str = Field(..., min_length=1)


class CommentCreateRequest(PostCreateRequest):
    pass


# ---------------------------------------------------------------------------
# Trades
# ---------------------------------------------------------------------------
class TradeCreateRequest(CamelModel):
    requester_id: str = Field(..., min_length=1)
    requester_name: str = Field(..., min_length=1)
    owner_id: str = Field(..., min_length=1)
    owner_name: str = Field(..., min_length=1)
    book_id: str = Field(..., min_length=1)
    book_title: str = Field(..., min_length=1)
    message: str = ""
    trade_description: str = ""
    requester_contact: str = ""
    requester_location: str = ""


class TradeUpdateRequest(CamelModel):
    status: Optional[str] = None
    message: Optional[str] = None
    trade_description: Optional[str] = None
    requester_contact: Optional[str] = None
    requester_location: Optional[str] = None


class TradeResponse(CamelModel):
    id: str
    requester_id: str
    requester_name: str
    owner_id: str
    owner_name: str
    book_id: str
    book_title: str
    status: str
    request_date: datetime
    message: str
    trade_description: str
    requester_contact: str
    requester_location: str


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------
class NotificationResponse(CamelModel):
    id: str
    user_id: str
    type: str
    title: str
    message: str
    timestamp: datetime
    read: bool
    action_url: Optional[str] = None
    related_id: Optional[str] = None


class MarkAllReadRequest(CamelModel):
    user_id: str = Field(..., min_length=1)


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------
class OptionsResponse(CamelModel):
    genres: list[str]
    languages: list[str]
    authors: list[str]


class OptionsUpdateRequest(CamelModel):
    genres: Optional[list[str]] = None
    languages: Optional[list[str]] = None
    authors: Optional[list[str]] = None


# ---------------------------------------------------------------------------
# Recommendations
# ---------------------------------------------------------------------------
class RecommendUser(CamelModel):
    id: str
    preferences: PreferencesSchema = Field(default_factory=PreferencesSchema)
    circles_joined: list[str] = Field(default_factory=list)

    def to_entity(self) -> User:
        return User(
            id=self.id,
            name="",
            email="",
            preferences=self.preferences.to_entity(),
            circles_joined=list(self.circles_joined),
        )


class BookCandidate(CamelModel):
    id: str
    title: Optional[str] = ""
    author: Optional[str] = ""
    genre: Optional[str] = ""
    language: Optional[str] = ""
    rating: Optional[float] = 0
    reviews: Optional[int] = 0
    available: bool = False
    owner_id: Optional[str] = None

    def to_entity(self) -> Book:
        return Book(
            id=self.id,
            title=self.title or "",
            author=self.author or "",
            genre=self.genre or "",
            language=self.language or "",
            rating=self.rating or 0,
            reviews=self.reviews or 0,
            available=self.available,
            owner_id=self.owner_id or "",
        )


class CircleCandidate(CamelModel):
    id: str
    name: str = ""
    description: Optional[str] = ""
    privacy: str = "public"
    members: list[str] = Field(default_factory=list)
    members_count: Optional[int] = Field(None, alias="memberscount")
    member_count: Optional[int] = Field(None, alias="memberCount")

    def to_entity(self) -> ReadingCircle:
        count = self.member_count if self.member_count is not None else self.members_count
        return ReadingCircle(
            id=self.id,
            name=self.name,
            description=self.description or "",
            privacy=self.privacy,
            members=list(self.members),
            members_count=count,
        )


class BookRecommendationRequest(CamelModel):
    user: RecommendUser
    books: list[BookCandidate]
    top_k: int = Field(8, ge=0, le=100)


class CircleRecommendationRequest(CamelModel):
    user: RecommendUser
    circles: list[CircleCandidate]
    top_k: int = Field(6, ge=0, le=100)


class BookRecommendationResponse(CamelModel):
    book_ids: list[str]


class CircleRecommendationResponse(CamelModel):
    circle_ids: list[str]
