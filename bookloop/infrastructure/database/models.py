"""SQLAlchemy database models.

Every table carries an internal autoincrement ``pk`` (insertion order) and
a public string ``id`` that the API and cross-references use.
"""

from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class UserModel(Base):
    __tablename__ = "users"

    pk = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(36), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    hashed_password = Column(String(255), nullable=False)
    avatar = Column(String(1024), nullable=True)
    location = Column(JSON, nullable=True)  # {city, state, country, lat, lng}
    bio = Column(Text, nullable=True)
    books_owned = Column(JSON, default=list, nullable=False)
    circles_joined = Column(JSON, default=list, nullable=False)
    favorites = Column(JSON, default=list, nullable=False)
    preferences = Column(JSON, nullable=True)  # {genres, authors, languages}


class BookModel(Base):
    __tablename__ = "books"
    __table_args__ = (Index("ix_books_coordinates", "lat", "lng"),)

    pk = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(36), nullable=False, unique=True, index=True)
    title = Column(String(255), nullable=False)
    author = Column(String(255), nullable=False, index=True)
    genre = Column(String(100), nullable=False, default="")
    language = Column(String(100), nullable=False, default="")
    owner_id = Column(String(36), nullable=False, index=True)
    owner_name = Column(String(255), nullable=False, default="")
    available = Column(Boolean, default=True, nullable=False)
    rating = Column(Float, default=0.0, nullable=False)
    reviews = Column(Integer, default=0, nullable=False)
    description = Column(Text, nullable=False, default="")
    cover = Column(String(1024), nullable=False, default="")
    condition = Column(String(20), nullable=False, default="good")  # new|like-new|good|fair
    city = Column(String(255), nullable=True)
    state = Column(String(255), nullable=True)
    country = Column(String(255), nullable=True)
    lat = Column(Float, nullable=True)
    lng = Column(Float, nullable=True)
    price = Column(Float, nullable=True)
    is_for_sale = Column(Boolean, default=False, nullable=False)
    owner_contact = Column(String(255), nullable=True)


class CircleModel(Base):
    __tablename__ = "reading_circles"

    pk = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(36), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    members = Column(JSON, default=list, nullable=False)
    members_count = Column("memberscount", Integer, default=0, nullable=True)
    post_ids = Column(JSON, default=list, nullable=False)
    current_book = Column(String(36), nullable=True)
    avatar = Column(String(1024), nullable=True)
    privacy = Column(String(20), default="public", nullable=False)  # public|private


class PostModel(Base):
    __tablename__ = "posts"

    pk = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(36), nullable=False, unique=True, index=True)
    circle_id = Column(String(36), nullable=False, index=True)
    author_id = Column(String(36), nullable=False)
    author_name = Column(String(255), nullable=False)
    author_avatar = Column(String(1024), nullable=True)
    content = Column(Text, nullable=False)
    comment_ids = Column(JSON, default=list, nullable=False)
    likes = Column(Integer, default=0, nullable=False)
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False)


class CommentModel(Base):
    __tablename__ = "comments"

    pk = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(36), nullable=False, unique=True, index=True)
    post_id = Column(String(36), nullable=False, index=True)
    author_id = Column(String(36), nullable=False)
    author_name = Column(String(255), nullable=False)
    author_avatar = Column(String(1024), nullable=True)
    content = Column(Text, nullable=False)
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False)


class TradeModel(Base):
    __tablename__ = "trades"

    pk = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(36), nullable=False, unique=True, index=True)
    requester_id = Column(String(36), nullable=False, index=True)
    requester_name = Column(String(255), nullable=False)
    owner_id = Column(String(36), nullable=False, index=True)
    owner_name = Column(String(255), nullable=False)
    book_id = Column(String(36), nullable=False)
    book_title = Column(String(255), nullable=False)
    status = Column(String(20), default="pending", nullable=False)
    request_date = Column(DateTime, default=datetime.utcnow, nullable=False)
    message = Column(Text, default="", nullable=False)
    trade_description = Column(Text, default="", nullable=False)
    requester_contact = Column(String(255), default="", nullable=False)
    requester_location = Column(String(255), default="", nullable=False)


class NotificationModel(Base):
    __tablename__ = "notifications"
    __table_args__ = (Index("ix_notifications_user_read", "user_id", "read"),)

    pk = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(36), nullable=False, unique=True, index=True)
    user_id = Column(String(36), nullable=False, index=True)
    type = Column(String(20), nullable=False)  # trade|circle|system
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False)
    read = Column(Boolean, default=False, nullable=False)
    action_url = Column(String(255), nullable=True)
    related_id = Column(String(36), nullable=True)


class OptionsModel(Base):
    __tablename__ = "options"

    pk = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(36), nullable=False, unique=True)
    genres = Column(JSON, default=list, nullable=False)
    languages = Column(JSON, default=list, nullable=False)
    authors = Column(JSON, default=list, nullable=False)
