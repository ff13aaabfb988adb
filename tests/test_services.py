"""Users, books, notifications and options."""

import pytest

from bookloop.domain.entities import Book, Location
from bookloop.domain.exceptions import (
    AlreadyExistsError,
    InvalidRequestError,
    NotFoundError,
)
from bookloop.services.book_service import BookService
from bookloop.services.options_service import DEFAULT_GENRES, OptionsService
from bookloop.services.user_service import UserService


@pytest.fixture
def user_service(repos):
    return UserService(repos.users)


@pytest.fixture
def book_service(repos):
    return BookService(repos.books, repos.users)


@pytest.fixture
def options_service(repos):
    return OptionsService(repos.options)


# --- users ---

async def test_signup_and_login(user_service):
    user = await user_service.signup("Ann", "ann@example.com", "hunter22")

    assert user.hashed_password != "hunter22"
    assert (await user_service.login("ann@example.com", "hunter22")).id == user.id
    with pytest.raises(NotFoundError):
        await user_service.login("ann@example.com", "wrong")
    with pytest.raises(AlreadyExistsError, match="Email already registered"):
        await user_service.signup("Other", "ann@example.com", "whatever")


async def test_update_profile_keeps_omitted_fields(user_service, make_user):
    await make_user("u1", bio="Reader")

    user = await user_service.update_profile("u1", name="Ann B.", location=Location(city="Pune"))

    assert user.name == "Ann B."
    assert user.bio == "Reader"
    assert user.location.city == "Pune"


async def test_favorites_are_idempotent(user_service, make_user):
    await make_user("u1")

    await user_service.add_favorite("u1", "b1")
    assert await user_service.add_favorite("u1", "b1") == ["b1"]
    assert await user_service.remove_favorite("u1", "b1") == []
    with pytest.raises(NotFoundError):
        await user_service.get_favorites("ghost")


# --- books ---

def _book(**kwargs):
    values = dict(id="", title="Dune", author="Herbert", genre="SF", language="English", owner_id="u1", owner_name="Ann")
    values.update(kwargs)
    return Book(**values)


async def test_create_and_delete_book_tracks_ownership(repos, book_service, make_user):
    await make_user("u1")

    book = await book_service.create_book(_book())
    assert (await repos.users.get_by_id("u1")).books_owned == [book.id]

    await book_service.delete_book(book.id)
    assert (await repos.users.get_by_id("u1")).books_owned == []
    with pytest.raises(NotFoundError, match="Book not found"):
        await book_service.get_book(book.id)


async def test_create_book_rejects_unknown_condition(book_service):
    with pytest.raises(InvalidRequestError):
        await book_service.create_book(_book(condition="mint"))


async def test_update_book_moves_ownership(repos, book_service, make_user):
    await make_user("u1")
    await make_user("u2")
    book = await book_service.create_book(_book())

    updated = await book_service.update_book(book.id, {"owner_id": "u2", "available": False})

    assert updated.available is False
    assert (await repos.users.get_by_id("u1")).books_owned == []
    assert (await repos.users.get_by_id("u2")).books_owned == [book.id]


async def test_update_book_rejects_unknown_fields(book_service, make_user):
    await make_user("u1")
    book = await book_service.create_book(_book())
    with pytest.raises(InvalidRequestError):
        await book_service.update_book(book.id, {"isbn": "123"})


async def test_list_books_near_a_point(book_service, make_user):
    await make_user("u1")
    near = await book_service.create_book(_book(location=Location(lat=18.52, lng=73.85)))
    await book_service.create_book(_book(location=Location(lat=28.61, lng=77.20)))
    await book_service.create_book(_book())

    assert [b.id for b in await book_service.list_books(lat=18.5, lng=73.9, radius_km=20)] == [near.id]
    assert len(await book_service.list_books()) == 3


# --- notifications ---

async def test_notification_inbox(repos, notification_service):
    first = await notification_service.notify("u1", "system", "Welcome", "Hi")
    second = await notification_service.notify("u1", "trade", "Trade", "New request")
    await notification_service.notify("u2", "system", "Welcome", "Hi")

    inbox = await notification_service.list_for_user("u1")
    assert [n.id for n in inbox] == [second.id, first.id]

    await notification_service.mark_read(first.id)
    assert await notification_service.mark_all_read("u1") == 1
    assert all(n.read for n in await notification_service.list_for_user("u1"))

    await notification_service.delete(first.id)
    assert [n.id for n in await notification_service.list_for_user("u1")] == [second.id]
    with pytest.raises(NotFoundError, match="Notification not found"):
        await notification_service.mark_read(first.id)


async def test_notify_rejects_unknown_type(notification_service):
    with pytest.raises(ValueError):
        await notification_service.notify("u1", "email", "x", "y")


async def test_notify_many_with_no_recipients(repos, notification_service):
    assert await notification_service.notify_many([], "circle", "x", "y") == []


# --- options ---

async def test_options_created_empty_on_first_read(options_service):
    options = await options_service.get_options()
    assert (options.genres, options.languages, options.authors) == ([], [], [])


async def test_upsert_options_reports_creation(options_service):
    options, created = await options_service.upsert_options(genres=["Poetry"])
    assert created and options.genres == ["Poetry"]

    options, created = await options_service.upsert_options(languages=["Tamil"])
    assert not created
    assert options.genres == ["Poetry"]
    assert options.languages == ["Tamil"]


async def test_seed_defaults_only_once(options_service):
    assert await options_service.seed_defaults() is True
    assert await options_service.seed_defaults() is False
    assert (await options_service.get_options()).genres == DEFAULT_GENRES
