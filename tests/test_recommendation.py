"""Heuristic scoring and the remote-ranker fallback."""

import pytest

from bookloop.domain.entities import Book, Preferences, ReadingCircle, User
from bookloop.domain.repositories import IRecommender
from bookloop.infrastructure.recommender.remote import HttpRecommender
from bookloop.services.recommendation import (
    RecommendationService,
    book_score,
    circle_score,
    score_books,
    score_circles,
)


@pytest.fixture
def reader():
    return User(
        id="u1",
        name="Ann",
        email="ann@example.com",
        preferences=Preferences(genres=["fantasy"], authors=["Le Guin"]),
        circles_joined=["joined"],
    )


def _book(book_id, **kwargs):
    kwargs.setdefault("title", book_id)
    kwargs.setdefault("author", "Someone")
    kwargs.setdefault("owner_id", "other")
    kwargs.setdefault("available", False)
    return Book(id=book_id, **kwargs)


def test_book_score_components(reader):
    book = _book(
        "b1", genre="Epic Fantasy", author="Ursula K. Le Guin", rating=4, reviews=10, available=True
    )
    assert book_score(reader, book) == pytest.approx(2 + 2 + 0.8 + 0.1 + 0.5)


def test_preference_match_is_case_insensitive_substring(reader):
    assert book_score(reader, _book("b1", genre="FANTASY")) == pytest.approx(2)
    assert book_score(reader, _book("b2", genre="Fan")) == 0


def test_score_books_ranks_and_excludes_owned(reader):
    books = [
        _book("mystery", genre="Mystery", rating=5, reviews=100, available=True),
        _book("fantasy", genre="Fantasy", rating=4, reviews=10, available=True),
        _book("mine", genre="Fantasy", owner_id="u1", rating=5),
    ]
    assert score_books(reader, books) == ["fantasy", "mystery"]


def test_score_books_ties_keep_input_order(reader):
    books = [_book(f"b{i}") for i in range(4)]
    assert score_books(reader, books) == ["b0", "b1", "b2", "b3"]


def test_score_books_top_k(reader):
    books = [_book(f"b{i}", reviews=i) for i in range(12)]
    ranked = score_books(reader, books)
    assert ranked == [f"b{i}" for i in range(11, 3, -1)]
    assert score_books(reader, books, top_k=2) == ["b11", "b10"]


def test_user_without_preferences_still_gets_ranking():
    user = User(id="u9", name="New", email="new@example.com")
    books = [_book("low", rating=1), _book("high", rating=5)]
    assert score_books(user, books) == ["high", "low"]


def test_circle_scoring(reader):
    circles = [
        ReadingCircle(id="big", name="Big", description="General chat", members_count=150),
        ReadingCircle(id="fan", name="Fan", description="We read fantasy", members=["a", "b"], members_count=None),
        ReadingCircle(id="joined", name="Mine", description="fantasy", members_count=500),
    ]
    assert circle_score(reader, circles[1]) == pytest.approx(2 + 0.02)
    assert score_circles(reader, circles) == ["fan", "big"]
    assert score_circles(reader, circles, top_k=1) == ["fan"]


class StubRecommender(IRecommender):

    def __init__(self, ids):
        self.ids = ids
        self.calls = 0

    async def recommend_books(self, user, books, top_k):
        self.calls += 1
        return list(self.ids)

    async def recommend_circles(self, user, circles, top_k):
        self.calls += 1
        return list(self.ids)


async def test_service_without_remote_uses_heuristic(reader):
    service = RecommendationService()
    books = [_book("b1"), _book("b2", rating=5)]
    assert await service.recommend_books(reader, books) == ["b2", "b1"]


async def test_remote_results_are_filtered_to_candidates(reader):
    remote = StubRecommender(["b2", "invented", "b2", "b1"])
    service = RecommendationService(remote=remote)

    ids = await service.recommend_books(reader, [_book("b1"), _book("b2")], top_k=5)

    assert ids == ["b2", "b1"]
    assert remote.calls == 1


async def test_remote_results_respect_owned_and_joined_exclusions(reader):
    remote = StubRecommender(["mine", "b1", "joined", "c1"])
    service = RecommendationService(remote=remote)
    books = [_book("mine", owner_id="u1"), _book("b1")]
    circles = [
        ReadingCircle(id="joined", name="Mine"),
        ReadingCircle(id="c1", name="Open"),
    ]

    assert await service.recommend_books(reader, books) == ["b1"]
    assert await service.recommend_circles(reader, circles) == ["c1"]


async def test_remote_offering_only_excluded_ids_falls_back(reader):
    service = RecommendationService(remote=StubRecommender(["mine"]))
    books = [_book("mine", owner_id="u1", rating=5), _book("b1")]
    assert await service.recommend_books(reader, books) == ["b1"]


async def test_empty_remote_result_falls_back(reader):
    service = RecommendationService(remote=StubRecommender(["invented"]))
    circles = [
        ReadingCircle(id="c1", name="A", members_count=1),
        ReadingCircle(id="c2", name="B", members_count=9),
    ]
    assert await service.recommend_circles(reader, circles) == ["c2", "c1"]


async def test_http_recommender_unreachable_returns_empty(reader):
    remote = HttpRecommender(url="http://127.0.0.1:9/recommend", timeout=0.5)
    assert await remote.recommend_books(reader, [_book("b1")], 3) == []


@pytest.mark.parametrize(
    "data,expected",
    [
        ({"bookIds": ["a", 2]}, ["a", "2"]),
        ({"bookIds": "a"}, []),
        ({"circleIds": ["a"]}, []),
        (["a"], []),
        (None, []),
    ],
)
def test_extract_ids(data, expected):
    assert HttpRecommender._extract_ids(data, "bookIds") == expected
