"""Joining and leaving reading circles."""

import pytest

from bookloop.domain.exceptions import AlreadyMemberError, NotFoundError


async def test_join_updates_both_sides_and_counter(repos, membership_service, make_user, make_circle):
    await make_user("u1")
    await make_user("u2", name="Bea")
    await make_circle("c1", members=["u1"], name="Sci-Fi Club")

    circle = await membership_service.join("c1", "u2")

    assert circle.members == ["u1", "u2"]
    assert circle.members_count == 2
    assert "c1" in (await repos.users.get_by_id("u2")).circles_joined


async def test_join_notifies_other_members_only(repos, membership_service, make_user, make_circle):
    await make_user("u1")
    await make_user("u3")
    await make_user("u2", name="Bea")
    await make_circle("c1", members=["u1", "u3"], name="Sci-Fi Club")

    await membership_service.join("c1", "u2")

    for member in ("u1", "u3"):
        [notification] = repos.notifications.for_user(member)
        assert notification.type == "circle"
        assert notification.title == "New Member Joined"
        assert notification.message == 'Bea joined "Sci-Fi Club"'
        assert notification.related_id == "c1"
    assert repos.notifications.for_user("u2") == []
    assert repos.notifications.calls["create_many"] == 1


async def test_join_twice_is_rejected_without_side_effects(repos, membership_service, make_user, make_circle):
    await make_user("u1")
    await make_circle("c1", members=["u1"])

    with pytest.raises(AlreadyMemberError, match="Already a member"):
        await membership_service.join("c1", "u1")

    circle = await repos.circles.get_by_id("c1")
    assert circle.members == ["u1"]
    assert circle.members_count == 1
    assert repos.notifications.items == {}


async def test_join_missing_circle(membership_service, make_user):
    await make_user("u1")
    with pytest.raises(NotFoundError, match="Circle not found"):
        await membership_service.join("nope", "u1")


async def test_join_missing_user(membership_service, make_circle):
    await make_circle("c1")
    with pytest.raises(NotFoundError, match="User not found"):
        await membership_service.join("c1", "ghost")


async def test_join_counts_from_absent_counter(repos, membership_service, make_user, make_circle):
    await make_user("u1")
    await make_user("u2")
    await make_circle("c1", members=["u1"], members_count=None)

    circle = await membership_service.join("c1", "u2")

    assert circle.members_count == 1


async def test_leave_removes_both_sides(repos, membership_service, make_user, make_circle):
    await make_user("u1")
    await make_user("u2")
    await make_circle("c1", members=["u1", "u2"])

    circle = await membership_service.leave("c1", "u2")

    assert circle.members == ["u1"]
    assert circle.members_count == 1
    assert "c1" not in (await repos.users.get_by_id("u2")).circles_joined


async def test_leave_counter_never_goes_negative(membership_service, make_user, make_circle):
    await make_user("u1")
    await make_circle("c1", members=[], members_count=0)

    circle = await membership_service.leave("c1", "u1")

    assert circle.members_count == 0


async def test_leave_deleted_circle_clears_user_reference(repos, membership_service, make_user):
    await make_user("u1", circles_joined=["gone"])

    assert await membership_service.leave("gone", "u1") is None
    assert (await repos.users.get_by_id("u1")).circles_joined == []


async def test_leave_missing_user(membership_service, make_circle):
    await make_circle("c1")
    with pytest.raises(NotFoundError, match="User not found"):
        await membership_service.leave("c1", "ghost")
