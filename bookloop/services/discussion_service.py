"""Circle discussions: circles -> posts -> comments.

The bulk read path assembles the whole tree with one query per level:

  1. load every circle;
  2. batch-fetch the union of their ``post_ids``;
  3. batch-fetch the union of those posts' ``comment_ids``;
  4. group comments by ``post_id`` and posts by ``circle_id``;
  5. re-attach each group in the order of the parent's id list.

Circles without any post reference short-circuit before step 2.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Callable, Iterable, Optional, TypeVar

from bookloop.domain.entities import (
    CircleDiscussion,
    Comment,
    Post,
    PostThread,
    ReadingCircle,
    new_id,
)
from bookloop.domain.exceptions import NotFoundError
from bookloop.domain.repositories import (
    ICircleRepository,
    ICommentRepository,
    IPostRepository,
    IUserRepository,
)
from bookloop.domain.services import IDiscussionService
from bookloop.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _unique(ids: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(ids))


def _in_reference_order(items: list[T], id_order: list[str], key: Callable[[T], str]) -> list[T]:
    """Order ``items`` by their position in ``id_order``; unlisted items keep their order at the end."""
    position = {item_id: i for i, item_id in enumerate(id_order)}
    return sorted(items, key=lambda item: position.get(key(item), len(position)))


class DiscussionService(IDiscussionService):
    """Reads and writes circle discussions."""

    def __init__(
        self,
        circle_repository: ICircleRepository,
        post_repository: IPostRepository,
        comment_repository: ICommentRepository,
        user_repository: IUserRepository,
        notification_service: NotificationService,
    ):
        self.circle_repository = circle_repository
        self.post_repository = post_repository
        self.comment_repository = comment_repository
        self.user_repository = user_repository
        self.notification_service = notification_service

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------
    async def list_discussions(self) -> list[CircleDiscussion]:
        circles = await self.circle_repository.list_all()

        post_ids = _unique(pid for circle in circles for pid in circle.post_ids)
        if not post_ids:
            return [CircleDiscussion(circle=circle, posts=[]) for circle in circles]

        posts = await self.post_repository.get_by_ids(post_ids)

        comment_ids = _unique(cid for post in posts for cid in post.comment_ids)
        comments = await self.comment_repository.get_by_ids(comment_ids) if comment_ids else []

        comments_by_post: dict[str, list[Comment]] = defaultdict(list)
        for comment in comments:
            comments_by_post[comment.post_id].append(comment)

        threads_by_circle: dict[str, list[PostThread]] = defaultdict(list)
        for post in posts:
            threads_by_circle[post.circle_id].append(
                PostThread(
                    post=post,
                    comments=_in_reference_order(
                        comments_by_post.get(post.id, []), post.comment_ids, lambda c: c.id
                    ),
                )
            )

        logger.debug(
            "Aggregated %d circles, %d posts, %d comments", len(circles), len(posts), len(comments)
        )
        return [
            CircleDiscussion(
                circle=circle,
                posts=_in_reference_order(
                    threads_by_circle.get(circle.id, []), circle.post_ids, lambda t: t.post.id
                ),
            )
            for circle in circles
        ]

    async def get_discussion(self, circle_id: str) -> CircleDiscussion:
        circle = await self.circle_repository.get_by_id(circle_id)
        if circle is None:
            raise NotFoundError("Circle not found")

        # Fan-out is bounded by a single circle's post count.
        posts = await self.post_repository.list_by_circle(circle_id)
        threads = []
        for post in posts:
            comments = await self.comment_repository.list_by_post(post.id)
            threads.append(
                PostThread(
                    post=post,
                    comments=_in_reference_order(comments, post.comment_ids, lambda c: c.id),
                )
            )
        return CircleDiscussion(
            circle=circle,
            posts=_in_reference_order(threads, circle.post_ids, lambda t: t.post.id),
        )

    # ------------------------------------------------------------------
    # Write side
    # ------------------------------------------------------------------
    async def create_circle(
        self,
        name: str,
        description: str,
        members: Optional[list[str]] = None,
        current_book: Optional[str] = None,
        avatar: Optional[str] = None,
        privacy: str = "public",
    ) -> ReadingCircle:
        members = _unique(members or [])
        circle = ReadingCircle(
            id=new_id(),
            name=name,
            description=description,
            members=members,
            members_count=len(members),
            current_book=current_book,
            avatar=avatar,
            privacy=privacy,
        )
        created = await self.circle_repository.create(circle)
        for user_id in members:
            await self.user_repository.add_circle(user_id, created.id)
        logger.info("Circle created: %s (%d initial members)", created.id, len(members))
        return created

    async def delete_circle(self, circle_id: str) -> None:
        """Delete a circle together with its posts and their comments."""
        circle = await self.circle_repository.get_by_id(circle_id)
        if circle is None:
            raise NotFoundError("Circle not found")

        post_ids = await self.post_repository.delete_by_circle(circle_id)
        removed_comments = await self.comment_repository.delete_by_posts(post_ids)
        for user_id in circle.members:
            await self.user_repository.remove_circle(user_id, circle_id)
        await self.circle_repository.delete(circle_id)
        logger.info(
            "Circle %s deleted with %d posts and %d comments",
            circle_id,
            len(post_ids),
            removed_comments,
        )

    async def add_post(
        self,
        circle_id: str,
        author_id: str,
        author_name: str,
        content: str,
        author_avatar: Optional[str] = None,
    ) -> Post:
        circle = await self.circle_repository.get_by_id(circle_id)
        if circle is None:
            raise NotFoundError("Circle not found")

        post = await self.post_repository.create(
            Post(
                id=new_id(),
                circle_id=circle.id,
                author_id=author_id,
                author_name=author_name,
                author_avatar=author_avatar,
                content=content,
            )
        )
        await self.circle_repository.append_post(circle.id, post.id)

        others = [m for m in circle.members if m != author_id]
        await self.notification_service.notify_many(
            others,
            "circle",
            "New Discussion",
            f'{author_name} started a discussion in "{circle.name}"',
            action_url="/circles",
            related_id=circle.id,
        )
        return post

    async def add_comment(
        self,
        post_id: str,
        author_id: str,
        author_name: str,
        content: str,
        author_avatar: Optional[str] = None,
    ) -> Comment:
        post = await self.post_repository.get_by_id(post_id)
        if post is None:
            raise NotFoundError("Post not found")

        comment = await self.comment_repository.create(
            Comment(
                id=new_id(),
                post_id=post.id,
                author_id=author_id,
                author_name=author_name,
                author_avatar=author_avatar,
                content=content,
            )
        )
        await self.post_repository.append_comment(post.id, comment.id)
        return comment

    async def like_post(self, post_id: str) -> Post:
        post = await self.post_repository.increment_likes(post_id)
        if post is None:
            raise NotFoundError("Post not found")
        return post

    async def delete_post(self, post_id: str) -> None:
        """Delete a post with its comments and unlink it from its circle."""
        post = await self.post_repository.get_by_id(post_id)
        if post is None:
            raise NotFoundError("Post not found")
        await self.comment_repository.delete_by_posts([post.id])
        await self.circle_repository.remove_post(post.circle_id, post.id)
        await self.post_repository.delete(post.id)
        logger.info("Post %s deleted from circle %s", post.id, post.circle_id)
