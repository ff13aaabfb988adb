"""Circle membership: keeps ``circle.members`` and ``user.circles_joined`` in step."""

import logging
from typing import Optional

from bookloop.domain.entities import ReadingCircle
from bookloop.domain.exceptions import AlreadyMemberError, NotFoundError
from bookloop.domain.repositories import ICircleRepository, IUserRepository
from bookloop.domain.services import IMembershipService
from bookloop.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


class MembershipService(IMembershipService):
    """Join and leave reading circles.

    Both sides of the relationship are written in separate statements with
    no spanning transaction; the pair converges because each write is
    idempotent on the user side.
    """

    def __init__(
        self,
        circle_repository: ICircleRepository,
        user_repository: IUserRepository,
        notification_service: NotificationService,
    ):
        self.circle_repository = circle_repository
        self.user_repository = user_repository
        self.notification_service = notification_service

    async def join(self, circle_id: str, user_id: str) -> ReadingCircle:
        circle = await self.circle_repository.get_by_id(circle_id)
        if circle is None:
            raise NotFoundError("Circle not found")
        user = await self.user_repository.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        if user_id in circle.members:
            raise AlreadyMemberError("Already a member")

        updated = await self.circle_repository.add_member(circle_id, user_id)
        if updated is None:
            # Deleted between the read and the write.
            raise NotFoundError("Circle not found")
        await self.user_repository.add_circle(user_id, circle_id)
        logger.info("User %s joined circle %s", user_id, circle_id)

        others = [m for m in updated.members if m != user_id]
        await self.notification_service.notify_many(
            others,
            "circle",
            "New Member Joined",
            f'{user.name} joined "{updated.name}"',
            action_url="/circles",
            related_id=circle_id,
        )
        return updated

    async def leave(self, circle_id: str, user_id: str) -> Optional[ReadingCircle]:
        user = await self.user_repository.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")

        await self.user_repository.remove_circle(user_id, circle_id)
        updated = await self.circle_repository.remove_member(circle_id, user_id)
        if updated is None:
            logger.info("User %s dropped reference to missing circle %s", user_id, circle_id)
        else:
            logger.info("User %s left circle %s", user_id, circle_id)
        return updated
