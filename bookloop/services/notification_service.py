"""Notification service: fan-out of in-app notifications and inbox operations."""

import logging
from typing import Optional

from bookloop.domain.entities import Notification, new_id
from bookloop.domain.exceptions import NotFoundError
from bookloop.domain.repositories import INotificationRepository

logger = logging.getLogger(__name__)

NOTIFICATION_TYPES = ("trade", "circle", "system")


class NotificationService:
    """Creates notifications for other services and serves the user inbox."""

    def __init__(self, notification_repository: INotificationRepository):
        self.notification_repository = notification_repository

    async def notify(
        self,
        user_id: str,
        type: str,
        title: str,
        message: str,
        action_url: Optional[str] = None,
        related_id: Optional[str] = None,
    ) -> Notification:
        created = await self.notify_many(
            [user_id], type, title, message, action_url=action_url, related_id=related_id
        )
        return created[0]

    async def notify_many(
        self,
        user_ids: list[str],
        type: str,
        title: str,
        message: str,
        action_url: Optional[str] = None,
        related_id: Optional[str] = None,
    ) -> list[Notification]:
        """Send the same notification to every recipient in one write."""
        if type not in NOTIFICATION_TYPES:
            raise ValueError(f"Unknown notification type: {type}")
        notifications = [
            Notification(
                id=new_id(),
                user_id=user_id,
                type=type,
                title=title,
                message=message,
                action_url=action_url,
                related_id=related_id,
            )
            for user_id in user_ids
        ]
        created = await self.notification_repository.create_many(notifications)
        if created:
            logger.info("Sent %r notification to %d user(s)", title, len(created))
        return created

    async def list_for_user(self, user_id: str, limit: int = 50) -> list[Notification]:
        return await self.notification_repository.list_for_user(user_id, limit=limit)

    async def mark_read(self, notification_id: str) -> None:
        if not await self.notification_repository.mark_read(notification_id):
            raise NotFoundError("Notification not found")

    async def mark_all_read(self, user_id: str) -> int:
        return await self.notification_repository.mark_all_read(user_id)

    async def delete(self, notification_id: str) -> None:
        if not await self.notification_repository.delete(notification_id):
            raise NotFoundError("Notification not found")
