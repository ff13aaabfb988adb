"""Trade requests and the notifications their state changes fire."""

import logging
from dataclasses import replace
from typing import Optional

from bookloop.domain.entities import Trade, new_id
from bookloop.domain.exceptions import InvalidRequestError, NotFoundError
from bookloop.domain.repositories import ITradeRepository
from bookloop.domain.services import ITradeService
from bookloop.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

TRADE_STATUSES = ("pending", "accepted", "declined", "completed")

# Allowed next states; declined and completed are terminal.
ALLOWED_TRANSITIONS = {
    "pending": {"accepted", "declined"},
    "accepted": {"completed"},
    "declined": set(),
    "completed": set(),
}

# status -> (title, message template) for the notification sent to the requester
STATUS_NOTIFICATIONS = {
    "accepted": (
        "Trade Request Accepted",
        '{owner_name} accepted your request for "{book_title}"',
    ),
    "declined": (
        "Trade Request Declined",
        '{owner_name} declined your request for "{book_title}"',
    ),
    "completed": (
        "Trade Completed",
        'Your trade for "{book_title}" has been completed successfully',
    ),
}


def check_transition(current: str, new: str) -> None:
    """Raise ``InvalidRequestError`` unless ``current -> new`` is an allowed move."""
    if new not in ALLOWED_TRANSITIONS:
        raise InvalidRequestError(f"Unknown trade status: {new}")
    if new == current:
        return
    if new not in ALLOWED_TRANSITIONS.get(current, set()):
        raise InvalidRequestError(f"Cannot change trade status from {current} to {new}")


class TradeService(ITradeService):

    def __init__(
        self,
        trade_repository: ITradeRepository,
        notification_service: NotificationService,
    ):
        self.trade_repository = trade_repository
        self.notification_service = notification_service

    async def create_trade(self, trade: Trade) -> Trade:
        """Persist a new request (always ``pending``) and notify the book owner."""
        created = await self.trade_repository.create(
            replace(trade, id=trade.id or new_id(), status="pending")
        )
        await self.notification_service.notify(
            created.owner_id,
            "trade",
            "New Trade Request",
            f'{created.requester_name} wants to trade for "{created.book_title}"',
            action_url="/trades",
            related_id=created.id,
        )
        logger.info("Trade %s requested by %s for book %s", created.id, created.requester_id, created.book_id)
        return created

    async def update_trade(
        self,
        trade_id: str,
        *,
        status: Optional[str] = None,
        message: Optional[str] = None,
        trade_description: Optional[str] = None,
        requester_contact: Optional[str] = None,
        requester_location: Optional[str] = None,
    ) -> Trade:
        trade = await self.trade_repository.get_by_id(trade_id)
        if trade is None:
            raise NotFoundError("Trade not found")

        previous_status = trade.status
        if status is not None:
            check_transition(previous_status, status)
            trade.status = status
        if message is not None:
            trade.message = message
        if trade_description is not None:
            trade.trade_description = trade_description
        if requester_contact is not None:
            trade.requester_contact = requester_contact
        if requester_location is not None:
            trade.requester_location = requester_location

        updated = await self.trade_repository.update(trade)

        if status is not None and status != previous_status and status in STATUS_NOTIFICATIONS:
            title, template = STATUS_NOTIFICATIONS[status]
            await self.notification_service.notify(
                updated.requester_id,
                "trade",
                title,
                template.format(owner_name=updated.owner_name, book_title=updated.book_title),
                action_url="/trades",
                related_id=updated.id,
            )
            logger.info("Trade %s moved %s -> %s", updated.id, previous_status, status)
        return updated

    async def get_trade(self, trade_id: str) -> Trade:
        trade = await self.trade_repository.get_by_id(trade_id)
        if trade is None:
            raise NotFoundError("Trade not found")
        return trade

    async def list_user_trades(self, user_id: str) -> list[Trade]:
        return await self.trade_repository.list_for_user(user_id)
