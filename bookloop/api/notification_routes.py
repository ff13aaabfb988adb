"""Notification inbox routes."""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from bookloop.api.schemas import MarkAllReadRequest, MessageResponse, NotificationResponse
from bookloop.core.dependencies import get_notification_service
from bookloop.services.notification_service import NotificationService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationResponse])
async def list_notifications(
    notifications: Annotated[NotificationService, Depends(get_notification_service)],
    user_id: Annotated[Optional[str], Query(alias="userId")] = None,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
) -> list[NotificationResponse]:
    """The user's newest notifications first."""
    if not user_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User ID is required")
    items = await notifications.list_for_user(user_id, limit=limit)
    return [NotificationResponse.model_validate(n) for n in items]


@router.put("/mark-all-read", response_model=MessageResponse)
async def mark_all_read(
    body: MarkAllReadRequest,
    notifications: Annotated[NotificationService, Depends(get_notification_service)],
) -> MessageResponse:
    count = await notifications.mark_all_read(body.user_id)
    logger.debug("Marked %d notification(s) read for %s", count, body.user_id)
    return MessageResponse(message="All notifications marked as read")


@router.put("/{notification_id}/read", response_model=MessageResponse)
async def mark_read(
    notification_id: str,
    notifications: Annotated[NotificationService, Depends(get_notification_service)],
) -> MessageResponse:
    await notifications.mark_read(notification_id)
    return MessageResponse(message="Notification marked as read")


@router.delete("/{notification_id}", response_model=MessageResponse)
async def delete_notification(
    notification_id: str,
    notifications: Annotated[NotificationService, Depends(get_notification_service)],
) -> MessageResponse:
    await notifications.delete(notification_id)
    return MessageResponse(message="Notification deleted")
