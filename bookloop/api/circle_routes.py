"""Reading circle API routes (circles, membership, posts, comments)."""

import logging
from typing import Annotated

from fastapi import APIRouter, Body, Depends, status

from bookloop.api.schemas import (
    CircleCreateRequest,
    CircleDetailResponse,
    CircleResponse,
    CommentCreateRequest,
    CommentResponse,
    MembershipRequest,
    MessageResponse,
    PostCreateRequest,
    PostResponse,
)
from bookloop.core.dependencies import get_discussion_service, get_membership_service
from bookloop.domain.services import IDiscussionService, IMembershipService

logger = logging.getLogger(__name__)
router = APIRouter(tags=["circles"])


# ---------------------------------------------------------------------------
# Circles
# ---------------------------------------------------------------------------
@router.get("/circles", response_model=list[CircleDetailResponse])
async def list_circles(
    discussions: Annotated[IDiscussionService, Depends(get_discussion_service)],
) -> list[CircleDetailResponse]:
    """Every circle with its posts and their comments nested inside."""
    results = await discussions.list_discussions()
    return [CircleDetailResponse.from_discussion(d) for d in results]


@router.post("/circles", response_model=CircleResponse, status_code=status.HTTP_201_CREATED)
async def create_circle(
    body: CircleCreateRequest,
    discussions: Annotated[IDiscussionService, Depends(get_discussion_service)],
) -> CircleResponse:
    circle = await discussions.create_circle(
        name=body.name,
        description=body.description,
        members=body.members,
        current_book=body.current_book,
        avatar=body.avatar,
        privacy=body.privacy,
    )
    return CircleResponse.from_entity(circle)


@router.get("/circles/{circle_id}", response_model=CircleDetailResponse)
async def get_circle(
    circle_id: str,
    discussions: Annotated[IDiscussionService, Depends(get_discussion_service)],
) -> CircleDetailResponse:
    return CircleDetailResponse.from_discussion(await discussions.get_discussion(circle_id))


@router.delete("/circles/{circle_id}", response_model=MessageResponse)
async def delete_circle(
    circle_id: str,
    discussions: Annotated[IDiscussionService, Depends(get_discussion_service)],
) -> MessageResponse:
    """Delete a circle along with its posts and comments."""
    await discussions.delete_circle(circle_id)
    return MessageResponse(message="Circle deleted")


# ---------------------------------------------------------------------------
# Membership
# ---------------------------------------------------------------------------
@router.post("/circles/{circle_id}/join", response_model=MessageResponse)
async def join_circle(
    circle_id: str,
    body: MembershipRequest,
    membership: Annotated[IMembershipService, Depends(get_membership_service)],
) -> MessageResponse:
    await membership.join(circle_id, body.user_id)
    return MessageResponse(message="Joined circle successfully")


@router.delete("/circles/{circle_id}/leave", response_model=MessageResponse)
async def leave_circle(
    circle_id: str,
    body: Annotated[MembershipRequest, Body()],
    membership: Annotated[IMembershipService, Depends(get_membership_service)],
) -> MessageResponse:
    """Leave a circle; also clears references to circles that no longer exist."""
    await membership.leave(circle_id, body.user_id)
    return MessageResponse(message="Left circle successfully")


# ---------------------------------------------------------------------------
# Posts & comments
# ---------------------------------------------------------------------------
@router.post(
    "/circles/{circle_id}/posts",
    response_model=PostResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_post(
    circle_id: str,
    body: PostCreateRequest,
    discussions: Annotated[IDiscussionService, Depends(get_discussion_service)],
) -> PostResponse:
    post = await discussions.add_post(
        circle_id,
        author_id=body.author_id,
        author_name=body.author_name,
        content=body.content,
        author_avatar=body.author_avatar,
    )
    return PostResponse.model_validate(post)


@router.post(
    "/posts/{post_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    post_id: str,
    body: CommentCreateRequest,
    discussions: Annotated[IDiscussionService, Depends(get_discussion_service)],
) -> CommentResponse:
    comment = await discussions.add_comment(
        post_id,
        author_id=body.author_id,
        author_name=body.author_name,
        content=body.content,
        author_avatar=body.author_avatar,
    )
    return CommentResponse.model_validate(comment)


@router.post("/posts/{post_id}/like", response_model=PostResponse)
async def like_post(
    post_id: str,
    discussions: Annotated[IDiscussionService, Depends(get_discussion_service)],
) -> PostResponse:
    return PostResponse.model_validate(await discussions.like_post(post_id))


@router.delete("/posts/{post_id}", response_model=MessageResponse)
async def delete_post(
    post_id: str,
    discussions: Annotated[IDiscussionService, Depends(get_discussion_service)],
) -> MessageResponse:
    await discussions.delete_post(post_id)
    return MessageResponse(message="Post deleted")
