"""Dependency injection container."""

from typing import Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bookloop.core.config import settings
from bookloop.domain.repositories import (
    IBookRepository,
    ICircleRepository,
    ICommentRepository,
    INotificationRepository,
    IOptionsRepository,
    IPostRepository,
    IRecommender,
    ITradeRepository,
    IUserRepository,
)
from bookloop.domain.services import (
    IDiscussionService,
    IMembershipService,
    IRecommendationService,
    ITradeService,
)
from bookloop.infrastructure.database.connection import get_db
from bookloop.infrastructure.database.repository import (
    BookRepository,
    CircleRepository,
    CommentRepository,
    NotificationRepository,
    OptionsRepository,
    PostRepository,
    TradeRepository,
    UserRepository,
)
from bookloop.infrastructure.recommender.remote import HttpRecommender
from bookloop.services.book_service import BookService
from bookloop.services.discussion_service import DiscussionService
from bookloop.services.membership_service import MembershipService
from bookloop.services.notification_service import NotificationService
from bookloop.services.options_service import OptionsService
from bookloop.services.recommendation import RecommendationService
from bookloop.services.trade_service import TradeService
from bookloop.services.user_service import UserService


# ---------------------------------------------------------------------------
# Infrastructure providers
# ---------------------------------------------------------------------------
def get_recommender() -> Optional[IRecommender]:
    """Return the configured remote ranker, or ``None`` for heuristic-only."""
    if settings.recommender_provider == "heuristic":
        return None
    elif settings.recommender_provider == "remote":
        if not settings.recommender_url:
            raise ValueError("RECOMMENDER_URL must be set for the remote recommender")
        return HttpRecommender(
            url=settings.recommender_url,
            api_key=settings.recommender_api_key,
            timeout=settings.recommender_timeout,
        )
    raise ValueError(f"Unknown recommender provider: {settings.recommender_provider}")


# ---------------------------------------------------------------------------
# Repository providers
# ---------------------------------------------------------------------------
async def get_user_repository(session: AsyncSession = Depends(get_db)) -> IUserRepository:
    return UserRepository(session)


async def get_book_repository(session: AsyncSession = Depends(get_db)) -> IBookRepository:
    return BookRepository(session)


async def get_circle_repository(session: AsyncSession = Depends(get_db)) -> ICircleRepository:
    return CircleRepository(session)


async def get_post_repository(session: AsyncSession = Depends(get_db)) -> IPostRepository:
    return PostRepository(session)


async def get_comment_repository(session: AsyncSession = Depends(get_db)) -> ICommentRepository:
    return CommentRepository(session)


async def get_trade_repository(session: AsyncSession = Depends(get_db)) -> ITradeRepository:
    return TradeRepository(session)


async def get_notification_repository(
    session: AsyncSession = Depends(get_db),
) -> INotificationRepository:
    return NotificationRepository(session)


async def get_options_repository(session: AsyncSession = Depends(get_db)) -> IOptionsRepository:
    return OptionsRepository(session)


# ---------------------------------------------------------------------------
# Service providers
# ---------------------------------------------------------------------------
async def get_notification_service(
    repo: INotificationRepository = Depends(get_notification_repository),
) -> NotificationService:
    return NotificationService(notification_repository=repo)


async def get_user_service(
    repo: IUserRepository = Depends(get_user_repository),
) -> UserService:
    return UserService(user_repository=repo)


async def get_book_service(
    book_repo: IBookRepository = Depends(get_book_repository),
    user_repo: IUserRepository = Depends(get_user_repository),
) -> BookService:
    return BookService(book_repository=book_repo, user_repository=user_repo)


async def get_membership_service(
    circle_repo: ICircleRepository = Depends(get_circle_repository),
    user_repo: IUserRepository = Depends(get_user_repository),
    notifications: NotificationService = Depends(get_notification_service),
) -> IMembershipService:
    return MembershipService(
        circle_repository=circle_repo,
        user_repository=user_repo,
        notification_service=notifications,
    )


async def get_discussion_service(
    circle_repo: ICircleRepository = Depends(get_circle_repository),
    post_repo: IPostRepository = Depends(get_post_repository),
    comment_repo: ICommentRepository = Depends(get_comment_repository),
    user_repo: IUserRepository = Depends(get_user_repository),
    notifications: NotificationService = Depends(get_notification_service),
) -> IDiscussionService:
    return DiscussionService(
        circle_repository=circle_repo,
        post_repository=post_repo,
        comment_repository=comment_repo,
        user_repository=user_repo,
        notification_service=notifications,
    )


async def get_trade_service(
    trade_repo: ITradeRepository = Depends(get_trade_repository),
    notifications: NotificationService = Depends(get_notification_service),
) -> ITradeService:
    return TradeService(trade_repository=trade_repo, notification_service=notifications)


async def get_options_service(
    repo: IOptionsRepository = Depends(get_options_repository),
) -> OptionsService:
    return OptionsService(options_repository=repo)


async def get_recommendation_service(
    remote: Optional[IRecommender] = Depends(get_recommender),
) -> IRecommendationService:
    return RecommendationService(remote=remote)
