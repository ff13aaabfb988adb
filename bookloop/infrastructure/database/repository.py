"""Repository implementations."""

from typing import Optional

from sqlalchemy import case, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from bookloop.domain.entities import (
    Book,
    Comment,
    Location,
    Notification,
    Options,
    Post,
    Preferences,
    ReadingCircle,
    Trade,
    User,
)
from bookloop.domain.repositories import (
    IBookRepository,
    ICircleRepository,
    ICommentRepository,
    INotificationRepository,
    IOptionsRepository,
    IPostRepository,
    ITradeRepository,
    IUserRepository,
)
from bookloop.infrastructure.database.models import (
    BookModel,
    CircleModel,
    CommentModel,
    NotificationModel,
    OptionsModel,
    PostModel,
    TradeModel,
    UserModel,
)


def _location_to_json(location: Optional[Location]) -> Optional[dict]:
    if location is None:
        return None
    return {
        "city": location.city,
        "state": location.state,
        "country": location.country,
        "lat": location.lat,
        "lng": location.lng,
    }


# ---------------------------------------------------------------------------
# User Repository
# ---------------------------------------------------------------------------
class UserRepository(IUserRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, user: User) -> User:
        db_user = UserModel(
            id=user.id,
            name=user.name,
            email=user.email,
            hashed_password=user.hashed_password,
            avatar=user.avatar,
            location=_location_to_json(user.location),
            bio=user.bio,
            books_owned=list(user.books_owned),
            circles_joined=list(user.circles_joined),
            favorites=list(user.favorites),
            preferences=self._preferences_to_json(user.preferences),
        )
        self.session.add(db_user)
        await self.session.commit()
        await self.session.refresh(db_user)
        return self._to_entity(db_user)

    async def get_by_id(self, user_id: str) -> Optional[User]:
        db_user = await self._get(user_id)
        return self._to_entity(db_user) if db_user else None

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(select(UserModel).where(UserModel.email == email))
        db_user = result.scalar_one_or_none()
        return self._to_entity(db_user) if db_user else None

    async def update(self, user: User) -> User:
        db_user = await self._get(user.id)
        db_user.name = user.name
        db_user.email = user.email
        db_user.hashed_password = user.hashed_password
        db_user.avatar = user.avatar
        db_user.location = _location_to_json(user.location)
        db_user.bio = user.bio
        db_user.books_owned = list(user.books_owned)
        db_user.circles_joined = list(user.circles_joined)
        db_user.favorites = list(user.favorites)
        db_user.preferences = self._preferences_to_json(user.preferences)
        await self.session.commit()
        await self.session.refresh(db_user)
        return self._to_entity(db_user)

    async def add_circle(self, user_id: str, circle_id: str) -> None:
        db_user = await self._get(user_id)
        if db_user is None or circle_id in (db_user.circles_joined or []):
            return
        db_user.circles_joined = [*(db_user.circles_joined or []), circle_id]
        await self.session.commit()

    async def remove_circle(self, user_id: str, circle_id: str) -> None:
        db_user = await self._get(user_id)
        if db_user is None:
            return
        db_user.circles_joined = [c for c in (db_user.circles_joined or []) if c != circle_id]
        await self.session.commit()

    async def add_owned_book(self, user_id: str, book_id: str) -> None:
        db_user = await self._get(user_id)
        if db_user is None or book_id in (db_user.books_owned or []):
            return
        db_user.books_owned = [*(db_user.books_owned or []), book_id]
        await self.session.commit()

    async def remove_owned_book(self, user_id: str, book_id: str) -> None:
        db_user = await self._get(user_id)
        if db_user is None:
            return
        db_user.books_owned = [b for b in (db_user.books_owned or []) if b != book_id]
        await self.session.commit()

    async def _get(self, user_id: str) -> Optional[UserModel]:
        result = await self.session.execute(select(UserModel).where(UserModel.id == user_id))
        return result.scalar_one_or_none()

    @staticmethod
    def _preferences_to_json(preferences: Preferences) -> dict:
        return {
            "genres": list(preferences.genres),
            "authors": list(preferences.authors),
            "languages": list(preferences.languages),
        }

    @staticmethod
    def _to_entity(model: UserModel) -> User:
        prefs = model.preferences or {}
        return User(
            id=model.id,
            name=model.name,
            email=model.email,
            hashed_password=model.hashed_password,
            avatar=model.avatar,
            location=Location(**(model.location or {})),
            bio=model.bio,
            books_owned=list(model.books_owned or []),
            circles_joined=list(model.circles_joined or []),
            favorites=list(model.favorites or []),
            preferences=Preferences(
                genres=list(prefs.get("genres") or []),
                authors=list(prefs.get("authors") or []),
                languages=list(prefs.get("languages") or []),
            ),
        )


# ---------------------------------------------------------------------------
# Book Repository
# ---------------------------------------------------------------------------
class BookRepository(IBookRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, book: Book) -> Book:
        db_book = BookModel(id=book.id)
        self._apply(db_book, book)
        self.session.add(db_book)
        await self.session.commit()
        await self.session.refresh(db_book)
        return self._to_entity(db_book)

    async def get_by_id(self, book_id: str) -> Optional[Book]:
        db_book = await self._get(book_id)
        return self._to_entity(db_book) if db_book else None

    async def list_all(self) -> list[Book]:
        result = await self.session.execute(select(BookModel).order_by(BookModel.pk))
        return [self._to_entity(b) for b in result.scalars().all()]

    async def list_within(
        self, min_lat: float, max_lat: float, min_lng: float, max_lng: float
    ) -> list[Book]:
        result = await self.session.execute(
            select(BookModel)
            .where(
                BookModel.lat.between(min_lat, max_lat),
                BookModel.lng.between(min_lng, max_lng),
            )
            .order_by(BookModel.pk)
        )
        return [self._to_entity(b) for b in result.scalars().all()]

    async def update(self, book: Book) -> Book:
        db_book = await self._get(book.id)
        self._apply(db_book, book)
        await self.session.commit()
        await self.session.refresh(db_book)
        return self._to_entity(db_book)

    async def delete(self, book_id: str) -> bool:
        db_book = await self._get(book_id)
        if db_book:
            await self.session.delete(db_book)
            await self.session.commit()
            return True
        return False

    async def _get(self, book_id: str) -> Optional[BookModel]:
        result = await self.session.execute(select(BookModel).where(BookModel.id == book_id))
        return result.scalar_one_or_none()

    @staticmethod
    def _apply(model: BookModel, book: Book) -> None:
        location = book.location or Location()
        model.title = book.title
        model.author = book.author
        model.genre = book.genre
        model.language = book.language
        model.owner_id = book.owner_id
        model.owner_name = book.owner_name
        model.available = book.available
        model.rating = book.rating
        model.reviews = book.reviews
        model.description = book.description
        model.cover = book.cover
        model.condition = book.condition
        model.city = location.city
        model.state = location.state
        model.country = location.country
        model.lat = location.lat
        model.lng = location.lng
        model.price = book.price
        model.is_for_sale = book.is_for_sale
        model.owner_contact = book.owner_contact

    @staticmethod
    def _to_entity(model: BookModel) -> Book:
        has_location = any(
            v is not None for v in (model.city, model.state, model.country, model.lat, model.lng)
        )
        return Book(
            id=model.id,
            title=model.title,
            author=model.author,
            genre=model.genre,
            language=model.language,
            owner_id=model.owner_id,
            owner_name=model.owner_name,
            available=model.available,
            rating=model.rating,
            reviews=model.reviews,
            description=model.description,
            cover=model.cover,
            condition=model.condition,
            location=Location(
                city=model.city,
                state=model.state,
                country=model.country,
                lat=model.lat,
                lng=model.lng,
            )
            if has_location
            else None,
            price=model.price,
            is_for_sale=model.is_for_sale,
            owner_contact=model.owner_contact,
        )


# ---------------------------------------------------------------------------
# Reading Circle Repository
# ---------------------------------------------------------------------------
class CircleRepository(ICircleRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, circle: ReadingCircle) -> ReadingCircle:
        db_circle = CircleModel(
            id=circle.id,
            name=circle.name,
            description=circle.description,
            members=list(circle.members),
            members_count=circle.members_count,
            post_ids=list(circle.post_ids),
            current_book=circle.current_book,
            avatar=circle.avatar,
            privacy=circle.privacy,
        )
        self.session.add(db_circle)
        await self.session.commit()
        await self.session.refresh(db_circle)
        return self._to_entity(db_circle)

    async def get_by_id(self, circle_id: str) -> Optional[ReadingCircle]:
        db_circle = await self._get(circle_id)
        return self._to_entity(db_circle) if db_circle else None

    async def list_all(self) -> list[ReadingCircle]:
        result = await self.session.execute(select(CircleModel).order_by(CircleModel.pk))
        return [self._to_entity(c) for c in result.scalars().all()]

    async def add_member(self, circle_id: str, user_id: str) -> Optional[ReadingCircle]:
        db_circle = await self._get(circle_id)
        if db_circle is None:
            return None
        db_circle.members = [*(db_circle.members or []), user_id]
        # Counter is bumped in SQL so concurrent joins cannot lose an increment.
        await self.session.execute(
            update(CircleModel)
            .where(CircleModel.id == circle_id)
            .values(members_count=func.coalesce(CircleModel.members_count, 0) + 1)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        await self.session.refresh(db_circle)
        return self._to_entity(db_circle)

    async def remove_member(self, circle_id: str, user_id: str) -> Optional[ReadingCircle]:
        db_circle = await self._get(circle_id)
        if db_circle is None:
            return None
        db_circle.members = [m for m in (db_circle.members or []) if m != user_id]
        await self.session.execute(
            update(CircleModel)
            .where(CircleModel.id == circle_id)
            .values(
                members_count=case(
                    (CircleModel.members_count > 0, CircleModel.members_count - 1),
                    else_=0,
                )
            )
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        await self.session.refresh(db_circle)
        return self._to_entity(db_circle)

    async def append_post(self, circle_id: str, post_id: str) -> None:
        db_circle = await self._get(circle_id)
        if db_circle is None:
            return
        db_circle.post_ids = [*(db_circle.post_ids or []), post_id]
        await self.session.commit()

    async def remove_post(self, circle_id: str, post_id: str) -> None:
        db_circle = await self._get(circle_id)
        if db_circle is None:
            return
        db_circle.post_ids = [p for p in (db_circle.post_ids or []) if p != post_id]
        await self.session.commit()

    async def delete(self, circle_id: str) -> bool:
        db_circle = await self._get(circle_id)
        if db_circle:
            await self.session.delete(db_circle)
            await self.session.commit()
            return True
        return False

    async def _get(self, circle_id: str) -> Optional[CircleModel]:
        result = await self.session.execute(select(CircleModel).where(CircleModel.id == circle_id))
        return result.scalar_one_or_none()

    @staticmethod
    def _to_entity(model: CircleModel) -> ReadingCircle:
        return ReadingCircle(
            id=model.id,
            name=model.name,
            description=model.description,
            members=list(model.members or []),
            members_count=model.members_count,
            post_ids=list(model.post_ids or []),
            current_book=model.current_book,
            avatar=model.avatar,
            privacy=model.privacy,
        )


# ---------------------------------------------------------------------------
# Post Repository
# ---------------------------------------------------------------------------
class PostRepository(IPostRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, post: Post) -> Post:
        db_post = PostModel(
            id=post.id,
            circle_id=post.circle_id,
            author_id=post.author_id,
            author_name=post.author_name,
            author_avatar=post.author_avatar,
            content=post.content,
            comment_ids=list(post.comment_ids),
            likes=post.likes,
            timestamp=post.timestamp,
        )
        self.session.add(db_post)
        await self.session.commit()
        await self.session.refresh(db_post)
        return self._to_entity(db_post)

    async def get_by_id(self, post_id: str) -> Optional[Post]:
        db_post = await self._get(post_id)
        return self._to_entity(db_post) if db_post else None

    async def get_by_ids(self, post_ids: list[str]) -> list[Post]:
        if not post_ids:
            return []
        result = await self.session.execute(
            select(PostModel).where(PostModel.id.in_(post_ids)).order_by(PostModel.pk)
        )
        return [self._to_entity(p) for p in result.scalars().all()]

    async def list_by_circle(self, circle_id: str) -> list[Post]:
        result = await self.session.execute(
            select(PostModel).where(PostModel.circle_id == circle_id).order_by(PostModel.pk)
        )
        return [self._to_entity(p) for p in result.scalars().all()]

    async def append_comment(self, post_id: str, comment_id: str) -> None:
        db_post = await self._get(post_id)
        if db_post is None:
            return
        db_post.comment_ids = [*(db_post.comment_ids or []), comment_id]
        await self.session.commit()

    async def increment_likes(self, post_id: str) -> Optional[Post]:
        result = await self.session.execute(
            update(PostModel)
            .where(PostModel.id == post_id)
            .values(likes=PostModel.likes + 1)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        if result.rowcount == 0:
            return None
        db_post = await self._get(post_id)
        await self.session.refresh(db_post)
        return self._to_entity(db_post)

    async def delete(self, post_id: str) -> bool:
        db_post = await self._get(post_id)
        if db_post:
            await self.session.delete(db_post)
            await self.session.commit()
            return True
        return False

    async def delete_by_circle(self, circle_id: str) -> list[str]:
        result = await self.session.execute(
            select(PostModel.id).where(PostModel.circle_id == circle_id)
        )
        post_ids = list(result.scalars().all())
        if post_ids:
            await self.session.execute(delete(PostModel).where(PostModel.id.in_(post_ids)))
            await self.session.commit()
        return post_ids

    async def _get(self, post_id: str) -> Optional[PostModel]:
        result = await self.session.execute(select(PostModel).where(PostModel.id == post_id))
        return result.scalar_one_or_none()

    @staticmethod
    def _to_entity(model: PostModel) -> Post:
        return Post(
            id=model.id,
            circle_id=model.circle_id,
            author_id=model.author_id,
            author_name=model.author_name,
            author_avatar=model.author_avatar,
            content=model.content,
            comment_ids=list(model.comment_ids or []),
            likes=model.likes,
            timestamp=model.timestamp,
        )


# ---------------------------------------------------------------------------
# Comment Repository
# ---------------------------------------------------------------------------
class CommentRepository(ICommentRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, comment: Comment) -> Comment:
        db_comment = CommentModel(
            id=comment.id,
            post_id=comment.post_id,
            author_id=comment.author_id,
            author_name=comment.author_name,
            author_avatar=comment.author_avatar,
            content=comment.content,
            timestamp=comment.timestamp,
        )
        self.session.add(db_comment)
        await self.session.commit()
        await self.session.refresh(db_comment)
        return self._to_entity(db_comment)

    async def get_by_ids(self, comment_ids: list[str]) -> list[Comment]:
        if not comment_ids:
            return []
        result = await self.session.execute(
            select(CommentModel).where(CommentModel.id.in_(comment_ids)).order_by(CommentModel.pk)
        )
        return [self._to_entity(c) for c in result.scalars().all()]

    async def list_by_post(self, post_id: str) -> list[Comment]:
        result = await self.session.execute(
            select(CommentModel).where(CommentModel.post_id == post_id).order_by(CommentModel.pk)
        )
        return [self._to_entity(c) for c in result.scalars().all()]

    async def delete_by_posts(self, post_ids: list[str]) -> int:
        if not post_ids:
            return 0
        result = await self.session.execute(
            delete(CommentModel).where(CommentModel.post_id.in_(post_ids))
        )
        await self.session.commit()
        return result.rowcount

    @staticmethod
    def _to_entity(model: CommentModel) -> Comment:
        return Comment(
            id=model.id,
            post_id=model.post_id,
            author_id=model.author_id,
            author_name=model.author_name,
            author_avatar=model.author_avatar,
            content=model.content,
            timestamp=model.timestamp,
        )


# ---------------------------------------------------------------------------
# Trade Repository
# ---------------------------------------------------------------------------
class TradeRepository(ITradeRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, trade: Trade) -> Trade:
        db_trade = TradeModel(
            id=trade.id,
            requester_id=trade.requester_id,
            requester_name=trade.requester_name,
            owner_id=trade.owner_id,
            owner_name=trade.owner_name,
            book_id=trade.book_id,
            book_title=trade.book_title,
            status=trade.status,
            request_date=trade.request_date,
            message=trade.message,
            trade_description=trade.trade_description,
            requester_contact=trade.requester_contact,
            requester_location=trade.requester_location,
        )
        self.session.add(db_trade)
        await self.session.commit()
        await self.session.refresh(db_trade)
        return self._to_entity(db_trade)

    async def get_by_id(self, trade_id: str) -> Optional[Trade]:
        db_trade = await self._get(trade_id)
        return self._to_entity(db_trade) if db_trade else None

    async def list_for_user(self, user_id: str) -> list[Trade]:
        result = await self.session.execute(
            select(TradeModel)
            .where(or_(TradeModel.requester_id == user_id, TradeModel.owner_id == user_id))
            .order_by(TradeModel.pk)
        )
        return [self._to_entity(t) for t in result.scalars().all()]

    async def update(self, trade: Trade) -> Trade:
        db_trade = await self._get(trade.id)
        db_trade.status = trade.status
        db_trade.message = trade.message
        db_trade.trade_description = trade.trade_description
        db_trade.requester_contact = trade.requester_contact
        db_trade.requester_location = trade.requester_location
        await self.session.commit()
        await self.session.refresh(db_trade)
        return self._to_entity(db_trade)

    async def _get(self, trade_id: str) -> Optional[TradeModel]:
        result = await self.session.execute(select(TradeModel).where(TradeModel.id == trade_id))
        return result.scalar_one_or_none()

    @staticmethod
    def _to_entity(model: TradeModel) -> Trade:
        return Trade(
            id=model.id,
            requester_id=model.requester_id,
            requester_name=model.requester_name,
            owner_id=model.owner_id,
            owner_name=model.owner_name,
            book_id=model.book_id,
            book_title=model.book_title,
            status=model.status,
            request_date=model.request_date,
            message=model.message,
            trade_description=model.trade_description,
            requester_contact=model.requester_contact,
            requester_location=model.requester_location,
        )


# ---------------------------------------------------------------------------
# Notification Repository
# ---------------------------------------------------------------------------
class NotificationRepository(INotificationRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, notification: Notification) -> Notification:
        created = await self.create_many([notification])
        return created[0]

    async def create_many(self, notifications: list[Notification]) -> list[Notification]:
        if not notifications:
            return []
        db_rows = [
            NotificationModel(
                id=n.id,
                user_id=n.user_id,
                type=n.type,
                title=n.title,
                message=n.message,
                timestamp=n.timestamp,
                read=n.read,
                action_url=n.action_url,
                related_id=n.related_id,
            )
            for n in notifications
        ]
        self.session.add_all(db_rows)
        await self.session.commit()
        for row in db_rows:
            await self.session.refresh(row)
        return [self._to_entity(row) for row in db_rows]

    async def list_for_user(self, user_id: str, limit: int = 50) -> list[Notification]:
        result = await self.session.execute(
            select(NotificationModel)
            .where(NotificationModel.user_id == user_id)
            .order_by(NotificationModel.timestamp.desc(), NotificationModel.pk.desc())
            .limit(limit)
        )
        return [self._to_entity(n) for n in result.scalars().all()]

    async def mark_read(self, notification_id: str) -> bool:
        result = await self.session.execute(
            update(NotificationModel)
            .where(NotificationModel.id == notification_id)
            .values(read=True)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        return result.rowcount > 0

    async def mark_all_read(self, user_id: str) -> int:
        result = await self.session.execute(
            update(NotificationModel)
            .where(NotificationModel.user_id == user_id, NotificationModel.read.is_(False))
            .values(read=True)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        return result.rowcount

    async def delete(self, notification_id: str) -> bool:
        result = await self.session.execute(
            delete(NotificationModel).where(NotificationModel.id == notification_id)
        )
        await self.session.commit()
        return result.rowcount > 0

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            user_id=model.user_id,
            type=model.type,
            title=model.title,
            message=model.message,
            timestamp=model.timestamp,
            read=model.read,
            action_url=model.action_url,
            related_id=model.related_id,
        )


# ---------------------------------------------------------------------------
# Options Repository
# ---------------------------------------------------------------------------
class OptionsRepository(IOptionsRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self) -> Optional[Options]:
        db_options = await self._first()
        return self._to_entity(db_options) if db_options else None

    async def save(self, options: Options) -> Options:
        db_options = await self._first()
        if db_options is None:
            db_options = OptionsModel(id=options.id)
            self.session.add(db_options)
        db_options.genres = list(options.genres)
        db_options.languages = list(options.languages)
        db_options.authors = list(options.authors)
        await self.session.commit()
        await self.session.refresh(db_options)
        return self._to_entity(db_options)

    async def _first(self) -> Optional[OptionsModel]:
        result = await self.session.execute(
            select(OptionsModel).order_by(OptionsModel.pk).limit(1)
        )
        return result.scalar_one_or_none()

    @staticmethod
    def _to_entity(model: OptionsModel) -> Options:
        return Options(
            id=model.id,
            genres=list(model.genres or []),
            languages=list(model.languages or []),
            authors=list(model.authors or []),
        )
