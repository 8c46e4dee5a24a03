"""Storage access layer over the social schema.

Every mutating operation runs inside a single transaction: the row change and
the denormalized counter updates it implies either all commit or all roll
back. Counters are adjusted with SQL-side ``col = col + n`` expressions so
concurrent increments never lose updates, and the unique constraints on
``likes`` and ``follows`` make repeated like/follow requests no-ops.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterable, Iterator

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from afusocial.models import (
    Comment,
    Conversation,
    ConversationParticipant,
    Follow,
    Like,
    Message,
    MessageType,
    Post,
    User,
)
from afusocial.schemas import UserUpsert
from afusocial.search import SearchService

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20


class StorageError(Exception):
    """Base class for storage-level failures callers are expected to handle."""


class NotFoundError(StorageError):
    """Raised when a mutation references a row that does not exist."""


class InvalidOperationError(StorageError):
    """Raised when a mutation is well-formed but not allowed."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DatabaseStorage:
    """Typed CRUD operations bound to one SQLAlchemy session."""

    def __init__(
        self,
        session: Session,
        *,
        search_limit: int = 20,
        default_page_size: int = DEFAULT_PAGE_SIZE,
    ):
        self._session = session
        self._search = SearchService(session, limit=search_limit)
        self._default_page_size = default_page_size

    @contextmanager
    def _transaction(self) -> Iterator[Session]:
        try:
            yield self._session
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

    def _require_user(self, user_id: str) -> User:
        user = self._session.get(User, user_id)
        if user is None:
            raise NotFoundError(f"User {user_id!r} not found")
        return user

    def _require_post(self, post_id: int) -> Post:
        post = self._session.get(Post, post_id)
        if post is None:
            raise NotFoundError(f"Post {post_id} not found")
        return post

    # Users -----------------------------------------------------------------

    def get_user(self, user_id: str) -> User | None:
        return self._session.get(User, user_id)

    def get_user_by_username(self, username: str) -> User | None:
        stmt = select(User).where(User.username == username)
        return self._session.execute(stmt).scalar_one_or_none()

    def upsert_user(self, data: UserUpsert) -> User:
        """Insert a user or overwrite the supplied fields of an existing one."""

        values = data.model_dump(exclude_unset=True)
        user_id = values.pop("id")
        if values.get("verified") is None:
            values.pop("verified", None)

        with self._transaction() as session:
            user = session.get(User, user_id)
            if user is None:
                user = User(id=user_id, **values)
                session.add(user)
                logger.info("Created user %s from identity claims", user_id)
            else:
                for field, value in values.items():
                    setattr(user, field, value)
                user.updated_at = _utcnow()
        self._session.refresh(user)
        return user

    def delete_user(self, user_id: str) -> bool:
        """Delete a user and everything they own, keeping other users' counters exact."""

        with self._transaction() as session:
            user = session.get(User, user_id)
            if user is None:
                return False

            like_counts = session.execute(
                select(Like.post_id, func.count(Like.id))
                .where(Like.user_id == user_id)
                .group_by(Like.post_id)
            ).all()
            for post_id, count in like_counts:
                session.execute(
                    update(Post)
                    .where(Post.id == post_id)
                    .values(likes_count=Post.likes_count - count)
                )

            comment_counts = session.execute(
                select(Comment.post_id, func.count(Comment.id))
                .where(Comment.author_id == user_id)
                .group_by(Comment.post_id)
            ).all()
            for post_id, count in comment_counts:
                session.execute(
                    update(Post)
                    .where(Post.id == post_id)
                    .values(comments_count=Post.comments_count - count)
                )

            followed_ids = session.execute(
                select(Follow.following_id).where(Follow.follower_id == user_id)
            ).scalars().all()
            if followed_ids:
                session.execute(
                    update(User)
                    .where(User.id.in_(followed_ids))
                    .values(followers_count=User.followers_count - 1)
                )

            follower_ids = session.execute(
                select(Follow.follower_id).where(Follow.following_id == user_id)
            ).scalars().all()
            if follower_ids:
                session.execute(
                    update(User)
                    .where(User.id.in_(follower_ids))
                    .values(following_count=User.following_count - 1)
                )

            session.delete(user)
        logger.info("Deleted user %s", user_id)
        return True

    # Posts -----------------------------------------------------------------

    def get_post(self, post_id: int) -> Post | None:
        return self._session.get(Post, post_id)

    def get_posts(
        self,
        limit: int | None = None,
        offset: int = 0,
        *,
        before_id: int | None = None,
    ) -> list[Post]:
        """Return a feed page, newest first.

        ``before_id`` selects only posts older than the given id, which gives
        stable pages while new posts are being created.
        """

        if limit is None:
            limit = self._default_page_size
        stmt = select(Post).order_by(Post.created_at.desc(), Post.id.desc())
        if before_id is not None:
            stmt = stmt.where(Post.id < before_id)
        stmt = stmt.offset(offset).limit(limit)
        return list(self._session.execute(stmt).scalars().all())

    def get_posts_by_user(self, user_id: str, limit: int | None = None) -> list[Post]:
        stmt = (
            select(Post)
            .where(Post.author_id == user_id)
            .order_by(Post.created_at.desc(), Post.id.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self._session.execute(stmt).scalars().all())

    def create_post(self, *, author_id: str, content: str, image_url: str | None = None) -> Post:
        with self._transaction() as session:
            self._require_user(author_id)
            post = Post(author_id=author_id, content=content, image_url=image_url)
            session.add(post)
            session.execute(
                update(User)
                .where(User.id == author_id)
                .values(posts_count=User.posts_count + 1)
            )
        self._session.refresh(post)
        return post

    # Likes -----------------------------------------------------------------

    def _find_like(self, user_id: str, post_id: int) -> Like | None:
        stmt = select(Like).where(Like.user_id == user_id, Like.post_id == post_id)
        return self._session.execute(stmt).scalar_one_or_none()

    def like_post(self, user_id: str, post_id: int) -> bool:
        """Record a like. Returns False when the user already liked the post."""

        try:
            with self._transaction() as session:
                self._require_user(user_id)
                self._require_post(post_id)
                if self._find_like(user_id, post_id) is not None:
                    return False
                session.add(Like(user_id=user_id, post_id=post_id))
                session.flush()
                session.execute(
                    update(Post)
                    .where(Post.id == post_id)
                    .values(likes_count=Post.likes_count + 1)
                )
        except IntegrityError:
            # A concurrent request inserted the same pair first.
            if self._find_like(user_id, post_id) is None:
                raise
            return False
        return True

    def unlike_post(self, user_id: str, post_id: int) -> bool:
        """Remove a like. Returns False when there was nothing to remove."""

        with self._transaction() as session:
            result = session.execute(
                delete(Like).where(Like.user_id == user_id, Like.post_id == post_id)
            )
            removed = result.rowcount or 0
            if removed:
                session.execute(
                    update(Post)
                    .where(Post.id == post_id)
                    .values(likes_count=Post.likes_count - removed)
                )
        return removed > 0

    def get_post_likes(self, post_id: int) -> list[Like]:
        stmt = select(Like).where(Like.post_id == post_id).order_by(Like.id)
        return list(self._session.execute(stmt).scalars().all())

    # Comments --------------------------------------------------------------

    def get_post_comments(self, post_id: int) -> list[Comment]:
        stmt = (
            select(Comment)
            .where(Comment.post_id == post_id)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
        )
        return list(self._session.execute(stmt).scalars().all())

    def create_comment(self, *, author_id: str, post_id: int, content: str) -> Comment:
        with self._transaction() as session:
            self._require_user(author_id)
            self._require_post(post_id)
            comment = Comment(author_id=author_id, post_id=post_id, content=content)
            session.add(comment)
            session.execute(
                update(Post)
                .where(Post.id == post_id)
                .values(comments_count=Post.comments_count + 1)
            )
        self._session.refresh(comment)
        return comment

    # Search ----------------------------------------------------------------

    def search_users(self, query: str) -> list[User]:
        return self._search.search_users(query)

    def search_posts(self, query: str) -> list[Post]:
        return self._search.search_posts(query)

    # Follows ---------------------------------------------------------------

    def _find_follow(self, follower_id: str, following_id: str) -> Follow | None:
        stmt = select(Follow).where(
            Follow.follower_id == follower_id,
            Follow.following_id == following_id,
        )
        return self._session.execute(stmt).scalar_one_or_none()

    def _shift_follow_counters(self, follower_id: str, following_id: str, delta: int) -> None:
        self._session.execute(
            update(User)
            .where(User.id == follower_id)
            .values(following_count=User.following_count + delta)
        )
        self._session.execute(
            update(User)
            .where(User.id == following_id)
            .values(followers_count=User.followers_count + delta)
        )

    def follow_user(self, follower_id: str, following_id: str) -> bool:
        """Follow ``following_id``. Returns False when already following."""

        if follower_id == following_id:
            raise InvalidOperationError("Users cannot follow themselves")

        try:
            with self._transaction() as session:
                self._require_user(follower_id)
                self._require_user(following_id)
                if self._find_follow(follower_id, following_id) is not None:
                    return False
                session.add(Follow(follower_id=follower_id, following_id=following_id))
                session.flush()
                self._shift_follow_counters(follower_id, following_id, 1)
        except IntegrityError:
            if self._find_follow(follower_id, following_id) is None:
                raise
            return False
        return True

    def unfollow_user(self, follower_id: str, following_id: str) -> bool:
        """Stop following ``following_id``. Returns False when not following."""

        with self._transaction() as session:
            result = session.execute(
                delete(Follow).where(
                    Follow.follower_id == follower_id,
                    Follow.following_id == following_id,
                )
            )
            removed = result.rowcount or 0
            if removed:
                self._shift_follow_counters(follower_id, following_id, -removed)
        return removed > 0

    def get_user_followers(self, user_id: str) -> list[Follow]:
        stmt = (
            select(Follow)
            .where(Follow.following_id == user_id)
            .order_by(Follow.created_at.desc(), Follow.id.desc())
        )
        return list(self._session.execute(stmt).scalars().all())

    def get_user_following(self, user_id: str) -> list[Follow]:
        stmt = (
            select(Follow)
            .where(Follow.follower_id == user_id)
            .order_by(Follow.created_at.desc(), Follow.id.desc())
        )
        return list(self._session.execute(stmt).scalars().all())

    # Conversations ---------------------------------------------------------

    def get_conversation(self, conversation_id: int) -> Conversation | None:
        stmt = (
            select(Conversation)
            .where(Conversation.id == conversation_id)
            .options(selectinload(Conversation.participants))
        )
        return self._session.execute(stmt).scalar_one_or_none()

    def is_participant(self, conversation_id: int, user_id: str) -> bool:
        stmt = select(ConversationParticipant.id).where(
            ConversationParticipant.conversation_id == conversation_id,
            ConversationParticipant.user_id == user_id,
        )
        return self._session.execute(stmt).first() is not None

    def get_user_conversations(self, user_id: str) -> list[Conversation]:
        """Conversations the user belongs to, most recently active first."""

        stmt = (
            select(Conversation)
            .join(ConversationParticipant)
            .where(ConversationParticipant.user_id == user_id)
            .order_by(Conversation.updated_at.desc(), Conversation.id.desc())
            .options(selectinload(Conversation.participants))
        )
        return list(self._session.execute(stmt).scalars().all())

    def get_conversation_messages(
        self, conversation_id: int, limit: int | None = None
    ) -> list[Message]:
        stmt = (
            select(Message)
            .where(Message.conversation_id == conversation_id)
            .order_by(Message.created_at.desc(), Message.id.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self._session.execute(stmt).scalars().all())

    def create_message(
        self,
        *,
        conversation_id: int,
        sender_id: str,
        content: str,
        message_type: MessageType = MessageType.TEXT,
    ) -> Message:
        """Store a message and bump the conversation to the top of activity lists.

        Only participants may post into a conversation.
        """

        with self._transaction() as session:
            conversation = session.get(Conversation, conversation_id)
            if conversation is None:
                raise NotFoundError(f"Conversation {conversation_id} not found")
            self._require_user(sender_id)
            if not self.is_participant(conversation_id, sender_id):
                raise InvalidOperationError(
                    f"User {sender_id!r} is not a participant of conversation {conversation_id}"
                )
            message = Message(
                conversation_id=conversation_id,
                sender_id=sender_id,
                content=content,
                message_type=message_type,
            )
            session.add(message)
            conversation.updated_at = _utcnow()
        self._session.refresh(message)
        return message

    def create_conversation(
        self, participant_ids: Iterable[str], name: str | None = None
    ) -> Conversation:
        """Create a conversation with its participants in one transaction.

        ``is_group`` is derived from the de-duplicated participant count and
        is not recomputed afterwards.
        """

        unique_ids = list(dict.fromkeys(participant_ids))
        if not unique_ids:
            raise InvalidOperationError("A conversation needs at least one participant")

        with self._transaction() as session:
            existing = set(
                session.execute(select(User.id).where(User.id.in_(unique_ids))).scalars()
            )
            missing = [user_id for user_id in unique_ids if user_id not in existing]
            if missing:
                raise NotFoundError(f"Unknown users: {', '.join(missing)}")

            conversation = Conversation(name=name, is_group=len(unique_ids) > 2)
            conversation.participants = [
                ConversationParticipant(user_id=user_id) for user_id in unique_ids
            ]
            session.add(conversation)
        self._session.refresh(conversation)
        return conversation
