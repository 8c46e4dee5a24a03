"""Schemas for posts, likes and comments."""

from datetime import datetime

from pydantic import constr

from afusocial.schemas.base import APIModel


class PostCreate(APIModel):
    """Payload accepted by ``POST /api/posts``."""

    content: constr(strip_whitespace=True, min_length=1, max_length=5000)
    author_id: str | None = None
    image_url: constr(strip_whitespace=True, max_length=512) | None = None


class PostRead(APIModel):
    id: int
    author_id: str
    content: str
    image_url: str | None = None
    likes_count: int = 0
    comments_count: int = 0
    created_at: datetime
    updated_at: datetime


class LikeRead(APIModel):
    id: int
    user_id: str
    post_id: int
    created_at: datetime


class LikeResult(APIModel):
    """Outcome of a like or unlike request."""

    liked: bool
    changed: bool
    likes_count: int


class CommentCreate(APIModel):
    """Payload accepted by ``POST /api/posts/{id}/comments``."""

    content: constr(strip_whitespace=True, min_length=1, max_length=2000)


class CommentRead(APIModel):
    id: int
    author_id: str
    post_id: int
    content: str
    created_at: datetime
