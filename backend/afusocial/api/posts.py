"""Feed, like and comment endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from afusocial.api.deps import get_current_user, get_storage
from afusocial.config import get_settings
from afusocial.models import Comment, Like, Post, User
from afusocial.schemas import (
    CommentCreate,
    CommentRead,
    LikeRead,
    LikeResult,
    PostCreate,
    PostRead,
)
from afusocial.services import DatabaseStorage

router = APIRouter(prefix="/posts", tags=["posts"])
settings = get_settings()


def _require_post(post_id: int, storage: DatabaseStorage) -> Post:
    post = storage.get_post(post_id)
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return post


@router.get("", response_model=list[PostRead])
def list_posts(
    limit: int = Query(default=settings.feed_page_size_default, ge=1, le=settings.feed_page_size_max),
    offset: int = Query(default=0, ge=0),
    before: int | None = Query(default=None, ge=1, description="Only return posts older than this id"),
    storage: DatabaseStorage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
) -> list[Post]:
    """Return a page of the global feed, newest first."""

    return storage.get_posts(limit, offset, before_id=before)


@router.post("", response_model=PostRead, status_code=status.HTTP_201_CREATED)
def create_post(
    payload: PostCreate,
    storage: DatabaseStorage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
) -> Post:
    if payload.author_id is not None and payload.author_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cannot post as another user")
    return storage.create_post(
        author_id=current_user.id,
        content=payload.content,
        image_url=payload.image_url,
    )


@router.get("/user/{user_id}", response_model=list[PostRead])
def list_user_posts(
    user_id: str,
    storage: DatabaseStorage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
) -> list[Post]:
    return storage.get_posts_by_user(user_id)


@router.get("/{post_id}", response_model=PostRead)
def read_post(
    post_id: int,
    storage: DatabaseStorage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
) -> Post:
    return _require_post(post_id, storage)


@router.post("/{post_id}/like", response_model=LikeResult)
def like_post(
    post_id: int,
    storage: DatabaseStorage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
) -> LikeResult:
    """Like a post. Liking an already liked post changes nothing."""

    changed = storage.like_post(current_user.id, post_id)
    post = _require_post(post_id, storage)
    return LikeResult(liked=True, changed=changed, likes_count=post.likes_count)


@router.delete("/{post_id}/like", response_model=LikeResult)
def unlike_post(
    post_id: int,
    storage: DatabaseStorage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
) -> LikeResult:
    _require_post(post_id, storage)
    changed = storage.unlike_post(current_user.id, post_id)
    post = _require_post(post_id, storage)
    return LikeResult(liked=False, changed=changed, likes_count=post.likes_count)


@router.get("/{post_id}/likes", response_model=list[LikeRead])
def list_post_likes(
    post_id: int,
    storage: DatabaseStorage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
) -> list[Like]:
    _require_post(post_id, storage)
    return storage.get_post_likes(post_id)


@router.get("/{post_id}/comments", response_model=list[CommentRead])
def list_post_comments(
    post_id: int,
    storage: DatabaseStorage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
) -> list[Comment]:
    _require_post(post_id, storage)
    return storage.get_post_comments(post_id)


@router.post("/{post_id}/comments", response_model=CommentRead, status_code=status.HTTP_201_CREATED)
def create_comment(
    post_id: int,
    payload: CommentCreate,
    storage: DatabaseStorage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
) -> Comment:
    return storage.create_comment(
        author_id=current_user.id,
        post_id=post_id,
        content=payload.content,
    )
