"""Search endpoints for users and posts."""

from fastapi import APIRouter, Depends, Query

from afusocial.api.deps import get_current_user, get_storage
from afusocial.models import Post, User
from afusocial.schemas import PostRead, UserRead
from afusocial.services import DatabaseStorage

router = APIRouter(prefix="/search", tags=["search"])


@router.get("/users", response_model=list[UserRead])
def search_users(
    q: str = Query(..., min_length=1, max_length=100),
    storage: DatabaseStorage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
) -> list[User]:
    return storage.search_users(q)


@router.get("/posts", response_model=list[PostRead])
def search_posts(
    q: str = Query(..., min_length=1, max_length=100),
    storage: DatabaseStorage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
) -> list[Post]:
    return storage.search_posts(q)
