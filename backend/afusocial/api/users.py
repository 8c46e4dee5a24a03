"""User profile and follow endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from afusocial.api.deps import get_current_user, get_storage
from afusocial.models import Follow, User
from afusocial.schemas import FollowRead, FollowResult, UserRead
from afusocial.services import DatabaseStorage

router = APIRouter(prefix="/users", tags=["users"])


def _require_user(user_id: str, storage: DatabaseStorage) -> User:
    user = storage.get_user(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("/by-username/{username}", response_model=UserRead)
def read_user_by_username(
    username: str,
    storage: DatabaseStorage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
) -> User:
    user = storage.get_user_by_username(username)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("/{user_id}", response_model=UserRead)
def read_user(
    user_id: str,
    storage: DatabaseStorage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
) -> User:
    return _require_user(user_id, storage)


@router.post("/{user_id}/follow", response_model=FollowResult)
def follow_user(
    user_id: str,
    storage: DatabaseStorage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
) -> FollowResult:
    """Follow another user. Repeating the request changes nothing."""

    changed = storage.follow_user(current_user.id, user_id)
    return FollowResult(following=True, changed=changed)


@router.delete("/{user_id}/follow", response_model=FollowResult)
def unfollow_user(
    user_id: str,
    storage: DatabaseStorage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
) -> FollowResult:
    changed = storage.unfollow_user(current_user.id, user_id)
    return FollowResult(following=False, changed=changed)


@router.get("/{user_id}/followers", response_model=list[FollowRead])
def list_followers(
    user_id: str,
    storage: DatabaseStorage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
) -> list[Follow]:
    _require_user(user_id, storage)
    return storage.get_user_followers(user_id)


@router.get("/{user_id}/following", response_model=list[FollowRead])
def list_following(
    user_id: str,
    storage: DatabaseStorage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
) -> list[Follow]:
    _require_user(user_id, storage)
    return storage.get_user_following(user_id)
