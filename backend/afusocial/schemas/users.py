"""Schemas related to user profiles and follow relationships."""

from datetime import datetime

from pydantic import Field, constr

from afusocial.schemas.base import APIModel


class UserUpsert(APIModel):
    """Profile data synced from the identity provider."""

    id: constr(strip_whitespace=True, min_length=1, max_length=255)
    email: constr(strip_whitespace=True, max_length=255) | None = None
    first_name: constr(strip_whitespace=True, max_length=128) | None = None
    last_name: constr(strip_whitespace=True, max_length=128) | None = None
    profile_image_url: constr(max_length=512) | None = None
    username: constr(strip_whitespace=True, min_length=1, max_length=64) | None = None
    bio: str | None = None
    verified: bool | None = None


class UserRead(APIModel):
    """Public representation of a user including denormalized counters."""

    id: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    profile_image_url: str | None = None
    username: str | None = None
    bio: str | None = None
    verified: bool = False
    followers_count: int = 0
    following_count: int = 0
    posts_count: int = 0
    created_at: datetime
    updated_at: datetime


class FollowRead(APIModel):
    """Single follow edge."""

    id: int
    follower_id: str
    following_id: str
    created_at: datetime


class FollowResult(APIModel):
    """Outcome of a follow or unfollow request."""

    following: bool
    changed: bool = Field(..., description="False when the request did not alter state")
