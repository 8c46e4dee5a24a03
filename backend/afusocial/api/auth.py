"""Endpoints describing the authenticated session."""

from fastapi import APIRouter, Depends

from afusocial.api.deps import get_current_user
from afusocial.models import User
from afusocial.schemas import UserRead

router = APIRouter()


@router.get("/user", response_model=UserRead)
def read_current_user(current_user: User = Depends(get_current_user)) -> User:
    """Return the user the bearer token belongs to."""

    return current_user
