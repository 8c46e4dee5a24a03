"""FastAPI dependencies for the API layer."""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import ValidationError
from sqlalchemy.orm import Session

from afusocial.config import get_settings
from afusocial.core.security import decode_access_token, extract_profile_claims
from afusocial.database import get_db
from afusocial.models import Conversation, User
from afusocial.schemas import UserUpsert
from afusocial.services import AIGateway, DatabaseStorage

settings = get_settings()

bearer_scheme = HTTPBearer(auto_error=False)


def get_storage(db: Session = Depends(get_db)) -> DatabaseStorage:
    """Storage layer bound to the request's database session."""

    return DatabaseStorage(
        db,
        search_limit=settings.search_result_limit,
        default_page_size=settings.feed_page_size_default,
    )


def get_ai_gateway() -> AIGateway:
    """AI gateway configured from the current settings."""

    return AIGateway.from_settings(get_settings())


def _credentials_error() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    storage: DatabaseStorage = Depends(get_storage),
) -> User:
    """Retrieve the current user from the identity provider's bearer token."""

    if credentials is None:
        raise _credentials_error()
    return get_user_from_token(credentials.credentials, storage)


def get_user_from_token(token: str, storage: DatabaseStorage) -> User:
    """Resolve a user from a JWT, syncing any profile claims it carries.

    Raises HTTP 401 when the token is invalid or names an unknown user without
    enough claims to create one.
    """

    payload = decode_access_token(token)
    sub = payload.get("sub")
    if sub is None or not str(sub).strip():
        raise _credentials_error()

    user_id = str(sub)
    user = storage.get_user(user_id)
    claims = extract_profile_claims(payload)
    if claims and (user is None or any(getattr(user, key) != value for key, value in claims.items())):
        try:
            profile = UserUpsert(id=user_id, **claims)
        except ValidationError:
            raise _credentials_error() from None
        user = storage.upsert_user(profile)

    if user is None:
        raise _credentials_error()
    return user


def require_participant(storage: DatabaseStorage, conversation_id: int, user_id: str) -> Conversation:
    """Ensure the conversation exists and the user belongs to it."""

    conversation = storage.get_conversation(conversation_id)
    if conversation is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found")
    if not storage.is_participant(conversation_id, user_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not a conversation participant")
    return conversation
