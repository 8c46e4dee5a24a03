"""Pydantic schemas for API payloads."""

from .ai import (
    AIChatRequest,
    AIChatResponse,
    ChatTurn,
    ContentSuggestionsRequest,
    ContentSuggestionsResponse,
    ImprovePostRequest,
    ImprovePostResponse,
)
from .messages import ConversationCreate, ConversationRead, MessageCreate, MessageRead
from .posts import CommentCreate, CommentRead, LikeRead, LikeResult, PostCreate, PostRead
from .users import FollowRead, FollowResult, UserRead, UserUpsert

__all__ = [
    "UserUpsert",
    "UserRead",
    "FollowRead",
    "FollowResult",
    "PostCreate",
    "PostRead",
    "LikeRead",
    "LikeResult",
    "CommentCreate",
    "CommentRead",
    "ConversationCreate",
    "ConversationRead",
    "MessageCreate",
    "MessageRead",
    "ChatTurn",
    "AIChatRequest",
    "AIChatResponse",
    "ImprovePostRequest",
    "ImprovePostResponse",
    "ContentSuggestionsRequest",
    "ContentSuggestionsResponse",
]
