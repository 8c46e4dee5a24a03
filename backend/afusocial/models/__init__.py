"""Database models package."""

from .base import Base
from .enums import ChatRole, MessageType
from .social import (
    Comment,
    Conversation,
    ConversationParticipant,
    Follow,
    Like,
    Message,
    Post,
    User,
)

__all__ = [
    "Base",
    "User",
    "Post",
    "Like",
    "Comment",
    "Follow",
    "Conversation",
    "ConversationParticipant",
    "Message",
    "MessageType",
    "ChatRole",
]
