from __future__ import annotations

from enum import Enum


class MessageType(str, Enum):
    """Kinds of payload a conversation message can carry."""

    TEXT = "text"
    IMAGE = "image"
    SYSTEM = "system"


class ChatRole(str, Enum):
    """Roles accepted in AI assistant conversation history."""

    USER = "user"
    ASSISTANT = "assistant"
