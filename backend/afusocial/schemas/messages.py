"""Schemas for conversations and their messages."""

from datetime import datetime

from pydantic import Field, constr

from afusocial.models.enums import MessageType
from afusocial.schemas.base import APIModel


class ConversationCreate(APIModel):
    """Payload for creating a conversation. The caller is always added."""

    participant_ids: list[str] = Field(..., description="User IDs to include besides the caller")
    name: constr(strip_whitespace=True, min_length=1, max_length=128) | None = None


class ConversationRead(APIModel):
    """Summary of a conversation including participant ids."""

    id: int
    name: str | None = None
    is_group: bool = False
    participant_ids: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class MessageCreate(APIModel):
    """Payload for sending a message into a conversation."""

    content: constr(strip_whitespace=True, min_length=1, max_length=2000)
    message_type: MessageType = MessageType.TEXT


class MessageRead(APIModel):
    id: int
    conversation_id: int
    sender_id: str
    content: str
    message_type: MessageType = MessageType.TEXT
    created_at: datetime
