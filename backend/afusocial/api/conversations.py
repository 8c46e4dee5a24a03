"""Direct and group conversation endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from afusocial.api.deps import get_current_user, get_storage, require_participant
from afusocial.models import Conversation, Message, User
from afusocial.schemas import ConversationCreate, ConversationRead, MessageCreate, MessageRead
from afusocial.services import DatabaseStorage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/conversations", tags=["conversations"])


@router.get("", response_model=list[ConversationRead])
def list_conversations(
    storage: DatabaseStorage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
) -> list[Conversation]:
    """Return the caller's conversations, most recently active first."""

    return storage.get_user_conversations(current_user.id)


@router.post("", response_model=ConversationRead, status_code=status.HTTP_201_CREATED)
def create_conversation(
    payload: ConversationCreate,
    storage: DatabaseStorage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
) -> Conversation:
    """Create a conversation between the caller and the listed users.

    More than two participants in total makes it a group conversation.
    """

    others = [user_id for user_id in payload.participant_ids if user_id != current_user.id]
    if not others:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="At least one other participant is required",
        )
    conversation = storage.create_conversation([current_user.id, *others], payload.name)
    logger.info(
        "User %s created conversation %s with %d participants",
        current_user.id,
        conversation.id,
        len(conversation.participants),
    )
    return conversation


@router.get("/{conversation_id}/messages", response_model=list[MessageRead])
def list_messages(
    conversation_id: int,
    storage: DatabaseStorage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
) -> list[Message]:
    require_participant(storage, conversation_id, current_user.id)
    return storage.get_conversation_messages(conversation_id)


@router.post(
    "/{conversation_id}/messages",
    response_model=MessageRead,
    status_code=status.HTTP_201_CREATED,
)
def create_message(
    conversation_id: int,
    payload: MessageCreate,
    storage: DatabaseStorage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
) -> Message:
    require_participant(storage, conversation_id, current_user.id)
    return storage.create_message(
        conversation_id=conversation_id,
        sender_id=current_user.id,
        content=payload.content,
        message_type=payload.message_type,
    )
