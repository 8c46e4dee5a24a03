"""Schemas for the AI assistant endpoints."""

from pydantic import Field, constr

from afusocial.models.enums import ChatRole
from afusocial.schemas.base import APIModel


class ChatTurn(APIModel):
    """One prior turn of an assistant conversation."""

    role: ChatRole
    content: str


class AIChatRequest(APIModel):
    message: constr(strip_whitespace=True, min_length=1, max_length=4000)
    conversation_history: list[ChatTurn] = Field(default_factory=list)


class AIChatResponse(APIModel):
    response: str


class ImprovePostRequest(APIModel):
    content: constr(strip_whitespace=True, min_length=1, max_length=5000)


class ImprovePostResponse(APIModel):
    improved_content: str


class ContentSuggestionsRequest(APIModel):
    topic: constr(strip_whitespace=True, min_length=1, max_length=200)


class ContentSuggestionsResponse(APIModel):
    suggestions: list[str] = Field(default_factory=list)
