"""AI assistant endpoints backed by the chat-completion gateway."""

from fastapi import APIRouter, Depends, HTTPException, status

from afusocial.api.deps import get_ai_gateway, get_current_user
from afusocial.models import User
from afusocial.schemas import (
    AIChatRequest,
    AIChatResponse,
    ContentSuggestionsRequest,
    ContentSuggestionsResponse,
    ImprovePostRequest,
    ImprovePostResponse,
)
from afusocial.services import AIGateway, AIGatewayError

router = APIRouter(prefix="/ai", tags=["ai"])


def _upstream_failure(exc: AIGatewayError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.post("/chat", response_model=AIChatResponse)
async def chat(
    payload: AIChatRequest,
    gateway: AIGateway = Depends(get_ai_gateway),
    current_user: User = Depends(get_current_user),
) -> AIChatResponse:
    """Answer a message; the client resends the whole history every turn."""

    try:
        reply = await gateway.generate_response(payload.message, payload.conversation_history)
    except AIGatewayError as exc:
        raise _upstream_failure(exc) from exc
    return AIChatResponse(response=reply)


@router.post("/improve-post", response_model=ImprovePostResponse)
async def improve_post(
    payload: ImprovePostRequest,
    gateway: AIGateway = Depends(get_ai_gateway),
    current_user: User = Depends(get_current_user),
) -> ImprovePostResponse:
    try:
        improved = await gateway.improve_post(payload.content)
    except AIGatewayError as exc:
        raise _upstream_failure(exc) from exc
    return ImprovePostResponse(improved_content=improved)


@router.post("/content-suggestions", response_model=ContentSuggestionsResponse)
async def content_suggestions(
    payload: ContentSuggestionsRequest,
    gateway: AIGateway = Depends(get_ai_gateway),
    current_user: User = Depends(get_current_user),
) -> ContentSuggestionsResponse:
    try:
        suggestions = await gateway.generate_content_suggestions(payload.topic)
    except AIGatewayError as exc:
        raise _upstream_failure(exc) from exc
    return ContentSuggestionsResponse(suggestions=suggestions)
