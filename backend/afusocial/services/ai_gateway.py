"""Gateway to the hosted chat-completion API behind the AI assistant."""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable

import httpx

from afusocial.config import Settings
from afusocial.schemas import ChatTurn

logger = logging.getLogger(__name__)

ASSISTANT_SYSTEM_PROMPT = (
    "You are AfuAI, an intelligent assistant integrated into AfuChat, a social media platform. "
    "You help users with content creation, analysis, coding, creative brainstorming, and various "
    "tasks. Be helpful, friendly, and concise in your responses. Keep responses engaging and "
    "relevant to social media and content creation when appropriate."
)
SUGGESTIONS_SYSTEM_PROMPT = (
    "You are a social media content assistant. Generate 5 engaging post ideas for the given "
    "topic. Return them as a JSON object with a \"suggestions\" array of strings. Each suggestion "
    "should be a complete post idea, not just a title."
)
IMPROVE_SYSTEM_PROMPT = (
    "You are a social media writing assistant. Improve the given post to make it more engaging, "
    "clear, and shareable while maintaining the original message and tone. Keep it concise and "
    "within social media character limits."
)
FALLBACK_REPLY = "I apologize, but I couldn't generate a response. Please try again."

_UPSTREAM_ERRORS = (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError)


class AIGatewayError(Exception):
    """Raised when a completion request cannot be fulfilled."""


class AIGateway:
    """Stateless wrapper around ``POST {base_url}/chat/completions``.

    Pass ``client`` to reuse a connection pool or to substitute a transport in
    tests; otherwise a short-lived client is opened per request.
    """

    def __init__(
        self,
        api_key: str | None,
        *,
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-4o",
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self._client = client

    @classmethod
    def from_settings(
        cls, settings: Settings, client: httpx.AsyncClient | None = None
    ) -> "AIGateway":
        return cls(
            settings.openai_api_key,
            base_url=settings.ai_api_base_url,
            model=settings.ai_model,
            timeout=settings.ai_request_timeout_seconds,
            client=client,
        )

    def _get_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def _post(self, payload: dict[str, Any]) -> httpx.Response:
        url = f"{self.base_url}/chat/completions"
        if self._client is not None:
            return await self._client.post(url, json=payload, headers=self._get_headers())
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(url, json=payload, headers=self._get_headers())

    async def _complete(
        self,
        messages: list[dict[str, str]],
        *,
        max_tokens: int,
        temperature: float | None = None,
        json_output: bool = False,
    ) -> str | None:
        """Run one completion and return the first choice's content.

        Raises:
            AIGatewayError: If no credential is configured.
            httpx.HTTPError: If the request fails or returns a non-2xx status.
            ValueError, KeyError, IndexError, TypeError: If the body is malformed.
        """
        if not self.api_key:
            raise AIGatewayError("AI assistant is not configured")

        payload: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "max_tokens": max_tokens,
        }
        if temperature is not None:
            payload["temperature"] = temperature
        if json_output:
            payload["response_format"] = {"type": "json_object"}

        response = await self._post(payload)
        response.raise_for_status()
        body = response.json()
        return body["choices"][0]["message"]["content"]

    async def generate_response(self, message: str, history: Iterable[ChatTurn] = ()) -> str:
        """Answer ``message`` given prior turns; the caller resends full history."""

        messages = [{"role": "system", "content": ASSISTANT_SYSTEM_PROMPT}]
        messages.extend({"role": turn.role.value, "content": turn.content} for turn in history)
        messages.append({"role": "user", "content": message})
        try:
            content = await self._complete(messages, max_tokens=500, temperature=0.7)
        except _UPSTREAM_ERRORS as exc:
            logger.exception("Chat completion failed")
            raise AIGatewayError(
                "Failed to generate AI response. Please check your API key and try again."
            ) from exc
        return content or FALLBACK_REPLY

    async def generate_content_suggestions(self, topic: str) -> list[str]:
        """Return up to five post ideas for ``topic``."""

        messages = [
            {"role": "system", "content": SUGGESTIONS_SYSTEM_PROMPT},
            {"role": "user", "content": f"Generate 5 social media post ideas about: {topic}"},
        ]
        try:
            content = await self._complete(messages, max_tokens=400, json_output=True)
            result = json.loads(content or '{"suggestions": []}')
        except _UPSTREAM_ERRORS as exc:
            logger.exception("Content suggestion request failed")
            raise AIGatewayError("Failed to generate content suggestions.") from exc

        suggestions = result.get("suggestions") if isinstance(result, dict) else None
        if not isinstance(suggestions, list):
            return []
        return [item for item in suggestions if isinstance(item, str)]

    async def improve_post(self, content: str) -> str:
        """Rewrite a draft post; falls back to the original text on an empty reply."""

        messages = [
            {"role": "system", "content": IMPROVE_SYSTEM_PROMPT},
            {"role": "user", "content": f'Improve this social media post: "{content}"'},
        ]
        try:
            improved = await self._complete(messages, max_tokens=200, temperature=0.7)
        except _UPSTREAM_ERRORS as exc:
            logger.exception("Post improvement request failed")
            raise AIGatewayError("Failed to improve post.") from exc
        return improved or content
