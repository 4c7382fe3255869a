"""LLM provider: OpenAI chat completion."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Literal

import httpx
from pydantic import BaseModel, SecretStr, ValidationError

from ..config import settings
from ..errors import DecodeError, EmptyBodyError, HTTPStatusError, NetworkError

logger = logging.getLogger("speechbridge")

PROVIDER = "openai"

DEFAULT_ASSISTANT_PROMPT = (
    "You are a helpful voice assistant. "
    "Be concise and direct, and keep the tone light."
)


class ChatMessage(BaseModel):
    role: Literal["system", "assistant", "user"]
    content: str


class ChatCompletionRequest(BaseModel):
    model: str
    messages: list[ChatMessage]


class _ChoiceMessage(BaseModel):
    content: str | None = None


class _Choice(BaseModel):
    message: _ChoiceMessage


class ChatCompletionResponse(BaseModel):
    choices: list[_Choice]


class ChatClient:
    """Client for the OpenAI ``/chat/completions`` endpoint."""

    def __init__(
        self,
        api_key: SecretStr,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._api_key = api_key
        self._base_url = base_url or settings.openai_base_url
        self._timeout = timeout or settings.request_timeout
        self._transport = transport

    async def prompt(
        self,
        prompt: str,
        *,
        model: str | None = None,
        assistant_prompt: str = DEFAULT_ASSISTANT_PROMPT,
        previous: Sequence[ChatMessage] = (),
    ) -> str:
        """Send ``prompt`` after the assistant prompt and prior conversation.

        Returns the content of the first completion choice.
        """
        request = ChatCompletionRequest(
            model=model or settings.chat_model,
            messages=[
                ChatMessage(role="assistant", content=assistant_prompt),
                *previous,
                ChatMessage(role="user", content=prompt),
            ],
        )
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key.get_secret_value()}",
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.post(
                    f"{self._base_url.rstrip('/')}/chat/completions",
                    json=request.model_dump(),
                    headers=headers,
                )
        except httpx.HTTPError as e:
            raise NetworkError(f"Network error: {e}", PROVIDER, original_error=e) from e

        if resp.status_code != 200:
            logger.warning(f"Chat completion returned {resp.status_code}")
            raise HTTPStatusError(resp.status_code, resp.text, PROVIDER)

        try:
            completion = ChatCompletionResponse.model_validate_json(resp.content)
        except ValidationError as e:
            raise DecodeError(f"Unexpected chat completion payload: {e}", PROVIDER) from e

        if not completion.choices or completion.choices[0].message.content is None:
            raise EmptyBodyError("No Response", PROVIDER)
        return completion.choices[0].message.content


async def chat(
    prompt: str,
    previous: Sequence[ChatMessage] = (),
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """Prompt the configured chat model with the configured OpenAI key."""
    client = ChatClient(settings.openai_api_key, transport=transport)
    return await client.prompt(prompt, previous=previous)
