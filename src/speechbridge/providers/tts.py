"""OpenAI TTS provider: text-to-speech synthesis.

The audio comes back as a stream of byte chunks that is collected into a
single buffer before returning.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Literal

import httpx
from pydantic import BaseModel, SecretStr, ValidationError

from ..config import settings
from ..errors import HTTPStatusError, NetworkError, SerializationError

logger = logging.getLogger("speechbridge")

PROVIDER = "openai"

Voice = Literal["alloy", "echo", "fable", "onyx", "nova", "shimmer"]
AudioFormat = Literal["mp3", "opus", "aac", "flac", "wav", "pcm"]


class OpenAISpeechRequest(BaseModel):
    model: str
    input: str
    voice: Voice
    response_format: AudioFormat


async def collect_chunks(chunks: AsyncIterator[bytes]) -> bytes:
    """Concatenate every chunk in delivery order."""
    data = bytearray()
    async for chunk in chunks:
        data += chunk
    return bytes(data)


class OpenAISpeechClient:
    """Client for the OpenAI ``/audio/speech`` endpoint."""

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

    async def synthesize(
        self,
        text: str,
        model: str | None = None,
        voice: str | None = None,
        response_format: str | None = None,
    ) -> bytes:
        """Synthesize speech from text. Returns the complete audio buffer."""
        try:
            payload = OpenAISpeechRequest(
                model=model or settings.tts_model,
                input=text,
                voice=voice or settings.tts_voice,
                response_format=response_format or settings.tts_format,
            )
        except ValidationError as e:
            raise SerializationError(f"Invalid speech request: {e}", PROVIDER) from e
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key.get_secret_value()}",
        }
        url = f"{self._base_url.rstrip('/')}/audio/speech"

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                async with client.stream(
                    "POST",
                    url,
                    json=payload.model_dump(),
                    headers=headers,
                ) as resp:
                    if resp.status_code != 200:
                        await resp.aread()
                        logger.warning(f"OpenAI TTS returned {resp.status_code}")
                        raise HTTPStatusError(resp.status_code, resp.text, PROVIDER)
                    audio = await collect_chunks(resp.aiter_bytes())
        except httpx.HTTPError as e:
            raise NetworkError(f"Network error: {e}", PROVIDER, original_error=e) from e

        logger.debug(f"OpenAI TTS returned {len(audio)} bytes ({payload.response_format})")
        return audio


async def synthesize(
    text: str,
    voice: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> bytes:
    """Synthesize speech with the configured OpenAI key and defaults."""
    client = OpenAISpeechClient(settings.openai_api_key, transport=transport)
    return await client.synthesize(text, voice=voice)
