"""ASR (Automatic Speech Recognition) provider: speech-to-text.

Uploads audio to the OpenAI Whisper transcription endpoint as a hand-built
multipart/form-data body and returns the plain-text transcript.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import SecretStr

from .. import multipart
from ..config import settings
from ..errors import DecodeError, HTTPStatusError, NetworkError

logger = logging.getLogger("speechbridge")

PROVIDER = "openai"

AUDIO_CONTENT_TYPE = "audio/mpeg"


class TranscriptionClient:
    """Client for the OpenAI ``/audio/transcriptions`` endpoint."""

    def __init__(
        self,
        api_key: SecretStr,
        base_url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._api_key = api_key
        self._base_url = base_url or settings.openai_base_url
        self._model = model or settings.transcription_model
        self._timeout = timeout or settings.transcription_timeout
        self._transport = transport

    def build_body(self, audio_data: bytes, filename: str) -> tuple[str, bytes]:
        """Return ``(boundary, body)`` for an upload of ``audio_data``."""
        fields: list[multipart.MultipartField] = [
            multipart.FileField("file", filename, audio_data, AUDIO_CONTENT_TYPE),
            multipart.TextField("model", self._model),
            multipart.TextField("response_format", "text"),
        ]
        boundary = multipart.make_boundary()
        while multipart.boundary_conflicts(boundary, fields):
            boundary = multipart.make_boundary()
        return boundary, multipart.encode(boundary, fields)

    async def transcribe(self, audio_data: bytes, filename: str = "recording.m4a") -> str:
        """Transcribe audio to text."""
        boundary, body = self.build_body(audio_data, filename)
        headers = {
            "Authorization": f"Bearer {self._api_key.get_secret_value()}",
            "Content-Type": multipart.content_type(boundary),
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.post(
                    f"{self._base_url.rstrip('/')}/audio/transcriptions",
                    headers=headers,
                    content=body,
                )
        except httpx.HTTPError as e:
            raise NetworkError(f"Network error: {e}", PROVIDER, original_error=e) from e

        if resp.status_code != 200:
            logger.warning(f"Transcription returned {resp.status_code}")
            raise HTTPStatusError(resp.status_code, resp.text, PROVIDER)

        try:
            text = resp.content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError("Invalid format: response is not UTF-8 text", PROVIDER) from e

        logger.debug(f"Transcribed {len(audio_data)} bytes into {len(text)} chars")
        return text


async def transcribe(
    audio_data: bytes,
    filename: str = "recording.m4a",
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """Transcribe audio with the configured OpenAI key."""
    client = TranscriptionClient(settings.openai_api_key, transport=transport)
    return await client.transcribe(audio_data, filename)
