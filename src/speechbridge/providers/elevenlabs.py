"""ElevenLabs TTS provider: callback-based text-to-speech.

The HTTP request runs on a worker thread. The callback is invoked exactly
once: on that worker thread, or on the caller's thread when the request
cannot even be built.
"""

from __future__ import annotations

import logging
import re
import threading
from collections.abc import Callable

import httpx
from pydantic import BaseModel, SecretStr
from pydantic_core import PydanticSerializationError

from ..config import settings
from ..errors import (
    EmptyBodyError,
    HTTPStatusError,
    InvalidURLError,
    NetworkError,
    SerializationError,
    SpeechBridgeError,
)

logger = logging.getLogger("speechbridge")

PROVIDER = "elevenlabs"

VOICE_ID_PATTERN = re.compile(r"[A-Za-z0-9._~-]+")

SpeechCallback = Callable[[bytes | None, SpeechBridgeError | None], None]


class VoiceSettings(BaseModel):
    model_id: str
    stability: float = 0.75
    similarity_boost: float = 0.75


class ElevenLabsSpeechRequest(BaseModel):
    text: str
    voice_settings: VoiceSettings


class ElevenLabsClient:
    """Client for the ElevenLabs text-to-speech endpoint."""

    def __init__(
        self,
        api_key: SecretStr,
        base_url: str | None = None,
        model_id: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self._api_key = api_key
        self._base_url = base_url or settings.elevenlabs_base_url
        self._model_id = model_id or settings.elevenlabs_model_id
        self._timeout = timeout or settings.request_timeout
        self._transport = transport

    def generate_speech_from(
        self, text: str, voice_id: str, callback: SpeechCallback
    ) -> threading.Thread | None:
        """Synthesize ``text`` with ``voice_id`` and report through ``callback``.

        The callback receives ``(audio, None)`` on success or ``(None, error)``
        on failure. Returns the worker thread, or None when the request failed
        before being sent.
        """
        try:
            url = self._speech_url(voice_id)
            body = self._serialize(text)
        except SpeechBridgeError as e:
            logger.warning(f"ElevenLabs request not sent: {e}")
            callback(None, e)
            return None

        worker = threading.Thread(
            target=self._run,
            args=(url, body, callback),
            name=f"elevenlabs-tts-{voice_id}",
            daemon=True,
        )
        worker.start()
        return worker

    def _speech_url(self, voice_id: str) -> httpx.URL:
        if not VOICE_ID_PATTERN.fullmatch(voice_id or ""):
            raise InvalidURLError(f"Invalid URL: bad voice id {voice_id!r}", PROVIDER)
        try:
            url = httpx.URL(f"{self._base_url.rstrip('/')}/text-to-speech/{voice_id}")
        except httpx.InvalidURL as e:
            raise InvalidURLError(f"Invalid URL: {e}", PROVIDER) from e
        if url.scheme not in ("http", "https") or not url.host:
            raise InvalidURLError(f"Invalid URL: {url}", PROVIDER)
        return url

    def _serialize(self, text: str) -> bytes:
        payload = ElevenLabsSpeechRequest(
            text=text,
            voice_settings=VoiceSettings(model_id=self._model_id),
        )
        try:
            return payload.model_dump_json().encode()
        except (PydanticSerializationError, TypeError, ValueError) as e:
            raise SerializationError(f"Failed to serialize JSON: {e}", PROVIDER) from e

    def _run(self, url: httpx.URL, body: bytes, callback: SpeechCallback) -> None:
        try:
            audio = self._post(url, body)
        except SpeechBridgeError as e:
            logger.warning(f"ElevenLabs TTS failed: {e}")
            callback(None, e)
            return
        logger.debug(f"ElevenLabs TTS returned {len(audio)} bytes")
        callback(audio, None)

    def _post(self, url: httpx.URL, body: bytes) -> bytes:
        headers = {
            "Content-Type": "application/json",
            "xi-api-key": self._api_key.get_secret_value(),
        }
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                resp = client.post(url, content=body, headers=headers)
        except httpx.HTTPError as e:
            raise NetworkError(f"Network error: {e}", PROVIDER, original_error=e) from e

        if not 200 <= resp.status_code <= 299:
            raise HTTPStatusError(resp.status_code, resp.text, PROVIDER)
        if not resp.content:
            raise EmptyBodyError("No data received", PROVIDER)
        return resp.content
