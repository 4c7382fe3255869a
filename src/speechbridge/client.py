"""VoiceClient: one object for chat, speech synthesis and transcription."""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence

import httpx

from .config import ProviderCredentials, settings
from .providers.asr import TranscriptionClient
from .providers.elevenlabs import ElevenLabsClient, SpeechCallback
from .providers.llm import DEFAULT_ASSISTANT_PROMPT, ChatClient, ChatMessage
from .providers.tts import OpenAISpeechClient
from .speech import SpeechDispatcher

logger = logging.getLogger("speechbridge")


class VoiceClient:
    """OpenAI chat/TTS/transcription plus ElevenLabs voices.

    Credentials are fixed at construction. The TTS provider preference is a
    per-call argument of ``generate_speech``, not client state.
    """

    def __init__(
        self,
        credentials: ProviderCredentials,
        transport: httpx.AsyncBaseTransport | None = None,
        elevenlabs_transport: httpx.BaseTransport | None = None,
    ):
        self._credentials = credentials
        self.chat = ChatClient(credentials.openai_api_key, transport=transport)
        self.openai_tts = OpenAISpeechClient(credentials.openai_api_key, transport=transport)
        self.transcriber = TranscriptionClient(credentials.openai_api_key, transport=transport)
        self.elevenlabs = ElevenLabsClient(
            credentials.elevenlabs_api_key, transport=elevenlabs_transport
        )
        self.dispatcher = SpeechDispatcher(self.elevenlabs, self.openai_tts)
        logger.debug(f"VoiceClient ready (OpenAI at {settings.openai_base_url})")

    @classmethod
    def from_settings(cls) -> VoiceClient:
        """Build a client from SPEECHBRIDGE_* environment variables."""
        return cls(settings.credentials())

    async def prompt_chat(
        self,
        prompt: str,
        *,
        model: str | None = None,
        assistant_prompt: str = DEFAULT_ASSISTANT_PROMPT,
        previous: Sequence[ChatMessage] = (),
    ) -> str:
        return await self.chat.prompt(
            prompt, model=model, assistant_prompt=assistant_prompt, previous=previous
        )

    def generate_speech_from_elevenlabs(
        self, text: str, voice_id: str, callback: SpeechCallback
    ) -> threading.Thread | None:
        return self.elevenlabs.generate_speech_from(text, voice_id, callback)

    async def generate_speech_from_openai(
        self,
        text: str,
        model: str | None = None,
        voice: str | None = None,
        response_format: str | None = None,
    ) -> bytes:
        return await self.openai_tts.synthesize(text, model, voice, response_format)

    async def generate_speech(
        self,
        text: str,
        voice_id: str | None = None,
        *,
        prefer_secondary: bool = True,
    ) -> bytes:
        """Synthesize speech, preferring ElevenLabs when a voice id is given."""
        return await self.dispatcher.generate_speech(
            text, voice_id, prefer_secondary=prefer_secondary
        )

    async def transcribe(self, audio_data: bytes, filename: str = "recording.m4a") -> str:
        return await self.transcriber.transcribe(audio_data, filename)
