"""Speech dispatch: picks a TTS provider and returns the synthesized audio.

ElevenLabs reports through a callback on a worker thread, OpenAI is a plain
coroutine. ``bridge_callback`` turns the former into an awaitable so both
paths look the same to callers.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable
from typing import Any, Protocol

from pydantic import BaseModel, Field

from .errors import EmptyBodyError, SpeechBridgeError
from .providers.elevenlabs import SpeechCallback

logger = logging.getLogger("speechbridge")


class CallbackSpeechProvider(Protocol):
    def generate_speech_from(self, text: str, voice_id: str, callback: SpeechCallback) -> Any: ...


class SpeechSynthesizer(Protocol):
    async def synthesize(self, text: str) -> bytes: ...


class SpeechRequest(BaseModel):
    text: str = Field(min_length=1)
    voice_id: str | None = None
    prefer_secondary: bool = True

    model_config = {"frozen": True}


def bridge_callback(start: Callable[[SpeechCallback], Any]) -> asyncio.Future[bytes]:
    """Run a callback-style operation and expose its outcome as a future.

    Must be called with a running event loop. ``start`` receives a callback
    that may be invoked from any thread; the first invocation settles the
    future and later ones are ignored. A callback arriving after the future
    was cancelled is discarded.
    """
    loop = asyncio.get_running_loop()
    future: asyncio.Future[bytes] = loop.create_future()
    lock = threading.Lock()
    fired = False

    def settle(audio: bytes | None, error: SpeechBridgeError | None) -> None:
        if future.done():
            return
        if error is not None:
            future.set_exception(error)
        elif audio is None:
            future.set_exception(EmptyBodyError("No data received"))
        else:
            future.set_result(audio)

    def callback(audio: bytes | None, error: SpeechBridgeError | None) -> None:
        nonlocal fired
        with lock:
            if fired:
                logger.warning("TTS callback invoked more than once; ignoring")
                return
            fired = True
        try:
            loop.call_soon_threadsafe(settle, audio, error)
        except RuntimeError:
            # loop already closed
            logger.debug("TTS result arrived after the event loop closed; dropped")

    start(callback)
    return future


class SpeechDispatcher:
    """Routes a speech request to ElevenLabs or OpenAI.

    ElevenLabs is used only when it is preferred and a voice id is given;
    everything else goes to OpenAI. One outbound call per request, no retry
    and no caching. Provider errors propagate unchanged.
    """

    def __init__(self, elevenlabs: CallbackSpeechProvider, openai_tts: SpeechSynthesizer):
        self._elevenlabs = elevenlabs
        self._openai_tts = openai_tts

    async def generate_speech(
        self,
        text: str,
        voice_id: str | None = None,
        *,
        prefer_secondary: bool = True,
    ) -> bytes:
        request = SpeechRequest(text=text, voice_id=voice_id, prefer_secondary=prefer_secondary)
        return await self.dispatch(request)

    async def dispatch(self, request: SpeechRequest) -> bytes:
        if request.prefer_secondary and request.voice_id is not None:
            voice_id = request.voice_id
            logger.info(f"TTS via ElevenLabs (voice {voice_id}, {len(request.text)} chars)")
            return await bridge_callback(
                lambda callback: self._elevenlabs.generate_speech_from(
                    request.text, voice_id, callback
                )
            )

        logger.info(f"TTS via OpenAI ({len(request.text)} chars)")
        return await self._openai_tts.synthesize(request.text)
