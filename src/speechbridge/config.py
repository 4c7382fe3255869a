"""Configuration via environment variables."""

from __future__ import annotations

from pydantic import BaseModel, SecretStr
from pydantic_settings import BaseSettings


class ProviderCredentials(BaseModel):
    """One API key per provider. Immutable; masked when printed."""

    openai_api_key: SecretStr
    elevenlabs_api_key: SecretStr = SecretStr("")

    model_config = {"frozen": True}


class Settings(BaseSettings):
    """Client defaults. All values can be set via SPEECHBRIDGE_* environment
    variables; nothing is read from or written to disk."""

    # Credentials
    openai_api_key: SecretStr = SecretStr("")
    elevenlabs_api_key: SecretStr = SecretStr("")

    # Endpoints
    openai_base_url: str = "https://api.openai.com/v1"
    elevenlabs_base_url: str = "https://api.elevenlabs.io/v1"

    # Chat
    chat_model: str = "gpt-4"
    request_timeout: float = 60.0

    # OpenAI TTS
    tts_model: str = "tts-1"
    tts_voice: str = "alloy"
    tts_format: str = "aac"

    # ElevenLabs TTS
    elevenlabs_model_id: str = "eleven_multilingual_v2"

    # Transcription
    transcription_model: str = "whisper-1"
    transcription_timeout: float = 30.0

    model_config = {"env_prefix": "SPEECHBRIDGE_", "extra": "ignore"}

    def credentials(self) -> ProviderCredentials:
        """Snapshot the configured keys into an immutable credentials object."""
        return ProviderCredentials(
            openai_api_key=self.openai_api_key,
            elevenlabs_api_key=self.elevenlabs_api_key,
        )


settings = Settings()
