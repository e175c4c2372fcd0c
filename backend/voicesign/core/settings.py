from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Configure .env loading from the project root and ignore unknown keys
    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).resolve().parents[3] / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    # ------------------------------------------------------------------
    # Speech-to-text (OpenAI Whisper compatible)
    # ------------------------------------------------------------------
    OPENAI_API_KEY: str | None = None
    TRANSCRIPTION_URL: str = "https://api.openai.com/v1/audio/transcriptions"
    TRANSCRIPTION_MODEL: str = "whisper-1"
    TRANSCRIPTION_LANGUAGE: str = "th"
    AUDIO_CHUNK_SIZE: int = 32768

    # ------------------------------------------------------------------
    # Summarization (Typhoon chat completions)
    # ------------------------------------------------------------------
    TYPHOON_API_KEY: str | None = None
    SUMMARIZE_URL: str = "https://api.opentyphoon.ai/v1/chat/completions"
    SUMMARIZE_MODEL: str = "typhoon-v2.1-12b-instruct"
    SUMMARIZE_MAX_TOKENS: int = 2048
    SUMMARIZE_TEMPERATURE: float = 0.2
    SUMMARY_FALLBACK_CHARS: int = 200

    # ------------------------------------------------------------------
    # Outbound HTTP policy
    # ------------------------------------------------------------------
    UPSTREAM_TIMEOUT_SECONDS: float = 60.0
    UPSTREAM_MAX_RETRIES: int = 0

    CORS_ALLOW_ORIGIN: str = "*"

    @field_validator("AUDIO_CHUNK_SIZE")
    @classmethod
    def chunk_size_on_base64_quantum(cls, value: int) -> int:
        if value <= 0 or value % 4:
            raise ValueError("AUDIO_CHUNK_SIZE must be a positive multiple of 4")
        return value


@lru_cache
def get_settings() -> Settings:
    """
    Load settings once per process.

    Used as a FastAPI dependency so tests can swap it out through
    ``app.dependency_overrides``.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
