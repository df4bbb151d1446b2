from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8-sig",
        case_sensitive=False,
        extra="ignore",
    )

    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_ROLE_KEY: str = ""
    APP_ENV: str = "local"
    LOG_LEVEL: str = "INFO"
    FRONTEND_CORS_ORIGINS: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://localhost:8888"],
    )

    # Gemini
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.0-flash"
    GEMINI_TIMEOUT_SECONDS: float = 12.0
    GEMINI_MAX_OUTPUT_TOKENS: int = 512
    GEMINI_TEMPERATURE: float = 0.2

    # Transcripts
    TRANSCRIPT_PROVIDER: Literal["http", "youtube_transcript_api"] = "http"
    TRANSCRIPT_API_URL: str = "https://transcript-microservice.fly.dev/transcript"
    TRANSCRIPT_TIMEOUT_SECONDS: float = 10.0
    TRANSCRIPT_LANGUAGES: list[str] = Field(default_factory=lambda: ["en"])
    TRANSCRIPT_MAX_CHARS: int = 3000

    # YouTube Data API
    YOUTUBE_API_BASE: str = "https://www.googleapis.com/youtube/v3"
    YOUTUBE_TIMEOUT_SECONDS: float = 15.0
    YOUTUBE_MAX_PAGES: int = 20

    # Enrichment batching
    ENRICH_DEFAULT_BATCH_SIZE: int = Field(default=5, ge=1)
    ENRICH_BATCH_DELAY_SECONDS: float = 2.0

    def validate_store(self) -> list[str]:
        """Return the missing settings needed to reach Supabase."""
        errors = []
        if not self.SUPABASE_URL:
            errors.append("SUPABASE_URL is required")
        if not self.SUPABASE_SERVICE_ROLE_KEY:
            errors.append("SUPABASE_SERVICE_ROLE_KEY is required")
        return errors

    def validate_gemini(self) -> list[str]:
        if not self.GEMINI_API_KEY:
            return ["GEMINI_API_KEY is required"]
        return []


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
