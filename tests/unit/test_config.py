from __future__ import annotations

import pytest
from pydantic import ValidationError

from recipe_sync.app.config import Settings


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("GEMINI_MODEL", "TRANSCRIPT_PROVIDER", "ENRICH_DEFAULT_BATCH_SIZE", "TRANSCRIPT_MAX_CHARS"):
            monkeypatch.delenv(name, raising=False)
        settings = make_settings()
        assert settings.GEMINI_MODEL == "gemini-2.0-flash"
        assert settings.TRANSCRIPT_PROVIDER == "http"
        assert settings.ENRICH_DEFAULT_BATCH_SIZE == 5
        assert settings.TRANSCRIPT_MAX_CHARS == 3000

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("gemini_timeout_seconds", "30")
        monkeypatch.setenv("TRANSCRIPT_LANGUAGES", '["pt", "en"]')
        settings = make_settings()
        assert settings.GEMINI_TIMEOUT_SECONDS == 30.0
        assert settings.TRANSCRIPT_LANGUAGES == ["pt", "en"]

    def test_validate_store(self) -> None:
        assert make_settings(SUPABASE_URL="", SUPABASE_SERVICE_ROLE_KEY="").validate_store() == [
            "SUPABASE_URL is required",
            "SUPABASE_SERVICE_ROLE_KEY is required",
        ]
        assert make_settings(SUPABASE_URL="https://x.supabase.co", SUPABASE_SERVICE_ROLE_KEY="k").validate_store() == []

    def test_validate_gemini(self) -> None:
        assert make_settings(GEMINI_API_KEY="").validate_gemini() == ["GEMINI_API_KEY is required"]
        assert make_settings(GEMINI_API_KEY="key").validate_gemini() == []

    def test_rejects_unknown_transcript_provider(self) -> None:
        with pytest.raises(ValidationError):
            make_settings(TRANSCRIPT_PROVIDER="whisper")

    def test_rejects_zero_batch_size(self) -> None:
        with pytest.raises(ValidationError):
            make_settings(ENRICH_DEFAULT_BATCH_SIZE=0)
