from __future__ import annotations

import json
import logging
from pathlib import Path

import httpx
from google import genai
from google.genai import types
from google.genai.errors import APIError, ClientError

from recipe_sync.services.errors import (
    GenerationError,
    NetworkTimeoutError,
    RateLimitedError,
    ServiceError,
)

logger = logging.getLogger(__name__)


class GeminiConfigurationError(ServiceError):
    pass


class GeminiPromptError(ServiceError):
    pass


class GeminiClient:
    def __init__(
        self,
        api_key: str,
        model_name: str = "gemini-2.0-flash",
        timeout_seconds: float = 12.0,
        temperature: float = 0.2,
        max_output_tokens: int = 512,
        client: genai.Client | None = None,
    ) -> None:
        self.api_key = api_key
        self.model_name = model_name
        self.timeout_seconds = timeout_seconds
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self._client = client or self._configure_api()

    def _configure_api(self) -> genai.Client:
        if not self.api_key:
            raise GeminiConfigurationError("Missing Google API key.")
        return genai.Client(
            api_key=self.api_key,
            http_options=types.HttpOptions(timeout=int(self.timeout_seconds * 1000)),
        )

    def _load_system_prompt(self, file_path: Path) -> str:
        try:
            return file_path.read_text(encoding="utf-8")
        except FileNotFoundError as not_found_error:
            raise GeminiPromptError(f"Prompt file not found: {file_path}") from not_found_error
        except OSError as io_error:
            raise GeminiPromptError(f"Unable to read prompt file: {io_error}") from io_error

    def _serialize_prompt(self, user_prompt: str | dict[str, str | int | float | list | dict]) -> str:
        if isinstance(user_prompt, str):
            return user_prompt
        try:
            return json.dumps(user_prompt, indent=2, ensure_ascii=False)
        except TypeError:
            return str(user_prompt)

    def generate_content(
        self,
        user_prompt: str | dict[str, str | int | float | list | dict],
        system_prompt_path: Path,
    ) -> str:
        config = types.GenerateContentConfig(
            system_instruction=self._load_system_prompt(system_prompt_path),
            temperature=self.temperature,
            max_output_tokens=self.max_output_tokens,
        )
        payload = self._serialize_prompt(user_prompt)

        try:
            response = self._client.models.generate_content(
                model=self.model_name,
                contents=payload,
                config=config,
            )
        except ClientError as err:
            if err.code == 429 or "RESOURCE_EXHAUSTED" in str(err):
                raise RateLimitedError("Gemini API rate limit reached.") from err
            raise GenerationError(f"Gemini rejected the request: {err}") from err
        except APIError as err:
            raise GenerationError(f"Gemini API error: {err}") from err
        except httpx.TimeoutException as err:
            raise NetworkTimeoutError(f"gemini:{self.model_name}", self.timeout_seconds) from err
        except httpx.HTTPError as err:
            raise GenerationError(f"Gemini unreachable: {err}") from err

        text = response.text
        if not text:
            raise GenerationError("Model response did not include text content.")
        return text
