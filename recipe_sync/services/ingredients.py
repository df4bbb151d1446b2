from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Optional

from recipe_sync.services.errors import IngredientParseError
from recipe_sync.services.gemini_client import GeminiClient

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = Path(__file__).resolve().parent.parent / "prompts" / "ingredients_system.txt"
PROMPT_TRANSCRIPT_MAX_CHARS = 3000
RAW_LOG_MAX_CHARS = 500

_FENCE_RE = re.compile(r"```(?:json)?\s*|\s*```", re.IGNORECASE)


def strip_code_fences(raw: str) -> str:
    return _FENCE_RE.sub("", raw or "").strip()


def build_ingredient_prompt(
    title: str,
    channel: Optional[str],
    summary: Optional[str],
    transcript: str,
    max_transcript_chars: int = PROMPT_TRANSCRIPT_MAX_CHARS,
) -> str:
    lines = [
        "Extract the ingredients used in this recipe as a JSON array of strings.",
        'Each string should be a single ingredient with amount, such as "1 cup flour" or "2 eggs".',
        "Return ONLY the JSON array, nothing else.",
        "",
        f"Title: {title}",
        f"Channel: {channel or 'Unknown'}",
    ]
    if summary:
        lines.append(f"Summary: {summary}")
    lines.append(f"Transcript: {transcript[:max_transcript_chars]}")
    return "\n".join(lines)


def parse_ingredient_list(raw: str) -> list[str]:
    """
    Parse a model answer into ingredient strings.

    The answer must be a JSON array of strings (code fences allowed) with at
    least one non-blank entry. Anything else raises IngredientParseError;
    nothing partial is returned.
    """
    text = strip_code_fences(raw)
    try:
        parsed: Any = json.loads(text)
    except json.JSONDecodeError as error:
        raise IngredientParseError(f"Response is not valid JSON: {error.msg}", raw) from error

    if not isinstance(parsed, list):
        raise IngredientParseError("Response is not an array", raw)
    if not all(isinstance(item, str) for item in parsed):
        raise IngredientParseError("Array contains non-string entries", raw)

    ingredients = [item.strip() for item in parsed if item.strip()]
    if not ingredients:
        raise IngredientParseError("Array has no ingredients", raw)
    return ingredients


class IngredientExtractor:
    """Turns a recipe transcript into an ingredient list through Gemini."""

    def __init__(
        self,
        client: GeminiClient,
        max_transcript_chars: int = PROMPT_TRANSCRIPT_MAX_CHARS,
        system_prompt_path: Path = SYSTEM_PROMPT,
    ) -> None:
        self._client = client
        self.max_transcript_chars = max_transcript_chars
        self.system_prompt_path = system_prompt_path

    def extract(
        self,
        title: str,
        channel: Optional[str],
        summary: Optional[str],
        transcript: str,
    ) -> list[str]:
        prompt = build_ingredient_prompt(
            title, channel, summary, transcript, self.max_transcript_chars
        )
        raw = self._client.generate_content(prompt, self.system_prompt_path)
        try:
            return parse_ingredient_list(raw)
        except IngredientParseError:
            logger.error("Unparseable ingredients for %r: %s", title, raw[:RAW_LOG_MAX_CHARS])
            raise
