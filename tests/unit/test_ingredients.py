from __future__ import annotations

from pathlib import Path

import pytest

from recipe_sync.services.errors import GenerationError, IngredientParseError
from recipe_sync.services.ingredients import (
    SYSTEM_PROMPT,
    IngredientExtractor,
    build_ingredient_prompt,
    parse_ingredient_list,
    strip_code_fences,
)


class GeminiClientStub:
    def __init__(self, response: str = "", error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.prompts: list[tuple[str, Path]] = []

    def generate_content(self, user_prompt: str, system_prompt_path: Path) -> str:
        self.prompts.append((user_prompt, system_prompt_path))
        if self.error is not None:
            raise self.error
        return self.response


class TestStripCodeFences:
    def test_removes_json_fence(self) -> None:
        assert strip_code_fences('```json\n["2 eggs"]\n```') == '["2 eggs"]'

    def test_plain_text_untouched(self) -> None:
        assert strip_code_fences('  ["salt"] ') == '["salt"]'


class TestParseIngredientList:
    def test_parses_array(self) -> None:
        assert parse_ingredient_list('["1 cup flour", "2 eggs"]') == ["1 cup flour", "2 eggs"]

    def test_parses_fenced_array(self) -> None:
        assert parse_ingredient_list('```json\n["1 cup flour"]\n```') == ["1 cup flour"]

    def test_drops_blank_entries(self) -> None:
        assert parse_ingredient_list('["", "  salt  ", " "]') == ["salt"]

    @pytest.mark.parametrize(
        "raw",
        [
            "Here are the ingredients: flour, eggs",
            '{"ingredients": ["flour"]}',
            '["flour", 2]',
            "[]",
            '["", "  "]',
        ],
    )
    def test_rejects_anything_but_a_list_of_strings(self, raw: str) -> None:
        with pytest.raises(IngredientParseError) as exc_info:
            parse_ingredient_list(raw)
        assert exc_info.value.raw_response == raw


class TestBuildIngredientPrompt:
    def test_includes_metadata_and_transcript(self) -> None:
        prompt = build_ingredient_prompt("Tacos", "Chef Joe", "Quick tacos", "Warm the tortillas")
        assert "Title: Tacos" in prompt
        assert "Channel: Chef Joe" in prompt
        assert "Summary: Quick tacos" in prompt
        assert "Transcript: Warm the tortillas" in prompt

    def test_unknown_channel_and_no_summary(self) -> None:
        prompt = build_ingredient_prompt("Tacos", None, None, "text")
        assert "Channel: Unknown" in prompt
        assert "Summary:" not in prompt

    def test_truncates_transcript(self) -> None:
        prompt = build_ingredient_prompt("Soup", None, None, "a" * 50, max_transcript_chars=10)
        assert prompt.endswith("Transcript: " + "a" * 10)


class TestIngredientExtractor:
    def test_returns_parsed_ingredients(self) -> None:
        client = GeminiClientStub('["1 onion", "2 tbsp olive oil"]')
        extractor = IngredientExtractor(client)

        result = extractor.extract("Soup", "Chef Joe", None, "Chop the onion")

        assert result == ["1 onion", "2 tbsp olive oil"]
        prompt, prompt_path = client.prompts[0]
        assert "Chop the onion" in prompt
        assert prompt_path == SYSTEM_PROMPT

    def test_parse_failure_propagates(self) -> None:
        extractor = IngredientExtractor(GeminiClientStub("I could not find any ingredients."))
        with pytest.raises(IngredientParseError):
            extractor.extract("Soup", None, None, "text")

    def test_model_error_propagates(self) -> None:
        extractor = IngredientExtractor(GeminiClientStub(error=GenerationError("boom")))
        with pytest.raises(GenerationError):
            extractor.extract("Soup", None, None, "text")

    def test_system_prompt_ships_with_package(self) -> None:
        assert SYSTEM_PROMPT.is_file()
        assert "JSON array" in SYSTEM_PROMPT.read_text(encoding="utf-8")
