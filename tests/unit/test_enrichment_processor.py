from __future__ import annotations

import httpx
import pytest

from recipe_sync.app.domain.errors import CatalogRepositoryError
from recipe_sync.app.services.enrichment_processor import EnrichmentProcessor
from recipe_sync.services.errors import (
    GenerationError,
    IngredientParseError,
    TranscriptUnavailableError,
)


class TranscriptSourceStub:
    def __init__(self, transcripts: dict[str, str] | None = None) -> None:
        self.transcripts = transcripts or {}
        self.calls: list[str] = []

    def fetch_transcript(self, video_id: str) -> str:
        self.calls.append(video_id)
        if video_id not in self.transcripts:
            raise TranscriptUnavailableError(f"No captions for {video_id}")
        return self.transcripts[video_id]


class ExtractorStub:
    def __init__(self, failing_titles: dict[str, Exception] | None = None) -> None:
        self.failing_titles = failing_titles or {}
        self.calls: list[tuple[str, str]] = []

    def extract(self, title, channel, summary, transcript) -> list[str]:
        self.calls.append((title, transcript))
        if title in self.failing_titles:
            raise self.failing_titles[title]
        return [f"1 cup {title.lower()}"]


def build_processor(recipe_repo, transcripts=None, extractor=None, **kwargs) -> EnrichmentProcessor:
    return EnrichmentProcessor(
        recipe_repo,
        transcripts or TranscriptSourceStub(),
        extractor or ExtractorStub(),
        **kwargs,
    )


def video_id(n: int) -> str:
    return f"video{n:06d}"


class TestProcessBatch:
    def test_one_model_failure_does_not_stop_batch(self, recipe_repo) -> None:
        recipes = [
            recipe_repo.add_recipe(f"Dish{n}", youtube_video_id=video_id(n)) for n in range(5)
        ]
        transcripts = TranscriptSourceStub({video_id(n): f"transcript {n}" for n in range(5)})
        extractor = ExtractorStub({"Dish2": IngredientParseError("Response is not an array", "nope")})
        processor = build_processor(recipe_repo, transcripts, extractor)

        result = processor.process_batch([r.id for r in recipes], max_batch_size=5)

        assert result.batch_size == 5
        assert result.processed == 5
        assert result.successful_transcript == 5
        assert result.successful_ingredients == 4
        assert len(result.errors) == 1
        assert result.errors[0].item_id == recipes[2].id
        assert result.errors[0].title == "Dish2"
        assert result.remaining_recipe_ids == []
        assert result.has_more is False

        # The failed recipe still keeps its new transcript.
        assert recipes[2].transcript == "transcript 2"
        assert recipes[2].ingredients is None
        assert all(recipes[n].ingredients for n in (0, 1, 3, 4))

    def test_batch_limit_returns_remaining_ids(self, recipe_repo) -> None:
        recipes = [
            recipe_repo.add_recipe(f"Dish{n}", transcript="text", youtube_video_id=video_id(n))
            for n in range(10)
        ]
        ids = [r.id for r in recipes]
        processor = build_processor(recipe_repo)

        result = processor.process_batch(ids, max_batch_size=3)

        assert result.batch_size == 3
        assert result.processed == 3
        assert result.remaining_recipe_ids == ids[3:]
        assert result.has_more is True

    def test_looping_touches_each_recipe_once(self, recipe_repo) -> None:
        recipes = [
            recipe_repo.add_recipe(f"Dish{n}", transcript="text", youtube_video_id=video_id(n))
            for n in range(10)
        ]
        extractor = ExtractorStub()
        processor = build_processor(recipe_repo, extractor=extractor)

        remaining = [r.id for r in recipes]
        calls = 0
        while remaining:
            remaining = processor.process_batch(remaining, max_batch_size=3).remaining_recipe_ids
            calls += 1

        assert calls == 4
        assert sorted(title for title, _ in extractor.calls) == sorted(r.title for r in recipes)
        assert sorted(recipe_id for recipe_id, _ in recipe_repo.updates) == sorted(r.id for r in recipes)

    def test_default_batch_size(self, recipe_repo) -> None:
        ids = [recipe_repo.add_recipe(f"Dish{n}", transcript="t").id for n in range(7)]
        result = build_processor(recipe_repo).process_batch(ids)
        assert result.processed == 5
        assert len(result.remaining_recipe_ids) == 2

    def test_only_missing_fields_are_written(self, recipe_repo) -> None:
        has_ingredients = recipe_repo.add_recipe(
            "Stew", youtube_video_id=video_id(1), ingredients=["1 kg beef"]
        )
        has_transcript = recipe_repo.add_recipe(
            "Salad", youtube_video_id=video_id(2), transcript="Toss the greens"
        )
        transcripts = TranscriptSourceStub({video_id(1): "Brown the beef"})
        extractor = ExtractorStub()
        processor = build_processor(recipe_repo, transcripts, extractor)

        result = processor.process_batch([has_ingredients.id, has_transcript.id])

        assert dict(recipe_repo.updates) == {
            has_ingredients.id: {"transcript": "Brown the beef"},
            has_transcript.id: {"ingredients": ["1 cup salad"]},
        }
        assert transcripts.calls == [video_id(1)]
        assert extractor.calls == [("Salad", "Toss the greens")]
        assert result.successful_transcript == 1
        assert result.successful_ingredients == 1
        assert has_ingredients.ingredients == ["1 kg beef"]

    def test_transcript_is_truncated(self, recipe_repo) -> None:
        recipe = recipe_repo.add_recipe("Bread", youtube_video_id=video_id(1))
        transcripts = TranscriptSourceStub({video_id(1): "x" * 5000})
        extractor = ExtractorStub()
        processor = build_processor(recipe_repo, transcripts, extractor, transcript_max_chars=3000)

        processor.process_batch([recipe.id])

        assert len(recipe.transcript) == 3000
        assert len(extractor.calls[0][1]) == 3000

    def test_video_id_falls_back_to_url(self, recipe_repo) -> None:
        recipe = recipe_repo.add_recipe("Curry", video_url="https://www.youtube.com/watch?v=curryvideo1")
        transcripts = TranscriptSourceStub({"curryvideo1": "Fry the spices"})

        build_processor(recipe_repo, transcripts).process_batch([recipe.id])

        assert transcripts.calls == ["curryvideo1"]
        assert recipe.transcript == "Fry the spices"

    def test_transcript_unavailable_skips_ingredients(self, recipe_repo) -> None:
        recipe = recipe_repo.add_recipe("Mystery", youtube_video_id=video_id(9))
        extractor = ExtractorStub()

        result = build_processor(recipe_repo, extractor=extractor).process_batch([recipe.id])

        assert result.processed == 1
        assert result.successful_transcript == 0
        assert result.successful_ingredients == 0
        assert result.errors == []
        assert extractor.calls == []
        assert recipe_repo.updates == []

    def test_missing_recipe_is_reported(self, recipe_repo) -> None:
        recipe = recipe_repo.add_recipe("Real", transcript="text")

        result = build_processor(recipe_repo).process_batch(["ghost", recipe.id])

        assert result.processed == 2
        assert result.successful_ingredients == 1
        assert result.errors[0].item_id == "ghost"
        assert result.errors[0].message == "Recipe not found"

    def test_update_failure_is_recorded_per_recipe(self, recipe_repo) -> None:
        first = recipe_repo.add_recipe("First", transcript="text")
        second = recipe_repo.add_recipe("Second", transcript="text")
        original_update = recipe_repo.update_recipe_fields

        def fail_first(recipe_id, fields):
            if recipe_id == first.id:
                raise CatalogRepositoryError("update_recipe_fields", "timeout")
            return original_update(recipe_id, fields)

        recipe_repo.update_recipe_fields = fail_first

        result = build_processor(recipe_repo).process_batch([first.id, second.id])

        assert result.processed == 2
        assert result.successful_ingredients == 1
        assert [e.item_id for e in result.errors] == [first.id]

    def test_model_error_is_recorded(self, recipe_repo) -> None:
        recipe = recipe_repo.add_recipe("Pho", transcript="Simmer the broth")
        extractor = ExtractorStub({"Pho": GenerationError("Gemini API error")})

        result = build_processor(recipe_repo, extractor=extractor).process_batch([recipe.id])

        assert result.successful_ingredients == 0
        assert "Ingredient extraction failed" in result.errors[0].message

    def test_transcript_is_kept_when_model_is_unreachable(self, recipe_repo) -> None:
        recipe = recipe_repo.add_recipe("Omelette", youtube_video_id=video_id(1))
        transcripts = TranscriptSourceStub({video_id(1): "Whisk the eggs"})
        extractor = ExtractorStub({"Omelette": httpx.ConnectError("connection refused")})

        result = build_processor(recipe_repo, transcripts, extractor).process_batch([recipe.id])

        assert recipe_repo.recipes[recipe.id].transcript == "Whisk the eggs"
        assert recipe_repo.recipes[recipe.id].ingredients is None
        assert result.successful_transcript == 1
        assert result.successful_ingredients == 0
        assert [e.item_id for e in result.errors] == [recipe.id]
        assert "connection refused" in result.errors[0].message

    def test_load_failure_propagates(self, recipe_repo) -> None:
        recipe_repo.failing_operations["get_recipes_by_ids"] = "connection refused"
        with pytest.raises(CatalogRepositoryError):
            build_processor(recipe_repo).process_batch(["r1"])

    @pytest.mark.parametrize("ids, batch_size", [([], 5), (["r1"], 0)])
    def test_invalid_input(self, recipe_repo, ids: list[str], batch_size: int) -> None:
        with pytest.raises(ValueError):
            build_processor(recipe_repo).process_batch(ids, max_batch_size=batch_size)
