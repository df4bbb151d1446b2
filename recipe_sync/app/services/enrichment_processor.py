# recipe_sync/app/services/enrichment_processor.py
"""
Processes one bounded batch of recipes: fills missing transcripts and
extracts ingredient lists, one recipe at a time.
"""
from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from recipe_sync.app.domain.models import BatchResult, ItemError, Recipe
from recipe_sync.app.infra.db.base import RecipeRepository
from recipe_sync.services.errors import ServiceError
from recipe_sync.services.ids import extract_video_id
from recipe_sync.services.ingredients import IngredientExtractor
from recipe_sync.services.transcripts import TranscriptSource

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 5
TRANSCRIPT_MAX_CHARS = 3000


class EnrichmentProcessor:
    """
    Enriches up to `max_batch_size` recipes per call and hands the rest back
    as `remaining_recipe_ids`. The caller loops until that list is empty.
    """

    def __init__(
        self,
        recipes: RecipeRepository,
        transcripts: TranscriptSource,
        extractor: IngredientExtractor,
        transcript_max_chars: int = TRANSCRIPT_MAX_CHARS,
        default_batch_size: int = DEFAULT_BATCH_SIZE,
    ):
        self._recipes = recipes
        self._transcripts = transcripts
        self._extractor = extractor
        self.transcript_max_chars = transcript_max_chars
        self.default_batch_size = default_batch_size

    def process_batch(
        self,
        recipe_ids: Sequence[str],
        max_batch_size: Optional[int] = None,
    ) -> BatchResult:
        """
        Enrich the first `max_batch_size` ids.

        Args:
            recipe_ids: Ids still waiting for enrichment
            max_batch_size: Cap for this call (defaults to default_batch_size)

        Returns:
            Counters, per-recipe errors and the ids left for the next call

        Raises:
            ValueError: empty id list or a batch size below 1
            CatalogRepositoryError: the batch could not be loaded
        """
        ids = [str(recipe_id) for recipe_id in recipe_ids if recipe_id]
        if not ids:
            raise ValueError("recipe_ids must contain at least one id")
        batch_size = self.default_batch_size if max_batch_size is None else max_batch_size
        if batch_size < 1:
            raise ValueError("max_batch_size must be at least 1")

        batch = ids[:batch_size]
        result = BatchResult(batch_size=len(batch), remaining_recipe_ids=ids[batch_size:])
        rows = {recipe.id: recipe for recipe in self._recipes.get_recipes_by_ids(batch)}

        for recipe_id in batch:
            result.processed += 1
            recipe = rows.get(recipe_id)
            if recipe is None:
                result.errors.append(ItemError(recipe_id, "Recipe not found"))
                continue
            try:
                self._process_recipe(recipe, result)
            except Exception as error:
                logger.exception("Enrichment failed for recipe %s (%s)", recipe.id, recipe.title)
                result.errors.append(ItemError(recipe.id, str(error), title=recipe.title))

        logger.info(
            "Batch done: processed=%d/%d, transcripts=%d, ingredients=%d, errors=%d, remaining=%d",
            result.processed,
            result.batch_size,
            result.successful_transcript,
            result.successful_ingredients,
            len(result.errors),
            len(result.remaining_recipe_ids),
        )
        return result

    def _process_recipe(self, recipe: Recipe, result: BatchResult) -> None:
        need = recipe.enrichment_need
        updates: dict[str, Any] = {}
        transcript = recipe.transcript or None

        if need.needs_transcript:
            fetched = self._fetch_transcript(recipe)
            if fetched:
                transcript = fetched
                updates["transcript"] = fetched

        ingredient_error: ItemError | None = None
        if need.needs_ingredients:
            if transcript:
                try:
                    updates["ingredients"] = self._extractor.extract(
                        recipe.title, recipe.channel, recipe.summary, transcript
                    )
                except ServiceError as error:
                    logger.warning("Ingredient extraction failed for %s: %s", recipe.id, error)
                    ingredient_error = ItemError(
                        recipe.id, f"Ingredient extraction failed: {error}", title=recipe.title
                    )
                except Exception as error:
                    logger.exception("Ingredient extraction crashed for %s", recipe.id)
                    ingredient_error = ItemError(
                        recipe.id, f"Ingredient extraction failed: {error}", title=recipe.title
                    )
            else:
                logger.info("Skipping ingredients for %s: no transcript", recipe.id)

        if updates:
            self._recipes.update_recipe_fields(recipe.id, updates)
            if "transcript" in updates:
                result.successful_transcript += 1
            if "ingredients" in updates:
                result.successful_ingredients += 1

        if ingredient_error is not None:
            result.errors.append(ingredient_error)

    def _fetch_transcript(self, recipe: Recipe) -> str | None:
        video_id = recipe.youtube_video_id or extract_video_id(recipe.video_url)
        if not video_id:
            logger.warning("No video id for recipe %s, cannot fetch transcript", recipe.id)
            return None
        try:
            text = self._transcripts.fetch_transcript(video_id)
        except ServiceError as error:
            logger.warning("Transcript unavailable for %s (%s): %s", recipe.id, video_id, error)
            return None
        if len(text) > self.transcript_max_chars:
            logger.debug("Truncating transcript for %s from %d chars", recipe.id, len(text))
        return text[: self.transcript_max_chars]
