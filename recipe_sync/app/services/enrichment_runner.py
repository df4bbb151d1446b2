from __future__ import annotations

import logging
import time
from typing import Callable

from recipe_sync.app.domain.errors import CatalogRepositoryError
from recipe_sync.app.domain.models import EnrichmentRunSummary, ItemError
from recipe_sync.app.services.enrichment_finder import EnrichmentFinder
from recipe_sync.app.services.enrichment_processor import EnrichmentProcessor

logger = logging.getLogger(__name__)

DEFAULT_RUN_BATCH_SIZE = 3
DEFAULT_MAX_RECIPES = 15


class EnrichmentRunner:
    """Drives finder -> processor batches for one user until nothing is left."""

    def __init__(
        self,
        finder: EnrichmentFinder,
        processor: EnrichmentProcessor,
        batch_delay_seconds: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._finder = finder
        self._processor = processor
        self.batch_delay_seconds = batch_delay_seconds
        self._sleep = sleep

    def run(
        self,
        user_id: str,
        batch_size: int = DEFAULT_RUN_BATCH_SIZE,
        max_recipes: int = DEFAULT_MAX_RECIPES,
    ) -> EnrichmentRunSummary:
        report = self._finder.find(user_id)
        summary = EnrichmentRunSummary(
            recipes_found=len(report.recipes),
            playlists=list(report.stats.playlists_involved),
        )
        remaining = [candidate.recipe_id for candidate in report.recipes[:max_recipes]]
        logger.info(
            "Enrichment run for user %s: %d found, %d scheduled",
            user_id,
            summary.recipes_found,
            len(remaining),
        )

        while remaining:
            try:
                batch = self._processor.process_batch(remaining, batch_size)
            except CatalogRepositoryError as error:
                logger.error("Enrichment run for user %s stopped: %s", user_id, error)
                summary.errors.append(ItemError("batch", str(error)))
                break

            summary.recipes_processed += batch.processed
            summary.transcripts_added += batch.successful_transcript
            summary.ingredients_added += batch.successful_ingredients
            summary.errors.extend(batch.errors)
            remaining = batch.remaining_recipe_ids

            if remaining and self.batch_delay_seconds > 0:
                self._sleep(self.batch_delay_seconds)

        logger.info(
            "Enrichment run for user %s done: processed=%d, enriched=%d, success_rate=%s",
            user_id,
            summary.recipes_processed,
            summary.total_enriched,
            summary.success_rate,
        )
        return summary
