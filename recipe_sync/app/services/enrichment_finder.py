# recipe_sync/app/services/enrichment_finder.py
"""
Finds the recipes of a user's active playlists that still lack a transcript
or a usable ingredient list.
"""
from __future__ import annotations

import logging
import math

from recipe_sync.app.domain.models import (
    EnrichmentCandidate,
    EnrichmentNeed,
    EnrichmentReport,
    EnrichmentStats,
)
from recipe_sync.app.infra.db.base import RecipeRepository

logger = logging.getLogger(__name__)

MINUTES_PER_RECIPE = 0.5


class EnrichmentFinder:
    def __init__(self, recipes: RecipeRepository):
        self._recipes = recipes

    def find(self, user_id: str) -> EnrichmentReport:
        """
        Classify the user's active-playlist recipes by what they still need.

        Store errors propagate: enrichment triggers paid model calls, so it
        never runs against a partial view of the user's recipes.
        """
        links = self._recipes.list_active_recipe_links(user_id)

        by_recipe: dict[str, EnrichmentCandidate] = {}
        for link in links:
            recipe = link.recipe
            need = recipe.enrichment_need
            if need is EnrichmentNeed.NONE:
                continue

            existing = by_recipe.get(recipe.id)
            if existing is not None:
                existing.need = existing.need.union(need)
                continue

            by_recipe[recipe.id] = EnrichmentCandidate(
                user_recipe_id=link.user_recipe_id,
                recipe_id=recipe.id,
                title=recipe.title,
                playlist=link.playlist_title,
                need=need,
                has_transcript=recipe.has_transcript,
                has_ingredients=recipe.has_ingredients,
                video_url=recipe.video_url,
                youtube_video_id=recipe.youtube_video_id,
            )

        candidates = list(by_recipe.values())
        stats = build_stats(candidates)
        logger.info(
            "Enrichment scan for user %s: %d links, %d recipes need work "
            "(transcript only=%d, ingredients only=%d, both=%d)",
            user_id,
            len(links),
            stats.total_recipes_needing_enrichment,
            stats.needs_transcript_only,
            stats.needs_ingredients_only,
            stats.needs_both,
        )
        return EnrichmentReport(stats=stats, recipes=candidates)


def build_stats(candidates: list[EnrichmentCandidate]) -> EnrichmentStats:
    playlists: list[str] = []
    for candidate in candidates:
        if candidate.playlist not in playlists:
            playlists.append(candidate.playlist)

    total = len(candidates)
    return EnrichmentStats(
        total_recipes_needing_enrichment=total,
        needs_transcript_only=sum(1 for c in candidates if c.need is EnrichmentNeed.TRANSCRIPT),
        needs_ingredients_only=sum(1 for c in candidates if c.need is EnrichmentNeed.INGREDIENTS),
        needs_both=sum(1 for c in candidates if c.need is EnrichmentNeed.BOTH),
        playlists_involved=playlists,
        estimated_processing_time_minutes=math.ceil(total * MINUTES_PER_RECIPE),
    )
