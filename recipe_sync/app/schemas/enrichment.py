# recipe_sync/app/schemas/enrichment.py
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from recipe_sync.app.domain.models import EnrichmentNeed
from recipe_sync.app.schemas.common import ItemErrorOut


class FindRequest(BaseModel):
    user_id: str = Field(..., min_length=1)


class EnrichmentStatsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_recipes_needing_enrichment: int = 0
    needs_transcript_only: int = 0
    needs_ingredients_only: int = 0
    needs_both: int = 0
    playlists_involved: list[str] = Field(default_factory=list)
    estimated_processing_time_minutes: int = 0


class EnrichmentCandidateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_recipe_id: str
    recipe_id: str
    title: str
    video_url: Optional[str] = None
    youtube_video_id: Optional[str] = None
    playlist: str
    need: EnrichmentNeed
    needs_transcript: bool
    needs_ingredients: bool
    has_transcript: bool
    has_ingredients: bool


class FindResponse(BaseModel):
    success: bool = True
    stats: EnrichmentStatsOut
    recipes: list[EnrichmentCandidateOut] = Field(default_factory=list)
    message: str


class ProcessRequest(BaseModel):
    recipe_ids: list[str] = Field(..., min_length=1)
    max_batch_size: Optional[int] = Field(default=None, ge=1, le=50)


class ProcessResponse(BaseModel):
    success: bool = True
    batch_size: int
    processed: int
    successful_transcript: int
    successful_ingredients: int
    errors: list[ItemErrorOut] = Field(default_factory=list)
    remaining_recipe_ids: list[str] = Field(default_factory=list)
    has_more: bool
    message: str


class RunRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    batch_size: int = Field(default=3, ge=1, le=50)
    max_recipes: int = Field(default=15, ge=1, le=500)


class RunStatsOut(BaseModel):
    recipes_found: int
    recipes_processed: int
    transcripts_added: int
    ingredients_added: int
    total_enriched: int
    errors: int
    success_rate: str
    playlists_affected: int


class RunResponse(BaseModel):
    success: bool = True
    stats: RunStatsOut
    errors: list[ItemErrorOut] = Field(default_factory=list)
    playlists: list[str] = Field(default_factory=list)
    message: str
