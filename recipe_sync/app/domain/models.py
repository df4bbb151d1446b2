# recipe_sync/app/domain/models.py
"""
Domain models for the playlist sync and enrichment pipeline.
These are pure data structures with no infrastructure dependencies.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

RECIPE_STATUS_SYNCED = "synced"


def has_valid_ingredients(ingredients: Any) -> bool:
    """
    True only for a non-empty list holding at least one non-blank string.

    A list of empty strings counts as not enriched, so a previous bad model
    answer does not block a new extraction.
    """
    if not ingredients or not isinstance(ingredients, list):
        return False
    return any(isinstance(item, str) and item.strip() for item in ingredients)


class SyncStatus(str, Enum):
    """Status of one playlist sync run."""
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class EnrichmentNeed(str, Enum):
    """What a recipe still lacks before it is fully enriched."""
    NONE = "none"
    TRANSCRIPT = "transcript"
    INGREDIENTS = "ingredients"
    BOTH = "both"

    @classmethod
    def from_flags(cls, needs_transcript: bool, needs_ingredients: bool) -> "EnrichmentNeed":
        if needs_transcript and needs_ingredients:
            return cls.BOTH
        if needs_transcript:
            return cls.TRANSCRIPT
        if needs_ingredients:
            return cls.INGREDIENTS
        return cls.NONE

    @property
    def needs_transcript(self) -> bool:
        return self in (EnrichmentNeed.TRANSCRIPT, EnrichmentNeed.BOTH)

    @property
    def needs_ingredients(self) -> bool:
        return self in (EnrichmentNeed.INGREDIENTS, EnrichmentNeed.BOTH)

    def union(self, other: "EnrichmentNeed") -> "EnrichmentNeed":
        return EnrichmentNeed.from_flags(
            self.needs_transcript or other.needs_transcript,
            self.needs_ingredients or other.needs_ingredients,
        )


@dataclass
class Recipe:
    """A global recipe, shared by every user that has the video in a playlist."""
    id: str
    title: str
    youtube_video_id: Optional[str] = None
    channel: Optional[str] = None
    video_url: Optional[str] = None
    summary: Optional[str] = None
    transcript: Optional[str] = None
    ingredients: Optional[list[str]] = None
    sync_status: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def has_transcript(self) -> bool:
        return bool(self.transcript)

    @property
    def has_ingredients(self) -> bool:
        return has_valid_ingredients(self.ingredients)

    @property
    def enrichment_need(self) -> EnrichmentNeed:
        return EnrichmentNeed.from_flags(not self.has_transcript, not self.has_ingredients)


@dataclass
class UserRecipe:
    """Links one user to a global recipe within one of their playlists."""
    id: str
    user_id: str
    recipe_id: str
    playlist_id: str
    position_in_playlist: Optional[int] = None
    added_at: Optional[datetime] = None
    is_favorite: bool = False
    notes: Optional[str] = None


@dataclass
class UserPlaylist:
    id: str
    user_id: str
    youtube_playlist_id: str
    title: str
    active: bool = True
    sync_enabled: bool = True
    last_synced: Optional[datetime] = None
    video_count: Optional[int] = None


@dataclass
class SyncLog:
    id: str
    user_id: str
    playlist_id: str
    youtube_playlist_id: str
    status: SyncStatus
    sync_started: Optional[datetime] = None
    sync_completed: Optional[datetime] = None
    recipes_added: int = 0
    recipes_updated: int = 0
    recipes_skipped: int = 0
    errors: Optional[list[dict[str, Any]]] = None


@dataclass
class PlaylistVideo:
    """One entry of a YouTube playlist, in playlist order."""
    video_id: Optional[str]
    title: str
    channel: str
    position: int
    description: Optional[str] = None


@dataclass
class YouTubePlaylistSummary:
    playlist_id: str
    title: str
    item_count: int = 0
    description: Optional[str] = None


@dataclass
class ItemError:
    """A recoverable failure of one video or recipe inside a batch."""
    item_id: str
    message: str
    title: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"item_id": self.item_id, "message": self.message}
        if self.title is not None:
            data["title"] = self.title
        return data


@dataclass
class ActiveRecipeLink:
    """A user's link to a recipe, reached through an active playlist."""
    user_recipe_id: str
    playlist_id: str
    playlist_title: str
    recipe: Recipe


@dataclass
class SyncResult:
    playlist_title: str
    total_videos: int
    global_recipes_created: int
    user_recipes_added: int
    already_in_playlist: int
    sync_log_id: str
    status: SyncStatus = SyncStatus.RUNNING
    errors: list[ItemError] = field(default_factory=list)

    @property
    def errors_count(self) -> int:
        return len(self.errors)


@dataclass
class EnrichmentCandidate:
    user_recipe_id: str
    recipe_id: str
    title: str
    playlist: str
    need: EnrichmentNeed
    has_transcript: bool
    has_ingredients: bool
    video_url: Optional[str] = None
    youtube_video_id: Optional[str] = None

    @property
    def needs_transcript(self) -> bool:
        return self.need.needs_transcript

    @property
    def needs_ingredients(self) -> bool:
        return self.need.needs_ingredients


@dataclass
class EnrichmentStats:
    total_recipes_needing_enrichment: int = 0
    needs_transcript_only: int = 0
    needs_ingredients_only: int = 0
    needs_both: int = 0
    playlists_involved: list[str] = field(default_factory=list)
    estimated_processing_time_minutes: int = 0


@dataclass
class EnrichmentReport:
    stats: EnrichmentStats
    recipes: list[EnrichmentCandidate] = field(default_factory=list)


@dataclass
class BatchResult:
    batch_size: int
    processed: int = 0
    successful_transcript: int = 0
    successful_ingredients: int = 0
    errors: list[ItemError] = field(default_factory=list)
    remaining_recipe_ids: list[str] = field(default_factory=list)

    @property
    def has_more(self) -> bool:
        return bool(self.remaining_recipe_ids)


@dataclass
class EnrichmentRunSummary:
    recipes_found: int = 0
    recipes_processed: int = 0
    transcripts_added: int = 0
    ingredients_added: int = 0
    errors: list[ItemError] = field(default_factory=list)
    playlists: list[str] = field(default_factory=list)

    @property
    def total_enriched(self) -> int:
        return self.transcripts_added + self.ingredients_added

    @property
    def success_rate(self) -> str:
        if self.recipes_processed <= 0:
            return "0%"
        ok = self.recipes_processed - len(self.errors)
        return f"{ok / self.recipes_processed * 100:.1f}%"
