# recipe_sync/app/services/playlist_sync.py
"""
Playlist sync.
Mirrors the videos of one connected YouTube playlist into the global recipe
catalog and links each recipe to the playlist owner exactly once.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from recipe_sync.app.domain.errors import (
    CatalogRepositoryError,
    DuplicateRecordError,
    PlaylistNotFoundError,
    PlaylistSyncDisabledError,
)
from recipe_sync.app.domain.models import (
    ItemError,
    PlaylistVideo,
    SyncResult,
    SyncStatus,
    UserPlaylist,
)
from recipe_sync.app.infra.db.base import PlaylistRepository, RecipeRepository
from recipe_sync.services.errors import CredentialRejectedError
from recipe_sync.services.ids import canonical_video_url
from recipe_sync.services.youtube_playlists import YouTubePlaylistSource

logger = logging.getLogger(__name__)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class PlaylistSyncService:
    """
    Syncs one user playlist per call.

    Responsibilities:
    - Resolve every video to a single global recipe (by video id, then by
      legacy URL, else a new row)
    - Link the recipe to the user's playlist once
    - Record the run in a sync log and refresh the playlist's sync stats

    A failure on one video is recorded and the run moves on. Failures that
    make the whole run meaningless (unknown playlist, YouTube unreachable)
    propagate after the sync log has been marked failed.
    """

    def __init__(
        self,
        playlists: PlaylistRepository,
        recipes: RecipeRepository,
        video_source: YouTubePlaylistSource,
        clock: Callable[[], datetime] = _now_utc,
    ):
        self._playlists = playlists
        self._recipes = recipes
        self._video_source = video_source
        self._clock = clock

    def sync_playlist(self, user_playlist_id: str, credential: str) -> SyncResult:
        """
        Sync a connected playlist with its current YouTube contents.

        Args:
            user_playlist_id: Row id of the connected playlist
            credential: The owner's YouTube OAuth access token

        Returns:
            Counters for the run plus the per-video errors

        Raises:
            PlaylistNotFoundError: no playlist with this id
            PlaylistSyncDisabledError: the owner switched sync off
            ServiceError: the playlist could not be read from YouTube
            CatalogRepositoryError: the store failed outside a single video
        """
        if not credential:
            raise CredentialRejectedError("A YouTube access token is required")

        playlist = self._playlists.get_user_playlist(user_playlist_id)
        if playlist is None:
            raise PlaylistNotFoundError(user_playlist_id)
        if not playlist.sync_enabled:
            raise PlaylistSyncDisabledError(user_playlist_id)

        sync_log = self._playlists.start_sync_log(playlist, self._clock())
        result = SyncResult(
            playlist_title=playlist.title,
            total_videos=0,
            global_recipes_created=0,
            user_recipes_added=0,
            already_in_playlist=0,
            sync_log_id=sync_log.id,
        )
        logger.info(
            "Sync started: playlist=%s, youtube_playlist=%s, log=%s",
            playlist.id,
            playlist.youtube_playlist_id,
            sync_log.id,
        )

        try:
            videos = self._video_source.fetch_playlist_videos(
                playlist.youtube_playlist_id, credential
            )
            result.total_videos = len(videos)
            for video in videos:
                self._sync_video(playlist, video, result)
        except Exception as error:
            self._fail_sync_log(sync_log.id, error)
            raise

        # An empty playlist is a completed run, not a failed one.
        all_failed = result.total_videos > 0 and result.errors_count >= result.total_videos
        result.status = SyncStatus.FAILED if all_failed else SyncStatus.COMPLETED
        completed_at = self._clock()
        self._playlists.finish_sync_log(
            sync_log.id,
            result.status,
            completed_at,
            recipes_added=result.global_recipes_created,
            recipes_updated=result.user_recipes_added,
            recipes_skipped=result.already_in_playlist,
            errors=[error.to_dict() for error in result.errors] or None,
        )
        self._playlists.update_playlist_sync_stats(playlist.id, completed_at, result.total_videos)

        logger.info(
            "Sync %s: playlist=%s, videos=%d, created=%d, linked=%d, skipped=%d, errors=%d",
            result.status.value,
            playlist.id,
            result.total_videos,
            result.global_recipes_created,
            result.user_recipes_added,
            result.already_in_playlist,
            result.errors_count,
        )
        return result

    def _sync_video(self, playlist: UserPlaylist, video: PlaylistVideo, result: SyncResult) -> None:
        if not video.video_id:
            logger.warning("No video id at position %d of playlist %s", video.position, playlist.id)
            result.errors.append(
                ItemError(f"position:{video.position}", "Missing video id", title=video.title)
            )
            return

        try:
            recipe_id, created = self._resolve_recipe(video)
            if created:
                result.global_recipes_created += 1

            if self._link_recipe(playlist, recipe_id, video.position):
                result.user_recipes_added += 1
            else:
                result.already_in_playlist += 1
        except CatalogRepositoryError as error:
            logger.error("Video %s failed at position %d: %s", video.video_id, video.position, error)
            result.errors.append(ItemError(video.video_id, str(error), title=video.title))
        except Exception as error:
            logger.exception("Video %s failed at position %d", video.video_id, video.position)
            result.errors.append(ItemError(video.video_id, str(error), title=video.title))

    def _resolve_recipe(self, video: PlaylistVideo) -> tuple[str, bool]:
        """Return (recipe_id, created) for the video's global recipe."""
        video_id = str(video.video_id)
        existing = self._recipes.find_recipe_by_video_id(video_id)
        if existing is not None:
            return existing.id, False

        canonical_url = canonical_video_url(video_id)
        legacy = self._recipes.find_legacy_recipe(video_id, canonical_url)
        if legacy is not None:
            try:
                self._recipes.backfill_video_id(legacy.id, video_id, canonical_url)
            except DuplicateRecordError:
                return self._reread_winner(video_id), False
            logger.info("Backfilled legacy recipe %s with video id %s", legacy.id, video_id)
            return legacy.id, False

        try:
            recipe = self._recipes.insert_recipe(
                video_id, video.title, video.channel, canonical_url
            )
        except DuplicateRecordError:
            return self._reread_winner(video_id), False
        return recipe.id, True

    def _reread_winner(self, video_id: str) -> str:
        winner = self._recipes.find_recipe_by_video_id(video_id)
        if winner is None:
            raise CatalogRepositoryError("resolve_recipe", f"duplicate {video_id} but no row found")
        logger.info("Recipe for %s was created concurrently, reusing %s", video_id, winner.id)
        return winner.id

    def _link_recipe(self, playlist: UserPlaylist, recipe_id: str, position: int) -> bool:
        """Link the recipe to the playlist; False when the link already existed."""
        if self._recipes.find_user_recipe(playlist.user_id, recipe_id, playlist.id) is not None:
            return False
        try:
            self._recipes.insert_user_recipe(
                playlist.user_id, recipe_id, playlist.id, position, self._clock()
            )
        except DuplicateRecordError:
            return False
        return True

    def _fail_sync_log(self, sync_log_id: str, error: Exception) -> None:
        try:
            self._playlists.finish_sync_log(
                sync_log_id,
                SyncStatus.FAILED,
                self._clock(),
                errors=[{"item_id": "run", "message": str(error)}],
            )
        except CatalogRepositoryError as log_error:
            logger.error("Could not mark sync log %s failed: %s", sync_log_id, log_error)
        logger.error("Sync aborted (log=%s): %s", sync_log_id, error)
