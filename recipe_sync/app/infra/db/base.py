# recipe_sync/app/infra/db/base.py
"""
Abstract repositories for the recipe catalog.
The sync and enrichment services only talk to these interfaces, so the
Supabase implementation can be swapped for an in-memory one in tests.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional, Sequence

from recipe_sync.app.domain.models import (
    ActiveRecipeLink,
    Recipe,
    SyncLog,
    SyncStatus,
    UserPlaylist,
    UserRecipe,
)


class PlaylistRepository(ABC):
    """
    Access to `user_playlists` and `playlist_sync_logs`.

    Implementations:
    - SupabasePlaylistRepository: PostgREST over Supabase
    """

    @abstractmethod
    def get_user_playlist(self, user_playlist_id: str) -> Optional[UserPlaylist]:
        """
        Get a connected playlist by its row id.

        Returns:
            The playlist, or None if it does not exist
        """
        pass

    @abstractmethod
    def list_user_playlists(self, user_id: str) -> list[UserPlaylist]:
        """All playlists a user ever connected, active or not."""
        pass

    @abstractmethod
    def upsert_user_playlist(
        self,
        user_id: str,
        youtube_playlist_id: str,
        title: str,
    ) -> UserPlaylist:
        """
        Connect a playlist, reactivating it when the (user, playlist) row
        already exists.

        Args:
            user_id: Owner of the playlist
            youtube_playlist_id: External playlist id
            title: Display title

        Returns:
            The stored playlist with active=True
        """
        pass

    @abstractmethod
    def set_playlist_active(
        self,
        user_playlist_id: str,
        user_id: str,
        active: bool,
    ) -> Optional[UserPlaylist]:
        """
        Toggle the `active` flag. Rows are never deleted.

        Returns:
            The updated playlist, or None if it is not owned by the user
        """
        pass

    @abstractmethod
    def update_playlist_sync_stats(
        self,
        user_playlist_id: str,
        last_synced: datetime,
        video_count: int,
    ) -> None:
        pass

    @abstractmethod
    def start_sync_log(self, playlist: UserPlaylist, started_at: datetime) -> SyncLog:
        """
        Create the `running` log row for one sync invocation.

        Returns:
            The created SyncLog
        """
        pass

    @abstractmethod
    def finish_sync_log(
        self,
        sync_log_id: str,
        status: SyncStatus,
        completed_at: datetime,
        recipes_added: int = 0,
        recipes_updated: int = 0,
        recipes_skipped: int = 0,
        errors: Optional[list[dict[str, Any]]] = None,
    ) -> None:
        """
        Write the single closing update of a sync log.

        Args:
            sync_log_id: Row created by start_sync_log
            status: COMPLETED or FAILED
            completed_at: End of the run
            recipes_added: New global recipes
            recipes_updated: New user links
            recipes_skipped: Videos already linked in this playlist
            errors: Per-item errors, None when there were none
        """
        pass


class RecipeRepository(ABC):
    """
    Access to the global `recipes` table and the per-user `user_recipes` links.

    Inserts raise DuplicateRecordError when a unique index rejects the row,
    which is how concurrent runs are reconciled.
    """

    @abstractmethod
    def find_recipe_by_video_id(self, youtube_video_id: str) -> Optional[Recipe]:
        pass

    @abstractmethod
    def find_legacy_recipe(
        self,
        youtube_video_id: str,
        canonical_url: str,
    ) -> Optional[Recipe]:
        """
        Find a pre-migration recipe (no youtube_video_id) whose video_url is
        the canonical URL or contains the video id.
        """
        pass

    @abstractmethod
    def backfill_video_id(
        self,
        recipe_id: str,
        youtube_video_id: str,
        canonical_url: str,
    ) -> None:
        """Set the canonical id and normalize the URL on a legacy row."""
        pass

    @abstractmethod
    def insert_recipe(
        self,
        youtube_video_id: str,
        title: str,
        channel: str,
        video_url: str,
    ) -> Recipe:
        """
        Insert a new global recipe with sync_status="synced".

        Raises:
            DuplicateRecordError: another row already has this youtube_video_id
        """
        pass

    @abstractmethod
    def find_user_recipe(
        self,
        user_id: str,
        recipe_id: str,
        playlist_id: str,
    ) -> Optional[UserRecipe]:
        pass

    @abstractmethod
    def insert_user_recipe(
        self,
        user_id: str,
        recipe_id: str,
        playlist_id: str,
        position: int,
        added_at: datetime,
    ) -> UserRecipe:
        """
        Link a recipe to a user's playlist.

        Raises:
            DuplicateRecordError: the (user, recipe, playlist) link exists
        """
        pass

    @abstractmethod
    def list_active_recipe_links(self, user_id: str) -> list[ActiveRecipeLink]:
        """
        Every link of the user whose playlist is active, with the joined
        recipe row and playlist title.
        """
        pass

    @abstractmethod
    def get_recipes_by_ids(self, recipe_ids: Sequence[str]) -> list[Recipe]:
        pass

    @abstractmethod
    def update_recipe_fields(self, recipe_id: str, fields: dict[str, Any]) -> None:
        """Partial update: only the given columns are written."""
        pass
