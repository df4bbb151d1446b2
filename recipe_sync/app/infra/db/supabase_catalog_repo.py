from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional, Sequence

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from recipe_sync.app.domain.errors import CatalogRepositoryError, DuplicateRecordError
from recipe_sync.app.domain.models import (
    RECIPE_STATUS_SYNCED,
    ActiveRecipeLink,
    Recipe,
    SyncLog,
    SyncStatus,
    UserPlaylist,
    UserRecipe,
)
from recipe_sync.app.infra.db.base import PlaylistRepository, RecipeRepository

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"
PAGE_SIZE = 500
LEGACY_CANDIDATE_LIMIT = 10

RECIPE_COLUMNS = (
    "id,title,youtube_video_id,channel,video_url,summary,"
    "transcript,ingredients,sync_status,created_at"
)
PLAYLIST_COLUMNS = (
    "id,user_id,youtube_playlist_id,title,active,sync_enabled,last_synced,video_count"
)
ACTIVE_LINK_COLUMNS = (
    f"id,recipe_id,playlist_id,recipes!inner({RECIPE_COLUMNS}),"
    "user_playlists!inner(id,title,active)"
)


def _parse_datetime(value: str | datetime | None) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        return None

    try:
        normalized = value.replace("Z", "+00:00") if value.endswith("Z") else value
        return datetime.fromisoformat(normalized)
    except ValueError:
        return None


def _safe_int(value: object, default: int = 0) -> int:
    return int(value) if value else default


def _safe_str(value: object) -> str | None:
    return str(value) if value else None


def _first(rows: Any) -> dict[str, Any] | None:
    if isinstance(rows, list):
        return rows[0] if rows else None
    if isinstance(rows, dict):
        return rows
    return None


def _row_to_recipe(row: dict[str, Any]) -> Recipe:
    ingredients = row.get("ingredients")
    return Recipe(
        id=str(row["id"]),
        title=str(row.get("title") or ""),
        youtube_video_id=_safe_str(row.get("youtube_video_id")),
        channel=_safe_str(row.get("channel")),
        video_url=_safe_str(row.get("video_url")),
        summary=_safe_str(row.get("summary")),
        transcript=row.get("transcript"),
        ingredients=ingredients if isinstance(ingredients, list) else None,
        sync_status=_safe_str(row.get("sync_status")),
        created_at=_parse_datetime(row.get("created_at")),
    )


def _row_to_user_recipe(row: dict[str, Any]) -> UserRecipe:
    position = row.get("position_in_playlist")
    return UserRecipe(
        id=str(row["id"]),
        user_id=str(row["user_id"]),
        recipe_id=str(row["recipe_id"]),
        playlist_id=str(row["playlist_id"]),
        position_in_playlist=int(position) if position is not None else None,
        added_at=_parse_datetime(row.get("added_at")),
        is_favorite=bool(row.get("is_favorite")),
        notes=_safe_str(row.get("notes")),
    )


def _row_to_playlist(row: dict[str, Any]) -> UserPlaylist:
    return UserPlaylist(
        id=str(row["id"]),
        user_id=str(row["user_id"]),
        youtube_playlist_id=str(row["youtube_playlist_id"]),
        title=str(row.get("title") or ""),
        active=row.get("active") is not False,
        sync_enabled=row.get("sync_enabled") is not False,
        last_synced=_parse_datetime(row.get("last_synced")),
        video_count=_safe_int(row.get("video_count")) if row.get("video_count") is not None else None,
    )


def _row_to_sync_log(row: dict[str, Any]) -> SyncLog:
    return SyncLog(
        id=str(row["id"]),
        user_id=str(row["user_id"]),
        playlist_id=str(row["playlist_id"]),
        youtube_playlist_id=str(row.get("youtube_playlist_id") or ""),
        status=SyncStatus(str(row.get("status") or SyncStatus.RUNNING.value)),
        sync_started=_parse_datetime(row.get("sync_started")),
        sync_completed=_parse_datetime(row.get("sync_completed")),
        recipes_added=_safe_int(row.get("recipes_added")),
        recipes_updated=_safe_int(row.get("recipes_updated")),
        recipes_skipped=_safe_int(row.get("recipes_skipped")),
        errors=row.get("errors"),
    )


def _row_to_active_link(row: dict[str, Any]) -> ActiveRecipeLink | None:
    recipe_row = _first(row.get("recipes"))
    playlist_row = _first(row.get("user_playlists"))
    if not recipe_row or not playlist_row:
        return None
    return ActiveRecipeLink(
        user_recipe_id=str(row["id"]),
        playlist_id=str(playlist_row.get("id") or row.get("playlist_id") or ""),
        playlist_title=str(playlist_row.get("title") or ""),
        recipe=_row_to_recipe(recipe_row),
    )


def _execute(operation: str, query: Any) -> Any:
    try:
        return query.execute()
    except APIError as error:
        reason = error.message or str(error)
        if error.code == UNIQUE_VIOLATION:
            raise DuplicateRecordError(operation, reason) from error
        logger.error("Store error during %s: %s", operation, reason)
        raise CatalogRepositoryError(operation, reason) from error
    except httpx.HTTPError as error:
        logger.error("Network error during %s: %s", operation, error)
        raise CatalogRepositoryError(operation, str(error)) from error


class SupabasePlaylistRepository(PlaylistRepository):
    TABLE_NAME = "user_playlists"
    LOG_TABLE_NAME = "playlist_sync_logs"

    def __init__(self, client: Client):
        self._client = client

    def get_user_playlist(self, user_playlist_id: str) -> UserPlaylist | None:
        result = _execute(
            "get_user_playlist",
            self._client.table(self.TABLE_NAME)
            .select(PLAYLIST_COLUMNS)
            .eq("id", user_playlist_id)
            .limit(1),
        )
        row = _first(result.data)
        return _row_to_playlist(row) if row else None

    def list_user_playlists(self, user_id: str) -> list[UserPlaylist]:
        result = _execute(
            "list_user_playlists",
            self._client.table(self.TABLE_NAME)
            .select(PLAYLIST_COLUMNS)
            .eq("user_id", user_id)
            .order("title"),
        )
        return [_row_to_playlist(row) for row in result.data or []]

    def upsert_user_playlist(
        self,
        user_id: str,
        youtube_playlist_id: str,
        title: str,
    ) -> UserPlaylist:
        payload = {
            "user_id": user_id,
            "youtube_playlist_id": youtube_playlist_id,
            "title": title,
            "active": True,
        }
        result = _execute(
            "upsert_user_playlist",
            self._client.table(self.TABLE_NAME).upsert(
                payload, on_conflict="user_id,youtube_playlist_id"
            ),
        )
        row = _first(result.data)
        if not row:
            raise CatalogRepositoryError("upsert_user_playlist", "no row returned")
        logger.info("Playlist connected: user=%s, youtube_playlist=%s", user_id, youtube_playlist_id)
        return _row_to_playlist(row)

    def set_playlist_active(
        self,
        user_playlist_id: str,
        user_id: str,
        active: bool,
    ) -> UserPlaylist | None:
        result = _execute(
            "set_playlist_active",
            self._client.table(self.TABLE_NAME)
            .update({"active": active})
            .eq("id", user_playlist_id)
            .eq("user_id", user_id),
        )
        row = _first(result.data)
        return _row_to_playlist(row) if row else None

    def update_playlist_sync_stats(
        self,
        user_playlist_id: str,
        last_synced: datetime,
        video_count: int,
    ) -> None:
        _execute(
            "update_playlist_sync_stats",
            self._client.table(self.TABLE_NAME)
            .update({"last_synced": last_synced.isoformat(), "video_count": video_count})
            .eq("id", user_playlist_id),
        )

    def start_sync_log(self, playlist: UserPlaylist, started_at: datetime) -> SyncLog:
        payload = {
            "user_id": playlist.user_id,
            "playlist_id": playlist.id,
            "youtube_playlist_id": playlist.youtube_playlist_id,
            "status": SyncStatus.RUNNING.value,
            "sync_started": started_at.isoformat(),
        }
        result = _execute(
            "start_sync_log",
            self._client.table(self.LOG_TABLE_NAME).insert(payload),
        )
        row = _first(result.data)
        if not row:
            raise CatalogRepositoryError("start_sync_log", "no row returned")
        return _row_to_sync_log(row)

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
        update_data = {
            "status": status.value,
            "sync_completed": completed_at.isoformat(),
            "recipes_added": recipes_added,
            "recipes_updated": recipes_updated,
            "recipes_skipped": recipes_skipped,
            "errors": errors or None,
        }
        _execute(
            "finish_sync_log",
            self._client.table(self.LOG_TABLE_NAME).update(update_data).eq("id", sync_log_id),
        )


class SupabaseRecipeRepository(RecipeRepository):
    TABLE_NAME = "recipes"
    LINK_TABLE_NAME = "user_recipes"

    def __init__(self, client: Client):
        self._client = client

    def find_recipe_by_video_id(self, youtube_video_id: str) -> Recipe | None:
        result = _execute(
            "find_recipe_by_video_id",
            self._client.table(self.TABLE_NAME)
            .select(RECIPE_COLUMNS)
            .eq("youtube_video_id", youtube_video_id)
            .limit(1),
        )
        row = _first(result.data)
        return _row_to_recipe(row) if row else None

    def find_legacy_recipe(self, youtube_video_id: str, canonical_url: str) -> Recipe | None:
        # Quoted so the URL's reserved characters survive the or=() filter.
        url_filter = f'video_url.eq."{canonical_url}",video_url.like.*{youtube_video_id}*'
        result = _execute(
            "find_legacy_recipe",
            self._client.table(self.TABLE_NAME)
            .select(RECIPE_COLUMNS)
            .is_("youtube_video_id", "null")
            .or_(url_filter)
            .order("created_at")
            .limit(LEGACY_CANDIDATE_LIMIT),
        )
        # LIKE reads "_" in the id as a wildcard, so confirm the literal id.
        for row in result.data or []:
            video_url = row.get("video_url") or ""
            if video_url == canonical_url or youtube_video_id in video_url:
                return _row_to_recipe(row)
        return None

    def backfill_video_id(self, recipe_id: str, youtube_video_id: str, canonical_url: str) -> None:
        _execute(
            "backfill_video_id",
            self._client.table(self.TABLE_NAME)
            .update({"youtube_video_id": youtube_video_id, "video_url": canonical_url})
            .eq("id", recipe_id),
        )

    def insert_recipe(
        self,
        youtube_video_id: str,
        title: str,
        channel: str,
        video_url: str,
    ) -> Recipe:
        payload = {
            "youtube_video_id": youtube_video_id,
            "title": title,
            "channel": channel,
            "video_url": video_url,
            "sync_status": RECIPE_STATUS_SYNCED,
        }
        result = _execute("insert_recipe", self._client.table(self.TABLE_NAME).insert(payload))
        row = _first(result.data)
        if not row:
            raise CatalogRepositoryError("insert_recipe", "no row returned")
        return _row_to_recipe(row)

    def find_user_recipe(self, user_id: str, recipe_id: str, playlist_id: str) -> UserRecipe | None:
        result = _execute(
            "find_user_recipe",
            self._client.table(self.LINK_TABLE_NAME)
            .select("*")
            .eq("user_id", user_id)
            .eq("recipe_id", recipe_id)
            .eq("playlist_id", playlist_id)
            .limit(1),
        )
        row = _first(result.data)
        return _row_to_user_recipe(row) if row else None

    def insert_user_recipe(
        self,
        user_id: str,
        recipe_id: str,
        playlist_id: str,
        position: int,
        added_at: datetime,
    ) -> UserRecipe:
        payload = {
            "user_id": user_id,
            "recipe_id": recipe_id,
            "playlist_id": playlist_id,
            "position_in_playlist": position,
            "added_at": added_at.isoformat(),
        }
        result = _execute(
            "insert_user_recipe",
            self._client.table(self.LINK_TABLE_NAME).insert(payload),
        )
        row = _first(result.data)
        if not row:
            raise CatalogRepositoryError("insert_user_recipe", "no row returned")
        return _row_to_user_recipe(row)

    def list_active_recipe_links(self, user_id: str) -> list[ActiveRecipeLink]:
        links: list[ActiveRecipeLink] = []
        start = 0
        while True:
            result = _execute(
                "list_active_recipe_links",
                self._client.table(self.LINK_TABLE_NAME)
                .select(ACTIVE_LINK_COLUMNS)
                .eq("user_id", user_id)
                .eq("user_playlists.active", True)
                .order("id")
                .range(start, start + PAGE_SIZE - 1),
            )
            rows = result.data or []
            for row in rows:
                link = _row_to_active_link(row)
                if link is not None:
                    links.append(link)
            if len(rows) < PAGE_SIZE:
                return links
            start += PAGE_SIZE

    def get_recipes_by_ids(self, recipe_ids: Sequence[str]) -> list[Recipe]:
        ids = [str(rid) for rid in recipe_ids if rid]
        if not ids:
            return []
        result = _execute(
            "get_recipes_by_ids",
            self._client.table(self.TABLE_NAME).select(RECIPE_COLUMNS).in_("id", ids),
        )
        return [_row_to_recipe(row) for row in result.data or []]

    def update_recipe_fields(self, recipe_id: str, fields: dict[str, Any]) -> None:
        if not fields:
            return
        _execute(
            "update_recipe_fields",
            self._client.table(self.TABLE_NAME).update(fields).eq("id", recipe_id),
        )
