from __future__ import annotations

import logging

from recipe_sync.app.domain.errors import PlaylistNotFoundError
from recipe_sync.app.domain.models import UserPlaylist, YouTubePlaylistSummary
from recipe_sync.app.infra.db.base import PlaylistRepository
from recipe_sync.services.youtube_playlists import YouTubePlaylistSource

logger = logging.getLogger(__name__)


class PlaylistConnectionService:
    """Connect, disconnect and discover the playlists a user syncs from."""

    def __init__(self, playlists: PlaylistRepository, video_source: YouTubePlaylistSource):
        self._playlists = playlists
        self._video_source = video_source

    def connect(self, user_id: str, youtube_playlist_id: str, title: str) -> UserPlaylist:
        youtube_playlist_id = youtube_playlist_id.strip()
        if not youtube_playlist_id:
            raise ValueError("youtube_playlist_id is required")
        return self._playlists.upsert_user_playlist(
            user_id, youtube_playlist_id, title.strip() or youtube_playlist_id
        )

    def disconnect(self, user_id: str, user_playlist_id: str) -> UserPlaylist:
        # Links and sync history stay; the playlist just stops surfacing.
        playlist = self._playlists.set_playlist_active(user_playlist_id, user_id, False)
        if playlist is None:
            raise PlaylistNotFoundError(user_playlist_id)
        logger.info("Playlist disconnected: user=%s, playlist=%s", user_id, user_playlist_id)
        return playlist

    def list_connected(self, user_id: str) -> list[UserPlaylist]:
        return self._playlists.list_user_playlists(user_id)

    def discover(self, credential: str) -> list[YouTubePlaylistSummary]:
        return self._video_source.list_user_playlists(credential)
