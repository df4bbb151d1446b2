# recipe_sync/app/schemas/playlists.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PlaylistConnectRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    youtube_playlist_id: str = Field(..., min_length=1, max_length=64)
    title: str = Field(default="", max_length=200)


class PlaylistDisconnectRequest(BaseModel):
    user_id: str = Field(..., min_length=1)


class UserPlaylistOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    youtube_playlist_id: str
    title: str
    active: bool
    sync_enabled: bool
    last_synced: Optional[datetime] = None
    video_count: Optional[int] = None


class YouTubePlaylistOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    playlist_id: str
    title: str
    item_count: int = 0
    description: Optional[str] = None
