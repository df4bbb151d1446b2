# recipe_sync/app/schemas/sync.py
from __future__ import annotations

from pydantic import AliasChoices, BaseModel, Field

from recipe_sync.app.domain.models import SyncStatus
from recipe_sync.app.schemas.common import ItemErrorOut


class SyncRequest(BaseModel):
    user_playlist_id: str = Field(..., min_length=1)
    youtube_token: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("youtube_token", "external_credential"),
    )


class SyncResponse(BaseModel):
    success: bool = True
    status: SyncStatus
    playlist_name: str
    total_videos: int
    global_recipes_created: int
    user_recipes_added: int
    already_in_playlist: int
    errors_count: int
    errors: list[ItemErrorOut] = Field(default_factory=list)
    sync_log_id: str
