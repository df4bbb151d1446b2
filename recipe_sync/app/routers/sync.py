# recipe_sync/app/routers/sync.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from starlette.concurrency import run_in_threadpool

from recipe_sync.app.deps import get_sync_service
from recipe_sync.app.domain.errors import (
    CatalogRepositoryError,
    PlaylistNotFoundError,
    PlaylistSyncDisabledError,
)
from recipe_sync.app.routers.common import serialize_errors, upstream_http_error
from recipe_sync.app.schemas.sync import SyncRequest, SyncResponse
from recipe_sync.app.services.playlist_sync import PlaylistSyncService
from recipe_sync.services.errors import ServiceError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sync", tags=["sync"])


@router.post("/playlist", response_model=SyncResponse)
async def sync_playlist(
    payload: SyncRequest,
    service: PlaylistSyncService = Depends(get_sync_service),
) -> SyncResponse:
    try:
        result = await run_in_threadpool(
            service.sync_playlist, payload.user_playlist_id, payload.youtube_token
        )
    except PlaylistNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except PlaylistSyncDisabledError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    except (ServiceError, CatalogRepositoryError) as exc:
        logger.error("Playlist sync failed: playlist=%s, error=%s", payload.user_playlist_id, exc)
        raise upstream_http_error(exc)

    return SyncResponse(
        status=result.status,
        playlist_name=result.playlist_title,
        total_videos=result.total_videos,
        global_recipes_created=result.global_recipes_created,
        user_recipes_added=result.user_recipes_added,
        already_in_playlist=result.already_in_playlist,
        errors_count=result.errors_count,
        errors=serialize_errors(result.errors),
        sync_log_id=result.sync_log_id,
    )
