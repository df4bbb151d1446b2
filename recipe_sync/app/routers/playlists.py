# recipe_sync/app/routers/playlists.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from starlette.concurrency import run_in_threadpool

from recipe_sync.app.deps import get_connection_service, get_youtube_token
from recipe_sync.app.domain.errors import CatalogRepositoryError, PlaylistNotFoundError
from recipe_sync.app.routers.common import upstream_http_error
from recipe_sync.app.schemas.playlists import (
    PlaylistConnectRequest,
    PlaylistDisconnectRequest,
    UserPlaylistOut,
    YouTubePlaylistOut,
)
from recipe_sync.app.services.playlist_connections import PlaylistConnectionService
from recipe_sync.services.errors import ServiceError

router = APIRouter(prefix="/playlists", tags=["playlists"])


@router.get("/", response_model=list[UserPlaylistOut])
async def list_playlists(
    user_id: str = Query(..., min_length=1),
    service: PlaylistConnectionService = Depends(get_connection_service),
) -> list[UserPlaylistOut]:
    try:
        playlists = await run_in_threadpool(service.list_connected, user_id)
    except CatalogRepositoryError as exc:
        raise upstream_http_error(exc)
    return [UserPlaylistOut.model_validate(p) for p in playlists]


@router.get("/youtube", response_model=list[YouTubePlaylistOut])
async def list_youtube_playlists(
    token: str = Depends(get_youtube_token),
    service: PlaylistConnectionService = Depends(get_connection_service),
) -> list[YouTubePlaylistOut]:
    try:
        playlists = await run_in_threadpool(service.discover, token)
    except ServiceError as exc:
        raise upstream_http_error(exc)
    return [YouTubePlaylistOut.model_validate(p) for p in playlists]


@router.post("/connect", response_model=UserPlaylistOut, status_code=status.HTTP_201_CREATED)
async def connect_playlist(
    payload: PlaylistConnectRequest,
    service: PlaylistConnectionService = Depends(get_connection_service),
) -> UserPlaylistOut:
    try:
        playlist = await run_in_threadpool(
            service.connect, payload.user_id, payload.youtube_playlist_id, payload.title
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except CatalogRepositoryError as exc:
        raise upstream_http_error(exc)
    return UserPlaylistOut.model_validate(playlist)


@router.post("/{user_playlist_id}/disconnect", response_model=UserPlaylistOut)
async def disconnect_playlist(
    user_playlist_id: str,
    payload: PlaylistDisconnectRequest,
    service: PlaylistConnectionService = Depends(get_connection_service),
) -> UserPlaylistOut:
    try:
        playlist = await run_in_threadpool(service.disconnect, payload.user_id, user_playlist_id)
    except PlaylistNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except CatalogRepositoryError as exc:
        raise upstream_http_error(exc)
    return UserPlaylistOut.model_validate(playlist)
