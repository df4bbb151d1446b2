from __future__ import annotations

import logging
from typing import Any, Iterator

import httpx

from recipe_sync.app.domain.models import PlaylistVideo, YouTubePlaylistSummary

from .errors import (
    CredentialRejectedError,
    NetworkTimeoutError,
    PlaylistSourceError,
    RateLimitedError,
)

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://www.googleapis.com/youtube/v3"
PAGE_SIZE = 50
UNKNOWN_CHANNEL = "Unknown Channel"
QUOTA_REASONS = {"quotaExceeded", "rateLimitExceeded", "userRateLimitExceeded"}


def _clean_string(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def _error_reason(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    errors = (body.get("error") or {}).get("errors") or []
    if errors and isinstance(errors[0], dict):
        return errors[0].get("reason")
    return None


def _item_to_video(item: dict[str, Any], position: int) -> PlaylistVideo:
    snippet = item.get("snippet") or {}
    resource = snippet.get("resourceId") or {}
    video_id = _clean_string(resource.get("videoId")) or _clean_string(
        (item.get("contentDetails") or {}).get("videoId")
    )
    return PlaylistVideo(
        video_id=video_id,
        title=_clean_string(snippet.get("title")) or "Untitled video",
        channel=_clean_string(snippet.get("videoOwnerChannelTitle")) or UNKNOWN_CHANNEL,
        description=snippet.get("description"),
        position=position,
    )


class YouTubePlaylistSource:
    """Reads playlists through the YouTube Data API with a user's OAuth token."""

    def __init__(
        self,
        api_base: str = DEFAULT_API_BASE,
        timeout_seconds: float = 15.0,
        max_pages: int = 20,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.api_base = api_base.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.max_pages = max_pages
        self._http_client = http_client

    def fetch_playlist_videos(self, youtube_playlist_id: str, access_token: str) -> list[PlaylistVideo]:
        """Every entry of the playlist in playlist order; position is the 0-based index."""
        params = {"part": "snippet,contentDetails", "playlistId": youtube_playlist_id}
        videos = [
            _item_to_video(item, position)
            for position, item in enumerate(self._paginate("playlistItems", params, access_token))
        ]
        logger.info("Fetched %d videos for playlist %s", len(videos), youtube_playlist_id)
        return videos

    def list_user_playlists(self, access_token: str) -> list[YouTubePlaylistSummary]:
        params = {"part": "snippet,contentDetails", "mine": "true"}
        summaries: list[YouTubePlaylistSummary] = []
        for item in self._paginate("playlists", params, access_token):
            playlist_id = _clean_string(item.get("id"))
            if not playlist_id:
                continue
            snippet = item.get("snippet") or {}
            details = item.get("contentDetails") or {}
            summaries.append(
                YouTubePlaylistSummary(
                    playlist_id=playlist_id,
                    title=_clean_string(snippet.get("title")) or playlist_id,
                    item_count=int(details.get("itemCount") or 0),
                    description=_clean_string(snippet.get("description")),
                )
            )
        return summaries

    def _paginate(
        self,
        resource: str,
        params: dict[str, str],
        access_token: str,
    ) -> Iterator[dict[str, Any]]:
        page_token: str | None = None
        for _ in range(self.max_pages):
            query = {**params, "maxResults": str(PAGE_SIZE)}
            if page_token:
                query["pageToken"] = page_token
            data = self._get(resource, query, access_token)
            yield from data.get("items") or []
            page_token = data.get("nextPageToken")
            if not page_token:
                return
        logger.warning("Stopped paging %s after %d pages", resource, self.max_pages)

    def _get(self, resource: str, params: dict[str, str], access_token: str) -> dict[str, Any]:
        url = f"{self.api_base}/{resource}"
        headers = {"Authorization": f"Bearer {access_token}", "Accept": "application/json"}
        try:
            if self._http_client is not None:
                response = self._http_client.get(
                    url, params=params, headers=headers, timeout=self.timeout_seconds
                )
            else:
                with httpx.Client(timeout=self.timeout_seconds) as client:
                    response = client.get(url, params=params, headers=headers)
        except httpx.TimeoutException as error:
            raise NetworkTimeoutError(url, self.timeout_seconds) from error
        except httpx.HTTPError as error:
            raise PlaylistSourceError(f"YouTube API request failed: {error}") from error

        if response.status_code == 401:
            raise CredentialRejectedError("YouTube rejected the access token")
        if response.status_code == 403 and _error_reason(response) in QUOTA_REASONS:
            raise RateLimitedError("YouTube API quota exhausted")
        if response.is_error:
            raise PlaylistSourceError(
                f"YouTube API error: {response.status_code} {response.text[:300]}"
            )
        return response.json()
