from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Sequence

import httpx
import requests
from youtube_transcript_api import CouldNotRetrieveTranscript, YouTubeTranscriptApi

from .errors import NetworkTimeoutError, TranscriptUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_TRANSCRIPT_API_URL = "https://transcript-microservice.fly.dev/transcript"


class TranscriptSource(ABC):
    """Returns the spoken text of a video, or raises when there is none."""

    @abstractmethod
    def fetch_transcript(self, video_id: str) -> str:
        """
        Raises:
            TranscriptUnavailableError: no transcript, or an empty one
            NetworkTimeoutError: the source did not answer in time
        """
        pass


class HttpTranscriptSource(TranscriptSource):
    """Transcript microservice: GET <url>?video_id=<id> -> {"transcript": "..."}."""

    def __init__(
        self,
        api_url: str = DEFAULT_TRANSCRIPT_API_URL,
        timeout_seconds: float = 10.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.api_url = api_url
        self.timeout_seconds = timeout_seconds
        self._http_client = http_client

    def fetch_transcript(self, video_id: str) -> str:
        params = {"video_id": video_id}
        try:
            if self._http_client is not None:
                response = self._http_client.get(
                    self.api_url, params=params, timeout=self.timeout_seconds
                )
            else:
                with httpx.Client(timeout=self.timeout_seconds) as client:
                    response = client.get(self.api_url, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.TimeoutException as error:
            raise NetworkTimeoutError(self.api_url, self.timeout_seconds) from error
        except httpx.HTTPStatusError as error:
            raise TranscriptUnavailableError(
                f"Transcript fetch failed: {error.response.status_code}"
            ) from error
        except (httpx.HTTPError, ValueError) as error:
            raise TranscriptUnavailableError(f"Transcript fetch failed: {error}") from error

        text = payload.get("transcript") if isinstance(payload, dict) else None
        if not isinstance(text, str) or not text.strip():
            raise TranscriptUnavailableError(f"Empty transcript for {video_id}")
        return text.strip()


class _TimeoutSession(requests.Session):
    def __init__(self, timeout_seconds: float) -> None:
        super().__init__()
        self._timeout_seconds = timeout_seconds

    def request(self, method, url, **kwargs):  # type: ignore[override]
        kwargs.setdefault("timeout", self._timeout_seconds)
        return super().request(method, url, **kwargs)


class YouTubeCaptionTranscriptSource(TranscriptSource):
    """Reads YouTube captions directly through youtube-transcript-api."""

    def __init__(
        self,
        languages: Sequence[str] = ("en",),
        timeout_seconds: float = 10.0,
        api: YouTubeTranscriptApi | None = None,
    ) -> None:
        self.languages = list(languages)
        self.timeout_seconds = timeout_seconds
        self._api = api or YouTubeTranscriptApi(http_client=_TimeoutSession(timeout_seconds))

    def fetch_transcript(self, video_id: str) -> str:
        try:
            fetched = self._api.fetch(video_id, languages=self.languages)
        except CouldNotRetrieveTranscript as error:
            raise TranscriptUnavailableError(f"No captions for {video_id}: {type(error).__name__}") from error
        except requests.Timeout as error:
            raise NetworkTimeoutError(f"youtube:{video_id}", self.timeout_seconds) from error
        except requests.RequestException as error:
            raise TranscriptUnavailableError(f"Caption request failed: {error}") from error

        data = fetched.to_raw_data() if hasattr(fetched, "to_raw_data") else fetched
        text_parts = [
            item.get("text", "").strip()
            for item in data
            if item.get("text")
        ]
        full_text = " ".join(text_parts).strip()
        if not full_text:
            raise TranscriptUnavailableError(f"Empty transcript for {video_id}")
        return full_text
