from __future__ import annotations

import pytest

from recipe_sync.services.ids import canonical_video_url, extract_video_id


class TestCanonicalVideoUrl:
    def test_watch_url(self) -> None:
        assert canonical_video_url("dQw4w9WgXcQ") == "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


class TestExtractVideoId:
    @pytest.mark.parametrize(
        "url",
        [
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
            "https://www.youtube.com/watch?feature=share&v=dQw4w9WgXcQ&t=42",
            "https://youtu.be/dQw4w9WgXcQ",
            "https://youtu.be/dQw4w9WgXcQ?si=abc",
            "https://www.youtube.com/shorts/dQw4w9WgXcQ",
        ],
    )
    def test_known_url_shapes(self, url: str) -> None:
        assert extract_video_id(url) == "dQw4w9WgXcQ"

    def test_falls_back_to_last_eleven_chars(self) -> None:
        assert extract_video_id("https://example.com/embed/abcdefghijk") == "abcdefghijk"

    @pytest.mark.parametrize("url", [None, ""])
    def test_empty_input(self, url: str | None) -> None:
        assert extract_video_id(url) is None
