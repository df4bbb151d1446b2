# recipe_sync/services/ids.py
import re

VIDEO_ID_LENGTH = 11
CANONICAL_WATCH_URL = "https://www.youtube.com/watch?v={video_id}"

_YT_RE = re.compile(r"(?:v=|youtu\.be/|shorts/)([\w-]{11})")


def canonical_video_url(video_id: str) -> str:
    return CANONICAL_WATCH_URL.format(video_id=video_id)


def extract_video_id(url: str | None) -> str | None:
    """Return the 11-character video id embedded in a YouTube URL.

    Recognizes ``watch?v=``, ``youtu.be/`` and ``/shorts/`` links. Anything
    else falls back to the last 11 characters of the URL, which silently
    yields a wrong id for malformed input; callers that need certainty should
    prefer a stored ``youtube_video_id``.
    """
    if not url:
        return None
    match = _YT_RE.search(url)
    if match:
        return match.group(1)
    tail = url.strip()[-VIDEO_ID_LENGTH:]
    return tail or None
