import re
from typing import Optional

# order matters: the first pattern that matches wins
VIDEO_ID_PATTERNS = [
    re.compile(r"(?:https?://)?(?:www\.)?youtube\.com/watch\?v=([^&\n?#]+)"),
    re.compile(r"(?:https?://)?(?:www\.)?youtube\.com/embed/([^&\n?#]+)"),
    re.compile(r"(?:https?://)?(?:www\.)?youtube\.com/v/([^&\n?#]+)"),
    re.compile(r"(?:https?://)?youtu\.be/([^&\n?#]+)"),
]


def extract_video_id(url: str) -> Optional[str]:
    """Return the video id captured by the first matching URL shape, or None."""
    for pattern in VIDEO_ID_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


def watch_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"
