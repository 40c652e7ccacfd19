"""
Helper utility functions for the TubeChat application.
"""

import re
from typing import Optional
from urllib.parse import urlparse, parse_qs


VIDEO_ID_PATTERN = re.compile(r"^[0-9A-Za-z_-]{11}$")

YOUTUBE_HOSTS = {
    "youtube.com",
    "www.youtube.com",
    "m.youtube.com",
    "music.youtube.com",
    "youtube-nocookie.com",
    "www.youtube-nocookie.com",
}

SHORT_HOSTS = {"youtu.be", "www.youtu.be"}

# Path prefixes that carry the video ID as the next path segment
PATH_PREFIXES = ("embed", "shorts", "live", "v", "e")


def extract_video_id(url: str) -> Optional[str]:
    """
    Extract the video ID from a YouTube URL.

    Accepts watch, short (youtu.be), embed, shorts and live links as well as
    a bare 11-character video ID.

    Args:
        url: YouTube URL or video ID

    Returns:
        The 11-character video ID, or None if the URL is not a YouTube video link
    """
    if not url or not url.strip():
        return None

    url = url.strip()
    if VIDEO_ID_PATTERN.match(url):
        return url

    if "://" not in url:
        url = f"https://{url}"

    try:
        parsed = urlparse(url)
    except ValueError:
        return None

    host = (parsed.hostname or "").lower()
    segments = [s for s in parsed.path.split("/") if s]

    candidate = None
    if host in SHORT_HOSTS:
        candidate = segments[0] if segments else None
    elif host in YOUTUBE_HOSTS:
        query_ids = parse_qs(parsed.query).get("v")
        if query_ids:
            candidate = query_ids[0]
        elif len(segments) >= 2 and segments[0] in PATH_PREFIXES:
            candidate = segments[1]

    if candidate and VIDEO_ID_PATTERN.match(candidate):
        return candidate
    return None


def watch_url(video_id: str) -> str:
    """Build the canonical watch URL for a video ID."""
    return f"https://www.youtube.com/watch?v={video_id}"


def format_duration(seconds: float) -> str:
    """
    Format a duration in seconds as H:MM:SS (or M:SS under an hour).

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted duration string
    """
    total = max(0, int(seconds))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"
