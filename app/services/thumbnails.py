"""
Thumbnail enrichment: derive a preview image from a YouTube link when the
admin did not supply one. Purely best-effort.
"""
import re
from typing import Optional
from urllib.parse import urlparse, parse_qs

from constants import YOUTUBE_THUMBNAIL_URL

YOUTUBE_ID_LENGTH = 11
PATH_PREFIXES = ("shorts", "embed", "live")
FALLBACK_PATTERN = re.compile(r"(?:v=|/)([0-9A-Za-z_-]{11})")


def extract_youtube_video_id(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    trimmed = value.strip()
    if not trimmed:
        return None

    try:
        parsed = urlparse(trimmed)
        host = (parsed.hostname or "").lower()
    except ValueError:
        host = ""
        parsed = None

    if parsed is not None and host:
        parts = [part for part in parsed.path.split("/") if part]
        if host == "youtu.be" and parts and len(parts[0]) == YOUTUBE_ID_LENGTH:
            return parts[0]

        if host.endswith("youtube.com"):
            watch_id = parse_qs(parsed.query).get("v", [None])[0]
            if watch_id and len(watch_id) == YOUTUBE_ID_LENGTH:
                return watch_id
            if len(parts) >= 2 and parts[0] in PATH_PREFIXES and len(parts[1]) == YOUTUBE_ID_LENGTH:
                return parts[1]

    match = FALLBACK_PATTERN.search(trimmed)
    return match.group(1) if match else None


def youtube_thumbnail_url(video_id: str) -> str:
    return YOUTUBE_THUMBNAIL_URL.format(video_id=video_id)


def resolve_thumbnail(thumbnail_url: Optional[str], video_url: Optional[str]) -> Optional[str]:
    """Keep an explicit thumbnail, otherwise try to derive one from the video link."""
    if thumbnail_url:
        return thumbnail_url
    video_id = extract_youtube_video_id(video_url)
    if video_id:
        return youtube_thumbnail_url(video_id)
    return None
