"""
Content service: download packs (videos) and their assets.

Validation and slug/tag/filename normalization live here; the repositories
only persist. Store failures are translated into the service's error taxonomy.
"""
import logging
import re
import unicodedata
from functools import wraps
from typing import Iterable, List, Optional, Union
from urllib.parse import quote

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from constants import DEFAULT_MIME_TYPE, FILENAME_MAX_LENGTH, MIME_TYPES, SLUG_MAX_LENGTH
from exceptions import ConflictError, NotFoundError, StoreError, ValidationError
from repositories.asset_repository import AssetRepository
from repositories.video_repository import VideoRepository
from services.thumbnails import resolve_thumbnail
from utils import epoch_millis, now_utc

logger = logging.getLogger("main")

NON_ALNUM = re.compile(r"[^a-z0-9]+")
LINE_BREAKS = re.compile(r"[\r\n]+")
PATH_SEPARATORS = re.compile(r"[\\/]")
ILLEGAL_FILENAME_CHARS = re.compile(r'[<>:"|?*\x00-\x1f\x7f]')
REPEATED_WHITESPACE = re.compile(r"\s{2,}")


def slugify(value: str) -> str:
    slug = NON_ALNUM.sub("-", (value or "").lower()).strip("-")[:SLUG_MAX_LENGTH].strip("-")
    return slug or f"video-{epoch_millis()}"


def parse_tags(raw: Union[str, Iterable[str], None]) -> List[str]:
    """Comma separated (or already split) tags: trimmed, blanks and duplicates dropped, order kept."""
    if not raw:
        return []
    items = raw.split(",") if isinstance(raw, str) else raw
    tags = []
    seen = set()
    for item in items:
        tag = str(item).strip()
        if tag and tag.lower() not in seen:
            seen.add(tag.lower())
            tags.append(tag)
    return tags


def tags_to_string(tags: Optional[Iterable[str]]) -> str:
    return ", ".join(tags or [])


def normalize_snippet_content(value: str) -> str:
    return value.replace("\r\n", "\n")


def sanitize_filename(value: Optional[str]) -> str:
    fallback = f"asset-{epoch_millis()}.txt"
    if not value:
        return fallback
    cleaned = LINE_BREAKS.sub(" ", value).strip()
    if not cleaned:
        return fallback
    cleaned = PATH_SEPARATORS.sub("-", cleaned)
    cleaned = ILLEGAL_FILENAME_CHARS.sub("", cleaned)
    cleaned = REPEATED_WHITESPACE.sub(" ", cleaned)
    return cleaned[:FILENAME_MAX_LENGTH].strip() or fallback


def resolve_filename(label: str, provided: Optional[str] = None) -> str:
    base = provided if provided and provided.strip() else label
    if "." not in base:
        base = f"{base}.txt"
    return sanitize_filename(base)


def detect_mime_type(filename: str) -> str:
    if "." not in filename:
        return DEFAULT_MIME_TYPE
    extension = filename.rsplit(".", 1)[1].lower()
    return MIME_TYPES.get(extension, DEFAULT_MIME_TYPE)


def ascii_filename(filename: str) -> str:
    """ASCII stand-in for the quoted filename parameter; filename* carries the real name"""
    folded = unicodedata.normalize("NFKD", filename).encode("ascii", "ignore").decode("ascii")
    return folded.replace('"', "'").strip() or "download.txt"


def content_disposition(filename: str) -> str:
    safe = ascii_filename(filename)
    return f"attachment; filename=\"{safe}\"; filename*=UTF-8''{quote(filename, safe='')}"


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def translate_store_errors(action):
    """Turn SQLAlchemy failures into StoreError without leaking their detail to callers"""
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except SQLAlchemyError as e:
                raise StoreError(f"Could not {action}", detail=f"{f.__name__}: {e}")
        return wrapper
    return decorator


class ContentService:
    def __init__(self, videos=VideoRepository, assets=AssetRepository):
        self.videos = videos
        self.assets = assets

    @translate_store_errors("load videos")
    def list(self, query: Optional[str] = None):
        query = _clean(query)
        if query:
            return self.videos.search(query)
        return self.videos.get_all()

    def search(self, query: str):
        """Case-insensitive match on title, description and tags; a blank query lists everything."""
        return self.list(query)

    @translate_store_errors("load video")
    def get(self, video_id: int):
        video = self.videos.get_by_id(video_id)
        if video is None:
            raise NotFoundError(f"Video with ID '{video_id}' not found")
        return video

    def _video_fields(self, title, description, video_url, thumbnail_url, tags):
        title = _clean(title)
        if not title:
            raise ValidationError("Title is required")
        video_url = _clean(video_url)
        return {
            "title": title,
            "description": _clean(description),
            "video_url": video_url,
            "thumbnail_url": resolve_thumbnail(_clean(thumbnail_url), video_url),
            "tags": parse_tags(tags),
        }

    def create(self, title, slug=None, description=None, video_url=None, thumbnail_url=None, tags=None):
        fields = self._video_fields(title, description, video_url, thumbnail_url, tags)
        explicit_slug = _clean(slug)
        fields["slug"] = slugify(explicit_slug) if explicit_slug else slugify(fields["title"])
        try:
            video = self.videos.create(**fields)
        except IntegrityError:
            raise ConflictError(f"Slug '{fields['slug']}' is already taken")
        except SQLAlchemyError as e:
            raise StoreError("Failed to create video", detail=str(e))
        logger.info(f"Created video pack {video.id} ({video.slug})")
        return video

    def update(self, video_id, title, description=None, video_url=None, thumbnail_url=None, tags=None):
        fields = self._video_fields(title, description, video_url, thumbnail_url, tags)
        fields["updated_at"] = now_utc()
        try:
            video = self.videos.update(video_id, **fields)
        except SQLAlchemyError as e:
            raise StoreError("Update failed", detail=str(e))
        if video is None:
            raise NotFoundError(f"Video with ID '{video_id}' not found")
        logger.info(f"Updated video pack {video_id}")
        return video

    @translate_store_errors("delete video")
    def delete(self, video_id) -> bool:
        deleted = self.videos.delete(video_id)
        if deleted:
            logger.info(f"Deleted video pack {video_id}")
        return deleted

    def add_asset(self, video_id, label, url=None, filename=None, content=None, sort_order=None):
        label = _clean(label)
        if not label:
            raise ValidationError("Asset label is required")

        normalized = normalize_snippet_content(content) if content else ""
        has_content = bool(normalized.strip())
        url = _clean(url)
        if not has_content and not url:
            raise ValidationError("Provide content or a URL")

        try:
            if self.videos.get_by_id(video_id) is None:
                raise NotFoundError(f"Video with ID '{video_id}' not found")
            if sort_order is None:
                sort_order = self.assets.next_sort_order(video_id)
            asset = self.assets.create(
                video_id=video_id,
                label=label,
                url=None if has_content else url,
                filename=resolve_filename(label, filename) if has_content else None,
                content=normalized if has_content else None,
                sort_order=sort_order,
            )
        except SQLAlchemyError as e:
            raise StoreError("Could not add asset", detail=str(e))
        logger.info(f"Added asset {asset.id} to video pack {video_id}")
        return asset

    @translate_store_errors("remove asset")
    def remove_asset(self, asset_id) -> bool:
        return self.assets.delete(asset_id)

    @translate_store_errors("load asset")
    def get_asset(self, asset_id):
        return self.assets.get_by_id(asset_id)

    def serialize_for_api(self, videos=None):
        """Public JSON view; inline asset content is never included."""
        if videos is None:
            videos = self.list()
        return [video.to_dict(include_content=False) for video in videos]
