"""Normalization and validation of raw YouTube items into canonical video records"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from pydantic import ValidationError as PydanticValidationError

from ..models.video_models import CanonicalVideo, RawThumbnail, RawVideoItem, RawVideoId, TransformResult

logger = logging.getLogger(__name__)

THUMBNAIL_PRIORITY = ("high", "medium", "default")


def sanitize_string(value: Any) -> Optional[str]:
    """Strip angle brackets and whitespace; non-strings and empty results become None"""
    if not isinstance(value, str):
        return None
    sanitized = value.replace("<", "").replace(">", "").strip()
    return sanitized or None


def is_valid_url(url: Any) -> bool:
    """Check that a string parses as an absolute http or https URL"""
    if not isinstance(url, str) or not url:
        return False
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def extract_thumbnail(thumbnails: Dict[str, RawThumbnail]) -> Optional[str]:
    """Return the first valid thumbnail URL in high, medium, default order"""
    for tier in THUMBNAIL_PRIORITY:
        thumbnail = thumbnails.get(tier)
        if thumbnail is None:
            continue
        url = sanitize_string(thumbnail.url)
        if url and is_valid_url(url):
            return url
    return None


def extract_video_id(raw_id: Any) -> Optional[str]:
    """Resolve the plain string id or the nested ``videoId`` of a search result"""
    if isinstance(raw_id, RawVideoId):
        return sanitize_string(raw_id.videoId)
    return sanitize_string(raw_id)


def current_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def transform_video_item(item: Any) -> Optional[CanonicalVideo]:
    """
    Transform a single raw item into a canonical video.

    Returns None when the item has no usable id or no valid thumbnail;
    every other missing field falls back to a default.
    """
    try:
        raw = item if isinstance(item, RawVideoItem) else RawVideoItem.model_validate(item)
    except PydanticValidationError as e:
        logger.warning(f"Malformed YouTube video item: {e.error_count()} validation errors")
        return None

    video_id = extract_video_id(raw.id)
    if not video_id:
        logger.warning("Missing video id in YouTube video item")
        return None

    snippet = raw.snippet
    if snippet is None:
        logger.warning(f"Missing snippet for video {video_id}")
        return None

    thumbnail = extract_thumbnail(snippet.thumbnails)
    if not thumbnail:
        logger.warning(f"No valid thumbnail found for video {video_id}")
        return None

    statistics = raw.statistics

    return CanonicalVideo(
        id=video_id,
        title=sanitize_string(snippet.title) or "Untitled",
        channelTitle=sanitize_string(snippet.channelTitle) or "Unknown Channel",
        thumbnail=thumbnail,
        publishedAt=sanitize_string(snippet.publishedAt) or current_timestamp(),
        viewCount=(sanitize_string(statistics.viewCount) if statistics else None) or "0",
        likeCount=(sanitize_string(statistics.likeCount) if statistics else None) or "0",
    )


def validate_api_payload(payload: Any) -> TransformResult:
    """
    Transform a raw API payload and report on its data quality.

    The result is invalid (no videos, at least one reason) when the payload
    is missing, has no item list, has an empty item list, or every item is
    dropped.
    """
    if not isinstance(payload, dict):
        return TransformResult(reasons=["API response is null or invalid"])

    items = payload.get("items")
    if not isinstance(items, list):
        return TransformResult(reasons=["API response missing items array"])

    if not items:
        return TransformResult(reasons=["No videos found in API response"])

    videos: List[CanonicalVideo] = []
    for item in items:
        video = transform_video_item(item)
        if video is not None:
            videos.append(video)

    dropped_count = len(items) - len(videos)
    reasons = []

    if not videos:
        reasons.append("No valid videos after transformation and validation")
    elif dropped_count:
        reasons.append(f"{dropped_count} videos were filtered out due to invalid data")

    if dropped_count:
        logger.info(f"Dropped {dropped_count} of {len(items)} YouTube items during validation")

    return TransformResult(videos=videos, dropped_count=dropped_count, reasons=reasons)


def _parse_count(value: str) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def format_view_count(view_count: str) -> str:
    """Format a raw view count for display, e.g. ``1.2M views``"""
    count = _parse_count(view_count)
    if count is None:
        return "0 views"

    if count >= 1_000_000_000:
        return f"{count / 1_000_000_000:.1f}B views"
    elif count >= 1_000_000:
        return f"{count / 1_000_000:.1f}M views"
    elif count >= 1_000:
        return f"{count / 1_000:.1f}K views"
    return f"{count} views"


def format_like_count(like_count: str) -> str:
    """Format a raw like count for display, e.g. ``3.4K likes``"""
    count = _parse_count(like_count)
    if count is None:
        return "0 likes"

    if count >= 1_000_000:
        return f"{count / 1_000_000:.1f}M likes"
    elif count >= 1_000:
        return f"{count / 1_000:.1f}K likes"
    return f"{count} likes"


def format_published_date(published_at: str, now: Optional[datetime] = None) -> str:
    """Format an ISO timestamp relative to now, e.g. ``3 days ago``"""
    try:
        published = datetime.fromisoformat(published_at.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return "Unknown date"

    if published.tzinfo is None:
        published = published.replace(tzinfo=timezone.utc)

    now = now or datetime.now(timezone.utc)
    days = (now - published).days

    if days <= 0:
        return "Today"
    elif days == 1:
        return "Yesterday"
    elif days < 7:
        return f"{days} days ago"
    elif days < 30:
        weeks = days // 7
        return f"{weeks} week{'s' if weeks > 1 else ''} ago"
    elif days < 365:
        months = days // 30
        return f"{months} month{'s' if months > 1 else ''} ago"
    years = days // 365
    return f"{years} year{'s' if years > 1 else ''} ago"
