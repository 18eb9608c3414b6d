"""Video data models for YouTube API responses and canonical output records"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, List, Optional, Union
from enum import Enum


class QueryShape(str, Enum):
    """Parameter set used to query the external video source"""
    CHART = "chart"
    SEARCH = "search"


class VideoQuery(BaseModel):
    """A single outbound query against the YouTube Data API"""
    region_code: str = Field(..., description="ISO 3166-1 alpha-2 region code")
    keyword_phrase: str = Field("", description="Search phrase, empty for the chart shape")
    shape: QueryShape = Field(..., description="Chart or search query shape")


def _string_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _mapping_or_none(value: Any) -> Any:
    return value if isinstance(value, (dict, BaseModel)) else None


class RawVideoId(BaseModel):
    """Nested identifier returned by the search endpoint"""
    model_config = ConfigDict(extra="ignore")

    kind: Optional[str] = None
    videoId: Optional[str] = None

    @field_validator("kind", "videoId", mode="before")
    @classmethod
    def coerce_strings(cls, v):
        return _string_or_none(v)


class RawThumbnail(BaseModel):
    model_config = ConfigDict(extra="ignore")

    url: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None

    @field_validator("url", mode="before")
    @classmethod
    def coerce_url(cls, v):
        return _string_or_none(v)

    @field_validator("width", "height", mode="before")
    @classmethod
    def coerce_size(cls, v):
        return v if isinstance(v, int) and not isinstance(v, bool) else None


class RawSnippet(BaseModel):
    """
    Partially populated video metadata as received from the API.

    Wrongly typed fields read as missing so the per-field defaults apply;
    a malformed thumbnail tier reads as absent.
    """
    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    channelTitle: Optional[str] = None
    publishedAt: Optional[str] = None
    thumbnails: Dict[str, Optional[RawThumbnail]] = Field(default_factory=dict)

    @field_validator("title", "channelTitle", "publishedAt", mode="before")
    @classmethod
    def coerce_strings(cls, v):
        return _string_or_none(v)

    @field_validator("thumbnails", mode="before")
    @classmethod
    def coerce_thumbnails(cls, v):
        if not isinstance(v, dict):
            return {}
        return {str(tier): _mapping_or_none(thumbnail) for tier, thumbnail in v.items()}


class RawStatistics(BaseModel):
    model_config = ConfigDict(extra="ignore")

    viewCount: Optional[str] = None
    likeCount: Optional[str] = None

    @field_validator("viewCount", "likeCount", mode="before")
    @classmethod
    def coerce_strings(cls, v):
        return _string_or_none(v)


class RawVideoItem(BaseModel):
    """
    Raw YouTube API item.

    ``id`` is a plain string for the videos endpoint and an object carrying
    ``videoId`` for the search endpoint.
    """
    model_config = ConfigDict(extra="ignore")

    id: Union[str, RawVideoId, None] = None
    snippet: Optional[RawSnippet] = None
    statistics: Optional[RawStatistics] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        return v if isinstance(v, (str, dict, RawVideoId)) else None

    @field_validator("snippet", "statistics", mode="before")
    @classmethod
    def coerce_sections(cls, v):
        return _mapping_or_none(v)


class CanonicalVideo(BaseModel):
    """Validated, normalized video record returned to callers"""
    id: str = Field(..., min_length=1, description="YouTube video ID")
    title: str = Field(..., min_length=1, description="Video title")
    channelTitle: str = Field(..., min_length=1, description="Channel name")
    thumbnail: str = Field(..., min_length=1, description="http(s) thumbnail URL")
    publishedAt: str = Field(..., min_length=1, description="Publication timestamp")
    viewCount: str = Field(..., min_length=1, description="Number of views")
    likeCount: str = Field(..., min_length=1, description="Number of likes")

    @property
    def youtube_url(self) -> str:
        return f"https://www.youtube.com/watch?v={self.id}"


class TransformResult(BaseModel):
    """Outcome of normalizing a raw API payload, with a data-quality report"""
    videos: List[CanonicalVideo] = Field(default_factory=list)
    dropped_count: int = Field(0, ge=0, description="Items discarded during mapping")
    reasons: List[str] = Field(default_factory=list, description="Data-quality notes")

    @property
    def is_valid(self) -> bool:
        return len(self.videos) > 0

    def summary(self) -> Dict[str, Any]:
        return {
            "valid_count": len(self.videos),
            "dropped_count": self.dropped_count,
            "reasons": list(self.reasons),
        }
