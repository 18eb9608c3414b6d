"""Pytest configuration and shared fixtures"""

import pytest
from typing import Any, Dict, Optional
from unittest.mock import AsyncMock

from moodtunes.clients.youtube_client import YouTubeClient
from moodtunes.core.error_handler import get_error_handler
from moodtunes.core.logging import reset_performance_metrics
from moodtunes.core.settings import reload_settings
from moodtunes.services.discovery_service import DiscoveryService
from moodtunes.services.sentiment import KeywordSentimentScorer


def create_raw_item(
    video_id: Optional[str] = "abc123",
    title: str = "Happy Upbeat Song",
    thumbnail_url: Optional[str] = "https://i.ytimg.com/vi/abc123/hqdefault.jpg",
    search_shape: bool = False,
    with_statistics: bool = True
) -> Dict[str, Any]:
    """Build a raw YouTube item as returned by the videos or search endpoint"""
    item: Dict[str, Any] = {
        "kind": "youtube#searchResult" if search_shape else "youtube#video",
        "snippet": {
            "title": title,
            "channelTitle": "Mood Channel",
            "publishedAt": "2024-01-15T10:00:00Z",
            "thumbnails": {},
        },
    }

    if search_shape:
        item["id"] = {"kind": "youtube#video", "videoId": video_id}
    else:
        item["id"] = video_id

    if thumbnail_url is not None:
        item["snippet"]["thumbnails"]["high"] = {"url": thumbnail_url, "width": 480, "height": 360}

    if with_statistics and not search_shape:
        item["statistics"] = {"viewCount": "1500000", "likeCount": "42000"}

    return item


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch):
    """Set up test environment variables and reset process-wide state"""
    monkeypatch.setenv("YOUTUBE_API_KEY", "test_youtube_key")
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.delenv("MOODTUNES_API_URL", raising=False)
    reload_settings()
    reset_performance_metrics()
    get_error_handler().reset_stats()

    yield

    monkeypatch.undo()
    reload_settings()


@pytest.fixture
def keyword_scorer():
    """Deterministic heuristic scorer"""
    return KeywordSentimentScorer()


@pytest.fixture
def make_raw_item():
    """Factory building raw video items"""
    return create_raw_item


@pytest.fixture
def sample_raw_item():
    """A fully valid raw video item"""
    return create_raw_item()


@pytest.fixture
def sample_payload():
    """Raw API payload with two valid items"""
    return {
        "kind": "youtube#videoListResponse",
        "items": [
            create_raw_item("abc123", "Happy Upbeat Song"),
            create_raw_item("def456", "Energetic Pop Hit", "https://i.ytimg.com/vi/def456/hqdefault.jpg"),
        ],
    }


@pytest.fixture
def mock_youtube_client(sample_payload):
    """YouTube client whose lookup returns the sample payload"""
    client = AsyncMock(spec=YouTubeClient)
    client.fetch_music.return_value = sample_payload
    return client


@pytest.fixture
def discovery_service(keyword_scorer, mock_youtube_client):
    """Discovery service wired with the keyword scorer and a mocked YouTube client"""
    return DiscoveryService(scorer=keyword_scorer, youtube_client=mock_youtube_client)
