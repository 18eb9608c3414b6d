"""YouTube Data API client for mood-based music lookups"""

import httpx
import asyncio
import logging
from typing import Any, Dict, Optional

from ..core.settings import get_settings
from ..core.exceptions import (
    AuthenticationError, NetworkError, RateLimitError, RequestTimeoutError, YouTubeAPIError
)
from ..models.video_models import QueryShape, VideoQuery

# Setup logging
logger = logging.getLogger(__name__)

# YouTube API constants
YOUTUBE_API_BASE_URL = "https://www.googleapis.com/youtube/v3"
VIDEOS_ENDPOINT = "/videos"
SEARCH_ENDPOINT = "/search"
MUSIC_CATEGORY_ID = "10"
MAX_RESULTS = 12
SAFE_SEARCH = "moderate"
DEFAULT_REGION = "US"

REGION_CODES = {
    "id": "ID",
    "en": "US",
}

# 403 reasons that mean "slow down" rather than "not allowed"
RATE_LIMIT_REASONS = {"quotaExceeded", "rateLimitExceeded", "userRateLimitExceeded", "dailyLimitExceeded"}


def get_region_code(language: Optional[str]) -> str:
    """Map a language code to the region used for querying, defaulting to US"""
    return REGION_CODES.get(language or "", DEFAULT_REGION)


def _error_reason(response: httpx.Response) -> str:
    """Extract the first error reason from a YouTube error body, if any"""
    try:
        error_data = response.json()
    except ValueError:
        return ""
    error = error_data.get("error") if isinstance(error_data, dict) else None
    errors = error.get("errors") if isinstance(error, dict) else None
    if not isinstance(errors, list) or not errors or not isinstance(errors[0], dict):
        return ""
    return str(errors[0].get("reason", ""))


class YouTubeClient:
    """
    YouTube Data API client.

    Issues one call per lookup, either the most-popular music chart or a
    keyword search, and classifies failures into the error taxonomy using
    status codes and exception types.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        base_url: Optional[str] = None
    ):
        """
        Initialize YouTube API client.

        Args:
            api_key: YouTube Data API key (if None, loads from settings)
            timeout: Hard timeout in seconds for a single call
            http_client: Preconfigured httpx client (mainly for tests)
            base_url: API base URL override
        """
        self.settings = get_settings()
        self.api_key = api_key or self.settings.youtube_api_key

        if not self.api_key or not self.api_key.strip():
            raise ValueError("YouTube API key is required")

        self.timeout = timeout or self.settings.request_timeout
        self.base_url = base_url or self.settings.youtube_api_base_url or YOUTUBE_API_BASE_URL

        # Configure HTTP client with limits and timeout
        self.client = http_client or httpx.AsyncClient(
            limits=httpx.Limits(
                max_connections=10,
                max_keepalive_connections=5
            ),
            timeout=self.timeout,
            headers={"Accept": "application/json"}
        )

    async def __aenter__(self):
        """Async context manager entry"""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    def build_query(self, keyword_phrase: Optional[str], region_code: str) -> VideoQuery:
        """Pick the chart shape without keywords and the search shape with them"""
        phrase = (keyword_phrase or "").strip()
        return VideoQuery(
            region_code=region_code,
            keyword_phrase=phrase,
            shape=QueryShape.SEARCH if phrase else QueryShape.CHART
        )

    def build_params(self, query: VideoQuery) -> Dict[str, Any]:
        """Build request parameters for a query shape"""
        if query.shape == QueryShape.SEARCH:
            # The search endpoint does not return statistics
            return {
                "part": "snippet",
                "q": query.keyword_phrase,
                "type": "video",
                "videoCategoryId": MUSIC_CATEGORY_ID,
                "order": "relevance",
                "maxResults": MAX_RESULTS,
                "safeSearch": SAFE_SEARCH,
                "regionCode": query.region_code,
                "key": self.api_key
            }

        return {
            "part": "snippet,statistics",
            "chart": "mostPopular",
            "videoCategoryId": MUSIC_CATEGORY_ID,
            "maxResults": MAX_RESULTS,
            "safeSearch": SAFE_SEARCH,
            "regionCode": query.region_code,
            "key": self.api_key
        }

    def endpoint_for(self, query: VideoQuery) -> str:
        endpoint = SEARCH_ENDPOINT if query.shape == QueryShape.SEARCH else VIDEOS_ENDPOINT
        return f"{self.base_url}{endpoint}"

    async def fetch_music(self, keyword_phrase: Optional[str] = None, region_code: str = DEFAULT_REGION) -> Dict[str, Any]:
        """
        Fetch music videos for a keyword phrase, or the popular chart without one.

        Args:
            keyword_phrase: Search phrase derived from the mood
            region_code: Region code for localized results

        Returns:
            Raw API payload containing at least one item

        Raises:
            AuthenticationError: Credentials rejected (401/403)
            RateLimitError: Rate limit or quota exceeded
            NetworkError: Connectivity failure or timeout
            YouTubeAPIError: Any other unusable outcome, including zero items
        """
        query = self.build_query(keyword_phrase, region_code)
        url = self.endpoint_for(query)
        params = self.build_params(query)

        logger.info(f"Fetching {query.shape.value} results for region {query.region_code}: '{query.keyword_phrase}'")

        try:
            response = await asyncio.wait_for(
                self.client.get(url, params=params),
                timeout=self.timeout
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise RequestTimeoutError(
                "Request to YouTube API timed out. Please try again.",
                details={"original_error": str(e) or type(e).__name__, "timeout": self.timeout}
            )
        except httpx.RequestError as e:
            raise NetworkError(
                "Unable to connect to YouTube API. Please check your internet connection.",
                details={"original_error": str(e)}
            )

        if response.status_code >= 400:
            raise self._classify_status(response)

        try:
            data = response.json()
        except ValueError as e:
            raise YouTubeAPIError(
                "Unable to fetch music data. Please try again later.",
                details={"original_error": f"Invalid JSON: {e}"}
            )

        items = data.get("items") if isinstance(data, dict) else None
        if not items:
            raise YouTubeAPIError(
                "No videos found for the specified criteria.",
                details={"shape": query.shape.value, "region_code": query.region_code}
            )

        logger.info(f"YouTube returned {len(items)} items")
        return data

    async def fetch_mood_based_music(self, mood_keywords: str, language: str = "en") -> Dict[str, Any]:
        """Fetch music for mood keywords in the region matching a language"""
        return await self.fetch_music(mood_keywords, get_region_code(language))

    def _classify_status(self, response: httpx.Response):
        """Map a non-success response onto the error taxonomy"""
        status = response.status_code
        reason = _error_reason(response)
        details = {"status_code": status, "reason": reason}

        if status == 429 or (status == 403 and reason in RATE_LIMIT_REASONS):
            return RateLimitError(
                "YouTube API rate limit exceeded. Please try again later.",
                details=details
            )

        if status in (401, 403):
            return AuthenticationError(
                "YouTube API access denied. Please check API configuration.",
                details=details
            )

        if status == 404:
            return YouTubeAPIError(
                "No music found for your mood. Please try a different description.",
                details=details
            )

        return YouTubeAPIError(
            "Unable to fetch music data. Please try again later.",
            details=details
        )


def create_youtube_client(api_key: Optional[str] = None) -> YouTubeClient:
    """Factory function to create a YouTube client"""
    return YouTubeClient(api_key=api_key)
