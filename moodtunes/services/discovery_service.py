"""Request-scoped coordinator for mood-based music discovery"""

import logging
from typing import Optional

from ..clients.youtube_client import YouTubeClient, get_region_code
from ..core.exceptions import (
    AuthenticationError, DiscoveryError, ServerError, ValidationError, YouTubeAPIError
)
from ..core.logging import track_operation
from ..core.settings import get_settings
from ..models.discovery_models import DiscoveryResponse, MoodAnalysisResponse, MoodSummary
from ..models.mood_models import MoodClassification
from .mood_classifier import classify_mood, get_mood_insights, is_reliable_classification
from .sentiment import SentimentScorer, create_sentiment_scorer
from .video_transformer import validate_api_payload

logger = logging.getLogger(__name__)

MIN_MOOD_LENGTH = 3
MAX_MOOD_LENGTH = 500


def validate_mood_text(mood_text: Optional[str]) -> str:
    """Return the trimmed mood text or raise a VALIDATION error"""
    if not isinstance(mood_text, str):
        raise ValidationError("Mood field is required and must be a string")

    trimmed = mood_text.strip()
    if len(trimmed) < MIN_MOOD_LENGTH:
        raise ValidationError(f"Mood description must be at least {MIN_MOOD_LENGTH} characters long")
    if len(trimmed) > MAX_MOOD_LENGTH:
        raise ValidationError(f"Mood description must be at most {MAX_MOOD_LENGTH} characters long")
    return trimmed


class DiscoveryService:
    """
    Drives sentiment scoring, mood classification, the YouTube lookup and
    response validation strictly in sequence for one request.

    Both collaborators are built once at start-up and injected; nothing is
    cached between requests. Without a YouTube client only mood analysis
    is available.
    """

    def __init__(self, scorer: SentimentScorer, youtube_client: Optional[YouTubeClient] = None):
        self.scorer = scorer
        self.youtube_client = youtube_client

    def _classify(self, mood_text: str) -> MoodClassification:
        with track_operation("sentiment_analysis", scorer=self.scorer.name) as telemetry:
            sentiment = self.scorer.analyze(mood_text)
            classification = classify_mood(sentiment)
            telemetry.update(
                sentiment_score=sentiment.score,
                category=classification.category.value
            )

        if not is_reliable_classification(classification):
            logger.warning(
                f"Unreliable mood classification: category={classification.category.value} "
                f"confidence={classification.confidence:.2f}"
            )

        return classification

    async def discover(self, mood_text: str, language: str = "id") -> DiscoveryResponse:
        """
        Discover music videos matching a mood description.

        Args:
            mood_text: Free-text mood description
            language: Language code used to pick the search region

        Returns:
            Successful discovery response with at least one video

        Raises:
            DiscoveryError: Classified failure from any step
        """
        try:
            with track_operation("mood_validation"):
                trimmed = validate_mood_text(mood_text)

            classification = self._classify(trimmed)
            region_code = get_region_code(language)

            if self.youtube_client is None:
                raise AuthenticationError("YouTube API key is not configured.")

            with track_operation("youtube_fetch", region_code=region_code):
                payload = await self.youtube_client.fetch_music(classification.keywords, region_code)

            with track_operation("response_validation") as telemetry:
                result = validate_api_payload(payload)
                telemetry.update(result.summary())

            if not result.is_valid:
                raise YouTubeAPIError(
                    "No music found for your mood. Please try a different description.",
                    details={"reasons": result.reasons, "dropped_count": result.dropped_count}
                )

        except DiscoveryError:
            raise
        except Exception as e:
            logger.exception(f"Unexpected failure during discovery: {e}")
            raise ServerError(details={"original_error": str(e), "error_type": type(e).__name__}) from e

        logger.info(
            f"Discovered {len(result.videos)} videos for {classification.category.value} mood "
            f"(region={region_code}, dropped={result.dropped_count})"
        )

        return DiscoveryResponse(
            data=result.videos,
            mood_analysis=self._summary(classification)
        )

    def analyze_mood(self, mood_text: str) -> MoodAnalysisResponse:
        """Run validation and classification only, without any video lookup"""
        trimmed = validate_mood_text(mood_text)
        classification = self._classify(trimmed)
        return MoodAnalysisResponse(
            mood_analysis=self._summary(classification),
            insights=get_mood_insights(classification)
        )

    @staticmethod
    def _summary(classification: MoodClassification) -> MoodSummary:
        return MoodSummary(
            sentiment=classification.category,
            score=round(classification.confidence, 2),
            keywords=classification.keywords
        )


def create_discovery_service(
    scorer: Optional[SentimentScorer] = None,
    youtube_client: Optional[YouTubeClient] = None
) -> DiscoveryService:
    """Factory function wiring the default scorer and, when a key is configured, the YouTube client"""
    settings = get_settings()
    if youtube_client is None and settings.has_youtube_api_key:
        youtube_client = YouTubeClient(api_key=settings.youtube_api_key)

    return DiscoveryService(
        scorer=scorer or create_sentiment_scorer(settings),
        youtube_client=youtube_client
    )
