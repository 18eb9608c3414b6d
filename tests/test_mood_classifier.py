"""Tests for mood classification"""

import pytest

from moodtunes.models.mood_models import (
    ConfidenceLevel, MoodCategory, MoodClassification, SentimentResult
)
from moodtunes.services.mood_classifier import (
    MOOD_KEYWORDS, classify_mood, generate_keywords, get_confidence_level,
    get_mood_insights, is_reliable_classification
)


def sentiment(score: int, comparative: float = 0.0) -> SentimentResult:
    return SentimentResult(score=score, comparative=comparative, tokens=["x"])


class TestClassifyMood:
    """Test threshold-based classification"""

    def test_positive_by_score(self):
        result = classify_mood(sentiment(2))

        assert result.category == MoodCategory.POSITIVE
        assert result.confidence == pytest.approx(0.4)
        assert result.keywords == "upbeat viral song happy energetic"

    def test_positive_by_comparative(self):
        result = classify_mood(sentiment(1, 0.5))

        assert result.category == MoodCategory.POSITIVE
        assert result.confidence == pytest.approx(0.2)

    def test_negative_by_score(self):
        result = classify_mood(sentiment(-3))

        assert result.category == MoodCategory.NEGATIVE
        assert result.confidence == pytest.approx(0.6)
        assert result.keywords == "sad viral song melancholic emotional"

    def test_negative_by_comparative(self):
        result = classify_mood(sentiment(-1, -0.25))

        assert result.category == MoodCategory.NEGATIVE

    def test_neutral_band(self):
        result = classify_mood(sentiment(1, 0.1))

        assert result.category == MoodCategory.NEUTRAL
        assert result.confidence == 0.5
        assert result.keywords == "lofi viral music chill relaxing"

    def test_confidence_capped_at_one(self):
        assert classify_mood(sentiment(12)).confidence == 1.0
        assert classify_mood(sentiment(-40)).confidence == 1.0

    def test_positive_rule_wins_on_conflict(self):
        # score says positive, comparative says negative
        result = classify_mood(sentiment(3, -0.5))

        assert result.category == MoodCategory.POSITIVE

    @pytest.mark.parametrize("score,comparative", [
        (0, 0.0), (5, 1.0), (-5, -1.0), (1, -0.05), (-1, 0.05), (100, 0.0), (0, 0.3), (0, -0.3),
    ])
    def test_classification_is_total(self, score, comparative):
        result = classify_mood(sentiment(score, comparative))

        assert result.category in set(MoodCategory)
        assert 0.0 <= result.confidence <= 1.0
        assert result.keywords == MOOD_KEYWORDS[result.category]


class TestKeywordsAndInsights:
    """Test keyword generation, reliability gate and insights"""

    def test_generate_keywords(self):
        assert generate_keywords(MoodCategory.NEUTRAL) == "lofi viral music chill relaxing"
        assert generate_keywords("positive") == "upbeat viral song happy energetic"

    def test_reliability_gate(self):
        weak = MoodClassification(category=MoodCategory.POSITIVE, confidence=0.1, keywords="x")
        strong = classify_mood(sentiment(3))

        assert is_reliable_classification(weak) is False
        assert is_reliable_classification(strong) is True

    @pytest.mark.parametrize("confidence,level", [
        (0.0, ConfidenceLevel.LOW),
        (0.29, ConfidenceLevel.LOW),
        (0.3, ConfidenceLevel.MEDIUM),
        (0.69, ConfidenceLevel.MEDIUM),
        (0.7, ConfidenceLevel.HIGH),
        (1.0, ConfidenceLevel.HIGH),
    ])
    def test_confidence_level(self, confidence, level):
        assert get_confidence_level(confidence) == level

    def test_mood_insights(self):
        insights = get_mood_insights(classify_mood(sentiment(-4)))

        assert insights.category == MoodCategory.NEGATIVE
        assert insights.confidence == 0.8
        assert insights.confidence_level == ConfidenceLevel.HIGH
        assert insights.keywords == ["sad", "viral", "song", "melancholic", "emotional"]
        assert "emotional songs" in insights.recommendation
