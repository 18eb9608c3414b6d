"""Threshold-based mood classification and keyword derivation"""

import logging
from typing import Dict

from ..models.mood_models import (
    ConfidenceLevel, MoodCategory, MoodClassification, MoodInsights, SentimentResult
)

logger = logging.getLogger(__name__)


MOOD_KEYWORDS: Dict[MoodCategory, str] = {
    MoodCategory.POSITIVE: "upbeat viral song happy energetic",
    MoodCategory.NEGATIVE: "sad viral song melancholic emotional",
    MoodCategory.NEUTRAL: "lofi viral music chill relaxing",
}

# Tunable policy; positive is checked before negative in classify_mood
SENTIMENT_THRESHOLDS = {
    MoodCategory.POSITIVE: {"score": 1, "comparative": 0.1},
    MoodCategory.NEGATIVE: {"score": -1, "comparative": -0.1},
}
CONFIDENCE_DIVISOR = 5
NEUTRAL_CONFIDENCE = 0.5
MIN_RELIABLE_CONFIDENCE = 0.2

RECOMMENDATIONS: Dict[MoodCategory, str] = {
    MoodCategory.POSITIVE: "Great! We'll find you some upbeat and energetic songs to match your positive mood.",
    MoodCategory.NEGATIVE: "We understand. Let's find some emotional songs that might resonate with how you're feeling.",
    MoodCategory.NEUTRAL: "Perfect for a chill session. We'll find you some relaxing lofi music to enjoy.",
}


def generate_keywords(category: MoodCategory) -> str:
    """Return the fixed search phrase for a mood category"""
    return MOOD_KEYWORDS[MoodCategory(category)]


def _confidence(score: int) -> float:
    return min(abs(score) / CONFIDENCE_DIVISOR, 1.0)


def classify_mood(sentiment: SentimentResult) -> MoodClassification:
    """
    Classify a sentiment result into a mood category.

    Rules are evaluated in order and the first match wins:
    positive, then negative, then neutral.
    """
    score, comparative = sentiment.score, sentiment.comparative
    positive = SENTIMENT_THRESHOLDS[MoodCategory.POSITIVE]
    negative = SENTIMENT_THRESHOLDS[MoodCategory.NEGATIVE]

    if score > positive["score"] or comparative > positive["comparative"]:
        category = MoodCategory.POSITIVE
        confidence = _confidence(score)
    elif score < negative["score"] or comparative < negative["comparative"]:
        category = MoodCategory.NEGATIVE
        confidence = _confidence(score)
    else:
        category = MoodCategory.NEUTRAL
        confidence = NEUTRAL_CONFIDENCE

    return MoodClassification(
        category=category,
        confidence=confidence,
        keywords=generate_keywords(category),
    )


def is_reliable_classification(classification: MoodClassification) -> bool:
    """
    Advisory check flagging weak or malformed classifications.

    The result is only used for logging; unreliable classifications still
    flow through the pipeline unchanged.
    """
    if classification.confidence < MIN_RELIABLE_CONFIDENCE:
        return False

    if classification.category not in MOOD_KEYWORDS:
        return False

    if not classification.keywords or not classification.keywords.strip():
        return False

    return True


def get_confidence_level(confidence: float) -> ConfidenceLevel:
    if confidence < 0.3:
        return ConfidenceLevel.LOW
    if confidence < 0.7:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.HIGH


def get_mood_insights(classification: MoodClassification) -> MoodInsights:
    """Summarize a classification for display"""
    return MoodInsights(
        category=classification.category,
        confidence=round(classification.confidence, 2),
        confidence_level=get_confidence_level(classification.confidence),
        keywords=[word for word in classification.keywords.split(" ") if word],
        recommendation=RECOMMENDATIONS[classification.category],
    )
