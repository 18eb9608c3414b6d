"""Sentiment and mood classification models"""

from pydantic import BaseModel, Field
from typing import List
from enum import Enum


class MoodCategory(str, Enum):
    """Mood buckets driving keyword selection"""
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class ConfidenceLevel(str, Enum):
    """Coarse confidence buckets used in mood insights"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class SentimentResult(BaseModel):
    """Lexicon-based sentiment of a mood description"""
    score: int = Field(..., description="Positive hits minus negative hits (lexicon weighted)")
    comparative: float = Field(..., description="Score normalized by token count")
    tokens: List[str] = Field(default_factory=list, description="Lowercased tokens in input order")
    positive: List[str] = Field(default_factory=list, description="Matched positive words")
    negative: List[str] = Field(default_factory=list, description="Matched negative words")


class MoodClassification(BaseModel):
    """Mood inferred from a sentiment result"""
    category: MoodCategory = Field(..., description="Mood category")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Classification confidence")
    keywords: str = Field(..., min_length=1, description="Fixed search phrase for the category")


class MoodInsights(BaseModel):
    """Human-oriented summary of a mood classification"""
    category: MoodCategory
    confidence: float = Field(..., description="Confidence rounded to 2 decimals")
    confidence_level: ConfidenceLevel
    keywords: List[str] = Field(default_factory=list)
    recommendation: str
