"""Request and response models for the music discovery endpoint"""

from pydantic import BaseModel, Field
from typing import Any, List, Literal, Optional

from .mood_models import MoodCategory, MoodInsights
from .video_models import CanonicalVideo
from ..core.exceptions import ErrorKind
from ..core.settings import get_settings


class MusicRequest(BaseModel):
    """Inbound mood submission"""
    mood: str = Field(..., description="Free-text mood description (3-500 characters after trimming)")
    language: Literal["id", "en"] = Field(
        default_factory=lambda: get_settings().default_language,
        description="Language used to pick the search region (default from settings)"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "mood": "Aku sangat senang dan bahagia hari ini",
                "language": "id"
            }
        }
    }


class MoodRequest(BaseModel):
    """Inbound mood-only analysis request"""
    mood: str = Field(..., description="Free-text mood description")


class MoodSummary(BaseModel):
    """Summary of the inferred sentiment attached to a discovery result"""
    sentiment: MoodCategory
    score: float = Field(..., ge=0.0, le=1.0, description="Confidence rounded to 2 decimals")
    keywords: str


class DiscoveryResponse(BaseModel):
    """Successful discovery result"""
    success: Literal[True] = True
    data: List[CanonicalVideo] = Field(..., min_length=1)
    mood_analysis: MoodSummary


class MoodAnalysisResponse(BaseModel):
    """Mood analysis without any video lookup"""
    success: Literal[True] = True
    mood_analysis: MoodSummary
    insights: MoodInsights


class ErrorResponse(BaseModel):
    """Failure body shared by every endpoint"""
    success: Literal[False] = False
    error: str
    code: ErrorKind
    details: Optional[Any] = None
