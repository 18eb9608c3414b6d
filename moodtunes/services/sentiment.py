"""Lexicon-based sentiment scoring for mood descriptions"""

import logging
import string
from abc import ABC, abstractmethod
from typing import Dict, FrozenSet, List, Optional, Tuple

from afinn import Afinn

from ..core.exceptions import ValidationError
from ..core.settings import Settings, get_settings
from ..models.mood_models import SentimentResult

logger = logging.getLogger(__name__)


POSITIVE_WORDS_EN = frozenset({
    'happy', 'joy', 'excited', 'great', 'awesome', 'amazing', 'wonderful', 'fantastic',
    'love', 'good', 'excellent', 'perfect', 'brilliant', 'cheerful', 'delighted',
    'energetic', 'upbeat', 'positive', 'optimistic', 'confident', 'motivated',
})

NEGATIVE_WORDS_EN = frozenset({
    'sad', 'angry', 'depressed', 'upset', 'frustrated', 'disappointed', 'terrible',
    'awful', 'bad', 'horrible', 'hate', 'annoyed', 'stressed', 'worried', 'anxious',
    'lonely', 'tired', 'exhausted', 'overwhelmed', 'down', 'melancholy',
})

POSITIVE_WORDS_ID = frozenset({
    'senang', 'bahagia', 'gembira', 'semangat', 'ceria', 'suka', 'cinta',
    'hebat', 'bagus', 'seru', 'asyik', 'mantap',
})

NEGATIVE_WORDS_ID = frozenset({
    'sedih', 'marah', 'kecewa', 'kesal', 'galau', 'takut', 'cemas', 'lelah',
    'capek', 'bosan', 'kesepian', 'stres', 'benci', 'buruk',
})

POSITIVE_WORDS: FrozenSet[str] = POSITIVE_WORDS_EN | POSITIVE_WORDS_ID
NEGATIVE_WORDS: FrozenSet[str] = NEGATIVE_WORDS_EN | NEGATIVE_WORDS_ID

# Weight given to the Indonesian words when scoring with AFINN
SUPPLEMENTARY_WEIGHT = 2


def tokenize(text: str) -> List[str]:
    """Lowercase and split on whitespace"""
    return text.lower().split()


def _clean(token: str) -> str:
    return token.strip(string.punctuation)


def _require_text(text: str) -> None:
    if not text or not text.strip():
        raise ValidationError("Input text cannot be empty")


def _unique(words: List[str]) -> List[str]:
    return list(dict.fromkeys(words))


def _comparative(score: int, tokens: List[str]) -> float:
    # Empty input scores zero
    if not tokens:
        return 0.0
    return score / len(tokens)


class SentimentScorer(ABC):
    """Base class for sentiment scorers sharing the SentimentResult contract"""

    name: str = "base"

    @abstractmethod
    def analyze(self, text: str) -> SentimentResult:
        """Score a non-empty piece of text"""
        raise NotImplementedError


class KeywordSentimentScorer(SentimentScorer):
    """
    Heuristic scorer counting hits against fixed positive/negative word lists.

    ``score`` is positive hits minus negative hits; surrounding punctuation
    is ignored when matching.
    """

    name = "keyword"

    def __init__(
        self,
        positive_words: FrozenSet[str] = POSITIVE_WORDS,
        negative_words: FrozenSet[str] = NEGATIVE_WORDS
    ):
        self.positive_words = positive_words
        self.negative_words = negative_words

    def analyze(self, text: str) -> SentimentResult:
        _require_text(text)

        tokens = tokenize(text)
        positive_hits = []
        negative_hits = []

        for token in tokens:
            word = _clean(token)
            if word in self.positive_words:
                positive_hits.append(word)
            if word in self.negative_words:
                negative_hits.append(word)

        score = len(positive_hits) - len(negative_hits)

        return SentimentResult(
            score=score,
            comparative=_comparative(score, tokens),
            tokens=tokens,
            positive=_unique(positive_hits),
            negative=_unique(negative_hits),
        )


class AfinnSentimentScorer(SentimentScorer):
    """
    Scorer backed by the AFINN-165 word list.

    Tokens found in ``extra_words`` are weighted from there first, which lets
    the Indonesian mood vocabulary contribute alongside the English lexicon.
    """

    name = "afinn"

    def __init__(
        self,
        language: str = "en",
        extra_words: Optional[Dict[str, int]] = None
    ):
        self.language = language
        self.engine = Afinn(language=language)
        self.extra_words = extra_words if extra_words is not None else default_extra_words()

    def _score_word(self, word: str) -> int:
        if word in self.extra_words:
            return self.extra_words[word]
        return int(self.engine.score(word))

    def analyze(self, text: str) -> SentimentResult:
        _require_text(text)

        tokens = tokenize(text)
        score = 0
        positive_hits = []
        negative_hits = []

        for token in tokens:
            word = _clean(token)
            if not word:
                continue
            value = self._score_word(word)
            score += value
            if value > 0:
                positive_hits.append(word)
            elif value < 0:
                negative_hits.append(word)

        return SentimentResult(
            score=score,
            comparative=_comparative(score, tokens),
            tokens=tokens,
            positive=_unique(positive_hits),
            negative=_unique(negative_hits),
        )


def default_extra_words() -> Dict[str, int]:
    """Supplementary lexicon for the Indonesian mood words; English is left to AFINN"""
    extra = {word: SUPPLEMENTARY_WEIGHT for word in POSITIVE_WORDS_ID}
    extra.update({word: -SUPPLEMENTARY_WEIGHT for word in NEGATIVE_WORDS_ID})
    return extra


def probe_afinn(language: str) -> Tuple[bool, Optional[str]]:
    """
    Check whether the AFINN engine can be used for a lexicon language.

    Returns:
        Tuple of availability flag and failure reason
    """
    try:
        Afinn(language=language).score("good")
    except (KeyError, ValueError, OSError) as e:
        return False, f"{type(e).__name__}: {e}"
    return True, None


def create_sentiment_scorer(settings: Optional[Settings] = None) -> SentimentScorer:
    """
    Select the sentiment scorer once at process start.

    AFINN is used when configured and its lexicon loads; otherwise the
    heuristic keyword scorer takes over for the lifetime of the process.
    """
    settings = settings or get_settings()

    if settings.sentiment_engine == "afinn":
        available, reason = probe_afinn(settings.sentiment_lexicon_language)
        if available:
            logger.info(f"Using AFINN sentiment scorer (language={settings.sentiment_lexicon_language})")
            return AfinnSentimentScorer(language=settings.sentiment_lexicon_language)
        logger.warning(f"AFINN sentiment engine unavailable ({reason}), using keyword-based fallback")

    logger.info("Using keyword-based sentiment scorer")
    return KeywordSentimentScorer()
