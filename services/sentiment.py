"""
sentiment.py
-------------

This module exposes the lexicon-based sentiment scorer. It counts the
distinct positive and negative marker words contained in a piece of
feedback and turns those counts into a polarity, a sentiment label and
a subjectivity estimate. No model is loaded and no network request is
made; every rule below can be audited by reading the code.

Scoring rules:

* Markers are matched as substrings of the lower-cased text, so a
  marker embedded in a longer word still counts.
* A clear majority of positive (negative) markers yields a polarity
  that grows by 0.15 per marker and saturates at +0.9 (-0.9).
* A tie, including "no markers at all", draws the polarity uniformly
  from ``[-0.2, 0.2]``. The draw comes from an injectable random source.
* Each ``!`` pushes the polarity 0.1 further from zero, for at most
  three marks. This step is not clamped, so strongly worded text can
  reach a magnitude of 1.2.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, Optional

from services.errors import ValidationError
from services.lexicon import NEGATIVE_WORDS, POSITIVE_WORDS

POSITIVE = "positive"
NEGATIVE = "negative"
NEUTRAL = "neutral"
SENTIMENTS = (POSITIVE, NEGATIVE, NEUTRAL)

POSITIVE_THRESHOLD = 0.25
NEGATIVE_THRESHOLD = -0.25
TIE_SPREAD = 0.2
MARKER_WEIGHT = 0.15
BASE_MAGNITUDE = 0.1
MAX_BASE_MAGNITUDE = 0.9
EXCLAMATION_STEP = 0.1
MAX_EXCLAMATIONS = 3
MAX_SUBJECTIVITY = 0.9


def classify(polarity: float) -> str:
    """Map a polarity onto its sentiment label."""
    if polarity > POSITIVE_THRESHOLD:
        return POSITIVE
    if polarity < NEGATIVE_THRESHOLD:
        return NEGATIVE
    return NEUTRAL


def word_count(text: str) -> int:
    """Number of whitespace-delimited tokens in ``text``."""
    return len(text.split())


def require_text(text: Any) -> str:
    """Return ``text`` trimmed, or raise if it is not usable input."""
    if not isinstance(text, str):
        raise ValidationError("Invalid text input", details={"type": type(text).__name__})
    trimmed = text.strip()
    if not trimmed:
        raise ValidationError("Invalid text input", details={"reason": "blank"})
    return trimmed


@dataclass(frozen=True)
class SentimentScore:
    polarity: float
    sentiment: str
    subjectivity: float
    positive_matches: int = 0
    negative_matches: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "polarity": self.polarity,
            "sentiment": self.sentiment,
            "subjectivity": self.subjectivity,
        }


class SentimentService:
    """Rule-based sentiment scorer over a fixed marker lexicon."""

    def __init__(
        self,
        *,
        rng: Optional[random.Random] = None,
        positive_words: Optional[Iterable[str]] = None,
        negative_words: Optional[Iterable[str]] = None,
    ):
        # Allow dependency injection for testing
        self.rng = rng or random.Random()
        self.positive_words: FrozenSet[str] = frozenset(positive_words) if positive_words is not None else POSITIVE_WORDS
        self.negative_words: FrozenSet[str] = frozenset(negative_words) if negative_words is not None else NEGATIVE_WORDS

    def count_markers(self, text: str) -> tuple[int, int]:
        """Count distinct positive and negative markers contained in ``text``."""
        lowered = text.lower()
        pos_count = sum(1 for word in self.positive_words if word in lowered)
        neg_count = sum(1 for word in self.negative_words if word in lowered)
        return pos_count, neg_count

    def base_polarity(self, pos_count: int, neg_count: int) -> float:
        """Polarity before the exclamation adjustment."""
        if pos_count > neg_count:
            return min(BASE_MAGNITUDE + MARKER_WEIGHT * pos_count, MAX_BASE_MAGNITUDE)
        if neg_count > pos_count:
            return max(-BASE_MAGNITUDE - MARKER_WEIGHT * neg_count, -MAX_BASE_MAGNITUDE)
        # Mixed or marker-free text is inherently ambiguous.
        return self.rng.uniform(-TIE_SPREAD, TIE_SPREAD)

    def score(self, text: Any) -> SentimentScore:
        """Score a single piece of feedback.

        Args:
            text: The feedback to analyse. Surrounding whitespace is ignored.

        Returns:
            A :class:`SentimentScore` whose polarity and subjectivity are
            rounded to three decimal places.

        Raises:
            ValidationError: ``text`` is not a string or is blank.
        """
        text = require_text(text)

        pos_count, neg_count = self.count_markers(text)
        polarity = self.base_polarity(pos_count, neg_count)

        bangs = text.count("!")
        if bangs > 0:
            # Zero polarity is pushed negative, matching the sign rule used upstream.
            direction = 1.0 if polarity > 0 else -1.0
            polarity += direction * EXCLAMATION_STEP * min(bangs, MAX_EXCLAMATIONS)

        tokens = max(word_count(text), 1)
        emotional = pos_count + neg_count
        subjectivity = min(0.2 + (emotional / tokens) * 0.8, MAX_SUBJECTIVITY)

        # Label the stored value so the label can always be recomputed from it.
        polarity = round(polarity, 3)
        return SentimentScore(
            polarity=polarity,
            sentiment=classify(polarity),
            subjectivity=round(subjectivity, 3),
            positive_matches=pos_count,
            negative_matches=neg_count,
        )


__all__ = [
    "SentimentService",
    "SentimentScore",
    "classify",
    "word_count",
    "require_text",
    "POSITIVE",
    "NEGATIVE",
    "NEUTRAL",
    "SENTIMENTS",
]
