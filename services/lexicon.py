"""Marker words recognised by the sentiment scorer."""

from __future__ import annotations

from typing import FrozenSet

POSITIVE_WORDS: FrozenSet[str] = frozenset(
    {
        "excellent",
        "great",
        "good",
        "amazing",
        "wonderful",
        "perfect",
        "outstanding",
        "fantastic",
        "awesome",
        "brilliant",
        "love",
        "best",
        "happy",
        "satisfied",
        "pleased",
        "impressed",
    }
)

NEGATIVE_WORDS: FrozenSet[str] = frozenset(
    {
        "bad",
        "terrible",
        "awful",
        "horrible",
        "poor",
        "disappointing",
        "worst",
        "hate",
        "angry",
        "frustrated",
        "annoyed",
        "useless",
        "waste",
        "broken",
        "failed",
    }
)


__all__ = ["POSITIVE_WORDS", "NEGATIVE_WORDS"]
