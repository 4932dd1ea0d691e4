"""Records kept in the analysis history and the stats derived from them."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, UTC
from typing import Any, Dict, Mapping, Optional
import time
import uuid

from services.errors import StorageError
from services.sentiment import classify


def new_analysis_id(prefix: str = "analysis") -> str:
    """Opaque id: ``<prefix>_<epoch ms>_<random suffix>``."""
    return f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:12]}"


def utcnow_iso() -> str:
    """Current UTC time as ISO-8601 with a trailing ``Z``."""
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class AnalysisResult:
    """A single scored piece of feedback. Never mutated after creation."""

    id: str
    text: str
    polarity: float
    sentiment: str  # positive|negative|neutral
    subjectivity: float
    word_count: int
    timestamp: str = field(default_factory=utcnow_iso)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "polarity": self.polarity,
            "sentiment": self.sentiment,
            "subjectivity": self.subjectivity,
            "wordCount": self.word_count,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AnalysisResult":
        try:
            polarity = float(data["polarity"])
            # The label is re-derived from the polarity rather than trusted.
            return cls(
                id=str(data["id"]),
                text=str(data["text"]),
                polarity=polarity,
                sentiment=classify(polarity),
                subjectivity=float(data["subjectivity"]),
                word_count=int(data["wordCount"]),
                timestamp=str(data["timestamp"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(f"Malformed analysis record: {e}", operation="read") from e


@dataclass(frozen=True)
class DashboardStats:
    """Aggregate view over the retained history window."""

    total_analysis: int = 0
    positive: int = 0
    negative: int = 0
    neutral: int = 0
    average_polarity: float = 0.0
    last_updated: str = field(default_factory=utcnow_iso)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalAnalysis": self.total_analysis,
            "positive": self.positive,
            "negative": self.negative,
            "neutral": self.neutral,
            "averagePolarity": self.average_polarity,
            "lastUpdated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DashboardStats":
        try:
            return cls(
                total_analysis=int(data.get("totalAnalysis", 0)),
                positive=int(data.get("positive", 0)),
                negative=int(data.get("negative", 0)),
                neutral=int(data.get("neutral", 0)),
                average_polarity=float(data.get("averagePolarity", 0.0)),
                last_updated=str(data.get("lastUpdated") or utcnow_iso()),
            )
        except (AttributeError, TypeError, ValueError) as e:
            raise StorageError(f"Malformed stats record: {e}", operation="read") from e

    @classmethod
    def empty(cls, last_updated: Optional[str] = None) -> "DashboardStats":
        return cls(last_updated=last_updated or utcnow_iso())
