"""
analysis.py
------------

Public face of the sentiment engine. ``AnalysisService`` validates
feedback, scores it with :class:`SentimentService`, records the result in
the bounded :class:`HistoryStore` and answers the read-side queries the
dashboard needs: paginated history, statistics, search, export and
clear.

Every operation is a coroutine that suspends for a simulated processing
delay before returning, so callers see the latency profile of a remote
service. The store is always updated before that delay starts; an
abandoned call therefore still leaves its write behind. Pass
``LatencyProfile.none()`` to run without delays.
"""

from __future__ import annotations

import asyncio
import math
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence

from config import Config, get_config
from db.models import AnalysisResult, DashboardStats, new_analysis_id, utcnow_iso
from db.session import STATS_KEY, KeyValueStore, create_store
from services.errors import StorageError, ValidationError
from services.history import HistoryStore
from services.logging_utils import get_structured_logger, log_performance
from services.observability import record_analysis, record_storage_error
from services.sentiment import (
    NEGATIVE,
    NEUTRAL,
    POSITIVE,
    SENTIMENTS,
    SentimentService,
    require_text,
    word_count,
)
from services.stats import StatsAggregator

logger = get_structured_logger(__name__)

ALL_SENTIMENTS = "all"
CLEAR_MESSAGE = "All analysis history cleared successfully"


@dataclass(frozen=True)
class LatencyProfile:
    """Simulated processing delays, in seconds."""

    analyze: float = 0.8
    batch_min: float = 1.0
    batch_per_item: float = 0.2
    history: float = 0.3
    stats: float = 0.2
    search: float = 0.4
    clear: float = 0.0
    export: float = 0.0

    def batch(self, count: int) -> float:
        return max(self.batch_min, self.batch_per_item * count)

    @classmethod
    def none(cls) -> "LatencyProfile":
        return cls(0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0)

    @classmethod
    def from_config(cls, config: Config) -> "LatencyProfile":
        if not config.SIMULATE_LATENCY:
            return cls.none()
        return cls(
            analyze=config.ANALYZE_DELAY,
            batch_min=config.BATCH_MIN_DELAY,
            batch_per_item=config.BATCH_ITEM_DELAY,
            history=config.HISTORY_DELAY,
            stats=config.STATS_DELAY,
            search=config.SEARCH_DELAY,
        )


def _sentiment_summary(results: Sequence[AnalysisResult]) -> Dict[str, int]:
    return {
        "total": len(results),
        POSITIVE: sum(1 for r in results if r.sentiment == POSITIVE),
        NEGATIVE: sum(1 for r in results if r.sentiment == NEGATIVE),
        NEUTRAL: sum(1 for r in results if r.sentiment == NEUTRAL),
    }


class AnalysisService:
    """Orchestrates scoring, history and statistics for feedback text."""

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        *,
        history: Optional[HistoryStore] = None,
        scorer: Optional[SentimentService] = None,
        aggregator: Optional[StatsAggregator] = None,
        latency: Optional[LatencyProfile] = None,
        capacity: int = 100,
        export_version: str = "1.0",
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
    ):
        # Allow dependency injection for testing
        if history is None:
            history = HistoryStore(store, capacity=capacity)
        self.history = history
        self.store = store if store is not None else history.kv_store
        self.scorer = scorer or SentimentService()
        self.aggregator = aggregator or StatsAggregator()
        self.latency = latency or LatencyProfile()
        self.export_version = export_version
        self._sleep = sleep or asyncio.sleep

    @classmethod
    def from_config(cls, config: Optional[Config] = None) -> "AnalysisService":
        """Build a service wired to the backend and delays in ``config``."""
        config = config or get_config()
        return cls(
            create_store(config),
            latency=LatencyProfile.from_config(config),
            capacity=config.HISTORY_CAPACITY,
            export_version=config.EXPORT_VERSION,
        )

    async def _delay(self, seconds: float) -> None:
        if seconds > 0:
            await self._sleep(seconds)

    def _score(self, text: str, prefix: str) -> AnalysisResult:
        score = self.scorer.score(text)
        return AnalysisResult(
            id=new_analysis_id(prefix),
            text=text,
            polarity=score.polarity,
            sentiment=score.sentiment,
            subjectivity=score.subjectivity,
            word_count=word_count(text),
            timestamp=utcnow_iso(),
        )

    def _refresh_stats(self) -> DashboardStats:
        """Recompute stats from history and save them as the last snapshot."""
        stats = self.aggregator.compute(self.history.all())
        try:
            self.store.set(STATS_KEY, stats.to_dict())
        except StorageError as e:
            record_storage_error("write")
            logger.error("Error saving dashboard stats", error=e.message)
        return stats

    def last_snapshot(self) -> DashboardStats:
        """The most recently saved stats, or zero-state if none can be read."""
        try:
            raw = self.store.get(STATS_KEY)
            if raw is None:
                return DashboardStats.empty()
            if not isinstance(raw, dict):
                raise StorageError("Stats record is not an object", key=STATS_KEY)
            return DashboardStats.from_dict(raw)
        except StorageError as e:
            record_storage_error("read")
            logger.error("Error reading dashboard stats", error=e.message)
            return DashboardStats.empty()

    @log_performance()
    async def analyze_text(self, text: Any) -> AnalysisResult:
        """Score one piece of feedback and record it in the history.

        Raises:
            ValidationError: ``text`` is not a string or is blank. Nothing
                is recorded in that case.
        """
        trimmed = require_text(text)
        result = self._score(trimmed, "analysis")

        self.history.append(result)
        self._refresh_stats()
        record_analysis(result.sentiment, "single")
        logger.info(
            "Analysis complete",
            analysis_id=result.id,
            sentiment=result.sentiment,
            polarity=result.polarity,
        )

        await self._delay(self.latency.analyze)
        return result

    @log_performance()
    async def analyze_batch(self, texts: Any) -> Dict[str, Any]:
        """Score several texts independently and record them in order.

        Non-string and blank entries are dropped before scoring.

        Returns:
            ``{"results": [...], "summary": {total, positive, negative, neutral}}``

        Raises:
            ValidationError: ``texts`` is not a non-empty list or tuple, or
                no usable text remains after dropping blanks.
        """
        if not isinstance(texts, (list, tuple)) or len(texts) == 0:
            raise ValidationError("Invalid texts array")

        valid_texts = [text.strip() for text in texts if isinstance(text, str) and text.strip()]
        if not valid_texts:
            raise ValidationError("No valid texts to analyze", details={"received": len(texts)})

        results = [self._score(text, "batch") for text in valid_texts]
        self.history.append_many(results)
        self._refresh_stats()
        for result in results:
            record_analysis(result.sentiment, "batch")

        summary = _sentiment_summary(results)
        logger.info(
            "Batch analysis complete",
            dropped=len(texts) - len(valid_texts),
            **summary,
        )

        await self._delay(self.latency.batch(len(valid_texts)))
        return {"results": results, "summary": summary}

    async def get_history(self, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        """Return one newest-first page of the history.

        Pages past the end come back empty rather than failing.
        """
        if not isinstance(page, int) or isinstance(page, bool) or page < 1:
            raise ValidationError("page must be a positive integer", details={"page": page})
        if not isinstance(limit, int) or isinstance(limit, bool) or limit < 1:
            raise ValidationError("limit must be a positive integer", details={"limit": limit})

        history = self.history.all()
        start = (page - 1) * limit
        data = history[start:start + limit]
        total = len(history)

        await self._delay(self.latency.history)
        return {
            "data": data,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "totalPages": math.ceil(total / limit),
            },
        }

    async def get_stats(self) -> DashboardStats:
        stats = self._refresh_stats()
        logger.analytics("average_polarity", stats.average_polarity, total=stats.total_analysis)
        await self._delay(self.latency.stats)
        return stats

    async def search(self, query: Any, sentiment_filter: str = ALL_SENTIMENTS) -> Dict[str, Any]:
        """Case-insensitive substring search, optionally narrowed by sentiment."""
        if not isinstance(query, str):
            raise ValidationError("Search query must be text", details={"type": type(query).__name__})
        if sentiment_filter != ALL_SENTIMENTS and sentiment_filter not in SENTIMENTS:
            raise ValidationError(
                "Unknown sentiment filter",
                details={"sentimentFilter": sentiment_filter},
            )

        lowered = query.lower()
        matches = [
            item
            for item in self.history.all()
            if lowered in item.text.lower()
            and (sentiment_filter == ALL_SENTIMENTS or item.sentiment == sentiment_filter)
        ]
        logger.debug("Search complete", query=query, sentiment_filter=sentiment_filter, matches=len(matches))

        await self._delay(self.latency.search)
        return {
            "data": matches,
            "summary": {
                "total": len(matches),
                "query": query,
                "sentimentFilter": sentiment_filter,
            },
        }

    async def clear_history(self) -> Dict[str, Any]:
        """Drop every record and reset the stats snapshot."""
        try:
            self.history.clear()
            self.store.delete(STATS_KEY)
        except StorageError as e:
            record_storage_error("delete")
            logger.error("Error clearing history", error=e.message)
            return {"success": False, "error": "Failed to clear history"}

        logger.info("Analysis history cleared")
        await self._delay(self.latency.clear)
        return {"success": True, "message": CLEAR_MESSAGE}

    async def export_snapshot(self) -> Dict[str, Any]:
        """Full history plus freshly computed statistics."""
        history = self.history.all()
        stats = self.aggregator.compute(history)

        await self._delay(self.latency.export)
        return {
            "metadata": {
                "exportedAt": utcnow_iso(),
                "totalRecords": len(history),
                "version": self.export_version,
            },
            "statistics": stats.to_dict(),
            "analyses": [item.to_dict() for item in history],
        }


__all__ = ["AnalysisService", "LatencyProfile", "ALL_SENTIMENTS"]
