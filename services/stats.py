"""Dashboard statistics derived from the retained analysis history."""

from __future__ import annotations

from typing import Callable, Dict, Optional, Sequence

from db.models import AnalysisResult, DashboardStats, utcnow_iso
from services.sentiment import NEGATIVE, NEUTRAL, POSITIVE


class StatsAggregator:
    """Recomputes :class:`DashboardStats` from scratch on every call.

    Only the records still held by the history are counted, so once more
    than the history capacity has been analysed the figures describe the
    most recent window rather than every analysis ever made.
    """

    def __init__(self, clock: Optional[Callable[[], str]] = None):
        self.clock = clock or utcnow_iso

    def compute(self, history: Sequence[AnalysisResult]) -> DashboardStats:
        counts = {POSITIVE: 0, NEGATIVE: 0, NEUTRAL: 0}
        total_polarity = 0.0
        for item in history:
            counts[item.sentiment] = counts.get(item.sentiment, 0) + 1
            total_polarity += item.polarity

        total = len(history)
        average = round(total_polarity / total, 3) if total else 0.0

        return DashboardStats(
            total_analysis=total,
            positive=counts[POSITIVE],
            negative=counts[NEGATIVE],
            neutral=counts[NEUTRAL],
            average_polarity=average,
            last_updated=self.clock(),
        )

    @staticmethod
    def distribution(stats: DashboardStats) -> Dict[str, float]:
        """Share of each sentiment in percent, one decimal place."""
        if stats.total_analysis <= 0:
            return {POSITIVE: 0.0, NEGATIVE: 0.0, NEUTRAL: 0.0}
        return {
            POSITIVE: round(stats.positive * 100 / stats.total_analysis, 1),
            NEGATIVE: round(stats.negative * 100 / stats.total_analysis, 1),
            NEUTRAL: round(stats.neutral * 100 / stats.total_analysis, 1),
        }


__all__ = ["StatsAggregator"]
