"""
Per-item consensus history for one (list, category).

One point per item per aggregation cycle, kept in timestamp order. The
accumulator never drops points on its own; retention is the caller's call
via prune().
"""

from __future__ import annotations

import bisect

from ranking_consensus.analysis_engine.models import CommunityRanking
from ranking_consensus.config.thresholds import ConsensusThresholds
from ranking_consensus.consensus_logging import get_logger
from ranking_consensus.trend_analysis.engine import analyze_item_trend, point_from_item
from ranking_consensus.trend_analysis.models import ConsensusTrend, HistoricalPoint

logger = get_logger(__name__)


class TrendHistory:
    def __init__(self, config: ConsensusThresholds | None = None) -> None:
        self._config = config
        self._points: dict[str, list[HistoricalPoint]] = {}

    def __len__(self) -> int:
        return len(self._points)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._points

    def add_point(self, item_id: str, point: HistoricalPoint) -> bool:
        """Insert a point in timestamp order. Returns False if that timestamp is already recorded."""
        series = self._points.setdefault(item_id, [])
        timestamps = [p.timestamp for p in series]
        idx = bisect.bisect_left(timestamps, point.timestamp)
        if idx < len(series) and series[idx].timestamp == point.timestamp:
            return False
        series.insert(idx, point)
        return True

    def record(self, community: CommunityRanking) -> int:
        """
        Append one point per item from a community snapshot.

        Returns the number of points added; a snapshot whose timestamp is
        already recorded for an item adds nothing for that item.
        """
        added = 0
        for item in community.items:
            point = point_from_item(
                community.last_updated, item.average_position, item.consensus_score, item.sample_size
            )
            if self.add_point(item.item_id, point):
                added += 1
        logger.debug(
            "trend_history_recorded",
            list_id=community.list_id,
            category_id=community.category_id,
            points_added=added,
        )
        return added

    def history(self, item_id: str) -> list[HistoricalPoint]:
        return list(self._points.get(item_id, ()))

    def trends(self) -> dict[str, ConsensusTrend]:
        return {
            item_id: analyze_item_trend(item_id, points, self._config)
            for item_id, points in self._points.items()
        }

    def prune(self, older_than_ms: int) -> int:
        """Drop points with timestamp < older_than_ms; items left empty are forgotten."""
        removed = 0
        for item_id in list(self._points):
            kept = [p for p in self._points[item_id] if p.timestamp >= older_than_ms]
            removed += len(self._points[item_id]) - len(kept)
            if kept:
                self._points[item_id] = kept
            else:
                del self._points[item_id]
        if removed:
            logger.info("trend_history_pruned", older_than_ms=older_than_ms, removed=removed)
        return removed
