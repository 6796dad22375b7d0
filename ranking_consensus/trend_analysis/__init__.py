"""Trend analysis over consensus history."""

from ranking_consensus.trend_analysis.engine import (
    analyze_community_trends,
    analyze_item_trend,
    calculate_overall_trend,
    detect_consensus_shifts,
    find_significant_trends,
    linear_regression,
)
from ranking_consensus.trend_analysis.history import TrendHistory
from ranking_consensus.trend_analysis.models import (
    ConsensusShift,
    ConsensusTrend,
    HistoricalPoint,
    OverallDirection,
    OverallTrend,
    ShiftMagnitude,
    TrendDirection,
    TrendSignal,
)

__all__ = [
    "ConsensusShift",
    "ConsensusTrend",
    "HistoricalPoint",
    "OverallDirection",
    "OverallTrend",
    "ShiftMagnitude",
    "TrendDirection",
    "TrendHistory",
    "TrendSignal",
    "analyze_community_trends",
    "analyze_item_trend",
    "calculate_overall_trend",
    "detect_consensus_shifts",
    "find_significant_trends",
    "linear_regression",
]
