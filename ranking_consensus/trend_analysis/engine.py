"""
Trend analysis: least-squares fits over per-item consensus history.

Responsibilities:
- Fit average position against hours since the first point.
- Classify direction with a deadband, score strength from slope and fit.
- Forecast 24h ahead when the fit is strong enough.
- Flag sudden shifts and summarise the whole community.

Insufficient history is not an error: it yields a stable trend with zero
strength and velocity.
"""

from __future__ import annotations

import statistics
from collections.abc import Mapping, Sequence

import numpy as np

from ranking_consensus.analysis_engine.models import CommunityRanking
from ranking_consensus.config.thresholds import DEFAULT_THRESHOLDS, ConsensusThresholds
from ranking_consensus.consensus_logging import get_logger
from ranking_consensus.trend_analysis.models import (
    ConsensusShift,
    ConsensusTrend,
    HistoricalPoint,
    OverallDirection,
    OverallTrend,
    RegressionFit,
    ShiftMagnitude,
    TrendDirection,
    TrendPrediction,
    TrendSignal,
)
from ranking_consensus.utils.rounding import round_half_up, round_score

logger = get_logger(__name__)

MS_PER_HOUR = 3_600_000


def linear_regression(xs: Sequence[float], ys: Sequence[float]) -> RegressionFit:
    """
    Ordinary least squares y = slope * x + intercept.

    r2 is 1 - SSres/SStot, and 0 when SStot is 0 (flat series). Fewer than
    two points, or no spread in x, gives slope 0.
    """
    if len(xs) != len(ys):
        raise ValueError("xs and ys must have the same length")
    if len(xs) < 2:
        return RegressionFit(slope=0.0, intercept=0.0, r2=0.0)

    x = np.asarray(xs, dtype=np.float64)
    y = np.asarray(ys, dtype=np.float64)
    dx = x - x.mean()
    dy = y - y.mean()
    denominator = float(dx @ dx)
    slope = float(dx @ dy) / denominator if denominator != 0 else 0.0
    intercept = float(y.mean()) - slope * float(x.mean())

    residuals = y - (slope * x + intercept)
    ss_res = float(residuals @ residuals)
    ss_tot = float(dy @ dy)
    r2 = 1 - ss_res / ss_tot if ss_tot != 0 else 0.0
    return RegressionFit(slope=slope, intercept=intercept, r2=r2)


def get_trend_direction(slope: float, config: ConsensusThresholds | None = None) -> TrendDirection:
    """Positive slope = position number growing = falling."""
    cfg = config or DEFAULT_THRESHOLDS
    if slope > cfg.trend_slope_deadband:
        return TrendDirection.FALLING
    if slope < -cfg.trend_slope_deadband:
        return TrendDirection.RISING
    return TrendDirection.STABLE


def calculate_trend_strength(slope: float, r2: float, config: ConsensusThresholds | None = None) -> float:
    cfg = config or DEFAULT_THRESHOLDS
    magnitude = min(abs(slope) * cfg.trend_slope_multiplier, cfg.trend_slope_cap)
    return min(magnitude + r2 * cfg.trend_r2_weight, cfg.trend_strength_cap)


def analyze_item_trend(
    item_id: str,
    history: Sequence[HistoricalPoint],
    config: ConsensusThresholds | None = None,
) -> ConsensusTrend:
    """
    Fit a trend to one item's history.

    Args:
        item_id: Item the history belongs to.
        history: Points in any order; sorted by timestamp here.
        config: Thresholds; uses defaults if None.

    Returns:
        ConsensusTrend with direction, strength (0-100), velocity rounded to
        2 decimals, and a forecast when r2 and history length allow.
    """
    cfg = config or DEFAULT_THRESHOLDS
    ordered = sorted(history, key=lambda h: h.timestamp)

    if len(ordered) < cfg.trend_min_data_points:
        return ConsensusTrend(
            item_id=item_id,
            history=ordered,
            trend_direction=TrendDirection.STABLE,
            trend_strength=0,
            velocity_per_hour=0.0,
        )

    first = ordered[0].timestamp
    hours = [(h.timestamp - first) / MS_PER_HOUR for h in ordered]
    fit = linear_regression(hours, [h.average_position for h in ordered])

    predicted: int | None = None
    confidence: int | None = None
    if fit.r2 > cfg.forecast_min_r2 and len(ordered) >= cfg.forecast_min_data_points:
        projected = ordered[-1].average_position + fit.slope * cfg.forecast_horizon_hours
        predicted = max(0, round_score(projected))
        confidence = round_score(fit.r2 * 100)

    return ConsensusTrend(
        item_id=item_id,
        history=ordered,
        trend_direction=get_trend_direction(fit.slope, cfg),
        trend_strength=round_score(calculate_trend_strength(fit.slope, fit.r2, cfg)),
        velocity_per_hour=round_half_up(fit.slope, 2),
        predicted_position=predicted,
        confidence=confidence,
    )


def point_from_item(timestamp: int, average_position: float, consensus_score: int, sample_size: int) -> HistoricalPoint:
    return HistoricalPoint(
        timestamp=timestamp,
        average_position=average_position,
        consensus_score=consensus_score,
        sample_size=sample_size,
    )


def analyze_community_trends(
    current: CommunityRanking,
    historical: Mapping[str, Sequence[HistoricalPoint]],
    config: ConsensusThresholds | None = None,
) -> dict[str, ConsensusTrend]:
    """Append the current snapshot to each item's history and analyse it."""
    trends: dict[str, ConsensusTrend] = {}
    for item in current.items:
        point = point_from_item(
            current.last_updated, item.average_position, item.consensus_score, item.sample_size
        )
        history = [*historical.get(item.item_id, ()), point]
        trends[item.item_id] = analyze_item_trend(item.item_id, history, config)
    logger.debug("community_trends_analyzed", list_id=current.list_id, items=len(trends))
    return trends


def find_significant_trends(
    trends: Mapping[str, ConsensusTrend],
    min_strength: float | None = None,
    config: ConsensusThresholds | None = None,
) -> list[TrendSignal]:
    """
    Rank trends for display: significant first, then by strength.

    Significant = strength >= min_strength and direction is not stable.
    """
    cfg = config or DEFAULT_THRESHOLDS
    minimum = cfg.significant_trend_strength if min_strength is None else min_strength

    signals: list[TrendSignal] = []
    for item_id, trend in trends.items():
        signals.append(
            TrendSignal(
                item_id=item_id,
                trend=trend,
                is_significant=(
                    trend.trend_strength >= minimum
                    and trend.trend_direction != TrendDirection.STABLE
                ),
                confidence=(
                    trend.confidence
                    if trend.confidence
                    else min(trend.trend_strength, cfg.significant_confidence_cap)
                ),
                prediction=(
                    TrendPrediction(position=trend.predicted_position)
                    if trend.predicted_position is not None
                    else None
                ),
            )
        )
    return sorted(signals, key=lambda s: (not s.is_significant, -s.trend.trend_strength))


def detect_consensus_shifts(
    trends: Mapping[str, ConsensusTrend],
    velocity_threshold: float | None = None,
    config: ConsensusThresholds | None = None,
) -> list[ConsensusShift]:
    """
    Items moving at least velocity_threshold positions per hour.

    Magnitude is minor at 1x, moderate at 1.5x and major at 3x the
    threshold. Sorted by |velocity| descending.
    """
    cfg = config or DEFAULT_THRESHOLDS
    threshold = cfg.significant_velocity if velocity_threshold is None else velocity_threshold
    if threshold <= 0:
        logger.warning(
            "velocity_threshold_invalid",
            velocity_threshold=threshold,
            default=cfg.significant_velocity,
        )
        threshold = cfg.significant_velocity

    shifts: list[ConsensusShift] = []
    for item_id, trend in trends.items():
        speed = abs(trend.velocity_per_hour)
        if speed < threshold:
            continue
        if speed >= threshold * cfg.shift_major_multiplier:
            magnitude = ShiftMagnitude.MAJOR
        elif speed >= threshold * cfg.shift_moderate_multiplier:
            magnitude = ShiftMagnitude.MODERATE
        else:
            magnitude = ShiftMagnitude.MINOR
        shifts.append(
            ConsensusShift(
                item_id=item_id,
                velocity=trend.velocity_per_hour,
                direction=TrendDirection.RISING if trend.velocity_per_hour < 0 else TrendDirection.FALLING,
                magnitude=magnitude,
            )
        )
    return sorted(shifts, key=lambda s: abs(s.velocity), reverse=True)


def calculate_overall_trend(
    trends: Mapping[str, ConsensusTrend],
    config: ConsensusThresholds | None = None,
) -> OverallTrend:
    """
    Community-wide summary: mean strength, dominant direction, volatility.

    A direction dominates when its share strictly exceeds the configured
    share (rising checked first, then falling, then stable); otherwise mixed.
    Volatility is the population std dev of velocities x 20, capped at 100.
    """
    cfg = config or DEFAULT_THRESHOLDS
    if not trends:
        return OverallTrend(average_strength=0, dominant_direction=OverallDirection.STABLE, volatility=0)

    values = list(trends.values())
    total = len(values)
    counts = {d.value: 0 for d in TrendDirection}
    for t in values:
        counts[t.trend_direction.value] += 1

    dominant = OverallDirection.MIXED
    for direction in (TrendDirection.RISING, TrendDirection.FALLING, TrendDirection.STABLE):
        if counts[direction.value] / total > cfg.dominant_direction_share:
            dominant = OverallDirection(direction.value)
            break

    spread = statistics.pstdev(t.velocity_per_hour for t in values)
    volatility = min(spread * cfg.volatility_multiplier, cfg.volatility_cap)

    return OverallTrend(
        average_strength=round_score(statistics.mean(t.trend_strength for t in values)),
        dominant_direction=dominant,
        volatility=round_score(volatility),
        direction_counts=counts,
    )
