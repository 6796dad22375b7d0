"""
Tunable thresholds for the consensus engine.

Every numeric cutoff used by aggregation, classification, heatmap, trend
and comparison code lives here. Functions take an optional
ConsensusThresholds and fall back to DEFAULT_THRESHOLDS.
"""

from __future__ import annotations

from dataclasses import dataclass

from ranking_consensus.core.enums import ConsensusLevel


@dataclass(frozen=True)
class ConsensusThresholds:
    """
    Configurable thresholds; tune per deployment.

    Positions are 0-based list slots (lower = better); velocities are
    positions per hour; scores are 0-100.
    """

    # Level ladder: (inclusive minimum score, level), highest first.
    consensus_levels: tuple[tuple[int, ConsensusLevel], ...] = (
        (90, ConsensusLevel.UNANIMOUS),
        (70, ConsensusLevel.STRONG),
        (50, ConsensusLevel.MODERATE),
        (30, ConsensusLevel.MIXED),
    )
    fallback_level: ConsensusLevel = ConsensusLevel.CONTROVERSIAL

    # Max variance reference = list_size**2 / divisor (discrete uniform over [0, list_size)).
    max_variance_divisor: float = 12.0
    top_items_count: int = 5

    # Badges
    badge_top_fraction: float = 0.1
    consensus_king_max_average_position: float = 5.0
    your_pick_max_diff: float = 2.0
    outlier_min_diff: float = 10.0
    hidden_gem_max_coverage: float = 0.3
    hidden_gem_max_average_position: float = 10.0

    # Heatmap
    your_pick_diff_normalizer: float = 20.0
    neutral_intensity: float = 0.5

    # Trends
    trend_min_data_points: int = 3
    trend_slope_deadband: float = 0.1
    trend_slope_multiplier: float = 10.0
    trend_slope_cap: float = 50.0
    trend_r2_weight: float = 50.0
    trend_strength_cap: float = 100.0
    forecast_min_r2: float = 0.5
    forecast_min_data_points: int = 5
    forecast_horizon_hours: float = 24.0
    significant_velocity: float = 0.5
    significant_trend_strength: float = 30.0
    significant_confidence_cap: int = 80
    shift_moderate_multiplier: float = 1.5
    shift_major_multiplier: float = 3.0
    dominant_direction_share: float = 0.4
    volatility_multiplier: float = 20.0
    volatility_cap: float = 100.0

    # User vs community comparison
    agreement_max_diff: float = 2.0
    comparison_outlier_min_diff: float = 10.0
    max_diff_per_item: float = 50.0

    # Service
    cache_ttl_sec: float = 60.0


DEFAULT_THRESHOLDS = ConsensusThresholds()
