"""
Consensus classification: score -> level, item -> badge.

Levels come from the threshold ladder in ConsensusThresholds. Badges are
evaluated in a fixed precedence (first match wins, at most one per item):

  1. consensus-king  top fraction by consensus score, near the top of the list
  2. hot-debate      top fraction by controversy score
  3. your-pick       user's position close to the community average
  4. outlier         user's position far from the community average
  5. hidden-gem      low coverage but well placed when picked
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from ranking_consensus.analysis_engine.models import (
    CONSENSUS_LEVEL_ORDER,
    ConsensusBadge,
    ConsensusBadgeType,
    ConsensusLevel,
    ItemConsensus,
)
from ranking_consensus.config.thresholds import DEFAULT_THRESHOLDS, ConsensusThresholds

BADGE_CATALOG: dict[ConsensusBadgeType, ConsensusBadge] = {
    ConsensusBadgeType.CONSENSUS_KING: ConsensusBadge(
        type=ConsensusBadgeType.CONSENSUS_KING,
        label="Consensus King",
        color="#22c55e",
        icon="👑",
        tooltip="Community overwhelmingly agrees on this ranking",
    ),
    ConsensusBadgeType.HOT_DEBATE: ConsensusBadge(
        type=ConsensusBadgeType.HOT_DEBATE,
        label="Hot Debate",
        color="#ef4444",
        icon="🔥",
        tooltip="Community is divided on this ranking",
    ),
    ConsensusBadgeType.YOUR_PICK: ConsensusBadge(
        type=ConsensusBadgeType.YOUR_PICK,
        label="Your Pick",
        color="#8b5cf6",
        icon="✓",
        tooltip="Your ranking matches the community",
    ),
    ConsensusBadgeType.OUTLIER: ConsensusBadge(
        type=ConsensusBadgeType.OUTLIER,
        label="Outlier",
        color="#f59e0b",
        icon="⚡",
        tooltip="You ranked this differently than most",
    ),
    ConsensusBadgeType.HIDDEN_GEM: ConsensusBadge(
        type=ConsensusBadgeType.HIDDEN_GEM,
        label="Hidden Gem",
        color="#06b6d4",
        icon="💎",
        tooltip="Underrated by the community",
    ),
}


def get_consensus_level(score: float, config: ConsensusThresholds | None = None) -> ConsensusLevel:
    """Highest ladder rung whose inclusive minimum the score reaches."""
    cfg = config or DEFAULT_THRESHOLDS
    for minimum, level in cfg.consensus_levels:
        if score >= minimum:
            return level
    return cfg.fallback_level


def level_rank(level: ConsensusLevel) -> int:
    """Ordinal of a level; 0 = controversial, 4 = unanimous."""
    return CONSENSUS_LEVEL_ORDER.index(level)


def _top_fraction_count(population: int, fraction: float) -> int:
    # Rounded to 9 places so 0.1 * 30 does not ceil to 4.
    return math.ceil(round(population * fraction, 9))


def _in_top(
    item: ItemConsensus,
    all_items: Sequence[ItemConsensus],
    score_attr: str,
    fraction: float,
) -> bool:
    count = _top_fraction_count(len(all_items), fraction)
    ranked = sorted(all_items, key=lambda i: getattr(i, score_attr), reverse=True)
    return any(i.item_id == item.item_id for i in ranked[:count])


def _outlier_badge(user_position: float, average_position: float) -> ConsensusBadge:
    direction = "higher" if user_position < average_position else "lower"
    base = BADGE_CATALOG[ConsensusBadgeType.OUTLIER]
    return ConsensusBadge(
        type=base.type,
        label=base.label,
        color=base.color,
        icon=base.icon,
        tooltip=f"You ranked this {direction} than most",
    )


def determine_badge(
    item: ItemConsensus,
    all_items: Sequence[ItemConsensus],
    user_position: float | None = None,
    config: ConsensusThresholds | None = None,
) -> ConsensusBadge | None:
    """
    Pick at most one badge for an item.

    Args:
        item: The item being labelled.
        all_items: Full item population of the community ranking.
        user_position: The viewing user's position for this item, if any.
        config: Thresholds; uses defaults if None.

    Returns:
        The first matching badge in precedence order, or None.
    """
    cfg = config or DEFAULT_THRESHOLDS

    if (
        _in_top(item, all_items, "consensus_score", cfg.badge_top_fraction)
        and item.average_position < cfg.consensus_king_max_average_position
    ):
        return BADGE_CATALOG[ConsensusBadgeType.CONSENSUS_KING]

    if _in_top(item, all_items, "controversy_score", cfg.badge_top_fraction):
        return BADGE_CATALOG[ConsensusBadgeType.HOT_DEBATE]

    if user_position is not None:
        diff = abs(user_position - item.average_position)
        if diff < cfg.your_pick_max_diff:
            return BADGE_CATALOG[ConsensusBadgeType.YOUR_PICK]
        if diff > cfg.outlier_min_diff:
            return _outlier_badge(user_position, item.average_position)

    if (
        item.sample_size < len(all_items) * cfg.hidden_gem_max_coverage
        and item.average_position < cfg.hidden_gem_max_average_position
    ):
        return BADGE_CATALOG[ConsensusBadgeType.HIDDEN_GEM]

    return None
