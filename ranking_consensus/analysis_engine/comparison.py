"""
User vs community comparison.

Diffs one user's positions against a CommunityRanking: per-item signed
differences, agreement/outlier/controversial buckets and an overall 0-100
agreement score.
"""

from __future__ import annotations

from collections.abc import Mapping

from ranking_consensus.analysis_engine.models import (
    CommunityRanking,
    ConsensusLevel,
    PositionDifference,
    UserVsCommunityComparison,
)
from ranking_consensus.config.thresholds import DEFAULT_THRESHOLDS, ConsensusThresholds
from ranking_consensus.consensus_logging import get_logger
from ranking_consensus.utils.rounding import round_score

logger = get_logger(__name__)

CONTROVERSIAL_LEVELS = frozenset({ConsensusLevel.CONTROVERSIAL, ConsensusLevel.MIXED})


def compare_user_to_community(
    user_id: str,
    list_id: str,
    user_positions: Mapping[str, int],
    community: CommunityRanking,
    config: ConsensusThresholds | None = None,
) -> UserVsCommunityComparison:
    """
    Compare a user's ranking to the community consensus.

    Items the user did not rank are skipped. agreement_score is
    round(max(0, 100 - total_abs_diff / max_possible_diff * 100)) with
    max_possible_diff = len(community.items) * 50; a community with no
    items scores 0.
    """
    cfg = config or DEFAULT_THRESHOLDS
    differences: list[PositionDifference] = []
    agreements: list[str] = []
    outliers: list[str] = []
    controversial: list[str] = []
    total_diff = 0.0

    for item in community.items:
        user_pos = user_positions.get(item.item_id)
        if user_pos is None:
            continue
        diff = user_pos - item.average_position
        abs_diff = abs(diff)
        differences.append(
            PositionDifference(
                item_id=item.item_id,
                user_position=user_pos,
                community_position=item.average_position,
                position_diff=diff,
                consensus_level=item.consensus_level,
            )
        )
        total_diff += abs_diff
        if abs_diff < cfg.agreement_max_diff:
            agreements.append(item.item_id)
        if abs_diff > cfg.comparison_outlier_min_diff:
            outliers.append(item.item_id)
        if item.consensus_level in CONTROVERSIAL_LEVELS:
            controversial.append(item.item_id)

    max_possible_diff = len(community.items) * cfg.max_diff_per_item
    if max_possible_diff > 0:
        agreement = round_score(max(0.0, 100 - (total_diff / max_possible_diff) * 100))
    else:
        agreement = 0

    logger.debug(
        "user_compared_to_community",
        user_id=user_id,
        list_id=list_id,
        compared_items=len(differences),
        agreement_score=agreement,
    )
    return UserVsCommunityComparison(
        user_id=user_id,
        list_id=list_id,
        agreement_score=agreement,
        matching_positions=len(agreements),
        total_items=len(differences),
        differences=sorted(differences, key=lambda d: abs(d.position_diff), reverse=True),
        agreements=agreements,
        outliers=outliers,
        controversial=controversial,
    )
