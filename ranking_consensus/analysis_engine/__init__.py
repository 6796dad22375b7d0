"""Consensus analysis: aggregation, classification, controversy and comparison."""

from ranking_consensus.analysis_engine.classifier import (
    BADGE_CATALOG,
    determine_badge,
    get_consensus_level,
)
from ranking_consensus.analysis_engine.comparison import compare_user_to_community
from ranking_consensus.analysis_engine.models import (
    CommunityRanking,
    ConsensusBadge,
    ConsensusBadgeType,
    ConsensusLevel,
    ItemConsensus,
    PositionDifference,
    RawRankingSample,
    UserVsCommunityComparison,
)
from ranking_consensus.analysis_engine.statistics import (
    aggregate_rankings,
    calculate_consensus_score,
    calculate_controversy_score,
    calculate_item_statistics,
    collapse_resubmissions,
    create_community_ranking,
)

__all__ = [
    "BADGE_CATALOG",
    "CommunityRanking",
    "ConsensusBadge",
    "ConsensusBadgeType",
    "ConsensusLevel",
    "ItemConsensus",
    "PositionDifference",
    "RawRankingSample",
    "UserVsCommunityComparison",
    "aggregate_rankings",
    "calculate_consensus_score",
    "calculate_controversy_score",
    "calculate_item_statistics",
    "collapse_resubmissions",
    "compare_user_to_community",
    "create_community_ranking",
    "determine_badge",
    "get_consensus_level",
]
