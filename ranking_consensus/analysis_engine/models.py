"""
Data models for consensus aggregation input and output.

Raw ranking samples in; per-item consensus snapshots, community aggregates,
badges and user-vs-community comparisons out. Snapshots are created fresh
on every aggregation pass and never mutated in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ranking_consensus.core.enums import (  # noqa: F401
    CONSENSUS_LEVEL_ORDER,
    ConsensusBadgeType,
    ConsensusLevel,
)


@dataclass(frozen=True)
class RawRankingSample:
    """One user's placement of one item in one submission. Never mutated."""

    user_id: str
    item_id: str
    position: int
    timestamp: int
    """Submission time, epoch milliseconds."""


@dataclass(frozen=True)
class ConsensusBadge:
    type: ConsensusBadgeType
    label: str
    color: str
    icon: str
    tooltip: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "label": self.label,
            "color": self.color,
            "icon": self.icon,
            "tooltip": self.tooltip,
        }


@dataclass
class ItemConsensus:
    """
    Consensus snapshot for one item within one list.

    controversy_score is always 100 - consensus_score and sample_size is
    always the total count in rank_distribution.
    """

    item_id: str
    average_position: float
    median_position: float
    mode_position: int
    position_standard_deviation: float
    position_variance: float
    rank_distribution: dict[int, int]
    """Position -> number of users who placed the item there."""
    percentile_distribution: list[float]
    """101 values; index i is the nearest-rank i-th percentile position."""
    consensus_level: ConsensusLevel
    consensus_score: int
    controversy_score: int
    sample_size: int
    last_updated: int
    """Epoch milliseconds."""
    item_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "item_id": self.item_id,
            "average_position": self.average_position,
            "median_position": self.median_position,
            "mode_position": self.mode_position,
            "position_standard_deviation": self.position_standard_deviation,
            "position_variance": self.position_variance,
            "rank_distribution": dict(self.rank_distribution),
            "percentile_distribution": list(self.percentile_distribution),
            "consensus_level": self.consensus_level.value,
            "consensus_score": self.consensus_score,
            "controversy_score": self.controversy_score,
            "sample_size": self.sample_size,
            "last_updated": self.last_updated,
        }
        if self.item_name is not None:
            out["item_name"] = self.item_name
        return out


@dataclass
class CommunityRanking:
    """Aggregate over all items of one (list, category)."""

    list_id: str
    category_id: str
    items: list[ItemConsensus]
    overall_consensus: int
    most_controversial: list[ItemConsensus]
    most_agreed: list[ItemConsensus]
    total_rankings: float
    """Mean sample size across items."""
    last_updated: int

    def item(self, item_id: str) -> ItemConsensus | None:
        for it in self.items:
            if it.item_id == item_id:
                return it
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "list_id": self.list_id,
            "category_id": self.category_id,
            "items": [i.to_dict() for i in self.items],
            "overall_consensus": self.overall_consensus,
            "most_controversial": [i.to_dict() for i in self.most_controversial],
            "most_agreed": [i.to_dict() for i in self.most_agreed],
            "total_rankings": self.total_rankings,
            "last_updated": self.last_updated,
        }


@dataclass
class PositionDifference:
    item_id: str
    user_position: int
    community_position: float
    position_diff: float
    """Signed: user_position - community_position. Negative = user ranked it higher."""
    consensus_level: ConsensusLevel

    def to_dict(self) -> dict[str, Any]:
        return {
            "item_id": self.item_id,
            "user_position": self.user_position,
            "community_position": self.community_position,
            "position_diff": self.position_diff,
            "consensus_level": self.consensus_level.value,
        }


@dataclass
class UserVsCommunityComparison:
    user_id: str
    list_id: str
    agreement_score: int
    matching_positions: int
    total_items: int
    differences: list[PositionDifference]
    """Sorted by |position_diff| descending."""
    agreements: list[str] = field(default_factory=list)
    outliers: list[str] = field(default_factory=list)
    controversial: list[str] = field(default_factory=list)

    def user_positions(self) -> dict[str, int]:
        return {d.item_id: d.user_position for d in self.differences}

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "list_id": self.list_id,
            "agreement_score": self.agreement_score,
            "matching_positions": self.matching_positions,
            "total_items": self.total_items,
            "differences": [d.to_dict() for d in self.differences],
            "agreements": list(self.agreements),
            "outliers": list(self.outliers),
            "controversial": list(self.controversial),
        }
