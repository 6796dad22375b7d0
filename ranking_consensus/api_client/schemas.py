"""
Wire schemas for the ranking API (pydantic v2, camelCase JSON).

Responses are validated strictly enough that a shape mismatch fails the
whole payload instead of yielding partial data. to_domain() converts to
the engine's dataclasses.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ranking_consensus.analysis_engine.models import (
    CommunityRanking,
    ConsensusLevel,
    ItemConsensus,
)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ItemConsensusPayload(_CamelModel):
    item_id: str = Field(..., min_length=1)
    item_name: str | None = None
    average_position: float = Field(..., ge=0)
    median_position: float = Field(..., ge=0)
    mode_position: int = Field(..., ge=0)
    position_standard_deviation: float = Field(..., ge=0)
    position_variance: float = Field(..., ge=0)
    rank_distribution: dict[int, int]
    percentile_distribution: list[float] = Field(default_factory=list)
    consensus_level: ConsensusLevel
    consensus_score: int = Field(..., ge=0, le=100)
    controversy_score: int = Field(..., ge=0, le=100)
    sample_size: int = Field(..., ge=0)
    last_updated: int

    @field_validator("rank_distribution", mode="before")
    @classmethod
    def _pairs_to_mapping(cls, value: Any) -> Any:
        """Accept [[position, count], ...] as well as {position: count}."""
        if not isinstance(value, list):
            return value
        mapping = {}
        for pair in value:
            if not isinstance(pair, (list, tuple)) or len(pair) != 2:
                raise ValueError(f"rank distribution entry must be a [position, count] pair, got {pair!r}")
            mapping[pair[0]] = pair[1]
        return mapping

    def to_domain(self) -> ItemConsensus:
        return ItemConsensus(
            item_id=self.item_id,
            item_name=self.item_name,
            average_position=self.average_position,
            median_position=self.median_position,
            mode_position=self.mode_position,
            position_standard_deviation=self.position_standard_deviation,
            position_variance=self.position_variance,
            rank_distribution=dict(self.rank_distribution),
            percentile_distribution=list(self.percentile_distribution),
            consensus_level=self.consensus_level,
            consensus_score=self.consensus_score,
            controversy_score=self.controversy_score,
            sample_size=self.sample_size,
            last_updated=self.last_updated,
        )


class CommunityRankingPayload(_CamelModel):
    list_id: str
    category_id: str
    items: list[ItemConsensusPayload]
    overall_consensus: int = Field(..., ge=0, le=100)
    most_controversial: list[ItemConsensusPayload] = Field(default_factory=list)
    most_agreed: list[ItemConsensusPayload] = Field(default_factory=list)
    total_rankings: float = 0.0
    last_updated: int

    def to_domain(self) -> CommunityRanking:
        return CommunityRanking(
            list_id=self.list_id,
            category_id=self.category_id,
            items=[i.to_domain() for i in self.items],
            overall_consensus=self.overall_consensus,
            most_controversial=[i.to_domain() for i in self.most_controversial],
            most_agreed=[i.to_domain() for i in self.most_agreed],
            total_rankings=self.total_rankings,
            last_updated=self.last_updated,
        )


class RankingEntry(_CamelModel):
    item_id: str
    position: int = Field(..., ge=0)


class SubmitRankingRequest(_CamelModel):
    list_id: str
    user_id: str
    rankings: list[RankingEntry]

    @classmethod
    def from_positions(cls, list_id: str, user_id: str, positions: dict[str, int]) -> SubmitRankingRequest:
        return cls(
            list_id=list_id,
            user_id=user_id,
            rankings=[RankingEntry(item_id=k, position=v) for k, v in positions.items()],
        )
