"""
Pytest fixtures for ranking consensus tests: item builders, a controllable
clock and an in-memory API client.
"""

from __future__ import annotations

from collections.abc import Mapping

import pytest

from ranking_consensus.analysis_engine.classifier import get_consensus_level
from ranking_consensus.analysis_engine.models import CommunityRanking, ItemConsensus
from ranking_consensus.analysis_engine.statistics import create_community_ranking
from ranking_consensus.api_client.client import ConsensusAPIClient
from ranking_consensus.core.exceptions import RankingFetchError

NOW_MS = 1_700_000_000_000


def make_item(
    item_id: str,
    consensus_score: int = 80,
    average_position: float = 3.0,
    sample_size: int = 10,
    variance: float = 1.0,
    rank_distribution: dict[int, int] | None = None,
) -> ItemConsensus:
    """ItemConsensus with consistent derived fields; only what a test cares about is set."""
    return ItemConsensus(
        item_id=item_id,
        average_position=average_position,
        median_position=average_position,
        mode_position=round(average_position),
        position_standard_deviation=variance ** 0.5,
        position_variance=variance,
        rank_distribution=rank_distribution or {round(average_position): sample_size},
        percentile_distribution=[average_position] * 101,
        consensus_level=get_consensus_level(consensus_score),
        consensus_score=consensus_score,
        controversy_score=100 - consensus_score,
        sample_size=sample_size,
        last_updated=NOW_MS,
    )


def make_community(items: list[ItemConsensus], list_id: str = "top-games", category_id: str = "default") -> CommunityRanking:
    return create_community_ranking(list_id, category_id, items, now_ms=NOW_MS)


class FakeClock:
    """Callable clock in seconds; advance() moves time forward."""

    def __init__(self, start: float = NOW_MS / 1000) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeAPIClient(ConsensusAPIClient):
    """
    In-memory collaborator recording calls.

    fail=True raises RankingFetchError; error, when set, is raised as-is.
    """

    def __init__(self, rankings: Mapping[str, CommunityRanking] | None = None) -> None:
        self.rankings = dict(rankings or {})
        self.fetch_calls: list[tuple[str, str]] = []
        self.post_calls: list[tuple[str, str, dict[str, int]]] = []
        self.fail = False
        self.accept = True
        self.error: Exception | None = None
        self.closed = False

    async def fetch_community_ranking(self, list_id: str, category_id: str) -> CommunityRanking:
        self.fetch_calls.append((list_id, category_id))
        if self.error is not None:
            raise self.error
        if self.fail or list_id not in self.rankings:
            raise RankingFetchError("unavailable", list_id=list_id, category_id=category_id, status_code=503)
        return self.rankings[list_id]

    async def post_ranking(self, list_id: str, user_id: str, rankings: Mapping[str, int]) -> bool:
        self.post_calls.append((list_id, user_id, dict(rankings)))
        if self.error is not None:
            raise self.error
        if self.fail:
            raise RankingFetchError("unavailable", list_id=list_id)
        return self.accept

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def community():
    """Three-item community: one well agreed, one divisive, one in between."""
    return make_community(
        [
            make_item("zelda", consensus_score=95, average_position=1.0),
            make_item("halo", consensus_score=20, average_position=12.0, variance=40.0),
            make_item("doom", consensus_score=60, average_position=6.0, variance=8.0),
        ]
    )


@pytest.fixture
def api_client(community):
    return FakeAPIClient({community.list_id: community})
