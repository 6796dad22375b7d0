"""
Statistics aggregation: raw (user, item, position) samples -> per-item consensus.

For each item: mean/median/mode position, population variance and std dev,
exact rank distribution, nearest-rank percentile table, and a 0-100
consensus score derived from variance relative to a uniform-disagreement
reference. Deterministic; no ML.
"""

from __future__ import annotations

import math
import statistics
import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from ranking_consensus.analysis_engine.classifier import get_consensus_level
from ranking_consensus.analysis_engine.models import (
    CommunityRanking,
    ItemConsensus,
    RawRankingSample,
)
from ranking_consensus.config.thresholds import DEFAULT_THRESHOLDS, ConsensusThresholds
from ranking_consensus.consensus_logging import get_logger
from ranking_consensus.utils.rounding import round_score

logger = get_logger(__name__)

PERCENTILE_COUNT = 101
MIN_LIST_SIZE = 1


@dataclass
class ItemStatistics:
    average: float
    median: float
    mode: float
    std_dev: float
    variance: float


def _now_ms() -> int:
    return int(time.time() * 1000)


def _clamp_list_size(list_size: int) -> int:
    if list_size < MIN_LIST_SIZE:
        logger.warning("list_size_clamped", list_size=list_size, clamped_to=MIN_LIST_SIZE)
        return MIN_LIST_SIZE
    return list_size


def calculate_item_statistics(positions: Sequence[float]) -> ItemStatistics:
    """
    Descriptive statistics for one item's positions.

    Variance is the population variance (divisor n). Mode ties go to the
    position encountered first. Empty input yields all zeros.
    """
    if not positions:
        return ItemStatistics(average=0.0, median=0.0, mode=0.0, std_dev=0.0, variance=0.0)

    average = statistics.mean(positions)
    median = statistics.median(positions)
    mode = statistics.mode(positions)
    variance = statistics.pvariance(positions, mu=average)
    return ItemStatistics(
        average=float(average),
        median=float(median),
        mode=mode,
        std_dev=math.sqrt(variance),
        variance=float(variance),
    )


def build_rank_distribution(positions: Iterable[int]) -> dict[int, int]:
    distribution: dict[int, int] = {}
    for p in positions:
        distribution[p] = distribution.get(p, 0) + 1
    return distribution


def build_percentile_distribution(positions: Sequence[float]) -> list[float]:
    """
    101-entry nearest-rank percentile table.

    Entry i is sorted[floor(i/100 * (n-1))]; small n repeats values.
    """
    if not positions:
        return [0] * PERCENTILE_COUNT
    ordered = sorted(positions)
    last = len(ordered) - 1
    return [ordered[math.floor((i / 100) * last)] for i in range(PERCENTILE_COUNT)]


def calculate_consensus_score(
    variance: float,
    list_size: int,
    config: ConsensusThresholds | None = None,
) -> int:
    """
    Map variance to a 0-100 consensus score (higher = more agreement).

    Reference maximum is the variance of a discrete uniform distribution
    over [0, list_size): list_size**2 / 12.
    """
    cfg = config or DEFAULT_THRESHOLDS
    size = _clamp_list_size(list_size)
    max_variance = (size * size) / cfg.max_variance_divisor
    normalized = min(max(variance, 0.0) / max_variance, 1.0)
    return max(0, min(100, round_score((1 - normalized) * 100)))


def calculate_controversy_score(consensus_score: int) -> int:
    return 100 - consensus_score


def collapse_resubmissions(samples: Iterable[RawRankingSample]) -> list[RawRankingSample]:
    """
    Keep only each user's latest submission.

    A re-submission replaces the user's earlier placements for the list;
    within one submission the last sample for an item wins.
    """
    samples = list(samples)
    latest: dict[str, int] = {}
    for s in samples:
        if s.timestamp > latest.get(s.user_id, -1):
            latest[s.user_id] = s.timestamp
    kept: dict[tuple[str, str], RawRankingSample] = {}
    for s in samples:
        if s.timestamp == latest[s.user_id]:
            kept[(s.user_id, s.item_id)] = s
    return list(kept.values())


def aggregate_rankings(
    samples: Iterable[RawRankingSample],
    list_size: int,
    *,
    now_ms: int | None = None,
    item_names: dict[str, str] | None = None,
    config: ConsensusThresholds | None = None,
) -> list[ItemConsensus]:
    """
    Aggregate raw ranking samples into one ItemConsensus per item.

    Items appear in first-seen order. Items without samples never appear.

    Args:
        samples: Raw (user, item, position) samples.
        list_size: Number of slots in the list; normalises the consensus score.
        now_ms: Snapshot time (epoch ms); defaults to now.
        item_names: Optional item_id -> display name.
        config: Thresholds; uses defaults if None.
    """
    cfg = config or DEFAULT_THRESHOLDS
    stamp = now_ms if now_ms is not None else _now_ms()
    names = item_names or {}

    positions_by_item: dict[str, list[int]] = {}
    for sample in samples:
        positions_by_item.setdefault(sample.item_id, []).append(sample.position)

    items: list[ItemConsensus] = []
    for item_id, positions in positions_by_item.items():
        stats = calculate_item_statistics(positions)
        consensus_score = calculate_consensus_score(stats.variance, list_size, cfg)
        items.append(
            ItemConsensus(
                item_id=item_id,
                item_name=names.get(item_id),
                average_position=stats.average,
                median_position=stats.median,
                mode_position=stats.mode,
                position_standard_deviation=stats.std_dev,
                position_variance=stats.variance,
                rank_distribution=build_rank_distribution(positions),
                percentile_distribution=build_percentile_distribution(positions),
                consensus_level=get_consensus_level(consensus_score, cfg),
                consensus_score=consensus_score,
                controversy_score=calculate_controversy_score(consensus_score),
                sample_size=len(positions),
                last_updated=stamp,
            )
        )

    logger.debug(
        "rankings_aggregated",
        items=len(items),
        samples=sum(i.sample_size for i in items),
        list_size=list_size,
    )
    return items


def create_community_ranking(
    list_id: str,
    category_id: str,
    items: list[ItemConsensus],
    *,
    now_ms: int | None = None,
    config: ConsensusThresholds | None = None,
) -> CommunityRanking:
    """
    Build the community aggregate for one (list, category).

    overall_consensus is the rounded mean item score; most_controversial and
    most_agreed are the top-N items by the respective score. Empty input
    yields zeros and empty slices.
    """
    cfg = config or DEFAULT_THRESHOLDS
    top_n = cfg.top_items_count

    if items:
        overall = round_score(statistics.mean(i.consensus_score for i in items))
        total_rankings = float(statistics.mean(i.sample_size for i in items))
    else:
        overall = 0
        total_rankings = 0.0

    return CommunityRanking(
        list_id=list_id,
        category_id=category_id,
        items=list(items),
        overall_consensus=overall,
        most_controversial=sorted(items, key=lambda i: i.controversy_score, reverse=True)[:top_n],
        most_agreed=sorted(items, key=lambda i: i.consensus_score, reverse=True)[:top_n],
        total_rankings=total_rankings,
        last_updated=now_ms if now_ms is not None else _now_ms(),
    )
