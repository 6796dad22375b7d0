"""
Controversy analysis over per-item rank distributions.

Complements the variance-based consensus score with shape signals:
- entropy of the distribution (spread),
- polarization (distinct peaks far apart),
- bimodality (edges dominate a middle valley),
- IQR outliers (individual users far from the pack).
"""

from __future__ import annotations

import math
import statistics
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ranking_consensus.analysis_engine.models import ConsensusLevel, ItemConsensus
from ranking_consensus.utils.rounding import round_score

DEFAULT_HOTSPOT_BUCKET_SIZE = 5
DEFAULT_SHIFT_THRESHOLD = 15
IQR_FENCE = 1.5

# Reasoning thresholds
EXTREME_CONTROVERSY = 80
HIGH_CONTROVERSY = 60
MODERATE_CONTROVERSY = 40
SPLIT_POLARIZATION = 60
BIMODAL_DOMINANCE = 50
MANY_OUTLIERS = 3


class ControversyDirection(str, Enum):
    MORE_CONTROVERSIAL = "more_controversial"
    LESS_CONTROVERSIAL = "less_controversial"


@dataclass
class ControversyMetrics:
    item_id: str
    controversy_score: int
    variance_score: int
    polarization_score: int
    outlier_count: int
    bimodal_score: int
    consensus_level: ConsensusLevel
    reasoning: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "item_id": self.item_id,
            "controversy_score": self.controversy_score,
            "variance_score": self.variance_score,
            "polarization_score": self.polarization_score,
            "outlier_count": self.outlier_count,
            "bimodal_score": self.bimodal_score,
            "consensus_level": self.consensus_level.value,
            "reasoning": list(self.reasoning),
        }


@dataclass
class ControversyHotspot:
    start: int
    end: int
    avg_controversy: float
    items: list[str]


@dataclass
class ControversyShift:
    item_id: str
    previous_score: int
    current_score: int
    change: int
    direction: ControversyDirection


def _sorted_counts(distribution: dict[int, int]) -> tuple[list[int], list[int]]:
    positions = sorted(distribution)
    return positions, [distribution[p] for p in positions]


def calculate_controversy_from_distribution(distribution: dict[int, int], list_size: int) -> int:
    """Normalised Shannon entropy of the distribution, 0-100."""
    total = sum(distribution.values())
    if not distribution or total == 0:
        return 0
    entropy = 0.0
    for count in distribution.values():
        if count > 0:
            p = count / total
            entropy -= p * math.log2(p)
    max_entropy = math.log2(list_size) if list_size > 1 else 0.0
    normalized = entropy / max_entropy if max_entropy > 0 else 0.0
    return round_score(normalized * 100)


def _find_peaks(positions: list[int], counts: list[int]) -> list[int]:
    peaks = [
        positions[i]
        for i in range(1, len(counts) - 1)
        if counts[i] > counts[i - 1] and counts[i] > counts[i + 1]
    ]
    if counts[0] > counts[1]:
        peaks.insert(0, positions[0])
    if counts[-1] > counts[-2]:
        peaks.append(positions[-1])
    return peaks


def calculate_polarization(distribution: dict[int, int], list_size: int) -> int:
    """
    How strongly the distribution splits into separate camps, 0-100.

    Scales the widest gap between neighbouring peaks by list size and by
    the number of peaks (capped at 4).
    """
    if len(distribution) < 2:
        return 0
    positions, counts = _sorted_counts(distribution)
    if sum(counts) < 3:
        return 0

    peaks = _find_peaks(positions, counts)
    if len(peaks) < 2:
        return 0

    max_gap = max(b - a for a, b in zip(peaks, peaks[1:]))
    normalized_gap = max_gap / max(list_size, 1)
    peak_factor = min(len(peaks) - 1, 3) / 3
    return round_score(normalized_gap * peak_factor * 100)


def calculate_bimodal_score(distribution: dict[int, int]) -> int:
    if len(distribution) < 4:
        return 0
    _, counts = _sorted_counts(distribution)
    total = sum(counts)
    if total < 5:
        return 0

    mid = len(counts) // 2
    middle_sum = sum(counts[math.floor(mid * 0.8):math.ceil(mid * 1.2)])
    if middle_sum == 0:
        return 0
    edge_sum = total - middle_sum
    return round_score(min((edge_sum / middle_sum) / 3, 1.0) * 100)


def count_outliers(positions: Sequence[float]) -> int:
    """Number of positions outside the 1.5 x IQR fences."""
    n = len(positions)
    if n < 4:
        return 0
    ordered = sorted(positions)
    q1 = ordered[math.floor(n * 0.25)]
    q3 = ordered[math.floor(n * 0.75)]
    iqr = q3 - q1
    lower = q1 - IQR_FENCE * iqr
    upper = q3 + IQR_FENCE * iqr
    return sum(1 for p in positions if p < lower or p > upper)


def _reasoning(controversy: int, polarization: int, bimodal: int, outliers: int) -> list[str]:
    reasons: list[str] = []
    if controversy >= EXTREME_CONTROVERSY:
        reasons.append("Extremely divisive - opinions vary wildly")
    elif controversy >= HIGH_CONTROVERSY:
        reasons.append("Highly controversial - significant disagreement")
    elif controversy >= MODERATE_CONTROVERSY:
        reasons.append("Moderately debated - some variation in opinions")

    if polarization >= SPLIT_POLARIZATION:
        reasons.append("Community is split into distinct camps")
    if bimodal >= BIMODAL_DOMINANCE:
        reasons.append("Two competing opinions dominate")
    if outliers > MANY_OUTLIERS:
        reasons.append(f"{outliers} users ranked this very differently")

    if not reasons:
        reasons.append("General agreement with minor variations")
    return reasons


def calculate_controversy_metrics(item: ItemConsensus, list_size: int) -> ControversyMetrics:
    """Full controversy breakdown for one item, with human-readable reasoning."""
    positions = [pos for pos, count in item.rank_distribution.items() for _ in range(count)]
    size = max(list_size, 1)

    controversy = 100 - item.consensus_score
    variance_score = min(round_score(item.position_variance / (size * size / 12) * 100), 100)
    polarization = calculate_polarization(item.rank_distribution, size)
    bimodal = calculate_bimodal_score(item.rank_distribution)
    outliers = count_outliers(positions)

    return ControversyMetrics(
        item_id=item.item_id,
        controversy_score=controversy,
        variance_score=variance_score,
        polarization_score=polarization,
        outlier_count=outliers,
        bimodal_score=bimodal,
        consensus_level=item.consensus_level,
        reasoning=_reasoning(controversy, polarization, bimodal, outliers),
    )


def rank_by_controversy(items: Sequence[ItemConsensus], list_size: int) -> list[ControversyMetrics]:
    metrics = [calculate_controversy_metrics(i, list_size) for i in items]
    return sorted(metrics, key=lambda m: m.controversy_score, reverse=True)


def get_controversy_hotspots(
    items: Sequence[ItemConsensus],
    list_size: int,
    bucket_size: int = DEFAULT_HOTSPOT_BUCKET_SIZE,
) -> list[ControversyHotspot]:
    """
    Group items into position buckets and rank buckets by mean controversy.

    Buckets cover [0, list_size) in steps of bucket_size; items whose
    average position falls outside are ignored and empty buckets dropped.
    """
    step = max(bucket_size, 1)
    buckets: dict[int, list[ItemConsensus]] = {start: [] for start in range(0, list_size, step)}
    for item in items:
        start = math.floor(item.average_position / step) * step
        if start in buckets:
            buckets[start].append(item)

    hotspots = [
        ControversyHotspot(
            start=start,
            end=start + step,
            avg_controversy=statistics.mean(i.controversy_score for i in members),
            items=[i.item_id for i in members],
        )
        for start, members in buckets.items()
        if members
    ]
    return sorted(hotspots, key=lambda h: h.avg_controversy, reverse=True)


def detect_controversy_shifts(
    current_items: Sequence[ItemConsensus],
    previous_items: Sequence[ItemConsensus],
    threshold: int = DEFAULT_SHIFT_THRESHOLD,
) -> list[ControversyShift]:
    """Items whose controversy score moved by at least threshold, largest first."""
    previous = {i.item_id: i for i in previous_items}
    shifts: list[ControversyShift] = []
    for current in current_items:
        prev = previous.get(current.item_id)
        if prev is None:
            continue
        change = current.controversy_score - prev.controversy_score
        if abs(change) >= threshold:
            shifts.append(
                ControversyShift(
                    item_id=current.item_id,
                    previous_score=prev.controversy_score,
                    current_score=current.controversy_score,
                    change=change,
                    direction=(
                        ControversyDirection.MORE_CONTROVERSIAL
                        if change > 0
                        else ControversyDirection.LESS_CONTROVERSIAL
                    ),
                )
            )
    return sorted(shifts, key=lambda s: abs(s.change), reverse=True)
