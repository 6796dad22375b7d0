"""
Heatmap cell generation.

One cell per community item: intensity for the chosen view mode, colour
from the gradient, rounded average position and an optional badge.
Consensus mode inverts intensity before colouring so high agreement lands
on the first (green) stop; no other mode is inverted.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from ranking_consensus.analysis_engine.classifier import determine_badge
from ranking_consensus.analysis_engine.models import CommunityRanking, ItemConsensus
from ranking_consensus.config.thresholds import DEFAULT_THRESHOLDS, ConsensusThresholds
from ranking_consensus.consensus_logging import get_logger
from ranking_consensus.heatmap.colors import DEFAULT_GRADIENT, get_heatmap_color
from ranking_consensus.heatmap.models import HeatIntensity, HeatmapCell, HeatmapViewMode
from ranking_consensus.utils.rounding import round_score

logger = get_logger(__name__)


def calculate_heat_intensity(consensus_score: float, mode: HeatmapViewMode | str) -> HeatIntensity:
    """Score-based intensity on a 0-100 scale; controversy and variance both use 100 - score."""
    view = HeatmapViewMode(mode).render_mode
    if view in (HeatmapViewMode.CONTROVERSY, HeatmapViewMode.VARIANCE):
        value = 100 - consensus_score
    else:
        value = consensus_score
    return HeatIntensity(min=0, max=100, value=value, normalized=value / 100)


def _intensity_value(
    item: ItemConsensus,
    mode: HeatmapViewMode,
    user_position: float | None,
    cfg: ConsensusThresholds,
) -> float:
    if mode == HeatmapViewMode.CONTROVERSY:
        return item.controversy_score / 100
    if mode == HeatmapViewMode.VARIANCE:
        return 1 - item.consensus_score / 100
    if mode == HeatmapViewMode.YOUR_PICK:
        if user_position is None:
            return cfg.neutral_intensity
        diff = abs(user_position - item.average_position)
        return min(diff / cfg.your_pick_diff_normalizer, 1.0)
    return item.consensus_score / 100


def generate_heatmap_cells(
    community: CommunityRanking,
    mode: HeatmapViewMode | str = HeatmapViewMode.CONSENSUS,
    user_positions: Mapping[str, int] | None = None,
    gradient: Sequence[str] | None = None,
    config: ConsensusThresholds | None = None,
) -> list[HeatmapCell]:
    """
    Build renderable cells for every item in a community ranking.

    Args:
        community: Aggregated ranking to render.
        mode: View mode; off and trending render as consensus.
        user_positions: Viewing user's item_id -> position, if known.
        gradient: Colour stops; defaults to the green-to-red palette.
        config: Thresholds; uses defaults if None.
    """
    cfg = config or DEFAULT_THRESHOLDS
    view = HeatmapViewMode(mode).render_mode
    stops = gradient if gradient is not None else DEFAULT_GRADIENT
    positions = user_positions or {}

    cells: list[HeatmapCell] = []
    for item in community.items:
        user_pos = positions.get(item.item_id)
        value = _intensity_value(item, view, user_pos, cfg)
        color_value = 1 - value if view == HeatmapViewMode.CONSENSUS else value
        cells.append(
            HeatmapCell(
                position=round_score(item.average_position),
                item_id=item.item_id,
                intensity=HeatIntensity(min=0, max=100, value=value * 100, normalized=value),
                color=get_heatmap_color(color_value, stops),
                consensus_level=item.consensus_level,
                badge=determine_badge(item, community.items, user_pos, cfg),
            )
        )

    logger.debug(
        "heatmap_cells_generated",
        list_id=community.list_id,
        mode=view.value,
        cells=len(cells),
    )
    return cells
