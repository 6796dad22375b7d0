"""
Tests for heatmap cell generation and heatmap config.
"""

from __future__ import annotations

import pytest

from ranking_consensus.analysis_engine.models import ConsensusBadgeType
from ranking_consensus.heatmap.cells import calculate_heat_intensity, generate_heatmap_cells
from ranking_consensus.heatmap.colors import DEFAULT_GRADIENT
from ranking_consensus.heatmap.models import HeatmapConfig, HeatmapViewMode
from tests.conftest import make_community, make_item


def _by_id(cells):
    return {c.item_id: c for c in cells}


def test_consensus_mode_inverts_colour(community):
    """Full agreement sits at the green end in consensus mode."""
    perfect = make_community([make_item("p", consensus_score=100, average_position=2.4)])
    cell = generate_heatmap_cells(perfect, HeatmapViewMode.CONSENSUS)[0]
    assert cell.intensity.normalized == 1.0
    assert cell.intensity.value == 100
    assert cell.color == DEFAULT_GRADIENT[0]
    assert cell.position == 2


def test_controversy_mode_not_inverted():
    debated = make_community([make_item("d", consensus_score=0)])
    cell = generate_heatmap_cells(debated, "controversy")[0]
    assert cell.intensity.normalized == 1.0
    assert cell.color == DEFAULT_GRADIENT[-1]


def test_variance_mode(community):
    cells = _by_id(generate_heatmap_cells(community, HeatmapViewMode.VARIANCE))
    assert cells["zelda"].intensity.normalized == pytest.approx(0.05)
    assert cells["halo"].intensity.normalized == pytest.approx(0.8)


def test_your_pick_mode_uses_user_position(community):
    cells = _by_id(generate_heatmap_cells(community, HeatmapViewMode.YOUR_PICK, {"zelda": 11, "halo": 12}))
    assert cells["zelda"].intensity.normalized == pytest.approx(0.5)
    assert cells["halo"].intensity.normalized == 0
    # No user position: neutral intensity
    assert cells["doom"].intensity.normalized == 0.5


def test_your_pick_intensity_capped():
    c = make_community([make_item("x", average_position=0.0)])
    cell = generate_heatmap_cells(c, HeatmapViewMode.YOUR_PICK, {"x": 60})[0]
    assert cell.intensity.normalized == 1.0


def test_off_and_trending_render_as_consensus(community):
    consensus = [c.color for c in generate_heatmap_cells(community, HeatmapViewMode.CONSENSUS)]
    assert [c.color for c in generate_heatmap_cells(community, HeatmapViewMode.OFF)] == consensus
    assert [c.color for c in generate_heatmap_cells(community, "trending")] == consensus


def test_position_rounds_half_up():
    c = make_community([make_item("a", average_position=2.5), make_item("b", average_position=3.49)])
    cells = _by_id(generate_heatmap_cells(c))
    assert cells["a"].position == 3
    assert cells["b"].position == 3


def test_badges_attached(community):
    """With three items the top-10% slice is one item: zelda is king, halo is hot debate."""
    cells = _by_id(generate_heatmap_cells(community))
    assert cells["zelda"].badge.type == ConsensusBadgeType.CONSENSUS_KING
    assert cells["halo"].badge.type == ConsensusBadgeType.HOT_DEBATE


def test_custom_gradient(community):
    cells = generate_heatmap_cells(community, HeatmapViewMode.CONTROVERSY, gradient=["#000000", "#ffffff"])
    for cell in cells:
        assert cell.color.startswith("#")
        assert len(cell.color) == 7


def test_cell_to_dict(community):
    data = generate_heatmap_cells(community)[0].to_dict()
    assert data["item_id"] == "zelda"
    assert set(data["intensity"]) == {"min", "max", "value", "normalized"}


def test_calculate_heat_intensity():
    assert calculate_heat_intensity(80, "consensus").value == 80
    assert calculate_heat_intensity(80, "controversy").value == 20
    assert calculate_heat_intensity(80, HeatmapViewMode.VARIANCE).normalized == pytest.approx(0.2)


def test_config_defaults_and_opacity_clamp():
    cfg = HeatmapConfig()
    assert cfg.enabled is False
    assert cfg.mode == HeatmapViewMode.CONSENSUS
    assert cfg.opacity == 0.7
    assert cfg.show_badges is True
    assert HeatmapConfig(opacity=1.5).opacity == 1.0
    assert cfg.with_changes(opacity=-2).opacity == 0.0
    assert cfg.to_dict()["mode"] == "consensus"
