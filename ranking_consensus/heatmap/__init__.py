"""Heatmap view models, colour mapping and cell generation."""

from ranking_consensus.heatmap.cells import calculate_heat_intensity, generate_heatmap_cells
from ranking_consensus.heatmap.colors import (
    PALETTES,
    get_gradient,
    get_heatmap_color,
    hex_to_rgb,
    rgb_to_hex,
)
from ranking_consensus.heatmap.models import (
    HeatIntensity,
    HeatmapCell,
    HeatmapConfig,
    HeatmapViewMode,
)

__all__ = [
    "PALETTES",
    "HeatIntensity",
    "HeatmapCell",
    "HeatmapConfig",
    "HeatmapViewMode",
    "calculate_heat_intensity",
    "generate_heatmap_cells",
    "get_gradient",
    "get_heatmap_color",
    "hex_to_rgb",
    "rgb_to_hex",
]
