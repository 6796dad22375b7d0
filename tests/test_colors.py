"""
Tests for colour mapping: gradient endpoints, interpolation, palettes and
malformed input clamping.
"""

from __future__ import annotations

from ranking_consensus.core.enums import ColorScheme
from ranking_consensus.heatmap.colors import (
    COLORBLIND_GRADIENT,
    DEFAULT_GRADIENT,
    PALETTES,
    get_gradient,
    get_heatmap_color,
    hex_to_rgb,
    rgb_to_hex,
)


def test_endpoints_match_gradient_ends():
    """Intensity 0 is the first stop and 1 the last, for any gradient of two or more colours."""
    for gradient in (DEFAULT_GRADIENT, COLORBLIND_GRADIENT, ("#000000", "#ffffff"), ("#112233", "#445566", "#778899")):
        assert get_heatmap_color(0, gradient) == gradient[0]
        assert get_heatmap_color(1, gradient) == gradient[-1]


def test_midpoint_interpolates_channels():
    assert get_heatmap_color(0.5, ["#000000", "#ffffff"]) == "#808080"
    assert get_heatmap_color(0.25, ["#000000", "#ff0000"]) == "#400000"


def test_exact_interior_stop_returned():
    assert get_heatmap_color(0.5, DEFAULT_GRADIENT) == DEFAULT_GRADIENT[2]


def test_intensity_clamped():
    assert get_heatmap_color(-3, DEFAULT_GRADIENT) == DEFAULT_GRADIENT[0]
    assert get_heatmap_color(7, DEFAULT_GRADIENT) == DEFAULT_GRADIENT[-1]
    assert get_heatmap_color(float("nan"), DEFAULT_GRADIENT) == DEFAULT_GRADIENT[0]


def test_single_colour_gradient_returned_unchanged():
    assert get_heatmap_color(0.7, ["#abcdef"]) == "#abcdef"


def test_empty_gradient_uses_default_palette():
    assert get_heatmap_color(0, []) == DEFAULT_GRADIENT[0]
    assert get_heatmap_color(1, []) == DEFAULT_GRADIENT[-1]


def test_hex_round_trip_and_invalid_hex():
    assert hex_to_rgb("#22c55e") == (0x22, 0xC5, 0x5E)
    assert hex_to_rgb("22C55E") == (0x22, 0xC5, 0x5E)
    assert rgb_to_hex(34, 197, 94) == "#22c55e"
    assert hex_to_rgb("not-a-colour") == (0, 0, 0)


def test_palettes_distinct_and_selectable():
    """Default runs green to red; colorblind runs blue to magenta; never mixed."""
    assert get_gradient(ColorScheme.DEFAULT) == DEFAULT_GRADIENT
    assert get_gradient("colorblind") == COLORBLIND_GRADIENT
    assert set(PALETTES[ColorScheme.DEFAULT]).isdisjoint(PALETTES[ColorScheme.COLORBLIND])
    assert DEFAULT_GRADIENT[0] == "#22c55e"
    assert COLORBLIND_GRADIENT[0] == "#3b82f6"


def test_unknown_scheme_falls_back_to_default():
    assert get_gradient("sepia") == DEFAULT_GRADIENT
