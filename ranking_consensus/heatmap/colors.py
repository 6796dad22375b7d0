"""
Colour mapping: scalar intensity -> hex colour along a gradient.

Linear RGB interpolation between the two gradient stops that bracket the
intensity. Palettes are selected by ColorScheme and never mixed.
"""

from __future__ import annotations

import math
import re
from collections.abc import Sequence

from ranking_consensus.consensus_logging import get_logger
from ranking_consensus.core.enums import ColorScheme
from ranking_consensus.heatmap.models import clamp_unit
from ranking_consensus.utils.rounding import round_score

logger = get_logger(__name__)

# Green (agreement) -> red (disagreement)
DEFAULT_GRADIENT: tuple[str, ...] = ("#22c55e", "#84cc16", "#eab308", "#f97316", "#ef4444")
# Blue -> magenta, safe for red/green colour vision deficiency
COLORBLIND_GRADIENT: tuple[str, ...] = ("#3b82f6", "#6366f1", "#8b5cf6", "#a855f7", "#d946ef")
MONOCHROME_GRADIENT: tuple[str, ...] = ("#ffffff", "#cccccc", "#999999", "#666666", "#333333")

PALETTES: dict[ColorScheme, tuple[str, ...]] = {
    ColorScheme.DEFAULT: DEFAULT_GRADIENT,
    ColorScheme.COLORBLIND: COLORBLIND_GRADIENT,
    ColorScheme.MONOCHROME: MONOCHROME_GRADIENT,
}

_HEX_RE = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)


def get_gradient(scheme: ColorScheme | str = ColorScheme.DEFAULT) -> tuple[str, ...]:
    """Gradient for a colour scheme; unknown names fall back to default."""
    try:
        return PALETTES[ColorScheme(scheme)]
    except ValueError:
        logger.warning("color_scheme_unknown", scheme=str(scheme), default=ColorScheme.DEFAULT.value)
        return DEFAULT_GRADIENT


def hex_to_rgb(color: str) -> tuple[int, int, int]:
    """'#rrggbb' (or 'rrggbb') -> (r, g, b). Unparsable input is black."""
    match = _HEX_RE.match(color.strip())
    if not match:
        logger.warning("hex_color_invalid", color=color)
        return (0, 0, 0)
    return tuple(int(part, 16) for part in match.groups())  # type: ignore[return-value]


def rgb_to_hex(r: int, g: int, b: int) -> str:
    return "#" + "".join(f"{max(0, min(255, c)):02x}" for c in (r, g, b))


def get_heatmap_color(intensity: float, gradient: Sequence[str] | None = None) -> str:
    """
    Colour for an intensity in [0, 1].

    Out-of-range intensities are clamped and NaN is treated as 0. An empty
    gradient uses the default palette; a single-colour gradient returns that
    colour. Exact stops are returned as given.
    """
    stops = list(gradient) if gradient else []
    if not stops:
        if gradient is not None:
            logger.warning("gradient_empty", fallback=ColorScheme.DEFAULT.value)
        stops = list(DEFAULT_GRADIENT)
    if len(stops) == 1:
        return stops[0]

    t = clamp_unit(intensity)
    index = t * (len(stops) - 1)
    lower = math.floor(index)
    upper = math.ceil(index)
    if lower == upper:
        return stops[lower]

    fraction = index - lower
    lo = hex_to_rgb(stops[lower])
    hi = hex_to_rgb(stops[upper])
    r, g, b = (round_score(a + (b_ - a) * fraction) for a, b_ in zip(lo, hi))
    return rgb_to_hex(r, g, b)
