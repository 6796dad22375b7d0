"""
Heatmap view models and configuration.

HeatmapCell is recomputed on every render pass and never persisted.
HeatmapConfig is a plain value object; replace it with with_changes()
rather than mutating.
"""

from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ranking_consensus.analysis_engine.models import ConsensusBadge, ConsensusLevel
from ranking_consensus.core.enums import ColorScheme

DEFAULT_OPACITY = 0.7


class HeatmapViewMode(str, Enum):
    CONSENSUS = "consensus"
    CONTROVERSY = "controversy"
    VARIANCE = "variance"
    YOUR_PICK = "yourPick"
    OFF = "off"
    TRENDING = "trending"

    @property
    def render_mode(self) -> HeatmapViewMode:
        """Mode used to colour cells; off and trending render as consensus."""
        if self in (HeatmapViewMode.OFF, HeatmapViewMode.TRENDING):
            return HeatmapViewMode.CONSENSUS
        return self


def clamp_unit(value: float) -> float:
    """Clamp to [0, 1]; NaN becomes 0."""
    if math.isnan(value):
        return 0.0
    return max(0.0, min(1.0, value))


@dataclass(frozen=True)
class HeatIntensity:
    min: float
    max: float
    value: float
    normalized: float

    def to_dict(self) -> dict[str, Any]:
        return {"min": self.min, "max": self.max, "value": self.value, "normalized": self.normalized}


@dataclass(frozen=True)
class HeatmapCell:
    position: int
    intensity: HeatIntensity
    color: str
    consensus_level: ConsensusLevel
    item_id: str | None = None
    badge: ConsensusBadge | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "position": self.position,
            "intensity": self.intensity.to_dict(),
            "color": self.color,
            "consensus_level": self.consensus_level.value,
        }
        if self.item_id is not None:
            out["item_id"] = self.item_id
        if self.badge is not None:
            out["badge"] = self.badge.to_dict()
        return out


@dataclass(frozen=True)
class HeatmapConfig:
    enabled: bool = False
    mode: HeatmapViewMode = HeatmapViewMode.CONSENSUS
    opacity: float = DEFAULT_OPACITY
    show_labels: bool = False
    show_badges: bool = True
    color_scheme: ColorScheme = ColorScheme.DEFAULT

    def __post_init__(self) -> None:
        object.__setattr__(self, "opacity", clamp_unit(self.opacity))

    def with_changes(self, **changes: Any) -> HeatmapConfig:
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "mode": self.mode.value,
            "opacity": self.opacity,
            "show_labels": self.show_labels,
            "show_badges": self.show_badges,
            "color_scheme": self.color_scheme.value,
        }
