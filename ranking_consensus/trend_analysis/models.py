"""
Trend data models: historical points, per-item trends, shifts and summaries.

Velocities are positions per hour. Lower position numbers are better, so a
negative velocity means the item is rising (improving) and a positive one
means it is falling.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class TrendDirection(str, Enum):
    RISING = "rising"
    FALLING = "falling"
    STABLE = "stable"


class OverallDirection(str, Enum):
    RISING = "rising"
    FALLING = "falling"
    STABLE = "stable"
    MIXED = "mixed"


class ShiftMagnitude(str, Enum):
    MINOR = "minor"
    MODERATE = "moderate"
    MAJOR = "major"


@dataclass(frozen=True)
class HistoricalPoint:
    timestamp: int
    """Epoch milliseconds."""
    average_position: float
    consensus_score: int
    sample_size: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "average_position": self.average_position,
            "consensus_score": self.consensus_score,
            "sample_size": self.sample_size,
        }


@dataclass(frozen=True)
class RegressionFit:
    slope: float
    intercept: float
    r2: float


@dataclass
class ConsensusTrend:
    """
    Trend state for one item.

    predicted_position and confidence are set only when the regression fit
    is strong enough to forecast.
    """

    item_id: str
    history: list[HistoricalPoint]
    trend_direction: TrendDirection
    trend_strength: int
    velocity_per_hour: float
    predicted_position: int | None = None
    confidence: int | None = None

    @property
    def has_forecast(self) -> bool:
        return self.predicted_position is not None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "item_id": self.item_id,
            "history": [h.to_dict() for h in self.history],
            "trend_direction": self.trend_direction.value,
            "trend_strength": self.trend_strength,
            "velocity_per_hour": self.velocity_per_hour,
        }
        if self.predicted_position is not None:
            out["predicted_position"] = self.predicted_position
            out["confidence"] = self.confidence
        return out


@dataclass
class TrendPrediction:
    position: int
    timeframe: str = "24h"


@dataclass
class TrendSignal:
    """One item's trend ranked for display: significance, confidence, forecast."""

    item_id: str
    trend: ConsensusTrend
    is_significant: bool
    confidence: float
    prediction: TrendPrediction | None = None


@dataclass
class ConsensusShift:
    item_id: str
    velocity: float
    direction: TrendDirection
    magnitude: ShiftMagnitude


@dataclass
class OverallTrend:
    average_strength: int
    dominant_direction: OverallDirection
    volatility: int
    direction_counts: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "average_strength": self.average_strength,
            "dominant_direction": self.dominant_direction.value,
            "volatility": self.volatility,
            "direction_counts": dict(self.direction_counts),
        }
