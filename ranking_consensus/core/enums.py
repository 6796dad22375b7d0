"""
Closed enumerations shared across the engine.

Kept dependency-free so config and models can both import them.
"""

from __future__ import annotations

from enum import Enum


class ConsensusLevel(str, Enum):
    UNANIMOUS = "unanimous"
    STRONG = "strong"
    MODERATE = "moderate"
    MIXED = "mixed"
    CONTROVERSIAL = "controversial"


# Lowest agreement first; used for monotonicity checks and ordering.
CONSENSUS_LEVEL_ORDER = (
    ConsensusLevel.CONTROVERSIAL,
    ConsensusLevel.MIXED,
    ConsensusLevel.MODERATE,
    ConsensusLevel.STRONG,
    ConsensusLevel.UNANIMOUS,
)


class ConsensusBadgeType(str, Enum):
    CONSENSUS_KING = "consensus-king"
    HOT_DEBATE = "hot-debate"
    YOUR_PICK = "your-pick"
    OUTLIER = "outlier"
    HIDDEN_GEM = "hidden-gem"


class ColorScheme(str, Enum):
    DEFAULT = "default"
    COLORBLIND = "colorblind"
    MONOCHROME = "monochrome"
