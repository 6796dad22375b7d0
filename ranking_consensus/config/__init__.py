"""
Configuration management for Ranking Consensus.

Environment-backed settings for the composition root and the single
threshold structure used by every engine component.
"""

from ranking_consensus.config.settings import Settings, get_settings, reset_settings_cache  # noqa: F401
from ranking_consensus.config.thresholds import DEFAULT_THRESHOLDS, ConsensusThresholds  # noqa: F401

__all__ = [
    "ConsensusThresholds",
    "DEFAULT_THRESHOLDS",
    "Settings",
    "get_settings",
    "reset_settings_cache",
]
