"""Cached consensus data service and per-viewer heatmap sessions."""

from ranking_consensus.consensus_service.data_service import (
    ConsensusDataService,
    cache_key,
    create_consensus_service,
)
from ranking_consensus.consensus_service.session import (
    ConsensusUpdate,
    ConsensusUpdateType,
    HeatmapSession,
)

__all__ = [
    "ConsensusDataService",
    "ConsensusUpdate",
    "ConsensusUpdateType",
    "HeatmapSession",
    "cache_key",
    "create_consensus_service",
]
