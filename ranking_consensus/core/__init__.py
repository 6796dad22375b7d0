"""
Core utilities: exception hierarchy shared by the API client and service.
"""

from ranking_consensus.core.exceptions import (
    ConsensusError,
    InvalidPayloadError,
    RankingFetchError,
    RankingSubmitError,
)

__all__ = [
    "ConsensusError",
    "InvalidPayloadError",
    "RankingFetchError",
    "RankingSubmitError",
]
