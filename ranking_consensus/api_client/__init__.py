"""Network boundary: abstract collaborator, httpx client and wire schemas."""

from ranking_consensus.api_client.client import ConsensusAPIClient, HttpConsensusAPIClient
from ranking_consensus.api_client.schemas import (
    CommunityRankingPayload,
    ItemConsensusPayload,
    SubmitRankingRequest,
)

__all__ = [
    "CommunityRankingPayload",
    "ConsensusAPIClient",
    "HttpConsensusAPIClient",
    "ItemConsensusPayload",
    "SubmitRankingRequest",
]
