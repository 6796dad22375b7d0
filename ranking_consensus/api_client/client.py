"""
Network collaborator for community rankings.

ConsensusAPIClient is the abstract boundary the service depends on;
HttpConsensusAPIClient implements it over httpx.AsyncClient:

  GET  {base}/api/consensus/{list_id}?category={category_id}
  POST {base}/api/consensus/submit

Failures raise ConsensusError subclasses; the service decides how to
recover.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping

import httpx
from pydantic import ValidationError

from ranking_consensus.analysis_engine.models import CommunityRanking
from ranking_consensus.api_client.schemas import CommunityRankingPayload, SubmitRankingRequest
from ranking_consensus.config.settings import Settings
from ranking_consensus.consensus_logging import get_logger
from ranking_consensus.core.exceptions import (
    InvalidPayloadError,
    RankingFetchError,
    RankingSubmitError,
)

logger = get_logger(__name__)

FETCH_PATH = "/api/consensus/{list_id}"
SUBMIT_PATH = "/api/consensus/submit"


class ConsensusAPIClient(ABC):
    """Abstract source of community rankings and sink for user submissions."""

    @abstractmethod
    async def fetch_community_ranking(self, list_id: str, category_id: str) -> CommunityRanking:
        """Return the community ranking or raise ConsensusError."""

    @abstractmethod
    async def post_ranking(self, list_id: str, user_id: str, rankings: Mapping[str, int]) -> bool:
        """Submit item_id -> position; True if accepted."""

    async def aclose(self) -> None:
        return None


class HttpConsensusAPIClient(ConsensusAPIClient):
    def __init__(
        self,
        base_url: str,
        *,
        timeout_sec: float = 10.0,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_sec),
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> HttpConsensusAPIClient:
        return cls(settings.api_base_url, timeout_sec=settings.http_timeout_sec)

    async def fetch_community_ranking(self, list_id: str, category_id: str) -> CommunityRanking:
        url = self._base_url + FETCH_PATH.format(list_id=list_id)
        try:
            resp = await self._client.get(url, params={"category": category_id})
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise RankingFetchError(
                f"Community ranking request failed with HTTP {e.response.status_code}",
                list_id=list_id,
                category_id=category_id,
                status_code=e.response.status_code,
                cause=e,
            ) from e
        except httpx.HTTPError as e:
            raise RankingFetchError(
                f"Community ranking request failed: {e}",
                list_id=list_id,
                category_id=category_id,
                cause=e,
            ) from e

        try:
            payload = CommunityRankingPayload.model_validate(resp.json())
        except ValueError as e:
            errors = e.errors() if isinstance(e, ValidationError) else []
            raise InvalidPayloadError(
                f"Community ranking payload for {list_id!r} is malformed",
                errors=errors,
            ) from e

        logger.debug(
            "community_ranking_received",
            list_id=list_id,
            category_id=category_id,
            items=len(payload.items),
        )
        return payload.to_domain()

    async def post_ranking(self, list_id: str, user_id: str, rankings: Mapping[str, int]) -> bool:
        try:
            body = SubmitRankingRequest.from_positions(list_id, user_id, dict(rankings))
        except ValidationError as e:
            raise RankingSubmitError(
                f"Ranking for {list_id!r} is not a valid submission",
                list_id=list_id,
                user_id=user_id,
                cause=e,
            ) from e

        try:
            resp = await self._client.post(
                self._base_url + SUBMIT_PATH,
                json=body.model_dump(by_alias=True),
            )
        except httpx.HTTPError as e:
            raise RankingSubmitError(
                f"Ranking submission failed: {e}",
                list_id=list_id,
                user_id=user_id,
                cause=e,
            ) from e
        if not resp.is_success:
            logger.warning(
                "ranking_submit_rejected",
                list_id=list_id,
                user_id=user_id,
                status_code=resp.status_code,
            )
            return False
        return True

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
