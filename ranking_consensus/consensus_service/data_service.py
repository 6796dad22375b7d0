"""
Consensus data service: cached, asynchronous access to community rankings.

Responsibilities:
- TTL cache keyed by "{list_id}-{category_id}", checked lazily on read.
- Fetch through an injected ConsensusAPIClient; any failure is logged and
  surfaces as None/False, never as exceptions.
- Concurrent misses for one key share a single in-flight fetch.
- Local aggregation of raw samples and per-key trend history.

Returned rankings are deep copies; the cache keeps the only live instance.
"""

from __future__ import annotations

import asyncio
import copy
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass

import httpx

from ranking_consensus.analysis_engine.comparison import compare_user_to_community
from ranking_consensus.analysis_engine.models import (
    CommunityRanking,
    RawRankingSample,
    UserVsCommunityComparison,
)
from ranking_consensus.analysis_engine.statistics import (
    aggregate_rankings,
    collapse_resubmissions,
    create_community_ranking,
)
from ranking_consensus.api_client.client import ConsensusAPIClient, HttpConsensusAPIClient
from ranking_consensus.config.settings import Settings, get_settings
from ranking_consensus.config.thresholds import DEFAULT_THRESHOLDS, ConsensusThresholds
from ranking_consensus.consensus_logging import get_logger
from ranking_consensus.core.exceptions import ConsensusError
from ranking_consensus.trend_analysis.history import TrendHistory
from ranking_consensus.trend_analysis.models import ConsensusTrend

logger = get_logger(__name__)

Clock = Callable[[], float]


@dataclass
class _CacheEntry:
    ranking: CommunityRanking
    expires_at: float


def cache_key(list_id: str, category_id: str) -> str:
    return f"{list_id}-{category_id}"


class ConsensusDataService:
    """
    Explicit service object; build one per application in the composition
    root (see create_consensus_service).

    Args:
        api_client: Network collaborator.
        clock: Seconds since epoch; injectable for tests.
        ttl_sec: Cache TTL; defaults to config.cache_ttl_sec.
        config: Thresholds; uses defaults if None.
    """

    def __init__(
        self,
        api_client: ConsensusAPIClient,
        *,
        clock: Clock = time.time,
        ttl_sec: float | None = None,
        config: ConsensusThresholds | None = None,
    ) -> None:
        self._api = api_client
        self._clock = clock
        self._config = config or DEFAULT_THRESHOLDS
        self._ttl_sec = ttl_sec if ttl_sec is not None else self._config.cache_ttl_sec
        self._cache: dict[str, _CacheEntry] = {}
        self._inflight: dict[str, asyncio.Task[CommunityRanking | None]] = {}
        self._histories: dict[str, TrendHistory] = {}

    @property
    def ttl_sec(self) -> float:
        return self._ttl_sec

    def __len__(self) -> int:
        return len(self._cache)

    async def __aenter__(self) -> ConsensusDataService:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def _store(self, key: str, ranking: CommunityRanking) -> None:
        self._cache[key] = _CacheEntry(ranking=ranking, expires_at=self._clock() + self._ttl_sec)
        self.trend_history(ranking.list_id, ranking.category_id).record(ranking)

    async def _fetch(self, key: str, list_id: str, category_id: str) -> CommunityRanking | None:
        try:
            ranking = await self._api.fetch_community_ranking(list_id, category_id)
        except (ConsensusError, httpx.HTTPError) as e:
            logger.error(
                "community_ranking_fetch_failed",
                list_id=list_id,
                category_id=category_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None
        except Exception as e:
            logger.exception(
                "community_ranking_fetch_failed",
                list_id=list_id,
                category_id=category_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None
        finally:
            self._inflight.pop(key, None)

        self._store(key, ranking)
        logger.info(
            "community_ranking_fetched",
            list_id=list_id,
            category_id=category_id,
            items=len(ranking.items),
            overall_consensus=ranking.overall_consensus,
        )
        return ranking

    async def get_community_ranking(
        self,
        list_id: str,
        category_id: str,
        force_refresh: bool = False,
    ) -> CommunityRanking | None:
        """
        Cache-first read of a community ranking.

        Returns None when the fetch fails: "temporarily unavailable", not
        "no data". A forced refresh joins a fetch already in flight.
        """
        key = cache_key(list_id, category_id)
        if not force_refresh:
            entry = self._cache.get(key)
            if entry is not None and self._clock() < entry.expires_at:
                logger.debug("community_ranking_cache_hit", list_id=list_id, category_id=category_id)
                return copy.deepcopy(entry.ranking)

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._fetch(key, list_id, category_id))
            self._inflight[key] = task
        else:
            logger.debug("community_ranking_fetch_joined", list_id=list_id, category_id=category_id)

        ranking = await asyncio.shield(task)
        return copy.deepcopy(ranking) if ranking is not None else None

    async def submit_ranking(self, list_id: str, user_id: str, positions: Mapping[str, int]) -> bool:
        """Submit a user's item_id -> position map. Never raises on I/O failure."""
        try:
            accepted = await self._api.post_ranking(list_id, user_id, positions)
        except (ConsensusError, httpx.HTTPError) as e:
            logger.error(
                "ranking_submit_failed",
                list_id=list_id,
                user_id=user_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False
        except Exception as e:
            logger.exception(
                "ranking_submit_failed",
                list_id=list_id,
                user_id=user_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False
        logger.info("ranking_submitted", list_id=list_id, user_id=user_id, accepted=accepted, items=len(positions))
        return accepted

    def compare_user_to_community(
        self,
        user_id: str,
        list_id: str,
        user_positions: Mapping[str, int],
        community: CommunityRanking,
    ) -> UserVsCommunityComparison:
        return compare_user_to_community(user_id, list_id, user_positions, community, self._config)

    def ingest_samples(
        self,
        list_id: str,
        category_id: str,
        samples: Iterable[RawRankingSample],
        list_size: int,
        item_names: dict[str, str] | None = None,
    ) -> CommunityRanking:
        """
        Aggregate raw samples locally and cache the result with a fresh expiry.

        Only each user's latest submission counts. Also records one trend
        point per item.
        """
        now_ms = int(self._clock() * 1000)
        latest = collapse_resubmissions(samples)
        items = aggregate_rankings(
            latest, list_size, now_ms=now_ms, item_names=item_names, config=self._config
        )
        ranking = create_community_ranking(
            list_id, category_id, items, now_ms=now_ms, config=self._config
        )
        self._store(cache_key(list_id, category_id), ranking)
        logger.info(
            "community_ranking_aggregated",
            list_id=list_id,
            category_id=category_id,
            samples=len(latest),
            items=len(items),
        )
        return copy.deepcopy(ranking)

    def trend_history(self, list_id: str, category_id: str) -> TrendHistory:
        key = cache_key(list_id, category_id)
        history = self._histories.get(key)
        if history is None:
            history = TrendHistory(self._config)
            self._histories[key] = history
        return history

    def get_trends(self, list_id: str, category_id: str) -> dict[str, ConsensusTrend]:
        history = self._histories.get(cache_key(list_id, category_id))
        return history.trends() if history is not None else {}

    def invalidate(self, list_id: str, category_id: str) -> bool:
        return self._cache.pop(cache_key(list_id, category_id), None) is not None

    def clear_cache(self) -> None:
        """Evict every cached ranking (logout, list switch). Trend history is kept."""
        count = len(self._cache)
        self._cache.clear()
        logger.debug("community_ranking_cache_cleared", evicted=count)

    async def aclose(self) -> None:
        await self._api.aclose()


def create_consensus_service(settings: Settings | None = None) -> ConsensusDataService:
    """Composition-root factory: httpx client and TTL from settings."""
    cfg = settings or get_settings()
    client = HttpConsensusAPIClient.from_settings(cfg)
    return ConsensusDataService(client, ttl_sec=cfg.cache_ttl_sec)
