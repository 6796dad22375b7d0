"""
Tests for ConsensusDataService: TTL cache, copy-on-read, failure handling,
in-flight de-duplication, local aggregation and trends.

Async methods are driven with asyncio.run inside synchronous tests.
"""

from __future__ import annotations

import asyncio

import httpx
import pytest

from ranking_consensus.analysis_engine.models import RawRankingSample
from ranking_consensus.config.settings import Settings
from ranking_consensus.api_client.client import HttpConsensusAPIClient
from ranking_consensus.consensus_service.data_service import (
    ConsensusDataService,
    cache_key,
    create_consensus_service,
)
from ranking_consensus.trend_analysis.models import TrendDirection
from tests.conftest import FakeAPIClient


def test_cache_key_format():
    assert cache_key("top-games", "rpg") == "top-games-rpg"


def test_second_read_within_ttl_fetches_once(api_client, clock):
    """Two reads inside the TTL window hit the collaborator exactly once."""
    service = ConsensusDataService(api_client, clock=clock)

    async def run():
        first = await service.get_community_ranking("top-games", "default")
        clock.advance(59)
        second = await service.get_community_ranking("top-games", "default")
        return first, second

    first, second = asyncio.run(run())
    assert len(api_client.fetch_calls) == 1
    assert first is not None and second is not None
    assert first.to_dict() == second.to_dict()


def test_expired_entry_refetched(api_client, clock):
    service = ConsensusDataService(api_client, clock=clock)

    async def run():
        await service.get_community_ranking("top-games", "default")
        clock.advance(60)
        await service.get_community_ranking("top-games", "default")

    asyncio.run(run())
    assert len(api_client.fetch_calls) == 2


def test_force_refresh_bypasses_cache(api_client, clock):
    service = ConsensusDataService(api_client, clock=clock)

    async def run():
        await service.get_community_ranking("top-games", "default")
        await service.get_community_ranking("top-games", "default", force_refresh=True)

    asyncio.run(run())
    assert len(api_client.fetch_calls) == 2


def test_custom_ttl(api_client, clock):
    service = ConsensusDataService(api_client, clock=clock, ttl_sec=5)
    assert service.ttl_sec == 5

    async def run():
        await service.get_community_ranking("top-games", "default")
        clock.advance(6)
        await service.get_community_ranking("top-games", "default")

    asyncio.run(run())
    assert len(api_client.fetch_calls) == 2


def test_reads_are_copies(api_client, clock):
    """Mutating a returned snapshot does not touch the cached one."""
    service = ConsensusDataService(api_client, clock=clock)

    async def run():
        first = await service.get_community_ranking("top-games", "default")
        first.items.clear()
        first.overall_consensus = -1
        return await service.get_community_ranking("top-games", "default")

    second = asyncio.run(run())
    assert len(second.items) == 3
    assert second.overall_consensus != -1


def test_fetch_failure_returns_none(clock):
    api = FakeAPIClient()
    service = ConsensusDataService(api, clock=clock)
    assert asyncio.run(service.get_community_ranking("missing", "default")) is None
    assert len(service) == 0


def test_failure_not_cached(api_client, clock):
    """A failed fetch is retried on the next read."""
    service = ConsensusDataService(api_client, clock=clock)
    api_client.fail = True

    async def run():
        failed = await service.get_community_ranking("top-games", "default")
        api_client.fail = False
        ok = await service.get_community_ranking("top-games", "default")
        return failed, ok

    failed, ok = asyncio.run(run())
    assert failed is None
    assert ok is not None
    assert len(api_client.fetch_calls) == 2


def test_concurrent_misses_share_one_fetch(api_client, clock):
    service = ConsensusDataService(api_client, clock=clock)

    async def run():
        return await asyncio.gather(
            service.get_community_ranking("top-games", "default"),
            service.get_community_ranking("top-games", "default"),
            service.get_community_ranking("top-games", "default"),
        )

    results = asyncio.run(run())
    assert len(api_client.fetch_calls) == 1
    assert all(r is not None for r in results)
    assert results[0] is not results[1]


def test_clear_cache_and_invalidate(api_client, clock):
    service = ConsensusDataService(api_client, clock=clock)

    async def run():
        await service.get_community_ranking("top-games", "default")
        assert service.invalidate("top-games", "default") is True
        assert service.invalidate("top-games", "default") is False
        await service.get_community_ranking("top-games", "default")
        service.clear_cache()
        assert len(service) == 0
        await service.get_community_ranking("top-games", "default")

    asyncio.run(run())
    assert len(api_client.fetch_calls) == 3


def test_submit_ranking(api_client, clock):
    service = ConsensusDataService(api_client, clock=clock)
    assert asyncio.run(service.submit_ranking("top-games", "u1", {"zelda": 0, "halo": 1})) is True
    assert api_client.post_calls == [("top-games", "u1", {"zelda": 0, "halo": 1})]


def test_submit_ranking_failure_returns_false(api_client, clock):
    service = ConsensusDataService(api_client, clock=clock)
    api_client.fail = True
    assert asyncio.run(service.submit_ranking("top-games", "u1", {"zelda": 0})) is False
    api_client.fail = False
    api_client.accept = False
    assert asyncio.run(service.submit_ranking("top-games", "u1", {"zelda": 0})) is False


def test_ingest_samples_caches_and_collapses(clock):
    api = FakeAPIClient()
    service = ConsensusDataService(api, clock=clock)
    samples = [
        RawRankingSample("u1", "a", 9, 1),
        RawRankingSample("u1", "a", 0, 2),
        RawRankingSample("u2", "a", 0, 1),
        RawRankingSample("u3", "a", 1, 1),
    ]
    ranking = service.ingest_samples("l1", "default", samples, list_size=10)
    assert ranking.items[0].sample_size == 3
    assert ranking.items[0].consensus_score == 97
    assert ranking.last_updated == int(clock() * 1000)

    cached = asyncio.run(service.get_community_ranking("l1", "default"))
    assert cached.items[0].consensus_score == 97
    assert api.fetch_calls == []


def test_trends_accumulate_across_cycles(clock):
    service = ConsensusDataService(FakeAPIClient(), clock=clock)
    for hour, pos in enumerate([10, 9, 8, 7, 6]):
        samples = [RawRankingSample("u1", "a", pos, hour), RawRankingSample("u2", "a", pos, hour)]
        service.ingest_samples("l1", "default", samples, list_size=20)
        clock.advance(3600)
    trends = service.get_trends("l1", "default")
    assert trends["a"].trend_direction == TrendDirection.RISING
    assert trends["a"].velocity_per_hour == -1.0
    assert len(trends["a"].history) == 5
    assert service.get_trends("other", "default") == {}


def test_compare_user_delegates(api_client, clock, community):
    service = ConsensusDataService(api_client, clock=clock)
    result = service.compare_user_to_community("u1", "top-games", {"zelda": 1}, community)
    assert result.agreement_score > 0


def test_aclose_closes_client(api_client, clock):
    async def run():
        async with ConsensusDataService(api_client, clock=clock) as service:
            await service.get_community_ranking("top-games", "default")

    asyncio.run(run())
    assert api_client.closed is True


def test_create_consensus_service_from_settings():
    settings = Settings(api_base_url="http://api.test", http_timeout_sec=2.0, cache_ttl_sec=30.0)
    service = create_consensus_service(settings)
    assert service.ttl_sec == 30.0
    assert isinstance(service._api, HttpConsensusAPIClient)
    asyncio.run(service.aclose())


def _http_service(handler, clock) -> ConsensusDataService:
    client = HttpConsensusAPIClient("http://api.test", transport=httpx.MockTransport(handler))
    return ConsensusDataService(client, clock=clock)


@pytest.mark.parametrize("error", [asyncio.TimeoutError(), OSError("connection reset"), RuntimeError("boom")])
def test_unexpected_fetch_error_returns_none(api_client, clock, error):
    """Any collaborator failure reads as unavailable and leaves nothing in flight."""
    service = ConsensusDataService(api_client, clock=clock)
    api_client.error = error

    async def run():
        failed = await service.get_community_ranking("top-games", "default")
        api_client.error = None
        ok = await service.get_community_ranking("top-games", "default")
        return failed, ok

    failed, ok = asyncio.run(run())
    assert failed is None
    assert ok is not None
    assert len(api_client.fetch_calls) == 2


@pytest.mark.parametrize("error", [asyncio.TimeoutError(), ValueError("bad body")])
def test_unexpected_submit_error_returns_false(api_client, clock, error):
    service = ConsensusDataService(api_client, clock=clock)
    api_client.error = error
    assert asyncio.run(service.submit_ranking("top-games", "u1", {"zelda": 0})) is False


def test_submit_negative_position_returns_false(clock):
    """An invalid submission is rejected before any request goes out."""
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(201)

    service = _http_service(handler, clock)
    assert asyncio.run(service.submit_ranking("top-games", "u1", {"zelda": -1})) is False
    assert requests == []


@pytest.mark.parametrize("rank_distribution", [[[1]], [5], [[1, 2, 3]]])
def test_malformed_rank_distribution_returns_none(clock, rank_distribution):
    body = {
        "listId": "top-games",
        "categoryId": "default",
        "items": [
            {
                "itemId": "zelda",
                "averagePosition": 1.0,
                "medianPosition": 1.0,
                "modePosition": 1,
                "positionStandardDeviation": 0.0,
                "positionVariance": 0.0,
                "rankDistribution": rank_distribution,
                "consensusLevel": "unanimous",
                "consensusScore": 100,
                "controversyScore": 0,
                "sampleSize": 1,
                "lastUpdated": 1_700_000_000_000,
            }
        ],
        "overallConsensus": 100,
        "mostControversial": [],
        "mostAgreed": [],
        "totalRankings": 1,
        "lastUpdated": 1_700_000_000_000,
    }
    service = _http_service(lambda request: httpx.Response(200, json=body), clock)
    assert asyncio.run(service.get_community_ranking("top-games", "default")) is None
    assert len(service) == 0
