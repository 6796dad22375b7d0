"""
Tests for user vs community comparison.
"""

from __future__ import annotations

from ranking_consensus.analysis_engine.comparison import compare_user_to_community
from tests.conftest import make_community, make_item


def test_identical_positions_full_agreement(community):
    """User matches every community average: agreement 100, no outliers."""
    positions = {i.item_id: int(i.average_position) for i in community.items}
    result = compare_user_to_community("u1", community.list_id, positions, community)
    assert result.agreement_score == 100
    assert result.outliers == []
    assert result.matching_positions == 3
    assert result.total_items == 3
    assert sorted(result.agreements) == ["doom", "halo", "zelda"]


def test_differences_sorted_and_signed(community):
    positions = {"zelda": 15, "halo": 10, "doom": 6}
    result = compare_user_to_community("u1", community.list_id, positions, community)
    assert [d.item_id for d in result.differences] == ["zelda", "halo", "doom"]
    assert result.differences[0].position_diff == 14
    assert result.differences[1].position_diff == -2
    assert result.outliers == ["zelda"]
    assert result.agreements == ["doom"]
    # |14| + |-2| + 0 = 16 over 3 * 50
    assert result.agreement_score == 89


def test_controversial_bucket_uses_level(community):
    positions = {"zelda": 1, "halo": 12, "doom": 6}
    result = compare_user_to_community("u1", community.list_id, positions, community)
    # halo is controversial (20); doom at 60 is moderate
    assert result.controversial == ["halo"]


def test_unranked_items_skipped(community):
    result = compare_user_to_community("u1", community.list_id, {"zelda": 1}, community)
    assert result.total_items == 1
    assert [d.item_id for d in result.differences] == ["zelda"]


def test_agreement_floor_at_zero():
    c = make_community([make_item("a", average_position=0.0)])
    result = compare_user_to_community("u1", c.list_id, {"a": 400}, c)
    assert result.agreement_score == 0


def test_empty_community_scores_zero():
    c = make_community([])
    result = compare_user_to_community("u1", c.list_id, {"a": 1}, c)
    assert result.agreement_score == 0
    assert result.total_items == 0


def test_user_positions_and_to_dict(community):
    positions = {"zelda": 2, "halo": 3}
    result = compare_user_to_community("u1", community.list_id, positions, community)
    assert result.user_positions() == positions
    data = result.to_dict()
    assert data["user_id"] == "u1"
    assert len(data["differences"]) == 2
