"""
Tests for randomized collection topologies.
"""

import random

import pytest

from hdfs_stress.config import Settings
from hdfs_stress.scenario.topology import (
    NIGHTLY_BASE_SHARD_COUNT,
    Topology,
    TopologyPlanner,
    choose_base_shard_count,
    plan_topology,
)
from tests.fixtures.stub_random import StubRandom


class TestPlanTopology:
    @pytest.mark.parametrize("base,shards", [(1, 2), (2, 4), (7, 14)])
    def test_oversharded(self, base: int, shards: int) -> None:
        topology = plan_topology(base, oversharded=True)

        assert topology == Topology(
            num_shards=shards, replication_factor=1, max_shards_per_node=8, oversharded=True
        )

    @pytest.mark.parametrize("base,shards", [(1, 1), (2, 1), (3, 1), (7, 3)])
    def test_undersharded(self, base: int, shards: int) -> None:
        topology = plan_topology(base, oversharded=False)

        assert topology.num_shards == shards
        assert topology.replication_factor == 2
        assert topology.max_shards_per_node == 1

    def test_shard_ids(self) -> None:
        assert plan_topology(2, oversharded=True).shard_ids == [
            "shard1",
            "shard2",
            "shard3",
            "shard4",
        ]

    def test_str(self) -> None:
        assert str(plan_topology(1, oversharded=False)) == (
            "undersharded(shards=1, replicationFactor=2, maxShardsPerNode=1)"
        )


class TestBaseShardCount:
    def test_explicit_count_wins(self, settings: Settings) -> None:
        settings = settings.model_copy(update={"shard_count": 5, "nightly": True})
        assert choose_base_shard_count(settings, random.Random(0)) == 5

    def test_nightly(self, settings: Settings) -> None:
        settings = settings.model_copy(update={"nightly": True})
        assert choose_base_shard_count(settings, random.Random(0)) == NIGHTLY_BASE_SHARD_COUNT

    def test_random_one_or_two(self, settings: Settings) -> None:
        rng = random.Random(99)
        counts = {choose_base_shard_count(settings, rng) for _ in range(50)}
        assert counts == {1, 2}


class TestTopologyPlanner:
    def test_rejects_zero_base(self) -> None:
        with pytest.raises(ValueError):
            TopologyPlanner(0, random.Random(0))

    def test_profile_follows_draw(self) -> None:
        assert TopologyPlanner(2, StubRandom(0.1)).next_topology().oversharded is True
        assert TopologyPlanner(2, StubRandom(0.9)).next_topology().oversharded is False

    def test_same_seed_same_sequence(self) -> None:
        first = TopologyPlanner(2, random.Random(7))
        second = TopologyPlanner(2, random.Random(7))

        assert [first.next_topology() for _ in range(10)] == [
            second.next_topology() for _ in range(10)
        ]
