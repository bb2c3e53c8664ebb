"""
Randomized collection topologies.

Each cycle is either oversharded (many single-replica shards packed densely
onto nodes) or undersharded (few shards, two replicas each, one replica per
node).
"""

import random
from dataclasses import dataclass

from hdfs_stress.config import Settings

OVERSHARD_FACTOR = 2
OVERSHARD_MAX_SHARDS_PER_NODE = 8
UNDERSHARD_REPLICATION_FACTOR = 2
NIGHTLY_BASE_SHARD_COUNT = 7


@dataclass(frozen=True)
class Topology:
    num_shards: int
    replication_factor: int
    max_shards_per_node: int
    oversharded: bool

    @property
    def shard_ids(self) -> list[str]:
        return [f"shard{i}" for i in range(1, self.num_shards + 1)]

    def __str__(self) -> str:
        profile = "oversharded" if self.oversharded else "undersharded"
        return (
            f"{profile}(shards={self.num_shards}, replicationFactor={self.replication_factor}, "
            f"maxShardsPerNode={self.max_shards_per_node})"
        )


def plan_topology(base_shard_count: int, oversharded: bool) -> Topology:
    """Topology for one cycle given the base shard count and the profile."""
    if oversharded:
        return Topology(
            num_shards=base_shard_count * OVERSHARD_FACTOR,
            replication_factor=1,
            max_shards_per_node=OVERSHARD_MAX_SHARDS_PER_NODE,
            oversharded=True,
        )
    return Topology(
        num_shards=max(base_shard_count // 2, 1),
        replication_factor=UNDERSHARD_REPLICATION_FACTOR,
        max_shards_per_node=1,
        oversharded=False,
    )


def choose_base_shard_count(settings: Settings, rng: random.Random) -> int:
    if settings.shard_count is not None:
        return settings.shard_count
    if settings.nightly:
        return NIGHTLY_BASE_SHARD_COUNT
    return rng.randint(1, 2)


class TopologyPlanner:
    """Draws the profile for each cycle from the scenario's random source."""

    def __init__(self, base_shard_count: int, rng: random.Random) -> None:
        if base_shard_count < 1:
            raise ValueError(f"base_shard_count must be >= 1, got {base_shard_count}")
        self._base_shard_count = base_shard_count
        self._rng = rng

    @property
    def base_shard_count(self) -> int:
        return self._base_shard_count

    def next_topology(self) -> Topology:
        return plan_topology(self._base_shard_count, oversharded=self._rng.random() < 0.5)
