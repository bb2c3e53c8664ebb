"""
Pydantic models for Solr API responses.

Only the fields the harness reads are modelled; everything else in the
Solr payloads is ignored.
"""

from collections.abc import Iterator
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ReplicaState(str, Enum):
    """Replica states published in cluster state."""

    ACTIVE = "active"
    RECOVERING = "recovering"
    DOWN = "down"
    RECOVERY_FAILED = "recovery_failed"


class CommitVariant(str, Enum):
    """Commit flavours the indexing agent chooses between."""

    HARD = "hard"
    SOFT_WAIT = "soft_wait"

    @property
    def params(self) -> dict[str, str]:
        """Update request parameters for this variant."""
        if self is CommitVariant.HARD:
            return {"commit": "true"}
        return {
            "commit": "true",
            "softCommit": "true",
            "waitFlush": "true",
            "waitSearcher": "true",
        }


class ReplicaStatus(BaseModel):
    """One replica entry of a shard in CLUSTERSTATUS."""

    name: str
    core: str
    node_name: str
    base_url: str | None = None
    state: ReplicaState = ReplicaState.DOWN
    leader: bool = False
    type: str | None = None


class ShardStatus(BaseModel):
    """One shard of a collection in CLUSTERSTATUS."""

    name: str
    state: str = "active"
    replicas: dict[str, ReplicaStatus] = Field(default_factory=dict)

    @property
    def leader(self) -> ReplicaStatus | None:
        """Replica flagged as leader, if any."""
        for replica in self.replicas.values():
            if replica.leader:
                return replica
        return None


class CollectionStatus(BaseModel):
    """
    Snapshot of one collection's layout.

    ``live_nodes`` comes from the cluster section of the same response so
    that replica liveness can be judged against a consistent view.
    """

    name: str
    shards: dict[str, ShardStatus] = Field(default_factory=dict)
    live_nodes: list[str] = Field(default_factory=list)

    def iter_replicas(self) -> Iterator[tuple[ShardStatus, ReplicaStatus]]:
        for shard in self.shards.values():
            for replica in shard.replicas.values():
                yield shard, replica

    def is_live(self, replica: ReplicaStatus) -> bool:
        """Whether the node hosting the replica is in live_nodes."""
        return replica.node_name in self.live_nodes

    def effective_state(self, replica: ReplicaStatus) -> ReplicaState:
        """Published state, demoted to DOWN when the hosting node is not live."""
        if not self.is_live(replica):
            return ReplicaState.DOWN
        return replica.state

    def active_leader(self, shard_id: str) -> ReplicaStatus | None:
        """Leader of ``shard_id`` if it is active on a live node."""
        shard = self.shards.get(shard_id)
        if shard is None:
            return None
        leader = shard.leader
        if leader is None or self.effective_state(leader) != ReplicaState.ACTIVE:
            return None
        return leader


def parse_cluster_status(name: str, payload: dict[str, Any]) -> CollectionStatus | None:
    """
    Build a CollectionStatus from a CLUSTERSTATUS response.

    Returns None when the collection is not part of the response.
    """
    cluster = payload.get("cluster") or {}
    collection = (cluster.get("collections") or {}).get(name)
    if collection is None:
        return None

    shards: dict[str, ShardStatus] = {}
    for shard_name, shard_data in (collection.get("shards") or {}).items():
        replicas = {
            replica_name: ReplicaStatus.model_validate({**replica_data, "name": replica_name})
            for replica_name, replica_data in (shard_data.get("replicas") or {}).items()
        }
        shards[shard_name] = ShardStatus(
            name=shard_name,
            state=shard_data.get("state", "active"),
            replicas=replicas,
        )

    return CollectionStatus(
        name=name,
        shards=shards,
        live_nodes=list(cluster.get("live_nodes") or []),
    )


class CoreDirectories(BaseModel):
    """``core.directory`` section of /admin/system."""

    data: str
    index: str | None = None
    instance: str | None = None
    dirimpl: str | None = None


class CoreInfo(BaseModel):
    """``core`` section of /admin/system."""

    name: str | None = None
    directory: CoreDirectories


class SystemInfo(BaseModel):
    """Response of a core-level /admin/system request."""

    core: CoreInfo

    @property
    def data_dir(self) -> str:
        return self.core.directory.data


class QueryResponse(BaseModel):
    """``response`` section of a select request."""

    num_found: int = Field(..., alias="numFound")
    start: int = 0
    docs: list[dict[str, Any]] = Field(default_factory=list)

    class Config:
        populate_by_name = True
