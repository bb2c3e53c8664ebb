"""
Collection lifecycle driver.

Issues create/delete requests through the Collections API and polls the
published cluster state until the requested change is visible. Every wait
has a fixed deadline; exceeding it raises ConvergenceTimeout and nothing
here retries.
"""

import asyncio
import time
from dataclasses import dataclass, field
from logging import Logger

from hdfs_stress.cluster.state import ClusterStateReader
from hdfs_stress.config import Settings
from hdfs_stress.errors import ConvergenceTimeout, RecoveryFailedError
from hdfs_stress.solr.client import AsyncSolrClient
from hdfs_stress.solr.types import CollectionStatus, ReplicaState, ReplicaStatus

AUTO_SOFT_COMMIT_PROPERTY = "updateHandler.autoSoftCommit.maxTime"


@dataclass
class RecoveryProgress:
    """Replica states of one collection snapshot, grouped for the recovery wait."""

    total: int = 0
    active: int = 0
    recovering: list[str] = field(default_factory=list)
    down: list[str] = field(default_factory=list)
    failed: list[tuple[str, str]] = field(default_factory=list)
    shards_without_active: list[str] = field(default_factory=list)

    @classmethod
    def from_status(cls, status: CollectionStatus) -> "RecoveryProgress":
        progress = cls()
        for shard in status.shards.values():
            shard_active = False
            for replica in shard.replicas.values():
                progress.total += 1
                state = status.effective_state(replica)
                if state == ReplicaState.ACTIVE:
                    progress.active += 1
                    shard_active = True
                elif state == ReplicaState.RECOVERING:
                    progress.recovering.append(replica.name)
                elif state == ReplicaState.RECOVERY_FAILED:
                    progress.failed.append((shard.name, replica.name))
                else:
                    progress.down.append(replica.name)
            if not shard_active:
                progress.shards_without_active.append(shard.name)
        return progress

    def is_recovered(self, allow_failures: bool) -> bool:
        """
        Whether the snapshot counts as recovered.

        Strict: every replica active. With ``allow_failures``: every replica
        active or recovering and at least one active replica per shard.
        """
        if self.total == 0:
            return False
        if allow_failures:
            return not (self.failed or self.down or self.shards_without_active)
        return self.active == self.total

    def describe(self) -> str:
        return (
            f"{self.active}/{self.total} active, recovering={self.recovering}, "
            f"down={self.down}, failed={[r for _, r in self.failed]}"
        )


class ClusterLifecycleDriver:
    """Create/delete collections and wait for the cluster to converge."""

    def __init__(
        self,
        admin_client: AsyncSolrClient,
        state: ClusterStateReader,
        settings: Settings,
        logger: Logger,
    ) -> None:
        self._client = admin_client
        self._state = state
        self._settings = settings
        self._logger = logger
        self._poll_interval_s = settings.poll_interval_ms / 1000

    async def create_collection(
        self,
        name: str,
        num_shards: int,
        replication_factor: int,
        max_shards_per_node: int,
    ) -> None:
        """Ask the cluster to create ``name``. Does not wait for replicas."""
        params: dict[str, str | int] = {
            "name": name,
            "numShards": num_shards,
            "replicationFactor": replication_factor,
            "maxShardsPerNode": max_shards_per_node,
        }
        if self._settings.solr_config_name:
            params["collection.configName"] = self._settings.solr_config_name

        self._logger.info(
            "Creating collection %s: shards=%d replicationFactor=%d maxShardsPerNode=%d",
            name,
            num_shards,
            replication_factor,
            max_shards_per_node,
        )
        await self._client.collections_api("CREATE", **params)

    async def delete_collection(self, name: str) -> None:
        """Ask the cluster to delete ``name``. Returns once the request is accepted."""
        self._logger.info("Deleting collection %s", name)
        await self._client.collections_api("DELETE", name=name)

    async def enable_auto_soft_commit(self, name: str, max_time_ms: int) -> None:
        self._logger.info("Enabling auto soft commit on %s (maxTime=%dms)", name, max_time_ms)
        await self._client.set_config_property(
            AUTO_SOFT_COMMIT_PROPERTY, max_time_ms, collection=name
        )

    async def wait_for_recoveries(
        self,
        name: str,
        allow_failures: bool = False,
        timeout_s: float | None = None,
    ) -> CollectionStatus:
        """
        Wait until every replica of ``name`` has recovered.

        Args:
            name: Collection name
            allow_failures: Tolerate replicas in recovery_failed while waiting
                and accept recovering replicas once each shard has an active one
            timeout_s: Deadline, defaults to ``recovery_timeout_s``

        Returns:
            The snapshot that satisfied the wait

        Raises:
            RecoveryFailedError: A replica failed and ``allow_failures`` is False
            ConvergenceTimeout: Not recovered before the deadline
        """
        timeout_s = timeout_s if timeout_s is not None else self._settings.recovery_timeout_s
        deadline = time.monotonic() + timeout_s
        reported_failures: set[str] = set()

        while True:
            status = await self._state.collection_status(name)
            if status is not None:
                progress = RecoveryProgress.from_status(status)

                if progress.failed:
                    if not allow_failures:
                        shard, replica = progress.failed[0]
                        raise RecoveryFailedError(name, shard, replica)
                    for shard, replica in progress.failed:
                        if replica not in reported_failures:
                            reported_failures.add(replica)
                            self._logger.warning(
                                "Replica %s of %s/%s failed recovery, still waiting",
                                replica,
                                name,
                                shard,
                            )

                if progress.is_recovered(allow_failures):
                    self._logger.info("Collection %s recovered: %s", name, progress.describe())
                    return status

                self._logger.debug("Waiting for recoveries on %s: %s", name, progress.describe())

            if time.monotonic() >= deadline:
                raise ConvergenceTimeout(f"recoveries of {name}", timeout_s)
            await asyncio.sleep(self._poll_interval_s)

    async def wait_for_leader(
        self,
        name: str,
        shard_id: str,
        timeout_ms: int | None = None,
    ) -> ReplicaStatus:
        timeout_ms = timeout_ms if timeout_ms is not None else self._settings.leader_timeout_ms
        leader = await self._state.get_leader(name, shard_id, timeout_ms)
        self._logger.debug("Leader of %s/%s is %s on %s", name, shard_id, leader.core, leader.node_name)
        return leader

    async def wait_for_collection_absent(
        self,
        name: str,
        timeout_ms: int | None = None,
    ) -> None:
        """
        Poll until ``name`` is no longer listed by the cluster.

        Raises:
            ConvergenceTimeout: Still listed after ``timeout_ms``
        """
        timeout_ms = timeout_ms if timeout_ms is not None else self._settings.delete_timeout_ms
        timeout_s = timeout_ms / 1000
        deadline = time.monotonic() + timeout_s

        while await self._state.has_collection(name):
            if time.monotonic() >= deadline:
                raise ConvergenceTimeout(
                    f"removed collection {name} to leave cluster state", timeout_s
                )
            await asyncio.sleep(self._poll_interval_s)

        self._logger.info("Collection %s no longer in cluster state", name)
