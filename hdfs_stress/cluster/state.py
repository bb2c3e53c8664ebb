"""
Cluster state observer.

Reads collection layout through the Collections API (LIST and
CLUSTERSTATUS) of the admin node. ZooKeeper is never contacted directly.
"""

import asyncio
import time
from logging import Logger

from hdfs_stress.config import Settings
from hdfs_stress.errors import ConvergenceTimeout
from hdfs_stress.solr.client import AsyncSolrClient
from hdfs_stress.solr.types import CollectionStatus, ReplicaStatus


class ClusterStateReader:
    """
    Observer of published cluster state.

    Every call reads fresh state from the admin node.
    """

    def __init__(self, admin_client: AsyncSolrClient, settings: Settings, logger: Logger) -> None:
        self._client = admin_client
        self._logger = logger
        self._poll_interval_s = settings.poll_interval_ms / 1000

    async def has_collection(self, name: str) -> bool:
        return name in await self._client.list_collections()

    async def collection_status(self, name: str) -> CollectionStatus | None:
        return await self._client.cluster_status(name)

    async def force_refresh(self, name: str) -> CollectionStatus | None:
        """Re-read ``name`` from the cluster and log its shard count."""
        status = await self._client.cluster_status(name)
        self._logger.debug(
            "Refreshed state of %s: %d shards",
            name,
            len(status.shards) if status else 0,
        )
        return status

    async def get_leader(self, name: str, shard_id: str, timeout_ms: int) -> ReplicaStatus:
        """
        Wait until ``shard_id`` of ``name`` has an active leader on a live node.

        Raises:
            ConvergenceTimeout: No leader within ``timeout_ms``
        """
        timeout_s = timeout_ms / 1000
        deadline = time.monotonic() + timeout_s
        while True:
            status = await self._client.cluster_status(name)
            leader = status.active_leader(shard_id) if status else None
            if leader is not None:
                return leader
            if time.monotonic() >= deadline:
                raise ConvergenceTimeout(f"leader of {name}/{shard_id}", timeout_s)
            await asyncio.sleep(self._poll_interval_s)
