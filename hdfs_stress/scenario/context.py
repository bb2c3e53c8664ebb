"""
Cluster context handed to the orchestrator.

Built once by whoever owns the cluster lifecycle (the runner, or a test
fixture) and closed by the same owner after the scenario.
"""

import random
from dataclasses import dataclass, field
from logging import Logger

from hdfs_stress.chaos.nodes import ClusterNode, NodeController, build_node_controller
from hdfs_stress.cluster.lifecycle import ClusterLifecycleDriver
from hdfs_stress.cluster.state import ClusterStateReader
from hdfs_stress.config import Settings
from hdfs_stress.hdfs.controller import HdfsController
from hdfs_stress.solr.client import AsyncSolrClient


@dataclass
class ClusterContext:
    settings: Settings
    nodes: list[ClusterNode]
    admin_client: AsyncSolrClient
    node_clients: dict[str, AsyncSolrClient]
    state: ClusterStateReader
    lifecycle: ClusterLifecycleDriver
    storage: HdfsController
    node_controller: NodeController
    rng: random.Random = field(default_factory=random.Random)

    def client_for(self, node: ClusterNode) -> AsyncSolrClient:
        return self.node_clients[node.name]

    async def close(self) -> None:
        """Close every HTTP client owned by the context."""
        await self.admin_client.close()
        for client in self.node_clients.values():
            await client.close()


def build_context(
    settings: Settings,
    logger: Logger,
    *,
    rng: random.Random | None = None,
    node_controller: NodeController | None = None,
    storage: HdfsController | None = None,
) -> ClusterContext:
    """
    Wire clients and controllers from settings.

    ``node_controller`` and ``storage`` can be injected to replace the
    subprocess-backed defaults.
    """
    nodes = [
        ClusterNode(name=name, base_url=url)
        for name, url in zip(settings.node_process_names, settings.solr_node_urls, strict=True)
    ]
    admin_client = AsyncSolrClient(settings.admin_url, settings, logger)
    state = ClusterStateReader(admin_client, settings, logger)

    return ClusterContext(
        settings=settings,
        nodes=nodes,
        admin_client=admin_client,
        node_clients={
            node.name: AsyncSolrClient(node.base_url, settings, logger) for node in nodes
        },
        state=state,
        lifecycle=ClusterLifecycleDriver(admin_client, state, settings, logger),
        storage=storage or HdfsController(settings, logger),
        node_controller=node_controller or build_node_controller(settings, logger),
        rng=rng or random.Random(settings.seed),
    )
